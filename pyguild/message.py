"""
The MIT License (MIT)

Copyright (c) 2024-present MCausc78

Permission is hereby granted, free of charge, to any person obtaining a
copy of this software and associated documentation files (the "Software"),
to deal in the Software without restriction, including without limitation
the rights to use, copy, modify, merge, publish, distribute, sublicense,
and/or sell copies of the Software, and to permit persons to whom the
Software is furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS
OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER
DEALINGS IN THE SOFTWARE.
"""

from __future__ import annotations

import typing

from attrs import define, field

from .base import Base
from .core import UNDEFINED, UndefinedOr, IDOr, resolve_id
from .enums import MessageType
from .manager import ListableManager

if typing.TYPE_CHECKING:
    from datetime import datetime

    from . import raw
    from .channel import Channel
    from .state import State
    from .user import User


@define(slots=True, frozen=True, eq=False)
class Message(Base):
    """Represents a chat message on Guilded."""

    channel: Channel = field(repr=False, kw_only=True, eq=False)
    """:class:`.Channel`: The channel the message was sent in."""

    type: MessageType = field(repr=False, kw_only=True)
    """:class:`.MessageType`: The message type."""

    server_id: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the server the message was sent in."""

    content: str = field(repr=True, kw_only=True)
    """:class:`str`: The message content."""

    embeds: list[raw.Embed] = field(repr=False, kw_only=True)
    """List[Dict[:class:`str`, Any]]: The message embeds."""

    reply_message_ids: list[str] = field(repr=False, kw_only=True)
    """List[:class:`str`]: The IDs of messages this message replies to."""

    private: bool = field(repr=False, kw_only=True)
    """:class:`bool`: Whether the message is visible only to mentioned users."""

    silent: bool = field(repr=False, kw_only=True)
    """:class:`bool`: Whether the message did not notify mentioned users."""

    mentions: typing.Optional[raw.Mentions] = field(repr=False, kw_only=True)
    """Optional[Dict[:class:`str`, Any]]: The raw mentions."""

    created_at: datetime = field(repr=False, kw_only=True)
    """:class:`~datetime.datetime`: When the message was created."""

    created_by: str = field(repr=True, kw_only=True)
    """:class:`str`: The ID of the user who created the message."""

    webhook_id: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the webhook that created the message."""

    updated_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the message was last edited."""

    @property
    def author(self) -> typing.Optional[User]:
        """Optional[:class:`.User`]: The message author, if cached."""
        return self.state.users.get(self.created_by)

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the message is cached."""
        return self.id in self.channel.messages.cache

    async def delete(self) -> None:
        """|coro|

        Deletes the message.
        """
        await self.channel.messages.delete(self.id)

    async def edit(
        self,
        *,
        content: UndefinedOr[str] = UNDEFINED,
        embeds: UndefinedOr[list[raw.Embed]] = UNDEFINED,
    ) -> Message:
        """|coro|

        Edits the message. The current snapshot is left untouched.

        Returns
        -------
        :class:`.Message`
            The newly updated message.
        """
        return await self.channel.messages.edit(self.id, content=content, embeds=embeds)

    async def reply(
        self,
        content: UndefinedOr[str] = UNDEFINED,
        *,
        embeds: UndefinedOr[list[raw.Embed]] = UNDEFINED,
        private: UndefinedOr[bool] = UNDEFINED,
        silent: UndefinedOr[bool] = UNDEFINED,
    ) -> Message:
        """|coro|

        Replies to the message.
        """
        return await self.channel.messages.create(
            content=content,
            embeds=embeds,
            reply_to=[self.id],
            private=private,
            silent=silent,
        )


class MessageManager(ListableManager[Message]):
    """Manages the messages of a channel.

    Attributes
    ----------
    channel: :class:`.Channel`
        The channel the messages belong to.
    """

    __slots__ = ('channel',)

    kind = 'message'

    def __init__(self, state: State, /) -> None:
        super().__init__(state)
        self.channel: Channel = None  # type: ignore # bound by parser

    async def _fetch(self, id: typing.Any, /) -> Message:
        payload = await self.state.http.get_message(self.channel.id, id)
        return self.state.parser.parse_message(payload, channel=self.channel)

    async def _fetch_many(
        self,
        *,
        before: typing.Optional[typing.Union[datetime, str]],
        limit: typing.Optional[int],
        after: typing.Optional[typing.Union[datetime, str]] = None,
        include_private: typing.Optional[bool] = None,
    ) -> list[Message]:
        payloads = await self.state.http.get_messages(
            self.channel.id,
            before=before,
            after=after,
            limit=limit,
            include_private=include_private,
        )
        parser = self.state.parser
        return [parser.parse_message(payload, channel=self.channel) for payload in payloads]

    async def create(
        self,
        *,
        content: UndefinedOr[str] = UNDEFINED,
        embeds: UndefinedOr[list[raw.Embed]] = UNDEFINED,
        reply_to: UndefinedOr[list[IDOr[Message]]] = UNDEFINED,
        private: UndefinedOr[bool] = UNDEFINED,
        silent: UndefinedOr[bool] = UNDEFINED,
        cache: typing.Optional[bool] = None,
    ) -> Message:
        """|coro|

        Sends a message to the channel.

        Parameters
        ----------
        content: UndefinedOr[:class:`str`]
            The message content.
        embeds: UndefinedOr[List[Dict[:class:`str`, Any]]]
            The message embeds.
        reply_to: UndefinedOr[List[IDOr[:class:`.Message`]]]
            The messages to reply to.
        private: UndefinedOr[:class:`bool`]
            Whether the message should be visible only to mentioned users.
        silent: UndefinedOr[:class:`bool`]
            Whether the message should not notify mentioned users.
        cache: Optional[:class:`bool`]
            Whether to cache the created message. Defaults to the client options.

        Returns
        -------
        :class:`.Message`
            The created message.
        """
        payload = await self.state.http.send_message(
            self.channel.id,
            content=content,
            embeds=embeds,
            reply_to=reply_to,
            is_private=private,
            is_silent=silent,
        )
        return self._add(self.state.parser.parse_message(payload, channel=self.channel), cache=cache)

    async def delete(self, message: IDOr[Message], /) -> None:
        """|coro|

        Deletes a message and evicts it from cache.
        """
        message_id = resolve_id(message)
        await self.state.http.delete_message(self.channel.id, message_id)
        self._remove(message_id)

    async def edit(
        self,
        message: IDOr[Message],
        /,
        *,
        content: UndefinedOr[str] = UNDEFINED,
        embeds: UndefinedOr[list[raw.Embed]] = UNDEFINED,
        cache: typing.Optional[bool] = None,
    ) -> Message:
        """|coro|

        Edits a message sent by the bot.

        Returns
        -------
        :class:`.Message`
            The newly updated message.
        """
        payload = await self.state.http.edit_message(self.channel.id, message, content=content, embeds=embeds)
        return self._add(self.state.parser.parse_message(payload, channel=self.channel), cache=cache)


__all__ = ('Message', 'MessageManager')
