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
from .enums import ChannelType
from .manager import BaseManager

if typing.TYPE_CHECKING:
    from datetime import datetime

    from . import raw
    from .doc import DocManager
    from .list_item import ListItemManager
    from .message import Message, MessageManager
    from .server import Server
    from .webhook import WebhookManager


@define(slots=True, frozen=True, eq=False)
class Channel(Base):
    """Represents a server channel on Guilded.

    Channels own the caches of their messages, docs, list items and webhooks. Those
    caches survive the channel being replaced with a newer snapshot.
    """

    type: ChannelType = field(repr=True, kw_only=True)
    """:class:`.ChannelType`: The channel type."""

    name: str = field(repr=True, kw_only=True)
    """:class:`str`: The channel name."""

    topic: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The channel topic."""

    server_id: str = field(repr=True, kw_only=True)
    """:class:`str`: The ID of the server the channel is in."""

    group_id: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the group the channel is in."""

    parent_id: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the parent channel, for threads."""

    category_id: typing.Optional[int] = field(repr=False, kw_only=True)
    """Optional[:class:`int`]: The ID of the category the channel is in."""

    public: bool = field(repr=False, kw_only=True)
    """:class:`bool`: Whether the channel can be accessed by users who are not members of the server."""

    created_at: datetime = field(repr=False, kw_only=True)
    """:class:`~datetime.datetime`: When the channel was created."""

    created_by: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the user who created the channel."""

    updated_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the channel was last edited."""

    archived_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the channel was archived."""

    archived_by: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the user who archived the channel."""

    messages: MessageManager = field(repr=False, kw_only=True, eq=False)
    """:class:`.MessageManager`: The channel messages."""

    docs: DocManager = field(repr=False, kw_only=True, eq=False)
    """:class:`.DocManager`: The channel docs."""

    list_items: ListItemManager = field(repr=False, kw_only=True, eq=False)
    """:class:`.ListItemManager`: The channel list items."""

    webhooks: WebhookManager = field(repr=False, kw_only=True, eq=False)
    """:class:`.WebhookManager`: The webhooks posting to the channel."""

    @property
    def server(self) -> typing.Optional[Server]:
        """Optional[:class:`.Server`]: The server the channel is in, if cached."""
        return self.state.servers.get(self.server_id)

    @property
    def archived(self) -> bool:
        """:class:`bool`: Whether the channel is archived."""
        return self.archived_at is not None

    @property
    def mention(self) -> str:
        """:class:`str`: The channel mention."""
        return f'<#{self.id}>'

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the channel is cached."""
        return self.id in self.state.channels.cache

    async def delete(self) -> None:
        """|coro|

        Deletes the channel.
        """
        await self.state.channels.delete(self.id)

    async def edit(
        self,
        *,
        name: UndefinedOr[str] = UNDEFINED,
        topic: UndefinedOr[str] = UNDEFINED,
        public: UndefinedOr[bool] = UNDEFINED,
    ) -> Channel:
        """|coro|

        Edits the channel. The current snapshot is left untouched.

        Returns
        -------
        :class:`.Channel`
            The newly updated channel.
        """
        return await self.state.channels.edit(self.id, name=name, topic=topic, public=public)

    async def fetch(self) -> Channel:
        """|coro|

        Retrieves the newest snapshot of this channel, bypassing cache.
        """
        return await self.state.channels.fetch_one(self.id, force=True)

    async def send(
        self,
        content: UndefinedOr[str] = UNDEFINED,
        *,
        embeds: UndefinedOr[list[raw.Embed]] = UNDEFINED,
        reply_to: UndefinedOr[list[IDOr[Message]]] = UNDEFINED,
        private: UndefinedOr[bool] = UNDEFINED,
        silent: UndefinedOr[bool] = UNDEFINED,
    ) -> Message:
        """|coro|

        Sends a message to the channel. Shortcut for :meth:`MessageManager.create`.
        """
        return await self.messages.create(
            content=content,
            embeds=embeds,
            reply_to=reply_to,
            private=private,
            silent=silent,
        )


class ChannelManager(BaseManager[Channel]):
    """Manages the channels the client has seen."""

    __slots__ = ()

    kind = 'channel'

    async def _fetch(self, id: typing.Any, /) -> Channel:
        payload = await self.state.http.get_channel(id)
        return self.state.parser.parse_channel(payload)

    async def create(
        self,
        *,
        name: str,
        type: ChannelType,
        topic: UndefinedOr[str] = UNDEFINED,
        public: UndefinedOr[bool] = UNDEFINED,
        server: UndefinedOr[IDOr[Server]] = UNDEFINED,
        group_id: UndefinedOr[str] = UNDEFINED,
        category_id: UndefinedOr[int] = UNDEFINED,
        cache: typing.Optional[bool] = None,
    ) -> Channel:
        """|coro|

        Creates a channel.

        Parameters
        ----------
        name: :class:`str`
            The channel name.
        type: :class:`.ChannelType`
            The channel type.
        topic: UndefinedOr[:class:`str`]
            The channel topic.
        public: UndefinedOr[:class:`bool`]
            Whether the channel should be public.
        server: UndefinedOr[IDOr[:class:`.Server`]]
            The server to create the channel in.
        group_id: UndefinedOr[:class:`str`]
            The group to create the channel in.
        category_id: UndefinedOr[:class:`int`]
            The category to create the channel in.
        cache: Optional[:class:`bool`]
            Whether to cache the created channel. Defaults to the client options.

        Returns
        -------
        :class:`.Channel`
            The created channel.
        """
        payload = await self.state.http.create_channel(
            name=name,
            type=type,
            topic=topic,
            is_public=public,
            server=server,
            group_id=group_id,
            category_id=category_id,
        )
        return self._add(self.state.parser.parse_channel(payload), cache=cache)

    async def delete(self, channel: IDOr[Channel], /) -> None:
        """|coro|

        Deletes a channel and evicts it from cache, together with its nested caches.
        """
        channel_id = resolve_id(channel)
        await self.state.http.delete_channel(channel_id)
        self._remove(channel_id)

    async def edit(
        self,
        channel: IDOr[Channel],
        /,
        *,
        name: UndefinedOr[str] = UNDEFINED,
        topic: UndefinedOr[str] = UNDEFINED,
        public: UndefinedOr[bool] = UNDEFINED,
        cache: typing.Optional[bool] = None,
    ) -> Channel:
        """|coro|

        Edits a channel.

        Returns
        -------
        :class:`.Channel`
            The newly updated channel.
        """
        payload = await self.state.http.edit_channel(channel, name=name, topic=topic, is_public=public)
        return self._add(self.state.parser.parse_channel(payload), cache=cache)


__all__ = ('Channel', 'ChannelManager')
