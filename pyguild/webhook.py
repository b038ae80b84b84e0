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
from .manager import ListableManager

if typing.TYPE_CHECKING:
    from datetime import datetime

    from .channel import Channel
    from .state import State


@define(slots=True, frozen=True, eq=False)
class Webhook(Base):
    """Represents a webhook posting to a channel."""

    channel: Channel = field(repr=False, kw_only=True, eq=False)
    """:class:`.Channel`: The channel the webhook posts to."""

    server_id: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the server the webhook is in."""

    name: str = field(repr=True, kw_only=True)
    """:class:`str`: The webhook name."""

    avatar: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The URL of the webhook avatar."""

    created_at: datetime = field(repr=False, kw_only=True)
    """:class:`~datetime.datetime`: When the webhook was created."""

    created_by: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the user who created the webhook."""

    deleted_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the webhook was deleted."""

    token: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The webhook token. Only available to the creator."""

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the webhook is cached."""
        return self.id in self.channel.webhooks.cache

    async def delete(self) -> None:
        """|coro|

        Deletes the webhook.
        """
        await self.channel.webhooks.delete(self.id)

    async def edit(
        self, *, name: typing.Optional[str] = None, channel: UndefinedOr[IDOr[Channel]] = UNDEFINED
    ) -> Webhook:
        """|coro|

        Edits the webhook. Moving the webhook to another channel does not move it between caches
        until the newer snapshot arrives over websocket.
        """
        return await self.channel.webhooks.edit(
            self.id,
            name=self.name if name is None else name,
            channel=channel,
        )


class WebhookManager(ListableManager[Webhook]):
    """Manages the webhooks posting to a channel.

    Attributes
    ----------
    channel: :class:`.Channel`
        The channel the webhooks post to.
    """

    __slots__ = ('channel',)

    kind = 'webhook'

    def __init__(self, state: State, /) -> None:
        super().__init__(state)
        self.channel: Channel = None  # type: ignore # bound by parser

    async def _fetch(self, id: typing.Any, /) -> Webhook:
        payload = await self.state.http.get_webhook(self.channel.server_id, id)
        return self.state.parser.parse_webhook(payload, channel=self.channel)

    async def _fetch_many(
        self, *, before: typing.Optional[typing.Union[datetime, str]], limit: typing.Optional[int]
    ) -> list[Webhook]:
        payloads = await self.state.http.get_webhooks(self.channel.server_id, channel=self.channel.id)
        parser = self.state.parser
        return [parser.parse_webhook(payload, channel=self.channel) for payload in payloads]

    async def create(self, *, name: str, cache: typing.Optional[bool] = None) -> Webhook:
        """|coro|

        Creates a webhook posting to the channel.

        Parameters
        ----------
        name: :class:`str`
            The webhook name.
        cache: Optional[:class:`bool`]
            Whether to cache the created webhook. Defaults to the client options.

        Returns
        -------
        :class:`.Webhook`
            The created webhook.
        """
        payload = await self.state.http.create_webhook(self.channel.server_id, name=name, channel=self.channel.id)
        return self._add(self.state.parser.parse_webhook(payload, channel=self.channel), cache=cache)

    async def delete(self, webhook: IDOr[Webhook], /) -> None:
        """|coro|

        Deletes a webhook and evicts it from cache.
        """
        webhook_id = resolve_id(webhook)
        await self.state.http.delete_webhook(self.channel.server_id, webhook_id)
        self._remove(webhook_id)

    async def edit(
        self,
        webhook: IDOr[Webhook],
        /,
        *,
        name: str,
        channel: UndefinedOr[IDOr[Channel]] = UNDEFINED,
        cache: typing.Optional[bool] = None,
    ) -> Webhook:
        payload = await self.state.http.edit_webhook(self.channel.server_id, webhook, name=name, channel=channel)
        return self._add(self.state.parser.parse_webhook(payload, channel=self.channel), cache=cache)


__all__ = ('Webhook', 'WebhookManager')
