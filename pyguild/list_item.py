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
class ListItem(Base):
    """Represents an item of a list channel."""

    channel: Channel = field(repr=False, kw_only=True, eq=False)
    """:class:`.Channel`: The channel the item is in."""

    server_id: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the server the item is in."""

    message: str = field(repr=True, kw_only=True)
    """:class:`str`: The item message."""

    note: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The content of the note attached to the item.

    Bulk retrieval returns notes without content, in which case this is ``None``.
    """

    parent_id: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the parent item."""

    created_at: datetime = field(repr=False, kw_only=True)
    """:class:`~datetime.datetime`: When the item was created."""

    created_by: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the user who created the item."""

    webhook_id: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the webhook that created the item."""

    updated_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the item was last edited."""

    updated_by: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the user who last edited the item."""

    completed_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the item was completed."""

    completed_by: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the user who completed the item."""

    @property
    def completed(self) -> bool:
        """:class:`bool`: Whether the item is completed."""
        return self.completed_at is not None

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the item is cached."""
        return self.id in self.channel.list_items.cache

    async def complete(self) -> None:
        """|coro|

        Marks the item as completed.
        """
        await self.channel.list_items.complete(self.id)

    async def delete(self) -> None:
        """|coro|

        Deletes the item.
        """
        await self.channel.list_items.delete(self.id)

    async def edit(
        self,
        *,
        message: typing.Optional[str] = None,
        note: UndefinedOr[str] = UNDEFINED,
    ) -> ListItem:
        """|coro|

        Edits the item. The message is kept from this snapshot when omitted.
        """
        return await self.channel.list_items.edit(
            self.id,
            message=self.message if message is None else message,
            note=note,
        )

    async def uncomplete(self) -> None:
        """|coro|

        Marks the item as not completed.
        """
        await self.channel.list_items.uncomplete(self.id)


class ListItemManager(ListableManager[ListItem]):
    """Manages the items of a list channel.

    Attributes
    ----------
    channel: :class:`.Channel`
        The channel the items belong to.
    """

    __slots__ = ('channel',)

    kind = 'list_item'

    def __init__(self, state: State, /) -> None:
        super().__init__(state)
        self.channel: Channel = None  # type: ignore # bound by parser

    async def _fetch(self, id: typing.Any, /) -> ListItem:
        payload = await self.state.http.get_list_item(self.channel.id, id)
        return self.state.parser.parse_list_item(payload, channel=self.channel)

    async def _fetch_many(
        self, *, before: typing.Optional[typing.Union[datetime, str]], limit: typing.Optional[int]
    ) -> list[ListItem]:
        # Guilded returns every item of a list at once
        payloads = await self.state.http.get_list_items(self.channel.id)
        parser = self.state.parser
        items = [parser.parse_list_item(payload, channel=self.channel) for payload in payloads]
        if limit is not None:
            items = items[:limit]
        return items

    async def complete(self, list_item: IDOr[ListItem], /) -> None:
        """|coro|

        Marks an item as completed. The cache is updated once Guilded confirms it over websocket.
        """
        await self.state.http.complete_list_item(self.channel.id, list_item)

    async def create(
        self, *, message: str, note: UndefinedOr[str] = UNDEFINED, cache: typing.Optional[bool] = None
    ) -> ListItem:
        """|coro|

        Creates a list item.

        Parameters
        ----------
        message: :class:`str`
            The item message.
        note: UndefinedOr[:class:`str`]
            The content of the note to attach.
        cache: Optional[:class:`bool`]
            Whether to cache the created item. Defaults to the client options.

        Returns
        -------
        :class:`.ListItem`
            The created item.
        """
        payload = await self.state.http.create_list_item(self.channel.id, message=message, note=note)
        return self._add(self.state.parser.parse_list_item(payload, channel=self.channel), cache=cache)

    async def delete(self, list_item: IDOr[ListItem], /) -> None:
        """|coro|

        Deletes an item and evicts it from cache.
        """
        list_item_id = resolve_id(list_item)
        await self.state.http.delete_list_item(self.channel.id, list_item_id)
        self._remove(list_item_id)

    async def edit(
        self,
        list_item: IDOr[ListItem],
        /,
        *,
        message: str,
        note: UndefinedOr[str] = UNDEFINED,
        cache: typing.Optional[bool] = None,
    ) -> ListItem:
        payload = await self.state.http.edit_list_item(self.channel.id, list_item, message=message, note=note)
        return self._add(self.state.parser.parse_list_item(payload, channel=self.channel), cache=cache)

    async def uncomplete(self, list_item: IDOr[ListItem], /) -> None:
        await self.state.http.uncomplete_list_item(self.channel.id, list_item)


__all__ = ('ListItem', 'ListItemManager')
