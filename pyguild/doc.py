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
from .core import IDOr, resolve_id
from .manager import ListableManager

if typing.TYPE_CHECKING:
    from datetime import datetime

    from .channel import Channel
    from .state import State


@define(slots=True, frozen=True, eq=False)
class Doc(Base):
    """Represents a doc in a docs channel. Doc IDs are integers."""

    channel: Channel = field(repr=False, kw_only=True, eq=False)
    """:class:`.Channel`: The channel the doc is in."""

    server_id: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the server the doc is in."""

    title: str = field(repr=True, kw_only=True)
    """:class:`str`: The doc title."""

    content: str = field(repr=False, kw_only=True)
    """:class:`str`: The doc content, in Markdown."""

    created_at: datetime = field(repr=False, kw_only=True)
    """:class:`~datetime.datetime`: When the doc was created."""

    created_by: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the user who created the doc."""

    updated_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the doc was last edited."""

    updated_by: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the user who last edited the doc."""

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the doc is cached."""
        return self.id in self.channel.docs.cache

    async def delete(self) -> None:
        """|coro|

        Deletes the doc.
        """
        await self.channel.docs.delete(self.id)

    async def edit(self, *, title: typing.Optional[str] = None, content: typing.Optional[str] = None) -> Doc:
        """|coro|

        Edits the doc. Omitted values are kept from this snapshot.

        Returns
        -------
        :class:`.Doc`
            The newly updated doc.
        """
        return await self.channel.docs.edit(
            self.id,
            title=self.title if title is None else title,
            content=self.content if content is None else content,
        )


class DocManager(ListableManager[Doc]):
    """Manages the docs of a docs channel.

    Attributes
    ----------
    channel: :class:`.Channel`
        The channel the docs belong to.
    """

    __slots__ = ('channel',)

    kind = 'doc'

    def __init__(self, state: State, /) -> None:
        super().__init__(state)
        self.channel: Channel = None  # type: ignore # bound by parser

    async def _fetch(self, id: typing.Any, /) -> Doc:
        payload = await self.state.http.get_doc(self.channel.id, id)
        return self.state.parser.parse_doc(payload, channel=self.channel)

    async def _fetch_many(
        self, *, before: typing.Optional[typing.Union[datetime, str]], limit: typing.Optional[int]
    ) -> list[Doc]:
        payloads = await self.state.http.get_docs(self.channel.id, before=before, limit=limit)
        parser = self.state.parser
        return [parser.parse_doc(payload, channel=self.channel) for payload in payloads]

    async def create(self, *, title: str, content: str, cache: typing.Optional[bool] = None) -> Doc:
        """|coro|

        Creates a doc.

        Parameters
        ----------
        title: :class:`str`
            The doc title.
        content: :class:`str`
            The doc content.
        cache: Optional[:class:`bool`]
            Whether to cache the created doc. Defaults to the client options.

        Returns
        -------
        :class:`.Doc`
            The created doc.
        """
        payload = await self.state.http.create_doc(self.channel.id, title=title, content=content)
        return self._add(self.state.parser.parse_doc(payload, channel=self.channel), cache=cache)

    async def delete(self, doc: IDOr[Doc], /) -> None:
        """|coro|

        Deletes a doc and evicts it from cache.
        """
        doc_id = resolve_id(doc)
        await self.state.http.delete_doc(self.channel.id, doc_id)
        self._remove(doc_id)

    async def edit(self, doc: IDOr[Doc], /, *, title: str, content: str, cache: typing.Optional[bool] = None) -> Doc:
        """|coro|

        Replaces the title and content of a doc.
        """
        payload = await self.state.http.edit_doc(self.channel.id, doc, title=title, content=content)
        return self._add(self.state.parser.parse_doc(payload, channel=self.channel), cache=cache)


__all__ = ('Doc', 'DocManager')
