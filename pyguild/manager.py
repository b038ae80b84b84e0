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

from abc import ABC, abstractmethod
import logging
import typing

from .cache import BoundedCache
from .core import IDOr, resolve_id

if typing.TYPE_CHECKING:
    from datetime import datetime

    from .options import ResourceKind
    from .state import State

_L = logging.getLogger(__name__)

E = typing.TypeVar('E')


class BaseManager(ABC, typing.Generic[E]):
    """Owns the cache of one resource kind within one scope.

    Top-level managers (channels, servers, users) are scoped to the client; the rest are
    scoped to the channel or server their resources live in.

    Attributes
    ----------
    state: :class:`State`
        The state.
    cache: :class:`BoundedCache`
        The entities known to this manager, keyed by ID.
    """

    __slots__ = ('state', 'cache')

    kind: typing.ClassVar[ResourceKind]

    def __init__(self, state: State, /) -> None:
        self.state: State = state
        self.cache: BoundedCache[typing.Any, E] = BoundedCache(state.options.max_cache_for(self.kind))

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} cache={self.cache!r}>'

    def __len__(self) -> int:
        return len(self.cache)

    def __contains__(self, key: object, /) -> bool:
        return resolve_id(key) in self.cache  # type: ignore

    def get(self, id: IDOr[E], /) -> typing.Optional[E]:
        """Optional[E]: Retrieves an entity from cache, without touching network."""
        return self.cache.get(resolve_id(id))

    def should_cache(self, cache: typing.Optional[bool] = None, /) -> bool:
        """:class:`bool`: Resolves an explicit ``cache`` argument against the client options."""
        if cache is None:
            return self.state.options.should_cache(self.kind)
        return cache

    def _add(self, entity: E, /, *, cache: typing.Optional[bool] = None) -> E:
        if self.should_cache(cache):
            self.cache.set(entity.id, entity)  # type: ignore
        return entity

    def _remove(self, id: IDOr[E], /) -> typing.Optional[E]:
        return self.cache.delete(resolve_id(id))

    @abstractmethod
    async def _fetch(self, id: typing.Any, /) -> E: ...

    async def fetch_one(self, id: IDOr[E], /, *, force: bool = False, cache: typing.Optional[bool] = None) -> E:
        """|coro|

        Retrieves a single entity, from cache if present.

        Parameters
        ----------
        id: IDOr[E]
            The ID of the entity to retrieve.
        force: :class:`bool`
            Whether to skip cache and always request Guilded. Defaults to ``False``.
        cache: Optional[:class:`bool`]
            Whether to cache the retrieved entity. Defaults to the client options.

        Raises
        ------
        :class:`HTTPException`
            Guilded responded with an error.

        Returns
        -------
        E
            The entity.
        """
        resolved = resolve_id(id)
        if not force:
            entity = self.cache.get(resolved)
            if entity is not None:
                return entity

        _L.debug('%s cache miss for %r (force=%s)', self.__class__.__name__, resolved, force)
        entity = await self._fetch(resolved)
        return self._add(entity, cache=cache)

    async def fetch(self, id: IDOr[E], /, *, force: bool = False, cache: typing.Optional[bool] = None) -> E:
        """|coro|

        Shortcut for :meth:`fetch_one`.
        """
        return await self.fetch_one(id, force=force, cache=cache)


class ListableManager(BaseManager[E]):
    """A manager whose resources can be listed in bulk."""

    __slots__ = ()

    @abstractmethod
    async def _fetch_many(
        self, *, before: typing.Optional[typing.Union[datetime, str]], limit: typing.Optional[int], **query: typing.Any
    ) -> list[E]: ...

    async def fetch_many(
        self,
        *,
        before: typing.Optional[typing.Union[datetime, str]] = None,
        limit: typing.Optional[int] = None,
        cache: typing.Optional[bool] = None,
        **query: typing.Any,
    ) -> list[E]:
        """|coro|

        Retrieves entities in bulk, always over network.

        Parameters
        ----------
        before: Optional[Union[:class:`~datetime.datetime`, :class:`str`]]
            Only retrieve entities created before this timestamp, where supported.
        limit: Optional[:class:`int`]
            The maximum amount of entities to retrieve, where supported.
        cache: Optional[:class:`bool`]
            Whether to cache the retrieved entities. Defaults to the client options.
        \\*\\*query
            Resource specific filters.

        Returns
        -------
        List[E]
            The entities.
        """
        entities = await self._fetch_many(before=before, limit=limit, **query)
        if self.should_cache(cache):
            for entity in entities:
                self.cache.set(entity.id, entity)  # type: ignore
        return entities

    @typing.overload
    async def fetch(self, id: None = ..., /, *, cache: typing.Optional[bool] = ..., **options: typing.Any) -> list[E]: ...

    @typing.overload
    async def fetch(self, id: IDOr[E], /, *, cache: typing.Optional[bool] = ..., **options: typing.Any) -> E: ...

    async def fetch(
        self, id: typing.Optional[IDOr[E]] = None, /, *, cache: typing.Optional[bool] = None, **options: typing.Any
    ) -> typing.Union[E, list[E]]:
        """|coro|

        Shortcut for :meth:`fetch_one` when ``id`` is given, and :meth:`fetch_many` otherwise.
        """
        if id is None:
            return await self.fetch_many(cache=cache, **options)
        return await self.fetch_one(id, cache=cache, **options)


__all__ = ('BaseManager', 'ListableManager')
