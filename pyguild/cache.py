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

from collections.abc import Mapping
import logging
import typing

if typing.TYPE_CHECKING:
    from collections.abc import Iterator

_L = logging.getLogger(__name__)

K = typing.TypeVar('K')
V = typing.TypeVar('V')


class BoundedCache(Mapping[K, V]):
    """A key to entity mapping with an optional capacity.

    When storing a new key would make the cache exceed :attr:`max_size`, the oldest
    inserted key is evicted first. Eviction follows insertion order, not access order:
    reading an entry never refreshes it.

    Replacing the value of a key that is already present keeps the key's original
    insertion slot.

    Iterating over the cache walks a snapshot of its keys, so the cache may be mutated
    while a consumer is iterating over it.

    Attributes
    ----------
    max_size: Optional[:class:`int`]
        The maximum amount of entries. ``None`` or ``0`` means unbounded.
    """

    __slots__ = ('_data', 'max_size')

    def __init__(self, max_size: typing.Optional[int] = None, /) -> None:
        if max_size is not None and max_size < 0:
            raise ValueError(f'max_size must be non-negative, not {max_size}')
        self._data: dict[K, V] = {}
        self.max_size: typing.Optional[int] = max_size or None

    def __repr__(self) -> str:
        return f'<BoundedCache size={len(self._data)} max_size={self.max_size}>'

    def __getitem__(self, key: K, /) -> V:
        return self._data[key]

    def __contains__(self, key: object, /) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    @property
    def is_bounded(self) -> bool:
        """:class:`bool`: Whether the cache has a capacity."""
        return self.max_size is not None

    def has(self, key: K, /) -> bool:
        """:class:`bool`: Whether the key is present."""
        return key in self._data

    def set(self, key: K, value: V, /) -> None:
        """Stores a value, evicting the oldest entries if the cache went over capacity.

        Parameters
        ----------
        key: K
            The key.
        value: V
            The value to store.
        """
        data = self._data
        data[key] = value

        max_size = self.max_size
        if max_size is None:
            return

        while len(data) > max_size:
            evicted = next(iter(data))
            del data[evicted]
            _L.debug('Evicted %r from cache (max size: %i)', evicted, max_size)

    def delete(self, key: K, /) -> typing.Optional[V]:
        """Removes a key.

        Returns
        -------
        Optional[V]
            The removed value, or ``None`` if the key was not present.
        """
        return self._data.pop(key, None)

    def clear(self) -> None:
        """Removes all entries."""
        self._data.clear()

    def values(self) -> list[V]:  # type: ignore[override]
        """List[V]: The values, oldest first."""
        return list(self._data.values())

    def items(self) -> list[tuple[K, V]]:  # type: ignore[override]
        """List[Tuple[K, V]]: The entries, oldest first."""
        return list(self._data.items())

    def keys(self) -> list[K]:  # type: ignore[override]
        """List[K]: The keys, oldest first."""
        return list(self._data)


__all__ = ('BoundedCache',)
