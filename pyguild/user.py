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
from .enums import UserType
from .manager import BaseManager

if typing.TYPE_CHECKING:
    from datetime import datetime


@define(slots=True, frozen=True, eq=False)
class User(Base):
    """Represents a user on Guilded."""

    type: UserType = field(repr=True, kw_only=True)
    """:class:`.UserType`: The user's type."""

    name: str = field(repr=True, kw_only=True)
    """:class:`str`: The user's name."""

    avatar: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The URL of the user's avatar."""

    banner: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The URL of the user's banner."""

    created_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the user was created. Unavailable on user summaries."""

    @property
    def bot(self) -> bool:
        """:class:`bool`: Whether the user is a bot."""
        return self.type is UserType.bot

    @property
    def mention(self) -> str:
        """:class:`str`: The user mention."""
        return f'<@{self.id}>'

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the user is cached."""
        return self.id in self.state.users.cache


class UserManager(BaseManager[User]):
    """Manages the users the client has seen."""

    __slots__ = ()

    kind = 'user'

    async def _fetch(self, id: typing.Any, /) -> User:
        payload = await self.state.http.get_user(id)
        return self.state.parser.parse_user(payload)


__all__ = ('User', 'UserManager')
