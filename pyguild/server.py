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

from attrs import define, evolve, field

from .base import Base
from .core import UNDEFINED, UndefinedOr, IDOr, resolve_id
from .manager import BaseManager, ListableManager

if typing.TYPE_CHECKING:
    from datetime import datetime

    from .channel import Channel
    from .state import State
    from .user import User


@define(slots=True, frozen=True, eq=False)
class Server(Base):
    """Represents a server on Guilded.

    Servers own the caches of their members and bans. Those caches survive the
    server being replaced with a newer snapshot.
    """

    owner_id: str = field(repr=True, kw_only=True)
    """:class:`str`: The user ID of the server owner."""

    type: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The server type, such as ``'community'`` or ``'team'``."""

    name: str = field(repr=True, kw_only=True)
    """:class:`str`: The server name."""

    url: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The server vanity URL."""

    about: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The server description."""

    avatar: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The URL of the server avatar."""

    banner: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The URL of the server banner."""

    timezone: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The server timezone."""

    verified: bool = field(repr=False, kw_only=True)
    """:class:`bool`: Whether the server is verified."""

    default_channel_id: typing.Optional[str] = field(repr=False, kw_only=True)
    """Optional[:class:`str`]: The ID of the default channel."""

    created_at: datetime = field(repr=False, kw_only=True)
    """:class:`~datetime.datetime`: When the server was created."""

    members: ServerMemberManager = field(repr=False, kw_only=True, eq=False)
    """:class:`.ServerMemberManager`: The server members."""

    bans: ServerBanManager = field(repr=False, kw_only=True, eq=False)
    """:class:`.ServerBanManager`: The server bans."""

    @property
    def owner(self) -> typing.Optional[Member]:
        """Optional[:class:`.Member`]: The server owner, if cached."""
        return self.members.get(self.owner_id)

    @property
    def default_channel(self) -> typing.Optional[Channel]:
        """Optional[:class:`.Channel`]: The default channel, if cached."""
        if self.default_channel_id is None:
            return None
        return self.state.channels.get(self.default_channel_id)

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the server is cached."""
        return self.id in self.state.servers.cache

    async def fetch(self) -> Server:
        """|coro|

        Retrieves the newest snapshot of this server, bypassing cache.
        """
        return await self.state.servers.fetch_one(self.id, force=True)


class ServerManager(BaseManager[Server]):
    """Manages the servers the client has seen. Servers can only be retrieved."""

    __slots__ = ()

    kind = 'server'

    async def _fetch(self, id: typing.Any, /) -> Server:
        payload = await self.state.http.get_server(id)
        return self.state.parser.parse_server(payload)


@define(slots=True, frozen=True, eq=False)
class Member(Base):
    """Represents a server member. The ID of a member is the ID of its user."""

    server: Server = field(repr=False, kw_only=True, eq=False)
    """:class:`.Server`: The server the member is in."""

    user: User = field(repr=True, kw_only=True)
    """:class:`.User`: The member's user."""

    role_ids: list[int] = field(repr=False, kw_only=True)
    """List[:class:`int`]: The IDs of roles the member has."""

    nickname: typing.Optional[str] = field(repr=True, kw_only=True)
    """Optional[:class:`str`]: The member's nickname."""

    joined_at: typing.Optional[datetime] = field(repr=False, kw_only=True)
    """Optional[:class:`~datetime.datetime`]: When the member joined. Unavailable on member summaries."""

    owner: bool = field(repr=False, kw_only=True)
    """:class:`bool`: Whether the member owns the server."""

    @property
    def display_name(self) -> str:
        """:class:`str`: The nickname if set, otherwise the user name."""
        return self.nickname or self.user.name

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the member is cached."""
        return self.id in self.server.members.cache

    async def ban(self, *, reason: UndefinedOr[str] = UNDEFINED) -> Ban:
        """|coro|

        Bans the member from the server.
        """
        return await self.server.bans.create(self.id, reason=reason)

    async def edit_nickname(self, nickname: typing.Optional[str], /) -> Member:
        """|coro|

        Changes or removes the member's nickname.
        """
        return await self.server.members.edit_nickname(self, nickname)

    async def kick(self) -> None:
        """|coro|

        Kicks the member from the server.
        """
        await self.server.members.kick(self.id)


class ServerMemberManager(ListableManager[Member]):
    """Manages the members of a server.

    Attributes
    ----------
    server: :class:`.Server`
        The server the members belong to.
    """

    __slots__ = ('server',)

    kind = 'server_member'

    def __init__(self, state: State, /) -> None:
        super().__init__(state)
        self.server: Server = None  # type: ignore # bound by parser

    async def _fetch(self, id: typing.Any, /) -> Member:
        payload = await self.state.http.get_member(self.server.id, id)
        return self.state.parser.parse_member(payload, server=self.server)

    async def _fetch_many(
        self, *, before: typing.Optional[typing.Union[datetime, str]], limit: typing.Optional[int]
    ) -> list[Member]:
        payloads = await self.state.http.get_members(self.server.id)
        parser = self.state.parser
        return [parser.parse_member(payload, server=self.server) for payload in payloads]

    async def edit_nickname(self, member: IDOr[Member], nickname: typing.Optional[str], /) -> Member:
        """|coro|

        Changes or removes a member's nickname.

        Parameters
        ----------
        member: IDOr[:class:`.Member`]
            The member.
        nickname: Optional[:class:`str`]
            The new nickname. ``None`` removes it.

        Returns
        -------
        :class:`.Member`
            The member with updated nickname.
        """
        member_id = resolve_id(member)
        http = self.state.http

        if nickname is None:
            await http.delete_nickname(self.server.id, member_id)
        else:
            nickname = await http.edit_nickname(self.server.id, member_id, nickname=nickname)

        current = self.cache.get(member_id)
        if current is None:
            current = member if isinstance(member, Member) else await self._fetch(member_id)
        updated = evolve(current, nickname=nickname)
        if member_id in self.cache:
            self.cache.set(member_id, updated)
        return updated

    async def kick(self, member: IDOr[Member], /) -> None:
        """|coro|

        Kicks a member and removes it from cache.
        """
        member_id = resolve_id(member)
        await self.state.http.kick(self.server.id, member_id)
        self._remove(member_id)


@define(slots=True, frozen=True, eq=False)
class Ban(Base):
    """Represents a server ban. The ID of a ban is the ID of the banned user."""

    server: Server = field(repr=False, kw_only=True, eq=False)
    """:class:`.Server`: The server the ban is in."""

    user: User = field(repr=True, kw_only=True)
    """:class:`.User`: The banned user."""

    reason: typing.Optional[str] = field(repr=True, kw_only=True)
    """Optional[:class:`str`]: The ban reason."""

    created_by: str = field(repr=False, kw_only=True)
    """:class:`str`: The ID of the user who created the ban."""

    created_at: datetime = field(repr=False, kw_only=True)
    """:class:`~datetime.datetime`: When the ban was created."""

    @property
    def is_cached(self) -> bool:
        """:class:`bool`: Whether the ban is cached."""
        return self.id in self.server.bans.cache

    async def remove(self) -> None:
        """|coro|

        Unbans the user.
        """
        await self.server.bans.delete(self.id)


class ServerBanManager(ListableManager[Ban]):
    """Manages the bans of a server.

    Attributes
    ----------
    server: :class:`.Server`
        The server the bans belong to.
    """

    __slots__ = ('server',)

    kind = 'server_ban'

    def __init__(self, state: State, /) -> None:
        super().__init__(state)
        self.server: Server = None  # type: ignore # bound by parser

    async def _fetch(self, id: typing.Any, /) -> Ban:
        payload = await self.state.http.get_ban(self.server.id, id)
        return self.state.parser.parse_ban(payload, server=self.server)

    async def _fetch_many(
        self, *, before: typing.Optional[typing.Union[datetime, str]], limit: typing.Optional[int]
    ) -> list[Ban]:
        payloads = await self.state.http.get_bans(self.server.id)
        parser = self.state.parser
        return [parser.parse_ban(payload, server=self.server) for payload in payloads]

    async def create(
        self, user: IDOr[User], /, *, reason: UndefinedOr[str] = UNDEFINED, cache: typing.Optional[bool] = None
    ) -> Ban:
        """|coro|

        Bans a user from the server.

        Parameters
        ----------
        user: IDOr[:class:`.User`]
            The user to ban.
        reason: UndefinedOr[:class:`str`]
            The ban reason.
        cache: Optional[:class:`bool`]
            Whether to cache the ban. Defaults to the client options.

        Returns
        -------
        :class:`.Ban`
            The created ban.
        """
        payload = await self.state.http.ban(self.server.id, user, reason=reason)
        return self._add(self.state.parser.parse_ban(payload, server=self.server), cache=cache)

    async def delete(self, user: IDOr[User], /) -> None:
        """|coro|

        Removes a ban and evicts it from cache.
        """
        user_id = resolve_id(user)
        await self.state.http.unban(self.server.id, user_id)
        self._remove(user_id)


__all__ = (
    'Server',
    'ServerManager',
    'Member',
    'ServerMemberManager',
    'Ban',
    'ServerBanManager',
)
