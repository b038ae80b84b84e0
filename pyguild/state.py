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

from .channel import ChannelManager
from .options import ClientOptions
from .parser import Parser
from .server import ServerManager
from .user import UserManager

if typing.TYPE_CHECKING:
    from .http import HTTPClient
    from .shard import Shard
    from .user import User


class State:
    """Represents a manager for all pyguild objects.

    This is the context every manager, entity and event handler reaches the client through.

    Attributes
    ----------
    options: :class:`ClientOptions`
        The cache options.
    parser: :class:`Parser`
        The parser.
    channels: :class:`ChannelManager`
        The channels the client has seen.
    servers: :class:`ServerManager`
        The servers the client has seen.
    users: :class:`UserManager`
        The users the client has seen.
    """

    __slots__ = (
        '_http',
        '_shard',
        '_me',
        'options',
        'parser',
        'channels',
        'servers',
        'users',
    )

    def __init__(
        self,
        *,
        options: typing.Optional[ClientOptions] = None,
        http: typing.Optional[HTTPClient] = None,
        parser: typing.Optional[Parser] = None,
        shard: typing.Optional[Shard] = None,
    ) -> None:
        self._http = http
        self._shard = shard
        self._me: typing.Optional[User] = None
        self.options: ClientOptions = options or ClientOptions()
        self.parser: Parser = parser if parser else Parser(state=self)
        self.channels: ChannelManager = ChannelManager(self)
        self.servers: ServerManager = ServerManager(self)
        self.users: UserManager = UserManager(self)

    def setup(
        self,
        *,
        http: typing.Optional[HTTPClient] = None,
        parser: typing.Optional[Parser] = None,
        shard: typing.Optional[Shard] = None,
    ) -> State:
        if http:
            self._http = http
        if parser:
            self.parser = parser
        if shard:
            self._shard = shard
        return self

    @property
    def http(self) -> HTTPClient:
        assert self._http, 'State has no HTTP client attached'
        return self._http

    @property
    def shard(self) -> Shard:
        assert self._shard, 'State has no shard attached'
        return self._shard

    @property
    def me(self) -> typing.Optional[User]:
        """Optional[:class:`.User`]: The bot user, available once the shard received the welcome frame."""
        return self._me

    def clear(self) -> None:
        """Drops every cached entity, nested caches included."""
        self.channels.cache.clear()
        self.servers.cache.clear()
        self.users.cache.clear()


__all__ = ('State',)
