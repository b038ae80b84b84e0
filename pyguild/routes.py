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
from urllib.parse import quote

from .core import UndefinedOr, UNDEFINED

HTTPMethod = typing.Literal['GET', 'POST', 'PATCH', 'DELETE', 'PUT']


class CompiledRoute:
    """Represents compiled Guilded API route."""

    __slots__ = ('route', 'args')

    def __init__(self, route: Route, /, **args: typing.Any) -> None:
        self.route: Route = route
        self.args: dict[str, typing.Any] = args

    def __repr__(self) -> str:
        return f'<CompiledRoute route={self.route!r} args={self.args!r}>'

    def __str__(self) -> str:
        return f'CompiledRoute({self.route}, **{self.args!r})'

    def build(self) -> str:
        return self.route.path.format_map({k: quote(str(v), safe='') for k, v in self.args.items()})

    def build_ratelimit_key(self) -> str:
        return self.route.ratelimit_key_template.format_map({k: quote(str(v), safe='') for k, v in self.args.items()})


class Route:
    """Represents Guilded API route.

    Routes sharing a ratelimit key are throttled together: they share one bucket,
    are sent one at a time, in submission order.
    """

    __slots__ = (
        'method',
        'path',
        'ratelimit_key_template',
    )

    def __init__(
        self, method: HTTPMethod, path: str, /, *, ratelimit_key_template: UndefinedOr[typing.Optional[str]] = UNDEFINED
    ) -> None:
        self.method: HTTPMethod = method
        self.path: str = path

        if ratelimit_key_template is UNDEFINED:
            if path.startswith('/channels/'):
                ratelimit_key_template = 'channels/{channel_id}'
            elif path.startswith('/servers/'):
                ratelimit_key_template = 'servers/{server_id}'
            elif path.startswith('/users/'):
                ratelimit_key_template = 'users'
            else:
                ratelimit_key_template = 'any'
        elif ratelimit_key_template is None:
            ratelimit_key_template = path
        self.ratelimit_key_template: str = ratelimit_key_template

    def __repr__(self) -> str:
        return f'<Route method={self.method!r} path={self.path!r}>'

    def __str__(self) -> str:
        return f'{self.method} {self.path}'

    def compile(self, **args: typing.Any) -> CompiledRoute:
        """Compiles route."""
        return CompiledRoute(self, **args)


GET: typing.Final[HTTPMethod] = 'GET'
POST: typing.Final[HTTPMethod] = 'POST'
PUT: typing.Final[HTTPMethod] = 'PUT'
DELETE: typing.Final[HTTPMethod] = 'DELETE'
PATCH: typing.Final[HTTPMethod] = 'PATCH'


# Channels
CHANNELS_CREATE: typing.Final[Route] = Route(POST, '/channels', ratelimit_key_template='channels/create')
CHANNELS_DELETE: typing.Final[Route] = Route(DELETE, '/channels/{channel_id}')
CHANNELS_EDIT: typing.Final[Route] = Route(PATCH, '/channels/{channel_id}')
CHANNELS_FETCH: typing.Final[Route] = Route(GET, '/channels/{channel_id}')

# Messages
MESSAGES_CREATE: typing.Final[Route] = Route(POST, '/channels/{channel_id}/messages')
MESSAGES_DELETE: typing.Final[Route] = Route(DELETE, '/channels/{channel_id}/messages/{message_id}')
MESSAGES_EDIT: typing.Final[Route] = Route(PUT, '/channels/{channel_id}/messages/{message_id}')
MESSAGES_FETCH: typing.Final[Route] = Route(GET, '/channels/{channel_id}/messages/{message_id}')
MESSAGES_FETCH_MANY: typing.Final[Route] = Route(GET, '/channels/{channel_id}/messages')

# Docs
DOCS_CREATE: typing.Final[Route] = Route(POST, '/channels/{channel_id}/docs')
DOCS_DELETE: typing.Final[Route] = Route(DELETE, '/channels/{channel_id}/docs/{doc_id}')
DOCS_EDIT: typing.Final[Route] = Route(PUT, '/channels/{channel_id}/docs/{doc_id}')
DOCS_FETCH: typing.Final[Route] = Route(GET, '/channels/{channel_id}/docs/{doc_id}')
DOCS_FETCH_MANY: typing.Final[Route] = Route(GET, '/channels/{channel_id}/docs')

# List items
LIST_ITEMS_COMPLETE: typing.Final[Route] = Route(POST, '/channels/{channel_id}/items/{list_item_id}/complete')
LIST_ITEMS_CREATE: typing.Final[Route] = Route(POST, '/channels/{channel_id}/items')
LIST_ITEMS_DELETE: typing.Final[Route] = Route(DELETE, '/channels/{channel_id}/items/{list_item_id}')
LIST_ITEMS_EDIT: typing.Final[Route] = Route(PUT, '/channels/{channel_id}/items/{list_item_id}')
LIST_ITEMS_FETCH: typing.Final[Route] = Route(GET, '/channels/{channel_id}/items/{list_item_id}')
LIST_ITEMS_FETCH_MANY: typing.Final[Route] = Route(GET, '/channels/{channel_id}/items')
LIST_ITEMS_UNCOMPLETE: typing.Final[Route] = Route(DELETE, '/channels/{channel_id}/items/{list_item_id}/complete')

# Servers
SERVERS_FETCH: typing.Final[Route] = Route(GET, '/servers/{server_id}')

# Server bans
SERVER_BANS_CREATE: typing.Final[Route] = Route(POST, '/servers/{server_id}/bans/{user_id}')
SERVER_BANS_DELETE: typing.Final[Route] = Route(DELETE, '/servers/{server_id}/bans/{user_id}')
SERVER_BANS_FETCH: typing.Final[Route] = Route(GET, '/servers/{server_id}/bans/{user_id}')
SERVER_BANS_FETCH_MANY: typing.Final[Route] = Route(GET, '/servers/{server_id}/bans')

# Server members
SERVER_MEMBERS_FETCH: typing.Final[Route] = Route(GET, '/servers/{server_id}/members/{user_id}')
SERVER_MEMBERS_FETCH_MANY: typing.Final[Route] = Route(GET, '/servers/{server_id}/members')
SERVER_MEMBERS_KICK: typing.Final[Route] = Route(DELETE, '/servers/{server_id}/members/{user_id}')
SERVER_MEMBERS_NICKNAME_DELETE: typing.Final[Route] = Route(DELETE, '/servers/{server_id}/members/{user_id}/nickname')
SERVER_MEMBERS_NICKNAME_EDIT: typing.Final[Route] = Route(PUT, '/servers/{server_id}/members/{user_id}/nickname')

# Users
USERS_FETCH: typing.Final[Route] = Route(GET, '/users/{user_id}')

# Webhooks
WEBHOOKS_CREATE: typing.Final[Route] = Route(POST, '/servers/{server_id}/webhooks')
WEBHOOKS_DELETE: typing.Final[Route] = Route(DELETE, '/servers/{server_id}/webhooks/{webhook_id}')
WEBHOOKS_EDIT: typing.Final[Route] = Route(PUT, '/servers/{server_id}/webhooks/{webhook_id}')
WEBHOOKS_FETCH: typing.Final[Route] = Route(GET, '/servers/{server_id}/webhooks/{webhook_id}')
WEBHOOKS_FETCH_MANY: typing.Final[Route] = Route(GET, '/servers/{server_id}/webhooks')


__all__ = (
    'HTTPMethod',
    'CompiledRoute',
    'Route',
    'GET',
    'POST',
    'PUT',
    'DELETE',
    'PATCH',
    'CHANNELS_CREATE',
    'CHANNELS_DELETE',
    'CHANNELS_EDIT',
    'CHANNELS_FETCH',
    'MESSAGES_CREATE',
    'MESSAGES_DELETE',
    'MESSAGES_EDIT',
    'MESSAGES_FETCH',
    'MESSAGES_FETCH_MANY',
    'DOCS_CREATE',
    'DOCS_DELETE',
    'DOCS_EDIT',
    'DOCS_FETCH',
    'DOCS_FETCH_MANY',
    'LIST_ITEMS_COMPLETE',
    'LIST_ITEMS_CREATE',
    'LIST_ITEMS_DELETE',
    'LIST_ITEMS_EDIT',
    'LIST_ITEMS_FETCH',
    'LIST_ITEMS_FETCH_MANY',
    'LIST_ITEMS_UNCOMPLETE',
    'SERVERS_FETCH',
    'SERVER_BANS_CREATE',
    'SERVER_BANS_DELETE',
    'SERVER_BANS_FETCH',
    'SERVER_BANS_FETCH_MANY',
    'SERVER_MEMBERS_FETCH',
    'SERVER_MEMBERS_FETCH_MANY',
    'SERVER_MEMBERS_KICK',
    'SERVER_MEMBERS_NICKNAME_DELETE',
    'SERVER_MEMBERS_NICKNAME_EDIT',
    'USERS_FETCH',
    'WEBHOOKS_CREATE',
    'WEBHOOKS_DELETE',
    'WEBHOOKS_EDIT',
    'WEBHOOKS_FETCH',
    'WEBHOOKS_FETCH_MANY',
)
