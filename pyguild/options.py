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

from attrs import define, field, fields

if typing.TYPE_CHECKING:
    from collections.abc import Mapping

ResourceKind = typing.Literal[
    'channel',
    'message',
    'doc',
    'list_item',
    'server',
    'server_member',
    'server_ban',
    'user',
    'webhook',
]

# kind -> (toggle attribute, capacity attribute)
_ATTRIBUTES: dict[str, tuple[str, str]] = {
    'channel': ('cache_channels', 'max_channel_cache'),
    'message': ('cache_messages', 'max_message_cache'),
    'doc': ('cache_docs', 'max_doc_cache'),
    'list_item': ('cache_list_items', 'max_list_item_cache'),
    'server': ('cache_servers', 'max_server_cache'),
    'server_member': ('cache_server_members', 'max_server_member_cache'),
    'server_ban': ('cache_server_bans', 'max_server_ban_cache'),
    'user': ('cache_users', 'max_user_cache'),
    'webhook': ('cache_webhooks', 'max_webhook_cache'),
}


def _to_camel_case(name: str, /) -> str:
    head, *tail = name.split('_')
    return head + ''.join(part.title() for part in tail)


def _validate_max_size(instance: ClientOptions, attribute: typing.Any, value: typing.Optional[int]) -> None:
    if value is not None and value < 0:
        raise ValueError(f'{attribute.name} must be non-negative, not {value}')


@define(slots=True)
class ClientOptions:
    """Controls what the client keeps in memory.

    Every resource kind has a ``cache_<resources>`` toggle and a ``max_<resource>_cache``
    capacity. By default everything is cached and caches are unbounded.

    Fetched entities are stored according to these options unless a ``cache`` argument
    is passed explicitly to the fetching method.
    """

    cache_channels: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache channels."""

    max_channel_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of the channels cache."""

    cache_messages: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache messages."""

    max_message_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of each channel's messages cache."""

    cache_docs: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache docs."""

    max_doc_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of each channel's docs cache."""

    cache_list_items: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache list items."""

    max_list_item_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of each channel's list items cache."""

    cache_servers: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache servers."""

    max_server_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of the servers cache."""

    cache_server_members: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache server members."""

    max_server_member_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of each server's members cache."""

    cache_server_bans: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache server bans."""

    max_server_ban_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of each server's bans cache."""

    cache_users: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache users."""

    max_user_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of the users cache."""

    cache_webhooks: bool = field(default=True, kw_only=True)
    """:class:`bool`: Whether to cache webhooks."""

    max_webhook_cache: typing.Optional[int] = field(default=None, kw_only=True, validator=_validate_max_size)
    """Optional[:class:`int`]: The maximum size of each channel's webhooks cache."""

    @classmethod
    def from_mapping(cls, data: Mapping[str, typing.Any], /) -> ClientOptions:
        """Creates options from a mapping.

        Both ``snake_case`` keys (``cache_messages``) and ``camelCase`` keys (``cacheMessages``)
        are recognized. Unknown keys raise :class:`TypeError`.
        """
        names = {}
        for attribute in fields(cls):
            names[attribute.name] = attribute.name
            names[_to_camel_case(attribute.name)] = attribute.name

        kwargs = {}
        for key, value in data.items():
            try:
                kwargs[names[key]] = value
            except KeyError:
                raise TypeError(f'Unknown client option: {key!r}') from None
        return cls(**kwargs)

    def should_cache(self, kind: ResourceKind, /) -> bool:
        """:class:`bool`: Whether entities of the given kind should be cached."""
        return getattr(self, _ATTRIBUTES[kind][0])

    def max_cache_for(self, kind: ResourceKind, /) -> typing.Optional[int]:
        """Optional[:class:`int`]: The cache capacity for entities of the given kind."""
        return getattr(self, _ATTRIBUTES[kind][1])


__all__ = (
    'ResourceKind',
    'ClientOptions',
)
