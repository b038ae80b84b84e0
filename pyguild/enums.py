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

# Lightweight enums whose members compare by identity and whose lookups by value are cheap.
# Based on discord.py's enums module.
from __future__ import annotations

from collections import namedtuple
import types
import typing

if typing.TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


def _create_value_cls(name: str, /):
    cls = namedtuple('_EnumValue_' + name, 'name value')
    cls.__repr__ = lambda self: f'<{name}.{self.name}: {self.value!r}>'  # type: ignore
    cls.__str__ = lambda self: f'{name}.{self.name}'  # type: ignore
    return cls


def _is_descriptor(obj: typing.Any, /) -> bool:
    return hasattr(obj, '__get__') or hasattr(obj, '__set__') or hasattr(obj, '__delete__')


class EnumMeta(type):
    if typing.TYPE_CHECKING:
        __name__: typing.ClassVar[str]  # type: ignore
        _enum_member_names_: typing.ClassVar[list[str]]
        _enum_member_map_: typing.ClassVar[dict[str, typing.Any]]
        _enum_value_map_: typing.ClassVar[dict[typing.Any, typing.Any]]

    def __new__(
        cls,
        name: str,
        bases: tuple[type, ...],
        attrs: dict[str, typing.Any],
        /,
    ) -> EnumMeta:
        value_mapping = {}
        member_mapping = {}
        member_names = []

        value_cls = _create_value_cls(name)
        for key, value in list(attrs.items()):
            is_descriptor = _is_descriptor(value)
            if key[0] == '_' and not is_descriptor:
                continue

            if isinstance(value, classmethod):
                continue

            if is_descriptor:
                setattr(value_cls, key, value)
                del attrs[key]
                continue

            try:
                new_value = value_mapping[value]
            except KeyError:
                new_value = value_cls(name=key, value=value)
                value_mapping[value] = new_value
                member_names.append(key)

            member_mapping[key] = new_value
            attrs[key] = new_value

        attrs['_enum_value_map_'] = value_mapping
        attrs['_enum_member_map_'] = member_mapping
        attrs['_enum_member_names_'] = member_names
        attrs['_enum_value_cls_'] = value_cls
        actual_cls = super().__new__(cls, name, bases, attrs)
        value_cls._actual_enum_cls_ = actual_cls  # type: ignore
        return actual_cls

    def __iter__(cls) -> Iterator[typing.Any]:
        return (cls._enum_member_map_[name] for name in cls._enum_member_names_)

    def __len__(cls) -> int:
        return len(cls._enum_member_names_)

    def __repr__(cls) -> str:
        return f'<enum {cls.__name__}>'

    @property
    def __members__(cls) -> Mapping[str, typing.Any]:
        return types.MappingProxyType(cls._enum_member_map_)

    def __call__(cls, value: typing.Any, /) -> typing.Any:
        try:
            return cls._enum_value_map_[value]
        except (KeyError, TypeError):
            raise ValueError(f'{value!r} is not a valid {cls.__name__}') from None

    def __getitem__(cls, key: str, /) -> typing.Any:
        return cls._enum_member_map_[key]

    def __setattr__(cls, name: str, value: typing.Any, /) -> None:
        raise TypeError('Enums are immutable.')

    def __delattr__(cls, attr: str, /) -> None:
        raise TypeError('Enums are immutable.')

    def __instancecheck__(self, instance: typing.Any, /) -> bool:
        try:
            return instance._actual_enum_cls_ is self
        except AttributeError:
            return False


if typing.TYPE_CHECKING:
    from enum import Enum
else:

    class Enum(metaclass=EnumMeta):
        @classmethod
        def try_value(cls, value) -> typing.Any:
            """Returns the member for the value, or the value itself when it is not known."""
            try:
                return cls._enum_value_map_[value]
            except (KeyError, TypeError):
                return value


class ChannelType(Enum):
    announcements = 'announcements'
    calendar = 'calendar'
    chat = 'chat'
    docs = 'docs'
    forums = 'forums'
    media = 'media'
    list = 'list'
    scheduling = 'scheduling'
    stream = 'stream'
    voice = 'voice'


class ConnectionState(Enum):
    disconnected = 'DISCONNECTED'
    connecting = 'CONNECTING'
    connected = 'CONNECTED'


class MessageType(Enum):
    default = 'default'
    system = 'system'


class UserType(Enum):
    user = 'user'
    bot = 'bot'


__all__ = (
    'EnumMeta',
    'Enum',
    'ChannelType',
    'ConnectionState',
    'MessageType',
    'UserType',
)
