from __future__ import annotations

import typing
import typing_extensions

ChannelType = typing.Literal[
    'announcements',
    'calendar',
    'chat',
    'docs',
    'forums',
    'media',
    'list',
    'scheduling',
    'stream',
    'voice',
]


class Mentions(typing.TypedDict):
    users: typing_extensions.NotRequired[list[dict[typing.Literal['id'], str]]]
    channels: typing_extensions.NotRequired[list[dict[typing.Literal['id'], str]]]
    roles: typing_extensions.NotRequired[list[dict[typing.Literal['id'], int]]]
    everyone: typing_extensions.NotRequired[bool]
    here: typing_extensions.NotRequired[bool]


class ServerChannel(typing.TypedDict):
    id: str
    type: ChannelType
    name: str
    topic: typing_extensions.NotRequired[str]
    createdAt: str
    createdBy: str
    updatedAt: typing_extensions.NotRequired[str]
    serverId: str
    parentId: typing_extensions.NotRequired[str]
    categoryId: typing_extensions.NotRequired[int]
    groupId: str
    isPublic: typing_extensions.NotRequired[bool]
    archivedBy: typing_extensions.NotRequired[str]
    archivedAt: typing_extensions.NotRequired[str]


class DataCreateChannel(typing.TypedDict):
    name: str
    type: ChannelType
    topic: typing_extensions.NotRequired[str]
    isPublic: typing_extensions.NotRequired[bool]
    serverId: typing_extensions.NotRequired[str]
    groupId: typing_extensions.NotRequired[str]
    categoryId: typing_extensions.NotRequired[int]


class DataEditChannel(typing.TypedDict):
    name: typing_extensions.NotRequired[str]
    topic: typing_extensions.NotRequired[str]
    isPublic: typing_extensions.NotRequired[bool]


class ChannelResponse(typing.TypedDict):
    channel: ServerChannel


__all__ = (
    'ChannelType',
    'Mentions',
    'ServerChannel',
    'DataCreateChannel',
    'DataEditChannel',
    'ChannelResponse',
)
