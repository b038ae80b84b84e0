from __future__ import annotations

import typing
import typing_extensions

from .channels import Mentions

MessageType = typing.Literal['default', 'system']


class Embed(typing.TypedDict, total=False):
    title: str
    description: str
    url: str
    color: int
    footer: dict[str, str]
    timestamp: str
    thumbnail: dict[str, str]
    image: dict[str, str]
    author: dict[str, str]
    fields: list[dict[str, typing.Any]]


class ChatMessage(typing.TypedDict):
    id: str
    type: MessageType
    serverId: typing_extensions.NotRequired[str]
    groupId: typing_extensions.NotRequired[str]
    channelId: str
    content: typing_extensions.NotRequired[str]
    embeds: typing_extensions.NotRequired[list[Embed]]
    replyMessageIds: typing_extensions.NotRequired[list[str]]
    isPrivate: typing_extensions.NotRequired[bool]
    isSilent: typing_extensions.NotRequired[bool]
    mentions: typing_extensions.NotRequired[Mentions]
    createdAt: str
    createdBy: str
    createdByWebhookId: typing_extensions.NotRequired[str]
    updatedAt: typing_extensions.NotRequired[str]


class DeletedChatMessage(typing.TypedDict):
    id: str
    serverId: typing_extensions.NotRequired[str]
    channelId: str
    deletedAt: str
    isPrivate: typing_extensions.NotRequired[bool]


class DataCreateMessage(typing.TypedDict):
    content: typing_extensions.NotRequired[str]
    embeds: typing_extensions.NotRequired[list[Embed]]
    replyMessageIds: typing_extensions.NotRequired[list[str]]
    isPrivate: typing_extensions.NotRequired[bool]
    isSilent: typing_extensions.NotRequired[bool]


class DataEditMessage(typing.TypedDict):
    content: typing_extensions.NotRequired[str]
    embeds: typing_extensions.NotRequired[list[Embed]]


class MessageResponse(typing.TypedDict):
    message: ChatMessage


class MessagesResponse(typing.TypedDict):
    messages: list[ChatMessage]


__all__ = (
    'MessageType',
    'Embed',
    'ChatMessage',
    'DeletedChatMessage',
    'DataCreateMessage',
    'DataEditMessage',
    'MessageResponse',
    'MessagesResponse',
)
