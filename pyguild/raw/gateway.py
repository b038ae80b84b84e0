from __future__ import annotations

import typing
import typing_extensions

from .docs import Doc
from .list_items import ListItem
from .messages import ChatMessage, DeletedChatMessage
from .channels import ServerChannel
from .servers import ServerMember, ServerMemberBan
from .users import BotUser
from .webhooks import Webhook


class WelcomeData(typing.TypedDict):
    heartbeatIntervalMs: int
    lastMessageId: typing_extensions.NotRequired[str]
    botId: typing_extensions.NotRequired[str]
    user: BotUser


class WelcomeFrame(typing.TypedDict):
    op: typing.Literal[1]
    d: WelcomeData


class EventFrame(typing.TypedDict):
    op: typing.Literal[0]
    t: str
    d: dict[str, typing.Any]
    s: typing_extensions.NotRequired[str]


class ResumeFrame(typing.TypedDict):
    op: typing.Literal[2]
    d: dict[typing.Literal['lastMessageId'], str]


class ErrorFrame(typing.TypedDict):
    op: typing.Literal[8, 9]
    d: dict[str, typing.Any]


Frame = typing.Union[WelcomeFrame, EventFrame, ResumeFrame, ErrorFrame]


class ChatMessageEvent(typing.TypedDict):
    serverId: typing_extensions.NotRequired[str]
    message: ChatMessage


class ChatMessageDeletedEvent(typing.TypedDict):
    serverId: typing_extensions.NotRequired[str]
    message: DeletedChatMessage


class DocEvent(typing.TypedDict):
    serverId: str
    doc: Doc


class ListItemEvent(typing.TypedDict):
    serverId: str
    listItem: ListItem


class ServerChannelEvent(typing.TypedDict):
    serverId: str
    channel: ServerChannel


class ServerMemberJoinedEvent(typing.TypedDict):
    serverId: str
    member: ServerMember


class ServerMemberUpdatedEvent(typing.TypedDict):
    serverId: str
    userInfo: dict[str, typing.Any]


class ServerMemberRemovedEvent(typing.TypedDict):
    serverId: str
    userId: str
    isKick: typing_extensions.NotRequired[bool]
    isBan: typing_extensions.NotRequired[bool]


class ServerMemberBanEvent(typing.TypedDict):
    serverId: str
    serverMemberBan: ServerMemberBan


class ServerWebhookEvent(typing.TypedDict):
    serverId: str
    webhook: Webhook


__all__ = (
    'WelcomeData',
    'WelcomeFrame',
    'EventFrame',
    'ResumeFrame',
    'ErrorFrame',
    'Frame',
    'ChatMessageEvent',
    'ChatMessageDeletedEvent',
    'DocEvent',
    'ListItemEvent',
    'ServerChannelEvent',
    'ServerMemberJoinedEvent',
    'ServerMemberUpdatedEvent',
    'ServerMemberRemovedEvent',
    'ServerMemberBanEvent',
    'ServerWebhookEvent',
)
