from __future__ import annotations

import typing
import typing_extensions

from .users import User, UserSummary


class Server(typing.TypedDict):
    id: str
    ownerId: str
    type: typing_extensions.NotRequired[str]
    name: str
    url: typing_extensions.NotRequired[str]
    about: typing_extensions.NotRequired[str]
    avatar: typing_extensions.NotRequired[str]
    banner: typing_extensions.NotRequired[str]
    timezone: typing_extensions.NotRequired[str]
    isVerified: typing_extensions.NotRequired[bool]
    defaultChannelId: typing_extensions.NotRequired[str]
    createdAt: str


class ServerMember(typing.TypedDict):
    user: User
    roleIds: list[int]
    nickname: typing_extensions.NotRequired[str]
    joinedAt: str
    isOwner: typing_extensions.NotRequired[bool]


class ServerMemberSummary(typing.TypedDict):
    user: UserSummary
    roleIds: list[int]


class ServerMemberBan(typing.TypedDict):
    user: UserSummary
    reason: typing_extensions.NotRequired[str]
    createdBy: str
    createdAt: str


class ServerResponse(typing.TypedDict):
    server: Server


class ServerMemberResponse(typing.TypedDict):
    member: ServerMember


class ServerMembersResponse(typing.TypedDict):
    members: list[ServerMemberSummary]


class ServerMemberBanResponse(typing.TypedDict):
    serverMemberBan: ServerMemberBan


class ServerMemberBansResponse(typing.TypedDict):
    serverMemberBans: list[ServerMemberBan]


__all__ = (
    'Server',
    'ServerMember',
    'ServerMemberSummary',
    'ServerMemberBan',
    'ServerResponse',
    'ServerMemberResponse',
    'ServerMembersResponse',
    'ServerMemberBanResponse',
    'ServerMemberBansResponse',
)
