from __future__ import annotations

import typing
import typing_extensions

UserType = typing.Literal['user', 'bot']


class UserSummary(typing.TypedDict):
    id: str
    type: typing_extensions.NotRequired[UserType]
    name: str
    avatar: typing_extensions.NotRequired[str]


class User(UserSummary):
    banner: typing_extensions.NotRequired[str]
    createdAt: str


class BotUser(typing.TypedDict):
    id: str
    botId: typing_extensions.NotRequired[str]
    name: str
    createdBy: typing_extensions.NotRequired[str]
    createdAt: str


class UserResponse(typing.TypedDict):
    user: User


__all__ = (
    'UserType',
    'UserSummary',
    'User',
    'BotUser',
    'UserResponse',
)
