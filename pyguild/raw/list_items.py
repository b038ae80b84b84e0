from __future__ import annotations

import typing
import typing_extensions

from .channels import Mentions


class NoteSummary(typing.TypedDict):
    mentions: typing_extensions.NotRequired[Mentions]
    createdAt: str
    createdBy: str
    updatedAt: typing_extensions.NotRequired[str]
    updatedBy: typing_extensions.NotRequired[str]


class Note(NoteSummary):
    content: str


class ListItem(typing.TypedDict):
    id: str
    serverId: str
    channelId: str
    message: str
    mentions: typing_extensions.NotRequired[Mentions]
    createdAt: str
    createdBy: str
    createdByWebhookId: typing_extensions.NotRequired[str]
    updatedAt: typing_extensions.NotRequired[str]
    updatedBy: typing_extensions.NotRequired[str]
    parentListItemId: typing_extensions.NotRequired[str]
    completedAt: typing_extensions.NotRequired[str]
    completedBy: typing_extensions.NotRequired[str]
    note: typing_extensions.NotRequired[typing.Union[Note, NoteSummary]]


class DataCreateListItem(typing.TypedDict):
    message: str
    note: typing_extensions.NotRequired[dict[typing.Literal['content'], str]]


class ListItemResponse(typing.TypedDict):
    listItem: ListItem


class ListItemsResponse(typing.TypedDict):
    listItems: list[ListItem]


__all__ = (
    'NoteSummary',
    'Note',
    'ListItem',
    'DataCreateListItem',
    'ListItemResponse',
    'ListItemsResponse',
)
