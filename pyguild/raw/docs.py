from __future__ import annotations

import typing
import typing_extensions

from .channels import Mentions


class Doc(typing.TypedDict):
    id: int
    serverId: str
    channelId: str
    title: str
    content: str
    mentions: typing_extensions.NotRequired[Mentions]
    createdAt: str
    createdBy: str
    updatedAt: typing_extensions.NotRequired[str]
    updatedBy: typing_extensions.NotRequired[str]


class DataCreateDoc(typing.TypedDict):
    title: str
    content: str


class DocResponse(typing.TypedDict):
    doc: Doc


class DocsResponse(typing.TypedDict):
    docs: list[Doc]


__all__ = (
    'Doc',
    'DataCreateDoc',
    'DocResponse',
    'DocsResponse',
)
