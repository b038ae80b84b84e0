from __future__ import annotations

import typing
import typing_extensions


class Webhook(typing.TypedDict):
    id: str
    name: str
    avatar: typing_extensions.NotRequired[str]
    serverId: str
    channelId: str
    createdAt: str
    createdBy: str
    deletedAt: typing_extensions.NotRequired[str]
    token: typing_extensions.NotRequired[str]


class DataCreateWebhook(typing.TypedDict):
    name: str
    channelId: str


class DataEditWebhook(typing.TypedDict):
    name: str
    channelId: typing_extensions.NotRequired[str]


class WebhookResponse(typing.TypedDict):
    webhook: Webhook


class WebhooksResponse(typing.TypedDict):
    webhooks: list[Webhook]


__all__ = (
    'Webhook',
    'DataCreateWebhook',
    'DataEditWebhook',
    'WebhookResponse',
    'WebhooksResponse',
)
