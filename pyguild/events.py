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

from attrs import define, field

if typing.TYPE_CHECKING:
    from .channel import Channel
    from .doc import Doc
    from .list_item import ListItem
    from .message import Message
    from .server import Server, Member, Ban
    from .shard import Shard
    from .user import User
    from .webhook import Webhook


@define(slots=True)
class BaseEvent:
    """Base class for all events."""

    def process(self) -> bool:
        """:class:`bool`: Applies the event to cache. Called before the event is dispatched to handlers.

        Returns whether cache was modified.
        """
        return False


@define(slots=True)
class ShardEvent(BaseEvent):
    """Base class for events arrived over WebSocket."""

    shard: Shard = field(repr=False, kw_only=True)
    """:class:`.Shard`: The shard the event arrived on."""


@define(slots=True)
class ReadyEvent(ShardEvent):
    """Dispatched when Guilded accepted the connection.

    .. warning::
        This event is dispatched again after every reconnect.
    """

    event_name: typing.ClassVar[typing.Literal['ready']] = 'ready'

    me: User = field(repr=True, kw_only=True)
    """:class:`.User`: The connected bot user."""

    def process(self) -> bool:
        # People expect client.me to be available upon dispatching
        state = self.shard.state
        state._me = self.me
        state.users._add(self.me)
        return True


@define(slots=True)
class DisconnectEvent(BaseEvent):
    """Dispatched when the client was closed explicitly.

    Unexpected disconnects are retried silently and do not dispatch this.
    """

    event_name: typing.ClassVar[typing.Literal['disconnect']] = 'disconnect'


@define(slots=True)
class ChannelCreateEvent(ShardEvent):
    """Dispatched when a channel is created in a server."""

    event_name: typing.ClassVar[str] = 'channel_create'

    channel: Channel = field(repr=True, kw_only=True)
    """:class:`.Channel`: The created channel."""

    def process(self) -> bool:
        manager = self.shard.state.channels
        if not manager.should_cache():
            return False
        manager._add(self.channel, cache=True)
        return True


@define(slots=True)
class ChannelEditEvent(ShardEvent):
    """Dispatched when a channel is edited."""

    event_name: typing.ClassVar[str] = 'channel_edit'

    before: typing.Optional[Channel] = field(repr=True, kw_only=True)
    """Optional[:class:`.Channel`]: The channel as it was before being edited, if cached."""

    after: Channel = field(repr=True, kw_only=True)
    """:class:`.Channel`: The channel as it is now."""

    def process(self) -> bool:
        manager = self.shard.state.channels
        if not manager.should_cache():
            return False
        manager._add(self.after, cache=True)
        return True


@define(slots=True)
class ChannelDeleteEvent(ShardEvent):
    """Dispatched when a channel is deleted."""

    event_name: typing.ClassVar[str] = 'channel_delete'

    channel: Channel = field(repr=True, kw_only=True)
    """:class:`.Channel`: The deleted channel."""

    def process(self) -> bool:
        return self.shard.state.channels._remove(self.channel.id) is not None


@define(slots=True)
class MessageCreateEvent(ShardEvent):
    """Dispatched when someone sends message in a channel."""

    event_name: typing.ClassVar[str] = 'message_create'

    message: Message = field(repr=True, kw_only=True)
    """:class:`.Message`: The message sent."""

    def process(self) -> bool:
        manager = self.message.channel.messages
        if not manager.should_cache():
            return False
        manager._add(self.message, cache=True)
        return True


@define(slots=True)
class MessageEditEvent(ShardEvent):
    """Dispatched when a message is edited."""

    event_name: typing.ClassVar[str] = 'message_edit'

    before: typing.Optional[Message] = field(repr=True, kw_only=True)
    """Optional[:class:`.Message`]: The message as it was before being edited, if cached."""

    after: Message = field(repr=True, kw_only=True)
    """:class:`.Message`: The message as it is now."""

    def process(self) -> bool:
        manager = self.after.channel.messages
        if not manager.should_cache():
            return False
        manager._add(self.after, cache=True)
        return True


@define(slots=True)
class MessageDeleteEvent(ShardEvent):
    """Dispatched when a message is deleted.

    The message is not necessarily cached, use :attr:`message_id` to identify it.
    """

    event_name: typing.ClassVar[str] = 'message_delete'

    channel: Channel = field(repr=True, kw_only=True)
    """:class:`.Channel`: The channel the message was in."""

    message_id: str = field(repr=True, kw_only=True)
    """:class:`str`: The deleted message's ID."""

    message: typing.Optional[Message] = field(repr=True, kw_only=True)
    """Optional[:class:`.Message`]: The deleted message, if it was cached."""

    def process(self) -> bool:
        return self.channel.messages._remove(self.message_id) is not None


@define(slots=True)
class DocCreateEvent(ShardEvent):
    """Dispatched when a doc is created."""

    event_name: typing.ClassVar[str] = 'doc_create'

    doc: Doc = field(repr=True, kw_only=True)
    """:class:`.Doc`: The created doc."""

    def process(self) -> bool:
        manager = self.doc.channel.docs
        if not manager.should_cache():
            return False
        manager._add(self.doc, cache=True)
        return True


@define(slots=True)
class DocEditEvent(ShardEvent):
    """Dispatched when a doc is edited."""

    event_name: typing.ClassVar[str] = 'doc_edit'

    before: typing.Optional[Doc] = field(repr=True, kw_only=True)
    """Optional[:class:`.Doc`]: The doc as it was before being edited, if cached."""

    after: Doc = field(repr=True, kw_only=True)
    """:class:`.Doc`: The doc as it is now."""

    def process(self) -> bool:
        manager = self.after.channel.docs
        if not manager.should_cache():
            return False
        manager._add(self.after, cache=True)
        return True


@define(slots=True)
class DocDeleteEvent(ShardEvent):
    """Dispatched when a doc is deleted."""

    event_name: typing.ClassVar[str] = 'doc_delete'

    doc: Doc = field(repr=True, kw_only=True)
    """:class:`.Doc`: The deleted doc, as sent in the event."""

    def process(self) -> bool:
        return self.doc.channel.docs._remove(self.doc.id) is not None


@define(slots=True)
class ListItemCreateEvent(ShardEvent):
    """Dispatched when a list item is created."""

    event_name: typing.ClassVar[str] = 'list_item_create'

    list_item: ListItem = field(repr=True, kw_only=True)
    """:class:`.ListItem`: The created list item."""

    def process(self) -> bool:
        manager = self.list_item.channel.list_items
        if not manager.should_cache():
            return False
        manager._add(self.list_item, cache=True)
        return True


@define(slots=True)
class ListItemEditEvent(ShardEvent):
    """Dispatched when a list item is edited."""

    event_name: typing.ClassVar[str] = 'list_item_edit'

    before: typing.Optional[ListItem] = field(repr=True, kw_only=True)
    """Optional[:class:`.ListItem`]: The list item as it was before being edited, if cached."""

    after: ListItem = field(repr=True, kw_only=True)
    """:class:`.ListItem`: The list item as it is now."""

    def process(self) -> bool:
        manager = self.after.channel.list_items
        if not manager.should_cache():
            return False
        manager._add(self.after, cache=True)
        return True


@define(slots=True)
class ListItemCompleteEvent(ListItemEditEvent):
    """Dispatched when a list item is marked as completed."""

    event_name: typing.ClassVar[str] = 'list_item_complete'


@define(slots=True)
class ListItemUncompleteEvent(ListItemEditEvent):
    """Dispatched when a list item is marked as not completed."""

    event_name: typing.ClassVar[str] = 'list_item_uncomplete'


@define(slots=True)
class ListItemDeleteEvent(ShardEvent):
    """Dispatched when a list item is deleted."""

    event_name: typing.ClassVar[str] = 'list_item_delete'

    list_item: ListItem = field(repr=True, kw_only=True)
    """:class:`.ListItem`: The deleted list item, as sent in the event."""

    def process(self) -> bool:
        return self.list_item.channel.list_items._remove(self.list_item.id) is not None


@define(slots=True)
class MemberJoinEvent(ShardEvent):
    """Dispatched when a user joins a server."""

    event_name: typing.ClassVar[str] = 'member_join'

    member: Member = field(repr=True, kw_only=True)
    """:class:`.Member`: The joined member."""

    def process(self) -> bool:
        manager = self.member.server.members
        self.shard.state.users._add(self.member.user)
        if not manager.should_cache():
            return False
        manager._add(self.member, cache=True)
        return True


@define(slots=True)
class MemberEditEvent(ShardEvent):
    """Dispatched when a member's nickname changes."""

    event_name: typing.ClassVar[str] = 'member_edit'

    server: Server = field(repr=True, kw_only=True)
    """:class:`.Server`: The server the member is in."""

    member_id: str = field(repr=True, kw_only=True)
    """:class:`str`: The member's ID."""

    nickname: typing.Optional[str] = field(repr=True, kw_only=True)
    """Optional[:class:`str`]: The new nickname."""

    before: typing.Optional[Member] = field(repr=True, kw_only=True)
    """Optional[:class:`.Member`]: The member as it was before being edited, if cached."""

    after: typing.Optional[Member] = field(repr=True, kw_only=True)
    """Optional[:class:`.Member`]: The member with new nickname. ``None`` if the member was not cached."""

    def process(self) -> bool:
        if self.after is None:
            return False
        manager = self.server.members
        if not manager.should_cache():
            return False
        manager._add(self.after, cache=True)
        return True


@define(slots=True)
class MemberRemoveEvent(ShardEvent):
    """Dispatched when a member leaves, or gets kicked or banned from a server."""

    event_name: typing.ClassVar[str] = 'member_remove'

    server: Server = field(repr=True, kw_only=True)
    """:class:`.Server`: The server the member was in."""

    member_id: str = field(repr=True, kw_only=True)
    """:class:`str`: The member's ID."""

    member: typing.Optional[Member] = field(repr=True, kw_only=True)
    """Optional[:class:`.Member`]: The removed member, if it was cached."""

    is_kick: bool = field(repr=True, kw_only=True)
    """:class:`bool`: Whether the member was kicked."""

    is_ban: bool = field(repr=True, kw_only=True)
    """:class:`bool`: Whether the member was banned."""

    def process(self) -> bool:
        return self.server.members._remove(self.member_id) is not None


@define(slots=True)
class BanCreateEvent(ShardEvent):
    """Dispatched when a user is banned from a server."""

    event_name: typing.ClassVar[str] = 'ban_create'

    ban: Ban = field(repr=True, kw_only=True)
    """:class:`.Ban`: The created ban."""

    def process(self) -> bool:
        manager = self.ban.server.bans
        if not manager.should_cache():
            return False
        manager._add(self.ban, cache=True)
        return True


@define(slots=True)
class BanDeleteEvent(ShardEvent):
    """Dispatched when a user is unbanned from a server."""

    event_name: typing.ClassVar[str] = 'ban_delete'

    ban: Ban = field(repr=True, kw_only=True)
    """:class:`.Ban`: The removed ban, as sent in the event."""

    def process(self) -> bool:
        return self.ban.server.bans._remove(self.ban.id) is not None


@define(slots=True)
class WebhookCreateEvent(ShardEvent):
    """Dispatched when a webhook is created."""

    event_name: typing.ClassVar[str] = 'webhook_create'

    webhook: Webhook = field(repr=True, kw_only=True)
    """:class:`.Webhook`: The created webhook."""

    def process(self) -> bool:
        manager = self.webhook.channel.webhooks
        if not manager.should_cache():
            return False
        manager._add(self.webhook, cache=True)
        return True


@define(slots=True)
class WebhookEditEvent(ShardEvent):
    """Dispatched when a webhook is edited, or deleted.

    Guilded reports deletion of webhooks as an edit setting :attr:`.Webhook.deleted_at`.
    """

    event_name: typing.ClassVar[str] = 'webhook_edit'

    before: typing.Optional[Webhook] = field(repr=True, kw_only=True)
    """Optional[:class:`.Webhook`]: The webhook as it was before being edited, if cached."""

    after: Webhook = field(repr=True, kw_only=True)
    """:class:`.Webhook`: The webhook as it is now."""

    def process(self) -> bool:
        manager = self.after.channel.webhooks
        if self.after.deleted_at is not None:
            return manager._remove(self.after.id) is not None
        if not manager.should_cache():
            return False
        manager._add(self.after, cache=True)
        return True


__all__ = (
    'BaseEvent',
    'ShardEvent',
    'ReadyEvent',
    'DisconnectEvent',
    'ChannelCreateEvent',
    'ChannelEditEvent',
    'ChannelDeleteEvent',
    'MessageCreateEvent',
    'MessageEditEvent',
    'MessageDeleteEvent',
    'DocCreateEvent',
    'DocEditEvent',
    'DocDeleteEvent',
    'ListItemCreateEvent',
    'ListItemEditEvent',
    'ListItemCompleteEvent',
    'ListItemUncompleteEvent',
    'ListItemDeleteEvent',
    'MemberJoinEvent',
    'MemberEditEvent',
    'MemberRemoveEvent',
    'BanCreateEvent',
    'BanDeleteEvent',
    'WebhookCreateEvent',
    'WebhookEditEvent',
)
