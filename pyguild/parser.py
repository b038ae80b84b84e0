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

from .channel import Channel
from .doc import Doc, DocManager
from .enums import ChannelType, MessageType, UserType
from .list_item import ListItem, ListItemManager
from .message import Message, MessageManager
from .server import Server, ServerMemberManager, ServerBanManager, Member, Ban
from .user import User
from .utils import parse_iso
from .webhook import Webhook, WebhookManager

if typing.TYPE_CHECKING:
    from . import raw
    from .state import State


class Parser:
    """An factory that produces wrapper objects from raw data.

    Entities that own nested managers (channels and servers) take over the managers of
    the snapshot the client already knows, and rebind them to the new snapshot.

    Attributes
    ----------
    state: :class:`.State`
        The state the parser is attached to.
    """

    __slots__ = ('state',)

    def __init__(self, *, state: State) -> None:
        self.state: State = state

    def parse_ban(self, payload: raw.ServerMemberBan, /, *, server: Server) -> Ban:
        """Parses a server ban object.

        Parameters
        ----------
        payload: Dict[:class:`str`, Any]
            The ban payload to parse.
        server: :class:`.Server`
            The server the ban is in.

        Returns
        -------
        :class:`.Ban`
            The parsed ban object.
        """
        user = self.parse_user(payload['user'])
        return Ban(
            state=self.state,
            id=user.id,
            server=server,
            user=user,
            reason=payload.get('reason'),
            created_by=payload['createdBy'],
            created_at=parse_iso(payload['createdAt']),  # type: ignore
        )

    def parse_bot_user(self, payload: raw.BotUser, /) -> User:
        """Parses the bot user sent in the websocket welcome frame."""
        return User(
            state=self.state,
            id=payload['id'],
            type=UserType.bot,
            name=payload['name'],
            avatar=None,
            banner=None,
            created_at=parse_iso(payload.get('createdAt')),
        )

    def parse_channel(self, payload: raw.ServerChannel, /) -> Channel:
        """Parses a channel object.

        Parameters
        ----------
        payload: Dict[:class:`str`, Any]
            The channel payload to parse.

        Returns
        -------
        :class:`.Channel`
            The parsed channel object.
        """
        state = self.state
        channel_id = payload['id']

        previous = state.channels.get(channel_id)
        if previous is None:
            messages = MessageManager(state)
            docs = DocManager(state)
            list_items = ListItemManager(state)
            webhooks = WebhookManager(state)
        else:
            messages = previous.messages
            docs = previous.docs
            list_items = previous.list_items
            webhooks = previous.webhooks

        channel = Channel(
            state=state,
            id=channel_id,
            type=ChannelType.try_value(payload['type']),
            name=payload['name'],
            topic=payload.get('topic'),
            server_id=payload['serverId'],
            group_id=payload['groupId'],
            parent_id=payload.get('parentId'),
            category_id=payload.get('categoryId'),
            public=payload.get('isPublic', False),
            created_at=parse_iso(payload['createdAt']),  # type: ignore
            created_by=payload['createdBy'],
            updated_at=parse_iso(payload.get('updatedAt')),
            archived_at=parse_iso(payload.get('archivedAt')),
            archived_by=payload.get('archivedBy'),
            messages=messages,
            docs=docs,
            list_items=list_items,
            webhooks=webhooks,
        )
        messages.channel = channel
        docs.channel = channel
        list_items.channel = channel
        webhooks.channel = channel
        return channel

    def parse_doc(self, payload: raw.Doc, /, *, channel: Channel) -> Doc:
        return Doc(
            state=self.state,
            id=payload['id'],
            channel=channel,
            server_id=payload['serverId'],
            title=payload['title'],
            content=payload['content'],
            created_at=parse_iso(payload['createdAt']),  # type: ignore
            created_by=payload['createdBy'],
            updated_at=parse_iso(payload.get('updatedAt')),
            updated_by=payload.get('updatedBy'),
        )

    def parse_list_item(self, payload: raw.ListItem, /, *, channel: Channel) -> ListItem:
        note = payload.get('note')
        return ListItem(
            state=self.state,
            id=payload['id'],
            channel=channel,
            server_id=payload['serverId'],
            message=payload['message'],
            note=None if note is None else note.get('content'),
            parent_id=payload.get('parentListItemId'),
            created_at=parse_iso(payload['createdAt']),  # type: ignore
            created_by=payload['createdBy'],
            webhook_id=payload.get('createdByWebhookId'),
            updated_at=parse_iso(payload.get('updatedAt')),
            updated_by=payload.get('updatedBy'),
            completed_at=parse_iso(payload.get('completedAt')),
            completed_by=payload.get('completedBy'),
        )

    def parse_member(
        self, payload: typing.Union[raw.ServerMember, raw.ServerMemberSummary], /, *, server: Server
    ) -> Member:
        """Parses a server member object. Member summaries are accepted too.

        Parameters
        ----------
        payload: Dict[:class:`str`, Any]
            The member payload to parse.
        server: :class:`.Server`
            The server the member is in.

        Returns
        -------
        :class:`.Member`
            The parsed member object.
        """
        user = self.parse_user(payload['user'])
        return Member(
            state=self.state,
            id=user.id,
            server=server,
            user=user,
            role_ids=payload.get('roleIds', []),
            nickname=payload.get('nickname'),
            joined_at=parse_iso(payload.get('joinedAt')),
            owner=payload.get('isOwner', False),
        )

    def parse_message(self, payload: raw.ChatMessage, /, *, channel: Channel) -> Message:
        """Parses a chat message object.

        Parameters
        ----------
        payload: Dict[:class:`str`, Any]
            The message payload to parse.
        channel: :class:`.Channel`
            The channel the message was sent in.

        Returns
        -------
        :class:`.Message`
            The parsed message object.
        """
        return Message(
            state=self.state,
            id=payload['id'],
            channel=channel,
            type=MessageType.try_value(payload.get('type', 'default')),
            server_id=payload.get('serverId'),
            content=payload.get('content', ''),
            embeds=payload.get('embeds', []),
            reply_message_ids=payload.get('replyMessageIds', []),
            private=payload.get('isPrivate', False),
            silent=payload.get('isSilent', False),
            mentions=payload.get('mentions'),
            created_at=parse_iso(payload['createdAt']),  # type: ignore
            created_by=payload['createdBy'],
            webhook_id=payload.get('createdByWebhookId'),
            updated_at=parse_iso(payload.get('updatedAt')),
        )

    def parse_server(self, payload: raw.Server, /) -> Server:
        """Parses a server object.

        Parameters
        ----------
        payload: Dict[:class:`str`, Any]
            The server payload to parse.

        Returns
        -------
        :class:`.Server`
            The parsed server object.
        """
        state = self.state
        server_id = payload['id']

        previous = state.servers.get(server_id)
        if previous is None:
            members = ServerMemberManager(state)
            bans = ServerBanManager(state)
        else:
            members = previous.members
            bans = previous.bans

        server = Server(
            state=state,
            id=server_id,
            owner_id=payload['ownerId'],
            type=payload.get('type'),
            name=payload['name'],
            url=payload.get('url'),
            about=payload.get('about'),
            avatar=payload.get('avatar'),
            banner=payload.get('banner'),
            timezone=payload.get('timezone'),
            verified=payload.get('isVerified', False),
            default_channel_id=payload.get('defaultChannelId'),
            created_at=parse_iso(payload['createdAt']),  # type: ignore
            members=members,
            bans=bans,
        )
        members.server = server
        bans.server = server
        return server

    def parse_user(self, payload: typing.Union[raw.User, raw.UserSummary], /) -> User:
        """Parses a user object. User summaries are accepted too.

        Parameters
        ----------
        payload: Dict[:class:`str`, Any]
            The user payload to parse.

        Returns
        -------
        :class:`.User`
            The parsed user object.
        """
        return User(
            state=self.state,
            id=payload['id'],
            type=UserType.try_value(payload.get('type', 'user')),
            name=payload['name'],
            avatar=payload.get('avatar'),
            banner=payload.get('banner'),
            created_at=parse_iso(payload.get('createdAt')),
        )

    def parse_webhook(self, payload: raw.Webhook, /, *, channel: Channel) -> Webhook:
        return Webhook(
            state=self.state,
            id=payload['id'],
            channel=channel,
            server_id=payload['serverId'],
            name=payload['name'],
            avatar=payload.get('avatar'),
            created_at=parse_iso(payload['createdAt']),  # type: ignore
            created_by=payload['createdBy'],
            deleted_at=parse_iso(payload.get('deletedAt')),
            token=payload.get('token'),
        )


__all__ = ('Parser',)
