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

import asyncio
import builtins
from inspect import isawaitable, signature
import logging
import typing

import aiohttp
from attrs import evolve

from . import utils
from .core import UNDEFINED, UndefinedOr
from .errors import InvalidData
from .events import (
    BaseEvent,
    ReadyEvent,
    DisconnectEvent,
    ChannelCreateEvent,
    ChannelEditEvent,
    ChannelDeleteEvent,
    MessageCreateEvent,
    MessageEditEvent,
    MessageDeleteEvent,
    DocCreateEvent,
    DocEditEvent,
    DocDeleteEvent,
    ListItemCreateEvent,
    ListItemEditEvent,
    ListItemCompleteEvent,
    ListItemUncompleteEvent,
    ListItemDeleteEvent,
    MemberJoinEvent,
    MemberEditEvent,
    MemberRemoveEvent,
    BanCreateEvent,
    BanDeleteEvent,
    WebhookCreateEvent,
    WebhookEditEvent,
)
from .http import HTTPClient
from .options import ClientOptions
from .parser import Parser
from .shard import EventHandler, Shard
from .state import State

if typing.TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Generator, Mapping
    from datetime import datetime, timedelta
    from types import TracebackType
    from typing_extensions import Self

    from . import raw
    from .channel import Channel, ChannelManager
    from .server import ServerManager
    from .user import User, UserManager


_L = logging.getLogger(__name__)


def _session_factory(_) -> aiohttp.ClientSession:
    return aiohttp.ClientSession()


class ClientEventHandler(EventHandler):
    """The default event handler for the client.

    Every handler resolves the entities the event refers to, applies the event to cache and
    dispatches exactly one event before returning.
    """

    __slots__ = ('_client', '_state', '_handlers', '_tasks')

    def __init__(self, client: Client) -> None:
        self._client = client
        self._state = client._state
        self._tasks: set[asyncio.Task[None]] = set()

        self._handlers = {
            'ChatMessageCreated': self.handle_chat_message_created,
            'ChatMessageUpdated': self.handle_chat_message_updated,
            'ChatMessageDeleted': self.handle_chat_message_deleted,
            'DocCreated': self.handle_doc_created,
            'DocUpdated': self.handle_doc_updated,
            'DocDeleted': self.handle_doc_deleted,
            'ListItemCreated': self.handle_list_item_created,
            'ListItemUpdated': self.handle_list_item_updated,
            'ListItemCompleted': self.handle_list_item_completed,
            'ListItemUncompleted': self.handle_list_item_uncompleted,
            'ListItemDeleted': self.handle_list_item_deleted,
            'ServerChannelCreated': self.handle_server_channel_created,
            'ServerChannelUpdated': self.handle_server_channel_updated,
            'ServerChannelDeleted': self.handle_server_channel_deleted,
            'ServerMemberJoined': self.handle_server_member_joined,
            'ServerMemberUpdated': self.handle_server_member_updated,
            'ServerMemberRemoved': self.handle_server_member_removed,
            'ServerMemberBanned': self.handle_server_member_banned,
            'ServerMemberUnbanned': self.handle_server_member_unbanned,
            'ServerWebhookCreated': self.handle_server_webhook_created,
            'ServerWebhookUpdated': self.handle_server_webhook_updated,
        }

    def dispatch(self, event: BaseEvent, /) -> asyncio.Task[None]:
        _L.debug('Processing %s', event.__class__.__name__)
        event.process()
        return self._client.dispatch(event)

    async def _resolve_channel(self, channel_id: str, /) -> Channel:
        return await self._state.channels.fetch_one(channel_id)

    async def handle_chat_message_created(self, shard: Shard, payload: raw.ChatMessageEvent, /) -> None:
        data = payload['message']
        channel = await self._resolve_channel(data['channelId'])
        message = self._state.parser.parse_message(data, channel=channel)
        self.dispatch(MessageCreateEvent(shard=shard, message=message))

    async def handle_chat_message_updated(self, shard: Shard, payload: raw.ChatMessageEvent, /) -> None:
        data = payload['message']
        channel = await self._resolve_channel(data['channelId'])
        after = self._state.parser.parse_message(data, channel=channel)
        self.dispatch(MessageEditEvent(shard=shard, before=channel.messages.get(after.id), after=after))

    async def handle_chat_message_deleted(self, shard: Shard, payload: raw.ChatMessageDeletedEvent, /) -> None:
        data = payload['message']
        channel = await self._resolve_channel(data['channelId'])
        message_id = data['id']
        self.dispatch(
            MessageDeleteEvent(
                shard=shard,
                channel=channel,
                message_id=message_id,
                message=channel.messages.get(message_id),
            )
        )

    async def handle_doc_created(self, shard: Shard, payload: raw.DocEvent, /) -> None:
        data = payload['doc']
        channel = await self._resolve_channel(data['channelId'])
        self.dispatch(DocCreateEvent(shard=shard, doc=self._state.parser.parse_doc(data, channel=channel)))

    async def handle_doc_updated(self, shard: Shard, payload: raw.DocEvent, /) -> None:
        data = payload['doc']
        channel = await self._resolve_channel(data['channelId'])
        after = self._state.parser.parse_doc(data, channel=channel)
        self.dispatch(DocEditEvent(shard=shard, before=channel.docs.get(after.id), after=after))

    async def handle_doc_deleted(self, shard: Shard, payload: raw.DocEvent, /) -> None:
        data = payload['doc']
        channel = await self._resolve_channel(data['channelId'])
        self.dispatch(DocDeleteEvent(shard=shard, doc=self._state.parser.parse_doc(data, channel=channel)))

    async def _list_item_edit(
        self, shard: Shard, payload: raw.ListItemEvent, cls: type[ListItemEditEvent], /
    ) -> ListItemEditEvent:
        data = payload['listItem']
        channel = await self._resolve_channel(data['channelId'])
        after = self._state.parser.parse_list_item(data, channel=channel)
        return cls(shard=shard, before=channel.list_items.get(after.id), after=after)

    async def handle_list_item_created(self, shard: Shard, payload: raw.ListItemEvent, /) -> None:
        data = payload['listItem']
        channel = await self._resolve_channel(data['channelId'])
        list_item = self._state.parser.parse_list_item(data, channel=channel)
        self.dispatch(ListItemCreateEvent(shard=shard, list_item=list_item))

    async def handle_list_item_updated(self, shard: Shard, payload: raw.ListItemEvent, /) -> None:
        self.dispatch(await self._list_item_edit(shard, payload, ListItemEditEvent))

    async def handle_list_item_completed(self, shard: Shard, payload: raw.ListItemEvent, /) -> None:
        self.dispatch(await self._list_item_edit(shard, payload, ListItemCompleteEvent))

    async def handle_list_item_uncompleted(self, shard: Shard, payload: raw.ListItemEvent, /) -> None:
        self.dispatch(await self._list_item_edit(shard, payload, ListItemUncompleteEvent))

    async def handle_list_item_deleted(self, shard: Shard, payload: raw.ListItemEvent, /) -> None:
        data = payload['listItem']
        channel = await self._resolve_channel(data['channelId'])
        list_item = self._state.parser.parse_list_item(data, channel=channel)
        self.dispatch(ListItemDeleteEvent(shard=shard, list_item=list_item))

    def handle_server_channel_created(self, shard: Shard, payload: raw.ServerChannelEvent, /) -> None:
        channel = self._state.parser.parse_channel(payload['channel'])
        self.dispatch(ChannelCreateEvent(shard=shard, channel=channel))

    def handle_server_channel_updated(self, shard: Shard, payload: raw.ServerChannelEvent, /) -> None:
        data = payload['channel']
        before = self._state.channels.get(data['id'])
        after = self._state.parser.parse_channel(data)
        self.dispatch(ChannelEditEvent(shard=shard, before=before, after=after))

    def handle_server_channel_deleted(self, shard: Shard, payload: raw.ServerChannelEvent, /) -> None:
        channel = self._state.parser.parse_channel(payload['channel'])
        self.dispatch(ChannelDeleteEvent(shard=shard, channel=channel))

    async def handle_server_member_joined(self, shard: Shard, payload: raw.ServerMemberJoinedEvent, /) -> None:
        server = await self._state.servers.fetch_one(payload['serverId'])
        member = self._state.parser.parse_member(payload['member'], server=server)
        self.dispatch(MemberJoinEvent(shard=shard, member=member))

    async def handle_server_member_updated(self, shard: Shard, payload: raw.ServerMemberUpdatedEvent, /) -> None:
        server = await self._state.servers.fetch_one(payload['serverId'])
        info = payload['userInfo']
        member_id = info['id']
        nickname = info.get('nickname')

        before = server.members.get(member_id)
        after = None if before is None else evolve(before, nickname=nickname)
        self.dispatch(
            MemberEditEvent(
                shard=shard,
                server=server,
                member_id=member_id,
                nickname=nickname,
                before=before,
                after=after,
            )
        )

    async def handle_server_member_removed(self, shard: Shard, payload: raw.ServerMemberRemovedEvent, /) -> None:
        server = await self._state.servers.fetch_one(payload['serverId'])
        member_id = payload['userId']
        self.dispatch(
            MemberRemoveEvent(
                shard=shard,
                server=server,
                member_id=member_id,
                member=server.members.get(member_id),
                is_kick=payload.get('isKick', False),
                is_ban=payload.get('isBan', False),
            )
        )

    async def handle_server_member_banned(self, shard: Shard, payload: raw.ServerMemberBanEvent, /) -> None:
        server = await self._state.servers.fetch_one(payload['serverId'])
        ban = self._state.parser.parse_ban(payload['serverMemberBan'], server=server)
        self.dispatch(BanCreateEvent(shard=shard, ban=ban))

    async def handle_server_member_unbanned(self, shard: Shard, payload: raw.ServerMemberBanEvent, /) -> None:
        server = await self._state.servers.fetch_one(payload['serverId'])
        ban = self._state.parser.parse_ban(payload['serverMemberBan'], server=server)
        self.dispatch(BanDeleteEvent(shard=shard, ban=ban))

    async def handle_server_webhook_created(self, shard: Shard, payload: raw.ServerWebhookEvent, /) -> None:
        data = payload['webhook']
        channel = await self._resolve_channel(data['channelId'])
        webhook = self._state.parser.parse_webhook(data, channel=channel)
        self.dispatch(WebhookCreateEvent(shard=shard, webhook=webhook))

    async def handle_server_webhook_updated(self, shard: Shard, payload: raw.ServerWebhookEvent, /) -> None:
        data = payload['webhook']
        channel = await self._resolve_channel(data['channelId'])
        after = self._state.parser.parse_webhook(data, channel=channel)
        self.dispatch(WebhookEditEvent(shard=shard, before=channel.webhooks.get(after.id), after=after))

    async def _handle_library_error(
        self, shard: Shard, kind: str, payload: dict[str, typing.Any], exc: Exception, name: str, /
    ) -> None:
        try:
            r = self._client.on_library_error(shard, kind, payload, exc)
            if isawaitable(r):
                await r
        except Exception:
            _L.exception('on_library_error (task: %s) raised an exception', name)

    def _report_error(self, shard: Shard, kind: str, payload: dict[str, typing.Any], exc: Exception, /) -> None:
        if isinstance(exc, KeyError):
            exc = InvalidData(f'{kind} payload is missing {exc.args[0]!r} key')

        _L.exception('%s handler raised an exception', kind, exc_info=exc)

        name = f'pyguild-dispatch-{self._client._get_i()}'
        task = asyncio.create_task(self._handle_library_error(shard, kind, payload, exc, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle(self, shard: Shard, kind: str, payload: dict[str, typing.Any], /) -> None:
        try:
            handler = self._handlers[kind]
        except KeyError:
            _L.debug('Received unknown event: %s. Discarding.', kind)
        else:
            _L.debug('Handling %s', kind)
            try:
                r = handler(shard, payload)
                if isawaitable(r):
                    await r
            except Exception as exc:
                self._report_error(shard, kind, payload, exc)

    def handle_raw(self, shard: Shard, kind: str, payload: dict[str, typing.Any], /) -> utils.MaybeAwaitable[None]:
        return self._handle(shard, kind, payload)

    def handle_connect(self, shard: Shard, payload: raw.WelcomeData, /) -> utils.MaybeAwaitable[None]:
        try:
            me = self._state.parser.parse_bot_user(payload['user'])
        except Exception as exc:
            self._report_error(shard, 'welcome', payload, exc)  # type: ignore
            return
        self.dispatch(ReadyEvent(shard=shard, me=me))

    def handle_disconnect(self, shard: Shard, /) -> utils.MaybeAwaitable[None]:
        self.dispatch(DisconnectEvent())


# OOP in Python sucks.
ClientT = typing.TypeVar('ClientT', bound='Client')
EventT = typing.TypeVar('EventT', bound='BaseEvent')


def _parents_of(type: type[BaseEvent], /) -> tuple[type[BaseEvent], ...]:
    """Tuple[Type[:class:`.BaseEvent`], ...]: Returns parents of BaseEvent, including BaseEvent itself."""
    if type is BaseEvent:
        return (BaseEvent,)
    tmp: typing.Any = type.__mro__[:-1]
    return tmp


class EventSubscription(typing.Generic[EventT]):
    """Represents a event subscription.

    Attributes
    ----------
    client: :class:`Client`
        The client that this subscription is tied to.
    id: :class:`int`
        The ID of the subscription.
    callback: MaybeAwaitableFunc[[EventT], None]
        The callback.
    """

    __slots__ = (
        'client',
        'id',
        'callback',
        'event',
    )

    def __init__(
        self,
        *,
        client: Client,
        id: int,
        callback: utils.MaybeAwaitableFunc[[EventT], None],
        event: type[EventT],
    ) -> None:
        self.client: Client = client
        self.id: int = id
        self.callback: utils.MaybeAwaitableFunc[[EventT], None] = callback
        self.event: type[EventT] = event

    def __call__(self, arg: EventT, /) -> utils.MaybeAwaitable[None]:
        return self.callback(arg)

    async def _handle(self, arg: EventT, name: str, /) -> None:
        await self.client._run_callback(self.callback, arg, name)

    def remove(self) -> None:
        """Removes the event subscription."""
        self.client._handlers[self.event][0].pop(self.id, None)


class TemporarySubscription(typing.Generic[EventT]):
    """Represents a temporary event subscription."""

    __slots__ = (
        'client',
        'id',
        'event',
        'future',
        'check',
        'coro',
    )

    def __init__(
        self,
        *,
        client: Client,
        id: int,
        event: type[EventT],
        future: asyncio.Future[EventT],
        check: Callable[[EventT], utils.MaybeAwaitable[bool]],
        coro: Coroutine[typing.Any, typing.Any, EventT],
    ) -> None:
        self.client: Client = client
        self.id: int = id
        self.event: type[EventT] = event
        self.future: asyncio.Future[EventT] = future
        self.check: Callable[[EventT], utils.MaybeAwaitable[bool]] = check
        self.coro: Coroutine[typing.Any, typing.Any, EventT] = coro

    def __await__(self) -> Generator[typing.Any, typing.Any, EventT]:
        return self.coro.__await__()

    async def _handle(self, arg: EventT, name: str, /) -> bool:
        try:
            can = self.check(arg)
            if isawaitable(can):
                can = await can

            if can and not self.future.done():
                self.future.set_result(arg)
            return can
        except Exception as exc:
            try:
                self.future.set_exception(exc)
            except asyncio.InvalidStateError:
                pass
            _L.exception('Checker function (task: %s) raised an exception', name)
            return True

    def cancel(self) -> None:
        """Cancels the subscription."""
        self.future.cancel()
        self.client._handlers[self.event][1].pop(self.id, None)


class TemporarySubscriptionListIterator(typing.Generic[EventT]):
    __slots__ = ('subscription',)

    def __init__(self, *, subscription: TemporarySubscriptionList[EventT]) -> None:
        self.subscription: TemporarySubscriptionList[EventT] = subscription

    async def __anext__(self) -> EventT:
        subscription = self.subscription

        if subscription.exception is not None:
            raise subscription.exception

        if subscription.done.is_set() and subscription.queue.empty():
            raise StopAsyncIteration

        while True:
            index = await subscription.queue.get()

            if subscription.exception is not None:
                raise subscription.exception

            if index >= 0:
                break

        return subscription.result[index]


class TemporarySubscriptionList(typing.Generic[EventT]):
    """Represents a temporary subscription on multiple events."""

    __slots__ = (
        'client',
        'id',
        'event',
        'done',
        'check',
        'result',
        'exception',
        'expected',
        'queue',
    )

    def __init__(
        self,
        *,
        client: Client,
        expected: int,
        id: int,
        event: type[EventT],
        check: Callable[[EventT], utils.MaybeAwaitable[bool]],
    ) -> None:
        self.client: Client = client
        self.id: int = id
        self.event: type[EventT] = event
        self.done: asyncio.Event = asyncio.Event()
        self.check: Callable[[EventT], utils.MaybeAwaitable[bool]] = check
        self.result: list[EventT] = []
        self.exception: typing.Optional[Exception] = None
        self.expected: int = expected

        self.queue: asyncio.Queue[int] = asyncio.Queue(expected)

    async def wait(self) -> list[EventT]:
        if len(self.result) < self.expected:
            await self.done.wait()

            if self.exception is not None:
                raise self.exception

            if len(self.result) < self.expected:
                raise asyncio.TimeoutError('Timed out waiting.')

        return self.result

    def __await__(self) -> Generator[typing.Any, typing.Any, list[EventT]]:
        return self.wait().__await__()

    def __aiter__(self) -> TemporarySubscriptionListIterator[EventT]:
        return TemporarySubscriptionListIterator(subscription=self)

    async def _handle(self, arg: EventT, name: str, /) -> bool:
        try:
            can = self.check(arg)
            if isawaitable(can):
                can = await can

            if can:
                if len(self.result) >= self.expected:
                    self.done.set()
                else:
                    self.result.append(arg)
                    if len(self.result) >= self.expected:
                        self.done.set()
                    self.queue.put_nowait(len(self.result) - 1)

            return self.done.is_set()
        except Exception as exc:
            _L.exception('Checker function (task: %s) raised an exception', name)
            self.exception = exc
            self.done.set()
            self.queue.put_nowait(len(self.result) - 1)
            return True

    def cancel(self) -> None:
        """Cancels the subscription."""

        self.done.set()
        self.client._handlers[self.event][1].pop(self.id, None)


_DEFAULT_HANDLERS = ({}, {})


class Client:
    """A Guilded client.

    Parameters
    ----------
    token: :class:`str`
        The bot token.
    options: Optional[Union[:class:`ClientOptions`, Mapping[:class:`str`, Any]]]
        The cache options. Mappings are passed to :meth:`ClientOptions.from_mapping`.
    http_base: Optional[:class:`str`]
        The base URL for REST requests.
    websocket_base: Optional[:class:`str`]
        The base URL for WebSocket connection.
    max_retries: Optional[:class:`int`]
        How many attempts a ratelimited request gets. Defaults to 3.
    connect_delay: Optional[:class:`float`]
        The initial reconnect delay in seconds. Defaults to 1.
    max_connect_delay: Optional[:class:`float`]
        The maximum reconnect delay in seconds. Defaults to 60.
    http: Optional[Callable[[:class:`Client`, :class:`State`], :class:`HTTPClient`]]
        The factory to create the HTTP client with.
    parser: Optional[Callable[[:class:`Client`, :class:`State`], :class:`Parser`]]
        The factory to create the parser with.
    shard: Optional[Callable[[:class:`Client`, :class:`State`], :class:`Shard`]]
        The factory to create the shard with.
    """

    __slots__ = (
        '_handlers',
        '_i',
        '_state',
        '_token',
        '_types',
        'closed',
        'extra',
    )

    def __init__(
        self,
        *,
        token: str = '',
        options: typing.Optional[typing.Union[ClientOptions, Mapping[str, typing.Any]]] = None,
        http_base: typing.Optional[str] = None,
        websocket_base: typing.Optional[str] = None,
        max_retries: typing.Optional[int] = None,
        connect_delay: typing.Optional[float] = None,
        max_connect_delay: typing.Optional[float] = None,
        http: typing.Optional[Callable[[Client, State], HTTPClient]] = None,
        parser: typing.Optional[Callable[[Client, State], Parser]] = None,
        shard: typing.Optional[Callable[[Client, State], Shard]] = None,
    ) -> None:
        self.closed: bool = True
        # {Type[BaseEvent]: Tuple[{id: EventSubscription}, {id: TemporarySubscription}]}
        self._handlers: dict[
            type[BaseEvent],
            tuple[
                dict[int, EventSubscription[BaseEvent]],
                dict[int, typing.Union[TemporarySubscription[BaseEvent], TemporarySubscriptionList[BaseEvent]]],
            ],
        ] = {}
        # {Type[BaseEvent]: Tuple[Type[BaseEvent], ...]}
        self._types: dict[type[BaseEvent], tuple[type[BaseEvent], ...]] = {}
        self._i = 0

        self.extra = {}

        if options is None:
            options = ClientOptions()
        elif not isinstance(options, ClientOptions):
            options = ClientOptions.from_mapping(options)

        state = State(options=options)
        if parser:
            state.setup(parser=parser(self, state))
        state.setup(
            http=(
                http(self, state)
                if http
                else HTTPClient(
                    token,
                    base=http_base,
                    max_retries=max_retries,
                    session=_session_factory,
                    state=state,
                )
            ),
        )
        self._state: State = state
        state.setup(
            shard=(
                shard(self, state)
                if shard
                else Shard(
                    token,
                    base=websocket_base,
                    connect_delay=connect_delay,
                    max_connect_delay=max_connect_delay,
                    handler=ClientEventHandler(self),
                    session=_session_factory,
                    state=state,
                )
            )
        )
        self._token: str = token

    def _get_i(self) -> int:
        self._i += 1
        return self._i

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException],
        exc_value: typing.Optional[BaseException],
        traceback: typing.Optional[TracebackType],
        /,
    ) -> None:
        await self.close()

    async def on_user_error(self, event: BaseEvent) -> None:
        """Handles user errors that came from handlers.
        You can get current exception being raised via :func:`sys.exc_info`.

        By default, this logs exception.
        """
        _L.exception(
            'One of %s handlers raised an exception',
            event.__class__.__name__,
        )

    async def on_library_error(self, _shard: Shard, kind: str, payload: dict[str, typing.Any], exc: Exception, /) -> None:
        """Handles errors raised while handling events received over WebSocket.

        By default, this logs exception.
        """
        _L.exception('%s handler raised an exception', kind, exc_info=exc)

    async def _run_callback(
        self, callback: Callable[[EventT], utils.MaybeAwaitable[None]], arg: EventT, name: str, /
    ) -> None:
        try:
            r = callback(arg)
            if isawaitable(r):
                await r
        except Exception:
            try:
                r = self.on_user_error(arg)
                if isawaitable(r):
                    await r
            except Exception:
                _L.exception('on_user_error (task: %s) raised an exception', name)

    async def _dispatch(self, types: tuple[type[BaseEvent], ...], event: BaseEvent, name: str, /) -> None:
        for type in types:
            handlers, temporary_handlers = self._handlers.get(type, _DEFAULT_HANDLERS)
            if _L.isEnabledFor(logging.DEBUG):
                _L.debug(
                    'Dispatching %s (%i handlers, originating from %s)',
                    type.__name__,
                    len(handlers),
                    event.__class__.__name__,
                )

            remove = None
            for handler in temporary_handlers.values():
                r = handler._handle(event, name)
                if isawaitable(r):
                    r = await r

                if r:
                    remove = handler.id
                    break

            if remove is not None:
                del temporary_handlers[remove]

            for handler in list(handlers.values()):
                await handler._handle(event, name)

            event_name: typing.Optional[str] = getattr(type, 'event_name', None)
            if event_name:
                handler = getattr(self, 'on_' + event_name, None)
                if handler:
                    await self._run_callback(handler, event, name)

        handler = getattr(self, 'on_event', None)
        if handler:
            await self._run_callback(handler, event, name)

    def dispatch(self, event: BaseEvent, /) -> asyncio.Task[None]:
        """Dispatches a event.

        Handlers run in a new task, scheduled in the order events are dispatched. The event
        is not applied to cache here; WebSocket events are applied before being dispatched.

        Parameters
        ----------
        event: :class:`.BaseEvent`
            The event to dispatch.

        Returns
        -------
        :class:`asyncio.Task`
            The asyncio task.
        """

        et = builtins.type(event)
        try:
            types = self._types[et]
        except KeyError:
            types = self._types[et] = _parents_of(et)

        name = f'pyguild-dispatch-{self._get_i()}'
        return asyncio.create_task(self._dispatch(types, event, name), name=name)

    def subscribe(
        self,
        event: type[EventT],
        /,
        callback: utils.MaybeAwaitableFunc[[EventT], None],
    ) -> EventSubscription[EventT]:
        """Subscribes to event.

        Parameters
        ----------
        event: Type[EventT]
            The type of the event.
        callback: MaybeAwaitableFunc[[EventT], None]
            The callback for the event.
        """
        sub: EventSubscription[EventT] = EventSubscription(
            client=self,
            id=self._get_i(),
            callback=callback,
            event=event,
        )

        # The actual generic of value type is same as key
        try:
            self._handlers[event][0][sub.id] = sub  # type: ignore
        except KeyError:
            self._handlers[event] = ({sub.id: sub}, {})  # type: ignore
        return sub

    def unsubscribe(
        self,
        event: type[EventT],
        callback: typing.Union[EventSubscription[EventT], utils.MaybeAwaitableFunc[[EventT], None]],
        /,
    ) -> list[EventSubscription[EventT]]:
        """Removes every subscription of ``callback`` to the event.

        ``callback`` may be the subscription returned by :meth:`subscribe` or :meth:`listen`,
        or the function it wraps.

        Returns
        -------
        List[:class:`EventSubscription`]
            The removed subscriptions.
        """
        try:
            subscriptions = self._handlers[event][0]
        except KeyError:
            return []

        removed = [
            k for k, subscription in subscriptions.items() if subscription is callback or subscription.callback == callback
        ]
        return [subscriptions.pop(k) for k in removed]  # type: ignore

    def listen(
        self,
        event: typing.Optional[type[EventT]] = None,
        /,
    ) -> Callable[
        [utils.MaybeAwaitableFunc[[EventT], None]],
        EventSubscription[EventT],
    ]:
        """Register an event listener.

        There is alias called :meth:`on`.

        Examples
        --------

        Ping Pong: ::

            @client.listen()
            async def on_message_create(event: pyguild.MessageCreateEvent):
                message = event.message
                if message.content == '!ping':
                    await message.reply('pong!')


            # It returns :class:`EventSubscription`, so you can do ``on_message_create.remove()``

        Parameters
        ----------
        event: Optional[Type[EventT]]
            The event to listen to. If omitted, the annotation of the first callback parameter is used.
        """

        def decorator(callback: utils.MaybeAwaitableFunc[[EventT], None], /) -> EventSubscription[EventT]:
            tmp = event

            if tmp is None:
                parameters = list(signature(callback).parameters)
                if not parameters:
                    raise TypeError('Cannot use listen() with callback that takes no parameters')

                tmp = typing.get_type_hints(callback).get(parameters[0])
                if tmp is None:
                    raise TypeError('Cannot use listen() without event annotation type')

            return self.subscribe(tmp, callback)  # type: ignore

        return decorator

    on = listen

    @typing.overload
    def wait_for(
        self,
        event: type[EventT],
        /,
        *,
        check: typing.Optional[Callable[[EventT], bool]] = None,
        count: typing.Literal[1] = 1,
        timeout: typing.Optional[float] = None,
    ) -> TemporarySubscription[EventT]: ...

    @typing.overload
    def wait_for(
        self,
        event: type[EventT],
        /,
        *,
        check: typing.Optional[Callable[[EventT], bool]] = None,
        count: int = 1,
        timeout: typing.Optional[float] = None,
    ) -> TemporarySubscriptionList[EventT]: ...

    def wait_for(
        self,
        event: type[EventT],
        /,
        *,
        check: typing.Optional[Callable[[EventT], bool]] = None,
        count: int = 1,
        timeout: typing.Optional[float] = None,
    ) -> typing.Union[TemporarySubscription[EventT], TemporarySubscriptionList[EventT]]:
        """|coro|

        Waits for a WebSocket event to be dispatched.

        This function returns the **first event that meets the requirements**.

        Examples
        --------

        Waiting for a user reply: ::

            @client.on(pyguild.MessageCreateEvent)
            async def on_message_create(event):
                message = event.message
                if message.content.startswith('$greet'):
                    channel = message.channel
                    await channel.send('Say hello!')

                    def check(event):
                        return event.message.content == 'hello' and event.message.channel.id == channel.id

                    event = await client.wait_for(pyguild.MessageCreateEvent, check=check)
                    await channel.send(f'Hello {event.message.author}!')

        Parameters
        ------------
        event: Type[EventT]
            The event to wait for.
        check: Optional[Callable[[EventT], :class:`bool`]]
            A predicate to check what to wait for.
        count: :class:`int`
            How many events to wait for. Defaults to 1.
        timeout: Optional[:class:`float`]
            The number of seconds to wait before timing out and raising
            :exc:`asyncio.TimeoutError`.

        Raises
        -------
        TypeError
            If ``count`` parameter was negative or zero.
        asyncio.TimeoutError
            If a timeout is provided and it was reached.

        Returns
        --------
        Union[:class:`TemporarySubscription`, :class:`TemporarySubscriptionList`]
            The subscription. This can be ``await``'ed.
        """

        if count <= 0:
            raise TypeError('Cannot wait for zero events')

        if check is None:
            check = lambda _, /: True

        if count > 1:
            sub = TemporarySubscriptionList(
                client=self,
                expected=count,
                id=self._get_i(),
                event=event,
                check=check,
            )
        else:
            future = asyncio.get_running_loop().create_future()

            coro = asyncio.wait_for(future, timeout=timeout)
            sub = TemporarySubscription(
                client=self,
                id=self._get_i(),
                event=event,
                future=future,
                check=check,
                coro=coro,
            )

        try:
            self._handlers[event][1][sub.id] = sub  # type: ignore
        except KeyError:
            self._handlers[event] = ({}, {sub.id: sub})  # type: ignore
        return sub

    def all_subscriptions(self) -> list[EventSubscription[BaseEvent]]:
        """List[EventSubscription[:class:`BaseEvent`]]: Returns all event subscriptions."""
        ret = []
        for _, v in self._handlers.items():
            ret.extend(v[0].values())
        return ret

    def subscriptions_for(
        self, event: type[EventT], /, *, include_subclasses: bool = False
    ) -> list[EventSubscription[EventT]]:
        """List[EventSubscription[EventT]]: Returns the subscriptions for event.

        Parameters
        ----------
        event: Type[EventT]
            The event to get subscriptions to.
        include_subclasses: class:`bool`
            Whether to include subclassed events. Defaults to ``False``.
        """
        if include_subclasses:
            ret = []
            for k, v in self._handlers.items():
                if issubclass(k, event):
                    ret.extend(v[0].values())
            return ret

        try:
            return list(self._handlers[event][0].values())  # type: ignore
        except KeyError:
            return []

    @property
    def me(self) -> typing.Optional[User]:
        """Optional[:class:`.User`]: The bot user, available since :class:`ReadyEvent`."""
        return self._state.me

    @property
    def http(self) -> HTTPClient:
        """:class:`HTTPClient`: The HTTP client."""
        return self._state.http

    @property
    def shard(self) -> Shard:
        """:class:`Shard`: The Guilded WebSocket client."""
        return self._state.shard

    @property
    def state(self) -> State:
        """:class:`State`: The controller for all entities and components."""
        return self._state

    @property
    def options(self) -> ClientOptions:
        """:class:`ClientOptions`: The cache options."""
        return self._state.options

    @property
    def channels(self) -> ChannelManager:
        """:class:`.ChannelManager`: The channel manager."""
        return self._state.channels

    @property
    def servers(self) -> ServerManager:
        """:class:`.ServerManager`: The server manager."""
        return self._state.servers

    @property
    def users(self) -> UserManager:
        """:class:`.UserManager`: The user manager."""
        return self._state.users

    @property
    def ready(self) -> bool:
        """:class:`bool`: Whether the client is connected to Guilded."""
        return self._state.shard.ready

    @property
    def ready_at(self) -> typing.Optional[datetime]:
        """Optional[:class:`~datetime.datetime`]: When the current connection was established."""
        return self._state.shard.connected_at

    @property
    def uptime(self) -> typing.Optional[timedelta]:
        """Optional[:class:`~datetime.timedelta`]: How long the client has been connected."""
        return self._state.shard.uptime

    async def start(self) -> None:
        """|coro|

        Starts up the client. Returns once the client is closed.
        """
        self.closed = False
        await self._state.shard.connect()

    async def close(self, *, http: bool = True, cleanup_websocket: bool = True) -> None:
        """|coro|

        Closes all HTTP sessions, and websocket connections. Dispatches :class:`DisconnectEvent`
        if the client was started.
        """

        self.closed = True

        await self.shard.close()
        if cleanup_websocket:
            await self.shard.cleanup()

        if http:
            await self.http.cleanup()

    async def logout(self) -> None:
        """|coro|

        Closes the client and drops the credentials. :meth:`run` or :meth:`login` must be given
        a token before starting again.
        """
        await self.close()
        self.http.with_credentials('')
        self.shard.with_credentials('')
        self._token = ''

    def login(self, token: str, /) -> None:
        """Replaces the credentials used by the client."""
        self.http.with_credentials(token)
        self.shard.with_credentials(token)
        self._token = token

    def run(
        self,
        token: str = '',
        *,
        log_handler: UndefinedOr[typing.Optional[logging.Handler]] = UNDEFINED,
        log_formatter: UndefinedOr[logging.Formatter] = UNDEFINED,
        log_level: UndefinedOr[int] = UNDEFINED,
        root_logger: bool = False,
        asyncio_debug: bool = False,
        cleanup: bool = True,
    ) -> None:
        """A blocking call that abstracts away the event loop
        initialisation from you.

        If you want more control over the event loop then this
        function should not be used. Use :meth:`.start` coroutine.

        This function also sets up the logging library to make it easier
        for beginners to know what is going on with the library. For more
        advanced users, this can be disabled by passing ``None`` to
        the ``log_handler`` parameter.

        Parameters
        -----------
        token: :class:`str`
            The bot token. Defaults to the one passed to the constructor.
        log_handler: Optional[:class:`logging.Handler`]
            The log handler to use for the library's logger. If this is ``None``
            then the library will not set up anything logging related.

            The default log handler if not provided is :class:`logging.StreamHandler`.
        log_formatter: :class:`logging.Formatter`
            The formatter to use with the given log handler. If not provided then it
            defaults to a color based logging formatter (if available).
        log_level: :class:`int`
            The default log level for the library's logger. Defaults to ``logging.INFO``.
        root_logger: :class:`bool`
            Whether to set up the root logger rather than the library logger.
            Defaults to ``False``.
        asyncio_debug: :class:`bool`
            Whether to run with asyncio debug mode enabled or not.
            Defaults to ``False``.
        cleanup: :class:`bool`
            Whether to close aiohttp sessions or not.
            Defaults to ``True``.
        """

        if token:
            self.login(token)
        elif not self._token:
            raise TypeError('No token was provided')

        async def runner():
            await self.start()
            if cleanup and not self.closed:
                await self.close()
            self.closed = True

        if log_handler is not None:
            utils.setup_logging(
                handler=log_handler,
                formatter=log_formatter,
                level=log_level,
                root=root_logger,
            )

        try:
            asyncio.run(runner(), debug=asyncio_debug)
        except KeyboardInterrupt:
            # `asyncio.run` handles the loop cleanup
            return

    if typing.TYPE_CHECKING:

        def on_event(self, arg: BaseEvent, /) -> utils.MaybeAwaitable[None]: ...

        def on_ready(self, arg: ReadyEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_disconnect(self, arg: DisconnectEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_channel_create(self, arg: ChannelCreateEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_channel_edit(self, arg: ChannelEditEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_channel_delete(self, arg: ChannelDeleteEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_message_create(self, arg: MessageCreateEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_message_edit(self, arg: MessageEditEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_message_delete(self, arg: MessageDeleteEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_doc_create(self, arg: DocCreateEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_doc_edit(self, arg: DocEditEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_doc_delete(self, arg: DocDeleteEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_list_item_create(self, arg: ListItemCreateEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_list_item_edit(self, arg: ListItemEditEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_list_item_complete(self, arg: ListItemCompleteEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_list_item_uncomplete(self, arg: ListItemUncompleteEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_list_item_delete(self, arg: ListItemDeleteEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_member_join(self, arg: MemberJoinEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_member_edit(self, arg: MemberEditEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_member_remove(self, arg: MemberRemoveEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_ban_create(self, arg: BanCreateEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_ban_delete(self, arg: BanDeleteEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_webhook_create(self, arg: WebhookCreateEvent, /) -> utils.MaybeAwaitable[None]: ...
        def on_webhook_edit(self, arg: WebhookEditEvent, /) -> utils.MaybeAwaitable[None]: ...


__all__ = (
    'ClientEventHandler',
    'EventSubscription',
    'TemporarySubscription',
    'TemporarySubscriptionListIterator',
    'TemporarySubscriptionList',
    'Client',
)
