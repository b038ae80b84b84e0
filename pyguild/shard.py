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

from abc import ABC, abstractmethod
import aiohttp
import asyncio
from inspect import isawaitable
import logging
import typing

from . import utils
from .core import __version__ as version
from .enums import ConnectionState
from .errors import PyguildError, AuthenticationError, ShardClosedError

if typing.TYPE_CHECKING:
    from datetime import datetime, timedelta

    from . import raw
    from .state import State

_L = logging.getLogger(__name__)

# Opcodes sent by Guilded
OP_EVENT: typing.Final[int] = 0
OP_WELCOME: typing.Final[int] = 1
OP_RESUME: typing.Final[int] = 2
OP_ERROR: typing.Final[int] = 8
OP_INVALID_CURSOR: typing.Final[int] = 9


class EventHandler(ABC):
    """A handler for shard events."""

    __slots__ = ()

    @abstractmethod
    def handle_raw(self, shard: Shard, kind: str, payload: dict[str, typing.Any], /) -> utils.MaybeAwaitable[None]:
        """Handles dispatched event.

        The shard does not read the next frame until the returned awaitable completes.

        Parameters
        ----------
        shard: :class:`Shard`
            The shard that received the event.
        kind: :class:`str`
            The event kind, such as ``'ChatMessageCreated'``.
        payload: Dict[:class:`str`, Any]
            The received event payload.
        """
        ...

    def handle_connect(self, shard: Shard, payload: raw.WelcomeData, /) -> utils.MaybeAwaitable[None]:
        """Called when Guilded accepted the connection and sent the welcome frame.

        Parameters
        ----------
        payload: Dict[:class:`str`, Any]
            The welcome payload, containing the bot user.
        """
        ...

    def handle_disconnect(self, shard: Shard, /) -> utils.MaybeAwaitable[None]:
        """Called when the shard was closed explicitly with :meth:`Shard.close`.

        Unexpected disconnects are not reported here, as the shard reconnects by itself.
        """
        ...


DEFAULT_SHARD_USER_AGENT = f'pyguild Shard client ({version})'


class Shard:
    """Implements Guilded WebSocket client.

    Attributes
    ----------
    base: :class:`str`
        The base WebSocket URL.
    connect_delay: :class:`float`
        The initial duration in seconds to sleep before reconnecting. Doubled on every
        consecutive failed attempt. Defaults to 1.
    connected_at: Optional[:class:`~datetime.datetime`]
        When the current connection was established.
    cursor: Optional[:class:`str`]
        The ID of the last received event. Sent on reconnect so Guilded replays missed events.
    handler: Optional[:class:`.EventHandler`]
        The handler that receives events. Defaults to ``None`` if not provided.
    heartbeat_interval: Optional[:class:`float`]
        The interval in seconds between pings, as requested by Guilded.
    max_connect_delay: :class:`float`
        The maximum duration in seconds to sleep between reconnect attempts. Defaults to 60.
    status: :class:`.ConnectionState`
        The connection state.
    state: :class:`State`
        The state.
    token: :class:`str`
        The shard token. May be empty if not started.
    user_agent: :class:`str`
        The HTTP user agent used when connecting to WebSocket.
    """

    _socket: typing.Optional[aiohttp.ClientWebSocketResponse]

    __slots__ = (
        '_close_event',
        '_closed',
        '_heartbeat_task',
        '_session',
        '_session_factory',
        '_socket',
        'base',
        'connect_delay',
        'connected_at',
        'cursor',
        'handler',
        'heartbeat_interval',
        'max_connect_delay',
        'state',
        'status',
        'token',
        'user_agent',
    )

    def __init__(
        self,
        token: str,
        *,
        base: typing.Optional[str] = None,
        connect_delay: typing.Optional[float] = None,
        max_connect_delay: typing.Optional[float] = None,
        handler: typing.Optional[EventHandler] = None,
        session: typing.Union[utils.MaybeAwaitableFunc[[Shard], aiohttp.ClientSession], aiohttp.ClientSession],
        state: State,
        user_agent: typing.Optional[str] = None,
    ) -> None:
        self._close_event: asyncio.Event = asyncio.Event()
        self._closed: bool = True
        self._heartbeat_task: typing.Optional[asyncio.Task[None]] = None
        self._session = session
        self._session_factory: typing.Optional[utils.MaybeAwaitableFunc[[Shard], aiohttp.ClientSession]] = (
            session if callable(session) else None
        )
        self._socket = None
        self.base: str = base or 'wss://www.guilded.gg/websocket/v1'
        self.connect_delay: float = 1.0 if connect_delay is None else connect_delay
        self.connected_at: typing.Optional[datetime] = None
        self.cursor: typing.Optional[str] = None
        self.handler: typing.Optional[EventHandler] = handler
        self.heartbeat_interval: typing.Optional[float] = None
        self.max_connect_delay: float = 60.0 if max_connect_delay is None else max_connect_delay
        self.state: State = state
        self.status: ConnectionState = ConnectionState.disconnected
        self.token: str = token
        self.user_agent: str = user_agent or DEFAULT_SHARD_USER_AGENT

    def is_closed(self) -> bool:
        return self._closed and not self._socket

    @property
    def ready(self) -> bool:
        """:class:`bool`: Whether the shard is connected and received the welcome frame."""
        return self.status is ConnectionState.connected

    @property
    def uptime(self) -> typing.Optional[timedelta]:
        """Optional[:class:`~datetime.timedelta`]: How long the current connection has been up."""
        if self.connected_at is None:
            return None
        return utils.utcnow() - self.connected_at

    @property
    def socket(self) -> aiohttp.ClientWebSocketResponse:
        """:class:`aiohttp.ClientWebSocketResponse`: The current WebSocket connection.

        Raises
        ------
        :class:`ShardClosedError`
            The shard is not connected.
        """
        if self._socket is None:
            raise ShardClosedError('No websocket')
        return self._socket

    def with_credentials(self, token: str, /) -> None:
        """Modifies WebSocket credentials.

        Parameters
        ----------
        token: :class:`str`
            The bot token.
        """
        self.token = token

    async def cleanup(self) -> None:
        """|coro|

        Closes the aiohttp session.

        If the session was created by a factory, the next :meth:`connect` creates a new one.
        """
        if not callable(self._session):
            await self._session.close()
        if self._session_factory is not None:
            self._session = self._session_factory

    async def close(self) -> None:
        """|coro|

        Closes the connection to Guilded and stops reconnecting.

        Calling this more than once, or before :meth:`connect`, has no effect. A pending reconnect
        is cancelled.
        """
        if self._closed:
            return
        self._closed = True
        self._close_event.set()

        socket = self._socket
        if socket is not None and not socket.closed:
            await socket.close(code=1000)

        self.status = ConnectionState.disconnected
        self.connected_at = None

        if self.handler:
            r = self.handler.handle_disconnect(self)
            if isawaitable(r):
                await r

    def get_headers(self) -> dict[str, str]:
        """Dict[:class:`str`, :class:`str`]: The headers to use when connecting to WebSocket."""
        headers = {
            'Authorization': f'Bearer {self.token}',
            'User-Agent': self.user_agent,
        }
        if self.cursor:
            headers['guilded-last-message-id'] = self.cursor
        return headers

    def get_delay(self, attempt: int, /) -> float:
        """:class:`float`: The duration in seconds to sleep before the given reconnect attempt."""
        return min(self.connect_delay * 2**attempt, self.max_connect_delay)

    async def ws_connect(
        self, session: aiohttp.ClientSession, url: str, /, *, headers: dict[str, str]
    ) -> aiohttp.ClientWebSocketResponse:
        """|coro|

        Start a WebSocket connection.

        Parameters
        ----------
        session: :class:`aiohttp.ClientSession`
            The session to use when connecting.
        url: :class:`str`
            The URL to connect to.
        headers: Dict[:class:`str`, :class:`str`]
            The HTTP headers.

        Returns
        -------
        :class:`aiohttp.ClientWebSocketResponse`
            The WebSocket connection.
        """
        return await session.ws_connect(url, headers=headers)

    async def _socket_connect(self) -> aiohttp.ClientWebSocketResponse:
        session = self._session
        if callable(session):
            session = await utils.maybe_coroutine(session, self)
            # detect recursion
            if callable(session):
                raise TypeError(f'Expected aiohttp.ClientSession, not {type(session)!r}')
            # Do not call factory on future requests
            self._session = session

        _L.debug('Connecting to %s (cursor: %s)', self.base, self.cursor)
        try:
            return await self.ws_connect(session, self.base, headers=self.get_headers())
        except aiohttp.WSServerHandshakeError as exc:
            _L.debug('Server replied with %i', exc.status)
            if exc.status in (401, 403):
                raise AuthenticationError(exc.status, exc.message) from None
            raise

    async def _sleep(self, delay: float, /) -> None:
        try:
            await asyncio.wait_for(self._close_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def _heartbeat(self, socket: aiohttp.ClientWebSocketResponse, interval: float, /) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await socket.ping()
            except (aiohttp.ClientError, OSError, RuntimeError) as exc:
                _L.debug('Failed to ping: %s', exc)
                return

    def _stop_heartbeat(self) -> None:
        task = self._heartbeat_task
        if task is not None:
            task.cancel()
            self._heartbeat_task = None

    async def connect(self) -> None:
        """|coro|

        Starts the WebSocket lifecycle. Returns only once :meth:`close` is called.

        Unexpected disconnects and failed connection attempts are retried forever, sleeping
        :meth:`get_delay` seconds in between.

        Raises
        ------
        :class:`AuthenticationError`
            Guilded rejected the token.
        """
        if self._socket:
            raise PyguildError('The connection is already open.')

        self._closed = False
        self._close_event.clear()

        attempt = 0
        while not self._closed:
            self.status = ConnectionState.connecting
            try:
                socket = await self._socket_connect()
            except AuthenticationError:
                self.status = ConnectionState.disconnected
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                self.status = ConnectionState.disconnected
                delay = self.get_delay(attempt)
                attempt += 1
                _L.warning('Connection failed (%s), retrying in %.2f seconds', exc, delay)
                await self._sleep(delay)
                continue

            self._socket = socket
            try:
                welcomed = await self._run(socket)
            finally:
                self._stop_heartbeat()
                self._socket = None
                self.status = ConnectionState.disconnected
                self.connected_at = None
                if not socket.closed:
                    try:
                        await socket.close()
                    except Exception as exc:
                        _L.warning('failed to close websocket', exc_info=exc)

            if self._closed:
                break

            if welcomed:
                attempt = 0
            delay = self.get_delay(attempt)
            attempt += 1
            _L.warning('WebSocket closed with %s, reconnecting in %.2f seconds', socket.close_code, delay)
            await self._sleep(delay)

        _L.debug('Shard closed.')

    async def _run(self, socket: aiohttp.ClientWebSocketResponse, /) -> bool:
        welcomed = False
        while not self._closed:
            message = await socket.receive()

            if message.type in (
                aiohttp.WSMsgType.CLOSE,
                aiohttp.WSMsgType.CLOSED,
                aiohttp.WSMsgType.CLOSING,
            ):
                _L.debug('WebSocket closed with %s (closed: %s)', socket.close_code, self._closed)
                break

            if message.type is aiohttp.WSMsgType.ERROR:
                _L.debug('Received WebSocket error: %s', message.data)
                break

            if message.type is not aiohttp.WSMsgType.TEXT:
                _L.debug('Received unknown message type: %s (expected TEXT). Ignoring.', message.type)
                continue

            try:
                payload = utils.from_json(message.data)
            except ValueError as exc:
                _L.warning('Received malformed frame (%s), ignoring: %.200r', exc, message.data)
                continue

            if not isinstance(payload, dict):
                _L.warning('Received non-object frame, ignoring: %.200r', message.data)
                continue

            op = payload.get('op')

            if op == OP_EVENT:
                await self._handle_event(payload)  # type: ignore
            elif op == OP_WELCOME:
                data = payload.get('d')
                if not isinstance(data, dict):
                    _L.warning('Received welcome without data, reconnecting: %.200r', payload)
                    break
                welcomed = True
                await self._handle_welcome(socket, data)  # type: ignore
            elif op == OP_RESUME:
                data = payload.get('d')
                cursor = data.get('lastMessageId') if isinstance(data, dict) else None
                if cursor:
                    self.cursor = cursor
                _L.debug('Resumed (cursor: %s)', self.cursor)
            elif op == OP_INVALID_CURSOR:
                _L.warning('Guilded rejected cursor %s, reconnecting without it.', self.cursor)
                self.cursor = None
                break
            elif op == OP_ERROR:
                _L.warning('Guilded reported an error: %s', payload.get('d'))
                break
            else:
                _L.debug('Received unknown opcode %s: %s', op, payload)
        return welcomed

    async def _handle_welcome(self, socket: aiohttp.ClientWebSocketResponse, payload: raw.WelcomeData, /) -> None:
        _L.debug('Received welcome: %s', payload)

        interval = payload.get('heartbeatIntervalMs')
        if interval:
            self.heartbeat_interval = interval / 1000.0
            self._stop_heartbeat()
            self._heartbeat_task = asyncio.create_task(self._heartbeat(socket, self.heartbeat_interval))

        cursor = payload.get('lastMessageId')
        if cursor:
            self.cursor = cursor

        self.status = ConnectionState.connected
        self.connected_at = utils.utcnow()

        if self.handler:
            r = self.handler.handle_connect(self, payload)
            if isawaitable(r):
                await r

    async def _handle_event(self, payload: raw.EventFrame, /) -> None:
        kind = payload.get('t')
        if not kind:
            _L.debug('Received event without kind: %s', payload)
            return

        _L.debug('Received %s', kind)
        if self.handler is not None:
            r = self.handler.handle_raw(self, kind, payload.get('d') or {})
            if isawaitable(r):
                await r

        cursor = payload.get('s')
        if cursor:
            self.cursor = cursor


__all__ = (
    'OP_EVENT',
    'OP_WELCOME',
    'OP_RESUME',
    'OP_ERROR',
    'OP_INVALID_CURSOR',
    'EventHandler',
    'DEFAULT_SHARD_USER_AGENT',
    'Shard',
)
