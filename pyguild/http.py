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
import asyncio
from datetime import datetime, timedelta
from inspect import isawaitable
import logging
import sys
import typing

import aiohttp
from multidict import CIMultiDict

from . import routes, utils
from .core import (
    UNDEFINED,
    UndefinedOr,
    IDOr,
    resolve_id,
    __version__ as version,
)
from .errors import (
    HTTPException,
    TransportError,
    BadRequest,
    Unauthorized,
    Forbidden,
    NotFound,
    Conflict,
    Ratelimited,
    InternalServerError,
)

if typing.TYPE_CHECKING:
    from collections.abc import Callable

    from . import raw
    from .channel import Channel
    from .doc import Doc
    from .enums import ChannelType
    from .list_item import ListItem
    from .message import Message
    from .server import Server
    from .state import State
    from .user import User
    from .webhook import Webhook


DEFAULT_HTTP_USER_AGENT = (
    f'pyguild ({version}) Python/{sys.version_info[0]}.{sys.version_info[1]} aiohttp/{aiohttp.__version__}'
)


_L = logging.getLogger(__name__)
_STATUS_TO_ERRORS: dict[int, type[HTTPException]] = {
    400: BadRequest,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
    429: Ratelimited,
}


def _error_for(status: int, /) -> type[HTTPException]:
    if status >= 500:
        return InternalServerError
    return _STATUS_TO_ERRORS.get(status, HTTPException)


def _retry_after_of(response: aiohttp.ClientResponse, data: typing.Any, /) -> float:
    # Retry-After is in seconds, the body values are in milliseconds
    header = response.headers.get('Retry-After')
    if header is not None:
        try:
            return max(float(header), 0.0)
        except ValueError:
            pass

    if isinstance(data, dict):
        meta = data.get('meta')
        if isinstance(meta, dict) and isinstance(meta.get('retryAfter'), (int, float)):
            return max(meta['retryAfter'] / 1000.0, 0.0)
        if isinstance(data.get('retry_after'), (int, float)):
            return max(data['retry_after'] / 1000.0, 0.0)

    return 1.0


def _iso(value: typing.Union[datetime, str], /) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class RateLimit(ABC):
    __slots__ = ()

    bucket: str
    remaining: int

    @abstractmethod
    async def block(self) -> None:
        """If necessary, this method must calculate delay and sleep."""
        ...

    @abstractmethod
    def is_expired(self) -> bool:
        """:class:`bool`: Whether the ratelimit is expired."""
        ...

    @abstractmethod
    def on_response(self, route: routes.CompiledRoute, response: aiohttp.ClientResponse, /) -> None:
        """Called when any response from Guilded API is received on this bucket."""
        ...

    @abstractmethod
    def exhaust(self, retry_after: float, /) -> None:
        """Marks the bucket as empty for the given amount of seconds."""
        ...


class RateLimitBlocker(ABC):
    __slots__ = ()

    async def increment(self) -> None:
        """Increments pending requests counter."""
        pass

    async def decrement(self) -> None:
        """Decrements pending requests counter."""
        pass


class RateLimiter(ABC):
    __slots__ = ()

    @abstractmethod
    def fetch_ratelimit_for(self, route: routes.CompiledRoute, path: str, /) -> typing.Optional[RateLimit]:
        """Optional[:class:`.RateLimit`]: Must return ratelimit information, if available."""
        ...

    @abstractmethod
    def fetch_blocker_for(self, route: routes.CompiledRoute, path: str, /) -> RateLimitBlocker:
        """:class:`.RateLimitBlocker`: Returns request blocker."""
        ...

    @abstractmethod
    async def on_response(self, route: routes.CompiledRoute, path: str, response: aiohttp.ClientResponse, /) -> None:
        """Called when any response from Guilded API is received.

        .. note::
            This is always called, even when request fails for other reasons like failed validation,
            invalid token, something not found, etc.
        """
        ...

    @abstractmethod
    def on_ratelimited(self, route: routes.CompiledRoute, path: str, retry_after: float, /) -> None:
        """Called when Guilded responded with 429 on the route.

        Parameters
        ----------
        route: :class:`~routes.CompiledRoute`
            The route.
        path: :class:`str`
            The requested path.
        retry_after: :class:`float`
            The duration in seconds to wait until the ratelimit expires.
        """
        ...

    def on_request_done(self, route: routes.CompiledRoute, path: str, blocker: RateLimitBlocker, /) -> None:
        """Called after a request released its blocker. Does nothing by default."""
        pass


class DefaultRateLimit(RateLimit):
    __slots__ = (
        'bucket',
        'remaining',
        '_expires_at',
    )

    def __init__(self, bucket: str, /, *, remaining: int, reset_after: float) -> None:
        self.bucket: str = bucket
        self.remaining: int = remaining
        self._expires_at: datetime = utils.utcnow() + timedelta(seconds=reset_after)

    @utils.copy_doc(RateLimit.block)
    async def block(self) -> None:
        if self.remaining > 0:
            self.remaining -= 1
            return

        delay = (self._expires_at - utils.utcnow()).total_seconds()
        if delay > 0:
            _L.info('Bucket %s is ratelimited locally for %.4f; sleeping', self.bucket, delay)
            await asyncio.sleep(delay)
        else:
            _L.debug('Bucket %s expired.', self.bucket)

    @utils.copy_doc(RateLimit.is_expired)
    def is_expired(self) -> bool:
        return (self._expires_at - utils.utcnow()).total_seconds() <= 0

    @utils.copy_doc(RateLimit.on_response)
    def on_response(self, route: routes.CompiledRoute, response: aiohttp.ClientResponse, /) -> None:
        headers = response.headers
        try:
            remaining = int(headers['x-ratelimit-remaining'])
            reset_after = float(headers['x-ratelimit-reset-after'])
        except (KeyError, ValueError):
            return
        self.remaining = remaining
        self._expires_at = utils.utcnow() + timedelta(seconds=reset_after)

    @utils.copy_doc(RateLimit.exhaust)
    def exhaust(self, retry_after: float, /) -> None:
        self.remaining = 0
        self._expires_at = utils.utcnow() + timedelta(seconds=retry_after)


class DefaultRateLimitBlocker(RateLimitBlocker):
    __slots__ = ('_lock', 'pending')

    def __init__(self) -> None:
        self._lock: asyncio.Lock = asyncio.Lock()
        # Requests holding or waiting for the lock.
        self.pending: int = 0

    @utils.copy_doc(RateLimitBlocker.increment)
    async def increment(self) -> None:
        self.pending += 1
        try:
            await self._lock.acquire()
        except BaseException:
            self.pending -= 1
            raise

    @utils.copy_doc(RateLimitBlocker.decrement)
    async def decrement(self) -> None:
        self._lock.release()
        self.pending -= 1


class _NoopRateLimitBlocker(RateLimitBlocker):
    __slots__ = ()

    async def increment(self) -> None:
        pass

    async def decrement(self) -> None:
        pass


class DefaultRateLimiter(RateLimiter):
    """The default ratelimiter.

    Requests are grouped in buckets by their route's ratelimit key. Within a bucket
    requests are sent one at a time, in the order they were submitted; distinct
    buckets never wait on each other.
    """

    __slots__ = (
        '_no_concurrent_block',
        '_no_expired_ratelimit_remove',
        '_noop_blocker',
        '_pending_requests',
        '_ratelimits',
    )

    def __init__(
        self,
        *,
        no_concurrent_block: bool = False,
        no_expired_ratelimit_remove: bool = False,
    ) -> None:
        self._no_concurrent_block: bool = no_concurrent_block
        self._no_expired_ratelimit_remove: bool = no_expired_ratelimit_remove
        self._noop_blocker: RateLimitBlocker = _NoopRateLimitBlocker()
        self._pending_requests: dict[str, RateLimitBlocker] = {}
        self._ratelimits: dict[str, RateLimit] = {}

    def get_ratelimit_key_for(self, route: routes.CompiledRoute, /) -> str:
        """Gets ratelimit key for this compiled route.

        By default this just calls :meth:`routes.CompiledRoute.build_ratelimit_key`.

        Parameters
        ----------
        route: :class:`~routes.CompiledRoute`
            The route to fetch ratelimit key for.

        Returns
        -------
        :class:`str`
            The ratelimit key.
        """
        return route.build_ratelimit_key()

    @utils.copy_doc(RateLimiter.fetch_ratelimit_for)
    def fetch_ratelimit_for(self, route: routes.CompiledRoute, path: str, /) -> typing.Optional[RateLimit]:
        if not self._no_expired_ratelimit_remove:
            self.try_remove_expired_ratelimits()
        return self._ratelimits.get(self.get_ratelimit_key_for(route))

    @utils.copy_doc(RateLimiter.fetch_blocker_for)
    def fetch_blocker_for(self, route: routes.CompiledRoute, path: str, /) -> RateLimitBlocker:
        if self._no_concurrent_block:
            return self._noop_blocker

        key = self.get_ratelimit_key_for(route)
        try:
            return self._pending_requests[key]
        except KeyError:
            blocker = DefaultRateLimitBlocker()
            self._pending_requests[key] = blocker
            return blocker

    @utils.copy_doc(RateLimiter.on_request_done)
    def on_request_done(self, route: routes.CompiledRoute, path: str, blocker: RateLimitBlocker, /) -> None:
        if isinstance(blocker, DefaultRateLimitBlocker) and not blocker.pending:
            key = self.get_ratelimit_key_for(route)
            if self._pending_requests.get(key) is blocker:
                del self._pending_requests[key]

    @utils.copy_doc(RateLimiter.on_response)
    async def on_response(self, route: routes.CompiledRoute, path: str, response: aiohttp.ClientResponse, /) -> None:
        headers = response.headers
        key = self.get_ratelimit_key_for(route)

        try:
            ratelimit = self._ratelimits[key]
        except KeyError:
            try:
                remaining = int(headers['x-ratelimit-remaining'])
                reset_after = float(headers['x-ratelimit-reset-after'])
            except (KeyError, ValueError):
                return

            _L.debug('%s %s found initial bucket: %s.', route.route.method, path, key)
            self._ratelimits[key] = DefaultRateLimit(key, remaining=remaining, reset_after=reset_after)
        else:
            ratelimit.on_response(route, response)

    @utils.copy_doc(RateLimiter.on_ratelimited)
    def on_ratelimited(self, route: routes.CompiledRoute, path: str, retry_after: float, /) -> None:
        key = self.get_ratelimit_key_for(route)
        try:
            ratelimit = self._ratelimits[key]
        except KeyError:
            self._ratelimits[key] = DefaultRateLimit(key, remaining=0, reset_after=retry_after)
        else:
            ratelimit.exhaust(retry_after)

    def try_remove_expired_ratelimits(self) -> None:
        """Tries to remove expired ratelimits."""
        if not self._ratelimits:
            return

        expired = [k for k, v in self._ratelimits.items() if v.is_expired()]
        for key in expired:
            del self._ratelimits[key]


class HTTPClient:
    """Represents an HTTP client sending HTTP requests to the Guilded API.

    The per-route methods return raw payloads; managers turn them into entities.

    Attributes
    ----------
    max_retries: :class:`int`
        How many attempts a ratelimited request gets before :class:`Ratelimited` is raised.
    rate_limiter: Optional[:class:`RateLimiter`]
        The rate limiter in use.
    state: :class:`State`
        The state.
    token: :class:`str`
        The token in use. May be empty if not started or logged out.
    user_agent: :class:`str`
        The HTTP user agent used when making requests.
    """

    __slots__ = (
        '_base',
        '_session',
        '_session_factory',
        'max_retries',
        'rate_limiter',
        'state',
        'token',
        'user_agent',
    )

    def __init__(
        self,
        token: typing.Optional[str] = None,
        *,
        base: typing.Optional[str] = None,
        max_retries: typing.Optional[int] = None,
        rate_limiter: UndefinedOr[
            typing.Optional[typing.Union[Callable[[HTTPClient], typing.Optional[RateLimiter]], RateLimiter]]
        ] = UNDEFINED,
        state: State,
        session: typing.Union[utils.MaybeAwaitableFunc[[HTTPClient], aiohttp.ClientSession], aiohttp.ClientSession],
        user_agent: typing.Optional[str] = None,
    ) -> None:
        if base is None:
            base = 'https://www.guilded.gg/api/v1'
        self._base: str = base.rstrip('/')
        self._session: typing.Union[
            utils.MaybeAwaitableFunc[[HTTPClient], aiohttp.ClientSession], aiohttp.ClientSession
        ] = session
        self._session_factory: typing.Optional[utils.MaybeAwaitableFunc[[HTTPClient], aiohttp.ClientSession]] = (
            session if callable(session) else None
        )
        self.max_retries: int = max_retries or 3

        if rate_limiter is UNDEFINED:
            self.rate_limiter: typing.Optional[RateLimiter] = DefaultRateLimiter()
        elif callable(rate_limiter):
            self.rate_limiter = rate_limiter(self)
        else:
            self.rate_limiter = rate_limiter

        self.state: State = state
        self.token: str = token or ''
        self.user_agent: str = user_agent or DEFAULT_HTTP_USER_AGENT

    @property
    def base(self) -> str:
        """:class:`str`: The base URL used for API requests."""
        return self._base

    def with_credentials(self, token: str, /) -> None:
        """Modifies HTTP client credentials.

        Parameters
        ----------
        token: :class:`str`
            The bot token. Pass an empty string to drop the credentials.
        """
        self.token = token

    def add_headers(
        self,
        headers: CIMultiDict[typing.Any],
        route: routes.CompiledRoute,
        /,
        *,
        accept_json: bool = True,
        json_body: bool = False,
        token: UndefinedOr[typing.Optional[str]] = UNDEFINED,
        user_agent: UndefinedOr[typing.Optional[str]] = UNDEFINED,
    ) -> utils.MaybeAwaitable[None]:
        if accept_json:
            headers['Accept'] = 'application/json'

        if json_body:
            headers['Content-type'] = 'application/json'

        if token is UNDEFINED:
            token = self.token

        if token:
            headers['Authorization'] = f'Bearer {token}'

        if user_agent is UNDEFINED:
            user_agent = self.user_agent

        if user_agent is not None:
            headers['User-Agent'] = user_agent

    async def send_request(
        self,
        session: aiohttp.ClientSession,
        /,
        *,
        method: str,
        url: str,
        headers: CIMultiDict[typing.Any],
        **kwargs,
    ) -> aiohttp.ClientResponse:
        return await session.request(
            method,
            url,
            headers=headers,
            **kwargs,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        session = self._session
        if callable(session):
            session = await utils.maybe_coroutine(session, self)
            # detect recursion
            if callable(session):
                raise TypeError(f'Expected aiohttp.ClientSession, not {type(session)!r}')
            # Do not call factory on future requests
            self._session = session
        return session

    async def raw_request(
        self,
        route: routes.CompiledRoute,
        *,
        accept_json: bool = True,
        json: UndefinedOr[typing.Any] = UNDEFINED,
        token: UndefinedOr[typing.Optional[str]] = UNDEFINED,
        user_agent: UndefinedOr[str] = UNDEFINED,
        **kwargs,
    ) -> aiohttp.ClientResponse:
        """|coro|

        Perform a HTTP request, with ratelimiting and errors handling.

        The request holds its bucket for its whole lifetime, including the time spent
        waiting out 429 responses, so that requests on one bucket complete in the order
        they were submitted.

        Parameters
        ----------
        route: :class:`~routes.CompiledRoute`
            The route.
        accept_json: :class:`bool`
            Whether to explicitly receive JSON or not. Defaults to ``True``.
        json: UndefinedOr[typing.Any]
            The JSON payload to pass in.
        token: UndefinedOr[Optional[:class:`str`]]
            The token to use when requesting the route.
        user_agent: UndefinedOr[:class:`str`]
            The user agent to use for HTTP request. Defaults to :attr:`.user_agent`.

        Raises
        ------
        :class:`TransportError`
            The request could not reach Guilded.
        :class:`Ratelimited`
            The request was still ratelimited after :attr:`max_retries` attempts.
        :class:`HTTPException`
            Guilded responded with an error.

        Returns
        -------
        :class:`aiohttp.ClientResponse`
            The aiohttp response.
        """
        headers: CIMultiDict[str]

        try:
            headers = CIMultiDict(kwargs.pop('headers'))
        except KeyError:
            headers = CIMultiDict()

        tmp = self.add_headers(
            headers,
            route,
            accept_json=accept_json,
            json_body=json is not UNDEFINED,
            token=token,
            user_agent=user_agent,
        )
        if isawaitable(tmp):
            await tmp

        method = route.route.method
        path = route.build()
        url = self._base + path

        if json is not UNDEFINED:
            kwargs['data'] = utils.to_json(json)

        rate_limiter = self.rate_limiter
        blocker: typing.Optional[RateLimitBlocker] = None
        if rate_limiter:
            blocker = rate_limiter.fetch_blocker_for(route, path)
            await blocker.increment()

        retries = 0
        try:
            while True:
                if rate_limiter:
                    rate_limit = rate_limiter.fetch_ratelimit_for(route, path)
                    if rate_limit:
                        await rate_limit.block()

                _L.debug('Sending request to %s %s with %s', method, path, kwargs.get('data'))

                session = await self._get_session()
                try:
                    response = await self.send_request(
                        session,
                        method=method,
                        url=url,
                        headers=headers,
                        **kwargs,
                    )
                except (aiohttp.ClientConnectionError, asyncio.TimeoutError, OSError) as exc:
                    raise TransportError(method, url, exc) from exc

                if rate_limiter:
                    await rate_limiter.on_response(route, path, response)

                if response.status < 400:
                    return response

                _L.debug('%s %s has returned %s', method, path, response.status)
                data = await utils._json_or_text(response)

                if response.status == 429:
                    retry_after = _retry_after_of(response, data)
                    retries += 1
                    if retries >= self.max_retries:
                        raise Ratelimited(response, data, retry_after=retry_after)

                    if rate_limiter:
                        rate_limiter.on_ratelimited(route, path, retry_after)

                    _L.info(
                        'Ratelimited on %s %s, retrying in %.3f seconds (attempt %i/%i)',
                        method,
                        url,
                        retry_after,
                        retries,
                        self.max_retries,
                    )
                    await asyncio.sleep(retry_after)
                    continue

                raise _error_for(response.status)(response, data)
        finally:
            if rate_limiter and blocker:
                await blocker.decrement()
                rate_limiter.on_request_done(route, path, blocker)

    async def request(
        self,
        route: routes.CompiledRoute,
        *,
        accept_json: bool = True,
        json: UndefinedOr[typing.Any] = UNDEFINED,
        log: bool = True,
        token: UndefinedOr[typing.Optional[str]] = UNDEFINED,
        user_agent: UndefinedOr[str] = UNDEFINED,
        **kwargs,
    ) -> typing.Any:
        """|coro|

        Perform a HTTP request, with ratelimiting and errors handling.

        Parameters
        ----------
        route: :class:`~routes.CompiledRoute`
            The route.
        accept_json: :class:`bool`
            Whether to explicitly receive JSON or not. Defaults to ``True``.
        json: UndefinedOr[typing.Any]
            The JSON payload to pass in.
        log: :class:`bool`
            Whether to log successful response or not. This option is intended to avoid console spam caused
            by routes like ``GET /servers/{server_id}/members``. Defaults to ``True``.
        token: UndefinedOr[Optional[:class:`str`]]
            The token to use when requesting the route.
        user_agent: UndefinedOr[:class:`str`]
            The user agent to use for HTTP request. Defaults to :attr:`.user_agent`.

        Raises
        ------
        :class:`TransportError`
            The request could not reach Guilded.
        :class:`HTTPException`
            Something went wrong during request.

        Returns
        -------
        typing.Any
            The parsed JSON response, or ``None`` for empty responses.
        """
        response = await self.raw_request(
            route,
            accept_json=accept_json,
            json=json,
            token=token,
            user_agent=user_agent,
            **kwargs,
        )
        result = await utils._json_or_text(response)

        method = response.request_info.method
        url = response.request_info.url
        if log:
            _L.debug('%s %s has received %s %s', method, url, response.status, result)
        else:
            _L.debug('%s %s has received %s [too large response]', method, url, response.status)

        response.close()
        return result

    async def cleanup(self) -> None:
        """|coro|

        Closes the aiohttp session.

        If the session was created by a factory, the next request creates a new one.
        """
        if not callable(self._session):
            await self._session.close()
        if self._session_factory is not None:
            self._session = self._session_factory

    # Channels

    async def create_channel(
        self,
        *,
        name: str,
        type: ChannelType,
        topic: UndefinedOr[str] = UNDEFINED,
        is_public: UndefinedOr[bool] = UNDEFINED,
        server: UndefinedOr[IDOr[Server]] = UNDEFINED,
        group_id: UndefinedOr[str] = UNDEFINED,
        category_id: UndefinedOr[int] = UNDEFINED,
    ) -> raw.ServerChannel:
        """|coro|

        Creates a channel.

        Parameters
        ----------
        name: :class:`str`
            The channel name. Must be between 1 and 100 characters.
        type: :class:`ChannelType`
            The channel type.
        topic: UndefinedOr[:class:`str`]
            The channel topic.
        is_public: UndefinedOr[:class:`bool`]
            Whether the channel can be accessed by users who are not members of the server.
        server: UndefinedOr[IDOr[:class:`.Server`]]
            The server to create the channel in. Optional if ``group_id`` or ``category_id`` is provided.
        group_id: UndefinedOr[:class:`str`]
            The group to create the channel in.
        category_id: UndefinedOr[:class:`int`]
            The category to create the channel in.

        Raises
        ------
        :class:`Forbidden`
            You do not have permissions to create the channel.

        Returns
        -------
        :class:`dict`
            The created channel payload.
        """
        payload: raw.DataCreateChannel = {'name': name, 'type': type.value}
        if topic is not UNDEFINED:
            payload['topic'] = topic
        if is_public is not UNDEFINED:
            payload['isPublic'] = is_public
        if server is not UNDEFINED:
            payload['serverId'] = resolve_id(server)
        if group_id is not UNDEFINED:
            payload['groupId'] = group_id
        if category_id is not UNDEFINED:
            payload['categoryId'] = category_id

        resp: raw.ChannelResponse = await self.request(routes.CHANNELS_CREATE.compile(), json=payload)
        return resp['channel']

    async def delete_channel(self, channel: IDOr[Channel], /) -> None:
        """|coro|

        Deletes a channel.

        Parameters
        ----------
        channel: IDOr[:class:`.Channel`]
            The channel to delete.
        """
        await self.request(routes.CHANNELS_DELETE.compile(channel_id=resolve_id(channel)))

    async def edit_channel(
        self,
        channel: IDOr[Channel],
        /,
        *,
        name: UndefinedOr[str] = UNDEFINED,
        topic: UndefinedOr[str] = UNDEFINED,
        is_public: UndefinedOr[bool] = UNDEFINED,
    ) -> raw.ServerChannel:
        """|coro|

        Edits a channel.

        Parameters
        ----------
        channel: IDOr[:class:`.Channel`]
            The channel to edit.
        name: UndefinedOr[:class:`str`]
            The new channel name.
        topic: UndefinedOr[:class:`str`]
            The new channel topic.
        is_public: UndefinedOr[:class:`bool`]
            Whether the channel should be public.

        Returns
        -------
        :class:`dict`
            The edited channel payload.
        """
        payload: raw.DataEditChannel = {}
        if name is not UNDEFINED:
            payload['name'] = name
        if topic is not UNDEFINED:
            payload['topic'] = topic
        if is_public is not UNDEFINED:
            payload['isPublic'] = is_public

        resp: raw.ChannelResponse = await self.request(
            routes.CHANNELS_EDIT.compile(channel_id=resolve_id(channel)), json=payload
        )
        return resp['channel']

    async def get_channel(self, channel: IDOr[Channel], /) -> raw.ServerChannel:
        """|coro|

        Retrieves a channel.

        Parameters
        ----------
        channel: IDOr[:class:`.Channel`]
            The channel to retrieve.

        Raises
        ------
        :class:`NotFound`
            The channel was not found.

        Returns
        -------
        :class:`dict`
            The channel payload.
        """
        resp: raw.ChannelResponse = await self.request(routes.CHANNELS_FETCH.compile(channel_id=resolve_id(channel)))
        return resp['channel']

    # Messages

    async def delete_message(self, channel: IDOr[Channel], message: IDOr[Message], /) -> None:
        """|coro|

        Deletes a message.
        """
        await self.request(
            routes.MESSAGES_DELETE.compile(
                channel_id=resolve_id(channel),
                message_id=resolve_id(message),
            )
        )

    async def edit_message(
        self,
        channel: IDOr[Channel],
        message: IDOr[Message],
        /,
        *,
        content: UndefinedOr[str] = UNDEFINED,
        embeds: UndefinedOr[list[raw.Embed]] = UNDEFINED,
    ) -> raw.ChatMessage:
        """|coro|

        Edits a message. Only messages sent by the bot can be edited.

        Parameters
        ----------
        channel: IDOr[:class:`.Channel`]
            The channel the message is in.
        message: IDOr[:class:`.Message`]
            The message to edit.
        content: UndefinedOr[:class:`str`]
            The new content.
        embeds: UndefinedOr[List[Dict[:class:`str`, Any]]]
            The new embeds.

        Returns
        -------
        :class:`dict`
            The edited message payload.
        """
        payload: raw.DataEditMessage = {}
        if content is not UNDEFINED:
            payload['content'] = content
        if embeds is not UNDEFINED:
            payload['embeds'] = embeds

        resp: raw.MessageResponse = await self.request(
            routes.MESSAGES_EDIT.compile(
                channel_id=resolve_id(channel),
                message_id=resolve_id(message),
            ),
            json=payload,
        )
        return resp['message']

    async def get_message(self, channel: IDOr[Channel], message: IDOr[Message], /) -> raw.ChatMessage:
        """|coro|

        Retrieves a message.

        Raises
        ------
        :class:`NotFound`
            The channel or message was not found.
        """
        resp: raw.MessageResponse = await self.request(
            routes.MESSAGES_FETCH.compile(
                channel_id=resolve_id(channel),
                message_id=resolve_id(message),
            )
        )
        return resp['message']

    async def get_messages(
        self,
        channel: IDOr[Channel],
        /,
        *,
        before: typing.Optional[typing.Union[datetime, str]] = None,
        after: typing.Optional[typing.Union[datetime, str]] = None,
        limit: typing.Optional[int] = None,
        include_private: typing.Optional[bool] = None,
    ) -> list[raw.ChatMessage]:
        """|coro|

        Retrieves messages from a channel, newest first.

        Parameters
        ----------
        channel: IDOr[:class:`.Channel`]
            The channel.
        before: Optional[Union[:class:`~datetime.datetime`, :class:`str`]]
            Retrieve messages created before this timestamp.
        after: Optional[Union[:class:`~datetime.datetime`, :class:`str`]]
            Retrieve messages created after this timestamp.
        limit: Optional[:class:`int`]
            The maximum amount of messages, between 1 and 100.
        include_private: Optional[:class:`bool`]
            Whether to include private messages.

        Returns
        -------
        List[:class:`dict`]
            The message payloads.
        """
        params: dict[str, str] = {}
        if before is not None:
            params['before'] = _iso(before)
        if after is not None:
            params['after'] = _iso(after)
        if limit is not None:
            params['limit'] = str(limit)
        if include_private is not None:
            params['includePrivate'] = utils._bool(include_private)

        resp: raw.MessagesResponse = await self.request(
            routes.MESSAGES_FETCH_MANY.compile(channel_id=resolve_id(channel)),
            params=params,
            log=False,
        )
        return resp['messages']

    async def send_message(
        self,
        channel: IDOr[Channel],
        /,
        *,
        content: UndefinedOr[str] = UNDEFINED,
        embeds: UndefinedOr[list[raw.Embed]] = UNDEFINED,
        reply_to: UndefinedOr[list[IDOr[Message]]] = UNDEFINED,
        is_private: UndefinedOr[bool] = UNDEFINED,
        is_silent: UndefinedOr[bool] = UNDEFINED,
    ) -> raw.ChatMessage:
        """|coro|

        Sends a message to a channel.

        Parameters
        ----------
        channel: IDOr[:class:`.Channel`]
            The channel to send the message to.
        content: UndefinedOr[:class:`str`]
            The message content.
        embeds: UndefinedOr[List[Dict[:class:`str`, Any]]]
            The message embeds.
        reply_to: UndefinedOr[List[IDOr[:class:`.Message`]]]
            The messages to reply to. Up to 5.
        is_private: UndefinedOr[:class:`bool`]
            Whether the reply should be visible only to mentioned users.
        is_silent: UndefinedOr[:class:`bool`]
            Whether the reply should not notify the replied users.

        Raises
        ------
        :class:`BadRequest`
            Neither content nor embeds were provided.
        :class:`Forbidden`
            You do not have permissions to send messages in the channel.

        Returns
        -------
        :class:`dict`
            The created message payload.
        """
        payload: raw.DataCreateMessage = {}
        if content is not UNDEFINED:
            payload['content'] = content
        if embeds is not UNDEFINED:
            payload['embeds'] = embeds
        if reply_to is not UNDEFINED:
            payload['replyMessageIds'] = [resolve_id(m) for m in reply_to]
        if is_private is not UNDEFINED:
            payload['isPrivate'] = is_private
        if is_silent is not UNDEFINED:
            payload['isSilent'] = is_silent

        resp: raw.MessageResponse = await self.request(
            routes.MESSAGES_CREATE.compile(channel_id=resolve_id(channel)), json=payload
        )
        return resp['message']

    # Docs

    async def create_doc(self, channel: IDOr[Channel], /, *, title: str, content: str) -> raw.Doc:
        """|coro|

        Creates a doc in a docs channel.
        """
        payload: raw.DataCreateDoc = {'title': title, 'content': content}
        resp: raw.DocResponse = await self.request(
            routes.DOCS_CREATE.compile(channel_id=resolve_id(channel)), json=payload
        )
        return resp['doc']

    async def delete_doc(self, channel: IDOr[Channel], doc: IDOr[Doc], /) -> None:
        await self.request(routes.DOCS_DELETE.compile(channel_id=resolve_id(channel), doc_id=resolve_id(doc)))

    async def edit_doc(self, channel: IDOr[Channel], doc: IDOr[Doc], /, *, title: str, content: str) -> raw.Doc:
        """|coro|

        Edits a doc. Guilded replaces both the title and the content.
        """
        payload: raw.DataCreateDoc = {'title': title, 'content': content}
        resp: raw.DocResponse = await self.request(
            routes.DOCS_EDIT.compile(channel_id=resolve_id(channel), doc_id=resolve_id(doc)), json=payload
        )
        return resp['doc']

    async def get_doc(self, channel: IDOr[Channel], doc: IDOr[Doc], /) -> raw.Doc:
        resp: raw.DocResponse = await self.request(
            routes.DOCS_FETCH.compile(channel_id=resolve_id(channel), doc_id=resolve_id(doc))
        )
        return resp['doc']

    async def get_docs(
        self,
        channel: IDOr[Channel],
        /,
        *,
        before: typing.Optional[typing.Union[datetime, str]] = None,
        limit: typing.Optional[int] = None,
    ) -> list[raw.Doc]:
        """|coro|

        Retrieves docs from a docs channel, newest first.
        """
        params: dict[str, str] = {}
        if before is not None:
            params['before'] = _iso(before)
        if limit is not None:
            params['limit'] = str(limit)

        resp: raw.DocsResponse = await self.request(
            routes.DOCS_FETCH_MANY.compile(channel_id=resolve_id(channel)),
            params=params,
            log=False,
        )
        return resp['docs']

    # List items

    async def complete_list_item(self, channel: IDOr[Channel], list_item: IDOr[ListItem], /) -> None:
        """|coro|

        Marks a list item as completed.
        """
        await self.request(
            routes.LIST_ITEMS_COMPLETE.compile(channel_id=resolve_id(channel), list_item_id=resolve_id(list_item))
        )

    async def create_list_item(
        self,
        channel: IDOr[Channel],
        /,
        *,
        message: str,
        note: UndefinedOr[str] = UNDEFINED,
    ) -> raw.ListItem:
        """|coro|

        Creates a list item.

        Parameters
        ----------
        channel: IDOr[:class:`.Channel`]
            The list channel.
        message: :class:`str`
            The list item message.
        note: UndefinedOr[:class:`str`]
            The content of the note attached to the list item.

        Returns
        -------
        :class:`dict`
            The created list item payload.
        """
        payload: raw.DataCreateListItem = {'message': message}
        if note is not UNDEFINED:
            payload['note'] = {'content': note}

        resp: raw.ListItemResponse = await self.request(
            routes.LIST_ITEMS_CREATE.compile(channel_id=resolve_id(channel)), json=payload
        )
        return resp['listItem']

    async def delete_list_item(self, channel: IDOr[Channel], list_item: IDOr[ListItem], /) -> None:
        await self.request(
            routes.LIST_ITEMS_DELETE.compile(channel_id=resolve_id(channel), list_item_id=resolve_id(list_item))
        )

    async def edit_list_item(
        self,
        channel: IDOr[Channel],
        list_item: IDOr[ListItem],
        /,
        *,
        message: str,
        note: UndefinedOr[str] = UNDEFINED,
    ) -> raw.ListItem:
        payload: raw.DataCreateListItem = {'message': message}
        if note is not UNDEFINED:
            payload['note'] = {'content': note}

        resp: raw.ListItemResponse = await self.request(
            routes.LIST_ITEMS_EDIT.compile(channel_id=resolve_id(channel), list_item_id=resolve_id(list_item)),
            json=payload,
        )
        return resp['listItem']

    async def get_list_item(self, channel: IDOr[Channel], list_item: IDOr[ListItem], /) -> raw.ListItem:
        resp: raw.ListItemResponse = await self.request(
            routes.LIST_ITEMS_FETCH.compile(channel_id=resolve_id(channel), list_item_id=resolve_id(list_item))
        )
        return resp['listItem']

    async def get_list_items(self, channel: IDOr[Channel], /) -> list[raw.ListItem]:
        """|coro|

        Retrieves the items of a list channel. Notes are returned as summaries, without content.
        """
        resp: raw.ListItemsResponse = await self.request(
            routes.LIST_ITEMS_FETCH_MANY.compile(channel_id=resolve_id(channel)), log=False
        )
        return resp['listItems']

    async def uncomplete_list_item(self, channel: IDOr[Channel], list_item: IDOr[ListItem], /) -> None:
        await self.request(
            routes.LIST_ITEMS_UNCOMPLETE.compile(channel_id=resolve_id(channel), list_item_id=resolve_id(list_item))
        )

    # Servers

    async def get_server(self, server: IDOr[Server], /) -> raw.Server:
        """|coro|

        Retrieves a server the bot is in.

        Raises
        ------
        :class:`NotFound`
            The server was not found, or the bot is not a member of it.
        """
        resp: raw.ServerResponse = await self.request(routes.SERVERS_FETCH.compile(server_id=resolve_id(server)))
        return resp['server']

    # Server bans

    async def ban(
        self,
        server: IDOr[Server],
        user: IDOr[User],
        /,
        *,
        reason: UndefinedOr[str] = UNDEFINED,
    ) -> raw.ServerMemberBan:
        """|coro|

        Bans a user from a server.

        Parameters
        ----------
        server: IDOr[:class:`.Server`]
            The server.
        user: IDOr[:class:`.User`]
            The user to ban.
        reason: UndefinedOr[:class:`str`]
            The ban reason.

        Returns
        -------
        :class:`dict`
            The created ban payload.
        """
        payload: dict[str, str] = {}
        if reason is not UNDEFINED:
            payload['reason'] = reason

        resp: raw.ServerMemberBanResponse = await self.request(
            routes.SERVER_BANS_CREATE.compile(server_id=resolve_id(server), user_id=resolve_id(user)),
            json=payload,
        )
        return resp['serverMemberBan']

    async def get_ban(self, server: IDOr[Server], user: IDOr[User], /) -> raw.ServerMemberBan:
        resp: raw.ServerMemberBanResponse = await self.request(
            routes.SERVER_BANS_FETCH.compile(server_id=resolve_id(server), user_id=resolve_id(user))
        )
        return resp['serverMemberBan']

    async def get_bans(self, server: IDOr[Server], /) -> list[raw.ServerMemberBan]:
        resp: raw.ServerMemberBansResponse = await self.request(
            routes.SERVER_BANS_FETCH_MANY.compile(server_id=resolve_id(server)), log=False
        )
        return resp['serverMemberBans']

    async def unban(self, server: IDOr[Server], user: IDOr[User], /) -> None:
        """|coro|

        Removes a ban.
        """
        await self.request(routes.SERVER_BANS_DELETE.compile(server_id=resolve_id(server), user_id=resolve_id(user)))

    # Server members

    async def delete_nickname(self, server: IDOr[Server], user: IDOr[User], /) -> None:
        await self.request(
            routes.SERVER_MEMBERS_NICKNAME_DELETE.compile(server_id=resolve_id(server), user_id=resolve_id(user))
        )

    async def edit_nickname(self, server: IDOr[Server], user: IDOr[User], /, *, nickname: str) -> str:
        """|coro|

        Sets a member's nickname.

        Returns
        -------
        :class:`str`
            The new nickname.
        """
        resp: dict[str, str] = await self.request(
            routes.SERVER_MEMBERS_NICKNAME_EDIT.compile(server_id=resolve_id(server), user_id=resolve_id(user)),
            json={'nickname': nickname},
        )
        return resp['nickname']

    async def get_member(self, server: IDOr[Server], user: IDOr[User], /) -> raw.ServerMember:
        """|coro|

        Retrieves a server member.

        Raises
        ------
        :class:`NotFound`
            The member was not found.
        """
        resp: raw.ServerMemberResponse = await self.request(
            routes.SERVER_MEMBERS_FETCH.compile(server_id=resolve_id(server), user_id=resolve_id(user))
        )
        return resp['member']

    async def get_members(self, server: IDOr[Server], /) -> list[raw.ServerMemberSummary]:
        """|coro|

        Retrieves all server members. Members are returned as summaries, without nicknames
        and join dates.
        """
        resp: raw.ServerMembersResponse = await self.request(
            routes.SERVER_MEMBERS_FETCH_MANY.compile(server_id=resolve_id(server)), log=False
        )
        return resp['members']

    async def kick(self, server: IDOr[Server], user: IDOr[User], /) -> None:
        await self.request(routes.SERVER_MEMBERS_KICK.compile(server_id=resolve_id(server), user_id=resolve_id(user)))

    # Users

    async def get_user(self, user: IDOr[User], /) -> raw.User:
        """|coro|

        Retrieves a user. Pass ``'@me'`` to retrieve the bot user.
        """
        resp: raw.UserResponse = await self.request(routes.USERS_FETCH.compile(user_id=resolve_id(user)))
        return resp['user']

    # Webhooks

    async def create_webhook(
        self,
        server: IDOr[Server],
        /,
        *,
        name: str,
        channel: IDOr[Channel],
    ) -> raw.Webhook:
        """|coro|

        Creates a webhook.

        Parameters
        ----------
        server: IDOr[:class:`.Server`]
            The server.
        name: :class:`str`
            The webhook name.
        channel: IDOr[:class:`.Channel`]
            The channel the webhook posts to.

        Returns
        -------
        :class:`dict`
            The created webhook payload.
        """
        payload: raw.DataCreateWebhook = {'name': name, 'channelId': resolve_id(channel)}
        resp: raw.WebhookResponse = await self.request(
            routes.WEBHOOKS_CREATE.compile(server_id=resolve_id(server)), json=payload
        )
        return resp['webhook']

    async def delete_webhook(self, server: IDOr[Server], webhook: IDOr[Webhook], /) -> None:
        await self.request(
            routes.WEBHOOKS_DELETE.compile(server_id=resolve_id(server), webhook_id=resolve_id(webhook))
        )

    async def edit_webhook(
        self,
        server: IDOr[Server],
        webhook: IDOr[Webhook],
        /,
        *,
        name: str,
        channel: UndefinedOr[IDOr[Channel]] = UNDEFINED,
    ) -> raw.Webhook:
        payload: raw.DataEditWebhook = {'name': name}
        if channel is not UNDEFINED:
            payload['channelId'] = resolve_id(channel)

        resp: raw.WebhookResponse = await self.request(
            routes.WEBHOOKS_EDIT.compile(server_id=resolve_id(server), webhook_id=resolve_id(webhook)),
            json=payload,
        )
        return resp['webhook']

    async def get_webhook(self, server: IDOr[Server], webhook: IDOr[Webhook], /) -> raw.Webhook:
        resp: raw.WebhookResponse = await self.request(
            routes.WEBHOOKS_FETCH.compile(server_id=resolve_id(server), webhook_id=resolve_id(webhook))
        )
        return resp['webhook']

    async def get_webhooks(self, server: IDOr[Server], /, *, channel: IDOr[Channel]) -> list[raw.Webhook]:
        """|coro|

        Retrieves the webhooks of a channel.
        """
        resp: raw.WebhooksResponse = await self.request(
            routes.WEBHOOKS_FETCH_MANY.compile(server_id=resolve_id(server)),
            params={'channelId': resolve_id(channel)},
        )
        return resp['webhooks']


__all__ = (
    'DEFAULT_HTTP_USER_AGENT',
    'RateLimit',
    'RateLimitBlocker',
    'RateLimiter',
    'DefaultRateLimit',
    'DefaultRateLimitBlocker',
    'DefaultRateLimiter',
    'HTTPClient',
)
