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

if typing.TYPE_CHECKING:
    from aiohttp import ClientResponse as Response


class PyguildError(Exception):
    """Base exception class for pyguild.

    Ideally speaking, this could be caught to handle any exceptions raised from this library.
    """

    __slots__ = ()


class TransportError(PyguildError):
    """Exception that's raised when a request could not reach Guilded at all
    (DNS failure, timeout, connection reset).

    Attributes
    ----------
    method: :class:`str`
        The HTTP method of the failed request.
    url: :class:`str`
        The URL of the failed request.
    original: :class:`Exception`
        The underlying exception.
    """

    __slots__ = ('method', 'url', 'original')

    def __init__(self, method: str, url: str, original: Exception, /) -> None:
        self.method: str = method
        self.url: str = url
        self.original: Exception = original
        super().__init__(f'{method} {url} failed: {original!r}')


class HTTPException(PyguildError):
    """Exception that's raised when Guilded responds with a non-2xx status.

    Attributes
    ------------
    response: :class:`aiohttp.ClientResponse`
        The response of the failed HTTP request.
    data: Union[Dict[:class:`str`, Any], Any]
        The data of the error. Could be an empty string or ``None``.
    status: :class:`int`
        The status code of the HTTP request.
    code: :class:`str`
        The Guilded specific error code, such as ``'NotFound'`` or ``'TooManyRequests'``.
    message: :class:`str`
        The human readable error message.
    meta: Optional[Dict[:class:`str`, Any]]
        Extra details about the error, if Guilded provided any.
    retry_after: Optional[:class:`float`]
        The duration in seconds to wait until the ratelimit expires. Only set on 429 responses.
    """

    __slots__ = (
        'response',
        'data',
        'status',
        'code',
        'message',
        'meta',
        'retry_after',
    )

    def __init__(
        self,
        response: Response,
        data: typing.Any,
        /,
        *,
        retry_after: typing.Optional[float] = None,
    ) -> None:
        self.response: Response = response
        self.data: typing.Any = data
        self.status: int = response.status
        self.retry_after: typing.Optional[float] = retry_after

        if isinstance(data, dict):
            self.code: str = data.get('code', 'Unknown')
            self.message: str = data.get('message', '')
            self.meta: typing.Optional[dict[str, typing.Any]] = data.get('meta')
        else:
            self.code = 'NonJSON'
            self.message = data or ''
            self.meta = None

        extra = f' meta={self.meta}' if self.meta else ''
        super().__init__(f'{self.status} {self.code}: {self.message}{extra}')


class BadRequest(HTTPException):
    __slots__ = ()


class Unauthorized(HTTPException):
    __slots__ = ()


class Forbidden(HTTPException):
    __slots__ = ()


class NotFound(HTTPException):
    __slots__ = ()


class Conflict(HTTPException):
    __slots__ = ()


class Ratelimited(HTTPException):
    """Exception that's raised when a request stayed ratelimited after all automatic retries."""

    __slots__ = ()


class InternalServerError(HTTPException):
    __slots__ = ()


class ShardError(PyguildError):
    __slots__ = ()


class ShardClosedError(ShardError):
    """Exception that's raised when accessing the socket of a shard that is not connected."""

    __slots__ = ()


class AuthenticationError(ShardError):
    """Exception that's raised when Guilded rejects the token during websocket handshake."""

    __slots__ = ('status',)

    def __init__(self, status: int, message: typing.Any, /) -> None:
        self.status: int = status
        super().__init__(f'Failed to connect shard ({status})', message)


class InvalidData(PyguildError):
    """Exception that's raised when the library encounters unknown
    or invalid data from Guilded.
    """

    __slots__ = ('reason',)

    def __init__(self, reason: str, /) -> None:
        self.reason: str = reason
        super().__init__(reason)


__all__ = (
    'PyguildError',
    'TransportError',
    'HTTPException',
    'BadRequest',
    'Unauthorized',
    'Forbidden',
    'NotFound',
    'Conflict',
    'Ratelimited',
    'InternalServerError',
    'ShardError',
    'ShardClosedError',
    'AuthenticationError',
    'InvalidData',
)
