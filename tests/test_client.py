from __future__ import annotations

from aiohttp import web
from attrs import define, field
import asyncio
import pytest
import pyguild


@define(slots=True)
class AddEvent(pyguild.BaseEvent):
    a: int = field(repr=True, kw_only=True)
    b: int = field(repr=True, kw_only=True)


@define(slots=True)
class SubtractEvent(pyguild.BaseEvent):
    a: int = field(repr=True, kw_only=True)
    b: int = field(repr=True, kw_only=True)


@pytest.mark.asyncio
async def test_events():
    queue: asyncio.Queue[int] = asyncio.Queue()

    client = pyguild.Client()

    async def on_add(event: AddEvent, /) -> None:
        await queue.put(event.a + event.b)

    async def on_subtract(event: SubtractEvent, /) -> None:
        await queue.put(event.a - event.b)

    client.subscribe(AddEvent, on_add)
    client.subscribe(SubtractEvent, on_subtract)

    await client.dispatch(AddEvent(a=1, b=2))
    await client.dispatch(SubtractEvent(a=13, b=7))

    response = await asyncio.wait_for(queue.get(), timeout=1)
    assert response == 3

    response = await asyncio.wait_for(queue.get(), timeout=1)
    assert response == 6

    subscription = client.wait_for(AddEvent, check=lambda event, /: event.a == 0xDEAD, count=1, timeout=3)
    await client.dispatch(AddEvent(a=0xDEAD, b=11))

    number = await subscription
    assert number.a + number.b == 57016

    subscription = client.wait_for(AddEvent, check=lambda event, /: event.a == 0xBEEF, count=3, timeout=3)

    await client.dispatch(AddEvent(a=0xBEEF, b=11))
    await client.dispatch(AddEvent(a=0xBEEF, b=12))
    await client.dispatch(AddEvent(a=0xBEEF, b=13))

    numbers = [event.b async for event in subscription]

    assert sum(numbers) == 36


@pytest.mark.asyncio
async def test_listen_uses_annotation():
    client = pyguild.Client()
    received = []

    @client.listen()
    def on_add(event: AddEvent, /) -> None:
        received.append(event.a)

    @client.on(pyguild.BaseEvent)
    def on_any(event, /) -> None:
        received.append(type(event).__name__)

    assert isinstance(on_add, pyguild.EventSubscription)
    assert client.subscriptions_for(AddEvent) == [on_add]
    assert client.subscriptions_for(pyguild.BaseEvent, include_subclasses=True) == [on_add, on_any]
    assert len(client.all_subscriptions()) == 2

    await client.dispatch(AddEvent(a=1, b=2))
    assert received == [1, 'AddEvent']

    on_add.remove()
    await client.dispatch(AddEvent(a=2, b=2))
    assert received == [1, 'AddEvent', 'AddEvent']

    removed = client.unsubscribe(pyguild.BaseEvent, on_any)
    assert removed == [on_any]
    assert client.all_subscriptions() == []

    def on_subtract(event: SubtractEvent, /) -> None:
        received.append(event.b)

    first = client.subscribe(SubtractEvent, on_subtract)
    second = client.subscribe(SubtractEvent, on_subtract)
    assert client.unsubscribe(SubtractEvent, on_subtract) == [first, second]
    assert client.unsubscribe(SubtractEvent, on_subtract) == []

    with pytest.raises(TypeError):

        @client.listen()
        def on_nothing(event, /) -> None: ...


class FailingClient(pyguild.Client):
    def __init__(self) -> None:
        super().__init__()
        self.failed: list[pyguild.BaseEvent] = []

    async def on_user_error(self, event: pyguild.BaseEvent) -> None:
        self.failed.append(event)


@pytest.mark.asyncio
async def test_handler_errors_do_not_stop_dispatch():
    client = FailingClient()
    received = []

    def broken(event: SubtractEvent, /) -> None:
        raise RuntimeError('oops')

    client.subscribe(SubtractEvent, broken)
    client.subscribe(SubtractEvent, lambda event, /: received.append(event.a - event.b))

    event = SubtractEvent(a=5, b=3)
    await client.dispatch(event)

    assert client.failed == [event]
    assert received == [2]


@pytest.mark.asyncio
async def test_wait_for_times_out():
    client = pyguild.Client()

    with pytest.raises(asyncio.TimeoutError):
        await client.wait_for(AddEvent, timeout=0.05)

    with pytest.raises(TypeError):
        client.wait_for(AddEvent, count=0)


@pytest.mark.asyncio
async def test_logout_drops_credentials():
    client = pyguild.Client(token='token')
    assert client.http.token == 'token'
    assert client.shard.token == 'token'

    client.login('other')
    assert client.shard.get_headers()['Authorization'] == 'Bearer other'

    await client.logout()
    assert client.closed
    assert client.http.token == ''
    assert client.shard.token == ''
    assert not client.ready

    with pytest.raises(TypeError):
        client.run()


@pytest.mark.asyncio
async def test_login_after_logout_opens_new_session():
    authorization = []

    async def get_channel(request: web.Request) -> web.Response:
        authorization.append(request.headers['Authorization'])
        return web.json_response({'channel': {'id': request.match_info['channel_id']}})

    app = web.Application()
    app.router.add_get('/channels/{channel_id}', get_channel)
    runner = web.AppRunner(app)
    await runner.setup()
    await web.TCPSite(runner, host='127.0.0.1', port=5231).start()

    client = pyguild.Client(token='token', http_base='http://127.0.0.1:5231')
    assert (await client.http.get_channel('abc'))['id'] == 'abc'

    await client.logout()
    assert callable(client.http._session)
    assert callable(client.shard._session)

    client.login('other')
    assert (await client.http.get_channel('abc'))['id'] == 'abc'
    assert authorization == ['Bearer token', 'Bearer other']

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_close_before_start_dispatches_nothing():
    client = pyguild.Client(token='token')
    received = []
    client.subscribe(pyguild.DisconnectEvent, received.append)

    await client.close()
    await asyncio.sleep(0)

    assert received == []
    assert client.shard.is_closed()
