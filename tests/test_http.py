from __future__ import annotations

from aiohttp import ClientSession, web
import asyncio
import json
from pathlib import Path
import pytest
import pyguild
import time

DATA = Path(__file__).parent / 'data' / 'guilded'

with open(DATA / 'channel.json', 'r') as fp:
    channel = json.load(fp)

with open(DATA / 'message.json', 'r') as fp:
    message = json.load(fp)


class Recorder:
    def __init__(self) -> None:
        self.attempts: int = 0
        self.created: list[str] = []
        self.authorization: list[str] = []


def make_app(recorder: Recorder) -> web.Application:
    routes = web.RouteTableDef()

    @routes.get('/channels/{channel_id}')
    async def get_channel(request: web.Request) -> web.Response:
        recorder.authorization.append(request.headers.get('Authorization', ''))
        if request.match_info['channel_id'] != channel['id']:
            return web.json_response({'code': 'NotFound', 'message': 'Channel not found'}, status=404)
        return web.json_response({'channel': channel})

    @routes.post('/channels/{channel_id}/messages')
    async def send_message(request: web.Request) -> web.Response:
        payload = await request.json()
        recorder.attempts += 1

        if payload['content'] == 'limited' and recorder.attempts == 1:
            return web.json_response(
                {'code': 'TooManyRequests', 'message': 'Slow down', 'meta': {'retryAfter': 500}},
                status=429,
            )
        if payload['content'] == 'slow':
            await asyncio.sleep(0.2)

        recorder.created.append(payload['content'])
        return web.json_response({'message': {**message, 'content': payload['content']}}, status=201)

    @routes.get('/servers/{server_id}')
    async def get_server(request: web.Request) -> web.Response:
        server_id = request.match_info['server_id']
        recorder.attempts += 1
        if server_id == 'limited':
            return web.json_response(
                {'code': 'TooManyRequests', 'message': 'Slow down'},
                status=429,
                headers={'Retry-After': '0.05'},
            )
        if server_id == 'forbidden':
            return web.json_response({'code': 'ForbiddenError', 'message': 'Missing permissions'}, status=403)
        if server_id == 'conflict':
            return web.json_response({'code': 'Conflict', 'message': 'Already exists'}, status=409)
        return web.Response(text='Internal Server Error', status=500)

    app = web.Application()
    app.add_routes(routes)
    return app


async def run_site(port: int, recorder: Recorder) -> web.AppRunner:
    runner = web.AppRunner(make_app(recorder))
    await runner.setup()
    site = web.TCPSite(runner, host='127.0.0.1', port=port)

    await site.start()
    return runner


def make_http(port: int, **kwargs) -> pyguild.HTTPClient:
    state = pyguild.State()
    http = pyguild.HTTPClient('token', base=f'http://127.0.0.1:{port}', session=ClientSession(), state=state, **kwargs)
    state.setup(http=http)
    return http


@pytest.mark.asyncio
async def test_request():
    recorder = Recorder()
    runner = await run_site(5201, recorder)
    http = make_http(5201)

    payload = await http.get_channel(channel['id'])
    assert payload['name'] == 'general'
    assert recorder.authorization == ['Bearer token']

    with pytest.raises(pyguild.NotFound) as exc_info:
        await http.get_channel('unknown')

    exc = exc_info.value
    assert exc.status == 404
    assert exc.code == 'NotFound'
    assert exc.message == 'Channel not found'

    await http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_ratelimited_request_is_retried_once():
    recorder = Recorder()
    runner = await run_site(5202, recorder)
    http = make_http(5202)

    started = time.perf_counter()
    payload = await http.send_message(channel['id'], content='limited')
    elapsed = time.perf_counter() - started

    assert payload['content'] == 'limited'
    assert elapsed >= 0.49
    assert recorder.attempts == 2
    assert recorder.created == ['limited']

    await http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_ratelimit_exhausts_retries():
    recorder = Recorder()
    runner = await run_site(5203, recorder)
    http = make_http(5203)

    with pytest.raises(pyguild.Ratelimited) as exc_info:
        await http.get_server('limited')

    assert exc_info.value.retry_after == 0.05
    assert recorder.attempts == 3

    await http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_error_mapping():
    recorder = Recorder()
    runner = await run_site(5204, recorder)
    http = make_http(5204)

    with pytest.raises(pyguild.Forbidden):
        await http.get_server('forbidden')

    with pytest.raises(pyguild.Conflict):
        await http.get_server('conflict')

    with pytest.raises(pyguild.InternalServerError) as exc_info:
        await http.get_server('broken')

    assert exc_info.value.status == 500
    assert exc_info.value.code == 'NonJSON'
    assert exc_info.value.message == 'Internal Server Error'

    await http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_bucket_preserves_submission_order():
    recorder = Recorder()
    runner = await run_site(5205, recorder)
    http = make_http(5205)

    completed = []

    async def send(content: str) -> None:
        await http.send_message(channel['id'], content=content)
        completed.append(content)

    await asyncio.gather(send('slow'), send('second'), send('third'))

    assert recorder.created == ['slow', 'second', 'third']
    assert completed == ['slow', 'second', 'third']

    # Idle buckets are forgotten
    assert http.rate_limiter._pending_requests == {}  # type: ignore

    await http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_buckets_do_not_wait_on_each_other():
    recorder = Recorder()
    runner = await run_site(5206, recorder)
    http = make_http(5206)

    completed = []

    async def send(channel_id: str, content: str) -> None:
        await http.send_message(channel_id, content=content)
        completed.append(content)

    started = time.perf_counter()
    await asyncio.gather(send(channel['id'], 'slow'), send('other-channel', 'fast'))
    elapsed = time.perf_counter() - started

    assert completed == ['fast', 'slow']
    assert recorder.created == ['fast', 'slow']
    assert elapsed < 0.35
    assert http.rate_limiter._pending_requests == {}  # type: ignore

    await http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_transport_error():
    # Nothing listens on this port
    http = make_http(5299)

    with pytest.raises(pyguild.TransportError) as exc_info:
        await http.get_channel(channel['id'])

    assert exc_info.value.method == 'GET'
    assert exc_info.value.url.endswith('/channels/' + channel['id'])

    await http.cleanup()
