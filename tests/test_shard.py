from __future__ import annotations

import aiohttp
import asyncio
import json
from pathlib import Path
import pytest
import pyguild

DATA = Path(__file__).parent / 'data' / 'guilded'

with open(DATA / 'bot_user.json', 'r') as fp:
    bot_user = json.load(fp)

with open(DATA / 'message.json', 'r') as fp:
    message = json.load(fp)


class Frame:
    def __init__(self, type: aiohttp.WSMsgType, data: object) -> None:
        self.type = type
        self.data = data


class FakeSocket:
    def __init__(self, *payloads: dict) -> None:
        self.frames: asyncio.Queue[Frame] = asyncio.Queue()
        self.closed: bool = False
        self.close_code: int | None = None
        self.pings: int = 0
        for payload in payloads:
            self.push(payload)

    def push(self, payload: dict) -> None:
        self.frames.put_nowait(Frame(aiohttp.WSMsgType.TEXT, json.dumps(payload)))

    def push_text(self, text: str) -> None:
        self.frames.put_nowait(Frame(aiohttp.WSMsgType.TEXT, text))

    def drop(self, code: int = 1006) -> None:
        self.frames.put_nowait(Frame(aiohttp.WSMsgType.CLOSE, code))

    async def receive(self) -> Frame:
        frame = await self.frames.get()
        if frame.type is aiohttp.WSMsgType.CLOSE:
            self.closed = True
            self.close_code = frame.data  # type: ignore
        return frame

    async def close(self, *, code: int = 1000) -> bool:
        if self.closed:
            return False
        self.closed = True
        self.close_code = code
        self.frames.put_nowait(Frame(aiohttp.WSMsgType.CLOSED, None))
        return True

    async def ping(self) -> None:
        self.pings += 1


class Recorder(pyguild.EventHandler):
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []
        self.welcomes: list[dict] = []
        self.disconnects: int = 0

    def handle_raw(self, shard: pyguild.Shard, kind: str, payload: dict, /) -> None:
        self.events.append((kind, payload))

    def handle_connect(self, shard: pyguild.Shard, payload: dict, /) -> None:
        self.welcomes.append(payload)

    def handle_disconnect(self, shard: pyguild.Shard, /) -> None:
        self.disconnects += 1


class ScriptedShard(pyguild.Shard):
    """A shard that connects to prepared sockets instead of Guilded."""

    def __init__(self, script: list, **kwargs) -> None:
        self.recorder = Recorder()
        super().__init__('token', handler=self.recorder, session=aiohttp.ClientSession(), state=pyguild.State(), **kwargs)
        self.script = script
        self.handshakes: list[dict[str, str]] = []
        self.delays: list[float] = []

    async def ws_connect(self, session, url, /, *, headers):
        self.handshakes.append(headers)
        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        return step

    async def _sleep(self, delay: float, /) -> None:
        self.delays.append(delay)
        await super()._sleep(delay)


def welcome(*, cursor: str | None = None, heartbeat: int = 22500) -> dict:
    data = {'heartbeatIntervalMs': heartbeat, 'user': bot_user}
    if cursor:
        data['lastMessageId'] = cursor
    return {'op': 1, 'd': data}


def event(kind: str, cursor: str) -> dict:
    return {'op': 0, 't': kind, 's': cursor, 'd': {'serverId': message['serverId'], 'message': message}}


async def until(predicate, timeout: float = 2.0) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout=timeout)


def test_backoff_is_capped():
    shard = pyguild.Shard('token', connect_delay=1, max_connect_delay=10, session=lambda shard: None, state=pyguild.State())

    assert [shard.get_delay(i) for i in range(6)] == [1, 2, 4, 8, 10, 10]


def test_cursor_is_sent_in_headers():
    shard = pyguild.Shard('token', session=lambda shard: None, state=pyguild.State())

    assert shard.get_headers()['Authorization'] == 'Bearer token'
    assert 'guilded-last-message-id' not in shard.get_headers()

    shard.cursor = 'abc'
    assert shard.get_headers()['guilded-last-message-id'] == 'abc'

    with pytest.raises(pyguild.ShardClosedError):
        shard.socket


@pytest.mark.asyncio
async def test_welcome_and_events():
    socket = FakeSocket(welcome(cursor='c0', heartbeat=10), event('ChatMessageCreated', 'c1'))
    shard = ScriptedShard([socket])
    task = asyncio.create_task(shard.connect())

    await until(lambda: shard.recorder.events)
    assert shard.ready
    assert shard.status is pyguild.ConnectionState.connected
    assert shard.connected_at is not None
    assert shard.heartbeat_interval == 0.01
    assert shard.cursor == 'c1'

    kind, payload = shard.recorder.events[0]
    assert kind == 'ChatMessageCreated'
    assert payload['message']['id'] == message['id']
    assert shard.recorder.welcomes[0]['user']['id'] == bot_user['id']

    await until(lambda: socket.pings >= 2)

    await shard.close()
    await asyncio.wait_for(task, timeout=1)

    assert not shard.ready
    assert socket.close_code == 1000
    assert shard.recorder.disconnects == 1
    assert shard.handshakes == [{'Authorization': 'Bearer token', 'User-Agent': pyguild.DEFAULT_SHARD_USER_AGENT}]

    # Closing twice does nothing
    await shard.close()
    assert shard.recorder.disconnects == 1

    await shard.cleanup()


@pytest.mark.asyncio
async def test_unexpected_close_resumes_from_cursor():
    first = FakeSocket(welcome(), event('ChatMessageCreated', 'c1'), event('ChatMessageUpdated', 'c2'))
    first.drop(1006)
    second = FakeSocket(welcome())

    shard = ScriptedShard([first, second], connect_delay=0.01)
    task = asyncio.create_task(shard.connect())

    await until(lambda: len(shard.recorder.welcomes) == 2)

    assert 'guilded-last-message-id' not in shard.handshakes[0]
    assert shard.handshakes[1]['guilded-last-message-id'] == 'c2'
    assert shard.delays == [0.01]
    assert shard.recorder.disconnects == 0
    assert shard.ready

    await shard.close()
    await asyncio.wait_for(task, timeout=1)
    assert shard.recorder.disconnects == 1

    await shard.cleanup()


@pytest.mark.asyncio
async def test_failed_connects_back_off():
    socket = FakeSocket(welcome())
    shard = ScriptedShard(
        [aiohttp.ClientConnectionError(), aiohttp.ClientConnectionError(), socket],
        connect_delay=0.01,
    )
    task = asyncio.create_task(shard.connect())

    await until(lambda: shard.ready)
    assert shard.delays == [0.01, 0.02]
    assert len(shard.handshakes) == 3

    await shard.close()
    await asyncio.wait_for(task, timeout=1)
    await shard.cleanup()


@pytest.mark.asyncio
async def test_close_cancels_pending_reconnect():
    socket = FakeSocket()
    socket.drop(1011)

    shard = ScriptedShard([socket], connect_delay=30)
    task = asyncio.create_task(shard.connect())

    await until(lambda: shard.delays)
    assert shard.delays == [30]

    await shard.close()
    await asyncio.wait_for(task, timeout=1)

    assert len(shard.handshakes) == 1
    assert shard.recorder.disconnects == 1
    assert shard.is_closed()

    await shard.cleanup()


@pytest.mark.asyncio
async def test_rejected_token():
    shard = ScriptedShard([aiohttp.WSServerHandshakeError(None, (), status=401, message='Unauthorized')])  # type: ignore

    with pytest.raises(pyguild.AuthenticationError) as exc_info:
        await asyncio.wait_for(shard.connect(), timeout=1)

    assert exc_info.value.status == 401
    assert shard.delays == []
    assert shard.status is pyguild.ConnectionState.disconnected

    await shard.cleanup()


@pytest.mark.asyncio
async def test_invalid_cursor_is_dropped():
    first = FakeSocket(welcome(cursor='stale'), {'op': 9, 'd': {'message': 'Invalid cursor'}})
    second = FakeSocket(welcome())

    shard = ScriptedShard([first, second], connect_delay=0.01)
    task = asyncio.create_task(shard.connect())

    await until(lambda: len(shard.recorder.welcomes) == 2)

    assert first.closed
    assert shard.cursor is None
    assert 'guilded-last-message-id' not in shard.handshakes[1]

    await shard.close()
    await asyncio.wait_for(task, timeout=1)
    await shard.cleanup()


@pytest.mark.asyncio
async def test_malformed_frames_are_skipped():
    socket = FakeSocket(welcome())
    socket.push_text('not json{')
    socket.push_text('[1, 2]')
    socket.push(event('ChatMessageCreated', 'c1'))

    shard = ScriptedShard([socket])
    task = asyncio.create_task(shard.connect())

    await until(lambda: shard.recorder.events)
    assert [kind for kind, _ in shard.recorder.events] == ['ChatMessageCreated']
    assert shard.cursor == 'c1'
    assert len(shard.handshakes) == 1
    assert shard.ready

    await shard.close()
    await asyncio.wait_for(task, timeout=1)
    await shard.cleanup()


@pytest.mark.asyncio
async def test_welcome_without_data_reconnects():
    first = FakeSocket({'op': 1})
    second = FakeSocket(welcome())

    shard = ScriptedShard([first, second], connect_delay=0.01)
    task = asyncio.create_task(shard.connect())

    await until(lambda: shard.recorder.welcomes)
    assert len(shard.handshakes) == 2
    assert first.closed
    assert shard.delays == [0.01]
    assert shard.ready

    await shard.close()
    await asyncio.wait_for(task, timeout=1)
    await shard.cleanup()


@pytest.mark.asyncio
async def test_close_before_connect_does_nothing():
    shard = ScriptedShard([])
    assert shard.is_closed()

    await shard.close()
    assert shard.recorder.disconnects == 0
    assert shard.status is pyguild.ConnectionState.disconnected

    await shard.cleanup()


@pytest.mark.asyncio
async def test_cleanup_restores_session_factory():
    sessions = []

    def factory(shard: pyguild.Shard) -> aiohttp.ClientSession:
        session = aiohttp.ClientSession()
        sessions.append(session)
        return session

    class FactoryShard(pyguild.Shard):
        async def ws_connect(self, session, url, /, *, headers):
            return FakeSocket(welcome())

    shard = FactoryShard('token', session=factory, state=pyguild.State())

    socket = await shard._socket_connect()
    assert isinstance(socket, FakeSocket)
    assert len(sessions) == 1
    assert not callable(shard._session)

    await shard.cleanup()
    assert sessions[0].closed
    assert shard._session is factory
