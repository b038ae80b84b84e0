from __future__ import annotations

import aiohttp
from aiohttp import web
import asyncio
from collections import Counter
import json
from pathlib import Path
import pytest
import pyguild

DATA = Path(__file__).parent / 'data' / 'guilded'

with open(DATA / 'bot_user.json', 'r') as fp:
    bot_user = json.load(fp)

with open(DATA / 'channel.json', 'r') as fp:
    channel = json.load(fp)

with open(DATA / 'member.json', 'r') as fp:
    member = json.load(fp)

with open(DATA / 'message.json', 'r') as fp:
    message = json.load(fp)

with open(DATA / 'server.json', 'r') as fp:
    server = json.load(fp)

SLOW_CHANNEL_ID = '00000000-0000-0000-0000-000000000002'


def make_app(hits: Counter) -> web.Application:
    routes = web.RouteTableDef()

    @routes.get('/channels/{channel_id}')
    async def get_channel(request: web.Request) -> web.Response:
        channel_id = request.match_info['channel_id']
        hits[channel_id] += 1

        if channel_id == SLOW_CHANNEL_ID:
            await asyncio.sleep(0.2)
        elif channel_id != channel['id']:
            return web.json_response({'code': 'NotFound', 'message': 'Channel not found'}, status=404)
        return web.json_response({'channel': {**channel, 'id': channel_id}})

    @routes.get('/servers/{server_id}')
    async def get_server(request: web.Request) -> web.Response:
        hits[request.match_info['server_id']] += 1
        return web.json_response({'server': server})

    app = web.Application()
    app.add_routes(routes)
    return app


async def run_site(port: int, hits: Counter) -> web.AppRunner:
    runner = web.AppRunner(make_app(hits))
    await runner.setup()
    site = web.TCPSite(runner, host='127.0.0.1', port=port)

    await site.start()
    return runner


class Frame:
    def __init__(self, type: aiohttp.WSMsgType, data: object) -> None:
        self.type = type
        self.data = data


class FakeSocket:
    def __init__(self, *payloads: dict) -> None:
        self.frames: asyncio.Queue[Frame] = asyncio.Queue()
        self.closed: bool = False
        self.close_code: int | None = None
        for payload in payloads:
            self.frames.put_nowait(Frame(aiohttp.WSMsgType.TEXT, json.dumps(payload)))

    async def receive(self) -> Frame:
        return await self.frames.get()

    async def close(self, *, code: int = 1000) -> bool:
        if self.closed:
            return False
        self.closed = True
        self.close_code = code
        self.frames.put_nowait(Frame(aiohttp.WSMsgType.CLOSED, None))
        return True

    async def ping(self) -> None:
        pass


class ScriptedShard(pyguild.Shard):
    """A shard that reads a prepared socket instead of Guilded."""

    def __init__(self, client: pyguild.Client, state: pyguild.State, socket: FakeSocket) -> None:
        super().__init__(
            'token', handler=pyguild.ClientEventHandler(client), session=aiohttp.ClientSession(), state=state
        )
        self.fake_socket = socket

    async def ws_connect(self, session, url, /, *, headers):
        return self.fake_socket


class RecordingClient(pyguild.Client):
    def __init__(self, **kwargs) -> None:
        super().__init__(token='token', **kwargs)
        self.events: list[pyguild.BaseEvent] = []
        self.errors: list[tuple[str, Exception]] = []

    async def on_event(self, event: pyguild.BaseEvent, /) -> None:
        self.events.append(event)

    async def on_library_error(self, shard: pyguild.Shard, kind: str, payload: dict, exc: Exception, /) -> None:
        self.errors.append((kind, exc))

    async def feed(self, kind: str, payload: dict) -> None:
        # The shard awaits every event before reading the next one
        await self.shard.handler.handle_raw(self.shard, kind, payload)  # type: ignore


async def drain() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


async def until(predicate, timeout: float = 2.0) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout=timeout)


def message_created(**overrides) -> dict:
    return {'serverId': server['id'], 'message': {**message, **overrides}}


@pytest.mark.asyncio
async def test_ready_sets_me():
    client = RecordingClient()
    handler = client.shard.handler
    assert isinstance(handler, pyguild.ClientEventHandler)

    handler.handle_connect(client.shard, {'heartbeatIntervalMs': 22500, 'user': bot_user})
    assert client.me is not None
    assert client.me.id == bot_user['id']
    assert client.me.bot
    assert client.users.get(bot_user['id']) is client.me

    handler.handle_disconnect(client.shard)
    await drain()

    assert [type(event) for event in client.events] == [pyguild.ReadyEvent, pyguild.DisconnectEvent]


@pytest.mark.asyncio
async def test_message_in_unknown_channel_fetches_channel_once():
    hits = Counter()
    runner = await run_site(5221, hits)
    client = RecordingClient(http_base='http://127.0.0.1:5221')

    await client.feed('ChatMessageCreated', message_created(id='m1', content='first'))
    await client.feed('ChatMessageCreated', message_created(id='m2', content='second'))
    await drain()

    assert hits[channel['id']] == 1
    assert [event.message.content for event in client.events] == ['first', 'second']  # type: ignore

    cached = client.channels.get(channel['id'])
    assert cached is not None
    assert cached.messages.cache.keys() == ['m1', 'm2']
    assert client.events[0].message.channel is cached  # type: ignore

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_events_are_dispatched_in_arrival_order():
    hits = Counter()
    runner = await run_site(5222, hits)

    # The first event needs a slow channel fetch, the second one is resolved from cache
    socket = FakeSocket(
        {'op': 1, 'd': {'heartbeatIntervalMs': 22500, 'user': bot_user}},
        {'op': 0, 't': 'ChatMessageCreated', 's': 'c1', 'd': message_created(id='slow', channelId=SLOW_CHANNEL_ID)},
        {'op': 0, 't': 'ChatMessageCreated', 's': 'c2', 'd': message_created(id='fast')},
    )
    client = RecordingClient(
        http_base='http://127.0.0.1:5222',
        shard=lambda client, state: ScriptedShard(client, state, socket),
    )
    await client.channels.fetch_one(channel['id'])

    task = asyncio.create_task(client.start())
    await until(lambda: len(client.events) == 3)

    ready, slow, fast = client.events
    assert isinstance(ready, pyguild.ReadyEvent)
    assert isinstance(slow, pyguild.MessageCreateEvent)
    assert isinstance(fast, pyguild.MessageCreateEvent)
    assert [slow.message.id, fast.message.id] == ['slow', 'fast']
    assert client.shard.cursor == 'c2'
    assert hits[SLOW_CHANNEL_ID] == 1

    await client.close()
    await asyncio.wait_for(task, timeout=1)
    assert socket.closed

    await runner.cleanup()


@pytest.mark.asyncio
async def test_welcome_without_user_reaches_library_error():
    client = RecordingClient()
    handler = client.shard.handler
    assert isinstance(handler, pyguild.ClientEventHandler)

    handler.handle_connect(client.shard, {'heartbeatIntervalMs': 22500})  # type: ignore
    await drain()

    assert client.events == []
    assert client.me is None

    [(kind, exc)] = client.errors
    assert kind == 'welcome'
    assert isinstance(exc, pyguild.InvalidData)
    assert 'user' in exc.reason

    # Finished error reports are not retained
    assert not handler._tasks


@pytest.mark.asyncio
async def test_delete_of_uncached_message_is_dispatched():
    hits = Counter()
    runner = await run_site(5223, hits)
    client = RecordingClient(http_base='http://127.0.0.1:5223')

    await client.feed('ChatMessageCreated', message_created(id='kept'))
    await client.feed(
        'ChatMessageDeleted',
        {
            'serverId': server['id'],
            'message': {
                'id': 'never-seen',
                'serverId': server['id'],
                'channelId': channel['id'],
                'deletedAt': '2022-06-14T18:40:00.000Z',
                'isPrivate': False,
            },
        },
    )
    await drain()

    event = client.events[-1]
    assert isinstance(event, pyguild.MessageDeleteEvent)
    assert event.message is None
    assert event.message_id == 'never-seen'
    assert event.channel.messages.cache.keys() == ['kept']

    await client.feed(
        'ChatMessageDeleted',
        {
            'serverId': server['id'],
            'message': {'id': 'kept', 'serverId': server['id'], 'channelId': channel['id']},
        },
    )
    await drain()

    event = client.events[-1]
    assert isinstance(event, pyguild.MessageDeleteEvent)
    assert event.message is not None
    assert event.message.id == 'kept'
    assert len(event.channel.messages) == 0

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_unknown_events_are_ignored():
    client = RecordingClient()

    await client.feed('ServerRolesUpdated', {'serverId': server['id'], 'memberRoleIds': []})
    await drain()

    assert client.events == []
    assert client.errors == []


@pytest.mark.asyncio
async def test_malformed_payload_reaches_library_error():
    hits = Counter()
    runner = await run_site(5224, hits)
    client = RecordingClient(http_base='http://127.0.0.1:5224')

    await client.feed('ChatMessageCreated', {'serverId': server['id']})
    await client.feed('ChatMessageCreated', message_created(channelId='missing'))
    await drain()

    assert client.events == []
    assert [kind for kind, _ in client.errors] == ['ChatMessageCreated', 'ChatMessageCreated']

    invalid = client.errors[0][1]
    assert isinstance(invalid, pyguild.InvalidData)
    assert 'message' in invalid.reason

    assert isinstance(client.errors[1][1], pyguild.NotFound)

    # The pipeline keeps going after a failed event
    await client.feed('ChatMessageCreated', message_created())
    await drain()
    assert len(client.events) == 1

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_channel_events_keep_nested_caches():
    client = RecordingClient()

    await client.feed('ServerChannelCreated', {'serverId': server['id'], 'channel': channel})
    created = client.channels.get(channel['id'])
    assert created is not None

    await client.feed('ServerChannelUpdated', {'serverId': server['id'], 'channel': {**channel, 'name': 'renamed'}})
    await drain()

    event = client.events[-1]
    assert isinstance(event, pyguild.ChannelEditEvent)
    assert event.before is created
    assert event.after.name == 'renamed'
    assert event.after.messages is created.messages
    assert client.channels.get(channel['id']) is event.after

    await client.feed('ServerChannelDeleted', {'serverId': server['id'], 'channel': channel})
    await drain()

    assert isinstance(client.events[-1], pyguild.ChannelDeleteEvent)
    assert channel['id'] not in client.channels


@pytest.mark.asyncio
async def test_member_lifecycle():
    hits = Counter()
    runner = await run_site(5225, hits)
    client = RecordingClient(http_base='http://127.0.0.1:5225')
    user_id = member['user']['id']

    await client.feed('ServerMemberJoined', {'serverId': server['id'], 'member': member})
    await client.feed(
        'ServerMemberUpdated', {'serverId': server['id'], 'userInfo': {'id': user_id, 'nickname': 'Professor Chaos'}}
    )
    await client.feed('ServerMemberRemoved', {'serverId': server['id'], 'userId': user_id, 'isKick': True})
    await drain()

    assert hits[server['id']] == 1

    join, edit, remove = client.events
    assert isinstance(join, pyguild.MemberJoinEvent)
    assert isinstance(edit, pyguild.MemberEditEvent)
    assert isinstance(remove, pyguild.MemberRemoveEvent)

    assert join.member.nickname == 'Butters'
    assert client.users.get(user_id) is not None

    assert edit.before is join.member
    assert edit.after is not None
    assert edit.after.nickname == 'Professor Chaos'

    assert remove.member is edit.after
    assert remove.is_kick
    assert not remove.is_ban

    srv = client.servers.get(server['id'])
    assert srv is not None
    assert user_id not in srv.members

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_events_are_dispatched_when_caching_is_disabled():
    hits = Counter()
    runner = await run_site(5226, hits)
    client = RecordingClient(http_base='http://127.0.0.1:5226', options={'cacheMessages': False})

    await client.feed('ChatMessageCreated', message_created(id='m1'))
    await client.feed('ChatMessageUpdated', message_created(id='m1', content='edited'))
    await drain()

    create, edit = client.events
    assert isinstance(create, pyguild.MessageCreateEvent)
    assert isinstance(edit, pyguild.MessageEditEvent)
    assert edit.before is None
    assert edit.after.content == 'edited'

    cached = client.channels.get(channel['id'])
    assert cached is not None
    assert len(cached.messages) == 0

    await client.http.cleanup()
    await runner.cleanup()
