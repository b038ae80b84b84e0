from __future__ import annotations

from aiohttp import web
from collections import Counter
import json
from pathlib import Path
import pytest
import pyguild

DATA = Path(__file__).parent / 'data' / 'guilded'

with open(DATA / 'channel.json', 'r') as fp:
    channel = json.load(fp)

with open(DATA / 'message.json', 'r') as fp:
    message = json.load(fp)

with open(DATA / 'server.json', 'r') as fp:
    server = json.load(fp)

with open(DATA / 'member.json', 'r') as fp:
    member = json.load(fp)


def make_app(hits: Counter) -> web.Application:
    routes = web.RouteTableDef()

    @routes.get('/channels/{channel_id}')
    async def get_channel(request: web.Request) -> web.Response:
        hits['get_channel'] += 1
        return web.json_response({'channel': {**channel, 'name': f'general-{hits["get_channel"]}'}})

    @routes.post('/channels/{channel_id}/messages')
    async def send_message(request: web.Request) -> web.Response:
        hits['send_message'] += 1
        payload = await request.json()
        return web.json_response(
            {'message': {**message, 'id': f'sent-{hits["send_message"]}', 'content': payload['content']}},
            status=201,
        )

    @routes.get('/channels/{channel_id}/messages')
    async def get_messages(request: web.Request) -> web.Response:
        hits['get_messages'] += 1
        assert request.query['limit'] == '2'
        return web.json_response(
            {
                'messages': [
                    {**message, 'id': 'listed-1', 'content': 'one'},
                    {**message, 'id': 'listed-2', 'content': 'two'},
                ]
            }
        )

    @routes.get('/channels/{channel_id}/messages/{message_id}')
    async def get_message(request: web.Request) -> web.Response:
        hits['get_message'] += 1
        return web.json_response({'message': {**message, 'id': request.match_info['message_id']}})

    @routes.delete('/channels/{channel_id}/messages/{message_id}')
    async def delete_message(request: web.Request) -> web.Response:
        hits['delete_message'] += 1
        return web.Response(status=204)

    @routes.get('/servers/{server_id}')
    async def get_server(request: web.Request) -> web.Response:
        hits['get_server'] += 1
        return web.json_response({'server': server})

    @routes.get('/servers/{server_id}/members/{user_id}')
    async def get_member(request: web.Request) -> web.Response:
        hits['get_member'] += 1
        return web.json_response({'member': member})

    @routes.put('/servers/{server_id}/members/{user_id}/nickname')
    async def edit_nickname(request: web.Request) -> web.Response:
        hits['edit_nickname'] += 1
        payload = await request.json()
        return web.json_response({'nickname': payload['nickname']})

    app = web.Application()
    app.add_routes(routes)
    return app


async def run_site(port: int, hits: Counter) -> web.AppRunner:
    runner = web.AppRunner(make_app(hits))
    await runner.setup()
    site = web.TCPSite(runner, host='127.0.0.1', port=port)

    await site.start()
    return runner


@pytest.mark.asyncio
async def test_fetch_uses_cache_unless_forced():
    hits = Counter()
    runner = await run_site(5211, hits)
    client = pyguild.Client(token='token', http_base='http://127.0.0.1:5211')

    first = await client.channels.fetch_one(channel['id'])
    assert first.name == 'general-1'
    assert first.type is pyguild.ChannelType.chat
    assert first.is_cached

    cached = await client.channels.fetch_one(channel['id'])
    assert cached is first
    assert hits['get_channel'] == 1

    refreshed = await client.channels.fetch_one(channel['id'], force=True)
    assert hits['get_channel'] == 2
    assert refreshed.name == 'general-2'
    assert client.channels.get(channel['id']) is refreshed

    assert await client.channels.fetch(channel['id']) is refreshed
    assert hits['get_channel'] == 2
    await client.channels.fetch(channel['id'], force=True)
    assert hits['get_channel'] == 3

    # Nested caches survive the channel being replaced
    assert refreshed.messages is first.messages
    assert refreshed.messages.channel is refreshed

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_created_entity_is_served_from_cache():
    hits = Counter()
    runner = await run_site(5212, hits)
    client = pyguild.Client(token='token', http_base='http://127.0.0.1:5212')

    ch = await client.channels.fetch(channel['id'])
    sent = await ch.send('Hello!')

    assert sent.content == 'Hello!'
    assert sent.channel is ch

    fetched = await ch.messages.fetch(sent.id)
    assert fetched is sent
    assert hits['get_message'] == 0
    assert hits['send_message'] == 1

    await ch.messages.delete(sent)
    assert hits['delete_message'] == 1
    assert sent.id not in ch.messages

    fetched = await ch.messages.fetch(sent.id)
    assert hits['get_message'] == 1
    assert fetched is not sent

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_caching_can_be_disabled():
    hits = Counter()
    runner = await run_site(5213, hits)
    client = pyguild.Client(
        token='token',
        http_base='http://127.0.0.1:5213',
        options={'cacheMessages': False},
    )

    ch = await client.channels.fetch_one(channel['id'])
    sent = await ch.messages.create(content='Not cached')
    assert not sent.is_cached

    await ch.messages.fetch_one(sent.id)
    assert hits['get_message'] == 1
    assert len(ch.messages) == 0

    # An explicit argument wins over the options
    await ch.messages.fetch_one(sent.id, cache=True)
    assert sent.id in ch.messages

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_fetch_many_always_requests():
    hits = Counter()
    runner = await run_site(5214, hits)
    client = pyguild.Client(
        token='token',
        http_base='http://127.0.0.1:5214',
        options=pyguild.ClientOptions(max_message_cache=1),
    )

    ch = await client.channels.fetch_one(channel['id'])

    messages = await ch.messages.fetch(limit=2)
    assert [m.content for m in messages] == ['one', 'two']

    messages = await ch.messages.fetch_many(limit=2)
    assert hits['get_messages'] == 2

    # Bounded to a single message, the oldest inserted got evicted
    assert ch.messages.cache.keys() == ['listed-2']

    await client.http.cleanup()
    await runner.cleanup()


@pytest.mark.asyncio
async def test_member_nickname_produces_new_snapshot():
    hits = Counter()
    runner = await run_site(5215, hits)
    client = pyguild.Client(token='token', http_base='http://127.0.0.1:5215')

    srv = await client.servers.fetch_one(server['id'])
    assert srv.verified
    assert srv.default_channel is None

    before = await srv.members.fetch(member['user']['id'])
    assert before.display_name == 'Butters'
    assert before.role_ids == [1, 2]

    after = await before.edit_nickname('Professor Chaos')
    assert after is not before
    assert after.nickname == 'Professor Chaos'
    assert before.nickname == 'Butters'
    assert srv.members.get(before.id) is after
    assert hits['get_member'] == 1

    await client.http.cleanup()
    await runner.cleanup()
