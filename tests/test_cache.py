import pytest
import pyguild


def test_unbounded_cache_keeps_everything():
    cache = pyguild.BoundedCache()
    for i in range(1000):
        cache.set(i, str(i))

    assert len(cache) == 1000
    assert not cache.is_bounded
    assert cache.get(0) == '0'


def test_eviction_is_fifo():
    cache = pyguild.BoundedCache(3)
    for key in 'abcdef':
        cache.set(key, key.upper())

    assert cache.keys() == ['d', 'e', 'f']
    assert 'a' not in cache
    assert cache['f'] == 'F'


def test_eviction_keeps_most_recent_distinct_keys():
    cache = pyguild.BoundedCache(4)
    inserted = []
    for i in range(25):
        key = f'k{i % 7}'
        if key not in cache:
            inserted.append(key)
        cache.set(key, i)

    assert len(cache) == 4
    assert cache.keys() == inserted[-4:]


def test_replacing_keeps_slot():
    cache = pyguild.BoundedCache(2)
    cache.set('a', 1)
    cache.set('b', 2)
    cache.set('a', 3)
    cache.set('c', 4)

    # 'a' was inserted first, so it goes first even after being replaced
    assert cache.keys() == ['b', 'c']


def test_delete():
    cache = pyguild.BoundedCache(2)
    cache.set('a', 1)

    assert cache.delete('a') == 1
    assert cache.delete('a') is None
    assert len(cache) == 0

    cache.set('b', 2)
    cache.set('c', 3)
    cache.set('d', 4)
    assert cache.keys() == ['c', 'd']

    cache.clear()
    assert not cache


def test_negative_size_is_rejected():
    with pytest.raises(ValueError):
        pyguild.BoundedCache(-1)


def test_options_from_mapping():
    options = pyguild.ClientOptions.from_mapping({'cacheMessages': False, 'maxUserCache': 10, 'cache_docs': False})

    assert not options.cache_messages
    assert not options.cache_docs
    assert options.cache_channels
    assert options.max_user_cache == 10

    assert not options.should_cache('message')
    assert options.should_cache('server_member')
    assert options.max_cache_for('user') == 10
    assert options.max_cache_for('channel') is None


def test_options_reject_unknown_keys():
    with pytest.raises(TypeError):
        pyguild.ClientOptions.from_mapping({'cacheEmojis': True})

    with pytest.raises(ValueError):
        pyguild.ClientOptions(max_message_cache=-5)
