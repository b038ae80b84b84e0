import typing

import pyguild


class Entity:
    def __init__(self, id: str) -> None:
        self.id = id


def test_undefined_sentinel():
    assert not pyguild.UNDEFINED
    assert repr(pyguild.UNDEFINED) == 'UNDEFINED'
    assert pyguild.UNDEFINED == pyguild.UNDEFINED
    assert pyguild.UNDEFINED != None  # noqa: E711

    assert hash(pyguild.UNDEFINED) == hash(pyguild.UNDEFINED)
    assert {pyguild.UNDEFINED: 1}[pyguild.UNDEFINED] == 1

    # Literal and Union hash their arguments
    assert typing.get_args(pyguild.Undefined) == (pyguild.UNDEFINED,)
    assert typing.get_args(typing.Union[pyguild.Undefined, int]) == (pyguild.Undefined, int)
    assert pyguild.UndefinedOr[str] == typing.Union[pyguild.Undefined, str]


def test_resolve_id():
    assert pyguild.resolve_id('abc') == 'abc'
    assert pyguild.resolve_id(42) == 42
    assert pyguild.resolve_id(Entity('xyz')) == 'xyz'
