import uuid

import pytest

from wooridb.types import Action, Kind, Value, parse_action


@pytest.mark.parametrize(
    "name, expected",
    [
        ("READ", Action.READ),
        ("CREATE_ENTITY", Action.CREATE_ENTITY),
        ("INSERT", Action.INSERT),
        ("DELETE", Action.DELETE),
        ("UPDATE_SET", Action.UPDATE_SET),
        ("UPDATE_CONTENT", Action.UPDATE_CONTENT),
        ("EVICT_ENTITY", Action.EVICT_ENTITY),
        ("EVICT_ENTITY_ID", Action.EVICT_ENTITY_ID),
    ],
)
def test_parse_action(name, expected):
    assert parse_action(name) is expected


def test_parse_unknown_action():
    assert parse_action("WHATEVER") is Action.ERROR


def test_action_display_round_trip():
    for action in Action:
        assert parse_action(str(action)) is action
    assert str(Action.CREATE_ENTITY) == "CREATE_ENTITY"


def test_is_hash():
    assert Value(Kind.HASH, "abc").is_hash()
    assert not Value(Kind.STRING, "abc").is_hash()


def test_default_values():
    assert Value(Kind.INTEGER, 5).default_value() == Value(Kind.INTEGER, 0)
    assert Value(Kind.STRING, "x").default_value() == Value(Kind.STRING, "")
    assert Value(Kind.NIL).default_value() == Value(Kind.NIL)


def test_debug_rendering():
    assert str(Value(Kind.INTEGER, 123)) == "Integer(123)"
    assert str(Value(Kind.CHAR, "d")) == "Char('d')"
    assert str(Value(Kind.STRING, "helloworld")) == 'String("helloworld")'
    assert str(Value(Kind.BOOLEAN, False)) == "Boolean(false)"
    assert str(Value(Kind.NIL)) == "Nil"
    assert str(Value(Kind.FLOAT, 12.3)) == "Float(12.3)"


def test_uuid_debug_contains_id():
    ident = uuid.uuid4()
    assert str(Value(Kind.UUID, ident)) == f"Uuid({ident})"