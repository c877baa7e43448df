import re
import uuid
from datetime import datetime, timezone

import pytest

from wooridb.logs import (
    create_entity,
    delete_entity_content,
    evict_entity_content,
    evict_entity_id_content,
    insert_entity_content,
    update_content_entity_content,
    update_content_state,
    update_set_entity_content,
)
from wooridb.types import Kind, Value

FIXED = datetime(2021, 2, 10, 12, 0, tzinfo=timezone.utc)


def test_create_entity():
    assert create_entity("my_entity") == "CREATE_ENTITY|my_entity;"


def test_insert_entity_without_uuid():
    moment, entity_id, log = insert_entity_content(
        "my_entity", "suppose this is a log", None, FIXED
    )
    assert moment == FIXED
    assert entity_id.version == 4
    assert "INSERT" in log
    assert "my_entity" in log
    assert "suppose this is a log" in log
    assert str(entity_id) in log


def test_insert_entity_with_uuid():
    entity_id = uuid.UUID("12345678-1234-4234-8234-123456789abc")
    _, returned, log = insert_entity_content("my_entity", "suppose this is a log", entity_id, FIXED)
    assert returned == entity_id
    assert log == (
        'INSERT|"2021-02-10T12:00:00Z"|12345678-1234-4234-8234-123456789abc|'
        "my_entity|suppose this is a log;"
    )


def test_update_set_entity_content():
    entity_id = uuid.uuid4()
    moment, log = update_set_entity_content("my-entity", entity_id, "log", "state", "reg", FIXED)
    assert moment == FIXED
    assert log == (
        f'UPDATE_SET|"2021-02-10T12:00:00Z"|{entity_id}|my-entity|log|state|reg;'
    )


def test_update_content_entity_content():
    entity_id = uuid.uuid4()
    moment, log = update_content_entity_content("my-entity", entity_id, "log", "state", "reg")
    assert moment.tzinfo is not None
    assert log.startswith("UPDATE_CONTENT|")
    assert log.endswith(f"|{entity_id}|my-entity|log|state|reg;")


def test_delete_entity_content():
    entity_id = uuid.uuid4()
    _, log = delete_entity_content("my-entity", entity_id, "log", "reg")
    assert log.startswith('DELETE|"')
    assert log.endswith(f'Z"|{entity_id}|my-entity|log|reg;')
    assert log.count("|") == 5


def test_evict_entity():
    actual = evict_entity_content("hello")
    assert actual.startswith("EVICT_ENTITY")
    assert re.fullmatch(r'EVICT_ENTITY\|"[^"]+Z"\|hello;', actual)


def test_evict_entity_id():
    entity_id = uuid.uuid4()
    actual = evict_entity_id_content("hello", entity_id)
    assert actual.startswith("EVICT_ENTITY_ID")
    assert actual.endswith(f"|{entity_id}|hello;")


def _apply(state, content):
    for key, value in content.items():
        update_content_state(state, key, value)
    return state


def test_update_content_state_combines_values():
    state = {
        "a": Value(Kind.INTEGER, 123),
        "b": Value(Kind.FLOAT, 12.3),
        "c": Value(Kind.CHAR, "d"),
        "d": Value(Kind.BOOLEAN, True),
        "e": Value(Kind.FLOAT, 43.21),
        "f": Value(Kind.STRING, "hello"),
        "g": Value(Kind.NIL),
        "h": Value(Kind.INTEGER, 7),
    }
    _apply(
        state,
        {
            "a": Value(Kind.INTEGER, 12),
            "b": Value(Kind.FLOAT, -1.3),
            "c": Value(Kind.CHAR, "d"),
            "d": Value(Kind.BOOLEAN, False),
            "e": Value(Kind.INTEGER, 4),
            "f": Value(Kind.STRING, "world"),
            "g": Value(Kind.BOOLEAN, True),
            "h": Value(Kind.FLOAT, 3.6),
        },
    )
    assert state["a"] == Value(Kind.INTEGER, 135)
    assert state["b"].kind is Kind.FLOAT
    assert state["b"].data == pytest.approx(11.0)
    assert state["c"] == Value(Kind.CHAR, "d")
    assert state["d"] == Value(Kind.BOOLEAN, False)
    assert state["e"].kind is Kind.FLOAT
    assert state["e"].data == pytest.approx(47.21)
    assert state["f"] == Value(Kind.STRING, "helloworld")
    assert state["g"] == Value(Kind.BOOLEAN, True)
    assert state["h"].kind is Kind.FLOAT
    assert state["h"].data == pytest.approx(10.6)


def test_update_content_state_missing_key_starts_from_default():
    state = _apply({}, {"n": Value(Kind.INTEGER, 5), "s": Value(Kind.STRING, "x")})
    assert state == {"n": Value(Kind.INTEGER, 5), "s": Value(Kind.STRING, "x")}


def test_update_content_state_vector_and_map():
    state = {
        "v": Value(Kind.VECTOR, [Value(Kind.INTEGER, 1)]),
        "m": Value(Kind.MAP, {"x": Value(Kind.INTEGER, 1), "y": Value(Kind.INTEGER, 2)}),
    }
    _apply(
        state,
        {
            "v": Value(Kind.VECTOR, [Value(Kind.INTEGER, 2)]),
            "m": Value(Kind.MAP, {"y": Value(Kind.INTEGER, 9), "z": Value(Kind.NIL)}),
        },
    )
    assert state["v"] == Value(Kind.VECTOR, [Value(Kind.INTEGER, 1), Value(Kind.INTEGER, 2)])
    assert state["m"] == Value(
        Kind.MAP,
        {"x": Value(Kind.INTEGER, 1), "y": Value(Kind.INTEGER, 9), "z": Value(Kind.NIL)},
    )


def test_update_content_state_hash_is_untouched():
    state = {"h": Value(Kind.HASH, "stored")}
    update_content_state(state, "h", Value(Kind.HASH, "other"))
    assert state["h"] == Value(Kind.HASH, "stored")


def test_update_content_state_string_onto_number_keeps_number():
    state = {"a": Value(Kind.INTEGER, 3)}
    update_content_state(state, "a", Value(Kind.STRING, "x"))
    assert state["a"] == Value(Kind.INTEGER, 3)