"""Building transaction log entries and folding updates into entity state."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from wooridb.ron import to_ron
from wooridb.types import Action, Kind, Value


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _date_text(moment: datetime) -> str:
    return to_ron(moment)


def create_entity(entity: str) -> str:
    """Log entry for a new entity."""
    return f"{Action.CREATE_ENTITY}|{entity};"


def evict_entity_content(entity: str) -> str:
    """Log entry evicting a whole entity."""
    return f"{Action.EVICT_ENTITY}|{_date_text(_now())}|{entity};"


def evict_entity_id_content(entity: str, entity_id: uuid.UUID) -> str:
    """Log entry evicting one id of an entity."""
    return f"{Action.EVICT_ENTITY_ID}|{_date_text(_now())}|{entity_id}|{entity};"


def insert_entity_content(
    entity: str,
    content: str,
    uuid: uuid.UUID | None,
    datetime: datetime,
) -> tuple:
    """Log entry for an insert; a fresh id is generated when none is given.

    Returns the transaction time, the id used and the log line.
    """
    entity_id = uuid if uuid is not None else _new_uuid()
    log = f"{Action.INSERT}|{_date_text(datetime)}|{entity_id}|{entity}|{content};"
    return datetime, entity_id, log


def _new_uuid():
    import uuid as uuid_module

    return uuid_module.uuid4()


def update_set_entity_content(
    entity: str,
    entity_id: uuid.UUID,
    content_log: str,
    current_state: str,
    previous_registry: str,
    datetime: datetime,
) -> tuple:
    """Log entry for UPDATE SET; returns the transaction time and the line."""
    log = (
        f"{Action.UPDATE_SET}|{_date_text(datetime)}|{entity_id}|{entity}|"
        f"{content_log}|{current_state}|{previous_registry};"
    )
    return datetime, log


def update_content_entity_content(
    entity: str,
    entity_id: uuid.UUID,
    content_log: str,
    current_state: str,
    previous_registry: str,
) -> tuple:
    """Log entry for UPDATE CONTENT, stamped now; returns the time and the line."""
    moment = _now()
    log = (
        f"{Action.UPDATE_CONTENT}|{_date_text(moment)}|{entity_id}|{entity}|"
        f"{content_log}|{current_state}|{previous_registry};"
    )
    return moment, log


def delete_entity_content(
    entity: str,
    entity_id: uuid.UUID,
    content_log: str,
    previous_registry: str,
) -> tuple:
    """Log entry for a DELETE, stamped now; returns the time and the line."""
    moment = _now()
    log = (
        f"{Action.DELETE}|{_date_text(moment)}|{entity_id}|{entity}|"
        f"{content_log}|{previous_registry};"
    )
    return moment, log


_NUMERIC = (Kind.INTEGER, Kind.FLOAT)


def update_content_state(state: dict, key: str, value: Value) -> None:
    """Fold an UPDATE CONTENT value into `state[key]`.

    Numbers are added, strings concatenated, vectors appended and maps
    merged; hashes are left alone and every other kind replaces the value.
    A missing key starts from the neutral value of the incoming kind.
    """
    current = state.setdefault(key, value.default_value())
    kind = value.kind
    if kind in _NUMERIC:
        if current.kind in _NUMERIC:
            total = current.data + value.data
            if kind is Kind.INTEGER and current.kind is Kind.INTEGER:
                state[key] = Value(Kind.INTEGER, int(total))
            else:
                state[key] = Value(Kind.FLOAT, float(total))
    elif kind is Kind.STRING:
        if current.kind is Kind.STRING:
            state[key] = Value(Kind.STRING, current.data + value.data)
    elif kind is Kind.VECTOR:
        if current.kind is Kind.VECTOR:
            state[key] = Value(Kind.VECTOR, list(current.data) + list(value.data))
    elif kind is Kind.MAP:
        if current.kind is Kind.MAP:
            merged = dict(current.data)
            merged.update(value.data)
            state[key] = Value(Kind.MAP, merged)
    elif kind is Kind.HASH:
        pass
    else:
        state[key] = value