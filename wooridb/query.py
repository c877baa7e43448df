"""Shaping query results: key filters, paging, dedup, grouping, ordering and counting."""

from __future__ import annotations

import enum
import functools
import itertools
import sys
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from wooridb.errors import EntityNotCreatedError, FailedToParseStateError
from wooridb.ron import RonParseError, from_ron
from wooridb.types import Kind, Value


class Order(enum.Enum):
    """Sort direction of an ORDER BY clause."""

    ASC = "Asc"
    DESC = "Desc"


@dataclass(frozen=True)
class Limit:
    value: int


@dataclass(frozen=True)
class Offset:
    value: int


@dataclass(frozen=True)
class Count:
    pass


@dataclass(frozen=True)
class Dedup:
    key: str


@dataclass(frozen=True)
class GroupBy:
    key: str


@dataclass(frozen=True)
class OrderBy:
    key: str
    order: Order = Order.ASC


@dataclass
class CountResponse:
    """A query result together with the number of entries it holds."""

    count: int
    response: Any


_NIL = Value(Kind.NIL)
_NIL_PREFIX = "NIL("
_NUMERIC = (Kind.INTEGER, Kind.FLOAT)
_ORDERED = (
    Kind.CHAR,
    Kind.INTEGER,
    Kind.FLOAT,
    Kind.STRING,
    Kind.BOOLEAN,
    Kind.UUID,
    Kind.DATETIME,
)


def _decode_state(encoded: Any) -> dict:
    if isinstance(encoded, Mapping):
        return dict(encoded)
    if isinstance(encoded, (bytes, bytearray, memoryview)):
        text = bytes(encoded).decode("utf-8")
    else:
        text = str(encoded)
    try:
        state = from_ron(text)
    except RonParseError as exc:
        raise FailedToParseStateError() from exc
    if not isinstance(state, dict):
        raise FailedToParseStateError()
    return state


def _by_id(states: Mapping) -> list:
    return sorted(states.items(), key=lambda item: item[0])


def _sign(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _compare(a: Value | None, b: Value | None) -> int | None:
    """Partial ordering of optional values; None when they cannot be ordered."""
    if a is None or b is None:
        return _sign(a is not None, b is not None)
    if a.kind in _NUMERIC and b.kind in _NUMERIC:
        return _sign(a.data, b.data)
    if a.kind is not b.kind:
        return None
    if a.kind is Kind.NIL:
        return 0
    if a.kind is Kind.PRECISE:
        try:
            return _sign(Decimal(str(a.data)), Decimal(str(b.data)))
        except InvalidOperation:
            return None
    if a.kind in _ORDERED:
        try:
            return _sign(a.data, b.data)
        except TypeError:
            return None
    return None


def _sort_pairs(pairs: list, key: str, order: Order) -> list:
    descending = order is not Order.ASC

    def cmp(x: tuple, y: tuple) -> int:
        a, b = x[1].get(key), y[1].get(key)
        if descending:
            a, b = b, a
        result = _compare(a, b)
        return -1 if result is None else result

    return sorted(pairs, key=functools.cmp_to_key(cmp))


def _dedup_key(name: str) -> tuple[bool, str]:
    if name.startswith(_NIL_PREFIX):
        return True, name[len(_NIL_PREFIX) : -1]
    return False, name


def filter_keys_and_hash(state: Mapping, keys) -> dict:
    """Drop hashed values and, when keys are given, every other key."""
    return {
        k: v
        for k, v in state.items()
        if not v.is_hash() and (keys is None or k in keys)
    }


def registries_to_states(registries: Mapping, keys, offset: int, limit: int) -> dict:
    """Decode the stored states of registries, skipping `offset` and taking `limit`."""
    selected = itertools.islice(itertools.islice(_by_id(registries), offset, None), limit)
    return {
        entity_id: filter_keys_and_hash(_decode_state(encoded), keys)
        for entity_id, (_, encoded) in selected
    }


def get_limit_offset_count(functions: Mapping) -> tuple[int, int, bool]:
    """The LIMIT, OFFSET and COUNT settings of a query, with their defaults."""
    limit = functions.get("LIMIT")
    offset = functions.get("OFFSET")
    return (
        limit.value if isinstance(limit, Limit) else sys.maxsize,
        offset.value if isinstance(offset, Offset) else 0,
        isinstance(functions.get("COUNT"), Count),
    )


def dedup_states(states: Mapping, functions: Mapping) -> dict:
    """Keep the first state for each value of the DEDUP key.

    With `NIL(key)` states whose key is missing or Nil are dropped.
    """
    dedup = functions.get("DEDUP")
    if not isinstance(dedup, Dedup):
        return dict(states)
    nil_mode, key = _dedup_key(dedup.key)
    seen: set[str] = set()
    result = {}
    for entity_id, state in _by_id(states):
        if nil_mode:
            value = state.get(key)
            if value is not None and value != _NIL and str(value) not in seen:
                seen.add(str(value))
                result[entity_id] = state
        else:
            marker = str(state.get(dedup.key, _NIL))
            if marker not in seen:
                seen.add(marker)
                result[entity_id] = state
    return result


def dedup_option_states(states: Mapping, functions: Mapping) -> dict:
    """DEDUP over states that may be absent; absent states are dropped."""
    dedup = functions.get("DEDUP")
    if not isinstance(dedup, Dedup):
        return dict(states)
    nil_mode, key = _dedup_key(dedup.key)
    seen: set[str] = set()
    result = {}
    for entity_id, state in _by_id(states):
        if state is None:
            continue
        value = state.get(key)
        if nil_mode and value is not None and value != _NIL:
            seen.add(str(value))
            result[entity_id] = state
        else:
            marker = str(value if value is not None else _NIL)
            if marker not in seen:
                seen.add(marker)
                result[entity_id] = state
    return result


def _grouped(pairs: list, key: str) -> dict:
    groups: dict[str, dict] = {}
    for entity_id, state in pairs:
        marker = str(state.get(key, _NIL)) if state is not None else str(_NIL)
        groups.setdefault(marker, {})[entity_id] = state
    return groups


def _shape(pairs: list, functions: Mapping, should_count: bool) -> Any:
    order = functions.get("ORDER")
    group = functions.get("GROUP")
    if isinstance(order, OrderBy) and group is None:
        present = [(i, s) for i, s in pairs if s is not None]
        ordered = _sort_pairs(present, order.key, order.order)
        return CountResponse(len(ordered), ordered) if should_count else ordered
    if isinstance(group, GroupBy):
        groups = _grouped(pairs, group.key)
        if isinstance(order, OrderBy):
            return {
                marker: _sort_pairs(
                    [(i, s) for i, s in _by_id(members) if s is not None],
                    order.key,
                    order.order,
                )
                for marker, members in groups.items()
            }
        return CountResponse(len(groups), groups) if should_count else groups
    states = dict(pairs)
    return CountResponse(len(states), states) if should_count else states


def get_result_after_manipulation(states: Mapping, functions: Mapping, should_count: bool):
    """Apply ORDER, GROUP and COUNT to the selected states."""
    return _shape(_by_id(states), functions, should_count)


def get_result_after_manipulation_for_options(
    states: Mapping, functions: Mapping, should_count: bool
):
    """Apply ORDER, GROUP and COUNT to states that may be absent."""
    return _shape(_by_id(states), functions, should_count)


def get_registries(entity: str, local_data: Mapping) -> dict:
    """A copy of the id-to-registry map of an entity."""
    try:
        registries = local_data[entity]
    except KeyError:
        raise EntityNotCreatedError(entity) from None
    return dict(registries)