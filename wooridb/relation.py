"""Set relations between two single-entity query results."""

from __future__ import annotations

import enum
from typing import Mapping

from wooridb.errors import InvalidQueryError


class RelationType(enum.Enum):
    """Whether a relation compares keys only or keys and values."""

    KEY = "KEY"
    KEY_VALUE = "KEY-VALUE"


def _check(first, second, relation_type) -> None:
    if not (
        isinstance(first, Mapping)
        and isinstance(second, Mapping)
        and isinstance(relation_type, RelationType)
    ):
        raise InvalidQueryError()


def intersect(first: Mapping, second: Mapping, relation_type: RelationType) -> dict:
    """Entries of `second` whose key (and value, for KEY_VALUE) is in `first`.

    With KEY the value is taken from `first`.
    """
    _check(first, second, relation_type)
    if relation_type is RelationType.KEY:
        return {k: first[k] for k in second if k in first}
    return {k: v for k, v in second.items() if k in first and first[k] == v}


def difference(first: Mapping, second: Mapping, relation_type: RelationType) -> dict:
    """Entries of `first` not matched by `second`."""
    _check(first, second, relation_type)
    if relation_type is RelationType.KEY:
        return {k: v for k, v in first.items() if k not in second}
    return {k: v for k, v in first.items() if not (k in second and second[k] == v)}


def union(first: Mapping, second: Mapping, relation_type: RelationType) -> dict:
    """All entries of both; with KEY_VALUE clashing values of `second` go under `key:duplicated`."""
    _check(first, second, relation_type)
    state = dict(first)
    for k, v in second.items():
        if k not in first:
            state[k] = v
        elif relation_type is RelationType.KEY_VALUE and first[k] != v:
            state[f"{k}:duplicated"] = v
    return state