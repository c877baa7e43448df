"""Core value types and transaction argument records."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class Action(enum.Enum):
    """Kinds of entries written to the transaction log."""

    CREATE_ENTITY = "CREATE_ENTITY"
    INSERT = "INSERT"
    READ = "READ"
    UPDATE_SET = "UPDATE_SET"
    UPDATE_CONTENT = "UPDATE_CONTENT"
    DELETE = "DELETE"
    EVICT_ENTITY = "EVICT_ENTITY"
    EVICT_ENTITY_ID = "EVICT_ENTITY_ID"
    ERROR = "Error"

    def __str__(self) -> str:
        return self.value


def parse_action(name: str) -> Action:
    """Map a log action name to an Action; unknown names give Action.ERROR."""
    if name == Action.ERROR.value:
        return Action.ERROR
    try:
        return Action(name)
    except ValueError:
        return Action.ERROR


class Kind(enum.Enum):
    """The variants a stored value can take."""

    CHAR = "Char"
    INTEGER = "Integer"
    STRING = "String"
    UUID = "Uuid"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    HASH = "Hash"
    VECTOR = "Vector"
    MAP = "Map"
    NIL = "Nil"
    PRECISE = "Precise"
    DATETIME = "DateTime"


_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}


def _escape(text: str, quote_char: str) -> str:
    out = []
    for ch in text:
        if ch == quote_char:
            out.append("\\" + ch)
        elif ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{{{ord(ch):x}}}")
        else:
            out.append(ch)
    return "".join(out)


def quote(text: str) -> str:
    """Quote a string with double quotes, escaping as a debug rendering does."""
    return '"' + _escape(text, '"') + '"'


def quote_char(char: str) -> str:
    """Quote a single character with single quotes."""
    return "'" + _escape(char, "'") + "'"


def rfc3339(moment: datetime) -> str:
    """Render a datetime in RFC 3339 form, using `Z` for UTC."""
    text = moment.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def _debug_float(number: float) -> str:
    return repr(float(number))


@dataclass(frozen=True)
class Value:
    """A typed value stored in an entity."""

    kind: Kind
    data: Any = None

    def is_hash(self) -> bool:
        return self.kind is Kind.HASH

    def default_value(self) -> Value:
        """The neutral value of the same kind, used when a key is first updated."""
        defaults = {
            Kind.CHAR: " ",
            Kind.INTEGER: 0,
            Kind.STRING: "",
            Kind.UUID: uuid.UUID(int=0),
            Kind.FLOAT: 0.0,
            Kind.BOOLEAN: False,
            Kind.HASH: "",
            Kind.VECTOR: [],
            Kind.MAP: {},
            Kind.NIL: None,
            Kind.PRECISE: "0",
        }
        if self.kind is Kind.DATETIME:
            return Value(Kind.DATETIME, datetime.now(timezone.utc))
        return Value(self.kind, defaults[self.kind])

    def __str__(self) -> str:
        kind = self.kind
        if kind is Kind.NIL:
            return "Nil"
        if kind is Kind.CHAR:
            inner = quote_char(self.data)
        elif kind is Kind.INTEGER:
            inner = str(int(self.data))
        elif kind is Kind.FLOAT:
            inner = _debug_float(self.data)
        elif kind is Kind.BOOLEAN:
            inner = "true" if self.data else "false"
        elif kind in (Kind.STRING, Kind.HASH, Kind.PRECISE):
            inner = quote(str(self.data))
        elif kind is Kind.UUID:
            inner = str(self.data)
        elif kind is Kind.DATETIME:
            inner = rfc3339(self.data)
        elif kind is Kind.VECTOR:
            inner = "[" + ", ".join(str(v) for v in self.data) + "]"
        else:
            inner = "{" + ", ".join(f"{quote(k)}: {v}" for k, v in self.data.items()) + "}"
        return f"{kind.value}({inner})"


@dataclass
class InsertArgs:
    entity: str
    content: dict[str, Value] = field(default_factory=dict)
    uuid: uuid.UUID | None = None


@dataclass
class UpdateArgs:
    entity: str
    content: dict[str, Value]
    id: uuid.UUID


@dataclass
class MatchUpdateArgs:
    entity: str
    content: dict[str, Value]
    id: uuid.UUID
    conditions: Any