"""Reading and writing the RON text format used by the logs and responses."""

from __future__ import annotations

import enum
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from wooridb.types import Kind, Value, quote, quote_char, rfc3339


@dataclass
class RonStruct:
    """A RON struct: an optional name and ordered named fields."""

    name: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)


class RonParseError(ValueError):
    """Raised when text is not valid RON."""


class _Writer:
    def __init__(self, pretty: bool) -> None:
        self.pretty = pretty
        self.indent = " " if pretty else ""
        self.newline = "\n" if pretty else ""

    def block(self, opening: str, closing: str, items: list[str], level: int) -> str:
        if not items:
            return opening + closing
        parts = [opening, self.newline]
        for item in items:
            parts += [self.indent * (level + 1), item, ",", self.newline]
        parts += [self.indent * level, closing]
        return "".join(parts)

    def float_text(self, number: float) -> str:
        if number != number or number in (float("inf"), float("-inf")):
            return {"nan": "NaN", "inf": "inf", "-inf": "-inf"}[repr(number)]
        if not self.pretty and number.is_integer():
            return str(int(number))
        return repr(number)

    def value(self, value: Value, level: int) -> str:
        kind, data = value.kind, value.data
        if kind is Kind.NIL:
            return "Nil"
        if kind is Kind.CHAR:
            inner = quote_char(data)
        elif kind is Kind.INTEGER:
            inner = str(int(data))
        elif kind is Kind.FLOAT:
            inner = self.float_text(float(data))
        elif kind is Kind.BOOLEAN:
            inner = "true" if data else "false"
        else:
            inner = self.write(data, level)
        return f"{kind.value}({inner})"

    def write(self, obj: Any, level: int) -> str:
        if isinstance(obj, Value):
            return self.value(obj, level)
        if isinstance(obj, RonStruct):
            items = [f"{k}: {self.write(v, level + 1)}" for k, v in obj.fields.items()]
            return (obj.name or "") + self.block("(", ")", items, level)
        if obj is None:
            return "None"
        if isinstance(obj, bool):
            return "true" if obj else "false"
        if isinstance(obj, enum.Enum):
            return obj.name
        if isinstance(obj, int):
            return str(obj)
        if isinstance(obj, float):
            return self.float_text(obj)
        if isinstance(obj, str):
            return quote(obj)
        if isinstance(obj, uuid.UUID):
            return quote(str(obj))
        if isinstance(obj, datetime):
            return quote(rfc3339(obj))
        if isinstance(obj, dict):
            items = [
                f"{self.write(k, level + 1)}: {self.write(v, level + 1)}"
                for k, v in obj.items()
            ]
            return self.block("{", "}", items, level)
        if isinstance(obj, (list, set, frozenset)):
            return self.block("[", "]", [self.write(v, level + 1) for v in obj], level)
        if isinstance(obj, tuple):
            if self.pretty:
                return self.block("(", ")", [self.write(v, level + 1) for v in obj], level)
            return "(" + ", ".join(self.write(v, level) for v in obj) + ")"
        raise TypeError(f"cannot serialize {type(obj).__name__} to RON")


def to_ron(value: Any, pretty: bool = False) -> str:
    """Serialize a value; `pretty` gives the indented response layout."""
    return _Writer(pretty).write(value, 0)


_NUMBER = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_FRACTION = re.compile(r"\.(\d+)")
_KINDS = {kind.value: kind for kind in Kind}
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "0": "\0", "\\": "\\", '"': '"', "'": "'"}


def _parse_datetime(text: str) -> datetime:
    text = text.replace("Z", "+00:00")
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def _make_value(kind: Kind, data: Any) -> Value:
    if kind is Kind.INTEGER:
        return Value(kind, int(data))
    if kind is Kind.FLOAT:
        return Value(kind, float(data))
    if kind is Kind.UUID:
        return Value(kind, uuid.UUID(str(data)))
    if kind is Kind.DATETIME:
        return Value(kind, _parse_datetime(str(data)))
    if kind is Kind.BOOLEAN:
        return Value(kind, bool(data))
    if kind is Kind.VECTOR:
        return Value(kind, list(data))
    if kind is Kind.MAP:
        return Value(kind, dict(data))
    return Value(kind, data)


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> RonParseError:
        return RonParseError(f"{message} at position {self.pos}")

    def ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        self.ws()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            raise self.error(f"expected {char!r}")
        self.pos += 1

    def comma_or(self, closing: str) -> bool:
        """Consume a separator; return True when the closing bracket was reached."""
        char = self.peek()
        if char == ",":
            self.pos += 1
            return False
        if char == closing:
            return True
        raise self.error(f"expected ',' or {closing!r}")

    def value(self) -> Any:
        char = self.peek()
        if not char:
            raise self.error("unexpected end of input")
        if char == '"':
            return self.quoted('"')
        if char == "'":
            text = self.quoted("'")
            if len(text) != 1:
                raise self.error("invalid char literal")
            return text
        if char == "[":
            return self.sequence()
        if char == "{":
            return self.mapping()
        if char == "(":
            return self.paren(None)
        match = _NUMBER.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            token = match.group(0)
            if any(c in token for c in ".eE"):
                return float(token)
            return int(token)
        match = _IDENT.match(self.text, self.pos)
        if not match:
            raise self.error(f"unexpected character {char!r}")
        self.pos = match.end()
        name = match.group(0)
        if self.peek() == "(":
            return self.named(name)
        simple = {"true": True, "false": False, "None": None, "inf": float("inf"),
                  "NaN": float("nan")}
        if name in simple:
            return simple[name]
        if name == "Nil":
            return Value(Kind.NIL)
        return name

    def quoted(self, delimiter: str) -> str:
        self.pos += 1
        out = []
        while True:
            if self.pos >= len(self.text):
                raise self.error("unterminated literal")
            char = self.text[self.pos]
            self.pos += 1
            if char == delimiter:
                return "".join(out)
            if char != "\\":
                out.append(char)
                continue
            if self.pos >= len(self.text):
                raise self.error("unterminated escape")
            esc = self.text[self.pos]
            self.pos += 1
            if esc in _SIMPLE_ESCAPES:
                out.append(_SIMPLE_ESCAPES[esc])
            elif esc == "u":
                if self.text.startswith("{", self.pos):
                    end = self.text.find("}", self.pos)
                    if end < 0:
                        raise self.error("bad unicode escape")
                    digits = self.text[self.pos + 1 : end]
                    self.pos = end + 1
                else:
                    digits = self.text[self.pos : self.pos + 4]
                    self.pos += 4
                try:
                    out.append(chr(int(digits, 16)))
                except ValueError as exc:
                    raise self.error("bad unicode escape") from exc
            else:
                raise self.error(f"unknown escape \\{esc}")

    def sequence(self) -> list:
        self.pos += 1
        items = []
        while self.peek() != "]":
            items.append(self.value())
            if self.comma_or("]"):
                break
        self.expect("]")
        return items

    def mapping(self) -> dict:
        self.pos += 1
        items = {}
        while self.peek() != "}":
            key = self.value()
            self.expect(":")
            items[key] = self.value()
            if self.comma_or("}"):
                break
        self.expect("}")
        return items

    def named(self, name: str) -> Any:
        if name == "Some" or name in _KINDS:
            self.expect("(")
            inner = self.value()
            if self.peek() == ",":
                self.pos += 1
            self.expect(")")
            return inner if name == "Some" else _make_value(_KINDS[name], inner)
        result = self.paren(name)
        if not isinstance(result, RonStruct):
            raise self.error(f"unsupported tuple struct {name}")
        return result

    def starts_struct(self) -> bool:
        start = self.pos
        self.ws()
        match = _IDENT.match(self.text, self.pos)
        found = False
        if match:
            self.pos = match.end()
            found = self.peek() == ":"
        self.pos = start
        return found

    def paren(self, name: str | None) -> Any:
        self.expect("(")
        if self.starts_struct():
            fields = {}
            while self.peek() != ")":
                match = _IDENT.match(self.text, self.pos)
                if not match:
                    raise self.error("expected field name")
                self.pos = match.end()
                self.expect(":")
                fields[match.group(0)] = self.value()
                if self.comma_or(")"):
                    break
            self.expect(")")
            return RonStruct(name, fields)
        items = []
        while self.peek() != ")":
            items.append(self.value())
            if self.comma_or(")"):
                break
        self.expect(")")
        if name is not None and items:
            return tuple(items)
        return RonStruct(name, {}) if name is not None else tuple(items)


def from_ron(text: str) -> Any:
    """Parse RON text into Python values, RonStruct and Value objects."""
    parser = _Parser(text)
    result = parser.value()
    if parser.peek():
        raise parser.error("trailing characters")
    return result