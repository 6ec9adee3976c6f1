"""Playbook record parsing.

The canonical syntax is a composite literal, one record per action:

    click{selector:"#go", timeout:"5s"}

A record may span several physical lines. ``parse`` returns None while the
text is a well-formed prefix that ran out of input, so the caller appends
the next line and tries again.

The legacy flat syntax puts one record on one line:

    click selector=#go timeout=5s

Both front-ends produce a Record, which ``build`` turns into an action
through the registry.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from webplay.actions import Action
from webplay.errors import PlaybookSyntaxError, UnknownFieldError
from webplay.registry import ActionRegistry, registry as default_registry


class Syntax(str, Enum):
    LITERAL = "literal"
    LOGFMT = "logfmt"


@dataclass
class Record:
    """A parsed but not yet resolved record."""

    kind: str
    fields: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class Step:
    """A resolved action together with the kind name it was written as."""

    name: str
    action: Action

    def __str__(self) -> str:
        return str(self.action)


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<ident>[^\W\d]\w*)
    | (?P<string>"(?:[^"\\\n]|\\.)*")
    | (?P<raw>`[^`]*`)
    | (?P<char>'(?:[^'\\\n]|\\.)*')
    | (?P<number>\.?\d(?:[eEpP][+-]|[\w.])*)
    | (?P<punct>[{}:,])
    | (?P<other>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_UNTERMINATED = {
    '"': "string literal not terminated",
    "`": "raw string literal not terminated",
    "'": "rune literal not terminated",
}


@dataclass
class _Token:
    kind: str
    text: str
    pos: int


def _tokenize(text: str) -> list[_Token]:
    tokens = []
    for m in _TOKEN_RE.finditer(text):
        kind = m.lastgroup
        if kind == "ws":
            continue
        if kind == "other" and m.group() in _UNTERMINATED:
            raise PlaybookSyntaxError(f"{_UNTERMINATED[m.group()]} at column {m.start() + 1}")
        tokens.append(_Token(kind, m.group(), m.start()))
    return tokens


class _Incomplete(Exception):
    """Input ended before the record did."""


class _Cursor:
    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def next(self) -> _Token:
        if self._pos >= len(self._tokens):
            raise _Incomplete
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def peek(self) -> _Token | None:
        if self._pos >= len(self._tokens):
            return None
        return self._tokens[self._pos]


# ---------------------------------------------------------------------------
# String literals
# ---------------------------------------------------------------------------

_ESCAPE_RE = re.compile(
    r"""\\(?:
        (?P<simple>[abfnrtv\\"])
      | x(?P<hex>[0-9a-fA-F]{2})
      | (?P<octal>[0-7]{3})
      | u(?P<u4>[0-9a-fA-F]{4})
      | U(?P<u8>[0-9a-fA-F]{8})
      | (?P<bad>.?)
    )""",
    re.VERBOSE | re.DOTALL,
)

_SIMPLE_ESCAPES = {
    "a": 0x07, "b": 0x08, "f": 0x0C, "n": 0x0A, "r": 0x0D,
    "t": 0x09, "v": 0x0B, "\\": 0x5C, '"': 0x22,
}


def unquote(literal: str) -> str:
    """Return the value of a double-quoted or backquoted string literal.

    Escapes follow Go rules: ``\\x`` and octal escapes produce raw bytes,
    ``\\u``/``\\U`` produce code points, and the result is decoded as UTF-8.
    """
    if len(literal) >= 2 and literal[0] == literal[-1] == "`":
        return literal[1:-1].replace("\r", "")
    if len(literal) < 2 or literal[0] != '"' or literal[-1] != '"':
        raise PlaybookSyntaxError(f"invalid string literal {literal}")

    body = literal[1:-1]
    out = bytearray()
    pos = 0
    for m in _ESCAPE_RE.finditer(body):
        out += body[pos:m.start()].encode()
        pos = m.end()
        if m.group("simple") is not None:
            out.append(_SIMPLE_ESCAPES[m.group("simple")])
        elif m.group("hex") is not None:
            out.append(int(m.group("hex"), 16))
        elif m.group("octal") is not None:
            value = int(m.group("octal"), 8)
            if value > 0xFF:
                raise PlaybookSyntaxError(f"octal escape value > 255 in {literal}")
            out.append(value)
        elif m.group("u4") is not None or m.group("u8") is not None:
            cp = int(m.group("u4") or m.group("u8"), 16)
            if cp > 0x10FFFF or 0xD800 <= cp <= 0xDFFF:
                raise PlaybookSyntaxError(f"escape sequence is invalid Unicode code point in {literal}")
            out += chr(cp).encode()
        else:
            raise PlaybookSyntaxError(f"unknown escape sequence in {literal}")
    out += body[pos:].encode()
    return out.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Composite-literal front-end
# ---------------------------------------------------------------------------

def read_literal(buffer: str) -> Record | None:
    """Read one ``kind{field:"value", ...}`` record from ``buffer``.

    Returns None when the buffer is a truncated but otherwise valid record.
    """
    cursor = _Cursor(_tokenize(buffer))
    try:
        head = cursor.next()
        if head.kind != "ident":
            raise PlaybookSyntaxError(
                f"Invalid definition found, expected kind{{field:\"value\"}}, got {head.text!r}"
            )
        kind = head.text
        brace = cursor.next()
        if brace.text != "{":
            raise PlaybookSyntaxError(f"expected '{{' after {kind!r}, found {brace.text!r}")

        fields: list[tuple[str, str]] = []
        while True:
            key = cursor.next()
            if key.text == "}":
                break
            if key.kind == "punct":
                raise PlaybookSyntaxError(f"unexpected {key.text!r} in {kind!r} record")
            colon = cursor.next()
            if colon.text != ":":
                raise PlaybookSyntaxError(f"No field name given for {key.text} on type {kind!r}")
            if key.kind != "ident":
                raise PlaybookSyntaxError(f"Field name {key.text} on type {kind!r} is not an identifier")
            value = cursor.next()
            if value.kind not in ("string", "raw"):
                raise PlaybookSyntaxError(
                    f"Attribute {key.text!r} on type {kind!r} is not a string: {value.text}"
                )
            fields.append((key.text, unquote(value.text)))

            sep = cursor.next()
            if sep.text == "}":
                break
            if sep.text != ",":
                raise PlaybookSyntaxError(
                    f"expected ',' or '}}' after {key.text!r} on type {kind!r}, found {sep.text!r}"
                )
    except _Incomplete:
        return None

    trailing = cursor.peek()
    if trailing is not None:
        raise PlaybookSyntaxError(f"unexpected {trailing.text!r} after {kind!r} record")
    return Record(kind=kind, fields=fields)


# ---------------------------------------------------------------------------
# Flat key=value front-end
# ---------------------------------------------------------------------------

_IDENT_RE = re.compile(r"[^\W\d]\w*")
_PAIR_RE = re.compile(r'(?P<key>[^\s="]+)(?:=(?P<value>"(?:[^"\\]|\\.)*"|[^\s"]*))?(?=\s|$)')


def read_logfmt(line: str) -> Record | None:
    """Read a ``kind key=value ...`` record. Returns None for a blank line."""
    pairs: list[tuple[str, str | None]] = []
    pos = 0
    while True:
        while pos < len(line) and line[pos].isspace():
            pos += 1
        if pos >= len(line):
            break
        m = _PAIR_RE.match(line, pos)
        if m is None:
            raise PlaybookSyntaxError(f"malformed key=value pair at column {pos + 1}: {line[pos:]!r}")
        key, value = m.group("key"), m.group("value")
        if not _IDENT_RE.fullmatch(key):
            raise PlaybookSyntaxError(f"invalid field name {key!r} at column {pos + 1}")
        if value is not None and value.startswith('"'):
            value = unquote(value)
        pairs.append((key, value))
        pos = m.end()

    if not pairs:
        return None
    kind, kind_value = pairs[0]
    if kind_value:
        raise PlaybookSyntaxError(f"expected an action kind first, found {kind}={kind_value!r}")
    return Record(kind=kind, fields=[(k, v or "") for k, v in pairs[1:]])


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def build(record: Record, registry: ActionRegistry = default_registry) -> Step:
    """Resolve the record kind and apply its fields in order."""
    action = registry.resolve(record.kind)
    for name, value in record.fields:
        try:
            action.set_field(name, value)
        except UnknownFieldError:
            raise UnknownFieldError(action, name, value, kind=record.kind) from None
    return Step(name=record.kind, action=action)


def parse(buffer: str, registry: ActionRegistry = default_registry) -> Step | None:
    """Parse a composite-literal record. None means more input is needed."""
    record = read_literal(buffer)
    if record is None:
        return None
    return build(record, registry)


def parse_logfmt(line: str, registry: ActionRegistry = default_registry) -> Step | None:
    """Parse a flat key=value record. None means the line was blank."""
    record = read_logfmt(line)
    if record is None:
        return None
    return build(record, registry)


PARSERS = {
    Syntax.LITERAL: parse,
    Syntax.LOGFMT: parse_logfmt,
}
