"""Tolerant TOML reader for dependency manifests.

``tomllib`` rejects a whole document on the first error. Manifests that are
half-edited or use constructs we do not care about should still yield the
tables we can read, so this reader works line by line: a small value tokenizer
handles strings, numbers, booleans, arrays and inline tables, and a section
accumulator files each ``key = value`` pair under the current ``[header]``.
Lines that do not parse are skipped.
"""

import re
import tomllib
from typing import Any

from .log import logger

_RE_HEADER = re.compile(r"^\[(\[)?\s*(.+?)\s*\](\])?\s*(?:#.*)?$")
_BARE_KEY = re.compile(r"[A-Za-z0-9_-]+")
_RE_SCALAR = re.compile(r"[^,\]\}\s#]+")
_MAX_CONTINUATION_LINES = 200


class TomlLiteError(ValueError):
    """Raised for a fragment the tokenizer cannot read."""


class _ValueParser:
    """Recursive-descent parser for a single TOML value."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse_value_only(self) -> Any:
        value = self._value()
        self._skip_space()
        if self.pos < len(self.text) and self.text[self.pos] != "#":
            raise TomlLiteError(f"trailing characters: {self.text[self.pos:]!r}")
        return value

    def parse_key(self) -> list[str]:
        parts = [self._key_part()]
        while True:
            self._skip_space()
            if self._peek() != ".":
                return parts
            self.pos += 1
            parts.append(self._key_part())

    def expect(self, char: str) -> None:
        self._skip_space()
        if self._peek() != char:
            raise TomlLiteError(f"expected {char!r} at {self.pos}")
        self.pos += 1

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _skip_space(self) -> None:
        while self._peek() in (" ", "\t"):
            self.pos += 1

    def _skip_blank(self) -> None:
        while True:
            char = self._peek()
            if char in (" ", "\t", "\n", "\r"):
                self.pos += 1
            elif char == "#":
                end = self.text.find("\n", self.pos)
                self.pos = len(self.text) if end == -1 else end
            else:
                return

    def _key_part(self) -> str:
        self._skip_space()
        char = self._peek()
        if char == '"':
            return self._basic_string()
        if char == "'":
            return self._literal_string()
        match = _BARE_KEY.match(self.text, self.pos)
        if not match:
            raise TomlLiteError(f"invalid key at {self.pos}")
        self.pos = match.end()
        return match.group(0)

    def _value(self) -> Any:
        self._skip_space()
        char = self._peek()
        if not char:
            raise TomlLiteError("unexpected end of value")
        if char == '"':
            return self._basic_string()
        if char == "'":
            return self._literal_string()
        if char == "[":
            return self._array()
        if char == "{":
            return self._inline_table()
        return self._scalar()

    def _basic_string(self) -> str:
        if self.text.startswith('"""', self.pos):
            raise TomlLiteError("multi-line strings are not supported")
        self.pos += 1
        out = []
        while True:
            char = self._peek()
            if not char or char == "\n":
                raise TomlLiteError("unterminated string")
            self.pos += 1
            if char == '"':
                return "".join(out)
            if char == "\\":
                escaped = self._peek()
                self.pos += 1
                out.append({"n": "\n", "t": "\t", '"': '"', "\\": "\\"}.get(escaped, escaped))
            else:
                out.append(char)

    def _literal_string(self) -> str:
        end = self.text.find("'", self.pos + 1)
        if end == -1:
            raise TomlLiteError("unterminated literal string")
        value = self.text[self.pos + 1:end]
        self.pos = end + 1
        return value

    def _array(self) -> list[Any]:
        self.pos += 1
        items = []
        while True:
            self._skip_blank()
            if self._peek() == "]":
                self.pos += 1
                return items
            items.append(self._value())
            self._skip_blank()
            if self._peek() == ",":
                self.pos += 1
            elif self._peek() != "]":
                raise TomlLiteError(f"expected ',' or ']' at {self.pos}")

    def _inline_table(self) -> dict[str, Any]:
        self.pos += 1
        table: dict[str, Any] = {}
        while True:
            self._skip_space()
            if self._peek() == "}":
                self.pos += 1
                return table
            key = self.parse_key()
            self.expect("=")
            _assign(table, key, self._value())
            self._skip_space()
            if self._peek() == ",":
                self.pos += 1
            elif self._peek() != "}":
                raise TomlLiteError(f"expected ',' or '}}' at {self.pos}")

    def _scalar(self) -> Any:
        match = _RE_SCALAR.match(self.text, self.pos)
        if not match:
            raise TomlLiteError(f"unexpected character at {self.pos}")
        token = match.group(0)
        self.pos = match.end()
        if token == "true":
            return True
        if token == "false":
            return False
        number = token.replace("_", "")
        try:
            return int(number, 0) if number[:2] in ("0x", "0o", "0b") else int(number)
        except ValueError:
            pass
        try:
            return float(number)
        except ValueError:
            # Dates and other bare tokens are kept verbatim
            return token


def _assign(table: dict[str, Any], key: list[str], value: Any) -> None:
    for part in key[:-1]:
        child = table.get(part)
        if not isinstance(child, dict):
            child = {}
            table[part] = child
        table = child
    table[key[-1]] = value


def _open_table(root: dict[str, Any], path: list[str], array: bool) -> dict[str, Any]:
    current = root
    for part in path[:-1]:
        child = current.setdefault(part, {})
        if isinstance(child, list):
            child = child[-1] if child else {}
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    last = path[-1]
    if array:
        tables = current.get(last)
        if not isinstance(tables, list):
            tables = []
            current[last] = tables
        table: dict[str, Any] = {}
        tables.append(table)
        return table
    table = current.get(last)
    if not isinstance(table, dict):
        table = {}
        current[last] = table
    return table


def _bracket_balance(fragment: str) -> int:
    depth = 0
    quote = ""
    in_comment = False
    for char in fragment:
        if in_comment:
            in_comment = char != "\n"
        elif quote:
            if char == quote:
                quote = ""
        elif char in ("'", '"'):
            quote = char
        elif char == "#":
            in_comment = True
        elif char in "[{":
            depth += 1
        elif char in "]}":
            depth -= 1
    return depth


def parse_toml_lite(text: str) -> dict[str, Any]:
    """Parse ``text`` leniently, skipping lines that do not parse."""
    root: dict[str, Any] = {}
    current = root
    lines = text.splitlines()
    index = 0

    while index < len(lines):
        line = lines[index].strip()
        index += 1
        if not line or line.startswith("#"):
            continue

        header = _RE_HEADER.match(line)
        if header and "=" not in line.split("]", 1)[0]:
            try:
                path = _ValueParser(header.group(2)).parse_key()
            except TomlLiteError:
                logger.debug("Skipping malformed TOML header: {}", line)
                current = {}
                continue
            current = _open_table(root, path, array=bool(header.group(1) and header.group(3)))
            continue

        # Arrays and inline tables may continue over several lines
        fragment = line
        extra = 0
        while _bracket_balance(fragment) > 0 and index < len(lines) and extra < _MAX_CONTINUATION_LINES:
            fragment += "\n" + lines[index]
            index += 1
            extra += 1

        parser = _ValueParser(fragment)
        try:
            key = parser.parse_key()
            parser.expect("=")
            value = parser.parse_value_only()
        except TomlLiteError as exc:
            logger.debug("Skipping malformed TOML line {!r}: {}", line, exc)
            continue
        _assign(current, key, value)

    return root


def load_toml(text: str) -> dict[str, Any]:
    """Parse TOML strictly, falling back to the tolerant reader on errors."""
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        logger.debug("Strict TOML parse failed ({}), using tolerant reader", exc)
        return parse_toml_lite(text)


__all__ = ["TomlLiteError", "load_toml", "parse_toml_lite"]
