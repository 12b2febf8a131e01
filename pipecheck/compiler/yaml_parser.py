"""Lenient parser for pipeline documents.

Pipeline documents are usually produced by people or code generators and
are often not quite valid YAML (mixed indentation, stray over-indented keys).
This module decodes them into plain Python values with a line-oriented
scanner that tolerates those mistakes. Only the YAML that pipeline documents
need is supported:

* block mappings and block sequences, including sequences written at the
  same indentation as their parent key;
* flow sequences ``[a, b]`` and flow mappings ``{a: 1}``;
* single and double quoted scalars;
* literal ``|`` and folded ``>`` block scalars with chomping indicators;
* plain scalars, with multi-line continuation;
* comments and ``---`` / ``...`` document markers.

Anchors, aliases, tags and complex keys are not supported. A line that
matches none of the forms above raises :class:`ParseError`.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pipecheck.kernel.exceptions import ParseError
from pipecheck.kernel.logging import get_logger

logger = get_logger(__name__)

_KEY_RE = re.compile(
    r"""
    ^(?:
        "(?P<dq>(?:[^"\\]|\\.)*)"
      | '(?P<sq>(?:[^']|'')*)'
      | (?P<plain>[^\s\-?:,\[\]{}\#&*!|>'"%@`](?:[^:\#]|:(?!\s|$)|(?<!\s)\#)*?)
    )
    \s*:(?:\s+(?P<rest>.*))?$
    """,
    re.VERBOSE,
)
_BLOCK_SCALAR_RE = re.compile(r"^(?P<style>[|>])(?P<a>[+-]|[1-9])?(?P<b>[+-]|[1-9])?$")
_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?$")
_DOCUMENT_MARKER_RE = re.compile(r"^(?:---|\.\.\.)(?:\s.*)?$")
_PIPELINE_MARKER_RE = re.compile(r"^(?:input|output|pipeline)\s*:", re.MULTILINE)

_NULLS = frozenset({"null", "Null", "NULL", "~"})
_TRUE = frozenset({"true", "yes", "on"})
_FALSE = frozenset({"false", "no", "off"})
_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    '"': '"',
    "\\": "\\",
    "/": "/",
    " ": " ",
}


# ============================================================================
# Public API
# ============================================================================


def parse_pipeline_text(text: str) -> Any:
    """Decode a pipeline document.

    JSON is tried first; anything else goes through the lenient scanner.

    Parameters
    ----------
    text : str
        Document text

    Returns
    -------
    Any
        The decoded value. Empty or comment-only text gives ``{}``.

    Raises
    ------
    ParseError
        If a line fits none of the supported forms
    """
    stripped = text.strip()
    if stripped.startswith(("{", "[")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            logger.debug("JSON fast path failed, falling back to the line scanner")
    return _Scanner(text).parse_document()


def split_documents(text: str) -> list[str]:
    """Split ``text`` on ``---`` separator lines. Empty segments are dropped."""
    segments: list[list[str]] = [[]]
    for line in text.splitlines():
        if line.startswith("---") and _DOCUMENT_MARKER_RE.match(line.rstrip()):
            segments.append([])
        else:
            segments[-1].append(line)
    return ["\n".join(lines) for lines in segments if any(line.strip() for line in lines)]


def is_pipeline_document(text: str) -> bool:
    """Whether ``text`` has a top-level ``input:``, ``output:`` or ``pipeline:`` key."""
    return _PIPELINE_MARKER_RE.search(text) is not None


def count_pipeline_documents(text: str) -> int:
    """Number of ``---``-separated segments that look like pipelines."""
    return sum(1 for segment in split_documents(text) if is_pipeline_document(segment))


def strip_comment(text: str) -> str:
    """Remove a trailing ``# comment`` that sits outside quotes.

    A ``#`` only starts a comment at the beginning of the text or after
    whitespace, so ``color: #fff`` keeps nothing but ``a#b`` stays intact.
    """
    quote: str | None = None
    for i, char in enumerate(text):
        if quote is not None:
            if char == quote:
                quote = None
            elif char == "\\" and quote == '"':
                continue
        elif char in "\"'" and (i == 0 or text[i - 1] in " \t[{,:"):
            quote = char
        elif char == "#" and (i == 0 or text[i - 1] in " \t"):
            return text[:i].rstrip()
    return text


def parse_scalar(text: str) -> Any:
    """Coerce one inline value: quoted string, flow collection or plain literal."""
    text = text.strip()
    if not text:
        return None
    if text[0] in "[{":
        return _FlowParser(text).parse()
    if text[0] in "\"'":
        value, end = _read_quoted(text, 0)
        if text[end:].strip():
            raise ParseError(f"unexpected text after quoted string: {text[end:].strip()!r}")
        return value
    return coerce_plain(text)


def coerce_plain(text: str) -> Any:
    """Coerce a plain (unquoted) scalar to None, bool, int, float or str."""
    if text in _NULLS:
        return None
    lowered = text.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return text


# ============================================================================
# Scalars and flow collections
# ============================================================================


def _read_quoted(text: str, start: int) -> tuple[str, int]:
    """Read the quoted string at ``text[start]``; return it and the index after it."""
    quote = text[start]
    out: list[str] = []
    i = start + 1
    while i < len(text):
        char = text[i]
        if quote == "'":
            if char == "'":
                if text.startswith("''", i):
                    out.append("'")
                    i += 2
                    continue
                return "".join(out), i + 1
        else:
            if char == "\\" and i + 1 < len(text):
                nxt = text[i + 1]
                if nxt == "u" and i + 5 < len(text):
                    out.append(chr(int(text[i + 2 : i + 6], 16)))
                    i += 6
                    continue
                out.append(_ESCAPES.get(nxt, "\\" + nxt))
                i += 2
                continue
            if char == '"':
                return "".join(out), i + 1
        out.append(char)
        i += 1
    raise ParseError(f"unterminated quoted string: {text[start:]!r}")


class _FlowParser:
    """Recursive descent over ``[...]`` / ``{...}`` flow collections."""

    __slots__ = ("text", "pos")

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def parse(self) -> Any:
        value = self._value(terminators=",]}")
        self._skip_ws()
        if self.pos != len(self.text):
            raise ParseError(f"unexpected text after flow collection: {self.text[self.pos :]!r}")
        return value

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in " \t\n":
            self.pos += 1

    def _value(self, terminators: str) -> Any:
        self._skip_ws()
        if self.pos >= len(self.text):
            raise ParseError("unterminated flow collection")
        char = self.text[self.pos]
        if char == "[":
            return self._sequence()
        if char == "{":
            return self._mapping()
        if char in "\"'":
            value, self.pos = _read_quoted(self.text, self.pos)
            return value
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in terminators:
            if self.text[self.pos] == ":" and ":" in terminators:
                nxt = self.text[self.pos + 1 : self.pos + 2]
                if nxt in ("", " ", ",", "}"):
                    break
            self.pos += 1
        return coerce_plain(self.text[start : self.pos].strip())

    def _expect(self, char: str) -> None:
        self._skip_ws()
        if self.pos >= len(self.text) or self.text[self.pos] != char:
            raise ParseError(f"expected {char!r} in flow collection {self.text!r}")
        self.pos += 1

    def _at(self, char: str) -> bool:
        self._skip_ws()
        return self.pos < len(self.text) and self.text[self.pos] == char

    def _sequence(self) -> list[Any]:
        self._expect("[")
        items: list[Any] = []
        while not self._at("]"):
            items.append(self._value(terminators=",]"))
            if not self._at(","):
                break
            self._expect(",")
        self._expect("]")
        return items

    def _mapping(self) -> dict[Any, Any]:
        self._expect("{")
        result: dict[Any, Any] = {}
        while not self._at("}"):
            key = self._value(terminators=":,}")
            if self._at(":"):
                self._expect(":")
                result[key] = None if self._at(",") or self._at("}") else self._value(",}")
            else:
                result[key] = None
            if not self._at(","):
                break
            self._expect(",")
        self._expect("}")
        return result


def _unbalanced(text: str) -> bool:
    """True while a flow collection opened in ``text`` is not yet closed."""
    depth = 0
    quote: str | None = None
    for char in text:
        if quote is not None:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char in "[{":
            depth += 1
        elif char in "]}":
            depth -= 1
    return depth > 0 or quote is not None


# ============================================================================
# Block scanner
# ============================================================================


def _is_item(content: str) -> bool:
    return content == "-" or content.startswith("- ")


class _Scanner:
    """Indentation-driven recursive scanner over the document's lines.

    ``lines`` is a private copy: a ``- key: value`` item is handled by
    rewriting its line in place to ``key: value`` at the item's column and
    parsing it as a mapping.
    """

    __slots__ = ("lines", "pos")

    def __init__(self, text: str) -> None:
        self.lines = [line.rstrip("\r").expandtabs(2) for line in text.splitlines()]
        self.pos = 0

    # -- line access ---------------------------------------------------------

    def peek(self) -> tuple[int, str] | None:
        """Indentation and content of the next significant line, without consuming it."""
        while self.pos < len(self.lines):
            raw = self.lines[self.pos]
            content = raw.strip()
            if not content or content.startswith("#") or _DOCUMENT_MARKER_RE.match(raw):
                self.pos += 1
                continue
            return len(raw) - len(raw.lstrip(" ")), content
        return None

    @property
    def line_number(self) -> int:
        return self.pos + 1

    def error(self, reason: str) -> ParseError:
        return ParseError(reason, line=self.line_number)

    # -- structure -----------------------------------------------------------

    def parse_document(self) -> Any:
        first = self.peek()
        if first is None:
            return {}
        value = self.parse_block(first[0])
        while (line := self.peek()) is not None:
            # Content dedented below the first line: merge further mappings
            more = self.parse_block(line[0])
            if isinstance(value, dict) and isinstance(more, dict):
                value.update(more)
            else:
                raise self.error("unexpected content after the end of the document")
        return value

    def parse_block(self, indent: int) -> Any:
        line = self.peek()
        if line is not None and _is_item(line[1]):
            return self.parse_sequence(indent)
        return self.parse_mapping(indent)

    def parse_mapping(self, indent: int) -> dict[str, Any]:
        result: dict[str, Any] = {}
        while (line := self.peek()) is not None:
            ind, content = line
            if ind < indent:
                break
            if _is_item(content):
                if ind == indent:
                    break
                raise self.error(f"unexpected list item {content!r}")
            match = _KEY_RE.match(content)
            if match is None:
                raise self.error(f"expected 'key: value' or '- item', got {content!r}")
            key = self._key(match)
            self.pos += 1
            result[key] = self.parse_value(match.group("rest") or "", ind)
        return result

    def parse_sequence(self, indent: int) -> list[Any]:
        items: list[Any] = []
        while (line := self.peek()) is not None:
            ind, content = line
            if ind < indent:
                break
            if not _is_item(content):
                if ind == indent:
                    break
                raise self.error(f"expected '- item', got {content!r}")
            raw = self.lines[self.pos]
            dash = raw.index("-")
            rest = raw[dash + 1 :]
            text = rest.lstrip(" ")
            column = dash + 1 + len(rest) - len(text)
            self.pos += 1
            items.append(self.parse_item(text, column, ind))
        return items

    def parse_item(self, text: str, column: int, dash_indent: int) -> Any:
        if not strip_comment(text).strip():
            nxt = self.peek()
            if nxt is not None and nxt[0] > dash_indent:
                return self.parse_block(nxt[0])
            return None
        if _is_item(text) or _KEY_RE.match(strip_comment(text)):
            # Re-scan the remainder of the line as a block at the item's column
            self.pos -= 1
            self.lines[self.pos] = " " * column + text
            return self.parse_block(column)
        return self.parse_value(text, dash_indent)

    @staticmethod
    def _key(match: re.Match[str]) -> str:
        if match.group("dq") is not None:
            value, _ = _read_quoted(f'"{match.group("dq")}"', 0)
            return value
        if match.group("sq") is not None:
            return match.group("sq").replace("''", "'")
        return match.group("plain").rstrip()

    # -- values --------------------------------------------------------------

    def parse_value(self, rest: str, parent_indent: int) -> Any:
        """Parse the value that follows ``key:`` (or ``-``) on a line just consumed."""
        text = strip_comment(rest).strip()
        if not text:
            nxt = self.peek()
            if nxt is None:
                return None
            ind, content = nxt
            if ind > parent_indent:
                return self.parse_block(ind)
            if ind == parent_indent and _is_item(content):
                return self.parse_sequence(ind)
            return None

        block = _BLOCK_SCALAR_RE.match(text)
        if block is not None:
            return self.block_scalar(block, parent_indent)

        number = self.line_number - 1
        try:
            if text[0] in "[{":
                while _unbalanced(text) and self.pos < len(self.lines):
                    text += " " + strip_comment(self.lines[self.pos].strip())
                    self.pos += 1
                return parse_scalar(text)
            if text[0] in "\"'":
                while _unbalanced(text) and self.pos < len(self.lines):
                    text += " " + self.lines[self.pos].strip()
                    self.pos += 1
                return parse_scalar(strip_comment(text))
        except ParseError as e:
            raise ParseError(e.reason, line=number) from e

        return coerce_plain(self._plain_continuation(text, parent_indent))

    def _plain_continuation(self, text: str, parent_indent: int) -> str:
        parts = [text]
        while (line := self.peek()) is not None:
            ind, content = line
            if ind <= parent_indent or _is_item(content) or _KEY_RE.match(content):
                break
            parts.append(strip_comment(content))
            self.pos += 1
        return " ".join(parts)

    def block_scalar(self, header: re.Match[str], parent_indent: int) -> str:
        """Read a ``|`` or ``>`` block scalar whose header was just consumed."""
        indicators = [header.group("a"), header.group("b")]
        chomp = next((i for i in indicators if i in ("+", "-")), "")
        explicit = next((int(i) for i in indicators if i and i.isdigit()), None)

        body: list[str] = []
        block_indent = parent_indent + explicit if explicit is not None else None
        while self.pos < len(self.lines):
            raw = self.lines[self.pos]
            if not raw.strip():
                body.append("")
                self.pos += 1
                continue
            ind = len(raw) - len(raw.lstrip(" "))
            if block_indent is None:
                if ind <= parent_indent:
                    break
                block_indent = ind
            if ind < block_indent:
                break
            body.append(raw[block_indent:])
            self.pos += 1

        # Trailing blank lines belong to the scalar only for keep chomping
        trailing = 0
        while body and body[-1] == "":
            body.pop()
            trailing += 1
        if header.group("style") == "|":
            value = "\n".join(body)
        else:
            value = _fold(body)
        if not body:
            return "\n" * trailing if chomp == "+" else ""
        if chomp == "-":
            return value
        if chomp == "+":
            return value + "\n" * (trailing + 1)
        return value + "\n"


def _fold(lines: list[str]) -> str:
    """Join folded block scalar lines: single breaks become spaces."""
    out = ""
    previous: str | None = None
    for line in lines:
        if previous is None:
            out = line
        elif line == "":
            out += "\n"
        elif previous == "" or line.startswith(" ") or previous.startswith(" "):
            out += ("" if previous == "" else "\n") + line
        else:
            out += " " + line
        previous = line
    return out
