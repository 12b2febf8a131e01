"""Text-level auto-fix for pipeline documents.

The fixer never parses the document into objects: it edits the original
lines in place so that comments, quoting and layout survive. A small line
scanner tracks the chain of parent keys to classify each position, and a
fixed table of rules runs over the scan:

1. structure renames under ``pipeline`` (``steps:`` -> ``processors:``);
2. component renames in component positions;
3. Bloblang method renames inside expression text;
4. Bloblang function renames inside expression text.

Only high-confidence, single-target resolutions are applied. Everything
else that looks wrong is returned as a suggestion.

Examples
--------
>>> result = apply_auto_fixes("input:\\n  kafaka: {}\\noutput:\\n  stdout: {}\\n")
>>> result.applied_fixes
['Component: "kafaka" -> "kafka"']
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Literal

from pipecheck.kernel.catalog.aliases import (
    STRUCTURE_FIXES,
    Confidence,
    Resolution,
    resolve_component,
)
from pipecheck.kernel.catalog.components import is_metadata_key
from pipecheck.kernel.catalog.models import ComponentCategory
from pipecheck.kernel.linting.bloblang_rules import (
    EXPRESSION_KEYS,
    QUERY_PARENT_KEYS,
    CallKind,
    classify_call,
    iter_calls,
    iter_interpolations,
)
from pipecheck.kernel.logging import get_logger

__all__ = ["AutoFixResult", "Fix", "FixKind", "apply_auto_fixes"]

logger = get_logger(__name__)

FixKind = Literal["component", "method", "function", "structure"]

DEFAULT_MAX_ITERATIONS = 10

_LABELS: dict[FixKind, str] = {
    "component": "Component",
    "method": "Bloblang method",
    "function": "Bloblang function",
    "structure": "Structure",
}

_ITEM = "-"
_DASH_RE = re.compile(r"-(?: +|$)")
_KEY_RE = re.compile(r"(?P<key>[A-Za-z_][\w-]*)[ \t]*:(?:[ \t]+|$)(?P<value>.*)$")
_BLOCK_SCALAR_RE = re.compile(r"^[|>][-+0-9]*\s*(?:#.*)?$")
_MARKER_RE = re.compile(r"^(?:---|\.\.\.)(?:\s|$)")

# Owner key of a sequence -> category of the components listed in it
_LIST_CATEGORIES: dict[str, ComponentCategory] = {
    "processors": "processor",
    "try": "processor",
    "catch": "processor",
    "inputs": "input",
    "outputs": "output",
    "processor_resources": "processor",
    "input_resources": "input",
    "output_resources": "output",
    "cache_resources": "cache",
    "rate_limit_resources": "rate_limit",
}


@dataclass(frozen=True, slots=True)
class Fix:
    """One applied or suggested correction.

    ``original`` is rendered the way the name appears in the document:
    ``kafaka:`` for components, ``.parseJson()`` for methods, ``uuid()``
    for functions and ``pipeline.steps`` for structure keys.
    """

    kind: FixKind
    original: str
    candidates: tuple[str, ...]
    confidence: Confidence
    line: int | None = None
    reason: str = ""

    @property
    def replacement(self) -> str | None:
        return self.candidates[0] if len(self.candidates) == 1 else None

    def describe(self) -> str:
        """Render the fix as an applied-fix string, e.g. ``Component: "s3" -> "aws_s3"``."""
        target = self.replacement or " | ".join(self.candidates)
        if self.kind == "component":
            before, after = self.original.rstrip(":"), target
        elif self.kind == "method":
            before, after = self.original, f".{target}()"
        elif self.kind == "function":
            before, after = self.original, f"{target}()"
        else:
            before, after = self.original, f"pipeline.{target}"
        return f'{_LABELS[self.kind]}: "{before}" -> "{after}"'

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "original": self.original,
            "candidates": list(self.candidates),
            "confidence": self.confidence.value,
        }
        if self.line is not None:
            data["line"] = self.line
        if self.reason:
            data["reason"] = self.reason
        return data


@dataclass(slots=True)
class AutoFixResult:
    """Outcome of :func:`apply_auto_fixes`.

    Attributes
    ----------
    corrected_text : str
        The rewritten document; equal to the input when nothing applied
    applied_fixes : list[str]
        Applied-fix strings, de-duplicated in order of application
    suggested_fixes : list[Fix]
        Corrections found in the final text that were not safe to apply
    fixes : list[Fix]
        Every applied fix, with its line number
    passes : int
        Number of passes run, including the final pass that changed nothing
    """

    corrected_text: str
    applied_fixes: list[str] = field(default_factory=list)
    suggested_fixes: list[Fix] = field(default_factory=list)
    fixes: list[Fix] = field(default_factory=list)
    passes: int = 0

    @property
    def was_modified(self) -> bool:
        return bool(self.fixes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fixed_yaml": self.corrected_text,
            "fixes_applied": list(self.applied_fixes),
            "suggested_fixes": [fix.to_dict() for fix in self.suggested_fixes],
            "passes": self.passes,
        }


# ---------------------------------------------------------------------------
# Line scanner
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _KeySite:
    """A plain mapping key and the chain of keys above it (``-`` marks a list item)."""

    line: int
    column: int
    key: str
    parents: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class _Span:
    """A stretch of one line holding Bloblang text."""

    line: int
    start: int
    end: int


@dataclass(slots=True)
class _Scan:
    keys: list[_KeySite] = field(default_factory=list)
    spans: list[_Span] = field(default_factory=list)


def _interpolation_spans(index: int, line: str, offset: int) -> Iterator[_Span]:
    if "${!" not in line:
        return
    for start, end, _ in iter_interpolations(line[offset:]):
        yield _Span(index, offset + start, offset + end)


def _scalar_span(index: int, line: str, start: int) -> _Span:
    end = len(line.rstrip())
    if end - start >= 2 and line[start] in "'\"" and line[end - 1] == line[start]:
        return _Span(index, start + 1, end - 1)
    return _Span(index, start, end)


def _is_expression_key(key: str, parents: tuple[str, ...]) -> bool:
    if key in EXPRESSION_KEYS:
        return True
    return key == "query" and bool(parents) and parents[-1] in QUERY_PARENT_KEYS


def _scan(lines: list[str]) -> _Scan:
    """Classify the positions of a document's lines."""
    scan = _Scan()
    stack: list[tuple[int, str]] = []
    # (column of the owning key, body is Bloblang) while inside a block scalar
    block: tuple[int, bool] | None = None

    for index, line in enumerate(lines):
        stripped = line.strip()
        indent = len(line) - len(line.lstrip(" "))

        if block is not None:
            if not stripped or indent > block[0]:
                if not stripped:
                    continue
                if block[1]:
                    scan.spans.append(_Span(index, indent, len(line.rstrip())))
                else:
                    scan.spans.extend(_interpolation_spans(index, line, indent))
                continue
            block = None

        if not stripped or stripped.startswith("#"):
            continue
        if indent == 0 and _MARKER_RE.match(stripped):
            stack.clear()
            continue

        column = indent
        dash = _DASH_RE.match(line, indent)
        if dash is not None:
            while stack and (
                stack[-1][0] > indent or (stack[-1][0] == indent and stack[-1][1] == _ITEM)
            ):
                stack.pop()
            stack.append((indent, _ITEM))
            column = dash.end()
            if column >= len(line.rstrip()):
                continue

        match = _KEY_RE.match(line, column)
        if match is None:
            scan.spans.extend(_interpolation_spans(index, line, column))
            continue

        key = match["key"]
        while stack and stack[-1][0] >= column:
            stack.pop()
        parents = tuple(name for _, name in stack)
        scan.keys.append(_KeySite(index, column, key, parents))
        stack.append((column, key))

        value = match["value"]
        value_start = match.start("value")
        expression = _is_expression_key(key, parents)
        if _BLOCK_SCALAR_RE.match(value):
            block = (column, expression)
        elif value.strip():
            if expression:
                scan.spans.append(_scalar_span(index, line, value_start))
            else:
                scan.spans.extend(_interpolation_spans(index, line, value_start))
    return scan


def _component_category(parents: tuple[str, ...]) -> ComponentCategory | None:
    """Category of a component key given its parents, or None for non-component positions."""
    if not parents:
        return None
    last = parents[-1]
    if last in ("input", "output") and (len(parents) == 1 or parents[-2] == _ITEM):
        return last  # type: ignore[return-value]
    if last == _ITEM and len(parents) >= 2:
        return _LIST_CATEGORIES.get(parents[-2])
    return None


def _component_sites(scan: _Scan) -> Iterator[tuple[_KeySite, ComponentCategory]]:
    for site in scan.keys:
        if is_metadata_key(site.key):
            continue
        category = _component_category(site.parents)
        if category is not None:
            yield site, category


def _call_sites(
    lines: list[str], scan: _Scan, kind: CallKind
) -> Iterator[tuple[_Span, str, int, int]]:
    """Yield ``(span, name, start, end)`` for calls of ``kind``; offsets are line columns."""
    for span in scan.spans:
        text = lines[span.line][span.start : span.end]
        for name, call_kind, start, end in iter_calls(text):
            if call_kind == kind:
                yield span, name, span.start + start, span.start + end


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _replace(line: str, start: int, end: int, text: str) -> str:
    return line[:start] + text + line[end:]


def _fix_structure(lines: list[str]) -> list[Fix]:
    scan = _scan(lines)
    children = [site for site in scan.keys if site.parents == ("pipeline",)]
    if any(site.key == "processors" for site in children):
        return []
    for site in children:
        target = STRUCTURE_FIXES.get(site.key)
        if target is None:
            continue
        line = lines[site.line]
        lines[site.line] = _replace(line, site.column, site.column + len(site.key), target)
        # One synonym at a time; a second one would duplicate "processors"
        return [
            Fix("structure", f"pipeline.{site.key}", (target,), Confidence.HIGH, site.line + 1)
        ]
    return []


def _fix_components(lines: list[str]) -> list[Fix]:
    fixes: list[Fix] = []
    for site, category in _component_sites(_scan(lines)):
        resolution = resolve_component(site.key, category)
        if resolution is None or resolution.replacement is None:
            continue
        target = resolution.replacement
        line = lines[site.line]
        lines[site.line] = _replace(line, site.column, site.column + len(site.key), target)
        fixes.append(
            Fix("component", f"{site.key}:", (target,), Confidence.HIGH, site.line + 1)
        )
    return fixes


def _render_call(name: str, kind: CallKind) -> str:
    return f".{name}()" if kind == "method" else f"{name}()"


def _identifier_rule(kind: CallKind) -> Callable[[list[str]], list[Fix]]:
    def rule(lines: list[str]) -> list[Fix]:
        edits: dict[int, list[tuple[int, int, str]]] = {}
        fixes: list[Fix] = []
        for span, name, start, end in _call_sites(lines, _scan(lines), kind):
            verdict = classify_call(name, kind)
            resolution = verdict.resolution
            if verdict.outcome != "misnamed" or resolution is None:
                continue
            target = resolution.replacement
            if target is None:
                continue
            edits.setdefault(span.line, []).append((start, end, target))
            fixes.append(
                Fix(kind, _render_call(name, kind), (target,), Confidence.HIGH, span.line + 1)
            )
        for index, line_edits in edits.items():
            line = lines[index]
            for start, end, target in sorted(line_edits, reverse=True):
                line = _replace(line, start, end, target)
            lines[index] = line
        return fixes

    rule.__name__ = f"_fix_{kind}s"
    return rule


_RULES: tuple[Callable[[list[str]], list[Fix]], ...] = (
    _fix_structure,
    _fix_components,
    _identifier_rule("method"),
    _identifier_rule("function"),
)


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


def _suggestion(
    kind: FixKind, original: str, resolution: Resolution | None, line: int
) -> Fix | None:
    if resolution is None or not resolution.candidates or resolution.replacement is not None:
        return None
    return Fix(kind, original, resolution.candidates, resolution.confidence, line, resolution.reason)


def _collect_suggestions(lines: list[str]) -> list[Fix]:
    scan = _scan(lines)
    found: list[Fix | None] = []
    for site, category in _component_sites(scan):
        found.append(
            _suggestion(
                "component", f"{site.key}:", resolve_component(site.key, category), site.line + 1
            )
        )
    for kind in ("method", "function"):
        for span, name, _, _ in _call_sites(lines, scan, kind):
            verdict = classify_call(name, kind)
            if verdict.outcome == "misnamed":
                found.append(
                    _suggestion(kind, _render_call(name, kind), verdict.resolution, span.line + 1)
                )

    suggestions: list[Fix] = []
    seen: set[tuple[str, str, tuple[str, ...]]] = set()
    for fix in found:
        if fix is None:
            continue
        key = (fix.kind, fix.original, fix.candidates)
        if key not in seen:
            seen.add(key)
            suggestions.append(fix)
    return suggestions


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def apply_auto_fixes(text: str, *, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> AutoFixResult:
    """Apply every high-confidence fix to ``text`` until nothing changes.

    Parameters
    ----------
    text : str
        Pipeline document; never modified
    max_iterations : int
        Upper bound on the number of passes

    Returns
    -------
    AutoFixResult
        The corrected text, the fixes applied and the fixes only suggested

    Raises
    ------
    ValueError
        If ``max_iterations`` is less than 1
    """
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")

    lines = text.split("\n")
    result = AutoFixResult(corrected_text=text)

    while result.passes < max_iterations:
        result.passes += 1
        applied: list[Fix] = []
        for rule in _RULES:
            applied.extend(rule(lines))
        if not applied:
            break
        result.fixes.extend(applied)
        logger.debug(
            "Auto-fix pass {n} applied {count} fixes", n=result.passes, count=len(applied)
        )

    for fix in result.fixes:
        description = fix.describe()
        if description not in result.applied_fixes:
            result.applied_fixes.append(description)

    result.corrected_text = "\n".join(lines)
    result.suggested_fixes = _collect_suggestions(lines)
    if result.fixes:
        logger.debug("Applied fixes: {fixes}", fixes=result.applied_fixes)
    return result
