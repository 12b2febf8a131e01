"""Lint rules for embedded Bloblang expressions.

Two independent layers run over each expression field:

* an ordered table of anti-patterns borrowed from other languages
  (JavaScript, Python, shell templating), each reported at most once per field;
* an identifier layer that checks ``receiver.name(`` and ``name(`` calls
  against the method and function registries.

Names reported by a fired anti-pattern are "claimed" and not reported a
second time by the identifier layer.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

from pipecheck.kernel.catalog.aliases import (
    AMBIGUOUS_FUNCTIONS,
    AMBIGUOUS_METHODS,
    BLOBLANG_FUNCTION_TYPOS,
    BLOBLANG_METHOD_TYPOS,
    Resolution,
    resolve_function,
    resolve_method,
)
from pipecheck.kernel.catalog.bloblang import FUNCTION_NAMES, METHOD_NAMES
from pipecheck.kernel.linting.models import LintViolation

CallKind = Literal["function", "method"]
CallOutcome = Literal["known", "misnamed", "ignore"]

METHOD_CALL_RE = re.compile(r"\.\s*([A-Za-z_]\w*)\s*\(")
FUNCTION_CALL_RE = re.compile(r"(?<![\w.$@])([A-Za-z_]\w*)\s*\(")

# Receiverless words followed by "(" that are syntax, not calls
_KEYWORDS = frozenset({"if", "else", "match", "let", "root", "this", "map", "import", "not"})

#: Keys whose string value is a Bloblang expression, at any depth
EXPRESSION_KEYS: frozenset[str] = frozenset({
    "mapping",
    "bloblang",
    "mutation",
    "check",
    "request_map",
    "result_map",
    "fields_mapping",
    "document_map",
    "filter_map",
    "timestamp_mapping",
})
#: Keys whose nested ``query`` field is a Bloblang expression
QUERY_PARENT_KEYS: frozenset[str] = frozenset({"mapping", "bloblang"})

_PLAUSIBLE_PREFIX_RE = re.compile(r"^(?:parse|format)|^(?:to|get|is|has)(?:_|[A-Z])")

_METHOD_TYPOS_LOWER = frozenset(k.lower() for k in BLOBLANG_METHOD_TYPOS)
_FUNCTION_TYPOS_LOWER = frozenset(k.lower() for k in BLOBLANG_FUNCTION_TYPOS)


# ---------------------------------------------------------------------------
# Anti-pattern layer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BloblangAntiPattern:
    """One anti-pattern rule.

    ``raw`` rules look inside string literals (template and f-string
    mistakes live there); the others only see code.
    """

    rule_id: str
    pattern: re.Pattern[str]
    message: str
    suggestion: str
    claims: frozenset[str] = field(default_factory=frozenset)
    raw: bool = False
    severity: Literal["error"] = "error"

    @property
    def description(self) -> str:
        return self.message

    def check(self, expression: str) -> list[LintViolation]:
        """Report this anti-pattern once if it occurs in ``expression``."""
        text = expression if self.raw else mask_literals(expression)
        if self.pattern.search(text) is None:
            return []
        return [LintViolation(self.rule_id, "error", self.message, suggestion=self.suggestion)]


def _rule(
    rule_id: str,
    pattern: str,
    message: str,
    suggestion: str,
    *,
    claims: tuple[str, ...] = (),
    raw: bool = False,
    flags: int = 0,
) -> BloblangAntiPattern:
    return BloblangAntiPattern(
        rule_id=rule_id,
        pattern=re.compile(pattern, flags),
        message=message,
        suggestion=suggestion,
        claims=frozenset(claims),
        raw=raw,
    )


_DROP_HINT = "Use: root = deleted() to drop messages"
_LET_HINT = "Use: let my_var = value"
_FORMAT_HINT = 'Use: "%s-%s".format(a, b) or concatenation: a + "-" + b'

ANTI_PATTERNS: tuple[BloblangAntiPattern, ...] = (
    _rule(
        "B101",
        r"(?<![\w.])from_json\s*\(",
        'Invalid function "from_json()". This is not Bloblang syntax',
        "Use method syntax: this.parse_json() or this.value.parse_json()",
        claims=("from_json",),
    ),
    _rule(
        "B102",
        r"(?<![\w.])to_json\s*\(",
        'Invalid function "to_json()". This is not Bloblang syntax',
        "Use method syntax: this.format_json()",
        claims=("to_json",),
    ),
    _rule(
        "B103",
        r"\bJSON\s*\.\s*(?:parse|stringify)\s*\(",
        "Invalid JavaScript JSON.parse()/JSON.stringify()",
        "Use this.parse_json() to parse and this.format_json() to serialize",
        claims=("parse", "stringify"),
    ),
    _rule(
        "B104",
        r"\bif\b[^\n{]*\bthen\b",
        'Invalid "if...then" syntax. Bloblang does not use the "then" keyword',
        "Use: if condition { value } else { other_value }",
    ),
    _rule(
        "B105",
        r"\belse\s*:?\s*$",
        'Invalid standalone "else". Bloblang else branches need braces',
        "Use: if condition { value } else { other_value }",
        flags=re.MULTILINE,
    ),
    _rule(
        "B106",
        r"(?<![\w.])root\s*=(?!=)\s*(?:null|None|nil|NIL|Nil)\b",
        "Assigning null/nil/None to root does not drop the message",
        _DROP_HINT,
    ),
    _rule(
        "B107",
        r"(?<![\w.])return\s+\S",
        'Invalid "return" statement. Bloblang does not use return',
        "Assign directly to root: root = <value>",
    ),
    _rule(
        "B108",
        r"\bfunction\s+\w+\s*\(",
        "Invalid function definition. Bloblang does not support inline functions",
        "Use mapping expressions directly, or a named map with: map name { ... }",
    ),
    _rule(
        "B109",
        r"(?<![\w.])var\s+\w+\s*=",
        'Invalid "var" declaration. Bloblang uses "let" for variables',
        _LET_HINT,
    ),
    _rule(
        "B110",
        r"(?<![\w.])const\s+\w+\s*=",
        'Invalid "const" declaration. Bloblang uses "let" for variables',
        _LET_HINT,
    ),
    _rule(
        "B111",
        r"\.\s*(?:map|filter|find|some|every|map_each)\s*\(\s*\(?\s*\w+\s*\)?\s*=>",
        "Invalid JavaScript-style arrow function",
        "Use Bloblang lambdas: this.items.map_each(item -> item.field)",
        claims=("map", "find", "some", "every"),
    ),
    _rule(
        "B112",
        r"\.\s*forEach\s*\(",
        "Invalid JavaScript-style .forEach()",
        "Use: this.items.map_each(item -> item.transform())",
        claims=("forEach",),
    ),
    _rule(
        "B113",
        r"\.\s*reduce\s*\(",
        "Invalid JavaScript-style .reduce()",
        "Use: this.items.fold(0, item -> item.tally + item.value)",
        claims=("reduce",),
    ),
    _rule(
        "B114",
        r"\$\{\s*\w+\s*\}",
        "Invalid ${var} interpolation inside a mapping. It only works in config strings",
        "Reference the value directly: $my_var, this.field or @metadata_key",
        raw=True,
    ),
    _rule(
        "B115",
        r"`[^`]*\$\{",
        "Invalid JavaScript template literal",
        _FORMAT_HINT,
        raw=True,
    ),
    _rule(
        "B116",
        r"(?<![\w\"'])f[\"'][^\"'\n]*\{",
        "Invalid Python f-string",
        _FORMAT_HINT,
        raw=True,
    ),
    _rule(
        "B117",
        r"(?<![\w.])async\s+\w",
        'Invalid "async" keyword. Bloblang is synchronous',
        "Use pipeline-level parallelism (threads, parallel processors) for concurrency",
    ),
    _rule(
        "B118",
        r"(?<![\w.])await\s+\w",
        'Invalid "await" keyword. Bloblang is synchronous',
        "Use pipeline-level parallelism (threads, parallel processors) for concurrency",
    ),
    _rule(
        "B119",
        r"(?<![\w.])for\s+\w+\s+in\b",
        'Invalid "for x in items" loop',
        "Use: this.items.map_each(x -> x.field) or this.items.filter(x -> x.active)",
    ),
    _rule(
        "B120",
        r"^\s*(?:import\s+[A-Za-z_{*]|from\s+[\w.]+\s+import\b)",
        "Invalid Python/JavaScript import. Bloblang only imports mapping files by path",
        'Define logic inline, or use: import "./mappings.blobl"',
        flags=re.MULTILINE,
    ),
    _rule(
        "B121",
        r"^\s*class\s+\w+",
        'Invalid "class" definition. Bloblang is not object-oriented',
        "Use mapping expressions and let variables",
        flags=re.MULTILINE,
    ),
    _rule(
        "B122",
        r"(?<![\w.])def\s+\w+\s*\(",
        "Invalid Python function definition",
        "Use inline expressions, or a named map with: map name { ... }",
    ),
    _rule(
        "B123",
        r"(?<![\w.])lambda\s+\w",
        'Invalid Python "lambda"',
        "Use Bloblang lambdas: x -> x.field",
    ),
)


# ---------------------------------------------------------------------------
# Identifier layer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CallVerdict:
    """Classification of one call-shaped identifier."""

    outcome: CallOutcome
    name: str
    kind: CallKind
    resolution: Resolution | None = None


def classify_call(name: str, kind: CallKind) -> CallVerdict:
    """Decide whether a call-shaped identifier is known, misnamed or ignorable.

    Unknown names are only escalated when they plausibly were meant as a
    call: mixed case, listed in a misspelling or ambiguity table, a name
    from the other registry, or a ``parse``/``format``/``to``/``get``/``is``/
    ``has`` prefix.

    >>> classify_call("parse_json", "method").outcome
    'known'
    >>> classify_call("parseJson", "method").resolution.candidates
    ('parse_json',)
    >>> classify_call("my_helper", "function").outcome
    'ignore'
    """
    if kind == "method":
        registry, other = METHOD_NAMES, FUNCTION_NAMES
        typos_lower, ambiguous = _METHOD_TYPOS_LOWER, AMBIGUOUS_METHODS
    else:
        registry, other = FUNCTION_NAMES, METHOD_NAMES
        typos_lower, ambiguous = _FUNCTION_TYPOS_LOWER, AMBIGUOUS_FUNCTIONS

    if name in registry:
        return CallVerdict("known", name, kind)

    plausible = (
        (name != name.lower() and name != name.upper())
        or name.lower() in typos_lower
        or name in ambiguous
        or name.lower() in ambiguous
        or name in other
        or _PLAUSIBLE_PREFIX_RE.match(name) is not None
    )
    if not plausible:
        return CallVerdict("ignore", name, kind)

    resolution = resolve_method(name) if kind == "method" else resolve_function(name)
    return CallVerdict("misnamed", name, kind, resolution)


def iter_calls(expression: str) -> Iterator[tuple[str, CallKind, int, int]]:
    """Yield ``(name, kind, start, end)`` for every call in ``expression``.

    String literals and comments are masked first. ``start``/``end`` delimit
    the name itself.
    """
    masked = mask_literals(expression)
    for match in METHOD_CALL_RE.finditer(masked):
        yield match.group(1), "method", match.start(1), match.end(1)
    for match in FUNCTION_CALL_RE.finditer(masked):
        name = match.group(1)
        if name in _KEYWORDS:
            continue
        # ". name(" with whitespace after the dot is a method call
        before = masked[: match.start(1)].rstrip()
        if before.endswith("."):
            continue
        yield name, "function", match.start(1), match.end(1)


def _identifier_violation(verdict: CallVerdict, location: str) -> LintViolation:
    call = f".{verdict.name}()" if verdict.kind == "method" else f"{verdict.name}()"
    rule_id = "B200" if verdict.kind == "method" else "B201"
    resolution = verdict.resolution

    if resolution is not None and resolution.source == "kind":
        if verdict.kind == "method":
            message = f'"{verdict.name}" is a function, not a method'
            suggestion = f"Call it without a receiver: {verdict.name}()"
        else:
            message = f'"{verdict.name}" is a method, not a function'
            suggestion = f"Call it on a value: this.{verdict.name}()"
        return LintViolation(rule_id, "error", message, location, suggestion)

    message = f'Unknown Bloblang {verdict.kind} "{call}"'
    if resolution is None or not resolution.candidates:
        suggestion = f"Check the Bloblang {verdict.kind} reference for valid names"
    else:
        names = [f".{c}()" if verdict.kind == "method" else f"{c}()" for c in resolution.candidates]
        if resolution.replacement is not None:
            suggestion = f"Use {names[0]} instead"
        else:
            suggestion = f"Did you mean: {', '.join(names)}?"
        if resolution.reason:
            suggestion += f" ({resolution.reason})"
    return LintViolation(rule_id, "error", message, location, suggestion)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def lint_bloblang(expression: str, location: str = "") -> list[LintViolation]:
    """Lint one Bloblang expression field.

    Parameters
    ----------
    expression : str
        Mapping text
    location : str
        Dotted path of the field, copied onto each violation

    Returns
    -------
    list[LintViolation]
        Anti-pattern violations in table order, then identifier violations
        in order of first appearance
    """
    violations: list[LintViolation] = []
    claimed: set[str] = set()

    for rule in ANTI_PATTERNS:
        for violation in rule.check(expression):
            violations.append(
                LintViolation(
                    violation.rule_id,
                    violation.severity,
                    violation.message,
                    location,
                    violation.suggestion,
                )
            )
            claimed.update(rule.claims)

    seen: set[tuple[str, str]] = set()
    for name, kind, start, _ in sorted(iter_calls(expression), key=lambda c: c[2]):
        if name in claimed or (name, kind) in seen:
            continue
        seen.add((name, kind))
        verdict = classify_call(name, kind)
        if verdict.outcome == "misnamed":
            violations.append(_identifier_violation(verdict, location))
    return violations


def lint_interpolations(value: str, location: str = "") -> list[LintViolation]:
    """Lint every ``${! ... }`` body of an interpolated config string as one field."""
    bodies = [body for _, _, body in iter_interpolations(value)]
    if not bodies:
        return []
    return lint_bloblang("\n".join(bodies), location)


def iter_interpolations(value: str) -> Iterator[tuple[int, int, str]]:
    """Yield ``(start, end, body)`` for each ``${! ... }`` span.

    ``start``/``end`` delimit the body. Braces inside the body are balanced
    so ``${! {"a": 1}.a }`` is one span.
    """
    index = 0
    while (open_at := value.find("${!", index)) != -1:
        depth = 1
        pos = open_at + 3
        in_string = False
        while pos < len(value) and depth:
            char = value[pos]
            if in_string:
                if char == "\\":
                    pos += 1
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            pos += 1
        if depth:
            return
        yield open_at + 3, pos - 1, value[open_at + 3 : pos - 1]
        index = pos


def mask_literals(expression: str) -> str:
    """Blank out string literal contents and ``#`` comments, keeping offsets.

    Quotes themselves are kept so that call detection still sees a value
    boundary. Triple-quoted strings are handled as single literals.
    """
    chars = list(expression)
    i = 0
    n = len(chars)
    while i < n:
        char = chars[i]
        if char == '"':
            if expression.startswith('"""', i):
                end = expression.find('"""', i + 3)
                end = n if end == -1 else end
                for j in range(i + 3, end):
                    if chars[j] != "\n":
                        chars[j] = " "
                i = end + 3
                continue
            j = i + 1
            while j < n and chars[j] != '"' and chars[j] != "\n":
                if chars[j] == "\\" and j + 1 < n:
                    chars[j] = " "
                    j += 1
                chars[j] = " "
                j += 1
            i = j + 1
            continue
        if char == "#":
            j = i
            while j < n and chars[j] != "\n":
                chars[j] = " "
                j += 1
            i = j
            continue
        i += 1
    return "".join(chars)
