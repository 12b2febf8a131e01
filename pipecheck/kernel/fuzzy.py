"""Name-similarity helpers shared by the validator and the auto-fixer.

All functions are pure. For a given candidate order the results are
deterministic.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

# Containment on very short names matches nearly everything
_MIN_CONTAINED_LENGTH = 3
_PREFIX_LENGTH = 3


def camel_to_snake(name: str) -> str:
    """Convert ``parseJson`` / ``toUpperCase`` / ``HTTPServer`` to snake_case.

    >>> camel_to_snake("parseJson")
    'parse_json'
    >>> camel_to_snake("mapEachKey")
    'map_each_key'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def edit_distance(a: str, b: str, max_distance: int | None = None) -> int:
    """Levenshtein distance between ``a`` and ``b``.

    When ``max_distance`` is given, the computation stops early and returns
    ``max_distance + 1`` once every cell of a row exceeds the bound.
    """
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if max_distance is not None and len(a) - len(b) > max_distance:
        return max_distance + 1

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        if max_distance is not None and min(current) > max_distance:
            return max_distance + 1
        previous = current
    return previous[-1]


def distance_threshold(name: str) -> int:
    """Largest edit distance accepted as "close" for ``name``."""
    return max(2, len(name) // 3)


def nearest_names(
    name: str,
    candidates: Iterable[str],
    *,
    aliases: Mapping[str, str | Sequence[str]] | None = None,
    use_edit_distance: bool = False,
    limit: int = 3,
) -> list[str]:
    """Return up to ``limit`` candidates that ``name`` most plausibly meant.

    Strategies are tried in priority order and the first one that yields
    anything wins:

    1. ``aliases`` hit (exact, then lowercase), keeping targets that are candidates
    2. case-insensitive substring containment in either direction
    3. shared 3-character prefix
    4. bounded edit distance, only when ``use_edit_distance`` is set

    Parameters
    ----------
    name : str
        The unrecognized name
    candidates : Iterable[str]
        Valid names, in the order ties should be broken
    aliases : Mapping[str, str | Sequence[str]] | None
        Misspelling table mapping a wrong name to one or more targets
    use_edit_distance : bool
        Enable the Levenshtein fallback (used for field names)
    limit : int
        Maximum number of suggestions

    Returns
    -------
    list[str]
        Suggestions, possibly empty
    """
    pool = list(dict.fromkeys(candidates))
    if not name or not pool:
        return []
    valid = set(pool)

    if aliases:
        hit = aliases.get(name)
        if hit is None:
            hit = aliases.get(name.lower())
        if hit is not None:
            targets = [hit] if isinstance(hit, str) else list(hit)
            matched = [t for t in targets if t in valid]
            if matched:
                return matched[:limit]

    lowered = name.lower()

    contained = [
        c
        for c in pool
        if (len(lowered) >= _MIN_CONTAINED_LENGTH and lowered in c.lower())
        or (len(c) >= _MIN_CONTAINED_LENGTH and c.lower() in lowered)
    ]
    if contained:
        return contained[:limit]

    if len(lowered) >= _PREFIX_LENGTH:
        prefix = lowered[:_PREFIX_LENGTH]
        prefixed = [c for c in pool if c.lower().startswith(prefix)]
        if prefixed:
            return prefixed[:limit]

    if use_edit_distance:
        threshold = distance_threshold(name)
        scored = []
        for index, candidate in enumerate(pool):
            distance = edit_distance(lowered, candidate.lower(), threshold)
            if distance <= threshold:
                scored.append((distance, index, candidate))
        scored.sort()
        return [candidate for _, _, candidate in scored[:limit]]

    return []
