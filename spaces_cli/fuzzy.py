"""Subsequence fuzzy matching used to narrow repository and space lists."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Sequence

T = TypeVar("T")

_SEPARATORS = frozenset("/-_. ")

SCORE_MATCH = 16
BONUS_CONSECUTIVE = 8
BONUS_BOUNDARY = 8
BONUS_FIRST_CHAR = 4
PENALTY_GAP = 1


def fuzzy_score(label: str, query: str) -> int | None:
    """Score ``label`` against ``query``.

    Returns ``None`` when the characters of ``query`` do not all appear in
    ``label`` in order. Matching is case-insensitive and greedy from the left.
    Consecutive runs and matches right after a separator score higher, gaps
    between matched characters cost a little.
    """
    if not query:
        return 0

    haystack = label.lower()
    score = 0
    prev = -1
    for ch in query.lower():
        pos = haystack.find(ch, prev + 1)
        if pos == -1:
            return None
        score += SCORE_MATCH
        if pos == 0:
            score += BONUS_FIRST_CHAR + BONUS_BOUNDARY
        elif haystack[pos - 1] in _SEPARATORS:
            score += BONUS_BOUNDARY
        if prev >= 0:
            if pos == prev + 1:
                score += BONUS_CONSECUTIVE
            else:
                score -= PENALTY_GAP * (pos - prev - 1)
        prev = pos
    return score


def fuzzy_filter(candidates: Sequence[tuple[str, T]], query: str) -> list[tuple[str, T]]:
    """Return the candidates whose label matches ``query``, best first.

    An empty query keeps every candidate in its original order. Candidates
    with equal scores keep their relative order.
    """
    if not query:
        return list(candidates)

    scored = [
        (score, index, candidate)
        for index, candidate in enumerate(candidates)
        if (score := fuzzy_score(candidate[0], query)) is not None
    ]
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [candidate for _, _, candidate in scored]
