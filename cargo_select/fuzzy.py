"""Fuzzy matching and ranking of targets.

``fuzzy_score`` is the default matching primitive. ``score_targets`` keeps
positive matches and orders them so the best match is the *last* element;
the selector relies on that to put the best match next to the prompt.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Optional

from .targets import Target, display_string

Matcher = Callable[[str, str], Optional[int]]

BOUNDARY_CHARS = "/_- .:\t("
MATCH_SCORE = 16
BOUNDARY_BONUS = 24
MAX_GAP_PENALTY = 12


def _score_from(candidate_folded: str, query_folded: str, start: int) -> int | None:
    # Every matched character nets at least MATCH_SCORE - MAX_GAP_PENALTY.
    score = 0
    prev_idx = -1
    run = 0
    for pos, needle in enumerate(query_folded):
        idx = start if pos == 0 else candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        score += MATCH_SCORE
        if pos > 0:
            if idx == prev_idx + 1:
                run += 1
                score += 20 + min(16, run * 4)
            else:
                run = 0
                score -= min(MAX_GAP_PENALTY, idx - prev_idx - 1)
        if idx == 0 or candidate_folded[idx - 1] in BOUNDARY_CHARS:
            score += BOUNDARY_BONUS
        prev_idx = idx
    return score


def fuzzy_score(candidate: str, pattern: str) -> int | None:
    """Score ``pattern`` as a case-insensitive subsequence of ``candidate``.

    Contiguous runs and hits right after a word boundary raise the score, gaps
    lower it, and long candidates pay a small length penalty that never takes
    a match below 1. Every occurrence
    of the first pattern character is tried as an anchor and the best result
    wins. Returns ``None`` when ``pattern`` is not a subsequence, and ``0`` for
    an empty pattern.
    """
    if not pattern:
        return 0
    query_folded = pattern.casefold()
    candidate_folded = candidate.casefold()

    best: int | None = None
    start = candidate_folded.find(query_folded[0])
    while start >= 0:
        score = _score_from(candidate_folded, query_folded, start)
        if score is None:
            # Later anchors leave even less room for the remaining characters.
            break
        if best is None or score > best:
            best = score
        start = candidate_folded.find(query_folded[0], start + 1)
    if best is None:
        return None
    return best - min(len(candidate_folded) // 5, best - 1)


@dataclass(frozen=True)
class RankedTarget:
    target: Target
    score: int


def rank_targets(
    targets: Sequence[Target],
    pattern: str,
    match: Matcher = fuzzy_score,
) -> list[RankedTarget]:
    """Return positively scored targets in ranking order, best match last.

    Order is ascending score; equal scores are ordered by display string in
    descending lexicographic order, regardless of input order.
    """
    ranked: list[tuple[str, RankedTarget]] = []
    for target in targets:
        label = display_string(target)
        score = match(label, pattern)
        if score is None or score <= 0:
            continue
        ranked.append((label, RankedTarget(target, score)))

    ranked.sort(key=lambda item: item[0], reverse=True)
    ranked.sort(key=lambda item: item[1].score)
    return [item for _label, item in ranked]


def score_targets(
    targets: Sequence[Target],
    pattern: str,
    match: Matcher = fuzzy_score,
) -> list[Target]:
    """Filter and rank ``targets`` for ``pattern``; the best match is last.

    An empty pattern is not special-cased here. Callers that want the full
    list for an empty prompt skip scoring entirely.
    """
    return [item.target for item in rank_targets(targets, pattern, match)]


def best_match(targets: Sequence[Target], pattern: str, match: Matcher = fuzzy_score) -> Target | None:
    ranked = score_targets(targets, pattern, match)
    return ranked[-1] if ranked else None
