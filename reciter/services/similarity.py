"""String similarity used by the streaming recitation matcher."""

from __future__ import annotations


def damerau_levenshtein(a: str, b: str) -> int:
    """Optimal string alignment distance (restricted Damerau-Levenshtein).

    Insert, delete, substitute and swapping two adjacent characters each
    cost 1. A transposed pair cannot be edited again.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev_prev: list[int] = []
    prev = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        curr = [i] + [0] * len(b)
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            curr[j] = min(
                prev[j] + 1,  # deletion
                curr[j - 1] + 1,  # insertion
                prev[j - 1] + cost,  # substitution
            )
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                curr[j] = min(curr[j], prev_prev[j - 2] + 1)
        prev_prev, prev = prev, curr
    return prev[len(b)]


def similarity(a: str, b: str) -> float:
    """1.0 for identical strings, falling towards 0.0 as edits pile up."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    dist = damerau_levenshtein(a, b)
    return max(0.0, 1 - dist / max(len(a), len(b)))
