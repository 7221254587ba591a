"""String similarity helpers used by the fuzzy matching tier."""

from __future__ import annotations

from typing import Optional


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between ``a`` and ``b`` (insert, delete, substitute)."""

    rows, cols = len(a), len(b)
    matrix = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(rows + 1):
        matrix[i][0] = i
    for j in range(cols + 1):
        matrix[0][j] = j

    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,
                matrix[i][j - 1] + 1,
                matrix[i - 1][j - 1] + cost,
            )
    return matrix[rows][cols]


def normalize_text(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """Return a score in [0, 1]; 1 for equal strings after trimming and case folding.

    Two empty inputs score 0 rather than 1.
    """

    if not a and not b:
        return 0.0
    left, right = normalize_text(a), normalize_text(b)
    if left == right:
        return 1.0
    longest = max(len(left), len(right))
    return 1.0 - edit_distance(left, right) / longest
