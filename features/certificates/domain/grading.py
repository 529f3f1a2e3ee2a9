"""試験スコアの集計"""
from __future__ import annotations

from typing import Mapping

_GRADE_THRESHOLDS = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)


def compute_average(scores: Mapping[str, float] | None) -> float:
    """科目スコアの平均を小数第2位で丸めて返す"""

    values = list((scores or {}).values())
    if not values:
        return 0
    return round(sum(values) / len(values), 2)


def compute_grade(average: float) -> str:
    for threshold, grade in _GRADE_THRESHOLDS:
        if average >= threshold:
            return grade
    return "F"
