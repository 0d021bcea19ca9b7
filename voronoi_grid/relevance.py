"""
Relevance Mapping
=================

score(query, item)  ->  relevance in [0, 1]
target_radius(s)    ->  radius in [base_radius, max_radius]

SCORING (case-insensitive substring tests, additive):
    title contains query      +0.6
    category contains query   +0.3
    any tag contains query    +0.2
    title equals query        +0.4
    sum clamped to 1.0; a zero sum is floored to 0.05 so nothing vanishes.
An empty query scores the 0.1 baseline for every item.

RADIUS MAPPING:
    r* = base                                  if s <= 0.1
    r* = base + (max - base) * s               otherwise
Scores at or below the baseline collapse to the minimum size instead of
scaling smoothly, which separates "irrelevant" from "relevant" visually.
Scores are clamped to [0, 1] first; a non-finite score counts as 0.
"""

from __future__ import annotations

import math
from typing import Callable, Sequence

import numpy as np

from .catalog import Item
from .config import LayoutParams

BASELINE_SCORE = 0.1
FLOOR_SCORE = 0.05

TITLE_WEIGHT = 0.6
CATEGORY_WEIGHT = 0.3
TAG_WEIGHT = 0.2
EXACT_TITLE_BONUS = 0.4

Scorer = Callable[[str, Item], float]


def score(query: str, item: Item) -> float:
    if not query:
        return BASELINE_SCORE
    q = query.lower()
    title = item.title.lower()

    s = 0.0
    if q in title:
        s += TITLE_WEIGHT
    if q in item.category.lower():
        s += CATEGORY_WEIGHT
    if any(q in tag.lower() for tag in item.tags):
        s += TAG_WEIGHT
    if title == q:
        s += EXACT_TITLE_BONUS

    s = min(s, 1.0)
    return s if s > 0 else FLOOR_SCORE


def target_radius(s: float, params: LayoutParams) -> float:
    s = float(s)
    if not math.isfinite(s):
        s = 0.0
    s = min(max(s, 0.0), 1.0)
    if s <= BASELINE_SCORE:
        return params.base_radius
    return params.base_radius + params.radius_span * s


def apply_query(state, items: Sequence[Item], query: str,
                params: LayoutParams, scorer: Scorer = score) -> np.ndarray:
    """Write target radii for ``query`` into ``state``; returns the scores."""
    scores = np.array([scorer(query, item) for item in items], dtype=np.float64)
    state.target_r[:] = [target_radius(s, params) for s in scores]
    return scores
