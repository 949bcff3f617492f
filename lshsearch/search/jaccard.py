"""Exact Jaccard similarity."""
from __future__ import annotations

from typing import AbstractSet


def jaccard_similarity(a: AbstractSet, b: AbstractSet) -> float:
    """Return ``|a ∩ b| / |a ∪ b|``, or 0.0 when both sets are empty."""
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union
