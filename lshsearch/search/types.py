"""Shared data model for the similarity searchers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Set

# Dense object id (0..N-1) -> set of dense feature ids (0..M-1)
ObjectMapping = Dict[int, Set[int]]


# -----------------------------------------------------------
# Errors
# -----------------------------------------------------------


class ConfigurationError(ValueError):
    """Raised when searcher parameters are inconsistent (e.g. more bands than hashes)."""


class InvalidObjectMappingError(ValueError):
    """Raised when an object mapping breaks the contiguous-id contract."""


class UnknownObjectError(KeyError):
    """Raised when a query names an object id that is not in the mapping."""


# -----------------------------------------------------------
# Results
# -----------------------------------------------------------


@dataclass(frozen=True)
class SimilarPair:
    """Unordered pair of object ids with their similarity.

    The ids are normalised on construction so that ``id1 < id2``; two pairs are
    equal only when both ids *and* the similarity match. Ordering compares the
    similarity alone, so ``sorted(pairs, reverse=True)`` ranks best first.
    """

    id1: int
    id2: int
    similarity: float

    def __post_init__(self) -> None:
        if self.id1 == self.id2:
            raise ValueError(f"A pair needs two distinct objects, got {self.id1} twice")
        if self.id1 > self.id2:
            a, b = self.id2, self.id1
            object.__setattr__(self, "id1", a)
            object.__setattr__(self, "id2", b)

    def __lt__(self, other: "SimilarPair") -> bool:
        if not isinstance(other, SimilarPair):
            return NotImplemented
        return self.similarity < other.similarity

    @property
    def ids(self) -> tuple[int, int]:
        return (self.id1, self.id2)


@dataclass(frozen=True)
class Neighbor:
    """An object id and its similarity to some fixed query object."""

    id: int
    similarity: float

    def __lt__(self, other: "Neighbor") -> bool:
        if not isinstance(other, Neighbor):
            return NotImplemented
        return self.similarity < other.similarity


# -----------------------------------------------------------
# Validation
# -----------------------------------------------------------


def validate_object_mapping(mapping: Mapping[int, Set[int]], num_values: Optional[int] = None) -> None:
    """Check that *mapping* uses ids ``0..N-1`` and, optionally, features ``< num_values``.

    Array-indexed structures downstream (the signature matrix columns) rely on
    both invariants.
    """
    n = len(mapping)
    for expected in range(n):
        if expected not in mapping:
            raise InvalidObjectMappingError(
                f"Object ids must be contiguous from 0; missing id {expected} (of {n} objects)"
            )
    if num_values is None:
        return
    for obj_id, features in mapping.items():
        for feature in features:
            if feature < 0 or feature >= num_values:
                raise InvalidObjectMappingError(
                    f"Object {obj_id} has feature id {feature} outside [0, {num_values})"
                )


def infer_num_values(mapping: Mapping[int, Set[int]]) -> int:
    """Return ``max feature id + 1`` over *mapping* (0 when every set is empty)."""
    highest = -1
    for features in mapping.values():
        if features:
            highest = max(highest, max(features))
    return highest + 1
