"""Common searcher interface plus the factory that picks exact or approximate search."""
from __future__ import annotations

import logging
from typing import Optional, Set

from .hashing import DEFAULT_SEED
from .types import (
    ConfigurationError,
    Neighbor,
    ObjectMapping,
    SimilarPair,
    UnknownObjectError,
    validate_object_mapping,
)

logger = logging.getLogger(__name__)

SEARCH_METHODS = ("bf", "lsh")


class SimilaritySearcher:
    """Base class for searchers over an :data:`ObjectMapping`.

    Subclasses answer two queries: all pairs above a similarity threshold and
    all neighbours of one object above a threshold. Thresholds are strict
    (``similarity > threshold``).
    """

    name = "base"

    def __init__(self, object_mapping: ObjectMapping):
        validate_object_mapping(object_mapping)
        self.object_mapping = object_mapping

    @property
    def num_objects(self) -> int:
        return len(self.object_mapping)

    def similar_pairs_above_threshold(self, threshold: float) -> Set[SimilarPair]:
        """Return every pair whose similarity is strictly above *threshold*."""
        raise NotImplementedError

    def neighbors_above_threshold(self, obj_id: int, threshold: float) -> Set[Neighbor]:
        """Return the objects whose similarity to *obj_id* is strictly above *threshold*."""
        raise NotImplementedError

    def _require_object(self, obj_id: int) -> None:
        if obj_id not in self.object_mapping:
            raise UnknownObjectError(f"Object id {obj_id} is not in the object mapping")


def create_searcher(
    method: str,
    object_mapping: ObjectMapping,
    *,
    num_values: Optional[int] = None,
    num_hashes: Optional[int] = None,
    num_bands: Optional[int] = None,
    seed: Optional[int] = DEFAULT_SEED,
    processes: int = 1,
    strict: bool = False,
) -> SimilaritySearcher:
    """Build the searcher selected by *method* (``"bf"`` or ``"lsh"``).

    Args:
        method: ``"bf"`` for exhaustive exact search, ``"lsh"`` for MinHash + LSH
        object_mapping: object id -> feature id set
        num_values: number of distinct feature ids (inferred when omitted)
        num_hashes: signature length, required for ``"lsh"``
        num_bands: number of LSH bands, required for ``"lsh"``
        seed: seed for the hash family
        processes: worker processes used to confirm LSH candidates
        strict: reject ``num_hashes`` not divisible by ``num_bands``
    """
    # local imports to avoid circular deps
    from .brute_force import BruteForceSearcher
    from .lsh import LshSearcher

    method = method.lower()
    if method == "bf":
        logger.debug("Using exact brute-force search over %d objects", len(object_mapping))
        return BruteForceSearcher(object_mapping)
    if method == "lsh":
        if num_hashes is None or num_bands is None:
            raise ConfigurationError("Both num_hashes and num_bands are mandatory for the LSH method")
        return LshSearcher(
            object_mapping,
            num_hashes=num_hashes,
            num_bands=num_bands,
            num_values=num_values,
            seed=seed,
            processes=processes,
            strict=strict,
        )
    raise ConfigurationError(
        f"Unknown search method {method!r}; expected one of: {', '.join(SEARCH_METHODS)}"
    )
