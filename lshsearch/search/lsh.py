"""MinHash + LSH similarity searcher.

Construction runs the whole pipeline once::

    hash family -> signature matrix -> band buckets

Queries then read the (immutable) buckets: objects that share a bucket in any
band become candidates, candidates are de-duplicated, and each unique
candidate is confirmed with the exact Jaccard similarity. The result can miss
true pairs that never collide (false negatives) but never contains a pair at
or below the threshold.
"""
from __future__ import annotations

import logging
import math
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from .banding import (
    BandBuckets,
    BandingStats,
    band_key,
    candidate_pairs,
    partition,
    rows_per_band,
)
from .base import SimilaritySearcher
from .hashing import DEFAULT_SEED, UniversalHashFamily
from .jaccard import jaccard_similarity
from .signature import build_signature_matrix
from .types import ConfigurationError, Neighbor, ObjectMapping, SimilarPair, infer_num_values

logger = logging.getLogger(__name__)

class LshSearcher(SimilaritySearcher):
    """Approximate searcher backed by MinHash signatures and LSH banding."""

    name = "lsh"

    def __init__(
        self,
        object_mapping: ObjectMapping,
        num_hashes: int,
        num_bands: int,
        num_values: Optional[int] = None,
        seed: Optional[int] = DEFAULT_SEED,
        *,
        rng: Optional[np.random.Generator] = None,
        processes: int = 1,
        strict: bool = False,
    ) -> None:
        """
        Args:
            object_mapping: object id -> feature id set, ids contiguous from 0
            num_hashes: number of hash functions (signature rows)
            num_bands: number of bands; should divide ``num_hashes``
            num_values: number of distinct feature ids (inferred when None)
            seed: seed for the hash family (None means DEFAULT_SEED)
            rng: explicit random generator, takes precedence over *seed*
            processes: worker processes for candidate confirmation
            strict: raise instead of warning when bands do not cover every row
        """
        super().__init__(object_mapping)
        if processes < 1:
            raise ConfigurationError(f"processes must be >= 1, got {processes}")
        if num_values is None:
            num_values = max(infer_num_values(object_mapping), 1)

        self.num_hashes = num_hashes
        self.num_bands = num_bands
        self.num_values = num_values
        self.processes = processes
        self.rows_per_band = rows_per_band(num_hashes, num_bands)

        unused = num_hashes - self.rows_per_band * num_bands
        if unused:
            if strict:
                raise ConfigurationError(
                    f"num_hashes ({num_hashes}) is not divisible by num_bands ({num_bands})"
                )
            logger.warning(
                "num_hashes=%d is not a multiple of num_bands=%d; the last %d signature rows are ignored",
                num_hashes,
                num_bands,
                unused,
            )

        self.hash_family = UniversalHashFamily.build(num_hashes, num_values, seed=seed, rng=rng)
        self.signature_matrix = build_signature_matrix(object_mapping, self.hash_family)
        self.band_buckets: List[BandBuckets] = partition(self.signature_matrix, num_bands)
        self._candidates: Optional[FrozenSet[Tuple[int, int]]] = None

    # --------------------------------------------------
    # Queries
    # --------------------------------------------------

    def candidate_pairs(self) -> FrozenSet[Tuple[int, int]]:
        """Unique ``(i, j)`` pairs, ``i < j``, that share a bucket in at least one band."""
        if self._candidates is None:
            self._candidates = frozenset(candidate_pairs(self.band_buckets))
            logger.debug("%d unique candidate pairs", len(self._candidates))
        return self._candidates

    def similar_pairs_above_threshold(self, threshold: float) -> Set[SimilarPair]:
        candidates = self.candidate_pairs()
        pairs = confirm_pairs(self.object_mapping, candidates, threshold, processes=self.processes)
        logger.info(
            "LSH confirmed %d of %d candidate pairs above %.3f", len(pairs), len(candidates), threshold
        )
        return pairs

    def neighbors_above_threshold(self, obj_id: int, threshold: float) -> Set[Neighbor]:
        self._require_object(obj_id)
        query = self.object_mapping[obj_id]
        neighbors: Set[Neighbor] = set()
        for other in self.bucket_mates(obj_id):
            sim = jaccard_similarity(query, self.object_mapping[other])
            if sim > threshold:
                neighbors.add(Neighbor(other, sim))
        return neighbors

    def bucket_mates(self, obj_id: int) -> Set[int]:
        """Objects sharing a bucket with *obj_id* in at least one band."""
        self._require_object(obj_id)
        rows = self.rows_per_band
        mates: Set[int] = set()
        for band, buckets in enumerate(self.band_buckets):
            key = band_key(self.signature_matrix[band * rows : (band + 1) * rows, obj_id])  # noqa: E203
            mates.update(buckets.get(key, ()))
        mates.discard(obj_id)
        return mates

    def stats(self) -> BandingStats:
        return BandingStats.from_bands(self.band_buckets, self.num_hashes, len(self.candidate_pairs()))


# -----------------------------------------------------------
# Candidate confirmation
# -----------------------------------------------------------


def split_chunks(items: Sequence[Tuple[int, int]], num_chunks: int) -> List[Sequence[Tuple[int, int]]]:
    """Split *items* into at most *num_chunks* contiguous, non-empty slices."""
    chunk_size = max(1, math.ceil(len(items) / num_chunks))
    return [items[i : i + chunk_size] for i in range(0, len(items), chunk_size)]  # noqa: E203


def _confirm_chunk(
    pairs: Iterable[Tuple[int, int]],
    object_mapping: ObjectMapping,
    threshold: float,
) -> Set[SimilarPair]:
    confirmed: Set[SimilarPair] = set()
    for first, second in pairs:
        sim = jaccard_similarity(object_mapping[first], object_mapping[second])
        if sim > threshold:
            confirmed.add(SimilarPair(first, second, sim))
    return confirmed


def confirm_pairs(
    object_mapping: ObjectMapping,
    candidates: Iterable[Tuple[int, int]],
    threshold: float,
    processes: int = 1,
) -> Set[SimilarPair]:
    """Keep the candidates whose exact Jaccard similarity is strictly above *threshold*.

    With ``processes > 1`` the candidates are split into one chunk per worker
    and confirmed in a process pool, so the mapping is sent to each worker
    once. The merged set is identical to the sequential result.
    """
    ordered = sorted(candidates)
    if processes <= 1 or not ordered:
        return _confirm_chunk(ordered, object_mapping, threshold)

    chunks = split_chunks(ordered, processes)
    worker = partial(_confirm_chunk, object_mapping=object_mapping, threshold=threshold)

    confirmed: Set[SimilarPair] = set()
    with ProcessPoolExecutor(max_workers=processes) as pool:
        for part in pool.map(worker, chunks):
            confirmed |= part
    return confirmed
