"""Exhaustive pairwise search: the exact baseline LSH is measured against."""
from __future__ import annotations

import logging
from typing import Set

from .base import SimilaritySearcher
from .jaccard import jaccard_similarity
from .types import Neighbor, SimilarPair

logger = logging.getLogger(__name__)


class BruteForceSearcher(SimilaritySearcher):
    """Computes the Jaccard similarity of every pair, O(N² · average set size)."""

    name = "bf"

    def similar_pairs_above_threshold(self, threshold: float) -> Set[SimilarPair]:
        mapping = self.object_mapping
        n = len(mapping)
        pairs: Set[SimilarPair] = set()
        for i in range(n):
            first = mapping[i]
            for j in range(i + 1, n):
                sim = jaccard_similarity(first, mapping[j])
                if sim > threshold:
                    pairs.add(SimilarPair(i, j, sim))
        logger.info("Brute force compared %d pairs, %d above %.3f", n * (n - 1) // 2, len(pairs), threshold)
        return pairs

    def neighbors_above_threshold(self, obj_id: int, threshold: float) -> Set[Neighbor]:
        self._require_object(obj_id)
        query = self.object_mapping[obj_id]
        neighbors: Set[Neighbor] = set()
        for other, features in self.object_mapping.items():
            if other == obj_id:
                continue
            sim = jaccard_similarity(query, features)
            if sim > threshold:
                neighbors.add(Neighbor(other, sim))
        return neighbors
