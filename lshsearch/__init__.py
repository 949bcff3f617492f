"""lshsearch - find highly similar objects without comparing every pair.

Objects (documents, user rating profiles, ...) are represented as sets of
integer features. Two searchers answer the same queries:
- exact brute force over all pairs (ground truth)
- MinHash signatures + LSH banding, confirmed with exact Jaccard

Quick Start:
    # CLI usage
    lshsearch docs articles/ --threshold 0.5 --method lsh --num-hashes 100 --num-bands 20

    # Python API
    from lshsearch import create_searcher
    pairs = create_searcher("bf", {0: {1, 2, 3}, 1: {2, 3, 4}}).similar_pairs_above_threshold(0.3)
"""

from .search import __version__

# Re-export main API
from .search import (
    BruteForceSearcher,
    ConfigurationError,
    LshSearcher,
    Neighbor,
    SimilarPair,
    UnknownObjectError,
    compare_pairs,
    create_searcher,
    jaccard_similarity,
)

__all__ = [
    "__version__",
    "create_searcher",
    "BruteForceSearcher",
    "LshSearcher",
    "SimilarPair",
    "Neighbor",
    "ConfigurationError",
    "UnknownObjectError",
    "jaccard_similarity",
    "compare_pairs",
]
