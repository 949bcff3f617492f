"""Similarity search engine.

Core public API lives here so external users can::

    from lshsearch.search import create_searcher
    searcher = create_searcher("lsh", mapping, num_hashes=100, num_bands=20, seed=42)
    pairs = searcher.similar_pairs_above_threshold(0.5)

Collaborators that build object mappings:
    from lshsearch.search.shingling import DocumentCorpus
    from lshsearch.search.ratings import RatingsData
"""

from importlib.metadata import PackageNotFoundError, version as _pkg_version


# Semantic version of the installed package
try:
    __version__: str = _pkg_version("lshsearch")
except PackageNotFoundError:  # pragma: no cover – local dev path
    __version__ = "0.1.0"


from .types import (
    ConfigurationError,
    InvalidObjectMappingError,
    Neighbor,
    ObjectMapping,
    SimilarPair,
    UnknownObjectError,
    validate_object_mapping,
)
from .jaccard import jaccard_similarity
from .base import SimilaritySearcher, create_searcher
from .brute_force import BruteForceSearcher
from .hashing import DEFAULT_SEED, UniversalHashFamily, least_prime_at_least
from .signature import SIGNATURE_SENTINEL, build_signature_matrix
from .banding import BandingStats, band_key, candidate_pairs, partition
from .lsh import LshSearcher, confirm_pairs
from .evaluation import RecallReport, compare_pairs

__all__ = [
    "__version__",
    "ObjectMapping",
    "SimilarPair",
    "Neighbor",
    "ConfigurationError",
    "InvalidObjectMappingError",
    "UnknownObjectError",
    "validate_object_mapping",
    "jaccard_similarity",
    "SimilaritySearcher",
    "create_searcher",
    "BruteForceSearcher",
    "LshSearcher",
    "DEFAULT_SEED",
    "UniversalHashFamily",
    "least_prime_at_least",
    "SIGNATURE_SENTINEL",
    "build_signature_matrix",
    "BandingStats",
    "band_key",
    "candidate_pairs",
    "partition",
    "confirm_pairs",
    "RecallReport",
    "compare_pairs",
]
