"""Basic sanity tests for the exact searcher and the shared data model."""
from __future__ import annotations

import pytest

from lshsearch.search import (
    BruteForceSearcher,
    ConfigurationError,
    InvalidObjectMappingError,
    LshSearcher,
    Neighbor,
    SimilarPair,
    UnknownObjectError,
    create_searcher,
    jaccard_similarity,
    validate_object_mapping,
)

OBJECTS = {0: {1, 2, 3}, 1: {2, 3, 4}, 2: {8, 9}}


def test_jaccard_basic() -> None:
    assert jaccard_similarity({1, 2, 3}, {2, 3, 4}) == 0.5
    assert jaccard_similarity({1, 2}, {3}) == 0.0
    assert jaccard_similarity({1, 2}, {1, 2}) == 1.0


def test_jaccard_both_empty_is_zero() -> None:
    assert jaccard_similarity(set(), set()) == 0.0
    assert jaccard_similarity(set(), {1}) == 0.0


def test_brute_force_small_mapping() -> None:
    pairs = BruteForceSearcher(OBJECTS).similar_pairs_above_threshold(0.3)
    assert pairs == {SimilarPair(0, 1, 0.5)}


def test_brute_force_threshold_is_strict() -> None:
    assert BruteForceSearcher(OBJECTS).similar_pairs_above_threshold(0.5) == set()


def test_brute_force_neighbors() -> None:
    searcher = BruteForceSearcher(OBJECTS)
    assert searcher.neighbors_above_threshold(0, 0.3) == {Neighbor(1, 0.5)}
    assert searcher.neighbors_above_threshold(2, 0.0) == set()


def test_brute_force_unknown_object() -> None:
    with pytest.raises(UnknownObjectError):
        BruteForceSearcher(OBJECTS).neighbors_above_threshold(7, 0.1)


def test_similar_pair_normalises_ids() -> None:
    pair = SimilarPair(5, 2, 0.7)
    assert (pair.id1, pair.id2) == (2, 5)
    assert pair == SimilarPair(2, 5, 0.7)
    assert pair != SimilarPair(2, 5, 0.6)
    assert len({SimilarPair(1, 3, 0.4), SimilarPair(3, 1, 0.4)}) == 1


def test_similar_pair_rejects_self_pair() -> None:
    with pytest.raises(ValueError):
        SimilarPair(3, 3, 1.0)


def test_pairs_order_by_similarity() -> None:
    pairs = [SimilarPair(0, 1, 0.2), SimilarPair(4, 5, 0.9), SimilarPair(2, 3, 0.5)]
    assert [p.similarity for p in sorted(pairs, reverse=True)] == [0.9, 0.5, 0.2]
    assert Neighbor(1, 0.1) < Neighbor(0, 0.3)


def test_mapping_must_be_contiguous() -> None:
    with pytest.raises(InvalidObjectMappingError):
        validate_object_mapping({0: {1}, 2: {3}})
    with pytest.raises(InvalidObjectMappingError):
        validate_object_mapping({0: {1}, 1: {9}}, num_values=5)
    validate_object_mapping({0: {1}, 1: {4}}, num_values=5)


def test_create_searcher_selects_strategy() -> None:
    assert isinstance(create_searcher("bf", OBJECTS), BruteForceSearcher)
    lsh = create_searcher("lsh", OBJECTS, num_values=10, num_hashes=20, num_bands=5, seed=42)
    assert isinstance(lsh, LshSearcher)


def test_create_searcher_rejects_bad_config() -> None:
    with pytest.raises(ConfigurationError):
        create_searcher("lsh", OBJECTS)
    with pytest.raises(ConfigurationError):
        create_searcher("annoy", OBJECTS)
