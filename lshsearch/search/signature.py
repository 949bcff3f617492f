"""MinHash signature matrix construction."""
from __future__ import annotations

import logging

import numpy as np

from .hashing import UniversalHashFamily
from .types import InvalidObjectMappingError, ObjectMapping

logger = logging.getLogger(__name__)

# Cells of objects with an empty feature set keep this value in every row.
SIGNATURE_SENTINEL: int = int(np.iinfo(np.int64).max)


def build_signature_matrix(object_mapping: ObjectMapping, hash_family: UniversalHashFamily) -> np.ndarray:
    """Return the ``(num_hashes, num_objects)`` MinHash signature matrix.

    Cell ``(i, obj)`` is the minimum of ``h_i(r)`` over the features ``r`` of
    ``obj``, i.e. the first feature of ``obj`` under the permutation induced by
    hash function ``i``. Two columns agree on a row with probability equal to
    the Jaccard similarity of their sets.

    Objects with no features keep :data:`SIGNATURE_SENTINEL` everywhere, so two
    empty objects share every band. That collision is left in place; exact
    confirmation scores such pairs 0.
    """
    num_objects = len(object_mapping)
    num_values = hash_family.num_values
    signatures = np.full((hash_family.num_hashes, num_objects), SIGNATURE_SENTINEL, dtype=np.int64)

    empty = 0
    for obj in range(num_objects):
        features = object_mapping[obj]
        if not features:
            empty += 1
            continue
        rows = np.fromiter(features, dtype=np.int64, count=len(features))
        if rows.min() < 0 or rows.max() >= num_values:
            raise InvalidObjectMappingError(
                f"Object {obj} has feature ids outside [0, {num_values})"
            )
        signatures[:, obj] = hash_family.apply_all(rows).min(axis=1)

    if empty:
        logger.debug("%d of %d objects have empty feature sets", empty, num_objects)
    logger.info("Built %dx%d signature matrix", hash_family.num_hashes, num_objects)
    return signatures


def estimate_similarity(signatures: np.ndarray, first: int, second: int) -> float:
    """Fraction of signature rows on which two objects agree (MinHash estimate)."""
    if signatures.shape[0] == 0:
        return 0.0
    return float(np.mean(signatures[:, first] == signatures[:, second]))
