"""LSH banding: split the signature matrix into bands and bucket identical band slices."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Iterable, List, Sequence, Set, Tuple

import numpy as np

from .types import ConfigurationError

logger = logging.getLogger(__name__)

# band key -> ids of the objects whose band slice encodes to that key
BandBuckets = Dict[bytes, Set[int]]

# 8-byte big-endian cells: every key has a fixed width per row.
_KEY_DTYPE = np.dtype(">i8")


# -----------------------------------------------------------
# Parameters
# -----------------------------------------------------------


def rows_per_band(num_hashes: int, num_bands: int) -> int:
    """Rows in each band; rows past ``num_bands * rows_per_band`` are unused."""
    if num_bands <= 0:
        raise ConfigurationError(f"num_bands must be > 0, got {num_bands}")
    if num_bands > num_hashes:
        raise ConfigurationError(f"num_bands ({num_bands}) cannot exceed num_hashes ({num_hashes})")
    return num_hashes // num_bands


def collision_probability(similarity: float, num_bands: int, rows: int) -> float:
    """Probability that two objects of Jaccard *similarity* share at least one bucket.

    This is the LSH S-curve ``1 - (1 - s**r)**b``.
    """
    return 1.0 - (1.0 - similarity ** rows) ** num_bands


def approximate_threshold(num_bands: int, rows: int) -> float:
    """Similarity at which the S-curve is steepest, roughly ``(1/b)**(1/r)``."""
    return (1.0 / num_bands) ** (1.0 / rows)


# -----------------------------------------------------------
# Bucketing
# -----------------------------------------------------------


def band_key(values: Sequence[int]) -> bytes:
    """Encode one band slice as fixed-width bytes.

    Each signature value takes exactly 8 bytes, so distinct slices can never
    produce the same key (unlike joining decimal digits, where ``1,23`` and
    ``12,3`` would collide).
    """
    return np.asarray(values, dtype=_KEY_DTYPE).tobytes()


def partition(signatures: np.ndarray, num_bands: int) -> List[BandBuckets]:
    """Bucket every object once per band.

    Band ``b`` covers signature rows ``[b*r, (b+1)*r)`` with
    ``r = num_hashes // num_bands``. Returns one bucket map per band.
    """
    num_hashes, num_objects = signatures.shape
    rows = rows_per_band(num_hashes, num_bands)

    bands: List[BandBuckets] = []
    for band in range(num_bands):
        start = band * rows
        # one contiguous row of key bytes per object
        block = np.ascontiguousarray(signatures[start : start + rows, :].T, dtype=_KEY_DTYPE)  # noqa: E203
        buckets: BandBuckets = {}
        for obj in range(num_objects):
            buckets.setdefault(block[obj].tobytes(), set()).add(obj)
        bands.append(buckets)
    logger.debug("Partitioned %d objects into %d bands of %d rows", num_objects, num_bands, rows)
    return bands


def candidate_pairs(bands: Iterable[BandBuckets]) -> Set[Tuple[int, int]]:
    """Return each pair ``(i, j)``, ``i < j``, that shares a bucket in any band, once."""
    pairs: Set[Tuple[int, int]] = set()
    for buckets in bands:
        for ids in buckets.values():
            if len(ids) < 2:
                continue
            pairs.update(combinations(sorted(ids), 2))
    return pairs


# -----------------------------------------------------------
# Stats
# -----------------------------------------------------------


@dataclass
class BandingStats:
    num_bands: int = 0
    rows_per_band: int = 0
    unused_rows: int = 0
    total_buckets: int = 0
    non_singleton_buckets: int = 0
    avg_bucket_size: float = 0.0
    candidate_pairs: int = 0

    @classmethod
    def from_bands(cls, bands: List[BandBuckets], num_hashes: int, num_candidates: int) -> "BandingStats":
        sizes = [len(ids) for buckets in bands for ids in buckets.values()]
        rows = num_hashes // len(bands) if bands else 0
        return cls(
            num_bands=len(bands),
            rows_per_band=rows,
            unused_rows=num_hashes - rows * len(bands),
            total_buckets=len(sizes),
            non_singleton_buckets=sum(1 for s in sizes if s > 1),
            avg_bucket_size=(sum(sizes) / len(sizes)) if sizes else 0.0,
            candidate_pairs=num_candidates,
        )

    def as_dict(self) -> Dict[str, float]:
        return {
            "num_bands": float(self.num_bands),
            "rows_per_band": float(self.rows_per_band),
            "unused_rows": float(self.unused_rows),
            "total_buckets": float(self.total_buckets),
            "non_singleton_buckets": float(self.non_singleton_buckets),
            "avg_bucket_size": float(self.avg_bucket_size),
            "candidate_pairs": float(self.candidate_pairs),
        }
