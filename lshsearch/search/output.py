"""Formatting and persistence of search results."""
from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import psutil

from .types import SimilarPair


def ranked(pairs: Iterable[SimilarPair]) -> List[SimilarPair]:
    """Pairs ordered by descending similarity, ties broken by ids."""
    return sorted(pairs, key=lambda p: (-p.similarity, p.id1, p.id2))


def format_pairs(pairs: Iterable[SimilarPair]) -> List[str]:
    """One ``id1,id2,similarity`` line per pair, most similar first."""
    return [f"{p.id1},{p.id2},{p.similarity}" for p in ranked(pairs)]


def pair_record(pair: SimilarPair, names: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    record: Dict[str, Any] = {"a": pair.id1, "b": pair.id2, "similarity": round(pair.similarity, 6)}
    if names is not None:
        record["a_name"] = names[pair.id1]
        record["b_name"] = names[pair.id2]
    return record


def write_pairs_jsonl(
    pairs: Iterable[SimilarPair],
    output_path: Union[str, Path],
    names: Optional[Sequence[str]] = None,
) -> int:
    """Write one JSON record per pair to *output_path*; returns the number written."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with output_path.open("w", encoding="utf-8") as f:
        for pair in ranked(pairs):
            json.dump(pair_record(pair, names), f)
            f.write("\n")
            count += 1
    return count


class SearchStats:
    """Wall-clock and memory accounting for one search run."""

    def __init__(self):
        self.start_time = time.time()
        self.end_time: Optional[float] = None
        self.counts: Dict[str, float] = {}

    def stop(self) -> "SearchStats":
        self.end_time = time.time()
        return self

    @property
    def elapsed(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    def as_dict(self) -> Dict[str, Any]:
        process = psutil.Process()
        return {
            "seconds": round(self.elapsed, 3),
            "memory_mb": round(process.memory_info().rss / 1024 / 1024, 1),
            **self.counts,
        }
