"""Accuracy of an approximate pair set measured against the exact one."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Set, Tuple

from .types import SimilarPair


@dataclass
class RecallReport:
    true_positives: int
    false_negatives: int
    false_positives: int

    @property
    def recall(self) -> float:
        found = self.true_positives + self.false_negatives
        return self.true_positives / found if found else 1.0

    @property
    def precision(self) -> float:
        returned = self.true_positives + self.false_positives
        return self.true_positives / returned if returned else 1.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "true_positives": self.true_positives,
            "false_negatives": self.false_negatives,
            "false_positives": self.false_positives,
            "recall": round(self.recall, 4),
            "precision": round(self.precision, 4),
        }


def _ids(pairs: Iterable[SimilarPair]) -> Set[Tuple[int, int]]:
    return {p.ids for p in pairs}


def compare_pairs(exact: Iterable[SimilarPair], approximate: Iterable[SimilarPair]) -> RecallReport:
    """Compare *approximate* to the ground truth *exact*, keyed on the id pair."""
    truth = _ids(exact)
    found = _ids(approximate)
    return RecallReport(
        true_positives=len(truth & found),
        false_negatives=len(truth - found),
        false_positives=len(found - truth),
    )
