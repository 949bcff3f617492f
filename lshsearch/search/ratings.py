"""MovieLens-style ratings: user like/dislike sets and a rating-prediction harness.

Ratings files hold one ``user::movie::rating[::timestamp]`` record per line
(tab separated files are accepted too). Users and movies are re-indexed
densely in sorted order so the same input always yields the same object
mapping, signature matrix and buckets.

A user's set contains ``2*m`` for every movie ``m`` rated at or above that
user's own average rating, and ``2*m + 1`` for every movie rated below it.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pandas as pd

from .types import ObjectMapping

logger = logging.getLogger(__name__)

DEFAULT_RATING: float = 2.5

_SEPARATOR = r"::|\t"
_COLUMNS = ["user", "movie", "rating"]

Predictor = Callable[[int, int], float]


def read_ratings(path: Union[str, Path]) -> pd.DataFrame:
    """Load a ratings file into a ``user, movie, rating`` frame."""
    df = pd.read_csv(path, sep=_SEPARATOR, engine="python", header=None)
    if df.shape[1] < 3:
        raise ValueError(f"{path}: expected at least 3 fields per line, got {df.shape[1]}")
    df = df.iloc[:, :3]
    df.columns = _COLUMNS
    return df.astype({"user": "int64", "movie": "int64", "rating": "float64"})


class RatingsData:
    """User rating histories converted to like/dislike feature sets."""

    def __init__(self, ratings: pd.DataFrame):
        self.ratings = ratings
        # sorted internal -> true id lists
        self.user_ids: List[int] = sorted(int(u) for u in ratings["user"].unique())
        self.movie_ids: List[int] = sorted(int(m) for m in ratings["movie"].unique())
        self._user_index: Dict[int, int] = {u: i for i, u in enumerate(self.user_ids)}
        self._movie_index: Dict[int, int] = {m: i for i, m in enumerate(self.movie_ids)}

        self.user_averages: Dict[int, float] = {
            int(u): float(avg) for u, avg in ratings.groupby("user")["rating"].mean().items()
        }
        self.movie_averages: Dict[int, float] = {
            int(m): float(avg) for m, avg in ratings.groupby("movie")["rating"].mean().items()
        }
        self.object_mapping: ObjectMapping = self._to_sets()

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RatingsData":
        ratings = read_ratings(path)
        logger.info("Read %d ratings from %s", len(ratings), path)
        return cls(ratings)

    def _to_sets(self) -> ObjectMapping:
        df = self.ratings
        user_avg = df.groupby("user")["rating"].transform("mean")
        dislike = (df["rating"] < user_avg).astype("int64")
        features = df["movie"].map(self._movie_index) * 2 + dislike
        users = df["user"].map(self._user_index)

        mapping: ObjectMapping = {i: set() for i in range(len(self.user_ids))}
        for user, feature in zip(users, features):
            mapping[int(user)].add(int(feature))
        return mapping

    @property
    def num_users(self) -> int:
        return len(self.user_ids)

    @property
    def num_movies(self) -> int:
        return len(self.movie_ids)

    @property
    def num_values(self) -> int:
        """Size of the feature space: a like and a dislike id per movie."""
        return 2 * self.num_movies

    def average_rating(self, user_id: int) -> float:
        """Average rating given by the user with true id *user_id*."""
        return self.user_averages[user_id]

    def movie_average_rating(self, movie_id: int) -> float:
        """Average rating of *movie_id*, or :data:`DEFAULT_RATING` for unseen movies."""
        return self.movie_averages.get(movie_id, DEFAULT_RATING)


# -----------------------------------------------------------
# Evaluation
# -----------------------------------------------------------


def default_predictor(user_id: int, movie_id: int) -> float:
    """Placeholder predictor: always the global default rating."""
    return DEFAULT_RATING


@dataclass
class EvaluationResult:
    count: int = 0
    rmse_baseline: float = 0.0
    rmse_predictor: float = 0.0
    baseline_matches: int = 0

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "rmse_baseline": self.rmse_baseline,
            "rmse_predictor": self.rmse_predictor,
            "baseline_matches": self.baseline_matches,
        }


def evaluate_predictions(
    ratings: RatingsData,
    test_path: Union[str, Path],
    predictor: Optional[Predictor] = None,
    report_every: int = 50,
) -> EvaluationResult:
    """Score *predictor* on a held-out ratings file.

    Compares each predicted rating with the true one and with the movie-average
    baseline, logging the running RMSE of both every *report_every* rows.
    """
    predictor = predictor or default_predictor
    test = read_ratings(test_path)

    sq_baseline = 0.0
    sq_predictor = 0.0
    result = EvaluationResult()
    for row in test.itertuples(index=False):
        baseline = ratings.movie_average_rating(int(row.movie))
        estimate = predictor(int(row.user), int(row.movie))
        sq_baseline += (row.rating - baseline) ** 2
        sq_predictor += (row.rating - estimate) ** 2
        result.count += 1
        if estimate == baseline:
            result.baseline_matches += 1
        if report_every and result.count % report_every == 0:
            logger.info(
                "RMSE (default): %.4f RMSE (recommender): %.4f",
                math.sqrt(sq_baseline / result.count),
                math.sqrt(sq_predictor / result.count),
            )

    if result.count:
        result.rmse_baseline = math.sqrt(sq_baseline / result.count)
        result.rmse_predictor = math.sqrt(sq_predictor / result.count)
    return result
