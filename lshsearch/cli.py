"""lshsearch command-line interface.

Usage
-----
$ lshsearch docs articles/ --threshold 0.5 --method bf --max-files 100 --shingle-length 5
$ lshsearch docs articles/ --threshold 0.5 --method lsh --num-hashes 100 --num-bands 20
$ lshsearch compare articles/ --threshold 0.5 --num-hashes 100 --num-bands 20
$ lshsearch movies r1.train r1.test --method lsh --num-hashes 100 --num-bands 20 --threshold 0.1
$ lshsearch run search.yml

The *docs* command prints every pair of documents above the threshold as
``id1,id2,similarity`` lines, most similar first.

The *compare* command runs both searchers on the same corpus and reports how
many of the exact pairs LSH recovered.

The *movies* command builds the user searcher from a training ratings file and
scores rating predictions on a test file.

The *run* command executes *docs* from a YAML configuration file.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .search.base import SEARCH_METHODS, SimilaritySearcher, create_searcher
from .search.config import SearchConfig, load_config
from .search.evaluation import compare_pairs
from .search.hashing import DEFAULT_SEED
from .search.lsh import LshSearcher
from .search.output import SearchStats, format_pairs, write_pairs_jsonl
from .search.ratings import RatingsData, evaluate_predictions
from .search.shingling import DocumentCorpus
from .search.types import ConfigurationError

logger = logging.getLogger("lshsearch")

# -----------------------------------------------------------
# Helpers
# -----------------------------------------------------------


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if getattr(args, "quiet", False):
        level = logging.WARNING
    elif getattr(args, "verbose", False):
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def _config_from_args(args: argparse.Namespace) -> SearchConfig:
    return SearchConfig(
        data_dir=str(args.data_dir) if getattr(args, "data_dir", None) else None,
        method=args.method,
        threshold=args.threshold,
        num_hashes=args.num_hashes,
        num_bands=args.num_bands,
        seed=args.seed,
        shingle_length=getattr(args, "shingle_length", 5),
        max_files=getattr(args, "max_files", None),
        processes=args.processes,
        strict_bands=args.strict_bands,
        output=str(args.output) if getattr(args, "output", None) else None,
    ).validate()


def _build_searcher(cfg: SearchConfig, mapping, num_values: int, method: Optional[str] = None) -> SimilaritySearcher:
    return create_searcher(
        method or cfg.method,
        mapping,
        num_values=num_values,
        num_hashes=cfg.num_hashes,
        num_bands=cfg.num_bands,
        seed=cfg.seed,
        processes=cfg.processes,
        strict=cfg.strict_bands,
    )


def _load_corpus(cfg: SearchConfig, show_progress: bool) -> DocumentCorpus:
    if cfg.data_dir is None:
        raise ConfigurationError("A document directory (data_dir) is required")
    return DocumentCorpus.from_directory(
        cfg.data_dir,
        max_files=cfg.max_files,
        shingle_length=cfg.shingle_length,
        show_progress=show_progress,
    )


def _print_summary(stats: SearchStats) -> None:
    print(json.dumps(stats.stop().as_dict()), file=sys.stderr)


# -----------------------------------------------------------
# Commands
# -----------------------------------------------------------


def _search_documents(cfg: SearchConfig, quiet: bool = False) -> None:
    logger.debug("Search config: %s", cfg.as_dict())
    stats = SearchStats()
    corpus = _load_corpus(cfg, show_progress=not quiet)
    searcher = _build_searcher(cfg, corpus.object_mapping, max(corpus.num_shingles, 1))
    pairs = searcher.similar_pairs_above_threshold(cfg.threshold)

    if cfg.output:
        written = write_pairs_jsonl(pairs, cfg.output, names=corpus.names)
        logger.info("Wrote %d pairs to %s", written, cfg.output)
    else:
        for line in format_pairs(pairs):
            print(line)

    stats.counts.update(documents=corpus.num_documents, shingles=corpus.num_shingles, pairs=len(pairs))
    if isinstance(searcher, LshSearcher):
        stats.counts["candidate_pairs"] = len(searcher.candidate_pairs())
    if not quiet:
        _print_summary(stats)


def _cmd_docs(args: argparse.Namespace) -> None:
    """Find similar documents in a directory."""
    _search_documents(_config_from_args(args), quiet=args.quiet)


def _cmd_run(args: argparse.Namespace) -> None:
    """Run the document search described by a YAML file."""
    cfg = load_config(args.config.resolve())
    _search_documents(cfg, quiet=args.quiet)


def _cmd_compare(args: argparse.Namespace) -> None:
    """Compare LSH against exact search on the same corpus."""
    cfg = _config_from_args(args)
    corpus = _load_corpus(cfg, show_progress=not args.quiet)
    num_values = max(corpus.num_shingles, 1)

    exact_stats = SearchStats()
    exact = _build_searcher(cfg, corpus.object_mapping, num_values, method="bf").similar_pairs_above_threshold(
        cfg.threshold
    )
    exact_stats.stop()

    lsh_stats = SearchStats()
    lsh = _build_searcher(cfg, corpus.object_mapping, num_values, method="lsh")
    approximate = lsh.similar_pairs_above_threshold(cfg.threshold)
    lsh_stats.stop()

    report = compare_pairs(exact, approximate)
    summary = {
        "documents": corpus.num_documents,
        "threshold": cfg.threshold,
        "exact_pairs": len(exact),
        "lsh_pairs": len(approximate),
        "exact_seconds": round(exact_stats.elapsed, 3),
        "lsh_seconds": round(lsh_stats.elapsed, 3),
        **report.as_dict(),
        "banding": lsh.stats().as_dict(),
    }
    print(json.dumps(summary, indent=2))


def _cmd_movies(args: argparse.Namespace) -> None:
    """Build the user searcher from training ratings and evaluate predictions."""
    cfg = _config_from_args(args)
    stats = SearchStats()
    ratings = RatingsData.from_file(args.training_file)
    # The predictor is the DEFAULT_RATING stub, so the searcher is built only to
    # report the cost and bucket layout of indexing the user profiles.
    searcher = _build_searcher(cfg, ratings.object_mapping, max(ratings.num_values, 1))
    logger.info("Built %s searcher over %d users", searcher.name, ratings.num_users)
    if isinstance(searcher, LshSearcher):
        stats.counts.update(searcher.stats().as_dict())

    result = evaluate_predictions(ratings, args.test_file)
    print(f"RMSE (default): {result.rmse_baseline} RMSE (recommender): {result.rmse_predictor}")
    stats.counts.update(users=ratings.num_users, movies=ratings.num_movies, **result.as_dict())
    if not args.quiet:
        _print_summary(stats)


# -----------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-q", "--quiet", action="store_true", help="Only print results and warnings")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def _add_search_args(p: argparse.ArgumentParser, default_method: str = "lsh") -> None:
    p.add_argument("--method", choices=SEARCH_METHODS, default=default_method,
                   help="bf (exact brute force) or lsh (MinHash + LSH)")
    p.add_argument("--threshold", type=float, default=0.5,
                   help="Report pairs with similarity strictly above this (default: 0.5)")
    p.add_argument("--num-hashes", type=int, default=100, help="Signature length (default: 100)")
    p.add_argument("--num-bands", type=int, default=20, help="Number of LSH bands (default: 20)")
    p.add_argument("--seed", type=int, default=DEFAULT_SEED,
                   help=f"Seed for the hash family (default: {DEFAULT_SEED})")
    p.add_argument("--processes", type=int, default=1,
                   help="Worker processes for candidate confirmation (default: 1)")
    p.add_argument("--strict-bands", action="store_true",
                   help="Reject num-hashes that num-bands does not divide")


def _add_corpus_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("data_dir", type=Path, help="Directory of documents")
    p.add_argument("--max-files", type=int, default=None, help="Read at most this many documents")
    p.add_argument("--shingle-length", type=int, default=5, help="Characters per shingle (default: 5)")


def main(argv: List[str] | None = None) -> None:  # noqa: D401 – simple
    parser = argparse.ArgumentParser(
        prog="lshsearch",
        description="Find similar objects with exact search or MinHash + LSH",
    )
    sub = parser.add_subparsers(required=True, dest="cmd")

    # docs
    p_docs = sub.add_parser("docs", help="Find similar documents in a directory")
    _add_corpus_args(p_docs)
    _add_search_args(p_docs)
    p_docs.add_argument("-o", "--output", type=Path, help="Write pairs as JSONL instead of printing")
    _add_common_args(p_docs)
    p_docs.set_defaults(func=_cmd_docs)

    # compare
    p_compare = sub.add_parser("compare", help="Measure LSH recall against brute force")
    _add_corpus_args(p_compare)
    _add_search_args(p_compare)
    _add_common_args(p_compare)
    p_compare.set_defaults(func=_cmd_compare)

    # movies
    p_movies = sub.add_parser("movies", help="Evaluate rating predictions on MovieLens-style data")
    p_movies.add_argument("training_file", type=Path, help="Ratings used to build user profiles")
    p_movies.add_argument("test_file", type=Path, help="Held-out ratings to predict")
    _add_search_args(p_movies)
    _add_common_args(p_movies)
    p_movies.set_defaults(func=_cmd_movies)

    # run
    p_run = sub.add_parser("run", help="Run a document search from a YAML configuration file")
    p_run.add_argument("config", type=Path, help="Path to YAML configuration file")
    _add_common_args(p_run)
    p_run.set_defaults(func=_cmd_run)

    args = parser.parse_args(argv)
    _configure_logging(args)
    try:
        args.func(args)
    except (ConfigurationError, FileNotFoundError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":  # pragma: no cover
    main()
