#!/usr/bin/env python3
"""
End-to-end tests
================

Covers the collaborators around the search engine:
- document shingling from a directory
- ratings files to like/dislike sets and prediction scoring
- YAML configuration
- the command-line interface
"""

import contextlib
import io
import json
import shutil
import tempfile
import unittest
from pathlib import Path

from lshsearch.cli import main
from lshsearch.search import DEFAULT_SEED, ConfigurationError, SimilarPair
from lshsearch.search.config import SearchConfig, load_config
from lshsearch.search.evaluation import compare_pairs
from lshsearch.search.output import format_pairs, write_pairs_jsonl
from lshsearch.search.ratings import DEFAULT_RATING, RatingsData, evaluate_predictions
from lshsearch.search.shingling import DocumentCorpus, Shingler, list_documents

DOCS = {
    "0": "the quick brown fox jumps over the lazy dog",
    "1": "the quick brown fox jumps over the lazy dog",
    "2": "completely unrelated words sit here instead",
    "10": "lorem ipsum dolor sit amet consectetur",
}


class TestShingling(unittest.TestCase):
    """Test document ingestion."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        for name, text in DOCS.items():
            (self.test_dir / name).write_text(text + "\n", encoding="utf-8")

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_shingler_dense_ids(self):
        shingler = Shingler(2)
        self.assertEqual(shingler.shingle_text("abcab"), {0, 1, 2})
        self.assertEqual(shingler.shingle_text("ca"), {2})
        self.assertEqual(shingler.shingle_text("a"), set())
        self.assertEqual(shingler.num_shingles, 3)

    def test_numeric_file_order(self):
        names = [p.name for p in list_documents(self.test_dir)]
        self.assertEqual(names, ["0", "1", "2", "10"])

    def test_corpus_from_directory(self):
        corpus = DocumentCorpus.from_directory(self.test_dir, max_files=3, shingle_length=5)
        self.assertEqual(corpus.num_documents, 3)
        self.assertEqual(corpus.names, ["0", "1", "2"])
        self.assertEqual(corpus.object_mapping[0], corpus.object_mapping[1])
        all_ids = set().union(*corpus.object_mapping.values())
        self.assertEqual(all_ids, set(range(corpus.num_shingles)))

    def test_missing_directory(self):
        with self.assertRaises(FileNotFoundError):
            DocumentCorpus.from_directory(self.test_dir / "nope")


class TestRatings(unittest.TestCase):
    """Test the ratings collaborator and evaluation loop."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.train = self.test_dir / "r.train"
        self.train.write_text("1::10::5::100\n1::20::1::101\n2::10::4::102\n2::30::4::103\n")
        self.test = self.test_dir / "r.test"
        self.test.write_text("1\t30\t3\t104\n2\t20\t2\t105\n")

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_like_dislike_sets(self):
        data = RatingsData.from_file(self.train)
        self.assertEqual(data.num_users, 2)
        self.assertEqual(data.num_movies, 3)
        self.assertEqual(data.num_values, 6)
        # user 1 averages 3.0: likes movie 10, dislikes movie 20
        self.assertEqual(data.object_mapping[0], {0, 3})
        # user 2 averages 4.0: likes movies 10 and 30
        self.assertEqual(data.object_mapping[1], {0, 4})
        self.assertEqual(data.average_rating(1), 3.0)

    def test_movie_average_fallback(self):
        data = RatingsData.from_file(self.train)
        self.assertEqual(data.movie_average_rating(10), 4.5)
        self.assertEqual(data.movie_average_rating(999), DEFAULT_RATING)

    def test_evaluate_predictions(self):
        data = RatingsData.from_file(self.train)
        result = evaluate_predictions(data, self.test)
        self.assertEqual(result.count, 2)
        self.assertAlmostEqual(result.rmse_baseline, 1.0)
        self.assertAlmostEqual(result.rmse_predictor, 0.5)


class TestOutputAndConfig(unittest.TestCase):
    """Test result formatting and YAML configuration."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_format_pairs_ranked(self):
        pairs = {SimilarPair(0, 1, 0.5), SimilarPair(2, 3, 0.9)}
        self.assertEqual(format_pairs(pairs), ["2,3,0.9", "0,1,0.5"])

    def test_write_jsonl(self):
        out = self.test_dir / "out" / "pairs.jsonl"
        count = write_pairs_jsonl({SimilarPair(1, 0, 0.75)}, out, names=["a.txt", "b.txt"])
        self.assertEqual(count, 1)
        record = json.loads(out.read_text().strip())
        self.assertEqual(record, {"a": 0, "b": 1, "similarity": 0.75, "a_name": "a.txt", "b_name": "b.txt"})

    def test_compare_pairs(self):
        exact = {SimilarPair(0, 1, 0.5), SimilarPair(2, 3, 0.9)}
        report = compare_pairs(exact, {SimilarPair(2, 3, 0.9)})
        self.assertEqual(report.true_positives, 1)
        self.assertEqual(report.false_negatives, 1)
        self.assertEqual(report.false_positives, 0)
        self.assertEqual(report.recall, 0.5)
        self.assertEqual(report.precision, 1.0)

    def test_load_config(self):
        cfg_path = self.test_dir / "search.yml"
        cfg_path.write_text("data_dir: docs\nmethod: lsh\nthreshold: 0.4\nnum_hashes: 40\nnum_bands: 10\nseed: 3\n")
        cfg = load_config(cfg_path)
        self.assertEqual(cfg.num_bands, 10)
        self.assertEqual(cfg.shingle_length, 5)
        self.assertEqual(Path(cfg.data_dir), (self.test_dir / "docs").resolve())

    def test_default_seed_is_fixed(self):
        cfg = SearchConfig()
        self.assertEqual(cfg.seed, DEFAULT_SEED)
        self.assertEqual(cfg.as_dict()["seed"], DEFAULT_SEED)

    def test_config_rejects_unknown_and_invalid(self):
        cfg_path = self.test_dir / "bad.yml"
        cfg_path.write_text("num_hashs: 40\n")
        with self.assertRaises(ConfigurationError):
            load_config(cfg_path)
        with self.assertRaises(ConfigurationError):
            SearchConfig(num_hashes=10, num_bands=20).validate()
        with self.assertRaises(ConfigurationError):
            SearchConfig(method="bf", threshold=1.5).validate()


class TestCli(unittest.TestCase):
    """Test the command-line entrypoint."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.docs = self.test_dir / "docs"
        self.docs.mkdir()
        for name, text in DOCS.items():
            (self.docs / name).write_text(text + "\n", encoding="utf-8")

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def _run(self, argv):
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            main(argv)
        return buf.getvalue()

    def test_docs_brute_force(self):
        out = self._run(["docs", str(self.docs), "--method", "bf", "--threshold", "0.5", "-q"])
        self.assertEqual(out.splitlines(), ["0,1,1.0"])

    def test_docs_lsh(self):
        out = self._run([
            "docs", str(self.docs), "--method", "lsh", "--threshold", "0.5",
            "--num-hashes", "20", "--num-bands", "5", "--seed", "1", "-q",
        ])
        self.assertEqual(out.splitlines(), ["0,1,1.0"])

    def test_compare(self):
        out = self._run(["compare", str(self.docs), "--num-hashes", "20", "--num-bands", "5", "--seed", "1", "-q"])
        summary = json.loads(out)
        self.assertEqual(summary["exact_pairs"], 1)
        self.assertEqual(summary["recall"], 1.0)
        self.assertEqual(summary["false_positives"], 0)

    def test_run_from_config(self):
        out_path = self.test_dir / "pairs.jsonl"
        cfg = self.test_dir / "search.yml"
        cfg.write_text(f"data_dir: docs\nmethod: bf\nthreshold: 0.5\noutput: {out_path}\n")
        self._run(["run", str(cfg), "-q"])
        records = [json.loads(line) for line in out_path.read_text().splitlines()]
        self.assertEqual([(r["a_name"], r["b_name"]) for r in records], [("0", "1")])

    def test_unseeded_lsh_runs_repeat(self):
        argv = ["docs", str(self.docs), "--method", "lsh", "--threshold", "0.0",
                "--num-hashes", "12", "--num-bands", "6", "-q"]
        self.assertEqual(self._run(argv), self._run(argv))

    def test_movies_reports_rmse_and_summary(self):
        train = self.test_dir / "r.train"
        train.write_text("1::10::5\n1::20::1\n2::10::4\n2::30::4\n")
        test = self.test_dir / "r.test"
        test.write_text("1::30::3\n2::20::2\n")
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            out = self._run(["movies", str(train), str(test), "--num-hashes", "10", "--num-bands", "5"])
        self.assertEqual(out.strip(), "RMSE (default): 1.0 RMSE (recommender): 0.5")
        summary = json.loads(err.getvalue().strip().splitlines()[-1])
        self.assertEqual(summary["count"], 2)
        self.assertEqual(summary["users"], 2)
        self.assertEqual(summary["num_bands"], 5.0)

    def test_bad_bands_exit_code(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["docs", str(self.docs), "--num-hashes", "10", "--num-bands", "20", "-q"])
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main(verbosity=2)
