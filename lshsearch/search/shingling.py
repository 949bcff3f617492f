"""Document ingestion: turn a directory of text files into shingle-id sets.

Every distinct k-character substring (a *shingle*) is given a dense integer id
in first-seen order, so the resulting object mapping satisfies the contiguous
id contract the searchers expect.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

import chardet
from tqdm import tqdm

from .types import ObjectMapping

logger = logging.getLogger(__name__)


# -----------------------------------------------------------
# Shingling
# -----------------------------------------------------------


class Shingler:
    """Maps k-shingles of documents to dense integer ids."""

    def __init__(self, k: int = 5):
        if k <= 0:
            raise ValueError(f"Shingle length must be > 0, got {k}")
        self.k = k
        self._ids: Dict[str, int] = {}

    @property
    def num_shingles(self) -> int:
        return len(self._ids)

    def shingle_text(self, text: str) -> Set[int]:
        """Return the ids of every k-character substring of *text*."""
        k = self.k
        ids = self._ids
        out: Set[int] = set()
        for i in range(len(text) - k + 1):
            shingle = text[i : i + k]  # noqa: E203
            sid = ids.get(shingle)
            if sid is None:
                sid = len(ids)
                ids[shingle] = sid
            out.add(sid)
        return out


# -----------------------------------------------------------
# File helpers
# -----------------------------------------------------------


def detect_encoding(file_path: Path, sample_size: int = 8192) -> str:
    """Detect file encoding using chardet."""
    with open(file_path, "rb") as f:
        raw = f.read(sample_size)
    return chardet.detect(raw).get("encoding") or "utf-8"


def read_document(file_path: Union[str, Path]) -> str:
    """Read *file_path* as one string, every line followed by a single space."""
    file_path = Path(file_path)
    encoding = detect_encoding(file_path)
    with open(file_path, "r", encoding=encoding, errors="replace") as f:
        return "".join(line.rstrip("\r\n") + " " for line in f)


def _document_order(path: Path) -> tuple:
    # numeric file names ("0", "1", ..., "10") sort numerically, the rest by name
    name = path.name
    return (0, int(name), "") if name.isdigit() else (1, 0, name)


def list_documents(directory: Union[str, Path]) -> List[Path]:
    """Return the regular, non-hidden files directly under *directory*."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(directory)
    files = [p for p in directory.iterdir() if p.is_file() and not p.name.startswith(".")]
    return sorted(files, key=_document_order)


# -----------------------------------------------------------
# Corpus
# -----------------------------------------------------------


@dataclass
class DocumentCorpus:
    object_mapping: ObjectMapping
    names: List[str]
    num_shingles: int
    shingle_length: int

    @property
    def num_documents(self) -> int:
        return len(self.object_mapping)

    @classmethod
    def from_texts(cls, texts: Iterable[str], shingle_length: int = 5, names: Optional[List[str]] = None) -> "DocumentCorpus":
        shingler = Shingler(shingle_length)
        mapping: ObjectMapping = {doc_id: shingler.shingle_text(text) for doc_id, text in enumerate(texts)}
        if names is None:
            names = [str(i) for i in range(len(mapping))]
        return cls(mapping, list(names), shingler.num_shingles, shingle_length)

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path],
        max_files: Optional[int] = None,
        shingle_length: int = 5,
        show_progress: bool = False,
    ) -> "DocumentCorpus":
        """Shingle up to *max_files* documents from *directory*; ids follow file order."""
        paths = list_documents(directory)
        if max_files is not None:
            if max_files > len(paths):
                logger.warning("Asked for %d files but %s only holds %d", max_files, directory, len(paths))
            paths = paths[:max_files]

        shingler = Shingler(shingle_length)
        iterator: Iterable[Path] = tqdm(paths, desc="Shingling documents") if show_progress else paths
        mapping: ObjectMapping = {}
        for doc_id, path in enumerate(iterator):
            mapping[doc_id] = shingler.shingle_text(read_document(path))

        logger.info("Shingled %d documents into %d distinct %d-shingles", len(mapping), shingler.num_shingles, shingle_length)
        return cls(mapping, [p.name for p in paths], shingler.num_shingles, shingle_length)
