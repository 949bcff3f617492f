"""YAML run configuration.

Example ``search.yml``::

    data_dir: articles
    method: lsh
    threshold: 0.5
    num_hashes: 100
    num_bands: 20
    seed: 42
    shingle_length: 5
    max_files: 100
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # type: ignore

from .base import SEARCH_METHODS
from .hashing import DEFAULT_SEED
from .types import ConfigurationError


@dataclass
class SearchConfig:
    data_dir: Optional[str] = None
    method: str = "lsh"
    threshold: float = 0.5
    num_hashes: Optional[int] = 100
    num_bands: Optional[int] = 20
    seed: Optional[int] = DEFAULT_SEED
    shingle_length: int = 5
    max_files: Optional[int] = None
    processes: int = 1
    strict_bands: bool = False
    output: Optional[str] = None

    def validate(self) -> "SearchConfig":
        if self.method not in SEARCH_METHODS:
            raise ConfigurationError(f"method must be one of {SEARCH_METHODS}, got {self.method!r}")
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(f"threshold must lie in [0, 1], got {self.threshold}")
        if self.shingle_length <= 0:
            raise ConfigurationError(f"shingle_length must be > 0, got {self.shingle_length}")
        if self.max_files is not None and self.max_files <= 0:
            raise ConfigurationError(f"max_files must be > 0, got {self.max_files}")
        if self.processes < 1:
            raise ConfigurationError(f"processes must be >= 1, got {self.processes}")
        if self.method == "lsh":
            if self.num_hashes is None or self.num_bands is None:
                raise ConfigurationError("Both num_hashes and num_bands are mandatory for the LSH method")
            if self.num_hashes <= 0:
                raise ConfigurationError(f"num_hashes must be > 0, got {self.num_hashes}")
            if self.num_bands <= 0 or self.num_bands > self.num_hashes:
                raise ConfigurationError(
                    f"num_bands must lie in [1, num_hashes={self.num_hashes}], got {self.num_bands}"
                )
        return self

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, Path]) -> SearchConfig:
    """Read a :class:`SearchConfig` from YAML; missing keys keep their defaults."""
    path = Path(path)
    with path.open() as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")

    known = {f.name for f in fields(SearchConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"{path}: unknown keys {', '.join(unknown)}")

    cfg = SearchConfig(**raw)
    if cfg.data_dir is not None:
        # relative data paths are resolved against the config file
        cfg.data_dir = str((path.parent / Path(cfg.data_dir).expanduser()).resolve())
    return cfg.validate()
