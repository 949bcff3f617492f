"""Universal hash family ``h(x) = ((a*x + b) mod p) mod m`` used to simulate permutations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from .types import ConfigurationError

# a*x + b must fit in int64 for the vectorised path: keep p below 2**31.
MAX_PRIME = (1 << 31) - 1

# Seed used when none is given, so unseeded runs still repeat exactly.
DEFAULT_SEED = 0

# -----------------------------------------------------------
# Primes
# -----------------------------------------------------------


def _is_prime(n: int) -> bool:
    if n < 2:
        return False
    if n < 4:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def least_prime_at_least(n: int) -> int:
    """Return the smallest prime ``>= n`` (``n`` itself when already prime)."""
    candidate = max(2, n)
    while not _is_prime(candidate):
        candidate += 1
    return candidate


# -----------------------------------------------------------
# Hash family
# -----------------------------------------------------------


@dataclass(frozen=True, eq=False)
class UniversalHashFamily:
    """``num_hashes`` functions over the feature-id space ``[0, num_values)``.

    Attributes
    ----------
    prime : int
        Smallest prime ``>= num_values``.
    num_values : int
        Size of the feature-id space; every hash value lies in ``[0, num_values)``.
    a, b : np.ndarray
        int64 coefficient vectors of length ``num_hashes``; ``a`` never holds 0.
    """

    prime: int
    num_values: int
    a: np.ndarray
    b: np.ndarray

    @classmethod
    def build(
        cls,
        num_hashes: int,
        num_values: int,
        seed: Optional[int] = DEFAULT_SEED,
        rng: Optional[np.random.Generator] = None,
    ) -> "UniversalHashFamily":
        """Draw a reproducible family of *num_hashes* functions.

        Coefficients are drawn per function, interleaved: first ``a`` from
        ``[0, prime)`` (re-drawn while it is 0), then ``b`` from ``[0, prime)``.
        The same *seed* therefore always yields the same family; ``None`` means
        :data:`DEFAULT_SEED`.
        """
        if num_hashes <= 0:
            raise ConfigurationError(f"num_hashes must be > 0, got {num_hashes}")
        if num_values <= 0:
            raise ConfigurationError(f"num_values must be > 0, got {num_values}")
        prime = least_prime_at_least(num_values)
        if prime > MAX_PRIME:
            raise ConfigurationError(f"num_values={num_values} is too large for 64-bit hashing")
        if rng is None:
            rng = np.random.default_rng(DEFAULT_SEED if seed is None else seed)

        a = np.empty(num_hashes, dtype=np.int64)
        b = np.empty(num_hashes, dtype=np.int64)
        for i in range(num_hashes):
            coef = 0
            while coef == 0:
                coef = int(rng.integers(0, prime))
            a[i] = coef
            b[i] = int(rng.integers(0, prime))
        return cls(prime=prime, num_values=num_values, a=a, b=b)

    @property
    def num_hashes(self) -> int:
        return len(self.a)

    def apply(self, index: int, x: int) -> int:
        """Evaluate hash function *index* on feature id *x*."""
        return ((int(self.a[index]) * x + int(self.b[index])) % self.prime) % self.num_values

    def apply_all(self, xs: Iterable[int]) -> np.ndarray:
        """Evaluate every function on every value; returns ``(num_hashes, len(xs))``."""
        values = np.fromiter(xs, dtype=np.int64)
        return ((self.a[:, None] * values[None, :] + self.b[:, None]) % self.prime) % self.num_values
