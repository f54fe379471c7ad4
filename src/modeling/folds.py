"""
Fold partitioning for k-fold cross-validation.

k is derived from the row count so that each fold is expected to hold at
least `min_per_fold` rows: k = n // min_per_fold. Fold ids are laid out
cyclically (1, 2, ..., k, 1, 2, ...) to length n, so fold sizes differ by
at most one, and the sequence is then shuffled with a generator seeded
from the explicit `seed` argument.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

from .errors import InsufficientDataError

DEFAULT_MIN_PER_FOLD = 10


@dataclass(frozen=True)
class FoldAssignment:
    """fold_ids[i] is the fold (1..k) of row i."""

    fold_ids: Tuple[int, ...]
    k: int
    min_per_fold: int
    seed: int

    def __len__(self) -> int:
        return len(self.fold_ids)

    def members(self, fold_id: int) -> List[int]:
        if not 1 <= fold_id <= self.k:
            raise ValueError(f"fold_id must be in [1, {self.k}], got {fold_id}")
        return [i for i, f in enumerate(self.fold_ids) if f == fold_id]

    def complement(self, fold_id: int) -> List[int]:
        if not 1 <= fold_id <= self.k:
            raise ValueError(f"fold_id must be in [1, {self.k}], got {fold_id}")
        return [i for i, f in enumerate(self.fold_ids) if f != fold_id]

    def sizes(self) -> Dict[int, int]:
        counts = Counter(self.fold_ids)
        return {fold_id: counts.get(fold_id, 0) for fold_id in range(1, self.k + 1)}


def fold_count(n: int, min_per_fold: int = DEFAULT_MIN_PER_FOLD) -> int:
    if min_per_fold < 1:
        raise ValueError(f"min_per_fold must be >= 1, got {min_per_fold}")
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    return n // min_per_fold


def partition(
    n: int,
    min_per_fold: int = DEFAULT_MIN_PER_FOLD,
    *,
    seed: int,
) -> FoldAssignment:
    k = fold_count(n, min_per_fold)
    if k < 2:
        raise InsufficientDataError(
            f"{n} rows give k={k} folds of at least {min_per_fold}; need k >= 2",
            n_rows=n,
        )

    cyclic = np.arange(n) % k + 1
    rng = np.random.default_rng(seed)
    shuffled = rng.permutation(cyclic)

    return FoldAssignment(
        fold_ids=tuple(int(f) for f in shuffled),
        k=k,
        min_per_fold=min_per_fold,
        seed=seed,
    )


__all__ = ["DEFAULT_MIN_PER_FOLD", "FoldAssignment", "fold_count", "partition"]
