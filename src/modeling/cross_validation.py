"""
k-fold cross-validation of the log10-response regression.

Per run:

    INIT -> PARTITIONED -> (TRAIN -> PREDICT -> SCORE) x k -> AGGREGATED -> DONE

Each fold refits the model on the rows outside the fold and scores it on
the held-out rows, in log10 space (the space the model is fit in), using
R² = 1 - SSresid / SStot. Any fold failure aborts the whole run: a skipped
fold would bias the mean.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .dataset import Dataset
from .errors import ModelingError
from .folds import DEFAULT_MIN_PER_FOLD, FoldAssignment, partition
from .regression import FittedModel, ResponseTransform, fit
from .variance import decompose


class CrossValidationStage(str, Enum):
    INIT = "init"
    PARTITIONED = "partitioned"
    TRAIN = "train"
    PREDICT = "predict"
    SCORE = "score"
    AGGREGATED = "aggregated"
    DONE = "done"


@dataclass(frozen=True)
class FoldResult:
    fold_id: int
    r2: float
    n_train: int
    n_test: int
    model: FittedModel


@dataclass(frozen=True)
class CrossValidationReport:
    folds: Tuple[FoldResult, ...]
    mean_r2: float
    k: int
    seed: int
    min_per_fold: int
    assignment: FoldAssignment

    @property
    def r2_values(self) -> List[float]:
        return [f.r2 for f in self.folds]

    @property
    def std_r2(self) -> float:
        """Sample standard deviation of the per-fold R² (ddof=1)."""
        return float(np.std(self.r2_values, ddof=1))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "fold": f.fold_id,
                    "n_train": f.n_train,
                    "n_test": f.n_test,
                    "intercept": f.model.intercept,
                    "slope": f.model.slope,
                    "r2": f.r2,
                }
                for f in self.folds
            ]
        )


def _run_fold(dataset: Dataset, assignment: FoldAssignment, fold_id: int) -> FoldResult:
    train = dataset.subset(assignment.complement(fold_id))
    test = dataset.subset(assignment.members(fold_id))

    stage = CrossValidationStage.TRAIN
    try:
        model = fit(train.observations, transform_response=True)

        stage = CrossValidationStage.PREDICT
        predicted = model.predict(test.predictors())

        stage = CrossValidationStage.SCORE
        observed = ResponseTransform.LOG10.apply(test.responses())
        r2 = decompose(observed, predicted).r2
    except ModelingError as exc:
        raise exc.for_fold(fold_id, stage.value) from exc

    return FoldResult(
        fold_id=fold_id,
        r2=r2,
        n_train=len(train),
        n_test=len(test),
        model=model,
    )


def cross_validate(
    dataset: Dataset,
    min_per_fold: int = DEFAULT_MIN_PER_FOLD,
    *,
    seed: int,
    max_workers: Optional[int] = None,
) -> CrossValidationReport:
    """
    Run k-fold cross-validation and return the full report.

    Parameters
    ----------
    dataset:
        Prepared observations (response > 0).
    min_per_fold:
        Minimum expected fold size; k = len(dataset) // min_per_fold.
    seed:
        Seed for the single fold permutation of this run. Same dataset,
        seed and min_per_fold give an identical report.
    max_workers:
        When > 1, folds are scored concurrently. Results are reported in
        ascending fold order either way, and the lowest failing fold is
        the one raised.
    """
    assignment = partition(len(dataset), min_per_fold, seed=seed)
    fold_ids = range(1, assignment.k + 1)

    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            futures = [ex.submit(_run_fold, dataset, assignment, f) for f in fold_ids]
            results = [fut.result() for fut in futures]
    else:
        results = [_run_fold(dataset, assignment, f) for f in fold_ids]

    results.sort(key=lambda r: r.fold_id)
    mean_r2 = float(np.mean([r.r2 for r in results]))

    return CrossValidationReport(
        folds=tuple(results),
        mean_r2=mean_r2,
        k=assignment.k,
        seed=seed,
        min_per_fold=min_per_fold,
        assignment=assignment,
    )


__all__ = [
    "CrossValidationStage",
    "FoldResult",
    "CrossValidationReport",
    "cross_validate",
]
