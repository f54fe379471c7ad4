from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .errors import ZeroVarianceError


@dataclass(frozen=True)
class VarianceDecomposition:
    total_ss: float
    explained_ss: float
    residual_ss: float
    r2: float

    @property
    def explained_ratio(self) -> float:
        """
        explained_ss / total_ss.

        Equal to `r2` only when the predictions minimise residual_ss on
        these same rows (in-sample OLS). Held-out scoring must use `r2`.
        """
        return self.explained_ss / self.total_ss


def decompose(observed: Sequence[float], predicted: Sequence[float]) -> VarianceDecomposition:
    """
    Split the variation of `observed` around its mean.

    r2 is always 1 - residual_ss / total_ss, which stays meaningful out of
    sample (and can go negative when predictions are worse than the mean).
    """
    obs = np.asarray(observed, dtype=float)
    pred = np.asarray(predicted, dtype=float)
    if obs.ndim != 1 or pred.ndim != 1:
        raise ValueError("observed and predicted must be one-dimensional")
    if obs.size != pred.size:
        raise ValueError(
            f"observed and predicted differ in length ({obs.size} != {pred.size})",
        )
    if obs.size == 0:
        raise ValueError("observed and predicted must not be empty")

    mean = obs.mean()
    total_ss = float(np.sum((obs - mean) ** 2))
    if total_ss == 0.0 or np.all(obs == obs[0]):
        raise ZeroVarianceError(
            "observed values are all identical; R² is undefined",
            n_rows=int(obs.size),
        )
    explained_ss = float(np.sum((pred - mean) ** 2))
    residual_ss = float(np.sum((obs - pred) ** 2))

    return VarianceDecomposition(
        total_ss=total_ss,
        explained_ss=explained_ss,
        residual_ss=residual_ss,
        r2=1.0 - residual_ss / total_ss,
    )


__all__ = ["VarianceDecomposition", "decompose"]
