from __future__ import annotations

from typing import Optional


class ModelingError(ValueError):
    """
    Base class for structural failures of a dataset subset.

    These are terminal for the run that raised them: retrying on the same
    rows cannot succeed. `n_rows`, `fold_id` and `stage` identify which
    subset failed.
    """

    def __init__(
        self,
        reason: str,
        *,
        n_rows: Optional[int] = None,
        fold_id: Optional[int] = None,
        stage: Optional[str] = None,
    ) -> None:
        self.reason = reason
        self.n_rows = n_rows
        self.fold_id = fold_id
        self.stage = stage
        super().__init__(self._format())

    def _format(self) -> str:
        context = []
        if self.fold_id is not None:
            context.append(f"fold={self.fold_id}")
        if self.stage is not None:
            context.append(f"stage={self.stage}")
        if self.n_rows is not None:
            context.append(f"n_rows={self.n_rows}")
        if not context:
            return self.reason
        return f"{self.reason} ({', '.join(context)})"

    def for_fold(self, fold_id: int, stage: str) -> "ModelingError":
        """Return a copy of this error, same type, annotated with fold context."""
        return type(self)(
            self.reason,
            n_rows=self.n_rows,
            fold_id=fold_id,
            stage=stage,
        )


class DegenerateInputError(ModelingError):
    """Fewer than two distinct predictor values; the slope is undefined."""


class ZeroVarianceError(ModelingError):
    """All observed values are identical; R² is undefined."""


class InsufficientDataError(ModelingError):
    """Too few rows to build at least two folds of the minimum size."""


__all__ = [
    "ModelingError",
    "DegenerateInputError",
    "ZeroVarianceError",
    "InsufficientDataError",
]
