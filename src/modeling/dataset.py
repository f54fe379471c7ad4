"""
Prepared dataset consumed by the modeling layer.

One `Observation` per country (averaged over years) or per country-year,
depending on the analysis mode chosen upstream. A `Dataset` is immutable:
subsets are new `Dataset` instances that share the same observations.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class Observation:
    country: str
    predictor: float
    response: float
    year: Optional[int] = None


@dataclass(frozen=True)
class Dataset:
    """
    Ordered, validated sequence of observations.

    Invariants:
    - predictor and response are finite numbers
    - response is strictly positive (the log10 transform needs it)
    - with `unique_countries=True`, no country appears twice
    """

    observations: Tuple[Observation, ...]
    unique_countries: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "observations", tuple(self.observations))
        seen = set()
        for idx, obs in enumerate(self.observations):
            if not (math.isfinite(obs.predictor) and math.isfinite(obs.response)):
                raise ValueError(
                    f"Observation {idx} ({obs.country!r}) has a missing or non-finite value",
                )
            if obs.response <= 0:
                raise ValueError(
                    f"Observation {idx} ({obs.country!r}) has non-positive response {obs.response!r}",
                )
            if self.unique_countries:
                if obs.country in seen:
                    raise ValueError(f"Duplicate country {obs.country!r} in aggregated dataset")
                seen.add(obs.country)

    def __len__(self) -> int:
        return len(self.observations)

    def __iter__(self):
        return iter(self.observations)

    def __getitem__(self, idx: int) -> Observation:
        return self.observations[idx]

    def predictors(self) -> np.ndarray:
        return np.array([obs.predictor for obs in self.observations], dtype=float)

    def responses(self) -> np.ndarray:
        return np.array([obs.response for obs in self.observations], dtype=float)

    def countries(self) -> List[str]:
        return [obs.country for obs in self.observations]

    def subset(self, indices: Iterable[int]) -> "Dataset":
        return Dataset(
            tuple(self.observations[i] for i in indices),
            unique_countries=self.unique_countries,
        )

    @classmethod
    def from_records(
        cls,
        rows: Sequence[Tuple[str, float, float]],
        *,
        unique_countries: bool = False,
    ) -> "Dataset":
        return cls(
            tuple(Observation(str(c), float(x), float(y)) for c, x, y in rows),
            unique_countries=unique_countries,
        )

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        *,
        country_col: str = "country_code",
        predictor_col: str = "predictor",
        response_col: str = "response",
        year_col: Optional[str] = None,
        unique_countries: bool = False,
    ) -> "Dataset":
        """
        Build a dataset from a cleaned DataFrame, preserving row order.

        Missing columns raise ValueError; missing values are rejected by
        the Dataset invariants rather than silently dropped here.
        """
        required = [country_col, predictor_col, response_col]
        if year_col is not None:
            required.append(year_col)
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise ValueError(f"Prepared frame is missing columns: {missing}")

        years = df[year_col] if year_col is not None else [None] * len(df)
        observations: List[Observation] = []
        for country, x, y, year in zip(df[country_col], df[predictor_col], df[response_col], years):
            observations.append(
                Observation(
                    country=str(country),
                    predictor=float(x),
                    response=float(y),
                    year=int(year) if year is not None and pd.notna(year) else None,
                )
            )
        return cls(tuple(observations), unique_countries=unique_countries)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "country": self.countries(),
                "year": pd.array([obs.year for obs in self.observations], dtype="Int64"),
                "predictor": self.predictors(),
                "response": self.responses(),
            }
        )


__all__ = ["Observation", "Dataset"]
