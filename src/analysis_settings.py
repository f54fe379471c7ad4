"""
Analysis settings resolved from the environment.

Environment variables
---------------------

- HEALTH_PREDICTOR_TABLE / HEALTH_RESPONSE_TABLE
    CSV paths of the two indicator tables.
- HEALTH_PREDICTOR_COLUMN / HEALTH_RESPONSE_COLUMN (optional)
    Value column of a long table when it cannot be inferred.
- HEALTH_PREDICTOR_LABEL / HEALTH_RESPONSE_LABEL (optional)
    Axis and table labels used in the report.
- ANALYSIS_MODE
    "country_mean" (default) or "country_year".
- CV_MIN_PER_FOLD
    Minimum expected fold size (default 10).
- CV_SEED
    Seed of the fold permutation (default 20240101).
- ANALYSIS_MIN_YEAR / ANALYSIS_MAX_YEAR (optional)
    Inclusive year window.
- ANALYSIS_OUTPUT_DIR
    Root directory for prepared data and report artefacts (default "analysis").

A `.env` file in the working directory is loaded first, without
overriding variables already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from env_loader import load_dotenv_if_present

PREDICTOR_TABLE_ENV = "HEALTH_PREDICTOR_TABLE"
RESPONSE_TABLE_ENV = "HEALTH_RESPONSE_TABLE"
PREDICTOR_COLUMN_ENV = "HEALTH_PREDICTOR_COLUMN"
RESPONSE_COLUMN_ENV = "HEALTH_RESPONSE_COLUMN"
PREDICTOR_LABEL_ENV = "HEALTH_PREDICTOR_LABEL"
RESPONSE_LABEL_ENV = "HEALTH_RESPONSE_LABEL"
ANALYSIS_MODE_ENV = "ANALYSIS_MODE"
MIN_PER_FOLD_ENV = "CV_MIN_PER_FOLD"
SEED_ENV = "CV_SEED"
MIN_YEAR_ENV = "ANALYSIS_MIN_YEAR"
MAX_YEAR_ENV = "ANALYSIS_MAX_YEAR"
OUTPUT_DIR_ENV = "ANALYSIS_OUTPUT_DIR"

DEFAULT_MODE = "country_mean"
DEFAULT_MIN_PER_FOLD = 10
DEFAULT_SEED = 20240101
DEFAULT_OUTPUT_DIR = "analysis"
DEFAULT_PREDICTOR_LABEL = "Predictor"
DEFAULT_RESPONSE_LABEL = "Response"


@dataclass(frozen=True)
class AnalysisSettings:
    predictor_table: Optional[str]
    response_table: Optional[str]
    predictor_column: Optional[str] = None
    response_column: Optional[str] = None
    predictor_label: str = DEFAULT_PREDICTOR_LABEL
    response_label: str = DEFAULT_RESPONSE_LABEL
    mode: str = DEFAULT_MODE
    min_per_fold: int = DEFAULT_MIN_PER_FOLD
    seed: int = DEFAULT_SEED
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    output_dir: str = DEFAULT_OUTPUT_DIR


def _get_str(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_int(name: str, default: Optional[int]) -> Optional[int]:
    value = _get_str(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise RuntimeError(
            f"Environment variable {name!r} must be an integer, got {value!r}",
        ) from exc


def load_settings(*, dotenv_path: Optional[str] = None) -> AnalysisSettings:
    load_dotenv_if_present(dotenv_path)

    mode = _get_str(ANALYSIS_MODE_ENV) or DEFAULT_MODE
    if mode not in ("country_mean", "country_year"):
        raise RuntimeError(
            f"Environment variable {ANALYSIS_MODE_ENV!r} must be 'country_mean' or "
            f"'country_year', got {mode!r}",
        )

    return AnalysisSettings(
        predictor_table=_get_str(PREDICTOR_TABLE_ENV),
        response_table=_get_str(RESPONSE_TABLE_ENV),
        predictor_column=_get_str(PREDICTOR_COLUMN_ENV),
        response_column=_get_str(RESPONSE_COLUMN_ENV),
        predictor_label=_get_str(PREDICTOR_LABEL_ENV) or DEFAULT_PREDICTOR_LABEL,
        response_label=_get_str(RESPONSE_LABEL_ENV) or DEFAULT_RESPONSE_LABEL,
        mode=mode,
        min_per_fold=_get_int(MIN_PER_FOLD_ENV, DEFAULT_MIN_PER_FOLD),
        seed=_get_int(SEED_ENV, DEFAULT_SEED),
        min_year=_get_int(MIN_YEAR_ENV, None),
        max_year=_get_int(MAX_YEAR_ENV, None),
        output_dir=_get_str(OUTPUT_DIR_ENV) or DEFAULT_OUTPUT_DIR,
    )


__all__ = ["AnalysisSettings", "load_settings"]
