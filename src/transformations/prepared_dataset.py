"""
Prepared dataset: predictor x response by country (or country-year).

Joins two indicator tables in the long schema produced by
`indicator_table.load_indicator_table`:

- Join key: (country_key, year), where country_key is the upper-cased
  ISO3 code when both tables have one, else the normalized name.
- Inner join: only country-years where both indicators are observed.
- Optional year window [min_year, max_year].

Two analysis modes:

    country_mean  - one row per country, both indicators averaged over
                    the years where they were jointly observed
    country_year  - one row per country-year

Rows with a non-positive response are dropped last, since the response
is modelled on a log10 scale.

Output columns:
    country_key   - string (join key)
    country_code  - string
    country_name  - string
    country       - string (ISO3 code, or the country name when joined by name)
    year          - Int64 (missing in country_mean mode)
    n_years       - int   (years averaged; 1 in country_year mode)
    predictor     - float
    response      - float

Persisted through a StorageAdapter as:

    processed/prepared_dataset/<mode>.parquet
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from adapters import LocalMetadataAdapter, LocalStorageAdapter, MetadataAdapter, StorageAdapter
from metadata import DATASET_PREPARE_SCOPE, STATUS_FAILED, STATUS_SUCCESS
from modeling import Dataset
from .country_mapping import (
    COUNTRY_KEY_COLUMN,
    JOIN_BY_CODE,
    attach_country_key,
    choose_join_key,
)
from .indicator_table import load_indicator_table

PREPARED_BASE_PREFIX = "processed/prepared_dataset"

PREPARED_COLUMNS = [
    "country_key",
    "country_code",
    "country_name",
    "country",
    "year",
    "n_years",
    "predictor",
    "response",
]


class AnalysisMode(str, Enum):
    COUNTRY_MEAN = "country_mean"
    COUNTRY_YEAR = "country_year"


@dataclass(frozen=True)
class PreparedDataset:
    mode: AnalysisMode
    frame: pd.DataFrame
    dataset: Dataset
    location: Optional[str] = None


def _empty_prepared_frame() -> pd.DataFrame:
    return pd.DataFrame(columns=PREPARED_COLUMNS)


def _restrict_years(
    df: pd.DataFrame,
    min_year: Optional[int],
    max_year: Optional[int],
) -> pd.DataFrame:
    if min_year is not None:
        df = df[df["year"] >= min_year]
    if max_year is not None:
        df = df[df["year"] <= max_year]
    return df


def build_prepared_frame(
    predictor_df: pd.DataFrame,
    response_df: pd.DataFrame,
    *,
    mode: AnalysisMode | str = AnalysisMode.COUNTRY_MEAN,
    min_year: Optional[int] = None,
    max_year: Optional[int] = None,
) -> pd.DataFrame:
    """
    Join, clean and aggregate the two indicator tables.
    """
    mode = AnalysisMode(mode)
    if min_year is not None and max_year is not None and min_year > max_year:
        raise ValueError(f"min_year={min_year} is after max_year={max_year}")

    if predictor_df.empty or response_df.empty:
        return _empty_prepared_frame()

    join_by = choose_join_key(predictor_df, response_df)
    pred = attach_country_key(predictor_df, by=join_by)
    resp = attach_country_key(response_df, by=join_by)

    pred = _restrict_years(pred, min_year, max_year)
    resp = _restrict_years(resp, min_year, max_year)

    joined = pred.merge(
        resp[[COUNTRY_KEY_COLUMN, "year", "response"]],
        on=[COUNTRY_KEY_COLUMN, "year"],
        how="inner",
    )

    missing = joined["predictor"].isna() | joined["response"].isna()
    if missing.any():
        print(
            f"[prepare] {int(missing.sum())} country-years joined but with a missing "
            "indicator value; dropped.",
        )
    joined = joined[~missing].copy()

    if joined.empty:
        return _empty_prepared_frame()

    if mode is AnalysisMode.COUNTRY_MEAN:
        prepared = (
            joined.sort_values([COUNTRY_KEY_COLUMN, "year"])
            .groupby(COUNTRY_KEY_COLUMN, as_index=False, sort=True)
            .agg(
                country_code=("country_code", "last"),
                country_name=("country_name", "last"),
                n_years=("year", "size"),
                predictor=("predictor", "mean"),
                response=("response", "mean"),
            )
        )
        prepared["year"] = pd.array([pd.NA] * len(prepared), dtype="Int64")
    else:
        prepared = joined.sort_values([COUNTRY_KEY_COLUMN, "year"]).copy()
        prepared["n_years"] = 1

    non_positive = prepared["response"] <= 0
    if non_positive.any():
        print(
            f"[prepare] {int(non_positive.sum())} rows with response <= 0 "
            "cannot be log-transformed; dropped.",
        )
    prepared = prepared[~non_positive].copy()

    prepared["country_code"] = prepared["country_code"].astype("string")
    prepared["country_name"] = prepared["country_name"].astype("string")
    if join_by == JOIN_BY_CODE:
        prepared["country"] = prepared[COUNTRY_KEY_COLUMN].astype("string")
    else:
        prepared["country"] = prepared["country_name"].fillna(prepared[COUNTRY_KEY_COLUMN])
    prepared["year"] = prepared["year"].astype("Int64")
    prepared["n_years"] = prepared["n_years"].astype("int64")
    prepared["predictor"] = prepared["predictor"].astype(float)
    prepared["response"] = prepared["response"].astype(float)

    return prepared[PREPARED_COLUMNS].reset_index(drop=True)


def build_dataset(prepared: pd.DataFrame, mode: AnalysisMode | str) -> Dataset:
    mode = AnalysisMode(mode)
    if mode is AnalysisMode.COUNTRY_MEAN:
        return Dataset.from_frame(
            prepared,
            country_col="country",
            unique_countries=True,
        )
    return Dataset.from_frame(
        prepared,
        country_col="country",
        year_col="year",
    )


def save_prepared_frame(
    df: pd.DataFrame,
    mode: AnalysisMode | str,
    *,
    storage: Optional[StorageAdapter] = None,
) -> str:
    store = storage or LocalStorageAdapter()
    key = f"{PREPARED_BASE_PREFIX}/{AnalysisMode(mode).value}.parquet"
    return store.write_parquet(df, key)


def prepare_dataset(
    predictor_source: Path | str,
    response_source: Path | str,
    *,
    mode: AnalysisMode | str = AnalysisMode.COUNTRY_MEAN,
    predictor_column: Optional[str] = None,
    response_column: Optional[str] = None,
    min_year: Optional[int] = None,
    max_year: Optional[int] = None,
    exclude_aggregates: bool = True,
    input_storage: Optional[StorageAdapter] = None,
    storage: Optional[StorageAdapter] = None,
    metadata: Optional[MetadataAdapter] = None,
) -> PreparedDataset:
    """
    Orchestrate load + join + persist of the prepared dataset, recording
    the run in the metadata store.
    """
    mode = AnalysisMode(mode)
    meta = metadata or LocalMetadataAdapter()
    parameters: Dict[str, Any] = {
        "predictor_source": str(predictor_source),
        "response_source": str(response_source),
        "mode": mode.value,
        "min_year": min_year,
        "max_year": max_year,
        "exclude_aggregates": exclude_aggregates,
    }
    run_id = meta.start_run(DATASET_PREPARE_SCOPE, parameters)

    try:
        predictor_df = load_indicator_table(
            predictor_source,
            value_name="predictor",
            value_column=predictor_column,
            exclude_aggregates=exclude_aggregates,
            storage=input_storage,
        )
        response_df = load_indicator_table(
            response_source,
            value_name="response",
            value_column=response_column,
            exclude_aggregates=exclude_aggregates,
            storage=input_storage,
        )

        frame = build_prepared_frame(
            predictor_df,
            response_df,
            mode=mode,
            min_year=min_year,
            max_year=max_year,
        )
        dataset = build_dataset(frame, mode)
        location = save_prepared_frame(frame, mode, storage=storage)

        meta.end_run(
            run_id,
            status=STATUS_SUCCESS,
            rows_processed=len(dataset),
            summary={"location": location},
        )
        return PreparedDataset(mode=mode, frame=frame, dataset=dataset, location=location)
    except Exception as exc:  # noqa: BLE001
        meta.end_run(
            run_id,
            status=STATUS_FAILED,
            error_message=str(exc),
        )
        raise


__all__ = [
    "PREPARED_BASE_PREFIX",
    "PREPARED_COLUMNS",
    "AnalysisMode",
    "PreparedDataset",
    "build_prepared_frame",
    "build_dataset",
    "save_prepared_frame",
    "prepare_dataset",
]
