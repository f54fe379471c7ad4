"""
Indicator tables (country-year) to a common long schema.

Two input layouts are understood:

- World Bank "wide" CSV exports (Country Name, Country Code, Indicator
  Name, Indicator Code, 1960, 1961, ...), with or without the 4-line
  "Data Source" / "Last Updated Date" preamble.
- Long tables with one row per country-year, for example Our World in
  Data exports (Entity, Code, Year, <indicator>).

Both are converted to:

    country_code  - string (ISO3, may be missing for long tables)
    country_name  - string
    year          - Int64
    <value_name>  - float
"""

from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from adapters import LocalStorageAdapter, StorageAdapter
from .country_mapping import normalize_country_name

COUNTRY_CODE_ALIASES = ("country_code", "Country Code", "Code", "iso3", "iso_code", "ISO3")
COUNTRY_NAME_ALIASES = ("country_name", "Country Name", "Entity", "country", "Country")
YEAR_ALIASES = ("year", "Year")

_YEAR_COLUMN_RE = re.compile(r"^\d{4}$")

# World Bank regional, income-group and lending-group aggregates. They
# are not countries and would double count in a cross-country regression.
WORLD_BANK_AGGREGATE_CODES = frozenset(
    {
        "AFE", "AFW", "ARB", "CEB", "CSS", "EAP", "EAR", "EAS", "ECA", "ECS",
        "EMU", "EUU", "FCS", "HIC", "HPC", "IBD", "IBT", "IDA", "IDB", "IDX",
        "INX", "LAC", "LCN", "LDC", "LIC", "LMC", "LMY", "LTE", "MEA", "MIC",
        "MNA", "NAC", "OED", "OSS", "PRE", "PSS", "PST", "SAS", "SSA", "SSF",
        "SST", "TEA", "TEC", "TLA", "TMN", "TSA", "TSS", "UMC", "WLD",
    }
)


def _find_column(columns: Iterable[str], aliases: Iterable[str]) -> Optional[str]:
    lookup = {str(c).strip(): c for c in columns}
    for alias in aliases:
        if alias in lookup:
            return lookup[alias]
    return None


def _skip_preamble(text: str) -> str:
    """
    Drop the World Bank "Data Source" preamble, if present, so the text
    starts at the header row.
    """
    lines = text.splitlines()
    first = next((line for line in lines if line.strip()), "")
    if not first.lstrip('"').startswith("Data Source"):
        return text
    for idx, line in enumerate(lines):
        if line.lstrip('"').startswith("Country Name"):
            return "\n".join(lines[idx:])
    raise ValueError("World Bank preamble found but no 'Country Name' header row")


def _read_source_text(source: Path | str, storage: Optional[StorageAdapter]) -> str:
    store = storage or LocalStorageAdapter()
    return store.read_text(str(source))


def _wide_to_long(df: pd.DataFrame, value_name: str) -> pd.DataFrame:
    year_cols = [c for c in df.columns if _YEAR_COLUMN_RE.match(str(c))]
    code_col = _find_column(df.columns, COUNTRY_CODE_ALIASES)
    name_col = _find_column(df.columns, COUNTRY_NAME_ALIASES)
    if code_col is None and name_col is None:
        raise ValueError("Wide indicator table has neither a country code nor a country name column")

    id_cols = [c for c in (code_col, name_col) if c is not None]
    long_df = df.melt(id_vars=id_cols, value_vars=year_cols, var_name="year", value_name=value_name)
    return long_df.rename(columns={code_col: "country_code", name_col: "country_name"})


def _long_to_standard(
    df: pd.DataFrame,
    value_name: str,
    value_column: Optional[str],
) -> pd.DataFrame:
    code_col = _find_column(df.columns, COUNTRY_CODE_ALIASES)
    name_col = _find_column(df.columns, COUNTRY_NAME_ALIASES)
    year_col = _find_column(df.columns, YEAR_ALIASES)
    if year_col is None:
        raise ValueError("Long indicator table has no 'year' column")
    if code_col is None and name_col is None:
        raise ValueError("Long indicator table has neither a country code nor a country name column")

    if value_column is None:
        known = {code_col, name_col, year_col}
        candidates = [c for c in df.columns if c not in known]
        if len(candidates) != 1:
            raise ValueError(
                f"Cannot infer the value column among {candidates}; pass value_column explicitly",
            )
        value_column = candidates[0]
    elif value_column not in df.columns:
        raise ValueError(f"Value column {value_column!r} not found in indicator table")

    out = pd.DataFrame(
        {
            "country_code": df[code_col] if code_col is not None else pd.NA,
            "country_name": df[name_col] if name_col is not None else pd.NA,
            "year": df[year_col],
            value_name: df[value_column],
        }
    )
    return out


def standardize_indicator_frame(
    df: pd.DataFrame,
    *,
    value_name: str,
    value_column: Optional[str] = None,
    exclude_aggregates: bool = True,
) -> pd.DataFrame:
    """
    Convert an already-parsed table (wide or long) to the long schema.

    Rows without a usable country or year are dropped; duplicates on
    (country, year) keep the last occurrence.
    """
    df = df.rename(columns=lambda c: str(c).strip())
    year_cols = [c for c in df.columns if _YEAR_COLUMN_RE.match(c)]
    if year_cols and _find_column(df.columns, YEAR_ALIASES) is None:
        out = _wide_to_long(df, value_name)
    else:
        out = _long_to_standard(df, value_name, value_column)

    if "country_code" not in out.columns:
        out["country_code"] = pd.NA
    if "country_name" not in out.columns:
        out["country_name"] = pd.NA

    out["country_code"] = out["country_code"].astype("string").str.strip()
    out["country_name"] = out["country_name"].astype("string").str.strip()
    years = pd.to_numeric(out["year"], errors="coerce")
    out["year"] = years.where(years == years.round()).astype("Int64")
    out[value_name] = pd.to_numeric(out[value_name], errors="coerce").astype(float)

    out = out[out["country_code"].notna() | out["country_name"].notna()]
    out = out.dropna(subset=["year"])

    if exclude_aggregates:
        is_aggregate = out["country_code"].isin(WORLD_BANK_AGGREGATE_CODES).fillna(False)
        dropped = int(is_aggregate.sum())
        if dropped:
            print(f"[prepare] Dropping {dropped} rows of World Bank regional/income aggregates.")
        out = out[~is_aggregate]

    dedup_key: List[str] = ["country_code", "year"]
    if out["country_code"].isna().any():
        out = out.assign(_name_key=out["country_name"].map(normalize_country_name))
        dedup_key = ["_name_key", "year"]
    out = out.drop_duplicates(subset=dedup_key, keep="last")
    out = out.drop(columns=["_name_key"], errors="ignore")

    return out[["country_code", "country_name", "year", value_name]].reset_index(drop=True)


def load_indicator_table(
    source: Path | str,
    *,
    value_name: str,
    value_column: Optional[str] = None,
    exclude_aggregates: bool = True,
    storage: Optional[StorageAdapter] = None,
) -> pd.DataFrame:
    """
    Load one indicator table (CSV) into the long schema.

    Parameters
    ----------
    source:
        Path (or storage key) of the CSV file.
    value_name:
        Name given to the indicator column in the output ("predictor",
        "response", ...).
    value_column:
        Column holding the indicator in a long table, when it cannot be
        inferred. Ignored for wide tables.
    exclude_aggregates:
        Drop World Bank aggregate codes (WLD, HIC, SSF, ...).
    storage:
        Where to read from; defaults to the local filesystem.
    """
    text = _skip_preamble(_read_source_text(source, storage))
    raw = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=True)
    raw = raw.loc[:, [c for c in raw.columns if not str(c).startswith("Unnamed")]]
    if raw.empty:
        raise ValueError(f"Indicator table {source} has no rows")

    return standardize_indicator_frame(
        raw,
        value_name=value_name,
        value_column=value_column,
        exclude_aggregates=exclude_aggregates,
    )


__all__ = [
    "WORLD_BANK_AGGREGATE_CODES",
    "standardize_indicator_frame",
    "load_indicator_table",
]
