"""
Country keys
------------

Two indicator tables only join cleanly when they agree on how a country
is identified. ISO3 codes are used when both tables carry them; otherwise
the join falls back to a normalized country name, so that
"Côte d'Ivoire" and "Cote d Ivoire" meet on the same key.
"""

from __future__ import annotations

import re
import unicodedata

import pandas as pd

COUNTRY_KEY_COLUMN = "country_key"
JOIN_BY_CODE = "code"
JOIN_BY_NAME = "name"


def normalize_country_name(name: str) -> str:
    """
    Normalize a country name for joining.

    - lower case
    - accents removed
    - non-alphanumeric characters (except space) turned into spaces
    - repeated spaces collapsed, ends trimmed
    """
    if name is None or (not isinstance(name, str) and pd.isna(name)):
        return ""

    s = str(name).lower()
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = re.sub(r"[^a-z0-9 ]", " ", s)
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def has_country_codes(df: pd.DataFrame) -> bool:
    """True when every row carries a non-empty country_code."""
    if df.empty or "country_code" not in df.columns:
        return False
    codes = df["country_code"].astype("string").str.strip()
    return bool(codes.notna().all() and (codes != "").all())


def choose_join_key(*frames: pd.DataFrame) -> str:
    if all(has_country_codes(df) for df in frames):
        return JOIN_BY_CODE
    return JOIN_BY_NAME


def attach_country_key(df: pd.DataFrame, by: str) -> pd.DataFrame:
    """
    Return a copy of `df` with a `country_key` column.

    by="code": upper-cased ISO3 code.
    by="name": normalize_country_name(country_name).
    Rows that end up with an empty key are dropped.
    """
    out = df.copy()
    if by == JOIN_BY_CODE:
        out[COUNTRY_KEY_COLUMN] = out["country_code"].astype("string").str.strip().str.upper()
    elif by == JOIN_BY_NAME:
        if "country_name" not in out.columns:
            raise ValueError("Joining by name requires a 'country_name' column")
        out[COUNTRY_KEY_COLUMN] = out["country_name"].map(normalize_country_name).astype("string")
    else:
        raise ValueError(f"Unknown join key {by!r}; expected {JOIN_BY_CODE!r} or {JOIN_BY_NAME!r}")

    out = out[out[COUNTRY_KEY_COLUMN].notna() & (out[COUNTRY_KEY_COLUMN] != "")]
    return out


__all__ = [
    "COUNTRY_KEY_COLUMN",
    "JOIN_BY_CODE",
    "JOIN_BY_NAME",
    "normalize_country_name",
    "has_country_codes",
    "choose_join_key",
    "attach_country_key",
]
