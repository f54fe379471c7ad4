import pandas as pd
import pytest

from adapters import LocalStorageAdapter


def test_keys_are_relative_to_root(tmp_path):
    storage = LocalStorageAdapter(tmp_path / "out")

    location = storage.write_raw("charts/a.png", b"\x89PNG")
    storage.write_csv(pd.DataFrame({"x": [1, 2]}), "tables/b.csv")

    assert location == str(tmp_path / "out" / "charts" / "a.png")
    assert storage.list_keys("") == ["charts/a.png", "tables/b.csv"]
    assert storage.list_keys("tables") == ["tables/b.csv"]
    assert storage.list_keys("missing") == []


def test_parquet_roundtrip_keeps_nullable_year(tmp_path):
    storage = LocalStorageAdapter(tmp_path)
    df = pd.DataFrame({"country": ["BRA", "CHL"], "year": pd.array([2000, None], dtype="Int64")})

    storage.write_parquet(df, "prepared.parquet")

    back = storage.read_parquet("prepared.parquet")
    assert back["year"].isna().tolist() == [False, True]


def test_absolute_key_bypasses_root(tmp_path):
    source = tmp_path / "input.csv"
    source.write_bytes("\ufeffa,b\n1,2\n".encode("utf-8"))

    storage = LocalStorageAdapter(tmp_path / "elsewhere")

    assert storage.exists(str(source))
    assert storage.read_text(str(source)) == "a,b\n1,2\n"


def test_missing_key(tmp_path):
    storage = LocalStorageAdapter(tmp_path)

    assert not storage.exists("nope.csv")
    with pytest.raises(FileNotFoundError):
        storage.read_raw("nope.csv")
