import pandas as pd
import pytest

from transformations import load_indicator_table, normalize_country_name, standardize_indicator_frame

WORLD_BANK_CSV = (
    '\ufeff"Data Source","World Development Indicators",\n'
    "\n"
    '"Last Updated Date","2024-06-28",\n'
    "\n"
    '"Country Name","Country Code","Indicator Name","Indicator Code","2000","2001","2002",\n'
    '"Brazil","BRA","Current health expenditure per capita","SH.XPD.CHEX.PC.CD","265.1","230.4","",\n'
    '"Chile","CHL","Current health expenditure per capita","SH.XPD.CHEX.PC.CD","355.9","330.2","320.0",\n'
    '"World","WLD","Current health expenditure per capita","SH.XPD.CHEX.PC.CD","480.0","490.0","500.0",\n'
)


def test_world_bank_wide_export(tmp_path):
    path = tmp_path / "hexp.csv"
    path.write_text(WORLD_BANK_CSV, encoding="utf-8")

    df = load_indicator_table(path, value_name="predictor")

    assert list(df.columns) == ["country_code", "country_name", "year", "predictor"]
    assert set(df["country_code"]) == {"BRA", "CHL"}
    bra = df[df["country_code"] == "BRA"].set_index("year")["predictor"]
    assert bra.loc[2000] == pytest.approx(265.1)
    assert pd.isna(bra.loc[2002])
    assert str(df["year"].dtype) == "Int64"


def test_aggregates_can_be_kept(tmp_path):
    path = tmp_path / "hexp.csv"
    path.write_text(WORLD_BANK_CSV, encoding="utf-8")

    df = load_indicator_table(path, value_name="predictor", exclude_aggregates=False)

    assert "WLD" in set(df["country_code"])


def test_long_table_with_inferred_value_column(tmp_path):
    path = tmp_path / "u5mr.csv"
    path.write_text(
        "Entity,Code,Year,Under-five mortality rate\n"
        "Brazil,BRA,2000,35.2\n"
        "Brazil,BRA,2001,33.0\n"
        "Chile,CHL,2000,10.9\n"
        "Chile,CHL,2000,11.1\n",
        encoding="utf-8",
    )

    df = load_indicator_table(path, value_name="response")

    assert len(df) == 3
    chl = df[df["country_code"] == "CHL"]
    # duplicate country-year keeps the last row
    assert chl["response"].tolist() == [pytest.approx(11.1)]


def test_long_table_ambiguous_value_column():
    df = pd.DataFrame({"country": ["A"], "year": [2000], "v1": [1.0], "v2": [2.0]})

    with pytest.raises(ValueError, match="value_column"):
        standardize_indicator_frame(df, value_name="predictor")

    out = standardize_indicator_frame(df, value_name="predictor", value_column="v2")
    assert out["predictor"].tolist() == [2.0]


def test_long_table_without_codes_dedups_by_name():
    df = pd.DataFrame(
        {
            "country": ["Côte d'Ivoire", "Cote d Ivoire", "Peru"],
            "year": ["2010", "2010", "2010"],
            "value": ["1", "2", "3"],
        }
    )

    out = standardize_indicator_frame(df, value_name="response")

    assert len(out) == 2
    assert out["country_code"].isna().all()


def test_missing_year_column_raises():
    with pytest.raises(ValueError, match="year"):
        standardize_indicator_frame(pd.DataFrame({"country": ["A"], "value": [1]}), value_name="x")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_indicator_table(tmp_path / "nope.csv", value_name="predictor")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Côte d'Ivoire", "cote d ivoire"),
        ("  Korea,  Rep. ", "korea rep"),
        (None, ""),
    ],
)
def test_normalize_country_name(raw, expected):
    assert normalize_country_name(raw) == expected
