import pandas as pd
import pytest

from adapters import LocalMetadataAdapter, LocalStorageAdapter
from metadata import DATASET_PREPARE_SCOPE, get_last_run
from transformations import AnalysisMode, build_dataset, build_prepared_frame, prepare_dataset


def _table(rows, value_name):
    df = pd.DataFrame(rows, columns=["country_code", "country_name", "year", value_name])
    df["country_code"] = df["country_code"].astype("string")
    df["country_name"] = df["country_name"].astype("string")
    df["year"] = df["year"].astype("Int64")
    df[value_name] = df[value_name].astype(float)
    return df


@pytest.fixture
def predictor_df():
    return _table(
        [
            ("BRA", "Brazil", 2000, 100.0),
            ("BRA", "Brazil", 2001, 200.0),
            ("CHL", "Chile", 2000, 300.0),
            ("CHL", "Chile", 2001, None),
            ("PER", "Peru", 2000, 50.0),
            ("ARG", "Argentina", 2000, 80.0),
        ],
        "predictor",
    )


@pytest.fixture
def response_df():
    return _table(
        [
            ("BRA", "Brazil", 2000, 30.0),
            ("BRA", "Brazil", 2001, 20.0),
            ("CHL", "Chile", 2000, 10.0),
            ("CHL", "Chile", 2001, 9.0),
            ("PER", "Peru", 2000, 0.0),
            ("URY", "Uruguay", 2000, 12.0),
        ],
        "response",
    )


def test_country_mean_mode(predictor_df, response_df):
    frame = build_prepared_frame(predictor_df, response_df, mode="country_mean")

    # ARG/URY have no partner row, CHL 2001 lacks the predictor, PER has response 0
    assert frame["country"].tolist() == ["BRA", "CHL"]
    bra = frame.iloc[0]
    assert bra["predictor"] == pytest.approx(150.0)
    assert bra["response"] == pytest.approx(25.0)
    assert bra["n_years"] == 2
    assert frame["year"].isna().all()


def test_country_year_mode(predictor_df, response_df):
    frame = build_prepared_frame(predictor_df, response_df, mode=AnalysisMode.COUNTRY_YEAR)

    assert list(zip(frame["country"], frame["year"])) == [("BRA", 2000), ("BRA", 2001), ("CHL", 2000)]
    assert (frame["n_years"] == 1).all()

    dataset = build_dataset(frame, AnalysisMode.COUNTRY_YEAR)
    assert [o.year for o in dataset] == [2000, 2001, 2000]
    assert dataset.unique_countries is False


def test_year_window(predictor_df, response_df):
    frame = build_prepared_frame(predictor_df, response_df, mode="country_mean", min_year=2001, max_year=2001)

    assert frame["country"].tolist() == ["BRA"]
    assert frame.iloc[0]["response"] == pytest.approx(20.0)


def test_inverted_year_window(predictor_df, response_df):
    with pytest.raises(ValueError):
        build_prepared_frame(predictor_df, response_df, min_year=2005, max_year=2000)


def test_join_by_name_when_codes_missing(response_df):
    by_name = _table(
        [
            (None, "Brasil", 2000, 1.0),
            (None, "Chile", 2000, 2.0),
        ],
        "predictor",
    )

    frame = build_prepared_frame(by_name, response_df, mode="country_year")

    assert frame["country_key"].tolist() == ["chile"]
    assert frame["country"].tolist() == ["Chile"]


def test_unknown_mode(predictor_df, response_df):
    with pytest.raises(ValueError):
        build_prepared_frame(predictor_df, response_df, mode="per_decade")


def test_prepare_dataset_persists_and_records_run(tmp_path):
    pred_csv = tmp_path / "pred.csv"
    resp_csv = tmp_path / "resp.csv"
    pred_csv.write_text("country_code,country_name,year,value\nBRA,Brazil,2000,1\nCHL,Chile,2000,2\n")
    resp_csv.write_text("country_code,country_name,year,value\nBRA,Brazil,2000,10\nCHL,Chile,2000,20\n")
    storage = LocalStorageAdapter(tmp_path / "out")

    prepared = prepare_dataset(pred_csv, resp_csv, storage=storage, metadata=LocalMetadataAdapter())

    assert len(prepared.dataset) == 2
    assert storage.exists("processed/prepared_dataset/country_mean.parquet")
    stored = storage.read_parquet("processed/prepared_dataset/country_mean.parquet")
    assert stored["country"].tolist() == ["BRA", "CHL"]

    run = get_last_run(DATASET_PREPARE_SCOPE)
    assert run["status"] == "SUCCESS"
    assert run["rows_processed"] == 2
    assert run["parameters"]["mode"] == "country_mean"


def test_prepare_dataset_records_failure(tmp_path):
    with pytest.raises(FileNotFoundError):
        prepare_dataset(tmp_path / "missing.csv", tmp_path / "missing.csv", storage=LocalStorageAdapter(tmp_path))

    run = get_last_run(DATASET_PREPARE_SCOPE)
    assert run["status"] == "FAILED"
    assert "missing.csv" in run["error_message"]
