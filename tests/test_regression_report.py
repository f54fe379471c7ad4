import pandas as pd
import pytest

from adapters import LocalStorageAdapter
from analysis import (
    CV_SUMMARY_CSV_NAME,
    FIT_SUMMARY_CSV_NAME,
    FOLD_R2_PNG_NAME,
    SCATTER_PNG_NAME,
    build_cross_validation_table,
    build_fold_r2_chart,
    build_in_sample_table,
    build_predictor_vs_response_scatter,
    write_cross_validation_summary,
    write_in_sample_summary,
)
from modeling import Dataset, cross_validate, fit_in_sample

PNG_MAGIC = b"\x89PNG"


@pytest.fixture
def report(log_linear_30):
    return cross_validate(log_linear_30, 10, seed=3)


@pytest.fixture
def in_sample(log_linear_30):
    return fit_in_sample(log_linear_30)


def test_cross_validation_table_has_summary_rows(report):
    table = build_cross_validation_table(report, decimals=None)

    assert table["fold"].tolist() == ["1", "2", "3", "mean", "std"]
    assert table.loc[3, "r2"] == report.mean_r2
    assert table.loc[4, "r2"] == report.std_r2
    assert table.loc[:2, "n_test"].tolist() == [10, 10, 10]
    assert pd.isna(table.loc[3, "n_train"])


def test_rounding_happens_only_in_the_table(report):
    rounded = build_cross_validation_table(report, decimals=2)
    raw = build_cross_validation_table(report, decimals=None)

    assert rounded.loc[0, "slope"] == round(raw.loc[0, "slope"], 2)
    assert report.folds[0].model.slope == raw.loc[0, "slope"]


def test_in_sample_table(in_sample):
    table = build_in_sample_table(in_sample)

    assert len(table) == 1
    row = table.iloc[0]
    assert row["transform"] == "log10"
    assert row["n"] == 30
    assert row["slope"] == pytest.approx(-0.05)
    assert row["r2"] == pytest.approx(1.0)
    assert row["pearson_r"] == pytest.approx(-1.0)


def test_summaries_are_written(tmp_path, report, in_sample):
    storage = LocalStorageAdapter(tmp_path)

    cv_path = write_cross_validation_summary(report, storage=storage)
    fit_path = write_in_sample_summary(in_sample, storage=storage)

    assert cv_path == str(tmp_path / CV_SUMMARY_CSV_NAME)
    assert fit_path == str(tmp_path / FIT_SUMMARY_CSV_NAME)
    cv = pd.read_csv(cv_path, dtype={"fold": str})
    assert list(cv.columns) == ["fold", "n_train", "n_test", "intercept", "slope", "r2"]
    assert cv["fold"].tolist()[-2:] == ["mean", "std"]


def test_charts_are_rendered(tmp_path, log_linear_30, report, in_sample):
    storage = LocalStorageAdapter(tmp_path)

    scatter = build_predictor_vs_response_scatter(
        log_linear_30,
        in_sample,
        storage=storage,
        predictor_label="Health expenditure",
        response_label="Under-5 mortality",
    )
    bars = build_fold_r2_chart(report, storage=storage)

    assert scatter.endswith(SCATTER_PNG_NAME)
    assert bars.endswith(FOLD_R2_PNG_NAME)
    assert storage.read_raw(SCATTER_PNG_NAME).startswith(PNG_MAGIC)
    assert storage.read_raw(FOLD_R2_PNG_NAME).startswith(PNG_MAGIC)


def test_scatter_requires_observations(tmp_path, in_sample):
    with pytest.raises(RuntimeError):
        build_predictor_vs_response_scatter(
            Dataset(()),
            in_sample,
            storage=LocalStorageAdapter(tmp_path),
        )
