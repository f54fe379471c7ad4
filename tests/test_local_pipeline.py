import pandas as pd
import pytest

from metadata import ANALYSIS_SCOPE, DATASET_PREPARE_SCOPE, get_last_run
from analysis import CV_SUMMARY_CSV_NAME, FIT_SUMMARY_CSV_NAME, FOLD_R2_PNG_NAME, SCATTER_PNG_NAME
from local_pipeline import main, run_local_pipeline
from modeling import InsufficientDataError


def _write_tables(directory, n_countries):
    """Long tables with an exact log-linear relation, repeated over two years."""
    pred_rows = []
    resp_rows = []
    for i in range(n_countries):
        for year in (2010, 2011):
            code = f"C{i:02d}"
            name = f"Country {i}"
            pred_rows.append((code, name, year, float(i * 10)))
            resp_rows.append((code, name, year, 10 ** (2.0 - 0.01 * i * 10)))
    columns = ["country_code", "country_name", "year", "value"]
    pred_path = directory / "predictor.csv"
    resp_path = directory / "response.csv"
    pd.DataFrame(pred_rows, columns=columns).to_csv(pred_path, index=False)
    pd.DataFrame(resp_rows, columns=columns).to_csv(resp_path, index=False)
    return pred_path, resp_path


def test_end_to_end(tmp_path):
    pred_path, resp_path = _write_tables(tmp_path, 30)
    out = tmp_path / "analysis"

    artefacts = run_local_pipeline(
        predictor_table=pred_path,
        response_table=resp_path,
        seed=11,
        output_dir=out,
    )

    assert set(artefacts) == {"prepared", "tables", "charts"}
    for name in (CV_SUMMARY_CSV_NAME, FIT_SUMMARY_CSV_NAME, SCATTER_PNG_NAME, FOLD_R2_PNG_NAME):
        assert (out / name).is_file()
    assert (out / "processed" / "prepared_dataset" / "country_mean.parquet").is_file()

    cv = pd.read_csv(out / CV_SUMMARY_CSV_NAME, dtype={"fold": str})
    assert cv["fold"].tolist() == ["1", "2", "3", "mean", "std"]

    run = get_last_run(ANALYSIS_SCOPE)
    assert run["status"] == "SUCCESS"
    assert run["rows_processed"] == 30
    assert run["parameters"]["seed"] == 11
    assert run["summary"]["k"] == 3
    assert run["summary"]["mean_r2"] == pytest.approx(1.0)
    assert run["summary"]["slope"] == pytest.approx(-0.01)


def test_country_year_mode_uses_every_row(tmp_path):
    pred_path, resp_path = _write_tables(tmp_path, 15)

    run_local_pipeline(
        predictor_table=pred_path,
        response_table=resp_path,
        seed=11,
        mode="country_year",
        output_dir=tmp_path / "analysis",
    )

    run = get_last_run(ANALYSIS_SCOPE)
    assert run["rows_processed"] == 30
    assert run["summary"]["k"] == 3


def test_too_few_rows_writes_no_report(tmp_path):
    pred_path, resp_path = _write_tables(tmp_path, 15)
    out = tmp_path / "analysis"

    with pytest.raises(InsufficientDataError):
        run_local_pipeline(
            predictor_table=pred_path,
            response_table=resp_path,
            seed=11,
            output_dir=out,
        )

    assert not (out / CV_SUMMARY_CSV_NAME).exists()
    assert not (out / SCATTER_PNG_NAME).exists()
    assert get_last_run(DATASET_PREPARE_SCOPE)["status"] == "SUCCESS"
    failed = get_last_run(ANALYSIS_SCOPE)
    assert failed["status"] == "FAILED"
    assert failed["rows_processed"] == 15


def test_main_reads_flags(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    pred_path, resp_path = _write_tables(tmp_path, 20)

    main(
        [
            "--predictor-table", str(pred_path),
            "--response-table", str(resp_path),
            "--seed", "5",
            "--min-per-fold", "5",
            "--output-dir", str(tmp_path / "report"),
            "--max-workers", "2",
        ]
    )

    run = get_last_run(ANALYSIS_SCOPE)
    assert run["status"] == "SUCCESS"
    assert run["summary"]["k"] == 4
    assert (tmp_path / "report" / CV_SUMMARY_CSV_NAME).is_file()
