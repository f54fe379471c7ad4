"""
Local orchestration entrypoint for the indicator regression analysis.

Runs, end-to-end:

1. Dataset preparation (load both indicator tables, join by country-year,
   aggregate per mode, persist the prepared parquet)
2. In-sample fit of log10(response) on predictor + variance decomposition
3. k-fold cross-validation (k = n // min_per_fold, seeded permutation)
4. Summary tables (CSV)
5. Charts (scatter with fitted curve, per-fold R²)

Intended usage (local):

    PYTHONPATH=src python -m local_pipeline \\
        --predictor-table data/health_expenditure.csv \\
        --response-table data/under5_mortality.csv \\
        --seed 42

Defaults for every flag come from the environment (see
`analysis_settings`), and a `.env` file is honoured.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from adapters import LocalMetadataAdapter, LocalStorageAdapter, MetadataAdapter
from analysis import (
    build_fold_r2_chart,
    build_predictor_vs_response_scatter,
    write_cross_validation_summary,
    write_in_sample_summary,
)
from analysis_settings import AnalysisSettings, load_settings
from metadata import ANALYSIS_SCOPE, STATUS_FAILED, STATUS_SUCCESS
from modeling import DEFAULT_MIN_PER_FOLD, cross_validate, fit_in_sample
from transformations import AnalysisMode, prepare_dataset


def run_local_pipeline(
    *,
    predictor_table: Path | str,
    response_table: Path | str,
    seed: int,
    mode: AnalysisMode | str = AnalysisMode.COUNTRY_MEAN,
    min_per_fold: int = DEFAULT_MIN_PER_FOLD,
    predictor_column: Optional[str] = None,
    response_column: Optional[str] = None,
    predictor_label: str = "Predictor",
    response_label: str = "Response",
    min_year: Optional[int] = None,
    max_year: Optional[int] = None,
    output_dir: Path | str = "analysis",
    max_workers: Optional[int] = None,
    metadata: Optional[MetadataAdapter] = None,
) -> Dict[str, List[str]]:
    """
    Run the full local analysis end-to-end.

    Parameters
    ----------
    predictor_table, response_table:
        CSV paths of the two indicator tables (World Bank wide export or
        long country-year table).
    seed:
        Seed of the fold permutation; the whole report is reproducible
        from (tables, mode, seed, min_per_fold).
    mode:
        "country_mean" or "country_year".
    output_dir:
        Root for the prepared parquet and every report artefact.

    Returns
    -------
    artefacts:
        Dictionary mapping step names to lists of generated locations.

    Any modeling failure (degenerate predictor, zero-variance fold,
    too few rows) aborts the run before a single report file is written.
    """
    mode = AnalysisMode(mode)
    meta = metadata or LocalMetadataAdapter()
    storage = LocalStorageAdapter(output_dir)
    artefacts: Dict[str, List[str]] = {}

    # 1. Dataset preparation
    print("[1/5] Preparing dataset from indicator tables...")
    prepared = prepare_dataset(
        predictor_table,
        response_table,
        mode=mode,
        predictor_column=predictor_column,
        response_column=response_column,
        min_year=min_year,
        max_year=max_year,
        storage=storage,
        metadata=meta,
    )
    dataset = prepared.dataset
    artefacts["prepared"] = [prepared.location] if prepared.location else []
    print(f"      {len(dataset)} observations ({mode.value}) -> {prepared.location}")

    run_id = meta.start_run(
        ANALYSIS_SCOPE,
        {
            "predictor_table": str(predictor_table),
            "response_table": str(response_table),
            "mode": mode.value,
            "seed": seed,
            "min_per_fold": min_per_fold,
            "min_year": min_year,
            "max_year": max_year,
        },
    )

    try:
        # 2. In-sample fit
        print("[2/5] Fitting log10(response) ~ predictor on the full dataset...")
        in_sample = fit_in_sample(dataset, transform_response=True)
        print(
            f"      intercept={in_sample.model.intercept:.4f} "
            f"slope={in_sample.model.slope:.6f} R²={in_sample.decomposition.r2:.4f}",
        )

        # 3. Cross-validation
        print(f"[3/5] Cross-validating (min_per_fold={min_per_fold}, seed={seed})...")
        report = cross_validate(dataset, min_per_fold, seed=seed, max_workers=max_workers)
        for fold in report.folds:
            print(f"      fold {fold.fold_id}: n_test={fold.n_test} R²={fold.r2:.4f}")
        print(f"      k={report.k} mean R²={report.mean_r2:.4f}")

        # 4. Tables
        print("[4/5] Writing summary tables...")
        artefacts["tables"] = [
            write_in_sample_summary(in_sample, storage=storage),
            write_cross_validation_summary(report, storage=storage),
        ]

        # 5. Charts
        print("[5/5] Rendering charts...")
        artefacts["charts"] = [
            build_predictor_vs_response_scatter(
                dataset,
                in_sample,
                storage=storage,
                predictor_label=predictor_label,
                response_label=response_label,
            ),
            build_fold_r2_chart(report, storage=storage),
        ]

        meta.end_run(
            run_id,
            status=STATUS_SUCCESS,
            rows_processed=len(dataset),
            summary={
                "k": report.k,
                "mean_r2": report.mean_r2,
                "in_sample_r2": in_sample.decomposition.r2,
                "slope": in_sample.model.slope,
                "intercept": in_sample.model.intercept,
            },
        )
    except Exception as exc:  # noqa: BLE001
        print(f"[analysis] Run {run_id} failed: {exc}")
        meta.end_run(
            run_id,
            status=STATUS_FAILED,
            rows_processed=len(dataset),
            error_message=str(exc),
        )
        raise

    for step, paths in artefacts.items():
        for p in paths:
            print(f"      {step}: {p}")
    print("\nAnalysis completed successfully.")
    return artefacts


def _parse_args(settings: AnalysisSettings, argv: Optional[List[str]] = None):
    import argparse

    parser = argparse.ArgumentParser(
        description=(
            "Regress a country-year health indicator (log10) on another and "
            "validate the fit with seeded k-fold cross-validation."
        ),
    )
    parser.add_argument(
        "--predictor-table",
        default=settings.predictor_table,
        required=settings.predictor_table is None,
        help="CSV of the predictor indicator (env: HEALTH_PREDICTOR_TABLE).",
    )
    parser.add_argument(
        "--response-table",
        default=settings.response_table,
        required=settings.response_table is None,
        help="CSV of the response indicator, must be > 0 (env: HEALTH_RESPONSE_TABLE).",
    )
    parser.add_argument("--predictor-column", default=settings.predictor_column)
    parser.add_argument("--response-column", default=settings.response_column)
    parser.add_argument("--predictor-label", default=settings.predictor_label)
    parser.add_argument("--response-label", default=settings.response_label)
    parser.add_argument(
        "--mode",
        choices=[m.value for m in AnalysisMode],
        default=settings.mode,
        help="One row per country (averaged over years) or per country-year.",
    )
    parser.add_argument(
        "--min-per-fold",
        type=int,
        default=settings.min_per_fold,
        help="Minimum expected fold size; k = n // min_per_fold (default: 10).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=settings.seed,
        help="Seed of the fold permutation (env: CV_SEED).",
    )
    parser.add_argument("--min-year", type=int, default=settings.min_year)
    parser.add_argument("--max-year", type=int, default=settings.max_year)
    parser.add_argument(
        "--output-dir",
        default=settings.output_dir,
        help="Directory for the prepared dataset and report artefacts.",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Score folds concurrently with this many threads.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    settings = load_settings()
    args = _parse_args(settings, argv)
    run_local_pipeline(
        predictor_table=args.predictor_table,
        response_table=args.response_table,
        seed=args.seed,
        mode=args.mode,
        min_per_fold=args.min_per_fold,
        predictor_column=args.predictor_column,
        response_column=args.response_column,
        predictor_label=args.predictor_label,
        response_label=args.response_label,
        min_year=args.min_year,
        max_year=args.max_year,
        output_dir=args.output_dir,
        max_workers=args.max_workers,
    )


if __name__ == "__main__":
    main()


__all__ = ["run_local_pipeline", "main"]
