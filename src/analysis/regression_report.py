"""
Report artefacts for the predictor x response regression.

- Artefact 1: cross_validation_summary.csv
  One row per fold (fold, n_train, n_test, intercept, slope, r2) plus
  "mean" and "std" rows over the per-fold R².

- Artefact 2: in_sample_fit_summary.csv
  Full-dataset fit: intercept, slope, transform, n, pearson_r, total_ss,
  explained_ss, residual_ss, r2.

- Artefact 3: predictor_vs_response_scatter.png
  Predictor on X, raw response on a log10 Y axis, fitted curve
  10**(intercept + slope·x), largest residuals annotated by country.

- Artefact 4: cross_validation_fold_r2.png
  Bar chart of per-fold R² with the mean as a horizontal line.

This is the rendering boundary: values are rounded here, and only here,
after every aggregate has been computed at full precision.
"""

from __future__ import annotations

import io
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from adapters import LocalStorageAdapter, StorageAdapter
from modeling import CrossValidationReport, Dataset, InSampleFit, ResponseTransform

ANALYSIS_OUTPUT_DIR = "analysis"
CV_SUMMARY_CSV_NAME = "cross_validation_summary.csv"
FIT_SUMMARY_CSV_NAME = "in_sample_fit_summary.csv"
SCATTER_PNG_NAME = "predictor_vs_response_scatter.png"
FOLD_R2_PNG_NAME = "cross_validation_fold_r2.png"

DISPLAY_DECIMALS = 4


def build_cross_validation_table(
    report: CrossValidationReport,
    *,
    decimals: Optional[int] = DISPLAY_DECIMALS,
) -> pd.DataFrame:
    per_fold = report.to_frame()
    per_fold["fold"] = per_fold["fold"].astype(str)
    summary = pd.DataFrame(
        [
            {"fold": "mean", "r2": report.mean_r2},
            {"fold": "std", "r2": report.std_r2},
        ]
    )
    table = pd.concat([per_fold, summary], ignore_index=True)
    table["n_train"] = table["n_train"].astype("Int64")
    table["n_test"] = table["n_test"].astype("Int64")
    if decimals is not None:
        table = table.round({"intercept": decimals, "slope": decimals, "r2": decimals})
    return table


def build_in_sample_table(
    fit: InSampleFit,
    *,
    decimals: Optional[int] = DISPLAY_DECIMALS,
) -> pd.DataFrame:
    d = fit.decomposition
    table = pd.DataFrame(
        [
            {
                "intercept": fit.model.intercept,
                "slope": fit.model.slope,
                "transform": fit.model.transform.value,
                "n": fit.n,
                "pearson_r": fit.pearson_r,
                "total_ss": d.total_ss,
                "explained_ss": d.explained_ss,
                "residual_ss": d.residual_ss,
                "r2": d.r2,
            }
        ]
    )
    if decimals is not None:
        numeric = ["intercept", "slope", "pearson_r", "total_ss", "explained_ss", "residual_ss", "r2"]
        table = table.round({col: decimals for col in numeric})
    return table


def write_cross_validation_summary(
    report: CrossValidationReport,
    *,
    storage: Optional[StorageAdapter] = None,
    decimals: Optional[int] = DISPLAY_DECIMALS,
) -> str:
    store = storage or LocalStorageAdapter(ANALYSIS_OUTPUT_DIR)
    table = build_cross_validation_table(report, decimals=decimals)
    return store.write_csv(table, CV_SUMMARY_CSV_NAME)


def write_in_sample_summary(
    fit: InSampleFit,
    *,
    storage: Optional[StorageAdapter] = None,
    decimals: Optional[int] = DISPLAY_DECIMALS,
) -> str:
    store = storage or LocalStorageAdapter(ANALYSIS_OUTPUT_DIR)
    table = build_in_sample_table(fit, decimals=decimals)
    return store.write_csv(table, FIT_SUMMARY_CSV_NAME)


def _save_figure(fig, key: str, storage: StorageAdapter) -> str:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=150)
    plt.close(fig)
    return storage.write_raw(key, buf.getvalue())


def build_predictor_vs_response_scatter(
    dataset: Dataset,
    fit: InSampleFit,
    *,
    storage: Optional[StorageAdapter] = None,
    predictor_label: str = "Predictor",
    response_label: str = "Response",
    annotate_outliers: bool = True,
    outliers_top_n: int = 5,
) -> str:
    """
    Scatter of predictor vs raw response (log10 axis) with the fitted curve.
    """
    if len(dataset) == 0:
        raise RuntimeError("No observations available for the scatter plot")

    store = storage or LocalStorageAdapter(ANALYSIS_OUTPUT_DIR)
    model = fit.model
    x = dataset.predictors()
    y = dataset.responses()

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.scatter(x, y, color="steelblue", alpha=0.8, edgecolors="none")

    x_line = np.linspace(np.min(x), np.max(x), 200)
    y_line = model.to_response_scale(model.predict(x_line))
    ax.plot(
        x_line,
        y_line,
        color="crimson",
        linewidth=2,
        label=f"Linear fit on {model.transform.value} scale (R²={fit.decomposition.r2:.2f})",
    )

    if annotate_outliers and outliers_top_n > 0:
        resid = np.abs(model.transform.apply(y) - model.predict(x))
        top_idx = np.argsort(-resid)[:outliers_top_n]
        countries = dataset.countries()
        for i in top_idx:
            ax.annotate(
                countries[i],
                (x[i], y[i]),
                textcoords="offset points",
                xytext=(5, 5),
                fontsize=8,
                color="black",
                alpha=0.8,
            )

    if model.transform is ResponseTransform.LOG10:
        ax.set_yscale("log")
    ax.set_xlabel(predictor_label)
    ax.set_ylabel(response_label)
    ax.set_title(f"{response_label} vs {predictor_label} (n={len(dataset)})")
    ax.grid(True, linestyle="--", alpha=0.3)
    ax.legend(frameon=False)
    fig.tight_layout()

    return _save_figure(fig, SCATTER_PNG_NAME, store)


def build_fold_r2_chart(
    report: CrossValidationReport,
    *,
    storage: Optional[StorageAdapter] = None,
) -> str:
    store = storage or LocalStorageAdapter(ANALYSIS_OUTPUT_DIR)
    fold_ids = [f.fold_id for f in report.folds]

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar(fold_ids, report.r2_values, color="steelblue", alpha=0.85)
    ax.axhline(
        report.mean_r2,
        color="crimson",
        linestyle="--",
        linewidth=1.5,
        label=f"Mean R² = {report.mean_r2:.3f}",
    )
    ax.set_xticks(fold_ids)
    ax.set_xlabel("Fold")
    ax.set_ylabel("Held-out R² (log10 scale)")
    ax.set_title(f"{report.k}-fold cross-validation (seed={report.seed})")
    ax.grid(True, axis="y", linestyle="--", alpha=0.3)
    ax.legend(frameon=False)
    fig.tight_layout()

    return _save_figure(fig, FOLD_R2_PNG_NAME, store)


__all__ = [
    "ANALYSIS_OUTPUT_DIR",
    "CV_SUMMARY_CSV_NAME",
    "FIT_SUMMARY_CSV_NAME",
    "SCATTER_PNG_NAME",
    "FOLD_R2_PNG_NAME",
    "DISPLAY_DECIMALS",
    "build_cross_validation_table",
    "build_in_sample_table",
    "write_cross_validation_summary",
    "write_in_sample_summary",
    "build_predictor_vs_response_scatter",
    "build_fold_r2_chart",
]
