"""
Analysis layer
--------------

Rendering of the modeling results into report artefacts:

- cross_validation_summary.csv
- in_sample_fit_summary.csv
- predictor_vs_response_scatter.png
- cross_validation_fold_r2.png
"""

from .regression_report import (  # noqa: F401
    ANALYSIS_OUTPUT_DIR,
    CV_SUMMARY_CSV_NAME,
    DISPLAY_DECIMALS,
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
