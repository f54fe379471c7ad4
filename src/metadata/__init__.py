"""
Metadata module
---------------

Local JSON run registry. Every preparation and analysis run is recorded
with the parameters that reproduce it (source tables, mode, seed,
min_per_fold) and its outcome (status, row count, summary figures).

Main functions:
- start_run(run_scope, parameters)
- end_run(run_id, ...)
- get_last_run(run_scope)
- list_runs(run_scope)

Example (local):

    from metadata import start_run, end_run, ANALYSIS_SCOPE

    run_id = start_run(ANALYSIS_SCOPE, {"seed": 42, "min_per_fold": 10})
    # ... run the analysis ...
    end_run(run_id, status=\"SUCCESS\", rows_processed=180, summary={\"k\": 18})
"""

from .store import (
    DEFAULT_METADATA_FILE,
    METADATA_LOCAL_FILE_ENV,
    STATUS_FAILED,
    STATUS_RUNNING,
    STATUS_SUCCESS,
    end_run,
    get_last_run,
    list_runs,
    reset_local_store,
    start_run,
)

DATASET_PREPARE_SCOPE = "dataset_prepare"
ANALYSIS_SCOPE = "analysis"

__all__ = [
    "DEFAULT_METADATA_FILE",
    "METADATA_LOCAL_FILE_ENV",
    "STATUS_RUNNING",
    "STATUS_SUCCESS",
    "STATUS_FAILED",
    "DATASET_PREPARE_SCOPE",
    "ANALYSIS_SCOPE",
    "start_run",
    "end_run",
    "get_last_run",
    "list_runs",
    "reset_local_store",
]
