"""
JSON-file run registry.

Layout of the file:

    {"runs": [<run record>, ...]}

with one record per preparation or analysis run:

    run_id          uuid4 string
    run_scope       "dataset_prepare" | "analysis"
    start_ts        ISO 8601, UTC
    end_ts          ISO 8601, UTC, or null while RUNNING
    status          RUNNING | SUCCESS | FAILED
    rows_processed  observations the run worked on, or null
    parameters      inputs that reproduce the run (tables, mode, seed, ...)
    summary         result figures (k, mean_r2, location, ...)
    error_message   str(exception) for FAILED runs, else null

Records are appended in start order, so "last" means most recently started.
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

RunRecord = Dict[str, Any]

# Points the registry somewhere else (tests, a shared runs directory)
METADATA_LOCAL_FILE_ENV = "METADATA_LOCAL_FILE"

DEFAULT_METADATA_FILE = Path("local_metadata.json")

STATUS_RUNNING = "RUNNING"
STATUS_SUCCESS = "SUCCESS"
STATUS_FAILED = "FAILED"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _registry_path() -> Path:
    override = os.getenv(METADATA_LOCAL_FILE_ENV)
    return Path(override) if override else DEFAULT_METADATA_FILE


def _read_runs() -> List[RunRecord]:
    path = _registry_path()
    if not path.exists():
        return []

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Metadata file {path} is corrupted") from exc

    runs = payload.get("runs", []) if isinstance(payload, dict) else None
    if not isinstance(runs, list):
        raise RuntimeError(f"Metadata file {path} is not a run registry (expected {{'runs': [...]}})")
    return runs


def _write_runs(runs: List[RunRecord]) -> None:
    """Replace the registry file in one step so readers never see half a write."""
    path = _registry_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    staging = path.with_name(path.name + ".tmp")
    staging.write_text(
        json.dumps({"runs": runs}, indent=2, ensure_ascii=False, default=str),
        encoding="utf-8",
    )
    os.replace(staging, path)


def _in_scope(runs: List[RunRecord], run_scope: Optional[str]) -> List[RunRecord]:
    if run_scope is None:
        return list(runs)
    return [run for run in runs if run.get("run_scope") == run_scope]


def start_run(run_scope: str, parameters: Optional[Dict[str, Any]] = None) -> str:
    """
    Append a RUNNING record for `run_scope` and return its run_id.

    `parameters` should hold everything needed to reproduce the run
    (source tables, mode, seed, min_per_fold, year window).
    """
    runs = _read_runs()
    run_id = str(uuid4())
    runs.append(
        {
            "run_id": run_id,
            "run_scope": run_scope,
            "start_ts": _utc_timestamp(),
            "end_ts": None,
            "status": STATUS_RUNNING,
            "rows_processed": None,
            "parameters": dict(parameters or {}),
            "summary": {},
            "error_message": None,
        }
    )
    _write_runs(runs)
    return run_id


def end_run(
    run_id: str,
    status: str = STATUS_SUCCESS,
    *,
    rows_processed: Optional[int] = None,
    summary: Optional[Dict[str, Any]] = None,
    error_message: Optional[str] = None,
) -> RunRecord:
    """
    Close the run `run_id` with a final status and return the stored record.

    `summary` is merged into the record's summary; None leaves the other
    optional fields untouched. Raises KeyError for an unknown run_id.
    """
    runs = _read_runs()
    record = next((run for run in reversed(runs) if run.get("run_id") == run_id), None)
    if record is None:
        raise KeyError(f"No run found with id={run_id!r}")

    record["end_ts"] = _utc_timestamp()
    record["status"] = status
    if rows_processed is not None:
        record["rows_processed"] = int(rows_processed)
    if summary:
        record.setdefault("summary", {}).update(summary)
    if error_message is not None:
        record["error_message"] = error_message

    _write_runs(runs)
    return record


def get_last_run(run_scope: Optional[str] = None) -> Optional[RunRecord]:
    matching = _in_scope(_read_runs(), run_scope)
    return matching[-1] if matching else None


def list_runs(run_scope: Optional[str] = None) -> List[RunRecord]:
    return _in_scope(_read_runs(), run_scope)


def reset_local_store() -> int:
    """Drop every run from the registry. Returns how many were removed."""
    removed = len(_read_runs())
    _write_runs([])
    return removed
