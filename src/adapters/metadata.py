from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from metadata import (  # type: ignore
    end_run as local_end_run,
    get_last_run as local_get_last_run,
    list_runs as local_list_runs,
    start_run as local_start_run,
)


class MetadataAdapter(ABC):
    """
    Abstraction over the run registry.
    """

    @abstractmethod
    def start_run(self, run_scope: str, parameters: Optional[Dict[str, Any]] = None) -> str:
        """Register the start of a run and return its identifier."""

    @abstractmethod
    def end_run(
        self,
        run_id: str,
        status: str = "SUCCESS",
        *,
        rows_processed: Optional[int] = None,
        summary: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Mark a run as finished and persist its final state."""

    @abstractmethod
    def get_last_run(self, run_scope: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Most recent run, optionally filtered by scope."""

    @abstractmethod
    def list_runs(self, run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
        """List runs, optionally filtered by scope."""


class LocalMetadataAdapter(MetadataAdapter):
    """
    Adapter backed by the local JSON store in `src/metadata`.
    """

    def start_run(self, run_scope: str, parameters: Optional[Dict[str, Any]] = None) -> str:
        return local_start_run(run_scope, parameters)

    def end_run(
        self,
        run_id: str,
        status: str = "SUCCESS",
        *,
        rows_processed: Optional[int] = None,
        summary: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        return local_end_run(
            run_id,
            status=status,
            rows_processed=rows_processed,
            summary=summary,
            error_message=error_message,
        )

    def get_last_run(self, run_scope: Optional[str] = None) -> Optional[Dict[str, Any]]:
        return local_get_last_run(run_scope)

    def list_runs(self, run_scope: Optional[str] = None) -> List[Dict[str, Any]]:
        return local_list_runs(run_scope)
