from __future__ import annotations

import io
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

import pandas as pd


class StorageAdapter(ABC):
    """
    Abstraction over where tables and report artefacts live.

    Implementations map logical keys such as
    "processed/prepared_dataset/country_mean.parquet" to physical locations.
    """

    @abstractmethod
    def write_raw(self, key: str, content: bytes) -> str:
        """
        Persist arbitrary bytes at the given key.

        Returns the fully-qualified location string (for tracing/logging).
        """

    @abstractmethod
    def read_raw(self, key: str) -> bytes:
        """Read raw bytes previously stored at the given key."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether something is stored at the given key."""

    @abstractmethod
    def list_keys(self, prefix: str) -> List[str]:
        """List logical keys under the given prefix."""

    def write_parquet(self, df: pd.DataFrame, key: str) -> str:
        buffer = io.BytesIO()
        df.to_parquet(buffer, index=False)
        return self.write_raw(key, buffer.getvalue())

    def read_parquet(self, key: str) -> pd.DataFrame:
        return pd.read_parquet(io.BytesIO(self.read_raw(key)))

    def write_csv(self, df: pd.DataFrame, key: str) -> str:
        buffer = io.StringIO()
        df.to_csv(buffer, index=False)
        return self.write_raw(key, buffer.getvalue().encode("utf-8"))

    def read_text(self, key: str, encoding: str = "utf-8-sig") -> str:
        # utf-8-sig: World Bank CSV exports start with a BOM
        return self.read_raw(key).decode(encoding)


class LocalStorageAdapter(StorageAdapter):
    """
    Local filesystem-backed storage adapter.

    Keys are treated as relative paths under a root directory.
    Example:
        root_dir = Path("analysis")
        key      = "cross_validation_summary.csv"
        -> actual path: ./analysis/cross_validation_summary.csv

    Absolute keys bypass the root, so input tables can be read from
    anywhere on disk.
    """

    def __init__(self, root_dir: Path | str = ".") -> None:
        self.root_dir = Path(root_dir)

    def _path(self, key: str) -> Path:
        return self.root_dir / key

    def _resolve(self, key: str) -> Path:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def write_raw(self, key: str, content: bytes) -> str:
        path = self._resolve(key)
        with path.open("wb") as f:
            f.write(content)
        return str(path)

    def read_raw(self, key: str) -> bytes:
        path = self._path(key)
        if not path.exists():
            raise FileNotFoundError(f"No file stored at {path}")
        with path.open("rb") as f:
            return f.read()

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def list_keys(self, prefix: str) -> List[str]:
        base = self.root_dir / prefix
        if not base.exists():
            return []

        keys: List[str] = []
        for path in base.rglob("*"):
            if path.is_file():
                rel = path.relative_to(self.root_dir)
                keys.append(str(rel).replace(os.sep, "/"))
        return sorted(keys)
