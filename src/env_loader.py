from __future__ import annotations

import os
from pathlib import Path


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def load_dotenv_if_present(path: str | None = None) -> None:
    """
    Lightweight .env loader used for local runs of the analysis.

    - Reads KEY=VALUE pairs from the given file (default: ".env" in CWD).
    - Ignores empty lines and comments starting with "#".
    - Accepts an optional leading "export " and quoted values.
    - Does *not* overwrite variables that are already present in os.environ,
      so a shell `CV_SEED=7 python -m local_pipeline` still wins.
    """
    env_path = Path(path or ".env")
    if not env_path.exists():
        return

    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = _strip_quotes(value.strip())
        if not key:
            continue
        if key not in os.environ:
            os.environ[key] = value


__all__ = ["load_dotenv_if_present"]
