import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from modeling import Dataset, Observation  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_metadata(tmp_path, monkeypatch):
    path = tmp_path / "metadata" / "runs.json"
    monkeypatch.setenv("METADATA_LOCAL_FILE", str(path))
    return path


def make_log_linear_dataset(n: int, intercept: float = 4.0, slope: float = -0.05) -> Dataset:
    """Noiseless response = 10 ** (intercept + slope * x), x = 0..n-1."""
    return Dataset(
        tuple(
            Observation(f"C{i:03d}", float(i), 10 ** (intercept + slope * i))
            for i in range(n)
        ),
        unique_countries=True,
    )


@pytest.fixture
def log_linear_30() -> Dataset:
    return make_log_linear_dataset(30)
