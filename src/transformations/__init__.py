"""
Transformations layer
----------------------

Modules that turn raw indicator tables (CSV) into the cleaned
(country, predictor, response) dataset consumed by `modeling`.
"""

from .country_mapping import (  # noqa: F401
    attach_country_key,
    choose_join_key,
    normalize_country_name,
)
from .indicator_table import (  # noqa: F401
    WORLD_BANK_AGGREGATE_CODES,
    load_indicator_table,
    standardize_indicator_frame,
)
from .prepared_dataset import (  # noqa: F401
    PREPARED_BASE_PREFIX,
    AnalysisMode,
    PreparedDataset,
    build_dataset,
    build_prepared_frame,
    prepare_dataset,
    save_prepared_frame,
)

__all__ = [
    "WORLD_BANK_AGGREGATE_CODES",
    "PREPARED_BASE_PREFIX",
    "AnalysisMode",
    "PreparedDataset",
    "normalize_country_name",
    "choose_join_key",
    "attach_country_key",
    "load_indicator_table",
    "standardize_indicator_frame",
    "build_prepared_frame",
    "build_dataset",
    "save_prepared_frame",
    "prepare_dataset",
]
