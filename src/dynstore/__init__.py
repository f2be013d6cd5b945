"""Dynamic catchment storage from hourly precipitation, discharge and temperature.

This package isolates rain-free recession limbs in a streamflow record, fits
the discharge sensitivity function g(Q) relating discharge to its rate of
recession, integrates direct storage from g(Q) and closes the water balance
for indirect storage. The main interface is the StorageEstimator class.

Example:
    >>> from dynstore import StorageEstimator
    >>> estimator = StorageEstimator.from_file(
    ...     "readings.parquet", catchment_area_m2=2.5e7, latitude_deg=46.5
    ... )
    >>> results = estimator.compute_storage()
    >>> estimator.to_parquet("storage.parquet")
"""

from .config import PipelineConfig
from .estimator import StorageEstimator
from .evapotranspiration import extraterrestrial_radiation
from .exceptions import (
    DataGapError,
    DomainError,
    InsufficientDataError,
    PreconditionError,
    StorageError,
)
from .regression import SensitivityModel

__all__ = [
    "DataGapError",
    "DomainError",
    "InsufficientDataError",
    "PipelineConfig",
    "PreconditionError",
    "SensitivityModel",
    "StorageError",
    "StorageEstimator",
    "extraterrestrial_radiation",
]
