"""Numeric constants of the recession analysis."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PipelineConfig:
    """Tunable constants shared by the pipeline stages.

    Attributes:
        smoothing_window: Trailing moving-average window (hours)
        antecedent_hours: Lookback for the antecedent rainfall mean (hours)
        rain_threshold_mm: Antecedent rainfall mean must stay below this (mm)
        min_group_length: Shortest recession group kept (hourly samples)
        strides: Candidate sampling intervals tried in ascending order (hours)
        noise_factor: Noise threshold as a fraction of mean smoothed discharge
        min_bin_points: Fewest points allowed in a bin
        min_span_fraction: Minimum bin log_q span as a fraction of the total range
    """

    smoothing_window: int = 72
    antecedent_hours: int = 24
    rain_threshold_mm: float = 0.002
    min_group_length: int = 24
    strides: tuple[int, ...] = (1, 2, 3, 4)
    noise_factor: float = 0.001
    min_bin_points: int = 45
    min_span_fraction: float = 0.01

    def __post_init__(self) -> None:
        if self.smoothing_window < 1:
            raise ValueError(f"smoothing_window must be positive, got {self.smoothing_window}")
        if self.min_group_length < 3:
            raise ValueError(f"min_group_length must be at least 3, got {self.min_group_length}")
        if not self.strides or list(self.strides) != sorted(set(self.strides)) or self.strides[0] < 1:
            raise ValueError(f"strides must be strictly ascending positive integers, got {self.strides}")
