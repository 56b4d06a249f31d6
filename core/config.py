"""
Model configuration and intervention parameters.

Everything here is frozen: a "change" to a parameter produces a new object.
Hazard and intervention parameters validate themselves on construction so a
malformed value never reaches the forecast math.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Tuple

from .exceptions import InvalidParameter


@dataclass(frozen=True)
class ForecastConfig:
    # future production placeholder
    average_window: int = 6          # trailing historical cohorts averaged for projection
    projection_horizon: int = 30     # projected cohorts 1..horizon
    perturbation_amplitude: float = 12.0
    perturbation_frequency: float = 0.7

    # calibration
    calibration_bounds: Tuple[float, float] = (0.2, 5.0)

    # output controls
    curve_max_age: int = 60
    series_length: int = 12
    output_offset: int = 14          # representative "months ahead" for the output summary
    bin_range: Tuple[int, int] = (-17, 30)  # fixed month bins for stable axes

    def __post_init__(self):
        if self.average_window < 1:
            raise ValueError(f"average_window must be >= 1, got {self.average_window}")
        if self.projection_horizon < 0:
            raise ValueError(f"projection_horizon must be >= 0, got {self.projection_horizon}")
        lo, hi = self.calibration_bounds
        if not 0 < lo <= hi:
            raise ValueError(f"calibration_bounds must satisfy 0 < lo <= hi, got {self.calibration_bounds}")
        if self.bin_range[0] > self.bin_range[1]:
            raise ValueError(f"bin_range is empty: {self.bin_range}")


@dataclass(frozen=True)
class HazardParams:
    """
    Weibull aging curve parameters.

    alpha is the scale in months (characteristic life), beta the shape.
    beta > 1 gives a wear-out curve where hazard grows with age.
    """

    alpha: float = 60.0
    beta: float = 3.5

    def __post_init__(self):
        validate_hazard_params(self.alpha, self.beta)


def validate_hazard_params(alpha: float, beta: float) -> None:
    for name, val in (("alpha", alpha), ("beta", beta)):
        if not math.isfinite(float(val)) or float(val) <= 0:
            raise InvalidParameter(f"{name} must be a finite value > 0, got {val!r}")


@dataclass(frozen=True)
class InterventionPolicy:
    """
    Countermeasure cutoff and end-of-life horizon.

    cm_factor is the remaining risk proportion for cohorts produced strictly
    after cm_start_index (0.70 means a 30% reduction). When eol_enabled, no
    cohort with month_index > eol_horizon is produced or counted.
    """

    cm_start_index: int = -6
    cm_factor: float = 1.0
    eol_enabled: bool = False
    eol_horizon: int = 18

    def __post_init__(self):
        if not 0.0 <= float(self.cm_factor) <= 1.0:
            raise InvalidParameter(f"cm_factor must be in [0, 1], got {self.cm_factor!r}")

    @classmethod
    def neutral(cls) -> "InterventionPolicy":
        """No countermeasure, no end-of-life."""
        return cls(cm_factor=1.0, eol_enabled=False)

    def cm_applies(self, month_index: int) -> bool:
        return month_index > self.cm_start_index

    def beyond_eol(self, month_index: int) -> bool:
        return self.eol_enabled and month_index > self.eol_horizon

    def with_changes(self, **changes) -> "InterventionPolicy":
        return replace(self, **changes)
