"""
Calibration factor: observed baseline / uncalibrated reference forecast.

The reference is conventionally the history-only, no-intervention forecast for
the current month. The factor is clamped to bounds so that a noisy or tiny
reference cannot blow the whole forecast up (or flatten it). It is applied by
the caller on every later query until the caller recalibrates.
"""

from __future__ import annotations

import logging
from typing import Tuple

from core.utils import clamp

log = logging.getLogger(__name__)

DEFAULT_BOUNDS: Tuple[float, float] = (0.2, 5.0)


def derive_factor(
    observed_baseline: float,
    reference_forecast: float,
    bounds: Tuple[float, float] = DEFAULT_BOUNDS,
) -> float:
    lo, hi = bounds
    if not reference_forecast > 0:
        log.warning(
            "calibration reference forecast is %r (not > 0); keeping factor 1.0",
            reference_forecast,
        )
        return 1.0
    raw = float(observed_baseline) / float(reference_forecast)
    factor = clamp(raw, lo, hi)
    if factor != raw:
        log.warning("calibration factor %.4f clamped to %.4f", raw, factor)
    else:
        log.info("calibration factor %.4f (observed=%.4f, reference=%.4f)",
                 factor, observed_baseline, reference_forecast)
    return factor
