"""
Future production placeholder.

Projected cohort sizes are NOT a forecast of production. They are the trailing
average of recent historical cohorts nudged by a fixed periodic term so that
the future bars are not all identical. Any callable month_index -> float can be
plugged in instead, as long as it is deterministic and stateless: the same
parameters must always reproduce the same projected cohorts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

Perturbation = Callable[[int], float]


@dataclass(frozen=True)
class SinusoidalPerturbation:
    """amplitude * sin(month_index * frequency)"""

    amplitude: float = 12.0
    frequency: float = 0.7

    def __call__(self, month_index: int) -> float:
        return self.amplitude * math.sin(month_index * self.frequency)


def no_perturbation(month_index: int) -> float:
    """Flat projection: every future cohort equals the trailing average."""
    return 0.0
