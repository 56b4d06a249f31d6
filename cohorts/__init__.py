"""
Production cohorts — fixed historical ledger plus the projected future cohorts derived from it.
"""

from .ledger import Cohort, CohortLedger
from .projection import Perturbation, SinusoidalPerturbation, no_perturbation

__all__ = [
    "Cohort",
    "CohortLedger",
    "Perturbation",
    "SinusoidalPerturbation",
    "no_perturbation",
]
