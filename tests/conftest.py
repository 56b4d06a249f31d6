import os
import sys

import pytest

# ensure workspace root is on sys.path so the project packages import without installation
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from calibration.baseline import BaselineWindow
from cohorts.ledger import Cohort
from core.config import ForecastConfig, HazardParams, InterventionPolicy
from data_prep.sample import sample_ledger
from engine.runner import ForecastRunner

QUIET_MONTHS = [8, 10, 9, 12, 11, 10, 9, 13, 12, 11, 10, 9]


@pytest.fixture
def params():
    return HazardParams(alpha=60.0, beta=3.5)


@pytest.fixture
def neutral():
    return InterventionPolicy.neutral()


@pytest.fixture
def ledger():
    return sample_ledger()


@pytest.fixture
def runner(ledger):
    return ForecastRunner(ledger, ForecastConfig())


@pytest.fixture
def quiet_window():
    return BaselineWindow.from_counts(QUIET_MONTHS)


@pytest.fixture
def two_cohorts():
    return [Cohort(month_index=-6, unit_count=500), Cohort(month_index=0, unit_count=800)]
