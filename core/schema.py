from __future__ import annotations

from typing import Tuple

# Canonical cohort table columns. Loaders and validators enforce these names.
COHORT_COLUMNS: Tuple[str, ...] = (
    "month_index",
    "unit_count",
)

# Canonical baseline (observed complaints) table columns.
BASELINE_COLUMNS: Tuple[str, ...] = (
    "offset",
    "observed_count",
)

# Flat persisted parameter record, in the field order the persistence
# collaborator writes it.
PERSISTED_FIELDS: Tuple[str, ...] = (
    "movedMonths",
    "alpha",
    "beta",
    "calibrationScale",
    "cmEffectiveness",
    "cmStartIndex",
    "eolEnabled",
    "eolHorizonMonths",
    "spikeExclusionOffsets",
    "displayToggle",
)
