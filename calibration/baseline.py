"""
Spike-filtered baseline.

The operator flags anomalous months by hand (toggle on/off); the baseline is
the plain mean of whatever is left. Nothing here decides what a spike is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from core.schema import BASELINE_COLUMNS
from core.utils import require_columns

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaselineWindow:
    """Ordered (offset, observed_count) pairs over a trailing window."""

    offsets: Tuple[int, ...]
    counts: Tuple[float, ...]

    def __post_init__(self):
        if len(self.offsets) != len(self.counts):
            raise ValueError(
                f"offsets and counts differ in length: {len(self.offsets)} vs {len(self.counts)}"
            )
        if len(set(self.offsets)) != len(self.offsets):
            raise ValueError("BaselineWindow offsets must be unique.")

    @classmethod
    def from_counts(cls, counts: Sequence[float], start: int = 0) -> "BaselineWindow":
        """Offsets are positional: start, start + 1, ..."""
        return cls(
            offsets=tuple(range(start, start + len(counts))),
            counts=tuple(float(c) for c in counts),
        )

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "BaselineWindow":
        require_columns(frame, BASELINE_COLUMNS)
        ordered = frame.sort_values("offset")
        return cls(
            offsets=tuple(int(o) for o in ordered["offset"]),
            counts=tuple(float(v) for v in ordered["observed_count"]),
        )

    def __len__(self) -> int:
        return len(self.offsets)

    def trailing(self, n: int) -> "BaselineWindow":
        """Last n entries."""
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        return BaselineWindow(self.offsets[-n:], self.counts[-n:])

    def to_frame(self, exclusions: AbstractSet[int] = frozenset()) -> pd.DataFrame:
        return pd.DataFrame({
            "offset": list(self.offsets),
            "observed_count": list(self.counts),
            "excluded": [o in exclusions for o in self.offsets],
        })


@dataclass
class BaselineSummary:
    average: float
    n_included: int
    n_excluded: int
    warnings: List[str] = field(default_factory=list)


def toggle_exclusion(exclusions: Iterable[int], offset: int) -> FrozenSet[int]:
    """Add offset if absent, remove it if present. Returns a new set."""
    current = set(exclusions)
    if offset in current:
        current.remove(offset)
    else:
        current.add(offset)
    return frozenset(current)


def summarize_baseline(window: BaselineWindow, exclusions: AbstractSet[int]) -> BaselineSummary:
    kept = [v for o, v in zip(window.offsets, window.counts) if o not in exclusions]
    n_excluded = len(window) - len(kept)
    summary = BaselineSummary(average=0.0, n_included=len(kept), n_excluded=n_excluded)
    if not kept:
        msg = f"all {len(window)} baseline values excluded; baseline average set to 0"
        log.warning(msg)
        summary.warnings.append(msg)
        return summary
    summary.average = float(np.mean(kept))
    return summary


def filtered_average(window: BaselineWindow, exclusions: AbstractSet[int]) -> float:
    """Mean of observed counts whose offset is not excluded (0.0 when all are excluded)."""
    return summarize_baseline(window, exclusions).average
