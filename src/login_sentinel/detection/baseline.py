"""Hour-of-day baseline for the unusual-time rule.

Summarizes a user's historical login hours as (mean, standard deviation).

LINEAR treats hour-of-day as a flat 0-23 scale, which is known to be
wrong around midnight: a user who logs in at 23:00 and 01:00 gets a mean
near 12:00 and a large spread. It stays the default because it is the
established alerting behavior. CIRCULAR maps hours onto the unit circle
and uses the mean resultant vector instead.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

import numpy as np

from login_sentinel.common.constants import DetectionConstants
from login_sentinel.core.types import HourStatistic

HOURS_IN_DAY = DetectionConstants.HOURS_IN_DAY
_RADIANS_PER_HOUR = 2 * math.pi / HOURS_IN_DAY
_EPSILON = 1e-12


@dataclass(frozen=True)
class HourBaseline:
    """Summary statistics of historical login hours.

    Attributes:
        mean: Mean login hour (0-24)
        std_dev: Population standard deviation, in hours
        sample_count: Number of historical logins summarized
        method: Linear or circular statistics
    """
    mean: float
    std_dev: float
    sample_count: int
    method: HourStatistic = HourStatistic.LINEAR

    def deviation(self, hour: int) -> float:
        """Distance in hours between `hour` and the baseline mean."""
        diff = abs(hour - self.mean)
        if self.method == HourStatistic.CIRCULAR:
            diff = diff % HOURS_IN_DAY
            return min(diff, HOURS_IN_DAY - diff)
        return diff

    def is_unusual(self, hour: int, std_multiplier: float) -> bool:
        return self.deviation(hour) > std_multiplier * self.std_dev


def utc_hour(timestamp: datetime) -> int:
    """Hour of day in UTC; naive timestamps are taken to be UTC already."""
    if timestamp.tzinfo is None:
        return timestamp.hour
    return timestamp.astimezone(timezone.utc).hour


def compute_hour_baseline(
    timestamps: Iterable[datetime],
    min_samples: int = DetectionConstants.UNUSUAL_TIME_MIN_SAMPLES,
    method: HourStatistic = HourStatistic.LINEAR,
) -> Optional[HourBaseline]:
    """Compute the login-hour baseline.

    Args:
        timestamps: Historical successful login timestamps
        min_samples: Minimum number of samples required
        method: LINEAR (arithmetic) or CIRCULAR (vector mean of angles)

    Returns:
        HourBaseline, or None when there is insufficient data. Callers
        skip the rule on None; it is not an error.
    """
    hours = np.array([utc_hour(ts) for ts in timestamps], dtype=np.float64)
    if hours.size < min_samples or hours.size == 0:
        return None

    if method == HourStatistic.CIRCULAR:
        return _circular_baseline(hours)

    return HourBaseline(
        mean=float(np.mean(hours)),
        std_dev=float(np.std(hours)),  # population variance (ddof=0)
        sample_count=int(hours.size),
        method=HourStatistic.LINEAR,
    )


def _circular_baseline(hours: np.ndarray) -> HourBaseline:
    angles = hours * _RADIANS_PER_HOUR
    c = float(np.mean(np.cos(angles)))
    s = float(np.mean(np.sin(angles)))
    resultant = min(1.0, math.hypot(c, s))

    if resultant < _EPSILON:
        # Uniformly spread history: no meaningful centre or spread.
        return HourBaseline(
            mean=0.0,
            std_dev=math.inf,
            sample_count=int(hours.size),
            method=HourStatistic.CIRCULAR,
        )

    mean_angle = math.atan2(s, c) % (2 * math.pi)
    circular_std = math.sqrt(max(0.0, -2.0 * math.log(resultant)))

    return HourBaseline(
        mean=(mean_angle / _RADIANS_PER_HOUR) % HOURS_IN_DAY,
        std_dev=circular_std / _RADIANS_PER_HOUR,
        sample_count=int(hours.size),
        method=HourStatistic.CIRCULAR,
    )
