"""Per-user detection rules."""

from typing import List, Optional

from login_sentinel.detection.config import DetectionConfig
from login_sentinel.detection.rules.base import DetectionRule
from login_sentinel.detection.rules.impossible_travel import ImpossibleTravelRule
from login_sentinel.detection.rules.new_device import NewDeviceRule
from login_sentinel.detection.rules.new_location import NewLocationRule
from login_sentinel.detection.rules.unusual_time import UnusualTimeRule


def default_rules(config: Optional[DetectionConfig] = None) -> List[DetectionRule]:
    """The standard rule set, in persistence order."""
    return [
        ImpossibleTravelRule(config),
        NewDeviceRule(config),
        NewLocationRule(config),
        UnusualTimeRule(config),
    ]


__all__ = [
    "DetectionRule",
    "ImpossibleTravelRule",
    "NewDeviceRule",
    "NewLocationRule",
    "UnusualTimeRule",
    "default_rules",
]
