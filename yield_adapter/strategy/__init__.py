"""Strategy layer: deployment gate, withdrawal lock, and the venue-backed lender."""

from .strategy_base import BaseStrategy  # noqa: F401
from .threshold_lender import ThresholdLockedLender  # noqa: F401

__all__ = [
    "BaseStrategy",
    "ThresholdLockedLender",
]
