"""Shared adapter/venue error types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AdapterError(Exception):
    """Base class for deterministic rejections raised by the adapter stack.

    Attributes
    ----------
    reason:
        Short machine-friendly reason (e.g. "locked", "frozen", "insufficient_liquidity").
    details:
        Optional structured context for logs/UI.
    """

    reason: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:  # pragma: no cover
        base = str(self.reason or "rejected")
        if self.details:
            return f"{base}: {self.details}"
        return base


class Locked(AdapterError):
    """Funds were requested from the venue before the unlock time."""


class Frozen(AdapterError):
    """The unlock time was changed after it had been frozen."""


class Unauthorized(AdapterError):
    """A management-only operation was invoked by another caller."""


class NotShutdown(AdapterError):
    """Emergency recall attempted while the host vault is still live."""


class VenueRejected(AdapterError):
    """The yield venue refused a deposit, redeem, or conversion."""


class TransferFailed(AdapterError):
    """An asset ledger transfer could not be honored."""


class WithdrawLimitExceeded(AdapterError):
    """The host refused a withdrawal above the adapter's current limit."""


class VaultShutdown(AdapterError):
    """The host vault no longer accepts deposits."""
