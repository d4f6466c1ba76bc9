"""Base abstractions shared by every venue-backed allocation strategy."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from yield_adapter.core.clock import Clock, SystemClock
from yield_adapter.venue.errors import Unauthorized
from yield_adapter.venue.ledger import AssetLedger
from yield_adapter.venue.venue_base import YieldVenue
from yield_adapter.vault.host import VaultHost


class BaseStrategy(ABC):
    """Extension points the host vault calls, plus helpers over idle/deployed funds.

    The venue reference is fixed at construction; the deployed position is never
    cached and is always re-derived from the venue's own share accounting.
    """

    description: str = ""

    def __init__(
        self,
        *,
        address: str,
        ledger: AssetLedger,
        venue: YieldVenue,
        host: VaultHost,
        clock: Optional[Clock] = None,
        state_manager: Optional[Any] = None,
    ) -> None:
        self.address = address
        self.ledger = ledger
        self._venue = venue
        self.host = host
        self.clock = clock or SystemClock()
        self.state_manager = state_manager
        self._lock = threading.RLock()

    @property
    def venue(self) -> YieldVenue:
        return self._venue

    @abstractmethod
    def name(self) -> str:
        """Return the canonical strategy identifier."""

    @abstractmethod
    def deploy(self, amount: int) -> int:
        """Place up to `amount` of idle asset into the venue; return the amount placed."""

    @abstractmethod
    def free(self, amount: int) -> int:
        """Recall `amount` of asset from the venue; return the amount actually received."""

    @abstractmethod
    def valuate(self) -> int:
        """Return idle plus deployed assets after refreshing the venue."""

    @abstractmethod
    def withdraw_limit(self, account: str) -> int:
        """Return how much `account` may withdraw right now."""

    @abstractmethod
    def emergency_free(self, amount: int, *, caller: str) -> int:
        """Manually recall funds after shutdown; return the amount received."""

    # ------------------------------------------------------------------ #
    # Shared helpers
    # ------------------------------------------------------------------ #
    def idle_balance(self) -> int:
        return self.ledger.balance_of(self.address)

    def venue_shares(self) -> int:
        return self._venue.share_balance(self.address)

    def deployed_assets(self) -> int:
        """Venue position in asset terms, rounded down, against a fresh exchange rate."""
        self._venue.refresh_accrual()
        return self._venue.shares_to_asset(self.venue_shares(), round_up=False)

    def _require_management(self, caller: str, operation: str) -> None:
        if not self.host.is_management(caller):
            logging.warning("Rejected %s from non-management caller %s", operation, caller)
            raise Unauthorized("not_management", {"caller": caller, "operation": operation})

    def _record_event(self, operation: str, *, amount: Optional[int] = None, details: Optional[Dict[str, Any]] = None) -> None:
        if self.state_manager is None:
            return
        try:
            self.state_manager.save_adapter_event(
                {
                    "adapter": self.address,
                    "operation": operation,
                    "amount": amount,
                    "logical_time": self.clock.now(),
                    "metadata": details or {},
                }
            )
        except Exception:
            logging.exception("Failed to persist adapter event %s.", operation)
