"""Minimal host vault: pro-rata share issuance driving a single strategy.

The vault mints and burns ownership shares, keeps the last reported total assets,
and calls the strategy's extension points around deposits, withdrawals, and
reports. Profits and losses are recognized immediately at report time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from yield_adapter.core.clock import Clock, SystemClock
from yield_adapter.core.utils import mul_div
from yield_adapter.venue.errors import Unauthorized, VaultShutdown, WithdrawLimitExceeded
from yield_adapter.venue.ledger import AssetLedger


@dataclass(frozen=True)
class ReportResult:
    profit: int
    loss: int
    total_assets: int
    reported_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profit": self.profit,
            "loss": self.loss,
            "total_assets": self.total_assets,
            "reported_at": self.reported_at,
        }


class SimpleVault:
    """`VaultHost` implementation holding depositor shares for one strategy."""

    def __init__(self, ledger: AssetLedger, *, management: str, clock: Optional[Clock] = None) -> None:
        self.ledger = ledger
        self.management = management
        self.clock = clock or SystemClock()
        self.strategy: Optional[Any] = None
        self.balances: Dict[str, int] = {}
        self.total_supply: int = 0
        self._total_assets: int = 0
        self._shutdown: bool = False
        self.last_report: Optional[ReportResult] = None
        self._lock = threading.RLock()

    def attach_strategy(self, strategy: Any) -> None:
        if self.strategy is not None:
            raise ValueError("Vault already has a strategy attached.")
        self.strategy = strategy

    # ------------------------------------------------------------------ #
    # VaultHost
    # ------------------------------------------------------------------ #
    def total_idle(self) -> int:
        return self.ledger.balance_of(self._strategy().address)

    def total_debt(self) -> int:
        return max(0, self._total_assets - self.total_idle())

    def total_assets(self) -> int:
        return self._total_assets

    def is_shutdown(self) -> bool:
        return self._shutdown

    def is_management(self, caller: str) -> bool:
        return bool(caller) and caller == self.management

    # ------------------------------------------------------------------ #
    # Depositor flows
    # ------------------------------------------------------------------ #
    def deposit(self, account: str, assets: int) -> int:
        """Take `assets` from `account`, mint shares, and hand the idle balance to the strategy."""
        strategy = self._strategy()
        assets = int(assets)
        with self._lock:
            if self._shutdown:
                raise VaultShutdown("shutdown", {"operation": "deposit"})
            if assets <= 0:
                raise ValueError("deposit amount must be positive")
            shares = self.convert_to_shares(assets)
            if shares <= 0:
                raise ValueError("deposit too small to mint shares")

            self.ledger.transfer(account, strategy.address, assets)
            self.balances[account] = self.balance_of(account) + shares
            self.total_supply += shares
            self._total_assets += assets
            try:
                strategy.deploy(self.total_idle())
            except Exception:
                # undo the deposit so the whole call has no effect
                self._total_assets -= assets
                self.total_supply -= shares
                self.balances[account] -= shares
                self.ledger.transfer(strategy.address, account, assets)
                raise
        logging.info("Deposit: %s assets from %s for %s shares.", assets, account, shares)
        return shares

    def withdraw(self, account: str, assets: int, *, receiver: Optional[str] = None) -> Dict[str, int]:
        """Burn shares for `assets`, recalling from the strategy when idle is short.

        A shortfall between the requested and recovered amount is booked as a loss
        borne by the withdrawing account.
        """
        strategy = self._strategy()
        assets = int(assets)
        if assets <= 0:
            raise ValueError("withdraw amount must be positive")
        with self._lock:
            limit = strategy.withdraw_limit(account)
            if assets > limit:
                raise WithdrawLimitExceeded("withdraw_limit", {"requested": assets, "limit": limit})
            shares = self.convert_to_shares(assets, round_up=True)
            owned = self.balance_of(account)
            if shares > owned:
                raise WithdrawLimitExceeded("insufficient_shares", {"requested_shares": shares, "owned": owned})

            idle = self.total_idle()
            if idle < assets:
                strategy.free(assets - idle)
                idle = self.total_idle()
            paid = min(idle, assets)
            loss = assets - paid

            self.balances[account] = owned - shares
            self.total_supply -= shares
            self._total_assets = max(0, self._total_assets - assets)
            self.ledger.transfer(strategy.address, receiver or account, paid)
        if loss:
            logging.warning("Withdraw for %s realized a loss of %s.", account, loss)
        logging.info("Withdraw: %s assets to %s for %s shares.", paid, receiver or account, shares)
        return {"assets": paid, "shares": shares, "loss": loss}

    def max_withdraw(self, account: str) -> int:
        with self._lock:
            return min(self.convert_to_assets(self.balance_of(account)), self._strategy().withdraw_limit(account))

    # ------------------------------------------------------------------ #
    # Keeper / management
    # ------------------------------------------------------------------ #
    def report(self) -> ReportResult:
        """Valuate the strategy and recognize the change since the last report."""
        with self._lock:
            total = int(self._strategy().valuate())
            previous = self._total_assets
            result = ReportResult(
                profit=max(0, total - previous),
                loss=max(0, previous - total),
                total_assets=total,
                reported_at=self.clock.now(),
            )
            self._total_assets = total
            self.last_report = result
        logging.info("Report: profit=%s loss=%s total_assets=%s", result.profit, result.loss, total)
        return result

    def shutdown(self, *, caller: str) -> None:
        if not self.is_management(caller):
            raise Unauthorized("not_management", {"caller": caller, "operation": "shutdown"})
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
        logging.warning("Vault shut down by %s; deposits disabled.", caller)

    def emergency_withdraw(self, amount: int, *, caller: str) -> int:
        with self._lock:
            return self._strategy().emergency_free(amount, caller=caller)

    # ------------------------------------------------------------------ #
    # Share math
    # ------------------------------------------------------------------ #
    def balance_of(self, account: str) -> int:
        return int(self.balances.get(account, 0))

    def convert_to_shares(self, assets: int, *, round_up: bool = False) -> int:
        if self.total_supply == 0 or self._total_assets == 0:
            return int(assets)
        return mul_div(assets, self.total_supply, self._total_assets, round_up=round_up)

    def convert_to_assets(self, shares: int, *, round_up: bool = False) -> int:
        if self.total_supply == 0:
            return int(shares)
        return mul_div(shares, self._total_assets, self.total_supply, round_up=round_up)

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total_assets": self._total_assets,
                "total_supply": self.total_supply,
                "total_idle": self.total_idle(),
                "total_debt": self.total_debt(),
                "is_shutdown": self._shutdown,
                "management": self.management,
                "last_report": self.last_report.to_dict() if self.last_report else None,
            }

    def _strategy(self) -> Any:
        if self.strategy is None:
            raise RuntimeError("No strategy attached to vault.")
        return self.strategy
