"""Threshold-gated, time-locked lender placing vault capital into a single venue."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from yield_adapter.core.clock import Clock
from yield_adapter.strategy.deployment_gate import evaluate_deployment_gate
from yield_adapter.strategy.strategy_base import BaseStrategy
from yield_adapter.strategy.withdrawal_lock import WithdrawalLock
from yield_adapter.venue.errors import Locked, NotShutdown
from yield_adapter.venue.ledger import AssetLedger
from yield_adapter.venue.venue_base import YieldVenue
from yield_adapter.vault.host import VaultHost


class ThresholdLockedLender(BaseStrategy):
    """Keeps deposits idle until the deployable balance first exceeds a threshold,
    then lends everything to the venue; recalls are refused before the unlock time.

    Read accessors: `deployment_threshold`, `threshold_met`, `unlock_time`, `unlock_frozen`.
    """

    description = "Lend idle assets to one venue once a minimum size is reached; recalls are time-locked."

    def __init__(
        self,
        *,
        address: str,
        ledger: AssetLedger,
        venue: YieldVenue,
        host: VaultHost,
        deployment_threshold: int,
        unlock_time: int = 0,
        clock: Optional[Clock] = None,
        state_manager: Optional[Any] = None,
    ) -> None:
        super().__init__(
            address=address,
            ledger=ledger,
            venue=venue,
            host=host,
            clock=clock,
            state_manager=state_manager,
        )
        if int(deployment_threshold) < 0:
            raise ValueError("deployment_threshold must be non-negative")
        self._deployment_threshold = int(deployment_threshold)
        self._threshold_met = False
        self._withdrawal_lock = WithdrawalLock(unlock_time)

    def name(self) -> str:
        return "threshold_locked_lender"

    # ------------------------------------------------------------------ #
    # Read accessors
    # ------------------------------------------------------------------ #
    @property
    def deployment_threshold(self) -> int:
        return self._deployment_threshold

    @property
    def threshold_met(self) -> bool:
        return self._threshold_met

    @property
    def unlock_time(self) -> int:
        return self._withdrawal_lock.unlock_time

    @property
    def unlock_frozen(self) -> bool:
        return self._withdrawal_lock.frozen

    # ------------------------------------------------------------------ #
    # Host extension points
    # ------------------------------------------------------------------ #
    def deploy(self, amount: int) -> int:
        with self._lock:
            decision = evaluate_deployment_gate(
                amount=amount,
                threshold=self._deployment_threshold,
                threshold_met=self._threshold_met,
            )
            if not decision.deploy:
                logging.debug("Deployment skipped: %s", "; ".join(decision.reasons))
                return 0
            # the latch is stored before the funds move and only committed in memory after
            if decision.latch:
                self._persist_state(threshold_met=True)
            try:
                self.venue.place_funds(decision.amount, self.address, sender=self.address)
            except Exception:
                if decision.latch:
                    self._persist_state(threshold_met=False)
                raise
            if decision.latch:
                self._threshold_met = True
                logging.info(
                    "Deployment threshold met (%s > %s); capital deployment enabled.",
                    decision.amount,
                    self._deployment_threshold,
                )
            logging.info("Deployed %s to venue.", decision.amount)
            self._record_event("deploy", amount=decision.amount, details=decision.to_dict())
            return decision.amount

    def free(self, amount: int) -> int:
        with self._lock:
            now = self.clock.now()
            try:
                self._withdrawal_lock.require_unlocked(now)
            except Locked:
                logging.warning("Refused to free %s before unlock time %s (now %s).", amount, self.unlock_time, now)
                raise
            self.venue.refresh_accrual()
            shares = self.venue.asset_to_shares(int(amount), round_up=False)
            if shares <= 0:
                return 0
            before = self.idle_balance()
            self.venue.redeem_shares(shares, self.address, self.address)
            received = self.idle_balance() - before
            logging.info("Freed %s (requested %s) by redeeming %s venue shares.", received, amount, shares)
            self._record_event("free", amount=received, details={"requested": int(amount), "shares": shares})
            return received

    def valuate(self) -> int:
        with self._lock:
            idle = self.idle_balance()
            deployed = self.deployed_assets()
            total = idle + deployed
            self._record_event("valuate", amount=total, details={"idle": idle, "deployed": deployed})
            return total

    def withdraw_limit(self, account: str) -> int:
        with self._lock:
            idle = self.idle_balance()
            if not self._withdrawal_lock.is_unlocked(self.clock.now()):
                return idle
            return idle + self.venue.redeemable_assets(self.address)

    def emergency_free(self, amount: int, *, caller: str) -> int:
        with self._lock:
            self._require_management(caller, "emergency_free")
            if not self.host.is_shutdown():
                raise NotShutdown("not_shutdown", {"caller": caller})
            self.venue.refresh_accrual()
            wanted = self.venue.asset_to_shares(int(amount), round_up=True)
            shares = min(wanted, self.venue_shares())
            if shares <= 0:
                return 0
            before = self.idle_balance()
            self.venue.redeem_shares(shares, self.address, self.address)
            received = self.idle_balance() - before
            logging.warning(
                "Emergency freed %s (requested %s) by redeeming %s of %s wanted venue shares.",
                received,
                amount,
                shares,
                wanted,
            )
            self._record_event(
                "emergency_free",
                amount=received,
                details={"requested": int(amount), "shares": shares, "wanted_shares": wanted, "caller": caller},
            )
            return received

    # ------------------------------------------------------------------ #
    # Management configuration
    # ------------------------------------------------------------------ #
    def set_unlock_time(self, new_time: int, *, caller: str) -> None:
        with self._lock:
            self._require_management(caller, "set_unlock_time")
            self._withdrawal_lock.require_not_frozen(new_time)
            self._persist_state(unlock_time=int(new_time))
            previous = self._withdrawal_lock.set_unlock_time(new_time)
            logging.info("Unlock time changed %s -> %s by %s.", previous, self.unlock_time, caller)
            self._record_event("set_unlock_time", details={"previous": previous, "unlock_time": self.unlock_time})

    def freeze_unlock(self, *, caller: str) -> None:
        with self._lock:
            self._require_management(caller, "freeze_unlock")
            if self.unlock_frozen:
                return
            self._persist_state(unlock_frozen=True)
            self._withdrawal_lock.freeze()
            logging.info("Unlock time frozen at %s by %s.", self.unlock_time, caller)
            self._record_event("freeze_unlock", details={"unlock_time": self.unlock_time})

    # ------------------------------------------------------------------ #
    # Snapshots and persistence
    # ------------------------------------------------------------------ #
    def position_snapshot(self) -> Dict[str, Any]:
        """Return idle/deployed totals and configuration for dashboards."""
        with self._lock:
            idle = self.idle_balance()
            deployed = self.deployed_assets()
            return {
                "strategy": self.name(),
                "address": self.address,
                "idle": idle,
                "deployed": deployed,
                "venue_shares": self.venue_shares(),
                "total": idle + deployed,
                "deployment_threshold": self._deployment_threshold,
                "threshold_met": self._threshold_met,
                "unlock_time": self.unlock_time,
                "unlock_frozen": self.unlock_frozen,
                "unlocked": self._withdrawal_lock.is_unlocked(self.clock.now()),
            }

    def rehydrate(self) -> None:
        """Restore latches and unlock time persisted by a previous process.

        Latches only move forward: a stored `false` never clears a set latch.
        """
        if self.state_manager is None:
            return
        params = self.state_manager.load_parameters().get(self._state_key(), {})
        if not isinstance(params, dict):
            return
        with self._lock:
            if bool(params.get("threshold_met")):
                self._threshold_met = True
            if "unlock_time" in params and not self.unlock_frozen:
                self._withdrawal_lock.set_unlock_time(int(params["unlock_time"]))
            if bool(params.get("unlock_frozen")):
                self._withdrawal_lock.freeze()
            logging.info(
                "Rehydrated adapter %s: threshold_met=%s unlock_time=%s frozen=%s",
                self.address,
                self._threshold_met,
                self.unlock_time,
                self.unlock_frozen,
            )

    def _persist_state(self, **pending: Any) -> None:
        """Write latches and unlock time with `pending` overrides; errors propagate."""
        if self.state_manager is None:
            return
        state = {"threshold_met": self._threshold_met, **self._withdrawal_lock.to_dict()}
        state.update(pending)
        self.state_manager.save_parameters({self._state_key(): state})

    def _state_key(self) -> str:
        return f"adapter:{self.address}"
