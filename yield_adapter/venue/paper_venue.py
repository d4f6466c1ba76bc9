"""Paper lending venue for simulating deposits, redemptions, interest, and losses."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from yield_adapter.core.clock import Clock, SystemClock
from yield_adapter.core.utils import mul_div
from yield_adapter.venue.errors import VenueRejected
from yield_adapter.venue.ledger import AssetLedger
from yield_adapter.venue.venue_base import WAD


class PaperLendingVenue:
    """Share-based lending pool backed by an in-memory asset ledger.

    Lenders receive venue-shares priced at `(cash + total_borrows) / total_shares`.
    Interest accrues on `total_borrows` only when `refresh_accrual()` is called, so
    conversions between refreshes use a stale exchange rate on purpose.
    """

    def __init__(
        self,
        ledger: AssetLedger,
        *,
        address: str = "venue",
        clock: Optional[Clock] = None,
        rate_per_second_wad: int = 0,
        initial_exchange_rate_wad: int = WAD,
    ) -> None:
        """Store collaborators and rate assumptions; never touches real balances."""
        if initial_exchange_rate_wad <= 0:
            raise ValueError("initial_exchange_rate_wad must be positive")
        self.ledger = ledger
        self.address = address
        self.clock = clock or SystemClock()
        self.rate_per_second_wad = int(rate_per_second_wad)
        self.initial_exchange_rate_wad = int(initial_exchange_rate_wad)
        self.total_borrows: int = 0
        self.total_shares: int = 0
        self.shares: Dict[str, int] = {}
        self.paused: bool = False
        self.last_accrual: int = self.clock.now()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def place_funds(self, amount: int, recipient: str, *, sender: Optional[str] = None) -> int:
        """Pull `amount` from `sender` (defaults to `recipient`) and mint shares."""
        amount = int(amount)
        payer = sender or recipient
        self._require_active("deposit")
        if amount <= 0:
            raise VenueRejected("zero_amount", {"operation": "deposit", "amount": amount})
        minted = self.asset_to_shares(amount, round_up=False)
        if minted <= 0:
            raise VenueRejected("zero_shares", {"amount": amount})
        self.ledger.transfer(payer, self.address, amount)
        self.shares[recipient] = self.share_balance(recipient) + minted
        self.total_shares += minted
        logging.debug("Venue deposit: %s assets from %s -> %s shares for %s", amount, payer, minted, recipient)
        return minted

    def redeem_shares(self, shares: int, recipient: str, owner: str) -> int:
        """Burn `shares` from `owner` and pay the rounded-down asset value to `recipient`."""
        shares = int(shares)
        self._require_active("redeem")
        if shares <= 0:
            raise VenueRejected("zero_amount", {"operation": "redeem", "shares": shares})
        held = self.share_balance(owner)
        if shares > held:
            raise VenueRejected("insufficient_shares", {"owner": owner, "requested": shares, "held": held})
        assets = self.shares_to_asset(shares, round_up=False)
        cash = self.cash()
        if assets > cash:
            raise VenueRejected("insufficient_liquidity", {"requested_assets": assets, "cash": cash})
        self.shares[owner] = held - shares
        self.total_shares -= shares
        self.ledger.transfer(self.address, recipient, assets)
        logging.debug("Venue redeem: %s shares of %s -> %s assets to %s", shares, owner, assets, recipient)
        return assets

    def share_balance(self, holder: str) -> int:
        return int(self.shares.get(holder, 0))

    def refresh_accrual(self) -> None:
        """Accrue simple interest on outstanding borrows since the last refresh."""
        now = self.clock.now()
        elapsed = max(0, now - self.last_accrual)
        if elapsed and self.total_borrows and self.rate_per_second_wad:
            interest = mul_div(self.total_borrows, self.rate_per_second_wad * elapsed, WAD)
            self.total_borrows += interest
        self.last_accrual = now

    def shares_to_asset(self, shares: int, *, round_up: bool = False) -> int:
        if self.total_shares == 0:
            return mul_div(shares, self.initial_exchange_rate_wad, WAD, round_up=round_up)
        return mul_div(shares, self.total_assets(), self.total_shares, round_up=round_up)

    def asset_to_shares(self, assets: int, *, round_up: bool = False) -> int:
        if self.total_shares == 0:
            return mul_div(assets, WAD, self.initial_exchange_rate_wad, round_up=round_up)
        total_assets = self.total_assets()
        if total_assets <= 0:
            raise VenueRejected("no_assets", {"total_shares": self.total_shares})
        return mul_div(assets, self.total_shares, total_assets, round_up=round_up)

    def redeemable_assets(self, holder: str) -> int:
        if self.paused:
            return 0
        return min(self.shares_to_asset(self.share_balance(holder), round_up=False), self.cash())

    # ------------------------------------------------------------------ #
    # Simulation controls
    # ------------------------------------------------------------------ #
    def cash(self) -> int:
        return self.ledger.balance_of(self.address)

    def total_assets(self) -> int:
        return self.cash() + self.total_borrows

    def exchange_rate_wad(self) -> int:
        if self.total_shares == 0:
            return self.initial_exchange_rate_wad
        return mul_div(self.total_assets(), WAD, self.total_shares)

    def borrow(self, amount: int, borrower: str) -> None:
        """Lend venue cash out to `borrower`, reducing redeemable liquidity."""
        amount = int(amount)
        cash = self.cash()
        if amount <= 0 or amount > cash:
            raise VenueRejected("insufficient_liquidity", {"requested": amount, "cash": cash})
        self.refresh_accrual()
        self.ledger.transfer(self.address, borrower, amount)
        self.total_borrows += amount

    def repay(self, amount: int, payer: str) -> None:
        amount = int(amount)
        self.refresh_accrual()
        if amount <= 0 or amount > self.total_borrows:
            raise VenueRejected("invalid_repay", {"amount": amount, "total_borrows": self.total_borrows})
        self.ledger.transfer(payer, self.address, amount)
        self.total_borrows -= amount

    def realize_loss(self, amount: int) -> int:
        """Write off `amount` of outstanding borrows as bad debt; returns the amount written off."""
        written_off = min(max(0, int(amount)), self.total_borrows)
        self.total_borrows -= written_off
        if written_off:
            logging.warning("Venue realized bad debt of %s", written_off)
        return written_off

    def set_paused(self, paused: bool) -> None:
        self.paused = bool(paused)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "cash": self.cash(),
            "total_borrows": self.total_borrows,
            "total_assets": self.total_assets(),
            "total_shares": self.total_shares,
            "exchange_rate_wad": self.exchange_rate_wad(),
            "last_accrual": self.last_accrual,
            "paused": self.paused,
        }

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _require_active(self, operation: str) -> None:
        if self.paused:
            raise VenueRejected("paused", {"operation": operation})
