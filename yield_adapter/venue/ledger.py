"""In-memory fungible asset ledger shared by the vault, adapter, and venue."""

from __future__ import annotations

from typing import Dict

from yield_adapter.venue.errors import TransferFailed


class AssetLedger:
    """Tracks integer token balances by address (smallest asset unit)."""

    def __init__(self, symbol: str = "ASSET") -> None:
        self.symbol = str(symbol or "ASSET").upper()
        self._balances: Dict[str, int] = {}

    def balance_of(self, address: str) -> int:
        return int(self._balances.get(address, 0))

    def total_supply(self) -> int:
        return sum(self._balances.values())

    def mint(self, to: str, amount: int) -> None:
        amount = int(amount)
        if amount < 0:
            raise ValueError("mint amount must be non-negative")
        self._balances[to] = self.balance_of(to) + amount

    def burn(self, owner: str, amount: int) -> None:
        amount = int(amount)
        available = self.balance_of(owner)
        if amount < 0 or amount > available:
            raise TransferFailed("insufficient_balance", {"owner": owner, "amount": amount, "balance": available})
        self._balances[owner] = available - amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move `amount` from sender to recipient; all-or-nothing."""
        amount = int(amount)
        if amount < 0:
            raise TransferFailed("negative_amount", {"amount": amount})
        available = self.balance_of(sender)
        if amount > available:
            raise TransferFailed(
                "insufficient_balance",
                {"sender": sender, "recipient": recipient, "amount": amount, "balance": available},
            )
        if amount == 0 or sender == recipient:
            return
        self._balances[sender] = available - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

    def snapshot(self) -> Dict[str, int]:
        return {addr: bal for addr, bal in self._balances.items() if bal}
