"""Client interface for the external yield venue the adapter deposits into."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

WAD = 10**18


@runtime_checkable
class YieldVenue(Protocol):
    """
    Narrow capability interface over a lending/yield venue.

    Every conversion reflects the venue state as of the last `refresh_accrual()`;
    callers refresh before converting.
    """

    def place_funds(self, amount: int, recipient: str, *, sender: Optional[str] = None) -> int:
        """Deposit `amount` of asset from `sender` and credit venue-shares to `recipient`."""
        ...

    def redeem_shares(self, shares: int, recipient: str, owner: str) -> int:
        """Burn `shares` held by `owner` and pay the asset to `recipient`."""
        ...

    def share_balance(self, holder: str) -> int:
        ...

    def refresh_accrual(self) -> None:
        ...

    def shares_to_asset(self, shares: int, *, round_up: bool = False) -> int:
        ...

    def asset_to_shares(self, assets: int, *, round_up: bool = False) -> int:
        ...

    def redeemable_assets(self, holder: str) -> int:
        """Asset amount `holder` could redeem right now given venue liquidity."""
        ...
