"""HTTP client for a yield venue exposed over JSON endpoints.

Every call maps one-to-one onto a venue endpoint. Rejections (4xx) surface as
`VenueRejected`; transport errors propagate unchanged. There are no retries: the
enclosing adapter operation aborts instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from yield_adapter.venue.errors import TransferFailed, VenueRejected


@dataclass(frozen=True)
class HttpVenueConfig:
    base_url: str
    timeout_seconds: float = 10.0
    api_key: Optional[str] = None


class HttpVenueClient:
    """`YieldVenue` implementation backed by a remote venue service."""

    def __init__(self, config: Optional[HttpVenueConfig] = None, *, client: Optional[httpx.Client] = None) -> None:
        if client is None:
            if config is None or not config.base_url:
                raise ValueError("HttpVenueClient requires a base_url or an explicit httpx client.")
            headers = {"X-API-KEY": config.api_key} if config.api_key else {}
            client = httpx.Client(
                base_url=str(config.base_url).rstrip("/"),
                timeout=float(config.timeout_seconds),
                headers=headers,
            )
        self._client = client

    def close(self) -> None:
        self._client.close()

    def place_funds(self, amount: int, recipient: str, *, sender: Optional[str] = None) -> int:
        payload = {"amount": int(amount), "recipient": recipient, "sender": sender or recipient}
        return int(self._request("POST", "/venue/deposit", json=payload)["shares"])

    def redeem_shares(self, shares: int, recipient: str, owner: str) -> int:
        payload = {"shares": int(shares), "recipient": recipient, "owner": owner}
        return int(self._request("POST", "/venue/redeem", json=payload)["assets"])

    def share_balance(self, holder: str) -> int:
        return int(self._request("GET", f"/venue/shares/{holder}")["shares"])

    def refresh_accrual(self) -> None:
        self._request("POST", "/venue/accrue")

    def shares_to_asset(self, shares: int, *, round_up: bool = False) -> int:
        params = {"shares": int(shares), "round_up": "true" if round_up else "false"}
        return int(self._request("GET", "/venue/convert/to-assets", params=params)["assets"])

    def asset_to_shares(self, assets: int, *, round_up: bool = False) -> int:
        params = {"assets": int(assets), "round_up": "true" if round_up else "false"}
        return int(self._request("GET", "/venue/convert/to-shares", params=params)["shares"])

    def redeemable_assets(self, holder: str) -> int:
        return int(self._request("GET", f"/venue/redeemable/{holder}")["assets"])

    def asset_ledger(self, *, symbol: str = "ASSET") -> HttpAssetLedger:
        """Ledger view over the same connection, for balances held at the venue."""
        return HttpAssetLedger(self._client, symbol=symbol)

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        return _request(self._client, method, path, **kwargs)


class HttpAssetLedger:
    """Asset balances held by the remote venue service, for `http` venue mode.

    The adapter, host vault, and remote venue must observe one custody record;
    this client reads and moves balances on the venue side.
    """

    def __init__(self, client: httpx.Client, *, symbol: str = "ASSET") -> None:
        self.symbol = str(symbol or "ASSET").upper()
        self._client = client

    def balance_of(self, address: str) -> int:
        return int(_request(self._client, "GET", f"/venue/assets/{address}")["balance"])

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        payload = {"sender": sender, "recipient": recipient, "amount": int(amount)}
        try:
            _request(self._client, "POST", "/venue/assets/transfer", json=payload)
        except VenueRejected as e:
            raise TransferFailed(e.reason, e.details) from e


def _request(client: httpx.Client, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
    response = client.request(method, path, **kwargs)
    if 400 <= response.status_code < 500:
        try:
            body = response.json()
        except ValueError:
            body = {"detail": response.text}
        detail = body.get("detail") if isinstance(body, dict) else body
        if isinstance(detail, dict):
            raise VenueRejected(str(detail.get("reason") or "rejected"), detail.get("details"))
        raise VenueRejected("rejected", {"status_code": response.status_code, "detail": detail})
    response.raise_for_status()
    return response.json()
