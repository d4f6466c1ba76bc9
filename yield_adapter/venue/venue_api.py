"""FastAPI routes serving a paper venue over the `HttpVenueClient` protocol."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, FastAPI, HTTPException

from yield_adapter.venue.errors import AdapterError


def attach_venue_routes(app: FastAPI, *, venue: Any) -> None:
    router = APIRouter(prefix="/venue")

    @router.post("/deposit")
    async def deposit(payload: Dict[str, Any]) -> Dict[str, Any]:
        amount = _int_field(payload, "amount")
        recipient = _str_field(payload, "recipient")
        sender = payload.get("sender") or recipient
        try:
            shares = venue.place_funds(amount, recipient, sender=sender)
        except AdapterError as e:
            raise _rejected(e)
        return {"shares": shares}

    @router.post("/redeem")
    async def redeem(payload: Dict[str, Any]) -> Dict[str, Any]:
        shares = _int_field(payload, "shares")
        recipient = _str_field(payload, "recipient")
        owner = _str_field(payload, "owner")
        try:
            assets = venue.redeem_shares(shares, recipient, owner)
        except AdapterError as e:
            raise _rejected(e)
        return {"assets": assets}

    @router.get("/shares/{holder}")
    async def shares(holder: str) -> Dict[str, Any]:
        return {"holder": holder, "shares": venue.share_balance(holder)}

    @router.post("/accrue")
    async def accrue() -> Dict[str, Any]:
        venue.refresh_accrual()
        return {"ok": True}

    @router.get("/convert/to-assets")
    async def to_assets(shares: int, round_up: bool = False) -> Dict[str, Any]:
        try:
            return {"assets": venue.shares_to_asset(shares, round_up=round_up)}
        except AdapterError as e:
            raise _rejected(e)

    @router.get("/convert/to-shares")
    async def to_shares(assets: int, round_up: bool = False) -> Dict[str, Any]:
        try:
            return {"shares": venue.asset_to_shares(assets, round_up=round_up)}
        except AdapterError as e:
            raise _rejected(e)

    @router.get("/redeemable/{holder}")
    async def redeemable(holder: str) -> Dict[str, Any]:
        return {"holder": holder, "assets": venue.redeemable_assets(holder)}

    @router.get("/assets/{holder}")
    async def asset_balance(holder: str) -> Dict[str, Any]:
        return {"holder": holder, "balance": venue.ledger.balance_of(holder)}

    @router.post("/assets/transfer")
    async def asset_transfer(payload: Dict[str, Any]) -> Dict[str, Any]:
        sender = _str_field(payload, "sender")
        recipient = _str_field(payload, "recipient")
        amount = _int_field(payload, "amount")
        try:
            venue.ledger.transfer(sender, recipient, amount)
        except AdapterError as e:
            raise _rejected(e)
        return {"sender": sender, "recipient": recipient, "amount": amount}

    app.include_router(router)


def _rejected(error: AdapterError) -> HTTPException:
    return HTTPException(status_code=400, detail={"reason": error.reason, "details": error.details})


def _int_field(payload: Dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise HTTPException(status_code=400, detail=f"Missing or non-integer '{key}' in payload.")
    return value


def _str_field(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not value:
        raise HTTPException(status_code=400, detail=f"Missing '{key}' in payload.")
    return str(value)
