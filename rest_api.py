"""REST API endpoints for adapter state, vault flows, and management controls."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Header, HTTPException

from yield_adapter.venue.errors import (
    AdapterError,
    Frozen,
    Locked,
    NotShutdown,
    Unauthorized,
    VaultShutdown,
)

_STATUS_BY_ERROR = (
    (Locked, 423),
    (Unauthorized, 403),
    (Frozen, 409),
    (NotShutdown, 409),
    (VaultShutdown, 409),
)


def attach_api_routes(
    app: FastAPI,
    *,
    adapter: Optional[Any],
    vault: Optional[Any],
    state_manager: Optional[Any],
    scheduler: Optional[Any],
    config: Dict[str, Any],
) -> None:
    router = APIRouter(prefix="/api")

    @router.get("/adapter/state")
    async def adapter_state() -> Dict[str, Any]:
        _require(adapter, "Adapter not configured.")
        return adapter.position_snapshot()

    @router.get("/adapter/valuation")
    async def adapter_valuation() -> Dict[str, Any]:
        _require(adapter, "Adapter not configured.")
        try:
            total = adapter.valuate()
        except AdapterError as e:
            raise _http_error(e)
        return {"total_assets": total}

    @router.get("/adapter/withdraw-limit/{account}")
    async def withdraw_limit(account: str) -> Dict[str, Any]:
        _require(adapter, "Adapter not configured.")
        return {"account": account, "limit": adapter.withdraw_limit(account)}

    @router.post("/adapter/unlock-time")
    async def set_unlock_time(payload: Dict[str, Any], x_caller: str = Header(default="")) -> Dict[str, Any]:
        _require(adapter, "Adapter not configured.")
        unlock_time = _int_field(payload, "unlock_time")
        try:
            adapter.set_unlock_time(unlock_time, caller=x_caller)
        except AdapterError as e:
            raise _http_error(e)
        return {"unlock_time": adapter.unlock_time, "unlock_frozen": adapter.unlock_frozen}

    @router.post("/adapter/freeze-unlock")
    async def freeze_unlock(x_caller: str = Header(default="")) -> Dict[str, Any]:
        _require(adapter, "Adapter not configured.")
        try:
            adapter.freeze_unlock(caller=x_caller)
        except AdapterError as e:
            raise _http_error(e)
        return {"unlock_time": adapter.unlock_time, "unlock_frozen": adapter.unlock_frozen}

    @router.post("/adapter/emergency-free")
    async def emergency_free(payload: Dict[str, Any], x_caller: str = Header(default="")) -> Dict[str, Any]:
        _require(adapter, "Adapter not configured.")
        amount = _int_field(payload, "amount")
        try:
            received = adapter.emergency_free(amount, caller=x_caller)
        except AdapterError as e:
            raise _http_error(e)
        return {"received": received, "state": adapter.position_snapshot()}

    @router.get("/adapter/events")
    async def adapter_events(limit: int = 50, operation: Optional[str] = None) -> Dict[str, Any]:
        _require(state_manager, "State manager not configured.")
        adapter_address = getattr(adapter, "address", None)
        try:
            events = state_manager.get_recent_events(adapter=adapter_address, operation=operation, limit=limit)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to load events: {str(e)}")
        return {"events": events}

    @router.get("/adapter/config")
    async def adapter_config() -> Dict[str, Any]:
        venue_cfg = {k: v for k, v in (config.get("venue", {}) or {}).items() if k != "api_key"}
        return {
            "adapter": dict(config.get("adapter", {}) or {}),
            "venue": venue_cfg,
            "scheduler": dict(config.get("scheduler", {}) or {}),
        }

    @router.get("/vault/status")
    async def vault_status() -> Dict[str, Any]:
        _require(vault, "Vault not configured.")
        status = vault.status()
        if scheduler is not None:
            status["scheduler"] = {"reports_run": scheduler.reports_run, "last_report": scheduler.last_report}
        return status

    @router.post("/vault/deposit")
    async def vault_deposit(payload: Dict[str, Any]) -> Dict[str, Any]:
        _require(vault, "Vault not configured.")
        account = _str_field(payload, "account")
        assets = _int_field(payload, "assets")
        try:
            shares = vault.deposit(account, assets)
        except AdapterError as e:
            raise _http_error(e)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"account": account, "shares": shares, "balance": vault.balance_of(account)}

    @router.post("/vault/withdraw")
    async def vault_withdraw(payload: Dict[str, Any]) -> Dict[str, Any]:
        _require(vault, "Vault not configured.")
        account = _str_field(payload, "account")
        assets = _int_field(payload, "assets")
        try:
            result = vault.withdraw(account, assets, receiver=payload.get("receiver") or None)
        except AdapterError as e:
            raise _http_error(e)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"account": account, **result}

    @router.post("/vault/report")
    async def vault_report() -> Dict[str, Any]:
        _require(vault, "Vault not configured.")
        try:
            return vault.report().to_dict()
        except AdapterError as e:
            raise _http_error(e)

    @router.post("/vault/shutdown")
    async def vault_shutdown(x_caller: str = Header(default="")) -> Dict[str, Any]:
        _require(vault, "Vault not configured.")
        try:
            vault.shutdown(caller=x_caller)
        except AdapterError as e:
            raise _http_error(e)
        return {"is_shutdown": vault.is_shutdown()}

    app.include_router(router)


def _http_error(error: AdapterError) -> HTTPException:
    status_code = 400
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            status_code = code
            break
    return HTTPException(status_code=status_code, detail={"reason": error.reason, "details": error.details})


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


def _require(dependency: Any, message: str) -> None:
    if dependency is None:
        raise HTTPException(status_code=503, detail=message)
