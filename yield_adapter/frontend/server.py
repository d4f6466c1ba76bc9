"""HTTP server exposing the adapter API (and optionally the paper venue)."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI

from rest_api import attach_api_routes
from yield_adapter.venue.venue_api import attach_venue_routes


def create_app(
    *,
    adapter: Optional[Any] = None,
    vault: Optional[Any] = None,
    state_manager: Optional[Any] = None,
    scheduler: Optional[Any] = None,
    paper_venue: Optional[Any] = None,
    config: Optional[Dict[str, Any]] = None,
) -> FastAPI:
    """Return a FastAPI app with adapter routes; venue routes when a paper venue is served."""
    app = FastAPI(
        title="Threshold Yield Adapter",
        description="Adapter state, vault flows, and management controls.",
        version="0.1.0",
    )

    attach_api_routes(
        app,
        adapter=adapter,
        vault=vault,
        state_manager=state_manager,
        scheduler=scheduler,
        config=config or {},
    )
    if paper_venue is not None:
        attach_venue_routes(app, venue=paper_venue)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True, "adapter": getattr(adapter, "address", None)}

    return app
