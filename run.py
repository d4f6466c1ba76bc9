"""Entry point for the threshold yield adapter service."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from yield_adapter.core.clock import Clock, SystemClock
from yield_adapter.core.scheduler import ReportScheduler
from yield_adapter.core.state_manager import StateManager
from yield_adapter.core.utils import load_config, resolve_environment_variables, setup_structured_logging
from yield_adapter.frontend.server import create_app
from yield_adapter.strategy.threshold_lender import ThresholdLockedLender
from yield_adapter.vault.simple_vault import SimpleVault
from yield_adapter.venue.http_venue import HttpVenueClient, HttpVenueConfig
from yield_adapter.venue.ledger import AssetLedger
from yield_adapter.venue.paper_venue import PaperLendingVenue


@dataclass
class Runtime:
    ledger: Any
    venue: Any
    paper_venue: Optional[PaperLendingVenue]
    vault: SimpleVault
    adapter: ThresholdLockedLender
    state_manager: Optional[StateManager]
    scheduler: ReportScheduler


def main() -> None:
    """Main entry point that wires together config, storage, and scheduler."""
    config = resolve_environment_variables(_load_config())
    setup_structured_logging(config)

    runtime = build_runtime(config)
    frontend_cfg = config.get("frontend", {}) or {}
    if bool(frontend_cfg.get("enabled", True)):
        _start_frontend(runtime=runtime, frontend_cfg=frontend_cfg, config=config)

    try:
        runtime.scheduler.start()
    except KeyboardInterrupt:
        runtime.scheduler.stop()


def build_runtime(
    config: Dict[str, Any],
    *,
    clock: Optional[Clock] = None,
    state_manager: Optional[StateManager] = None,
) -> Runtime:
    """Construct ledger, venue, vault, and adapter from configuration."""
    clock = clock or SystemClock()
    general_cfg = config.get("general", {}) or {}
    adapter_cfg = config.get("adapter", {}) or {}
    venue_cfg = config.get("venue", {}) or {}
    vault_cfg = config.get("vault", {}) or {}

    if state_manager is None and general_cfg.get("db_path"):
        state_manager = StateManager(Path(general_cfg["db_path"]))
    if state_manager is not None:
        state_manager.init_db()

    symbol = str(vault_cfg.get("asset_symbol", "ASSET"))
    paper_venue: Optional[PaperLendingVenue] = None
    kind = str(venue_cfg.get("kind", "paper") or "paper").lower()
    if kind == "paper":
        ledger: Any = AssetLedger(symbol)
        paper_venue = PaperLendingVenue(
            ledger,
            address=str(venue_cfg.get("address", "lending-venue")),
            clock=clock,
            rate_per_second_wad=int(venue_cfg.get("rate_per_second_wad", 0) or 0),
            initial_exchange_rate_wad=int(venue_cfg.get("initial_exchange_rate_wad", 10**18) or 10**18),
        )
        venue: Any = paper_venue
    elif kind == "http":
        venue = HttpVenueClient(
            HttpVenueConfig(
                base_url=str(venue_cfg.get("base_url") or ""),
                timeout_seconds=float(venue_cfg.get("timeout_seconds", 10.0) or 10.0),
                api_key=venue_cfg.get("api_key"),
            )
        )
        # balances live at the remote venue so deposits and redemptions settle there
        ledger = venue.asset_ledger(symbol=symbol)
    else:
        raise ValueError(f"Unknown venue kind '{kind}'. Available: ['paper', 'http']")

    vault = SimpleVault(ledger, management=str(adapter_cfg.get("management", "management")), clock=clock)
    unlock_time = adapter_cfg.get("unlock_time")
    if unlock_time is None:
        unlock_time = clock.now() + int(adapter_cfg.get("unlock_delay_seconds", 0) or 0)
    adapter = ThresholdLockedLender(
        address=str(adapter_cfg.get("address", "threshold-lender")),
        ledger=ledger,
        venue=venue,
        host=vault,
        deployment_threshold=int(adapter_cfg.get("deployment_threshold", 0) or 0),
        unlock_time=int(unlock_time),
        clock=clock,
        state_manager=state_manager,
    )
    try:
        adapter.rehydrate()
    except Exception:
        logging.exception("Failed to rehydrate adapter state; continuing with configured values.")
    vault.attach_strategy(adapter)

    scheduler = ReportScheduler(
        vault=vault,
        report_interval_seconds=float((config.get("scheduler", {}) or {}).get("report_interval_seconds", 3600)),
    )
    logging.info(
        "Adapter %s ready: venue=%s threshold=%s unlock_time=%s",
        adapter.address,
        kind,
        adapter.deployment_threshold,
        adapter.unlock_time,
    )
    return Runtime(
        ledger=ledger,
        venue=venue,
        paper_venue=paper_venue,
        vault=vault,
        adapter=adapter,
        state_manager=state_manager,
        scheduler=scheduler,
    )


def _load_config() -> Dict[str, Any]:
    """Load YAML configuration from config.yaml or fallback to sample."""
    config_path = Path("yield_adapter/config/config.yaml")
    if not config_path.exists():
        logging.warning("config.yaml not found, falling back to sample configuration.")
        config_path = Path("yield_adapter/config/config.sample.yaml")
    return load_config(config_path)


def _start_frontend(*, runtime: Runtime, frontend_cfg: Dict[str, Any], config: Dict[str, Any]) -> threading.Thread:
    """Start the FastAPI server in a background thread."""
    import uvicorn

    serve_venue = bool((config.get("venue", {}) or {}).get("serve_paper_venue", False))
    app = create_app(
        adapter=runtime.adapter,
        vault=runtime.vault,
        state_manager=runtime.state_manager,
        scheduler=runtime.scheduler,
        paper_venue=runtime.paper_venue if serve_venue else None,
        config=config,
    )
    host = frontend_cfg.get("host", "127.0.0.1")
    port = frontend_cfg.get("port", 8000)

    def _run() -> None:
        uvicorn.run(app, host=host, port=port, log_level="info")

    thread = threading.Thread(target=_run, name="frontend-server", daemon=True)
    thread.start()
    logging.info("Frontend server running at http://%s:%s", host, port)
    return thread


if __name__ == "__main__":
    main()
