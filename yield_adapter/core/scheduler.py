"""Scheduler driving periodic vault reports against the adapter."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional


class ReportScheduler:
    """Runs `vault.report()` on a fixed cadence until stopped."""

    def __init__(self, *, vault: Any, report_interval_seconds: float = 3600.0) -> None:
        self.vault = vault
        self.report_interval_seconds = float(report_interval_seconds)
        self.stop_event = threading.Event()
        self.last_report: Optional[Dict[str, Any]] = None
        self.reports_run: int = 0

    def start(self) -> None:
        """Kick off the synchronous loop (one report per interval)."""
        logging.info("Report scheduler started with cadence %ss", self.report_interval_seconds)
        while not self.stop_event.is_set():
            try:
                self.run_report_once()
            except Exception:
                logging.exception("Report cycle failed.")
            self.stop_event.wait(self.report_interval_seconds)

    def stop(self) -> None:
        logging.info("Stop signal received; shutting down report scheduler.")
        self.stop_event.set()

    def run_report_once(self) -> Dict[str, Any]:
        result = self.vault.report().to_dict()
        self.last_report = result
        self.reports_run += 1
        return result
