"""Utility helpers (integer rounding, logging setup, config loading, timestamps)."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import yaml

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

ENV_OVERRIDES = {
    "YIELD_ADAPTER_MANAGEMENT": ("adapter", "management"),
    "YIELD_ADAPTER_VENUE_URL": ("venue", "base_url"),
    "YIELD_ADAPTER_DB_PATH": ("general", "db_path"),
}


def mul_div(x: int, y: int, denominator: int, *, round_up: bool = False) -> int:
    """Return x * y / denominator on integers, rounding down unless `round_up`."""
    if denominator <= 0:
        raise ZeroDivisionError("mul_div denominator must be positive")
    product = int(x) * int(y)
    quotient, remainder = divmod(product, int(denominator))
    if round_up and remainder:
        quotient += 1
    return quotient


def load_config(path: Path) -> Dict[str, Any]:
    """Load YAML configuration and validate required sections."""
    with Path(path).open("r", encoding="utf-8") as fh:
        config = yaml.safe_load(fh) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    adapter_cfg = config.get("adapter")
    if not isinstance(adapter_cfg, dict):
        raise ValueError("Configuration is missing the 'adapter' section.")
    threshold = adapter_cfg.get("deployment_threshold", 0)
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
        raise ValueError(f"adapter.deployment_threshold must be a non-negative integer, got {threshold!r}")
    return config


def resolve_environment_variables(config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment variables (management address, venue URL, db path) into the config."""
    for env_key, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_key)
        if value is None or not str(value).strip():
            continue
        config.setdefault(section, {})[key] = str(value).strip()
    return config


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_structured_logging(config: Dict[str, Any]) -> None:
    """Configure structured logging (JSON/text) based on config settings."""
    log_cfg = config.get("logging", {}) or {}
    level_name = str(log_cfg.get("level", "INFO") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if str(log_cfg.get("format", "text")).lower() == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logging.basicConfig(level=level, handlers=[handler], force=True)
        return
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def utc_now() -> str:
    """Return the current UTC timestamp as an ISO-8601 string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
