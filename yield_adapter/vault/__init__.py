"""Host vault interface and the minimal reference vault."""

from yield_adapter.vault.host import VaultHost
from yield_adapter.vault.simple_vault import ReportResult, SimpleVault

__all__ = ["ReportResult", "SimpleVault", "VaultHost"]
