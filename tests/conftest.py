"""Shared fixtures wiring a ledger, paper venue, vault, and adapter together."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from yield_adapter.core.clock import ManualClock
from yield_adapter.strategy.threshold_lender import ThresholdLockedLender
from yield_adapter.vault.simple_vault import SimpleVault
from yield_adapter.venue.ledger import AssetLedger
from yield_adapter.venue.paper_venue import PaperLendingVenue

START_TIME = 1_700_000_000
THRESHOLD = 500_000
LOCK_SECONDS = 1_000_000
MANAGEMENT = "management"


def build_stack(
    *,
    threshold: int = THRESHOLD,
    unlock_in: int = LOCK_SECONDS,
    rate_per_second_wad: int = 0,
    state_manager=None,
) -> SimpleNamespace:
    clock = ManualClock(START_TIME)
    ledger = AssetLedger("USDC")
    venue = PaperLendingVenue(ledger, address="venue", clock=clock, rate_per_second_wad=rate_per_second_wad)
    vault = SimpleVault(ledger, management=MANAGEMENT, clock=clock)
    adapter = ThresholdLockedLender(
        address="strategy",
        ledger=ledger,
        venue=venue,
        host=vault,
        deployment_threshold=threshold,
        unlock_time=clock.now() + unlock_in,
        clock=clock,
        state_manager=state_manager,
    )
    vault.attach_strategy(adapter)
    for account in ("alice", "bob"):
        ledger.mint(account, 10_000_000)
    return SimpleNamespace(clock=clock, ledger=ledger, venue=venue, vault=vault, adapter=adapter)


@pytest.fixture
def stack() -> SimpleNamespace:
    return build_stack()


@pytest.fixture
def deployed_stack() -> SimpleNamespace:
    """Stack where 600,000 has crossed the threshold and sits in the venue."""
    s = build_stack()
    s.vault.deposit("alice", 600_000)
    return s


@pytest.fixture
def make_stack():
    return build_stack
