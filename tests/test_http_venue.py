"""HttpVenueClient against a served paper venue and against canned responses."""

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from yield_adapter.core.clock import ManualClock
from yield_adapter.strategy.threshold_lender import ThresholdLockedLender
from yield_adapter.vault.simple_vault import SimpleVault
from yield_adapter.venue.errors import TransferFailed, VenueRejected
from yield_adapter.venue.http_venue import HttpVenueClient, HttpVenueConfig
from yield_adapter.venue.ledger import AssetLedger
from yield_adapter.venue.paper_venue import PaperLendingVenue
from yield_adapter.venue.venue_api import attach_venue_routes
from yield_adapter.venue.venue_base import YieldVenue


@pytest.fixture
def remote():
    clock = ManualClock(0)
    ledger = AssetLedger()
    paper = PaperLendingVenue(ledger, clock=clock)
    app = FastAPI()
    attach_venue_routes(app, venue=paper)
    client = HttpVenueClient(client=TestClient(app))
    return clock, ledger, paper, client


def test_client_satisfies_venue_protocol(remote):
    _, _, _, client = remote
    assert isinstance(client, YieldVenue)


def test_adapter_runs_over_http_venue(remote):
    clock, remote_ledger, paper, client = remote
    local_ledger = AssetLedger()
    ledger = client.asset_ledger(symbol="usdc")
    vault = SimpleVault(ledger, management="management", clock=clock)
    adapter = ThresholdLockedLender(
        address="strategy",
        ledger=ledger,
        venue=client,
        host=vault,
        deployment_threshold=500_000,
        unlock_time=100,
        clock=clock,
    )
    vault.attach_strategy(adapter)
    remote_ledger.mint("alice", 1_000_000)

    vault.deposit("alice", 600_000)
    assert paper.share_balance("strategy") == 600_000
    assert remote_ledger.balance_of("alice") == 400_000
    assert adapter.valuate() == 600_000
    assert adapter.withdraw_limit("alice") == 0

    clock.advance(100)
    assert adapter.withdraw_limit("alice") == 600_000
    assert adapter.free(200_000) == 200_000
    assert paper.share_balance("strategy") == 400_000
    assert remote_ledger.balance_of("strategy") == 200_000

    assert vault.withdraw("alice", 250_000) == {"assets": 250_000, "shares": 250_000, "loss": 0}
    assert remote_ledger.balance_of("alice") == 650_000
    assert local_ledger.snapshot() == {}


def test_remote_ledger_rejections_surface_as_transfer_failed(remote):
    _, remote_ledger, _, client = remote
    ledger = client.asset_ledger()
    remote_ledger.mint("alice", 10)
    assert ledger.symbol == "ASSET"
    assert ledger.balance_of("alice") == 10
    with pytest.raises(TransferFailed) as exc:
        ledger.transfer("alice", "bob", 11)
    assert exc.value.reason == "insufficient_balance"
    assert exc.value.details["balance"] == 10
    assert remote_ledger.balance_of("bob") == 0


def test_venue_rejection_round_trips_as_venue_rejected(remote):
    _, ledger, _, client = remote
    ledger.mint("alice", 1_000)
    client.place_funds(1_000, "alice")
    with pytest.raises(VenueRejected) as exc:
        client.redeem_shares(5_000, "alice", "alice")
    assert exc.value.reason == "insufficient_shares"
    assert exc.value.details["held"] == 1_000


def test_conversion_endpoints_forward_rounding(remote):
    _, ledger, paper, client = remote
    ledger.mint("alice", 3)
    client.place_funds(3, "alice")
    paper.borrow(1, "borrower")
    paper.realize_loss(1)
    # 2 assets over 3 shares
    assert client.shares_to_asset(2, round_up=False) == 1
    assert client.shares_to_asset(2, round_up=True) == 2
    assert client.asset_to_shares(1, round_up=True) == 2
    assert client.redeemable_assets("alice") == 2


def test_plain_4xx_detail_becomes_generic_rejection():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"detail": "Missing 'recipient' in payload."})

    client = HttpVenueClient(client=httpx.Client(transport=httpx.MockTransport(handler), base_url="http://venue"))
    with pytest.raises(VenueRejected) as exc:
        client.place_funds(1, "")
    assert exc.value.reason == "rejected"
    assert exc.value.details["status_code"] == 400


def test_server_errors_propagate_unchanged():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(503, text="maintenance")

    client = HttpVenueClient(client=httpx.Client(transport=httpx.MockTransport(handler), base_url="http://venue"))
    with pytest.raises(httpx.HTTPStatusError):
        client.refresh_accrual()
    assert calls == ["/venue/accrue"]


def test_client_requires_a_base_url():
    with pytest.raises(ValueError):
        HttpVenueClient(HttpVenueConfig(base_url=""))
