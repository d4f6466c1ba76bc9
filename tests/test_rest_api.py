"""REST routes wired through run.build_runtime with a manual clock."""

import pytest
from fastapi.testclient import TestClient

from run import build_runtime
from yield_adapter.core.clock import ManualClock
from yield_adapter.frontend.server import create_app

MANAGEMENT = {"X-Caller": "management"}


@pytest.fixture
def runtime(tmp_path):
    config = {
        "general": {"db_path": str(tmp_path / "state.db")},
        "adapter": {
            "address": "strategy",
            "deployment_threshold": 500_000,
            "unlock_time": None,
            "unlock_delay_seconds": 1_000_000,
            "management": "management",
        },
        "venue": {"kind": "paper", "address": "venue"},
        "scheduler": {"report_interval_seconds": 60},
    }
    return build_runtime(config, clock=ManualClock(1_000))


@pytest.fixture
def api(runtime):
    app = create_app(
        adapter=runtime.adapter,
        vault=runtime.vault,
        state_manager=runtime.state_manager,
        scheduler=runtime.scheduler,
        paper_venue=runtime.paper_venue,
    )
    runtime.ledger.mint("alice", 1_000_000)
    return TestClient(app)


def test_runtime_applies_unlock_delay(runtime):
    assert runtime.adapter.unlock_time == 1_001_000
    assert runtime.adapter.deployment_threshold == 500_000


def test_deposit_scenario_over_http(api):
    assert api.post("/api/vault/deposit", json={"account": "alice", "assets": 100_000}).status_code == 200
    state = api.get("/api/adapter/state").json()
    assert (state["idle"], state["deployed"], state["threshold_met"]) == (100_000, 0, False)

    api.post("/api/vault/deposit", json={"account": "alice", "assets": 500_000})
    state = api.get("/api/adapter/state").json()
    assert (state["idle"], state["deployed"], state["threshold_met"]) == (0, 600_000, True)
    assert api.get("/api/adapter/valuation").json() == {"total_assets": 600_000}


def test_locked_withdraw_is_rejected(api, runtime):
    api.post("/api/vault/deposit", json={"account": "alice", "assets": 600_000})
    response = api.post("/api/vault/withdraw", json={"account": "alice", "assets": 1_000})
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "withdraw_limit"
    assert api.get("/api/adapter/withdraw-limit/alice").json()["limit"] == 0

    runtime.adapter.clock.advance(1_000_000)
    response = api.post("/api/vault/withdraw", json={"account": "alice", "assets": 1_000})
    assert response.status_code == 200
    assert response.json()["assets"] == 1_000


def test_unlock_management_endpoints(api):
    assert api.post("/api/adapter/unlock-time", json={"unlock_time": 5}).status_code == 403
    response = api.post("/api/adapter/unlock-time", json={"unlock_time": 5}, headers=MANAGEMENT)
    assert response.json() == {"unlock_time": 5, "unlock_frozen": False}

    assert api.post("/api/adapter/freeze-unlock", headers=MANAGEMENT).status_code == 200
    response = api.post("/api/adapter/unlock-time", json={"unlock_time": 9}, headers=MANAGEMENT)
    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "frozen"
    assert api.get("/api/adapter/state").json()["unlock_time"] == 5


def test_emergency_free_requires_shutdown(api):
    api.post("/api/vault/deposit", json={"account": "alice", "assets": 600_000})
    response = api.post("/api/adapter/emergency-free", json={"amount": 100_000}, headers=MANAGEMENT)
    assert response.status_code == 409

    assert api.post("/api/vault/shutdown", headers={"X-Caller": "alice"}).status_code == 403
    assert api.post("/api/vault/shutdown", headers=MANAGEMENT).json() == {"is_shutdown": True}
    response = api.post("/api/adapter/emergency-free", json={"amount": 100_000}, headers=MANAGEMENT)
    assert response.status_code == 200
    assert response.json()["received"] == 100_000
    assert response.json()["state"]["idle"] == 100_000

    assert api.post("/api/vault/deposit", json={"account": "alice", "assets": 1}).status_code == 409


def test_report_and_event_log(api):
    api.post("/api/vault/deposit", json={"account": "alice", "assets": 600_000})
    report = api.post("/api/vault/report").json()
    assert (report["profit"], report["loss"], report["total_assets"]) == (0, 0, 600_000)

    operations = [event["operation"] for event in api.get("/api/adapter/events").json()["events"]]
    assert operations[0] == "valuate"
    assert "deploy" in operations
    status = api.get("/api/vault/status").json()
    assert status["total_debt"] == 600_000


def test_invalid_payload_is_rejected(api):
    assert api.post("/api/vault/deposit", json={"account": "alice", "assets": "10"}).status_code == 400
    assert api.post("/api/adapter/unlock-time", json={}, headers=MANAGEMENT).status_code == 400


def test_paper_venue_is_served_alongside(api, runtime):
    api.post("/api/vault/deposit", json={"account": "alice", "assets": 600_000})
    assert api.get("/venue/shares/strategy").json()["shares"] == 600_000
    assert api.get("/health").json() == {"ok": True, "adapter": "strategy"}


def test_missing_dependencies_return_503():
    client = TestClient(create_app())
    assert client.get("/api/adapter/state").status_code == 503
    assert client.get("/api/vault/status").status_code == 503


def test_config_endpoint_hides_venue_secret():
    config = {"adapter": {"deployment_threshold": 1}, "venue": {"kind": "http", "api_key": "secret"}}
    client = TestClient(create_app(config=config))
    body = client.get("/api/adapter/config").json()
    assert body["adapter"] == {"deployment_threshold": 1}
    assert body["venue"] == {"kind": "http"}
