from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from core.settings import Settings
from services.bootstrap import AppServices, build_app_services
from services.feature_flags.values import ParameterValue
from web.main import create_app


@pytest.fixture()
def services(backend, remote, clock, tmp_path: Path) -> Iterator[AppServices]:
    settings = Settings(auto_sync=False, hydration_timeout_seconds=1.0, app_state_path=tmp_path / "state.json")
    built = build_app_services(settings, backend=backend, remote=remote, clock=clock)
    built.flags.wait_until_ready(timeout=2.0)
    built.parameters.wait_until_ready(timeout=2.0)
    try:
        yield built
    finally:
        built.close()


@pytest.fixture()
def debug_client(services: AppServices) -> Iterator[TestClient]:
    app = create_app(services)
    client = TestClient(app)
    try:
        yield client
    finally:
        client.close()


def _flag(payload, key):
    return next(entry for entry in payload["flags"] if entry["key"] == key)


def _parameter(payload, key):
    return next(entry for entry in payload["parameters"] if entry["key"] == key)


def test_health_reports_service_phases(debug_client: TestClient):
    response = debug_client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "flags": "ready", "parameters": "ready"}


def test_list_flags(debug_client: TestClient):
    response = debug_client.get("/api/v1/debug/feature-flags")
    assert response.status_code == 200, response.text

    payload = response.json()
    assert len(payload["flags"]) == 7
    show_ads = _flag(payload, "show_ads")
    assert show_ads["enabled"] is True
    assert show_ads["defaultValue"] is True
    assert show_ads["hasLocalOverride"] is False
    assert payload["lastSync"] is None


def test_override_and_reset_flag(debug_client: TestClient):
    response = debug_client.put("/api/v1/debug/feature-flags/show_ads", json={"enabled": False})
    assert response.status_code == 200, response.text
    flag = _flag(response.json(), "show_ads")
    assert flag["enabled"] is False
    assert flag["hasLocalOverride"] is True

    response = debug_client.delete("/api/v1/debug/feature-flags/show_ads")
    assert _flag(response.json(), "show_ads")["enabled"] is True

    debug_client.put("/api/v1/debug/feature-flags/dark_mode_only", json={"enabled": True})
    response = debug_client.delete("/api/v1/debug/feature-flags")
    assert _flag(response.json(), "dark_mode_only")["hasLocalOverride"] is False


def test_unknown_flag_returns_404(debug_client: TestClient):
    response = debug_client.put("/api/v1/debug/feature-flags/nope", json={"enabled": True})
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "feature_flags.unknown_key"


def test_sync_flags(debug_client: TestClient, remote, clock):
    remote.flags = {"show_subjects_tab": True}
    remote.version = "9"

    response = debug_client.post("/api/v1/debug/feature-flags/sync")
    assert response.status_code == 200, response.text
    payload = response.json()
    assert _flag(payload, "show_subjects_tab")["enabled"] is True
    assert payload["version"] == "9"
    assert payload["lastSync"] == clock.now.isoformat()


def test_sync_failure_returns_502(debug_client: TestClient, remote):
    remote.fail = True
    response = debug_client.post("/api/v1/debug/feature-flags/sync")
    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "feature_flags.sync_failed"

    response = debug_client.post("/api/v1/debug/feature-parameters/sync")
    assert response.status_code == 502


def test_parameters_listing_and_override(debug_client: TestClient):
    response = debug_client.get("/api/v1/debug/feature-parameters")
    assert response.status_code == 200, response.text
    banner = _parameter(response.json(), "banner_refresh_interval")
    assert banner["kind"] == "int"
    assert banner["value"] == 60

    response = debug_client.put(
        "/api/v1/debug/feature-parameters/banner_refresh_interval",
        json={"kind": "int", "value": 30},
    )
    assert response.status_code == 200, response.text
    banner = _parameter(response.json(), "banner_refresh_interval")
    assert banner["value"] == 30
    assert banner["hasLocalOverride"] is True

    response = debug_client.delete("/api/v1/debug/feature-parameters/banner_refresh_interval")
    assert _parameter(response.json(), "banner_refresh_interval")["value"] == 60


def test_parameter_kind_mismatch_returns_400(debug_client: TestClient):
    response = debug_client.put(
        "/api/v1/debug/feature-parameters/banner_position",
        json={"kind": "int", "value": 3},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "feature_parameters.kind_mismatch"


def test_parameter_invalid_value_returns_400(debug_client: TestClient):
    response = debug_client.put(
        "/api/v1/debug/feature-parameters/banner_refresh_interval",
        json={"kind": "int", "value": "thirty"},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "feature_parameters.invalid_value"


def test_unknown_parameter_returns_404(debug_client: TestClient):
    response = debug_client.delete("/api/v1/debug/feature-parameters/nope")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "feature_parameters.unknown_key"


def test_sync_parameters(debug_client: TestClient, remote):
    remote.parameters = {"banner_position": ParameterValue.string("top")}
    response = debug_client.post("/api/v1/debug/feature-parameters/sync")
    assert response.status_code == 200, response.text
    assert _parameter(response.json(), "banner_position")["value"] == "top"


def test_premium_flow(debug_client: TestClient, clock):
    response = debug_client.get("/api/v1/debug/premium")
    assert response.status_code == 200, response.text
    payload = response.json()
    assert payload["status"] == "free"
    assert payload["isPremium"] is False
    assert payload["canShowAds"] is True

    payload = debug_client.post("/api/v1/debug/premium/grant-temporary", json={"durationSeconds": 120}).json()
    assert payload["status"] == "temporary"
    assert payload["secondsRemaining"] == 120
    assert payload["canShowAds"] is False

    payload = debug_client.post("/api/v1/debug/premium/grant").json()
    assert payload["status"] == "permanent"
    assert payload["premiumPurchaseDate"] == clock.now.isoformat()

    payload = debug_client.post("/api/v1/debug/premium/revoke").json()
    assert payload["status"] == "free"
    assert payload["canShowAds"] is True


def test_premium_grant_temporary_defaults_to_trial_parameter(debug_client: TestClient):
    debug_client.put(
        "/api/v1/debug/feature-parameters/premium_trial_duration",
        json={"kind": "int", "value": 900},
    )
    payload = debug_client.post("/api/v1/debug/premium/grant-temporary", json={}).json()
    assert payload["secondsRemaining"] == 900


def test_premium_grant_temporary_without_body_uses_trial_default(debug_client: TestClient):
    response = debug_client.post("/api/v1/debug/premium/grant-temporary")
    assert response.status_code == 200, response.text
    payload = response.json()
    assert payload["status"] == "temporary"
    assert payload["secondsRemaining"] == 3600


def test_ad_watched_counter(debug_client: TestClient):
    debug_client.post("/api/v1/debug/premium/ad-watched")
    payload = debug_client.post("/api/v1/debug/premium/ad-watched").json()
    assert payload["totalAdsWatched"] == 2


def test_missing_services_return_503():
    app = create_app()
    client = TestClient(app)
    response = client.get("/api/v1/debug/feature-flags")
    assert response.status_code == 503
    client.close()


def test_debug_settings_flip_debug_menu_default(backend, remote, clock, tmp_path: Path):
    settings = Settings(debug=True, auto_sync=False, hydration_timeout_seconds=1.0, app_state_path=tmp_path / "state.json")
    built = build_app_services(settings, backend=backend, remote=remote, clock=clock)
    try:
        assert built.flags.wait_until_ready(timeout=2.0)
        client = TestClient(create_app(built))
        payload = client.get("/api/v1/debug/feature-flags").json()
        client.close()
    finally:
        built.close()

    debug_menu = _flag(payload, "show_debug_menu")
    assert debug_menu["enabled"] is True
    assert debug_menu["defaultValue"] is True
