"""
Strategy Router Tests
Request validation, payment stub and deliverable shape (fetch mocked)

Run: python -m pytest tests/test_strategy_router.py -v --tb=short
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from api.strategy_router import build_allocation_suggestion, to_num
from config.policy import RiskMode, Scope
from data_sources.defillama import DataSourceUnavailable
from main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def valid_request():
    return {
        "chain": "base",
        "budgetUSDC": "1000",
        "maxLossPct": "5",
        "targetProfitPct": "0.1",
        "horizonDays": "30",
    }


@pytest.fixture
def mock_fetch(base_snapshot):
    with patch("api.strategy_router.fetch_snapshot", new=AsyncMock(return_value=base_snapshot)) as m:
        yield m


# =============================================================================
# BASE DAILY REVIEW
# =============================================================================

class TestBaseDailyReview:

    def test_user_view(self, client, valid_request, mock_fetch):
        response = client.post("/api/strategy/base-daily-review", json=valid_request)
        assert response.status_code == 200

        value = response.json()["deliverable"]["value"]
        assert value["version"] == "v2"
        assert value["chain"] == "base"
        assert value["dataSource"] == "defillama-yields"
        assert "debugView" not in value

        user_view = value["userView"]
        # aave USDC: 5% APY over 30d ~= 0.41% >= 0.1%, risk 52
        assert user_view["action"] == "DEPLOY"
        assert user_view["chosen"]["symbol"] == "USDC"
        assert user_view["chosen"]["riskScore"] == 52
        assert user_view["expectedPctInHorizon"] == pytest.approx(5 * 30 / 365)
        assert user_view["guardrails"]["slippageMaxPct"] == 0.3
        assert len(user_view["topPools"]) <= 3

        mock_fetch.assert_awaited_once()

    def test_inputs_defaults(self, client, valid_request, mock_fetch):
        value = client.post("/api/strategy/base-daily-review", json=valid_request).json()["deliverable"]["value"]

        assert value["inputs"] == {
            "budgetUSDC": 1000.0,
            "maxLossPct": 5.0,
            "targetProfitPct": 0.1,
            "horizonDays": 30,
            "riskMode": "conservative",
            "scope": "all",
            "tokenPreference": "USDC",
            "rebalanceCadence": "daily",
            "notes": None,
            "outputMode": "user",
        }
        assert value["allocationTemplate"]["suggestion"] == {"lending": 70, "aerodrome": 30}
        assert value["allocationTemplate"]["venues"] == ["aerodrome", "lending"]
        assert value["riskGates"]["disallowLeverage"] is True

    def test_debug_view(self, client, valid_request, mock_fetch):
        valid_request.update({"outputMode": "DEBUG", "riskMode": "balanced", "tokenPreference": "mixed"})
        value = client.post("/api/strategy/base-daily-review", json=valid_request).json()["deliverable"]["value"]

        debug = value["debugView"]
        assert debug["recommendedAction"]["action"] == value["userView"]["action"]
        assert debug["selectionStats"]["total"] == 8
        assert debug["selectionStats"]["returned"] == len(debug["liveOpportunities"])
        assert value["allocationTemplate"]["suggestion"] == {"lending": 50, "aerodrome": 50}

    def test_numeric_json_values(self, client, mock_fetch):
        payload = {"chain": "BASE", "budgetUSDC": 250, "maxLossPct": 0.5, "targetProfitPct": 1, "horizonDays": 7}
        response = client.post("/api/strategy/base-daily-review", json=payload)

        assert response.status_code == 200
        assert response.json()["deliverable"]["value"]["userView"]["action"] == "EXIT"

    def test_empty_snapshot_holds(self, client, valid_request):
        with patch("api.strategy_router.fetch_snapshot", new=AsyncMock(return_value=[])):
            value = client.post("/api/strategy/base-daily-review", json=valid_request).json()["deliverable"]["value"]

        assert value["userView"]["action"] == "HOLD"
        assert value["userView"]["chosen"] is None
        assert value["aerodromeTVLTop5Safe"] == []

    def test_data_source_down_returns_503(self, client, valid_request):
        failing = AsyncMock(side_effect=DataSourceUnavailable("https://yields.llama.fi/pools", "timeout"))
        with patch("api.strategy_router.fetch_snapshot", new=failing):
            response = client.post("/api/strategy/base-daily-review", json=valid_request)

        assert response.status_code == 503
        assert "timeout" in response.json()["detail"]

    @pytest.mark.parametrize("override,reason", [
        ({"chain": None}, "Missing chain"),
        ({"chain": "ethereum"}, "Only chain=base is supported in MVP"),
        ({"budgetUSDC": "0"}, "budgetUSDC must be a positive number"),
        ({"budgetUSDC": "lots"}, "budgetUSDC must be a positive number"),
        ({"maxLossPct": "60"}, "maxLossPct must be between 0 and 50"),
        ({"targetProfitPct": "0"}, "targetProfitPct must be between 0 and 200"),
        ({"horizonDays": "10"}, "horizonDays must be one of: 7, 14, 30"),
        ({"riskMode": "degen"}, "riskMode must be one of: conservative, balanced"),
        ({"scope": "dex"}, "scope must be one of: aerodrome, lending, all"),
        ({"tokenPreference": "BTC"}, "tokenPreference must be one of: USDC, ETH, mixed"),
        ({"outputMode": "verbose"}, "outputMode must be one of: user, debug"),
    ])
    def test_validation(self, client, valid_request, mock_fetch, override, reason):
        valid_request.update(override)

        checked = client.post("/api/strategy/base-daily-review/validate", json=valid_request).json()
        assert checked == {"valid": False, "reason": reason}

        response = client.post("/api/strategy/base-daily-review", json=valid_request)
        assert response.status_code == 400
        assert response.json()["detail"] == reason
        mock_fetch.assert_not_awaited()

    def test_validate_ok(self, client, valid_request):
        assert client.post("/api/strategy/base-daily-review/validate", json=valid_request).json() == {
            "valid": True, "reason": None
        }

    def test_payment_stub(self, client, valid_request):
        response = client.post("/api/strategy/base-daily-review/payment", json=valid_request)
        assert response.json() == {"accepted": True, "message": "Request accepted"}


# =============================================================================
# AERODROME DAILY REVIEW
# =============================================================================

class TestAerodromeDailyReview:

    def test_deliverable(self, client, valid_request, mock_fetch):
        valid_request["poolSelection"] = "tvl_top5_all"
        value = client.post("/api/strategy/aerodrome-daily-review", json=valid_request).json()["deliverable"]["value"]

        assert value["version"] == "v1"
        assert value["protocol"] == "aerodrome"
        assert [p["poolId"] for p in value["top5PoolsByTVLSafe"]] == ["aero-usdc-weth", "aero-usdc-aero-zero"]
        assert value["recommendation"]["chosenCandidate"]["poolId"] == "aero-usdc-weth"
        assert value["safetyFilters"]["minAgeDays"] == 7
        assert value["safetyFilters"]["blacklistApplied"] is True
        assert value["riskGates"]["positionMaxPctPerPool"] == 20

    def test_recommendation_on_safe_pools(self, client, valid_request, mock_fetch):
        # Top safe pool: 20% APY over 30d ~= 1.64%, risk 78 > 75
        valid_request["targetProfitPct"] = "1"
        value = client.post("/api/strategy/aerodrome-daily-review", json=valid_request).json()["deliverable"]["value"]

        assert value["recommendation"]["action"] == "HOLD"
        assert "too high for deployment" in value["recommendation"]["rationale"][0]

    def test_validation(self, client, valid_request, mock_fetch):
        valid_request["horizonDays"] = "90"
        response = client.post("/api/strategy/aerodrome-daily-review", json=valid_request)

        assert response.status_code == 400
        mock_fetch.assert_not_awaited()

    def test_payment_stub(self, client, valid_request):
        response = client.post("/api/strategy/aerodrome-daily-review/payment", json=valid_request)
        assert response.json()["accepted"] is True


# =============================================================================
# HELPERS
# =============================================================================

class TestHelpers:

    @pytest.mark.parametrize("value,expected", [
        ("5", 5.0), (" 2.5 ", 2.5), (7, 7.0), (None, None), ("abc", None), ("inf", None), (True, None),
    ])
    def test_to_num(self, value, expected):
        assert to_num(value) == expected

    @pytest.mark.parametrize("scope,mode,expected", [
        (Scope.LENDING, RiskMode.BALANCED, {"lending": 100}),
        (Scope.AERODROME, RiskMode.CONSERVATIVE, {"aerodrome": 100}),
        (Scope.ALL, RiskMode.CONSERVATIVE, {"lending": 70, "aerodrome": 30}),
        (Scope.ALL, RiskMode.BALANCED, {"lending": 50, "aerodrome": 50}),
    ])
    def test_allocation_suggestion(self, scope, mode, expected):
        assert build_allocation_suggestion(scope, mode) == expected

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"
