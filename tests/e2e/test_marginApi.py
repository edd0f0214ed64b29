"""
E2E: Margin API.

Exercises the full route -> schema -> engine flow:
- Margin calculation across every resolution level
- Rejection of invalid rule sets with all violations listed
- Rule set validation
- Target revenue calculation
- Margin suggestions per service type
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from rate_engine.core.config import Settings, get_settings
from rate_engine.main import app


pytestmark = pytest.mark.asyncio


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestCalculateMargin:
    """Margin preview for a revenue event."""

    async def test_default_rate(self, client: AsyncClient, rule_set_payload):
        resp = await client.post(
            "/api/v1/margins/calculate",
            json={"rule_set": rule_set_payload, "context": {"base_amount": "1000"}},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["margin_amount"] == "100.00"
        assert body["applied_rule_origin"] == "default"
        assert body["applied_criterion"] == "percentage"
        assert body["implied_cost"] == "900.00"
        assert body["calculation_method"] == "higher_wins"

    async def test_minimum_back_computes_percentage(self, client: AsyncClient, rule_set_payload):
        resp = await client.post(
            "/api/v1/margins/calculate",
            json={"rule_set": rule_set_payload, "context": {"base_amount": "300"}},
        )
        body = resp.json()
        assert body["margin_amount"] == "50.00"
        assert body["applied_criterion"] == "minimum"
        assert body["effective_percentage"] == "16.67"

    async def test_route_beats_service(self, client: AsyncClient, rule_set_payload):
        resp = await client.post(
            "/api/v1/margins/calculate",
            json={
                "rule_set": rule_set_payload,
                "context": {
                    "base_amount": "1000",
                    "service_type": "express",
                    "origin": "Berlin Mitte",
                    "destination": "MUNICH",
                },
            },
        )
        body = resp.json()
        assert body["applied_rule_origin"] == "route"
        assert body["margin_amount"] == "120.00"

    async def test_volume_tier(self, client: AsyncClient, rule_set_payload):
        resp = await client.post(
            "/api/v1/margins/calculate",
            json={
                "rule_set": rule_set_payload,
                "context": {"base_amount": "1000", "period_volume_count": 10},
            },
        )
        body = resp.json()
        assert body["applied_rule_origin"] == "volume_tier"
        assert body["configured_percentage"] == "8"
        assert body["margin_amount"] == "80.00"

    async def test_amount_quantum_from_overridden_settings(
        self, client: AsyncClient, rule_set_payload
    ):
        app.dependency_overrides[get_settings] = lambda: Settings(amount_quantum="1")
        try:
            resp = await client.post(
                "/api/v1/margins/calculate",
                json={"rule_set": rule_set_payload, "context": {"base_amount": "1005"}},
            )
        finally:
            app.dependency_overrides.pop(get_settings, None)
        assert resp.status_code == 200
        assert resp.json()["margin_amount"] == "101"

    async def test_invalid_rule_set_rejected(self, client: AsyncClient, rule_set_payload):
        rule_set_payload["default_rate"]["percentage"] = "-5"
        rule_set_payload["volume_tiers"][0]["max_count"] = 12
        resp = await client.post(
            "/api/v1/margins/calculate",
            json={"rule_set": rule_set_payload, "context": {"base_amount": "1000"}},
        )
        assert resp.status_code == 422
        violations = resp.json()["detail"]["violations"]
        assert "Default margin percentage must be a positive number" in violations
        assert "Volume tier 1 overlaps with tier 2" in violations

    async def test_unknown_service_type_rejected(self, client: AsyncClient, rule_set_payload):
        resp = await client.post(
            "/api/v1/margins/calculate",
            json={
                "rule_set": rule_set_payload,
                "context": {"base_amount": "1000", "service_type": "teleport"},
            },
        )
        assert resp.status_code == 422


class TestValidateRuleSet:
    async def test_valid(self, client: AsyncClient, rule_set_payload):
        resp = await client.post("/api/v1/margins/validate", json={"rule_set": rule_set_payload})
        assert resp.status_code == 200
        assert resp.json() == {"valid": True, "violations": []}

    async def test_route_without_origin(self, client: AsyncClient, rule_set_payload):
        rule_set_payload["route_rates"][0]["origin"] = ""
        resp = await client.post("/api/v1/margins/validate", json={"rule_set": rule_set_payload})
        body = resp.json()
        assert body["valid"] is False
        assert body["violations"] == ["Route margin 1 must have origin and destination"]


class TestTargetRevenue:
    async def test_target_revenue(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/margins/target-revenue",
            json={"cost": "900", "percentage": "10", "minimum_amount": "50"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["revenue"] == "1000.00"
        assert body["margin_amount"] == "100.00"

    async def test_revenue_rounded_up_to_cover_margin(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/margins/target-revenue",
            json={"cost": "100", "percentage": "3", "minimum_amount": "0"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["revenue"] == "103.10"
        assert body["margin_amount"] == "3.10"

    async def test_revenue_uses_overridden_quantum(self, client: AsyncClient):
        app.dependency_overrides[get_settings] = lambda: Settings(amount_quantum="1")
        try:
            resp = await client.post(
                "/api/v1/margins/target-revenue",
                json={"cost": "100", "percentage": "3", "minimum_amount": "0"},
            )
        finally:
            app.dependency_overrides.pop(get_settings, None)
        assert resp.status_code == 200
        assert resp.json()["revenue"] == "104"

    async def test_hundred_percent_is_unprocessable(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/margins/target-revenue",
            json={"cost": "900", "percentage": "100", "minimum_amount": "50"},
        )
        assert resp.status_code == 422


class TestSuggestions:
    async def test_overnight(self, client: AsyncClient):
        resp = await client.get("/api/v1/margins/suggestions/overnight")
        assert resp.status_code == 200
        body = resp.json()
        assert body["percentage"] == "25"
        assert body["minimum_amount"] == "75"
