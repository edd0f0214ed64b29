"""
E2E test fixtures for the rate engine API.

Provides:
- httpx AsyncClient wired to the FastAPI app via ASGI transport (no network)
- JSON payload builders for rule sets and commission rules
"""

from __future__ import annotations

from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from rate_engine.main import app


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def rule_set_payload() -> dict[str, Any]:
    """Customer rule set with route, service and volume overrides."""
    return {
        "subject_id": "cust-001",
        "default_rate": {"percentage": "10", "minimum_amount": "50"},
        "service_rates": {"express": {"percentage": "20", "minimum_amount": "30"}},
        "route_rates": [
            {
                "origin": "Berlin",
                "destination": "Munich",
                "percentage": "12",
                "minimum_amount": "40",
                "route_id": "r-1",
            }
        ],
        "volume_tiers": [
            {"min_count": 0, "max_count": 9, "percentage": "5", "minimum_amount": "20"},
            {"min_count": 10, "percentage": "8", "minimum_amount": "20"},
        ],
    }


@pytest.fixture
def commission_rule_payload() -> dict[str, Any]:
    return {
        "id": "cr-margin",
        "name": "Margin share",
        "type": "margin_percentage",
        "rate": "10",
        "effective_from": "2026-01-01",
    }
