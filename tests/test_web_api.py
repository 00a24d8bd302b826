"""
Tests for the CMA Web API

Verifies:
- Stateless adjustment calculation endpoint
- Provenance descriptor endpoint
- CMA lifecycle: create, replace adjustments, replace comparables, results
- 404 handling for unknown CMAs
"""

import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient

from core.cma import CmaRepository
from utils.config import Config
from web.app import create_app


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def client():
    config = Config(cma_store_path=None)
    return TestClient(create_app(config=config, repository=CmaRepository()))


@pytest.fixture
def subject():
    return {
        "listingId": "SUBJ",
        "livingArea": 2000,
        "bedroomsTotal": 3,
        "bathroomsTotal": 2,
        "yearBuilt": 2010,
        "garageSpaces": 2,
        "poolFeatures": "None",
    }


@pytest.fixture
def comp():
    return {
        "listingId": "C1",
        "streetAddress": "12 Elm St",
        "livingArea": 1800,
        "bedroomsTotal": 3,
        "bathroomsTotal": 2,
        "yearBuilt": 2005,
        "garageSpaces": 2,
        "poolFeatures": "None",
        "closePrice": 400000,
    }


# =============================================================================
# Test: Health
# =============================================================================

class TestHealth:

    def test_root(self, client):
        assert client.get("/").json() == {"status": "ok"}

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


# =============================================================================
# Test: Stateless Calculation
# =============================================================================

class TestComputeEndpoint:
    """POST /api/adjustments/compute"""

    def test_concrete_scenario(self, client, subject, comp):
        response = client.post(
            "/api/adjustments/compute",
            json={"subject": subject, "comparables": [comp]},
        )

        assert response.status_code == 200
        result = response.json()["results"][0]
        assert result["compId"] == "C1"
        assert result["compAddress"] == "12 Elm St"
        assert [a["name"] for a in result["adjustments"]] == ["Sq Ft", "Year Built"]
        assert result["totalAdjustment"] == 22500
        assert result["adjustedPrice"] == 422500
        assert result["display"]["adjustedPrice"] == "$422,500"
        assert result["display"]["adjustments"] == ["+$20,000", "+$2,500"]

    def test_rates_and_overrides(self, client, subject, comp):
        response = client.post(
            "/api/adjustments/compute",
            json={
                "subject": subject,
                "comparables": [comp],
                "rates": {"yearBuiltPerYear": 0},
                "compAdjustments": {"C1": {"sqft": 1000, "custom": [{"name": "View", "value": 500}]}},
            },
        )

        result = response.json()["results"][0]
        assert [(a["name"], a["value"]) for a in result["adjustments"]] == [
            ("Sq Ft", 1000), ("View", 500),
        ]
        assert response.json()["summary"]["medianAdjustedPrice"] == 401500

    def test_malformed_fields_degrade(self, client):
        response = client.post(
            "/api/adjustments/compute",
            json={"subject": {"livingArea": "big"}, "comparables": [{"poolFeatures": 7}]},
        )

        assert response.status_code == 200
        result = response.json()["results"][0]
        assert result["adjustments"] == []
        assert result["compAddress"] == "Unknown"

    def test_missing_subject_rejected(self, client):
        response = client.post("/api/adjustments/compute", json={"comparables": []})

        assert response.status_code == 422


# =============================================================================
# Test: Provenance
# =============================================================================

class TestCompSourceEndpoint:
    """GET /api/comp-sources/{source}"""

    def test_coordinate_fallback(self, client):
        response = client.get(
            "/api/comp-sources/coordinate_fallback",
            params={"generatedAt": "2024-01-05T15:07:00", "comparablesCount": 4},
        )

        data = response.json()
        assert data["shortLabel"] == "Nearby"
        assert data["timestampLabel"] == "Generated:"
        assert data["formattedTimestamp"] == "Jan 5, 2024 at 3:07 PM"
        assert data["countLabel"] == "4 comparables found"

    def test_unknown_source(self, client):
        data = client.get("/api/comp-sources/unknown_tag").json()

        assert data["source"] == "repliers_similar"
        assert data["label"] == "MLS Comparables"


# =============================================================================
# Test: CMA Lifecycle
# =============================================================================

class TestCmaEndpoints:
    """CMA records and their adjustments."""

    def _create(self, client, subject, comp, **extra):
        body = {"name": "Elm St", "subject": subject, "comparables": [comp]}
        body.update(extra)
        response = client.post("/api/cmas", json=body)
        assert response.status_code == 201
        return response.json()

    def test_create_and_fetch(self, client, subject, comp):
        created = self._create(client, subject, comp)

        fetched = client.get(f"/api/cmas/{created['id']}").json()

        assert fetched == created
        assert fetched["source"] == "repliers_similar"
        assert fetched["adjustments"]["enabled"] is False
        assert len(client.get("/api/cmas").json()) == 1

    def test_results_empty_while_disabled(self, client, subject, comp):
        created = self._create(client, subject, comp)

        data = client.get(f"/api/cmas/{created['id']}/adjustments/results").json()

        assert data["enabled"] is False
        assert data["results"] == []
        assert data["summary"]["count"] == 0

    def test_replace_adjustments_then_results(self, client, subject, comp):
        created = self._create(client, subject, comp)

        response = client.put(
            f"/api/cmas/{created['id']}/adjustments",
            json={"enabled": True, "rates": {"sqftPerUnit": 50}, "compAdjustments": {}},
        )
        assert response.status_code == 200
        assert response.json()["rates"]["sqftPerUnit"] == 50
        assert response.json()["rates"]["bedroomValue"] == 10000

        data = client.get(f"/api/cmas/{created['id']}/adjustments/results").json()
        assert data["enabled"] is True
        assert data["results"][0]["totalAdjustment"] == 12500

    def test_replace_is_whole_object(self, client, subject, comp):
        created = self._create(
            client,
            subject,
            comp,
            adjustments={"enabled": True, "compAdjustments": {"C1": {"sqft": 1}}},
        )

        client.put(f"/api/cmas/{created['id']}/adjustments", json={"enabled": True})

        stored = client.get(f"/api/cmas/{created['id']}").json()["adjustments"]
        assert stored["compAdjustments"] == {}

    def test_replace_comparables_and_source(self, client, subject, comp):
        created = self._create(client, subject, comp, source="coordinate_fallback")
        assert created["source"] == "coordinate_fallback"

        client.put(
            f"/api/cmas/{created['id']}/comparables",
            json={"comparables": [comp, dict(comp, listingId="C2")]},
        )

        source = client.get(f"/api/cmas/{created['id']}/source").json()
        assert source["source"] == "manual"
        assert source["timestampLabel"] == "Last updated:"
        assert source["countLabel"] == "2 comparables found"

    def test_delete(self, client, subject, comp):
        created = self._create(client, subject, comp)

        assert client.delete(f"/api/cmas/{created['id']}").status_code == 200
        assert client.get(f"/api/cmas/{created['id']}").status_code == 404

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/cmas/missing"),
        ("get", "/api/cmas/missing/source"),
        ("get", "/api/cmas/missing/adjustments/results"),
        ("delete", "/api/cmas/missing"),
    ])
    def test_unknown_cma(self, client, method, path):
        assert getattr(client, method)(path).status_code == 404

    def test_unknown_cma_put(self, client):
        response = client.put("/api/cmas/missing/adjustments", json={"enabled": True})

        assert response.status_code == 404
