"""Tests for the land analysis HTTP endpoints."""
import pytest
from fastapi.testclient import TestClient

from land_analysis.main import app

SQUARE = [[[-1.5, 52.0], [-1.4999, 52.0], [-1.4999, 52.0001], [-1.5, 52.0001], [-1.5, 52.0]]]


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def geojson_feature(area_m2, theme, group="", term=""):
    return {
        "type": "Feature",
        "geometry": {"type": "Polygon", "coordinates": SQUARE},
        "properties": {
            "theme": theme,
            "descriptiveGroup": group,
            "descriptiveTerm": term,
            "area_m2": area_m2,
        },
    }


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestLandAnalysisEndpoint:
    """Tests for POST /api/land-analysis."""

    def test_analyze_holding(self, client):
        payload = {
            "map_name": "Home Farm",
            "plans": [{"id": "p1", "name": "Home Farm", "planType": "SFI"}],
            "plan_features": {
                "p1": {"features": [
                    geojson_feature(20000, "{Land}", "{Agricultural Land}"),
                    geojson_feature(150, "{Buildings}", "{Building}", "{Barn}"),
                ]},
            },
        }
        response = client.post("/api/land-analysis", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["executive"]["map_name"] == "Home Farm"
        assert data["valuation"]["land_value"] == pytest.approx(2 * 25000)
        assert data["valuation"]["building_value"] == pytest.approx(150 * 500)
        assert data["building_portfolio"]["summary"]["total_buildings"] == 1

    def test_default_map_name(self, client):
        payload = {
            "plans": [{"id": "p1", "name": "Plan"}],
            "plan_features": {"p1": {"features": [geojson_feature(500, "{Water}")]}},
        }
        response = client.post("/api/land-analysis", json=payload)
        assert response.status_code == 200
        assert response.json()["executive"]["map_name"] == "Untitled Holding"

    def test_no_features_returns_422(self, client):
        payload = {"plans": [{"id": "p1", "name": "Plan"}], "plan_features": {}}
        response = client.post("/api/land-analysis", json=payload)
        assert response.status_code == 422
        assert "features" in response.json()["detail"]

    def test_malformed_features_do_not_reject_request(self, client):
        payload = {
            "plans": [{"id": "p1", "name": "Plan"}],
            "plan_features": {
                "p1": {"features": [
                    geojson_feature(20000, "{Land}", "{Agricultural Land}"),
                    {"type": "Feature", "geometry": "garbage", "properties": {}},
                    {"type": "Feature", "geometry": {"type": 7, "coordinates": SQUARE}},
                    None,
                ]},
            },
        }
        response = client.post("/api/land-analysis", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["executive"]["total_features"] == 4
        assert data["valuation"]["land_value"] == pytest.approx(2 * 25000)
        unknown = next(row for row in data["land_use_breakdown"] if row["type"] == "unknown")
        assert unknown["features"] == 3
        assert unknown["area"] == 0

    def test_only_unmeasurable_features_returns_422(self, client):
        payload = {
            "plans": [{"id": "p1", "name": "Plan"}],
            "plan_features": {"p1": {"features": [{"type": "Feature", "geometry": None}]}},
        }
        response = client.post("/api/land-analysis", json=payload)
        assert response.status_code == 422
        assert "usable area" in response.json()["detail"]

    def test_no_plans_returns_422(self, client):
        response = client.post("/api/land-analysis", json={"plans": []})
        assert response.status_code == 422


class TestRatesEndpoint:
    def test_get_rates(self, client):
        response = client.get("/api/land-analysis/rates")
        assert response.status_code == 200
        data = response.json()
        assert data["buildings"]["residential_building"]["detached"] == 2500
        assert data["sub_tier_defaults"]["residential_building"] == "detached"


class TestPlanQualityEndpoint:
    def test_plan_quality(self, client):
        payload = {"features": [geojson_feature(1000, "{Land}", "{Agricultural Land}")]}
        response = client.post("/api/land-analysis/plans/p1/quality", json=payload)
        assert response.status_code == 200
        assert response.json()["grade"] == "High"
        assert response.json()["score"] == 100
