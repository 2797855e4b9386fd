"""Tests for the FastAPI endpoints."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from furnispec.config import Settings
from furnispec.main import app
from furnispec.api import routes_configurations, routes_generate
from furnispec.core.configurations.store import ConfigurationStore
from furnispec.gateway.coordinator import GenerationCoordinator
from furnispec.gateway.generation import GatewayError, GenerationResult

client = TestClient(app)

TIER = {"name": "standard", "price_per_cubic_meter": 1500}


class StubGateway:
    def __init__(self, fail=False):
        self.fail = fail

    async def generate(self, spec, closed=False):
        if self.fail:
            raise GatewayError("render farm down", retryable=True, status_code=503)
        return GenerationResult(glb_url=f"/models/{spec.preset_id}.glb", dxf_url=f"/models/{spec.preset_id}.dxf")


@pytest.fixture
def coordinator(monkeypatch):
    coord = GenerationCoordinator(StubGateway())
    monkeypatch.setattr(routes_generate, "get_coordinator", lambda: coord)
    monkeypatch.setattr(routes_configurations, "get_coordinator", lambda: coord)
    return coord


@pytest.fixture
def failing_coordinator(monkeypatch):
    coord = GenerationCoordinator(StubGateway(fail=True))
    monkeypatch.setattr(routes_generate, "get_coordinator", lambda: coord)
    monkeypatch.setattr(routes_configurations, "get_coordinator", lambda: coord)
    return coord


@pytest.fixture
def store(monkeypatch, tmp_path):
    s = ConfigurationStore(tmp_path)
    monkeypatch.setattr(routes_configurations, "get_store", lambda: s)
    return s


class TestHealthEndpoint:
    def test_health(self):
        r = client.get("/api/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestPresetsEndpoint:
    def test_list(self):
        r = client.get("/api/presets")
        assert r.status_code == 200
        ids = [p["id"] for p in r.json()]
        assert ids == ["M1", "M2", "M3", "M4"]

    def test_get(self):
        r = client.get("/api/presets/M2")
        assert r.status_code == 200
        assert r.json()["dimension_arity"] == 4
        assert r.json()["required_flags"] == ["b"]

    def test_unknown(self):
        assert client.get("/api/presets/M9").status_code == 404


class TestParseEndpoint:
    def test_valid_code(self):
        r = client.post("/api/parse", json={"code": "M2(2000,450,700,1200)Eb"})
        assert r.status_code == 200
        data = r.json()
        assert data["code"] == "M2(2000,450,700,1200)Eb"
        assert "valid" not in data
        assert data["dimensions"] == [2000, 450, 700, 1200]
        assert data["max_height"] == 1200

    def test_empty_code(self):
        r = client.post("/api/parse", json={"code": ""})
        assert r.status_code == 422

    def test_syntax_error_has_position(self):
        r = client.post("/api/parse", json={"code": "M1(1000,4x0,1000)b"})
        assert r.status_code == 422
        detail = r.json()["detail"]
        assert detail[0]["code"] == "syntax"
        assert detail[0]["position"] == 9

    def test_all_validation_errors_listed(self):
        r = client.post("/api/parse", json={"code": "M1(10,900,1000)EQ"})
        assert r.status_code == 422
        fields = [d["field"] for d in r.json()["detail"]]
        assert fields == ["dimensions[0]", "dimensions[1]", "flags.b", "flags.Q"]


class TestPriceEndpoint:
    def test_price(self):
        r = client.post("/api/price", json={"code": "M1(1500,730,500)b", "tier": TIER})
        assert r.status_code == 200
        data = r.json()
        assert Decimal(data["volume_m3"]) == Decimal("0.5475")
        assert Decimal(data["base_price"]) == Decimal("821.25")
        assert data["total_price"] == 821

    def test_default_tier(self):
        r = client.post("/api/price", json={"code": "M1(1500,730,500)b"})
        assert r.status_code == 200
        assert r.json()["total_price"] == 821

    def test_with_supplements(self):
        r = client.post("/api/price", json={
            "code": "M1(2500,500,1000)b",
            "tier": TIER,
            "catalog": [
                {"code": "metal", "kind": "base", "unit_price": 20, "unit": "foot"},
                {"code": "drawer", "kind": "drawer", "unit_price": 45},
            ],
            "base": "metal",
            "drawers": "drawer",
            "drawer_count": 2,
        })
        assert r.status_code == 200
        data = r.json()
        assert Decimal(data["supplements_total"]) == Decimal("170")
        assert data["total_price"] == 1875 + 170
        assert {line["code"] for line in data["lines"]} == {"metal", "drawer"}

    def test_non_positive_tier_rejected(self):
        r = client.post("/api/price", json={
            "code": "M1(1500,730,500)b",
            "tier": {"name": "free", "price_per_cubic_meter": 0},
        })
        assert r.status_code == 422

    def test_unknown_unit_rejected(self):
        r = client.post("/api/price", json={
            "code": "M1(2500,400,1000)b",
            "tier": TIER,
            "catalog": [{"code": "rod", "kind": "wardrobe_rail", "unit_price": 20, "unit": "meter"}],
            "wardrobe_rail": "rod",
        })
        assert r.status_code == 422

    def test_amounts_serialized_exactly(self):
        r = client.post("/api/price", json={
            "code": "M1(1000,333,1000)b",
            "tier": {"name": "odd", "price_per_cubic_meter": "0.1"},
        })
        assert r.status_code == 200
        data = r.json()
        assert Decimal(data["volume_m3"]) == Decimal("0.333")
        assert Decimal(data["base_price"]) == Decimal("0.0333")
        assert data["total_price"] == 0

    def test_unknown_supplement(self):
        r = client.post("/api/price", json={"code": "M1(1500,730,500)b", "base": "gold"})
        assert r.status_code == 422
        assert r.json()["detail"][0]["code"] == "unknown_supplement"

    def test_invalid_code(self):
        r = client.post("/api/price", json={"code": "M1(1500,730,500)E", "tier": TIER})
        assert r.status_code == 422


class TestGenerateEndpoint:
    def test_generate(self, coordinator):
        r = client.post("/api/generate", json={"prompt": "M1(1000,400,1000)Eb", "closed": False})
        assert r.status_code == 200
        assert r.json() == {"glb_url": "/models/M1.glb", "dxf_url": "/models/M1.dxf"}

    def test_invalid_prompt_not_forwarded(self, coordinator):
        r = client.post("/api/generate", json={"prompt": "M1(1000,400,1000)E"})
        assert r.status_code == 422

    def test_superseded_request(self, monkeypatch):
        class SupersededCoordinator:
            async def generate(self, spec, closed=False, target=None):
                return None

        monkeypatch.setattr(routes_generate, "get_coordinator", SupersededCoordinator)
        r = client.post("/api/generate", json={"prompt": "M1(1000,400,1000)Eb", "target": "hover"})
        assert r.status_code == 409

    def test_gateway_failure(self, failing_coordinator):
        r = client.post("/api/generate", json={"prompt": "M1(1000,400,1000)Eb"})
        assert r.status_code == 502


class TestConfigurationsEndpoint:
    def test_create_list_delete(self, coordinator, store):
        r = client.post("/api/configurations", json={
            "name": "Salon",
            "code": "M1(1500,730,500)Eb",
            "tier": TIER,
            "config_data": {"color": "#D8C7A1"},
        })
        assert r.status_code == 201
        record = r.json()
        assert record["price"] == 821
        assert record["glb_url"] == "/models/M1.glb"
        assert record["artifact_status"] == "ready"
        assert record["config_data"] == {"color": "#D8C7A1"}

        r = client.get("/api/configurations")
        assert [c["id"] for c in r.json()] == [record["id"]]

        assert client.get(f"/api/configurations/{record['id']}").json() == record
        assert client.delete(f"/api/configurations/{record['id']}").status_code == 204
        assert client.get(f"/api/configurations/{record['id']}").status_code == 404

    def test_price_kept_when_generation_fails(self, failing_coordinator, store):
        r = client.post("/api/configurations", json={
            "name": "Bureau",
            "code": "M1(1500,730,500)Eb",
            "tier": TIER,
        })
        assert r.status_code == 201
        record = r.json()
        assert record["price"] == 821
        assert record["glb_url"] is None
        assert record["artifact_status"] == "pending"

    def test_invalid_code_not_saved(self, coordinator, store):
        r = client.post("/api/configurations", json={"name": "X", "code": "M9(1,2,3)b", "tier": TIER})
        assert r.status_code == 422
        assert r.json()["detail"][0]["code"] == "unknown_preset"
        assert store.list_all() == []

    def test_delete_missing(self, store):
        assert client.delete("/api/configurations/deadbeef").status_code == 404


class TestSettings:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MEUBLE_GENERATION_CACHE_SIZE", "8")
        assert Settings().generation_cache_size == 8

    def test_only_used_fields(self):
        assert "debug" not in Settings.model_fields
