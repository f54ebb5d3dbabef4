"""Tests for the HTTP endpoints."""
import pytest
from httpx import AsyncClient, ASGITransport
from unittest.mock import AsyncMock, MagicMock
import uuid

from api_service.main import app
from api_service.deps import get_item_service
from api_service.services.inspection_item_service import ItemValidationError


@pytest.fixture
def client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.db = AsyncMock()
    app.dependency_overrides[get_item_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(client):
    async with client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_score_item(client):
    """Test single item scoring with a critical brake pad."""
    async with client:
        response = await client.post("/urgency/items", json={
            "condition": "needs_immediate",
            "item_type": "brakes",
            "measurements": {"pad_thickness_mm": 1.5},
            "priority": 1
        })

    assert response.status_code == 200
    data = response.json()
    assert data["level"] == "critical"
    assert data["score"] > 85
    assert "Condition: needs_immediate (+95)" in data["factors"]


@pytest.mark.asyncio
async def test_score_item_invalid_condition(client):
    """Test item scoring with an unknown condition value."""
    async with client:
        response = await client.post("/urgency/items", json={
            "condition": "terrible",
            "item_type": "brakes"
        })

    assert response.status_code == 422  # Validation error


@pytest.mark.asyncio
async def test_score_inspection(client):
    async with client:
        response = await client.post("/urgency/inspections", json={
            "items": [
                {"condition": "poor", "item_type": "brakes", "priority": 7},
                {"condition": "poor", "item_type": "tires", "priority": 7},
                {"condition": "poor", "item_type": "battery", "priority": 7}
            ]
        })

    assert response.status_code == 200
    data = response.json()
    assert data["level"] == "high"
    assert data["score"] == 75


@pytest.mark.asyncio
async def test_score_empty_inspection(client):
    async with client:
        response = await client.post("/urgency/inspections", json={"items": []})

    assert response.status_code == 200
    assert response.json()["factors"] == ["No inspection items"]


@pytest.mark.asyncio
async def test_recommendations_with_costs(client):
    async with client:
        response = await client.post("/recommendations", json={
            "item_type": "brakes",
            "condition": "poor",
            "measurements": {"pad_thickness_mm": 2.5},
            "vehicle_info": {"year": 2020, "make": "Honda", "model": "Civic", "mileage": 35000},
            "shop_config": {"include_cost_estimates": True, "labor_rate": 100, "markup_percent": 0.2}
        })

    assert response.status_code == 200
    data = response.json()
    assert data["primary"]["type"] == "replacement"
    assert data["primary"]["estimated_cost"]["total"] == pytest.approx(380.0)
    assert data["secondary"][0]["type"] == "replacement"
    assert len(data["preventive"]) == 2
    assert data["next_service_date"] is not None


@pytest.mark.asyncio
async def test_recommendations_history(client):
    async with client:
        response = await client.post("/recommendations", json={
            "item_type": "tires",
            "condition": "poor",
            "history": [
                {"date": "2024-01-01", "condition": "good"},
                {"date": "2024-02-01", "condition": "fair"},
                {"date": "2024-03-01", "condition": "poor"}
            ]
        })

    assert response.status_code == 200
    assert "Condition consistently degrading" in response.json()["patterns"]


@pytest.mark.asyncio
async def test_assess_item_not_found(client, mock_service):
    mock_service.assess_item = AsyncMock(return_value=None)

    async with client:
        response = await client.post(f"/inspection-items/{uuid.uuid4()}/assess")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_item_validation_error(client, mock_service):
    mock_service.update_item = AsyncMock(
        side_effect=ItemValidationError(["Battery voltage must be between 8-16V"])
    )

    async with client:
        response = await client.patch(f"/inspection-items/{uuid.uuid4()}", json={"measurements": {"voltage": 30}})

    assert response.status_code == 422
    assert response.json()["detail"] == ["Battery voltage must be between 8-16V"]


@pytest.mark.asyncio
async def test_recalculate_inspection_error(client, mock_service):
    mock_service.recalculate_inspection = AsyncMock(side_effect=RuntimeError("connection lost"))

    async with client:
        response = await client.post(f"/inspections/{uuid.uuid4()}/urgency")

    assert response.status_code == 500
    mock_service.db.rollback.assert_called_once()
