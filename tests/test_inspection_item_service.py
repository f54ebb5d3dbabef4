import pytest
import uuid
from unittest.mock import AsyncMock, MagicMock
from api_service.services.inspection_item_service import InspectionItemService, ItemValidationError
from schemas.inspection_item import InspectionItemUpdate
from db.models import Inspection, InspectionItem, ShopSettings, Vehicle

def result_of(value):
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = value
    return mock_result

def make_item(category="brakes", component="Front brake pads", condition="poor", measurements=None):
    inspection = Inspection(id=uuid.uuid4(), shop_id=uuid.uuid4(), vehicle=None)
    return InspectionItem(
        id=uuid.uuid4(),
        inspection=inspection,
        category=category,
        component=component,
        condition=condition,
        measurements=measurements,
        priority=5
    )

@pytest.mark.asyncio
async def test_assess_item_writes_results():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)

    item = make_item(measurements={"pad_thickness_mm": 3})
    settings = ShopSettings(shop_id=item.inspection.shop_id, include_cost_estimates=True,
                            include_timeframes=True, labor_rate=100, markup_percent=0.2)
    mock_db.execute.side_effect = [result_of(item), result_of(settings)]

    assessment = await service.assess_item(item.id)

    assert assessment["urgency"].level.value == "high"
    assert assessment["priority"] == 7
    assert item.priority == 7
    assert item.requires_immediate_attention is False
    assert item.estimated_cost == pytest.approx(380.0)
    assert item.recommendations.startswith("Front brake pads was rated high urgency (77/100).")

    mock_db.commit.assert_called_once()
    mock_db.refresh.assert_called_once_with(item)

@pytest.mark.asyncio
async def test_assess_item_uses_vehicle_for_service_date():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)

    item = make_item(category="tires", component="Tires", condition="good")
    item.inspection.vehicle = Vehicle(year=2021, make="Honda", model="Civic", mileage=12000)
    mock_db.execute.side_effect = [result_of(item), result_of(None)]

    assessment = await service.assess_item(item.id)

    assert assessment["recommendations"].next_service_date is not None
    assert [rec.title for rec in assessment["recommendations"].preventive] == ["Rotation service due now"]
    assert item.estimated_cost is None
    assert item.priority == 1

@pytest.mark.asyncio
async def test_assess_item_not_found():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)
    mock_db.execute.return_value = result_of(None)

    assert await service.assess_item(uuid.uuid4()) is None
    mock_db.commit.assert_not_called()

@pytest.mark.asyncio
async def test_update_item_rejects_out_of_range_measurements():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)

    item = make_item()
    mock_db.execute.return_value = result_of(item)

    with pytest.raises(ItemValidationError) as exc_info:
        await service.update_item(item.id, InspectionItemUpdate(measurements={"pad_thickness_mm": 30}))

    assert exc_info.value.errors == ["Brake pad thickness must be between 0-20mm"]
    assert item.measurements is None
    mock_db.commit.assert_not_called()

@pytest.mark.asyncio
async def test_update_item_condition_change_reassesses():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)

    item = make_item(condition="good")
    mock_db.execute.side_effect = [result_of(item), result_of(None)]

    update = InspectionItemUpdate(condition="needs_immediate", measurements={"pad_thickness_mm": 1.5})
    result = await service.update_item(item.id, update)

    assert "Condition degraded significantly - verify assessment" in result["warnings"]
    assert "pad_thickness_mm is critically low" in result["warnings"]
    assert result["assessment"]["urgency"].level.value == "critical"
    assert item.condition == "needs_immediate"
    assert item.priority == 10
    assert item.requires_immediate_attention is True
    mock_db.commit.assert_called_once()

@pytest.mark.asyncio
async def test_update_item_notes_only():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)

    item = make_item()
    mock_db.execute.return_value = result_of(item)

    result = await service.update_item(item.id, InspectionItemUpdate(notes="Customer declined", priority=3))

    assert result["assessment"] is None
    assert result["warnings"] == []
    assert item.notes == "Customer declined"
    assert item.priority == 3
    assert mock_db.execute.call_count == 1

@pytest.mark.asyncio
async def test_recalculate_inspection():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)

    brakes = InspectionItem(id=uuid.uuid4(), category="brakes", component="Brakes", condition="poor", priority=5)
    fluids = InspectionItem(id=uuid.uuid4(), category="fluids", component="Oil", condition="good", priority=5)
    unassessed = InspectionItem(id=uuid.uuid4(), category="lights", component="Headlights", condition=None, priority=5)
    inspection = Inspection(id=uuid.uuid4(), shop_id=uuid.uuid4(), vehicle=None,
                            items=[brakes, fluids, unassessed])
    mock_db.execute.side_effect = [result_of(inspection), result_of(None)]

    result = await service.recalculate_inspection(inspection.id)

    assert result["urgency"].level.value == "normal"
    assert result["updated_items"] == 2
    assert inspection.urgency_level == "normal"
    assert inspection.urgency_score == 50
    assert unassessed.priority == 5
    mock_db.commit.assert_called_once()

@pytest.mark.asyncio
async def test_recalculate_inspection_uses_shop_thresholds():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)

    item = InspectionItem(id=uuid.uuid4(), category="brakes", component="Brakes", condition="fair", priority=5)
    inspection = Inspection(id=uuid.uuid4(), shop_id=uuid.uuid4(), vehicle=None, items=[item])
    settings = ShopSettings(shop_id=inspection.shop_id, urgency_thresholds={"high": 40})
    mock_db.execute.side_effect = [result_of(inspection), result_of(settings)]

    result = await service.recalculate_inspection(inspection.id)

    assert item.priority == 7
    assert result["urgency"].level.value == "normal"

@pytest.mark.asyncio
async def test_recalculate_inspection_not_found():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)
    mock_db.execute.return_value = result_of(None)

    assert await service.recalculate_inspection(uuid.uuid4()) is None

@pytest.mark.asyncio
async def test_assess_item_clears_stale_cost():
    mock_db = AsyncMock()
    service = InspectionItemService(mock_db)

    item = make_item(condition="good")
    item.estimated_cost = 380.0
    settings = ShopSettings(shop_id=item.inspection.shop_id, include_cost_estimates=True,
                            include_timeframes=True, labor_rate=100, markup_percent=0.2)
    mock_db.execute.side_effect = [result_of(item), result_of(settings)]

    assessment = await service.assess_item(item.id)

    assert assessment["recommendations"].primary.estimated_cost is None
    assert item.estimated_cost is None
    assert item.priority == 1
