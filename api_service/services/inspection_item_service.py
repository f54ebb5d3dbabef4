from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import joinedload, selectinload
from typing import List, Dict, Any, Optional
import uuid
import structlog

from db.models import Inspection, InspectionItem, ShopSettings, Vehicle
from domain.urgency_calculator import UrgencyInput, UrgencyLevel
from domain.rule_based_urgency import RuleBasedUrgencyCalculator
from domain.recommendation_engine import RecommendationInput, ShopConfig, VehicleInfo
from domain.rule_based_recommendation import RuleBasedRecommendationEngine
from domain.explanation_generator import ExplanationGenerator
from domain.measurements import validate_measurements
from schemas.inspection_item import InspectionItemUpdate

logger = structlog.get_logger()

LEVEL_PRIORITY = {
    UrgencyLevel.CRITICAL: 10,
    UrgencyLevel.HIGH: 7,
    UrgencyLevel.NORMAL: 4,
    UrgencyLevel.LOW: 1,
}


class ItemValidationError(ValueError):
    """Raised when recorded measurements fall outside accepted ranges."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class InspectionItemService:
    """
    Service that scores inspection items and writes the results back onto them.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.recommendation_engine = RuleBasedRecommendationEngine()
        self.explainer = ExplanationGenerator()

    async def assess_item(self, item_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        """
        Score one item, store priority, cost and recommendation text on it.

        Args:
            item_id: The ID of the inspection item

        Returns:
            Dictionary with the item, urgency and recommendations, or None if not found
        """
        item = await self._get_item(item_id)
        if not item:
            logger.warning(f"Inspection item {item_id} not found for assessment")
            return None

        settings = await self._get_shop_settings(item.inspection.shop_id)
        assessment = self._assess(item, settings, item.inspection.vehicle)

        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Assessed item {item_id}: {assessment['urgency'].level.value}")
        return assessment

    async def update_item(
        self,
        item_id: uuid.UUID,
        update: InspectionItemUpdate
    ) -> Optional[Dict[str, Any]]:
        """
        Apply a mechanic's changes and re-score the item when its condition or measurements changed.

        Raises:
            ItemValidationError: if measurements are out of range
        """
        item = await self._get_item(item_id)
        if not item:
            return None

        warnings: List[str] = []
        if update.measurements is not None:
            errors, measurement_warnings = validate_measurements(item.category, update.measurements)
            if errors:
                raise ItemValidationError(errors)
            warnings.extend(measurement_warnings)

        new_condition = update.condition.value if update.condition else None
        condition_changed = new_condition is not None and new_condition != item.condition
        if condition_changed:
            warning = self._check_condition_change(item.condition, new_condition)
            if warning:
                warnings.append(warning)
            item.condition = new_condition

        measurements_changed = update.measurements is not None and update.measurements != item.measurements
        if measurements_changed:
            item.measurements = update.measurements
        if update.notes is not None:
            item.notes = update.notes
        if update.priority is not None:
            item.priority = update.priority

        assessment = None
        if (condition_changed or measurements_changed) and item.condition:
            settings = await self._get_shop_settings(item.inspection.shop_id)
            assessment = self._assess(item, settings, item.inspection.vehicle)

        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Updated item {item_id}", reassessed=assessment is not None, warnings=len(warnings))
        return {"item": item, "warnings": warnings, "assessment": assessment}

    async def recalculate_inspection(self, inspection_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        """
        Re-score every assessed item of an inspection and store the aggregate urgency.
        """
        stmt = select(Inspection).options(
            selectinload(Inspection.items),
            joinedload(Inspection.vehicle)
        ).where(Inspection.id == inspection_id)
        result = await self.db.execute(stmt)
        inspection = result.scalar_one_or_none()

        if not inspection:
            logger.warning(f"Inspection {inspection_id} not found")
            return None

        settings = await self._get_shop_settings(inspection.shop_id)
        calculator = self._calculator(settings)

        updated = 0
        urgency_inputs = []
        for item in inspection.items:
            if not item.condition:
                continue
            previous_priority = item.priority
            assessment = self._assess(item, settings, inspection.vehicle)
            urgency_inputs.append(assessment["urgency_input"])
            if assessment["priority"] != previous_priority:
                updated += 1

        urgency = calculator.calculate_inspection_urgency(urgency_inputs)
        inspection.urgency_level = urgency.level.value
        inspection.urgency_score = urgency.score

        await self.db.commit()

        logger.info(f"Inspection {inspection_id} urgency {urgency.level.value}, {updated} item priorities changed")
        return {"inspection_id": inspection_id, "urgency": urgency, "updated_items": updated}

    def _assess(
        self,
        item: InspectionItem,
        settings: Optional[ShopSettings],
        vehicle: Optional[Vehicle]
    ) -> Dict[str, Any]:
        """Run both scoring components and write the results onto the item row."""
        # Stored priority and cost are outputs of earlier assessments, so they are not fed back in
        urgency_input = UrgencyInput(
            condition=item.condition,
            item_type=item.category,
            measurements=item.measurements
        )
        urgency = self._calculator(settings).calculate_item_urgency(urgency_input)

        recommendations = self.recommendation_engine.generate_recommendations(RecommendationInput(
            item_type=item.category,
            condition=item.condition,
            measurements=item.measurements,
            vehicle_info=self._vehicle_info(vehicle),
            shop_config=self._shop_config(settings)
        ))
        summary = self.explainer.generate(item.component, urgency, recommendations)

        priority = LEVEL_PRIORITY[urgency.level]
        item.priority = priority
        item.recommendations = summary
        item.requires_immediate_attention = urgency.level == UrgencyLevel.CRITICAL
        cost = recommendations.primary.estimated_cost
        item.estimated_cost = cost.total if cost else None

        return {
            "item": item,
            "urgency_input": urgency_input,
            "urgency": urgency,
            "recommendations": recommendations,
            "summary": summary,
            "priority": priority,
        }

    async def _get_item(self, item_id: uuid.UUID) -> Optional[InspectionItem]:
        stmt = select(InspectionItem).options(
            joinedload(InspectionItem.inspection).joinedload(Inspection.vehicle)
        ).where(InspectionItem.id == item_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_shop_settings(self, shop_id: uuid.UUID) -> Optional[ShopSettings]:
        result = await self.db.execute(select(ShopSettings).where(ShopSettings.shop_id == shop_id))
        return result.scalar_one_or_none()

    def _calculator(self, settings: Optional[ShopSettings]) -> RuleBasedUrgencyCalculator:
        overrides = settings.urgency_thresholds if settings else None
        return RuleBasedUrgencyCalculator(overrides)

    def _shop_config(self, settings: Optional[ShopSettings]) -> Optional[ShopConfig]:
        if settings is None:
            return None
        return ShopConfig(
            include_cost_estimates=bool(settings.include_cost_estimates),
            include_part_numbers=bool(settings.include_part_numbers),
            include_timeframes=settings.include_timeframes is not False,
            labor_rate=settings.labor_rate,
            markup_percent=settings.markup_percent
        )

    def _vehicle_info(self, vehicle: Optional[Vehicle]) -> Optional[VehicleInfo]:
        if vehicle is None:
            return None
        return VehicleInfo(year=vehicle.year, make=vehicle.make, model=vehicle.model, mileage=vehicle.mileage)

    def _check_condition_change(self, old_condition: Optional[str], new_condition: str) -> Optional[str]:
        if old_condition == "good" and new_condition == "needs_immediate":
            return "Condition degraded significantly - verify assessment"
        if new_condition == "needs_immediate":
            return "Critical safety item identified - requires immediate attention"
        if old_condition == "needs_immediate" and new_condition == "good":
            return "Major condition improvement - verify repair was completed"
        return None
