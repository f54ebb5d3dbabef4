from fastapi import APIRouter, HTTPException, status
import structlog

from schemas.recommendation import (
    RecommendationRequest, RecommendationResponse, RecommendationSchema, CostEstimateSchema,
)
from domain.recommendation_engine import (
    RecommendationInput, RecommendationResult, Recommendation, VehicleInfo, ShopConfig, HistoryEntry,
)
from domain.rule_based_recommendation import generate_recommendations

logger = structlog.get_logger()

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


def to_recommendation_schema(rec: Recommendation) -> RecommendationSchema:
    cost = None
    if rec.estimated_cost:
        cost = CostEstimateSchema(
            parts=rec.estimated_cost.parts,
            labor=rec.estimated_cost.labor,
            total=rec.estimated_cost.total
        )
    return RecommendationSchema(
        type=rec.type.value,
        urgency=rec.urgency.value,
        title=rec.title,
        description=rec.description,
        reason=rec.reason,
        benefits=rec.benefits,
        timeframe=rec.timeframe,
        estimated_cost=cost,
        labor_hours=rec.labor_hours
    )


def to_recommendation_response(result: RecommendationResult) -> RecommendationResponse:
    return RecommendationResponse(
        primary=to_recommendation_schema(result.primary),
        secondary=[to_recommendation_schema(r) for r in result.secondary],
        preventive=[to_recommendation_schema(r) for r in result.preventive],
        next_service_date=result.next_service_date,
        total_estimated_cost=result.total_estimated_cost,
        patterns=result.patterns
    )


@router.post("", response_model=RecommendationResponse)
async def create_recommendations(request: RecommendationRequest):
    """
    Generate recommendations for one inspection item.
    Shop configuration controls whether cost estimates and timeframes are included.
    """
    try:
        item = RecommendationInput(
            item_type=request.item_type,
            condition=request.condition.value,
            measurements=request.measurements,
            vehicle_info=VehicleInfo(**request.vehicle_info.model_dump()) if request.vehicle_info else None,
            shop_config=ShopConfig(**request.shop_config.model_dump()) if request.shop_config else None,
            history=[HistoryEntry(date=h.date, condition=h.condition.value) for h in request.history]
            if request.history else None
        )
        result = generate_recommendations(item)

        logger.info(f"Generated {len(result.secondary) + 1} recommendations for {request.item_type}")
        return to_recommendation_response(result)

    except Exception as e:
        logger.error(f"Error generating recommendations for {request.item_type}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}"
        )
