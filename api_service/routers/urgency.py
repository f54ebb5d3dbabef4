"""Urgency router for stateless item and inspection scoring."""
from fastapi import APIRouter, HTTPException, status
import structlog

from schemas.urgency import UrgencyItemRequest, InspectionUrgencyRequest, UrgencyResponse
from domain.urgency_calculator import UrgencyInput, UrgencyResult
from domain.rule_based_urgency import calculate_urgency, calculate_inspection_urgency

logger = structlog.get_logger()

router = APIRouter(prefix="/urgency", tags=["Urgency"])


def to_urgency_input(request: UrgencyItemRequest) -> UrgencyInput:
    return UrgencyInput(
        condition=request.condition.value,
        item_type=request.item_type,
        measurements=request.measurements,
        priority=request.priority,
        estimated_cost=request.estimated_cost
    )


def to_urgency_response(result: UrgencyResult) -> UrgencyResponse:
    return UrgencyResponse(
        level=result.level.value,
        score=result.score,
        factors=result.factors,
        recommendations=result.recommendations
    )


@router.post("/items", response_model=UrgencyResponse)
async def score_item(request: UrgencyItemRequest):
    """
    Score a single inspection item.

    Args:
        request: Condition, item type and measurements

    Returns:
        Urgency level, score and contributing factors
    """
    try:
        result = calculate_urgency(to_urgency_input(request))
        logger.info("Item scored", item_type=request.item_type, level=result.level.value, score=result.score)
        return to_urgency_response(result)

    except Exception as e:
        logger.error(f"Error scoring item: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}"
        )


@router.post("/inspections", response_model=UrgencyResponse)
async def score_inspection(request: InspectionUrgencyRequest):
    """
    Aggregate urgency over all items of an inspection.
    """
    try:
        result = calculate_inspection_urgency([to_urgency_input(item) for item in request.items])
        logger.info("Inspection scored", items=len(request.items), level=result.level.value)
        return to_urgency_response(result)

    except Exception as e:
        logger.error(f"Error scoring inspection: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}"
        )
