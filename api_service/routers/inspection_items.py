"""Inspection items router for assessing and updating items."""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import Any, Dict
import uuid
import structlog

from api_service.deps import get_item_service
from api_service.services.inspection_item_service import InspectionItemService, ItemValidationError
from api_service.routers.urgency import to_urgency_response
from api_service.routers.recommendations import to_recommendation_response
from schemas.inspection_item import (
    InspectionItemUpdate, InspectionItemResponse, ItemAssessmentResponse, ItemUpdateResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/inspection-items", tags=["Inspection Items"])


def to_assessment_response(item_id: uuid.UUID, assessment: Dict[str, Any]) -> ItemAssessmentResponse:
    recommendations = assessment["recommendations"]
    cost = recommendations.primary.estimated_cost
    return ItemAssessmentResponse(
        item_id=item_id,
        urgency=to_urgency_response(assessment["urgency"]),
        recommendations=to_recommendation_response(recommendations),
        summary=assessment["summary"],
        priority=assessment["priority"],
        next_service_date=recommendations.next_service_date,
        estimated_cost=cost.total if cost else None
    )


@router.post("/{item_id}/assess", response_model=ItemAssessmentResponse)
async def assess_item(
    item_id: uuid.UUID,
    service: InspectionItemService = Depends(get_item_service)
):
    """
    Score an inspection item and store priority, cost and recommendation text on it.
    """
    try:
        assessment = await service.assess_item(item_id)

        if not assessment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Inspection item {item_id} not found"
            )

        return to_assessment_response(item_id, assessment)

    except HTTPException:
        raise
    except Exception as e:
        await service.db.rollback()
        logger.error(f"Error assessing item {item_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}"
        )


@router.patch("/{item_id}", response_model=ItemUpdateResponse)
async def update_item(
    item_id: uuid.UUID,
    update: InspectionItemUpdate,
    service: InspectionItemService = Depends(get_item_service)
):
    """
    Update an inspection item. Changing condition or measurements re-scores it.
    """
    try:
        result = await service.update_item(item_id, update)

        if not result:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Inspection item {item_id} not found"
            )

        assessment = result["assessment"]
        return ItemUpdateResponse(
            item=InspectionItemResponse.model_validate(result["item"]),
            warnings=result["warnings"],
            assessment=to_assessment_response(item_id, assessment) if assessment else None
        )

    except HTTPException:
        raise
    except ItemValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors
        )
    except Exception as e:
        await service.db.rollback()
        logger.error("Error updating inspection item", item_id=str(item_id), error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update item: {str(e)}"
        )
