from fastapi import APIRouter, Depends, HTTPException, status
import uuid
import structlog

from api_service.deps import get_item_service
from api_service.services.inspection_item_service import InspectionItemService
from api_service.routers.urgency import to_urgency_response
from schemas.inspection_item import InspectionUrgencyResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/inspections", tags=["Inspections"])

@router.post("/{inspection_id}/urgency", response_model=InspectionUrgencyResponse)
async def recalculate_inspection_urgency(
    inspection_id: uuid.UUID,
    service: InspectionItemService = Depends(get_item_service)
):
    """
    Re-score all items of an inspection and store the aggregate urgency.
    """
    try:
        result = await service.recalculate_inspection(inspection_id)

        if not result:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Inspection {inspection_id} not found"
            )

        return InspectionUrgencyResponse(
            inspection_id=inspection_id,
            urgency=to_urgency_response(result["urgency"]),
            updated_items=result["updated_items"]
        )

    except HTTPException:
        raise
    except Exception as e:
        await service.db.rollback()
        logger.error(f"Error recalculating urgency for inspection {inspection_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}"
        )
