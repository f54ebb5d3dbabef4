"""Pydantic schemas for inspection items and their assessments."""
from pydantic import BaseModel, Field
from datetime import date
from typing import Optional, Dict, Any, List
import uuid

from schemas.urgency import ConditionEnum, UrgencyResponse
from schemas.recommendation import RecommendationResponse


class InspectionItemUpdate(BaseModel):
    """Fields a mechanic may change on an inspection item."""
    condition: Optional[ConditionEnum] = None
    measurements: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    priority: Optional[int] = Field(None, ge=1, le=10)

    class Config:
        json_schema_extra = {
            "example": {
                "condition": "poor",
                "measurements": {"pad_thickness_mm": 3},
                "notes": "Front pads worn unevenly"
            }
        }


class InspectionItemResponse(BaseModel):
    id: uuid.UUID
    inspection_id: uuid.UUID
    category: str
    component: str
    condition: Optional[str]
    measurements: Optional[Dict[str, Any]]
    notes: Optional[str]
    recommendations: Optional[str]
    estimated_cost: Optional[float]
    priority: int
    requires_immediate_attention: bool

    class Config:
        from_attributes = True


class ItemAssessmentResponse(BaseModel):
    item_id: uuid.UUID
    urgency: UrgencyResponse
    recommendations: RecommendationResponse
    summary: str
    priority: int
    next_service_date: Optional[date] = None
    estimated_cost: Optional[float] = None


class ItemUpdateResponse(BaseModel):
    item: InspectionItemResponse
    warnings: List[str] = []
    assessment: Optional[ItemAssessmentResponse] = None


class InspectionUrgencyResponse(BaseModel):
    inspection_id: uuid.UUID
    urgency: UrgencyResponse
    updated_items: int
