"""Pydantic schemas for urgency scoring."""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from enum import Enum


class ConditionEnum(str, Enum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    NEEDS_IMMEDIATE = "needs_immediate"


class UrgencyLevelEnum(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class UrgencyItemRequest(BaseModel):
    """Single inspection item to score."""
    condition: ConditionEnum = Field(..., description="Assessed condition")
    item_type: str = Field(..., description="Component category, e.g. brakes or tires")
    measurements: Optional[Dict[str, Any]] = Field(None, description="Measurement name to value")
    priority: Optional[int] = Field(None, description="Caller supplied priority weight")
    estimated_cost: Optional[float] = Field(None, description="Known repair cost")

    class Config:
        json_schema_extra = {
            "example": {
                "condition": "poor",
                "item_type": "tires",
                "measurements": {"tread_depth_32nds": 3},
                "priority": 2
            }
        }


class InspectionUrgencyRequest(BaseModel):
    """All items of one inspection."""
    items: List[UrgencyItemRequest] = Field(default_factory=list)


class UrgencyThresholdsSchema(BaseModel):
    critical: Optional[float] = None
    high: Optional[float] = None
    normal: Optional[float] = None


class UrgencyResponse(BaseModel):
    level: UrgencyLevelEnum
    score: int = Field(..., ge=0, le=100)
    factors: List[str]
    recommendations: List[str]
