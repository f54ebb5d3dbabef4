import datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from schemas.urgency import ConditionEnum


class VehicleInfoSchema(BaseModel):
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    mileage: Optional[float] = Field(None, ge=0)


class ShopConfigSchema(BaseModel):
    include_cost_estimates: bool = False
    include_part_numbers: bool = False
    include_timeframes: bool = True
    labor_rate: Optional[float] = Field(None, gt=0, description="Hourly labor rate")
    markup_percent: Optional[float] = Field(None, ge=0, description="Parts markup, 0.15 = 15%")


class HistoryEntrySchema(BaseModel):
    date: datetime.date
    condition: ConditionEnum


class RecommendationRequest(BaseModel):
    item_type: str
    condition: ConditionEnum
    measurements: Optional[Dict[str, Any]] = None
    vehicle_info: Optional[VehicleInfoSchema] = None
    shop_config: Optional[ShopConfigSchema] = None
    history: Optional[List[HistoryEntrySchema]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "item_type": "brakes",
                "condition": "poor",
                "measurements": {"pad_thickness_mm": 2.5},
                "vehicle_info": {"year": 2020, "make": "Honda", "model": "Civic", "mileage": 35000},
                "shop_config": {"include_cost_estimates": True, "labor_rate": 120, "markup_percent": 0.15}
            }
        }


class CostEstimateSchema(BaseModel):
    parts: float
    labor: float
    total: float


class RecommendationSchema(BaseModel):
    type: str
    urgency: str
    title: str
    description: str
    reason: str
    benefits: List[str] = []
    timeframe: Optional[str] = None
    estimated_cost: Optional[CostEstimateSchema] = None
    labor_hours: Optional[float] = None


class RecommendationResponse(BaseModel):
    primary: RecommendationSchema
    secondary: List[RecommendationSchema]
    preventive: List[RecommendationSchema]
    next_service_date: Optional[datetime.date] = None
    total_estimated_cost: Optional[float] = None
    patterns: List[str] = []
