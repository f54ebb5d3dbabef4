from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

class RecommendationType(str, Enum):
    IMMEDIATE_ACTION = "immediate_action"
    REPLACEMENT = "replacement"
    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    INSPECTION = "inspection"
    MONITORING = "monitoring"

class RecommendationUrgency(str, Enum):
    IMMEDIATE = "immediate"
    SOON = "soon"
    SCHEDULED = "scheduled"
    ROUTINE = "routine"

@dataclass
class CostEstimate:
    parts: float
    labor: float
    total: float

@dataclass
class VehicleInfo:
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    mileage: Optional[float] = None

@dataclass
class ShopConfig:
    """Tenant settings that shape the recommendation output."""
    include_cost_estimates: bool = False
    include_part_numbers: bool = False
    include_timeframes: bool = True
    labor_rate: Optional[float] = None  # per hour
    markup_percent: Optional[float] = None  # 0.15 means 15%

@dataclass
class HistoryEntry:
    """A previous assessment of the same component."""
    date: date
    condition: str

@dataclass
class RecommendationInput:
    item_type: Any
    condition: Any
    measurements: Optional[Dict[str, Any]] = None
    vehicle_info: Optional[VehicleInfo] = None
    shop_config: Optional[ShopConfig] = None
    history: Optional[List[HistoryEntry]] = None

@dataclass
class Recommendation:
    """Actionable recommendation for an inspection item."""
    type: RecommendationType
    urgency: RecommendationUrgency
    title: str
    description: str
    reason: str
    benefits: List[str] = field(default_factory=list)
    timeframe: Optional[str] = None
    estimated_cost: Optional[CostEstimate] = None
    labor_hours: Optional[float] = None

@dataclass
class RecommendationResult:
    primary: Recommendation
    secondary: List[Recommendation] = field(default_factory=list)
    preventive: List[Recommendation] = field(default_factory=list)
    next_service_date: Optional[date] = None
    total_estimated_cost: Optional[float] = None
    patterns: List[str] = field(default_factory=list)

class RecommendationEngine:
    """Abstract base class for recommendation generation."""

    def generate_recommendations(self, item: RecommendationInput) -> RecommendationResult:
        """
        Generates recommendations for one inspection item.

        Args:
            item: Item type, condition and optional measurements, vehicle,
                shop configuration and assessment history

        Returns:
            RecommendationResult object
        """
        raise NotImplementedError
