from enum import Enum
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

class UrgencyLevel(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"

@dataclass
class UrgencyInput:
    """Scoring input taken from a single inspection item."""
    condition: Any
    item_type: Any
    measurements: Optional[Dict[str, Any]] = None
    priority: Any = None
    estimated_cost: Any = None

@dataclass
class UrgencyThresholds:
    """Minimum score for each level; anything below `normal` is low."""
    critical: float = 85
    high: float = 60
    normal: float = 30

@dataclass
class UrgencyResult:
    """Result of urgency scoring."""
    level: UrgencyLevel
    score: int  # 0 to 100
    factors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

class UrgencyCalculator:
    """Abstract base class for urgency calculators."""

    def calculate_item_urgency(self, item: UrgencyInput) -> UrgencyResult:
        """
        Scores a single inspection item.

        Args:
            item: Condition, item type and measurements of the item

        Returns:
            UrgencyResult object
        """
        raise NotImplementedError

    def calculate_inspection_urgency(self, items: List[UrgencyInput]) -> UrgencyResult:
        """
        Aggregates item scores into one urgency for the whole inspection.
        """
        raise NotImplementedError
