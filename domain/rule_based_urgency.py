from typing import Dict, List, Any, Union
import structlog

from domain.urgency_calculator import UrgencyCalculator, UrgencyInput, UrgencyResult, UrgencyLevel, UrgencyThresholds
from domain.measurements import (
    Condition, normalize_condition, normalize_item_type, normalize_measurements,
    classify_measurement, rules_for,
)
from config.loader import business_rules

logger = structlog.get_logger()

DEFAULT_CONDITION_SCORES = {"good": 10, "fair": 35, "poor": 55, "needs_immediate": 95}
DEFAULT_MEASUREMENT_POINTS = {"critical": 20, "poor": 12, "fair": 6}
DEFAULT_ITEM_TYPE_MULTIPLIERS = {
    "brakes": 1.15, "tires": 1.10, "battery": 1.05, "filters": 0.9, "wipers": 0.8, "default": 1.0,
}

LEVEL_RECOMMENDATIONS = {
    UrgencyLevel.CRITICAL: ["STOP DRIVING - Immediate safety risk", "Contact shop immediately"],
    UrgencyLevel.HIGH: ["Schedule repair within 1-2 weeks", "Monitor condition closely"],
    UrgencyLevel.NORMAL: ["Schedule maintenance within 30 days"],
    UrgencyLevel.LOW: ["Monitor during regular maintenance"],
}

# Extra advice for safety items once they reach high or critical
ITEM_TYPE_ADVICE = {
    "brakes": ["Avoid heavy braking and steep hills", "Check brake fluid level"],
    "tires": ["Reduce speed in wet conditions", "Check tire pressure weekly"],
    "battery": ["Carry jumper cables", "Avoid leaving lights/accessories on"],
}

ThresholdOverrides = Union[UrgencyThresholds, Dict[str, float], None]


def _format_number(value: float) -> str:
    return f"{value:g}"


class RuleBasedUrgencyCalculator(UrgencyCalculator):
    """
    Scores inspection items with deterministic rules and configurable thresholds.
    """

    def __init__(self, thresholds: ThresholdOverrides = None):
        rules = business_rules.urgency_rules
        configured = rules.get("thresholds", {})
        self.thresholds = UrgencyThresholds(
            critical=configured.get("critical", 85),
            high=configured.get("high", 60),
            normal=configured.get("normal", 30),
        )
        if thresholds:
            self.update_thresholds(thresholds)

        self.condition_scores = {**DEFAULT_CONDITION_SCORES, **rules.get("condition_scores", {})}
        self.condition_floors = rules.get("condition_floors", {"needs_immediate": 90})
        self.measurement_points = {**DEFAULT_MEASUREMENT_POINTS, **rules.get("measurement_points", {})}
        self.multipliers = rules.get("item_type_multipliers", DEFAULT_ITEM_TYPE_MULTIPLIERS)
        self.priority_rules = rules.get("priority", {})
        self.cost_rules = rules.get("cost", {})

    def update_thresholds(self, overrides: ThresholdOverrides) -> None:
        """Apply shop-specific threshold overrides; unknown keys are ignored."""
        if isinstance(overrides, UrgencyThresholds):
            overrides = vars(overrides)
        for key in ("critical", "high", "normal"):
            value = (overrides or {}).get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                setattr(self.thresholds, key, value)

    def calculate_item_urgency(self, item: UrgencyInput) -> UrgencyResult:
        condition = normalize_condition(item.condition)
        item_type = normalize_item_type(item.item_type)
        factors: List[str] = []
        recommendations: List[str] = []

        # 1. Condition base score
        condition_score = self.condition_scores.get(condition.value, 0)
        score = float(condition_score)
        factors.append(f"Condition: {condition.value} (+{condition_score})")

        # 2. Measurements relevant to this item type
        measurement_score = self._score_measurements(item_type, item.measurements, factors, recommendations)
        score += measurement_score

        # 3. Item type weighting
        multiplier = self._multiplier(item_type)
        score *= multiplier
        if multiplier != 1.0:
            factors.append(f"Item type modifier: {_format_number(multiplier)}x")

        # 4. Caller supplied priority and cost
        score += self._priority_bonus(item.priority, factors)
        score += self._cost_bonus(item.estimated_cost, factors)

        floor = self.condition_floors.get(condition.value)
        if floor is not None and score < floor:
            score = float(floor)
            factors.append(f"Minimum for {condition.value}: {floor}")

        final_score = int(round(max(0.0, min(score, 100.0))))
        level = self.score_to_level(final_score)
        # Shop thresholds may sit above the floor; needs_immediate stays critical regardless
        if condition == Condition.NEEDS_IMMEDIATE and level != UrgencyLevel.CRITICAL:
            level = UrgencyLevel.CRITICAL
            factors.append(f"Critical threshold {_format_number(self.thresholds.critical)} "
                           f"overridden for needs_immediate")

        recommendations.extend(LEVEL_RECOMMENDATIONS[level])
        if level in (UrgencyLevel.CRITICAL, UrgencyLevel.HIGH):
            recommendations.extend(ITEM_TYPE_ADVICE.get(item_type, []))

        return UrgencyResult(
            level=level,
            score=final_score,
            factors=factors,
            recommendations=recommendations
        )

    def calculate_inspection_urgency(self, items: List[UrgencyInput]) -> UrgencyResult:
        if not items:
            return UrgencyResult(
                level=UrgencyLevel.LOW,
                score=0,
                factors=["No inspection items"],
                recommendations=["Add inspection items to determine urgency"]
            )

        results = [self.calculate_item_urgency(item) for item in items]
        counts = {level: sum(1 for r in results if r.level == level) for level in UrgencyLevel}
        poor_count = sum(1 for item in items if normalize_condition(item.condition) == Condition.POOR)

        critical = counts[UrgencyLevel.CRITICAL]
        high = counts[UrgencyLevel.HIGH]
        normal = counts[UrgencyLevel.NORMAL]
        factors: List[str] = []

        if critical > 0:
            level, score = UrgencyLevel.CRITICAL, 95
            factors.append(f"{critical} critical safety item(s)")
            recommendations = ["IMMEDIATE ATTENTION REQUIRED - Do not drive vehicle",
                               "Schedule urgent repair appointment"]
        elif high >= 3 or (high >= 1 and normal >= 3) or poor_count * 2 > len(items):
            level, score = UrgencyLevel.HIGH, 75
            factors.append(f"{high} high priority, {normal} normal priority items")
            if poor_count:
                factors.append(f"{poor_count} of {len(items)} items in poor condition")
            recommendations = ["Schedule repair within 1-2 weeks",
                               "Monitor driving conditions carefully"]
        elif high >= 1 or normal >= 2:
            level, score = UrgencyLevel.NORMAL, 50
            factors.append(f"{high} high priority, {normal} normal priority items")
            recommendations = ["Schedule maintenance within 30 days",
                               "Continue regular driving with awareness"]
        else:
            level, score = UrgencyLevel.LOW, 20
            factors.append("All items in good or fair condition")
            recommendations = ["Continue regular maintenance schedule",
                               "Re-inspect in 6 months or per manufacturer schedule"]

        highest = max(r.score for r in results)
        if highest > 50:
            factors.append(f"Highest concern: {highest}/100")

        for result in results:
            for rec in result.recommendations:
                if rec not in recommendations:
                    recommendations.append(rec)

        logger.debug(f"Inspection urgency {level.value} from {len(items)} items")
        return UrgencyResult(level=level, score=score, factors=factors, recommendations=recommendations)

    def score_to_level(self, score: float) -> UrgencyLevel:
        if score >= self.thresholds.critical:
            return UrgencyLevel.CRITICAL
        if score >= self.thresholds.high:
            return UrgencyLevel.HIGH
        if score >= self.thresholds.normal:
            return UrgencyLevel.NORMAL
        return UrgencyLevel.LOW

    def _multiplier(self, item_type: str) -> float:
        if item_type in self.multipliers:
            return float(self.multipliers[item_type])
        logger.debug(f"No multiplier for item type {item_type!r}, using default")
        return float(self.multipliers.get("default", 1.0))

    def _score_measurements(
        self,
        item_type: str,
        raw_measurements: Any,
        factors: List[str],
        recommendations: List[str]
    ) -> float:
        rules = rules_for(item_type)
        if not rules:
            return 0.0

        score = 0.0
        for key, value in normalize_measurements(raw_measurements).items():
            rule = rules.get(key)
            if rule is None:
                continue
            band = classify_measurement(value, rule)
            if band is None:
                continue

            points = self.measurement_points[band]
            cut = getattr(rule, band)
            comparison = "≥" if rule.direction == "above" else "≤"
            score += points
            factors.append(f"{key}: {_format_number(value)} ({band}) +{points}")
            recommendations.append(f"{key}: {_format_number(value)} is {band} ({comparison}{_format_number(cut)})")
        return score

    def _priority_bonus(self, priority: Any, factors: List[str]) -> float:
        if not isinstance(priority, int) or isinstance(priority, bool) or priority <= 1:
            return 0.0
        step = self.priority_rules.get("points_per_level", 2)
        bonus = min((priority - 1) * step, self.priority_rules.get("max_bonus", 10))
        factors.append(f"Priority level {priority} (+{_format_number(bonus)})")
        return float(bonus)

    def _cost_bonus(self, estimated_cost: Any, factors: List[str]) -> float:
        if isinstance(estimated_cost, bool) or not isinstance(estimated_cost, (int, float)):
            return 0.0
        if estimated_cost != estimated_cost or estimated_cost <= self.cost_rules.get("min_cost", 500):
            return 0.0
        bonus = min(estimated_cost / self.cost_rules.get("divisor", 100), self.cost_rules.get("max_bonus", 10))
        factors.append(f"High cost item (+{bonus:.1f})")
        return float(bonus)

    def get_thresholds(self) -> UrgencyThresholds:
        return UrgencyThresholds(**vars(self.thresholds))


def calculate_urgency(item: UrgencyInput, thresholds: ThresholdOverrides = None) -> UrgencyResult:
    """Score one inspection item with the configured rules."""
    return RuleBasedUrgencyCalculator(thresholds).calculate_item_urgency(item)


def calculate_inspection_urgency(
    items: List[UrgencyInput],
    thresholds: ThresholdOverrides = None
) -> UrgencyResult:
    """Aggregate urgency across all items of an inspection."""
    return RuleBasedUrgencyCalculator(thresholds).calculate_inspection_urgency(items)
