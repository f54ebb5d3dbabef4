from calendar import monthrange
from datetime import date, datetime
from typing import List, Dict, Any, Optional, Tuple
import structlog

from domain.recommendation_engine import (
    RecommendationEngine, RecommendationInput, RecommendationResult, Recommendation,
    RecommendationType, RecommendationUrgency, CostEstimate, ShopConfig, VehicleInfo, HistoryEntry,
)
from domain.measurements import (
    Condition, CONDITION_ORDER, MEASUREMENT_RULES, normalize_condition, normalize_item_type,
    normalize_measurements, classify_measurement, coerce_measurement,
)
from config.loader import business_rules

logger = structlog.get_logger()

IMMEDIATE = RecommendationUrgency.IMMEDIATE
SOON = RecommendationUrgency.SOON
SCHEDULED = RecommendationUrgency.SCHEDULED
ROUTINE = RecommendationUrgency.ROUTINE

# (base parts cost, labor hours) per item type and service
COST_TABLE: Dict[str, Dict[str, Tuple[float, float]]] = {
    "brakes": {
        "replacement": (150, 2.0),
        "inspection": (0, 0.5),
        "brake_pads_front": (75, 1.5),
        "brake_rotors_front": (180, 2.0),
        "brake_fluid_change": (15, 0.5),
    },
    "tires": {
        "replacement": (480, 2.0),
        "inspection": (0, 0.25),
        "tire_replacement_each": (120, 0.5),
        "rotation": (0, 0.5),
        "wheel_alignment": (0, 1.0),
    },
    "battery": {
        "replacement": (150, 0.5),
        "inspection": (0, 0.25),
        "test": (0, 0.25),
        "terminal_cleaning": (5, 0.25),
    },
    "fluids": {
        "replacement": (35, 0.5),
        "inspection": (0, 0.25),
        "oil_change": (35, 0.5),
        "coolant_flush": (45, 1.0),
        "transmission_service": (85, 1.5),
    },
    "filters": {
        "replacement": (25, 0.25),
        "inspection": (0, 0.1),
        "air_filter": (25, 0.25),
        "cabin_filter": (30, 0.5),
    },
    "lights": {"replacement": (20, 0.3)},
    "wipers": {"replacement": (30, 0.2)},
    "belts_hoses": {"replacement": (60, 1.0)},
}
DEFAULT_COSTS = {"replacement": (100, 1.0), "inspection": (0, 0.5)}

# Miles between services
SERVICE_INTERVALS: Dict[str, Dict[str, int]] = {
    "brakes": {"inspection": 12000, "replacement": 35000},
    "tires": {"rotation": 6000, "replacement": 50000},
    "battery": {"test": 24000, "replacement": 72000},
    "fluids": {"oil_change": 5000, "coolant_flush": 60000},
    "filters": {"air_filter": 15000, "cabin_filter": 18000},
}

IMMEDIATE_DESCRIPTIONS = {
    "brakes": "Brake system requires immediate attention. Do not drive until the brakes are repaired.",
    "tires": "Tire condition is unsafe. Replace the tires immediately before driving.",
    "battery": "Battery is failing. Vehicle may not start reliably.",
    "lights": "Safety lighting is not functioning properly.",
}

CONDITION_BENEFITS = {
    Condition.NEEDS_IMMEDIATE: ["Prevent accidents", "Avoid further damage", "Ensure safe operation"],
    Condition.POOR: ["Restore performance", "Prevent breakdown", "Improve safety"],
    Condition.FAIR: ["Plan ahead for replacement", "Monitor degradation", "Prevent surprises"],
    Condition.GOOD: ["Extend component life", "Maintain performance", "Prevent premature wear"],
}

ITEM_BENEFITS = {
    "brakes": ["Ensure stopping power"],
    "tires": ["Maintain traction"],
    "battery": ["Reliable starting"],
    "lights": ["Stay visible to other drivers"],
}

TIMEFRAMES = {
    Condition.NEEDS_IMMEDIATE: "Immediately",
    Condition.POOR: "Within 1-2 weeks",
    Condition.FAIR: "Within 1-3 months",
    Condition.GOOD: "Within 6-12 months",
}

# Notes per measurement, keyed by the band the reading falls in ("ok" = healthy reading)
MEASUREMENT_NOTES: Dict[str, Dict[str, Any]] = {
    "pad_thickness_mm": {
        "item_type": "brakes",
        "cost_service": "brake_pads_front",
        "critical": (RecommendationType.IMMEDIATE_ACTION, IMMEDIATE,
                     "Brake pad replacement required immediately",
                     "Brake pad thickness is {value}mm, below minimum safe thickness", None,
                     "Safety critical - metal-on-metal contact imminent",
                     ["Prevent brake damage", "Ensure stopping power", "Avoid costly rotor replacement"]),
        "poor": (RecommendationType.REPLACEMENT, SOON,
                 "Brake pad replacement needed soon",
                 "Brake pad thickness is {value}mm, approaching minimum thickness", "Within 2-4 weeks",
                 "Preventing damage to brake rotors",
                 ["Maintain braking performance", "Avoid rotor replacement"]),
        "fair": (RecommendationType.MONITORING, SCHEDULED,
                 "Brake pads wearing",
                 "Brake pad thickness is {value}mm, plan replacement at a coming service", "Within 1-3 months",
                 "Pads nearing the replacement point",
                 ["Plan ahead for replacement"]),
        "ok": (RecommendationType.MONITORING, ROUTINE,
               "Brake pads in good shape",
               "Brake pad thickness is {value}mm, within safe limits", None,
               "Measured pad thickness is healthy", []),
    },
    "tread_depth_32nds": {
        "item_type": "tires",
        "cost_service": "tire_replacement_each",
        "critical": (RecommendationType.IMMEDIATE_ACTION, IMMEDIATE,
                     "Tire replacement required - unsafe tread depth",
                     'Tire tread depth is {value}/32", below legal minimum', None,
                     "Unsafe in wet conditions - risk of hydroplaning",
                     ["Restore traction", "Improve stopping distance", "Legal compliance"]),
        "poor": (RecommendationType.REPLACEMENT, SOON,
                 "Tire replacement recommended",
                 'Tire tread depth is {value}/32", getting close to minimum', "Within 1-2 months",
                 "Maintaining traction and safety",
                 ["Better wet weather performance", "Improved fuel economy"]),
        "fair": (RecommendationType.MONITORING, SCHEDULED,
                 "Monitor tire wear",
                 'Tire tread depth is {value}/32", plan replacement in the coming months', "Within 3-6 months",
                 "Tread is wearing down",
                 ["Plan ahead for replacement"]),
        "ok": (RecommendationType.MONITORING, ROUTINE,
               "Tire tread in good shape",
               'Tire tread depth is {value}/32", within safe limits', None,
               "Measured tread depth is healthy", []),
    },
    "voltage": {
        "item_type": "battery",
        "cost_service": "replacement",
        "critical": (RecommendationType.IMMEDIATE_ACTION, IMMEDIATE,
                     "Battery replacement required",
                     "Battery voltage is {value}V, well below normal range", None,
                     "Risk of no-start condition",
                     ["Reliable starting", "Proper electrical system operation"]),
        "poor": (RecommendationType.REPLACEMENT, SOON,
                 "Battery replacement recommended",
                 "Battery voltage is {value}V, below optimal range", "Within 2-4 weeks",
                 "Preventing unexpected failure",
                 ["Avoid being stranded", "Protect other electrical components"]),
        "fair": (RecommendationType.MONITORING, SCHEDULED,
                 "Monitor battery health",
                 "Battery voltage is {value}V, slightly below optimal range", "Within 1-3 months",
                 "Battery may be weakening",
                 ["Avoid being stranded"]),
        "ok": (RecommendationType.MONITORING, ROUTINE,
               "Battery voltage normal",
               "Battery voltage is {value}V, within normal range", None,
               "Measured voltage is healthy", []),
    },
}

URGENCY_ORDER = {IMMEDIATE: 0, SOON: 1, SCHEDULED: 2, ROUTINE: 3}
TYPE_ORDER = {
    RecommendationType.IMMEDIATE_ACTION: 0,
    RecommendationType.REPLACEMENT: 1,
    RecommendationType.REPAIR: 2,
    RecommendationType.MAINTENANCE: 3,
    RecommendationType.INSPECTION: 4,
    RecommendationType.MONITORING: 5,
}


def _format_number(value: float) -> str:
    return f"{value:g}"


def add_months(start: date, months: float) -> date:
    """Add a possibly fractional number of months, clamping to the end of the month."""
    whole = int(months)
    month_index = start.month - 1 + whole
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, monthrange(year, month)[1])
    result = date(year, month, day)
    remainder_days = round((months - whole) * 30)
    if remainder_days:
        result = date.fromordinal(result.toordinal() + remainder_days)
    return result


class RuleBasedRecommendationEngine(RecommendationEngine):
    """
    Generates item recommendations from condition, measurement and mileage rules.
    """

    def __init__(self):
        rules = business_rules.recommendation_rules
        self.default_labor_rate = float(rules.get("default_labor_rate", 120))
        self.default_markup = float(rules.get("default_markup_percent", 0.15))
        self.miles_per_month = float(rules.get("miles_per_month", 1000))
        self.preventive_window = float(rules.get("preventive_window_miles", 1000))
        self.older_vehicle_age = int(rules.get("older_vehicle_age_years", 10))
        self.older_vehicle_factor = float(rules.get("older_vehicle_interval_factor", 0.75))

    def generate_recommendations(
        self,
        item: RecommendationInput,
        as_of: Optional[date] = None
    ) -> RecommendationResult:
        """
        Generate recommendations for a single inspection item.

        Args:
            item: Recommendation input for the item
            as_of: Reference date for the next service date, defaults to today
        """
        as_of = as_of or date.today()
        condition = normalize_condition(item.condition)
        item_type = normalize_item_type(item.item_type)
        label = item.item_type.strip() if isinstance(item.item_type, str) and item.item_type.strip() else "component"
        shop_config = item.shop_config

        primary = self._condition_recommendation(condition, item_type, label, shop_config)

        secondary = self._measurement_recommendations(item.measurements, shop_config)
        patterns: List[str] = []
        if item.history and len(item.history) > 1:
            patterns, history_recs = self._analyze_history(item.history)
            secondary.extend(history_recs)
        secondary = self._sort_recommendations(secondary)

        preventive = self._preventive_recommendations(item_type, item.vehicle_info, shop_config)
        next_service_date = self._next_service_date(condition, item_type, item.vehicle_info, as_of)

        if shop_config is not None and not shop_config.include_timeframes:
            for rec in [primary, *secondary, *preventive]:
                rec.timeframe = None

        total = sum(rec.estimated_cost.total for rec in [primary, *secondary] if rec.estimated_cost)

        return RecommendationResult(
            primary=primary,
            secondary=secondary,
            preventive=preventive,
            next_service_date=next_service_date,
            total_estimated_cost=round(total, 2) if total > 0 else None,
            patterns=patterns
        )

    def _condition_recommendation(
        self,
        condition: Condition,
        item_type: str,
        label: str,
        shop_config: Optional[ShopConfig]
    ) -> Recommendation:
        benefits = CONDITION_BENEFITS[condition] + ITEM_BENEFITS.get(item_type, [])

        if condition == Condition.NEEDS_IMMEDIATE:
            if item_type not in IMMEDIATE_DESCRIPTIONS:
                logger.debug(f"No immediate-action template for {item_type!r}, using generic text")
            rec = Recommendation(
                type=RecommendationType.IMMEDIATE_ACTION,
                urgency=IMMEDIATE,
                title=f"Immediate {label} attention required",
                description=IMMEDIATE_DESCRIPTIONS.get(
                    item_type, f"The {label} requires immediate attention for safety."),
                reason="Safety-critical condition detected",
                benefits=benefits,
                timeframe=TIMEFRAMES[condition]
            )
            return self._with_cost(rec, item_type, "replacement", shop_config)

        if condition == Condition.POOR:
            rec = Recommendation(
                type=RecommendationType.REPLACEMENT,
                urgency=SOON,
                title=f"{label} replacement recommended",
                description=f"Significant wear found on the {label}. Replace soon to prevent failure.",
                reason="Component showing significant wear",
                benefits=benefits,
                timeframe=TIMEFRAMES[condition]
            )
            return self._with_cost(rec, item_type, "replacement", shop_config)

        if condition == Condition.FAIR:
            rec = Recommendation(
                type=RecommendationType.MONITORING,
                urgency=SCHEDULED,
                title=f"Monitor {label} condition",
                description=f"The {label} is in fair condition. Monitor closely and plan for future replacement.",
                reason="Component showing early wear signs",
                benefits=benefits,
                timeframe=TIMEFRAMES[condition]
            )
            return self._with_cost(rec, item_type, "inspection", shop_config)

        return Recommendation(
            type=RecommendationType.MONITORING,
            urgency=ROUTINE,
            title=f"Continue regular {label} maintenance",
            description=f"The {label} is in good condition. Continue regular maintenance to ensure longevity.",
            reason="Component in good condition",
            benefits=benefits,
            timeframe=TIMEFRAMES[condition]
        )

    def _measurement_recommendations(
        self,
        raw_measurements: Any,
        shop_config: Optional[ShopConfig]
    ) -> List[Recommendation]:
        recommendations = []
        measurements = normalize_measurements(raw_measurements)

        for key, notes in MEASUREMENT_NOTES.items():
            if key not in measurements:
                continue
            value = measurements[key]
            rule = MEASUREMENT_RULES[notes["item_type"]][key]
            band = classify_measurement(value, rule) or "ok"
            rec_type, urgency, title, description, timeframe, reason, benefits = notes[band]

            rec = Recommendation(
                type=rec_type,
                urgency=urgency,
                title=title,
                description=description.format(value=_format_number(value)),
                reason=reason,
                benefits=list(benefits),
                timeframe=timeframe
            )
            if rec_type in (RecommendationType.IMMEDIATE_ACTION, RecommendationType.REPLACEMENT):
                rec = self._with_cost(rec, notes["item_type"], notes["cost_service"], shop_config)
            recommendations.append(rec)

        return recommendations

    def _analyze_history(self, history: List[HistoryEntry]) -> Tuple[List[str], List[Recommendation]]:
        patterns: List[str] = []
        recommendations: List[Recommendation] = []

        entries = []
        for entry in history:
            entry_date = getattr(entry, "date", None)
            if isinstance(entry_date, datetime):
                entry_date = entry_date.date()
            if not isinstance(entry_date, date):
                logger.debug(f"Skipping history entry without a usable date {entry!r}")
                continue
            try:
                entries.append((entry_date, CONDITION_ORDER.index(Condition(entry.condition))))
            except (AttributeError, TypeError, ValueError):
                logger.debug(f"Skipping unusable history entry {entry!r}")
        entries.sort(key=lambda e: e[0])
        if len(entries) < 2:
            return patterns, recommendations

        degrading = all(curr[1] > prev[1] for prev, curr in zip(entries, entries[1:]))
        if degrading:
            patterns.append("Condition consistently degrading")
            months = (entries[-1][0] - entries[0][0]).days / 30
            if months < 6:
                patterns.append("Faster than expected degradation")
                recommendations.append(Recommendation(
                    type=RecommendationType.INSPECTION,
                    urgency=SOON,
                    title="Investigate rapid deterioration",
                    description="Component is degrading faster than typical",
                    reason="Unusual wear pattern detected",
                    benefits=["Identify root cause", "Prevent premature failure", "Optimize replacement timing"],
                    timeframe="Next service visit"
                ))

        good = CONDITION_ORDER.index(Condition.GOOD)
        poor = CONDITION_ORDER.index(Condition.POOR)
        oscillating = any(
            (a[1], b[1], c[1]) in ((good, poor, good), (poor, good, poor))
            for a, b, c in zip(entries, entries[1:], entries[2:])
        )
        if oscillating:
            patterns.append("Inconsistent condition assessments")
            recommendations.append(Recommendation(
                type=RecommendationType.INSPECTION,
                urgency=ROUTINE,
                title="Verify assessment criteria",
                description="Previous assessments show inconsistent results",
                reason="Ensuring accurate condition evaluation",
                benefits=["Consistent assessments", "Better maintenance planning", "Improved reliability"]
            ))

        return patterns, recommendations

    def _preventive_recommendations(
        self,
        item_type: str,
        vehicle_info: Optional[VehicleInfo],
        shop_config: Optional[ShopConfig]
    ) -> List[Recommendation]:
        recommendations = []
        mileage = coerce_measurement(vehicle_info.mileage) if vehicle_info else None
        if not mileage:
            return recommendations

        for service, interval in SERVICE_INTERVALS.get(item_type, {}).items():
            miles_until_due = (-mileage) % interval
            if miles_until_due > self.preventive_window:
                continue

            name = service.replace("_", " ")
            if miles_until_due == 0:
                rec = Recommendation(
                    type=RecommendationType.MAINTENANCE,
                    urgency=SOON,
                    title=f"{name.capitalize()} service due now",
                    description=f"{name.capitalize()} service is due at {mileage:,.0f} miles",
                    reason="Following manufacturer maintenance schedule",
                    benefits=["Maintain warranty", "Prevent breakdowns", "Optimize performance"],
                    timeframe="As soon as possible"
                )
            else:
                rec = Recommendation(
                    type=RecommendationType.MAINTENANCE,
                    urgency=SCHEDULED,
                    title=f"{name.capitalize()} service due soon",
                    description=f"{name.capitalize()} service is due in {miles_until_due:,.0f} miles",
                    reason="Following manufacturer maintenance schedule",
                    benefits=["Maintain warranty", "Prevent breakdowns", "Optimize performance"],
                    timeframe=f"Next {self.preventive_window:,.0f} miles"
                )
            recommendations.append(self._with_cost(rec, item_type, service, shop_config))

        return recommendations

    def _next_service_date(
        self,
        condition: Condition,
        item_type: str,
        vehicle_info: Optional[VehicleInfo],
        as_of: date
    ) -> Optional[date]:
        if vehicle_info is None:
            return None

        intervals = SERVICE_INTERVALS.get(item_type, {})
        miles_until_service = {
            Condition.NEEDS_IMMEDIATE: 0,
            Condition.POOR: 1000,
            Condition.FAIR: intervals.get("inspection", 5000),
            Condition.GOOD: intervals.get("replacement", 15000),
        }[condition]

        year = vehicle_info.year
        if isinstance(year, int) and not isinstance(year, bool) and 0 < year <= as_of.year:
            if as_of.year - year >= self.older_vehicle_age:
                miles_until_service *= self.older_vehicle_factor

        return add_months(as_of, miles_until_service / self.miles_per_month)

    def _with_cost(
        self,
        rec: Recommendation,
        item_type: str,
        service: str,
        shop_config: Optional[ShopConfig]
    ) -> Recommendation:
        """
        Attach a cost estimate when the shop shows costs and the service is priced.

        Services without both a parts and a labor charge (inspections, rotations)
        get no estimate, so every estimate has positive parts, labor and total.
        """
        if shop_config is None or not shop_config.include_cost_estimates:
            return rec

        costs = COST_TABLE.get(item_type, {}).get(service) or DEFAULT_COSTS.get(service)
        if not costs:
            return rec

        base_parts, hours = costs
        parts = round(base_parts * (1 + self._markup(shop_config)), 2)
        labor = round(hours * self._labor_rate(shop_config), 2)
        if parts <= 0 or labor <= 0:
            return rec
        rec.estimated_cost = CostEstimate(parts=parts, labor=labor, total=parts + labor)
        rec.labor_hours = hours
        return rec

    def _labor_rate(self, shop_config: ShopConfig) -> float:
        rate = coerce_measurement(shop_config.labor_rate)
        return rate if rate else self.default_labor_rate

    def _markup(self, shop_config: ShopConfig) -> float:
        markup = coerce_measurement(shop_config.markup_percent)
        if markup is None:
            return self.default_markup
        # Whole percentages such as 15 are accepted alongside fractions
        return markup / 100 if markup > 1 else markup

    def _sort_recommendations(self, recommendations: List[Recommendation]) -> List[Recommendation]:
        return sorted(
            recommendations,
            key=lambda r: (URGENCY_ORDER[r.urgency], TYPE_ORDER[r.type])
        )


def generate_recommendations(item: RecommendationInput, as_of: Optional[date] = None) -> RecommendationResult:
    """Generate recommendations for one inspection item with the configured rules."""
    return RuleBasedRecommendationEngine().generate_recommendations(item, as_of)
