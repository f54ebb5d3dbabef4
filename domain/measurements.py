"""Shared measurement rules and normalization for inspection items."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
import math
import structlog

logger = structlog.get_logger()


class Condition(str, Enum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    NEEDS_IMMEDIATE = "needs_immediate"


# Ordered from best to worst
CONDITION_ORDER = [Condition.GOOD, Condition.FAIR, Condition.POOR, Condition.NEEDS_IMMEDIATE]


@dataclass(frozen=True)
class MeasurementRule:
    """
    Cut points for one measurement.

    With direction "below" a lower reading is worse (pad thickness, tread depth),
    with "above" a higher reading is worse (filter restriction, belt wear).
    """
    critical: float
    poor: float
    fair: float
    direction: str = "below"


MEASUREMENT_RULES: Dict[str, Dict[str, MeasurementRule]] = {
    "brakes": {
        "pad_thickness_mm": MeasurementRule(critical=2, poor=4, fair=6),
        "rotor_thickness_mm": MeasurementRule(critical=8, poor=10, fair=12),
    },
    "tires": {
        "tread_depth_32nds": MeasurementRule(critical=2, poor=4, fair=6),
        "pressure_psi": MeasurementRule(critical=20, poor=25, fair=28),
    },
    "battery": {
        "voltage": MeasurementRule(critical=11.5, poor=11.8, fair=12.0),
        "load_test_percent": MeasurementRule(critical=50, poor=75, fair=85),
    },
    "lights": {
        "brightness_percent": MeasurementRule(critical=30, poor=50, fair=70),
    },
    "fluids": {
        "level_percent": MeasurementRule(critical=20, poor=40, fair=60),
        "condition_rating": MeasurementRule(critical=1, poor=2, fair=3),
    },
    "filters": {
        "restriction_percent": MeasurementRule(critical=80, poor=60, fair=40, direction="above"),
    },
    "belts_hoses": {
        "wear_percent": MeasurementRule(critical=80, poor=60, fair=40, direction="above"),
        "crack_length_mm": MeasurementRule(critical=10, poor=5, fair=2, direction="above"),
    },
    "wipers": {
        "effectiveness_percent": MeasurementRule(critical=40, poor=60, fair=75),
    },
}

# Accepted input ranges, checked when a mechanic records an item
MEASUREMENT_RANGES: Dict[str, Dict[str, Tuple[float, float, str]]] = {
    "brakes": {"pad_thickness_mm": (0, 20, "Brake pad thickness must be between 0-20mm")},
    "tires": {"tread_depth_32nds": (0, 32, 'Tread depth must be between 0-32/32"')},
    "battery": {"voltage": (8, 16, "Battery voltage must be between 8-16V")},
}


def normalize_item_type(item_type: Any) -> str:
    if not isinstance(item_type, str):
        return ""
    return item_type.strip().lower()


def normalize_condition(value: Any) -> Condition:
    """Map a raw condition onto the enum; anything unrecognized is treated as good."""
    if isinstance(value, Condition):
        return value
    if isinstance(value, str):
        try:
            return Condition(value.strip().lower())
        except ValueError:
            pass
    logger.debug(f"Unrecognized condition {value!r}, using baseline")
    return Condition.GOOD


def coerce_measurement(value: Any) -> Optional[float]:
    """
    Coerce a raw measurement into a usable reading.

    Returns None for booleans, non-numeric strings, NaN/inf and negative values.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number


def normalize_measurements(raw: Any) -> Dict[str, float]:
    if not isinstance(raw, Mapping):
        return {}

    measurements = {}
    for key, value in raw.items():
        number = coerce_measurement(value)
        if number is None:
            logger.debug(f"Ignoring measurement {key}={value!r}")
            continue
        measurements[str(key)] = number
    return measurements


def classify_measurement(value: float, rule: MeasurementRule) -> Optional[str]:
    """Return "critical", "poor", "fair" or None for a healthy reading."""
    if rule.direction == "above":
        checks = [("critical", value >= rule.critical), ("poor", value >= rule.poor), ("fair", value >= rule.fair)]
    else:
        checks = [("critical", value <= rule.critical), ("poor", value <= rule.poor), ("fair", value <= rule.fair)]

    for band, hit in checks:
        if hit:
            return band
    return None


def rules_for(item_type: str) -> Dict[str, MeasurementRule]:
    return MEASUREMENT_RULES.get(normalize_item_type(item_type), {})


def validate_measurements(item_type: str, measurements: Any) -> Tuple[List[str], List[str]]:
    """
    Check recorded measurements against accepted ranges.

    Returns (errors, warnings). Unlike scoring, a value that cannot be parsed is
    an error here, since it comes straight from the mechanic.
    """
    errors: List[str] = []
    warnings: List[str] = []
    if not isinstance(measurements, Mapping):
        return errors, warnings

    ranges = MEASUREMENT_RANGES.get(normalize_item_type(item_type), {})
    for key, (low, high, message) in ranges.items():
        if measurements.get(key) is None:
            continue
        raw = measurements[key]
        try:
            value = float(raw) if not isinstance(raw, bool) else math.nan
        except (TypeError, ValueError):
            value = math.nan
        if math.isnan(value) or value < low or value > high:
            errors.append(message)
            continue

        rule = rules_for(item_type).get(key)
        band = classify_measurement(value, rule) if rule else None
        if band == "critical":
            warnings.append(f"{key} is critically low")
        elif band == "poor":
            warnings.append(f"{key} is approaching the minimum")

    return errors, warnings
