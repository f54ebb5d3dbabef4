import pytest
from domain.measurements import (
    Condition, MeasurementRule, classify_measurement, coerce_measurement, normalize_condition,
    normalize_measurements, validate_measurements,
)

@pytest.mark.parametrize("raw,expected", [
    (4, 4.0),
    ("3.5", 3.5),
    (0, 0.0),
    (None, None),
    (True, None),
    ("abc", None),
    (-1, None),
    (float("nan"), None),
    (float("inf"), None),
    ({"value": 3}, None),
])
def test_coerce_measurement(raw, expected):
    assert coerce_measurement(raw) == expected

def test_normalize_measurements_drops_unusable_values():
    assert normalize_measurements({"a": 1, "b": "x", "c": None, "d": "2"}) == {"a": 1.0, "d": 2.0}
    assert normalize_measurements(None) == {}
    assert normalize_measurements([("a", 1)]) == {}

@pytest.mark.parametrize("raw,expected", [
    ("poor", Condition.POOR),
    (" Needs_Immediate ", Condition.NEEDS_IMMEDIATE),
    (Condition.FAIR, Condition.FAIR),
    ("broken", Condition.GOOD),
    (None, Condition.GOOD),
    (3, Condition.GOOD),
])
def test_normalize_condition(raw, expected):
    assert normalize_condition(raw) == expected

def test_classify_lower_is_worse():
    rule = MeasurementRule(critical=2, poor=4, fair=6)
    assert classify_measurement(1.5, rule) == "critical"
    assert classify_measurement(2, rule) == "critical"
    assert classify_measurement(3, rule) == "poor"
    assert classify_measurement(6, rule) == "fair"
    assert classify_measurement(8, rule) is None

def test_classify_higher_is_worse():
    rule = MeasurementRule(critical=80, poor=60, fair=40, direction="above")
    assert classify_measurement(95, rule) == "critical"
    assert classify_measurement(60, rule) == "poor"
    assert classify_measurement(45, rule) == "fair"
    assert classify_measurement(10, rule) is None

def test_validate_measurements_out_of_range():
    errors, warnings = validate_measurements("brakes", {"pad_thickness_mm": 25})
    assert errors == ["Brake pad thickness must be between 0-20mm"]
    assert warnings == []

    errors, _ = validate_measurements("tires", {"tread_depth_32nds": "deep"})
    assert errors == ['Tread depth must be between 0-32/32"']

    errors, _ = validate_measurements("battery", {"voltage": 7.2})
    assert errors == ["Battery voltage must be between 8-16V"]

def test_validate_measurements_warnings():
    errors, warnings = validate_measurements("brakes", {"pad_thickness_mm": 1.5})
    assert errors == []
    assert warnings == ["pad_thickness_mm is critically low"]

    errors, warnings = validate_measurements("tires", {"tread_depth_32nds": 3})
    assert warnings == ["tread_depth_32nds is approaching the minimum"]

def test_validate_measurements_ignores_unranged_items():
    assert validate_measurements("wipers", {"effectiveness_percent": 500}) == ([], [])
    assert validate_measurements("brakes", None) == ([], [])
    assert validate_measurements("brakes", {"pad_thickness_mm": None}) == ([], [])
