import pytest
from domain.urgency_calculator import UrgencyInput, UrgencyLevel, UrgencyThresholds
from domain.rule_based_urgency import RuleBasedUrgencyCalculator, calculate_urgency, calculate_inspection_urgency

@pytest.fixture
def calculator():
    return RuleBasedUrgencyCalculator()

def test_critical_brake_pads(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(
        condition="needs_immediate",
        item_type="brakes",
        measurements={"pad_thickness_mm": 1.5},
        priority=1
    ))
    assert result.level == UrgencyLevel.CRITICAL
    assert result.score > 85
    assert "Condition: needs_immediate (+95)" in result.factors
    assert "STOP DRIVING - Immediate safety risk" in result.recommendations

def test_poor_tires_low_tread_is_high(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(
        condition="poor",
        item_type="tires",
        measurements={"tread_depth_32nds": 3},
        priority=2
    ))
    assert result.level == UrgencyLevel.HIGH
    assert result.score > 60
    assert any("tread_depth_32nds" in f for f in result.factors)

def test_fair_battery_is_normal(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(
        condition="fair",
        item_type="battery",
        measurements={"voltage": 11.9},
        priority=1
    ))
    assert result.level == UrgencyLevel.NORMAL
    assert 30 < result.score < 65

def test_good_fluids_is_low(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(
        condition="good",
        item_type="fluids",
        measurements={"level_percent": 80},
        priority=1
    ))
    assert result.level == UrgencyLevel.LOW
    assert result.score < 35

def test_low_voltage_boosts_score(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(
        condition="fair",
        item_type="battery",
        measurements={"voltage": 11.5},
        priority=1
    ))
    assert result.score > 50
    assert any("voltage" in f for f in result.factors)

def test_brakes_outweigh_wipers(calculator):
    brakes = calculator.calculate_item_urgency(UrgencyInput(condition="poor", item_type="brakes", priority=1))
    wipers = calculator.calculate_item_urgency(UrgencyInput(condition="poor", item_type="wipers", priority=1))
    assert brakes.score > wipers.score

@pytest.mark.parametrize("item_type", ["brakes", "wipers", "filters", "audio", ""])
def test_needs_immediate_always_critical(calculator, item_type):
    result = calculator.calculate_item_urgency(UrgencyInput(condition="needs_immediate", item_type=item_type))
    assert result.level == UrgencyLevel.CRITICAL

@pytest.mark.parametrize("condition", ["good", "fair", "poor", "needs_immediate"])
def test_score_bounds_without_measurements(calculator, condition):
    result = calculator.calculate_item_urgency(UrgencyInput(condition=condition, item_type="brakes"))
    assert 0 <= result.score <= 100
    if condition == "good":
        assert result.level == UrgencyLevel.LOW

@pytest.mark.parametrize("measurements", [
    {"pad_thickness_mm": None},
    {"pad_thickness_mm": "worn"},
    {"pad_thickness_mm": -3},
    {"pad_thickness_mm": float("nan")},
    {"pad_thickness_mm": True},
    {"pad_thickness_mm": [1, 2]},
    None,
    "not a mapping",
])
def test_invalid_measurements_are_ignored(calculator, measurements):
    result = calculator.calculate_item_urgency(UrgencyInput(
        condition="poor", item_type="brakes", measurements=measurements
    ))
    assert 0 <= result.score <= 100
    assert not any("pad_thickness_mm" in f for f in result.factors)

def test_numeric_string_measurement_is_coerced(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(
        condition="fair", item_type="tires", measurements={"tread_depth_32nds": "2"}
    ))
    assert any("tread_depth_32nds: 2 (critical)" in f for f in result.factors)

def test_higher_is_worse_measurement(calculator):
    clean = calculator.calculate_item_urgency(UrgencyInput(
        condition="fair", item_type="filters", measurements={"restriction_percent": 10}
    ))
    clogged = calculator.calculate_item_urgency(UrgencyInput(
        condition="fair", item_type="filters", measurements={"restriction_percent": 90}
    ))
    assert clogged.score > clean.score
    assert any("restriction_percent: 90 (critical)" in f for f in clogged.factors)

def test_unknown_condition_uses_baseline(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(condition=None, item_type="brakes"))
    assert result.factors[0] == "Condition: good (+10)"
    assert result.level == UrgencyLevel.LOW

def test_priority_bonus_is_capped(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(condition="fair", item_type="lights", priority=50))
    assert "Priority level 50 (+10)" in result.factors
    assert result.score == 45

def test_factors_in_evaluation_order(calculator):
    result = calculator.calculate_item_urgency(UrgencyInput(
        condition="poor", item_type="tires", measurements={"tread_depth_32nds": 3}, priority=2
    ))
    assert result.factors == [
        "Condition: poor (+55)",
        "tread_depth_32nds: 3 (poor) +12",
        "Item type modifier: 1.1x",
        "Priority level 2 (+2)",
    ]

def test_custom_thresholds():
    calculator = RuleBasedUrgencyCalculator({"high": 40})
    assert calculator.get_thresholds() == UrgencyThresholds(critical=85, high=40, normal=30)
    result = calculator.calculate_item_urgency(UrgencyInput(condition="fair", item_type="battery",
                                                            measurements={"voltage": 11.9}))
    assert result.level == UrgencyLevel.HIGH

def test_inspection_any_critical():
    result = calculate_inspection_urgency([
        UrgencyInput(condition="good", item_type="fluids", priority=1),
        UrgencyInput(condition="fair", item_type="filters", priority=1),
        UrgencyInput(condition="needs_immediate", item_type="brakes", priority=10),
    ])
    assert result.level == UrgencyLevel.CRITICAL
    assert result.score == 95
    assert "1 critical safety item(s)" in result.factors
    assert "IMMEDIATE ATTENTION REQUIRED - Do not drive vehicle" in result.recommendations

def test_inspection_multiple_poor_items():
    result = calculate_inspection_urgency([
        UrgencyInput(condition="poor", item_type="brakes", priority=7),
        UrgencyInput(condition="poor", item_type="tires", priority=7),
        UrgencyInput(condition="poor", item_type="battery", priority=7),
    ])
    assert result.level == UrgencyLevel.HIGH
    assert result.score == 75
    assert "Schedule repair within 1-2 weeks" in result.recommendations

def test_inspection_empty():
    result = calculate_inspection_urgency([])
    assert result.level == UrgencyLevel.LOW
    assert result.score == 0
    assert result.factors == ["No inspection items"]

def test_inspection_all_good():
    result = calculate_inspection_urgency([
        UrgencyInput(condition="good", item_type="fluids"),
        UrgencyInput(condition="good", item_type="lights"),
    ])
    assert result.level == UrgencyLevel.LOW
    assert result.score == 20
    assert "All items in good or fair condition" in result.factors

def test_inspection_recommendations_are_unique():
    result = calculate_inspection_urgency([
        UrgencyInput(condition="fair", item_type="battery", measurements={"voltage": 11.9}),
        UrgencyInput(condition="fair", item_type="battery", measurements={"voltage": 11.9}),
    ])
    assert result.level == UrgencyLevel.NORMAL
    assert len(result.recommendations) == len(set(result.recommendations))

def test_convenience_function_matches_calculator(calculator):
    item = UrgencyInput(condition="poor", item_type="brakes", measurements={"pad_thickness_mm": 3})
    assert calculate_urgency(item) == calculator.calculate_item_urgency(item)

def test_needs_immediate_critical_with_raised_shop_threshold():
    calculator = RuleBasedUrgencyCalculator({"critical": 95})
    item = UrgencyInput(condition="needs_immediate", item_type="wipers")

    result = calculator.calculate_item_urgency(item)
    assert result.level == UrgencyLevel.CRITICAL
    assert result.score == 90

    aggregate = calculator.calculate_inspection_urgency([item, UrgencyInput(condition="good", item_type="fluids")])
    assert aggregate.level == UrgencyLevel.CRITICAL
    assert aggregate.score == 95
