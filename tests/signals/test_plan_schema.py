"""Tests for trade plan dict validation."""

import copy

import pytest

from trade_advisor.validation.plan_schema import PLAN_SCHEMA, PlanValidationError, PlanValidator


@pytest.fixture
def valid_plan():
    return {
        "symbol": "BTCUSDT",
        "recommendation": "long",
        "confidence": "high",
        "entries": [
            {"price": 100.0, "type": "market", "allocation": 0.4, "reason": "Immediate market entry"},
            {"price": 95.0, "type": "limit", "allocation": 0.3, "reason": "Entry at nearest support level"},
            {"price": 90.0, "type": "limit", "allocation": 0.3, "reason": "Entry at secondary support level"},
        ],
        "take_profits": [
            {"price": 103.0, "allocation": 0.3, "percentage_gain": 3.0, "reason": "First take profit at 3% gain"},
            {"price": 105.0, "allocation": 0.3, "percentage_gain": 5.0, "reason": "Second take profit at 5% gain"},
            {"price": 110.0, "allocation": 0.4, "percentage_gain": 10.0, "reason": "Final take profit at 10% gain"},
        ],
        "stop_loss": {"price": 93.1, "percentage_loss": 6.9, "reason": "Stop loss placed below nearest support level"},
        "leverage": {"recommended": 3, "risk_level": "moderate", "reason": "Leverage based on high confidence"},
        "reasoning": ["Market is in a strong bullish trend"],
        "timestamp": "2024-01-01T00:00:00+00:00",
    }


class TestPlanValidator:
    """Test plan validation rules."""

    def test_valid_plan(self, valid_plan):
        assert PlanValidator().validate_plan(valid_plan) is True

    def test_schema_requires_core_fields(self):
        assert "stop_loss" in PLAN_SCHEMA["required"]
        assert "timestamp" in PLAN_SCHEMA["required"]

    def test_missing_field(self, valid_plan):
        del valid_plan["leverage"]
        with pytest.raises(PlanValidationError, match="Missing required fields"):
            PlanValidator().validate_plan(valid_plan)

    def test_missing_entry_field(self, valid_plan):
        del valid_plan["entries"][1]["reason"]
        with pytest.raises(PlanValidationError, match="entries\\[1\\]"):
            PlanValidator().validate_plan(valid_plan)

    def test_neutral_is_not_a_plan(self, valid_plan):
        valid_plan["recommendation"] = "neutral"
        with pytest.raises(PlanValidationError, match="Invalid recommendation"):
            PlanValidator().validate_plan(valid_plan)

    def test_allocations_must_sum_to_one(self, valid_plan):
        valid_plan["take_profits"][2]["allocation"] = 0.5
        with pytest.raises(PlanValidationError, match="take_profits allocations sum"):
            PlanValidator().validate_plan(valid_plan)

    def test_non_positive_price(self, valid_plan):
        valid_plan["take_profits"][0]["price"] = 0.0
        with pytest.raises(PlanValidationError, match="Invalid price"):
            PlanValidator().validate_plan(valid_plan)

    def test_non_finite_price(self, valid_plan):
        valid_plan["stop_loss"]["price"] = float("nan")
        with pytest.raises(PlanValidationError):
            PlanValidator().validate_plan(valid_plan)

    def test_long_stop_above_entry(self, valid_plan):
        valid_plan["stop_loss"]["price"] = 101.0
        with pytest.raises(PlanValidationError, match="not below market entry"):
            PlanValidator().validate_plan(valid_plan)

    def test_short_stop_below_entry(self, valid_plan):
        plan = copy.deepcopy(valid_plan)
        plan["recommendation"] = "short"
        plan["stop_loss"]["price"] = 99.0
        with pytest.raises(PlanValidationError, match="not above market entry"):
            PlanValidator().validate_plan(plan)

    def test_leverage_must_be_integer(self, valid_plan):
        valid_plan["leverage"]["recommended"] = 2.5
        with pytest.raises(PlanValidationError, match="leverage.recommended"):
            PlanValidator().validate_plan(valid_plan)

    def test_invalid_entry_type(self, valid_plan):
        valid_plan["entries"][1]["type"] = "stop"
        with pytest.raises(PlanValidationError, match="Invalid entry type"):
            PlanValidator().validate_plan(valid_plan)

    def test_invalid_timestamp(self, valid_plan):
        valid_plan["timestamp"] = "yesterday"
        with pytest.raises(PlanValidationError, match="Invalid timestamp"):
            PlanValidator().validate_plan(valid_plan)
