"""Structural validation of the emitted trade plan dict."""

import math
from datetime import datetime
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

ALLOCATION_TOLERANCE = 1e-6

# Trade plan contract consumed by the HTTP layer
PLAN_SCHEMA = {
    "type": "object",
    "required": ["symbol", "recommendation", "confidence", "entries", "take_profits",
                 "stop_loss", "leverage", "reasoning", "timestamp"],
    "properties": {
        "symbol": {"type": "string", "minLength": 1},
        "recommendation": {"type": "string", "enum": ["long", "short"]},
        "confidence": {"type": "string", "enum": ["low", "moderate", "high", "very high"]},
        "entries": {
            "type": "array",
            "minItems": 1,
            "items": {
                "required": ["price", "type", "allocation", "reason"],
                "properties": {
                    "type": {"enum": ["market", "limit"]},
                },
            },
        },
        "take_profits": {
            "type": "array",
            "minItems": 1,
            "items": {"required": ["price", "allocation", "percentage_gain", "reason"]},
        },
        "stop_loss": {"type": "object", "required": ["price", "percentage_loss", "reason"]},
        "leverage": {
            "type": "object",
            "required": ["recommended", "risk_level", "reason"],
            "properties": {
                "recommended": {"type": "integer", "minimum": 1},
                "risk_level": {"enum": ["low", "moderate", "high"]},
            },
        },
        "reasoning": {"type": "array", "items": {"type": "string"}},
        "timestamp": {"type": "string", "format": "date-time"},
    },
    "additionalProperties": True
}


class PlanValidationError(Exception):
    """Trade plan validation error."""
    pass


def _is_positive_number(value: Any) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value) and value > 0)


class PlanValidator:
    """Validates trade plans before they leave the core."""

    def __init__(self):
        self.logger = logger
        self.schema = PLAN_SCHEMA

    def validate_plan(self, plan: dict[str, Any]) -> bool:
        """
        Validate a trade plan dict.

        Args:
            plan: Output of TradePlan.to_dict()

        Returns:
            True if valid

        Raises:
            PlanValidationError: If validation fails
        """
        try:
            self._validate_required_fields(plan)
            self._validate_field_values(plan)
            self._validate_allocations(plan)
            self._validate_prices(plan)
            self._validate_stop_side(plan)
            self._validate_timestamp(plan)

            return True

        except Exception as e:
            error_msg = f"Plan validation failed: {str(e)}"
            self.logger.error(error_msg, symbol=plan.get("symbol"))
            raise PlanValidationError(error_msg) from e

    def _validate_required_fields(self, plan: dict[str, Any]) -> None:
        """Validate required fields are present."""
        missing_fields = [field for field in self.schema["required"] if field not in plan]
        if missing_fields:
            raise ValueError(f"Missing required fields: {missing_fields}")

        properties = self.schema["properties"]
        for section in ("entries", "take_profits"):
            required = properties[section]["items"]["required"]
            for i, item in enumerate(plan[section]):
                missing = [field for field in required if field not in item]
                if missing:
                    raise ValueError(f"{section}[{i}] missing fields: {missing}")

        for section in ("stop_loss", "leverage"):
            missing = [field for field in properties[section]["required"] if field not in plan[section]]
            if missing:
                raise ValueError(f"{section} missing fields: {missing}")

    def _validate_field_values(self, plan: dict[str, Any]) -> None:
        """Validate enumerated fields."""
        properties = self.schema["properties"]

        if not isinstance(plan["symbol"], str) or len(plan["symbol"]) == 0:
            raise ValueError("symbol must be a non-empty string")

        if plan["recommendation"] not in properties["recommendation"]["enum"]:
            raise ValueError(f"Invalid recommendation: {plan['recommendation']}")

        if plan["confidence"] not in properties["confidence"]["enum"]:
            raise ValueError(f"Invalid confidence: {plan['confidence']}")

        if not plan["entries"] or not plan["take_profits"]:
            raise ValueError("entries and take_profits must not be empty")

        entry_types = properties["entries"]["items"]["properties"]["type"]["enum"]
        for entry in plan["entries"]:
            if entry["type"] not in entry_types:
                raise ValueError(f"Invalid entry type: {entry['type']}")

        leverage = plan["leverage"]
        recommended = leverage["recommended"]
        if not isinstance(recommended, int) or isinstance(recommended, bool) or recommended < 1:
            raise ValueError(f"leverage.recommended must be an integer >= 1, got {recommended}")
        if leverage["risk_level"] not in properties["leverage"]["properties"]["risk_level"]["enum"]:
            raise ValueError(f"Invalid risk level: {leverage['risk_level']}")

        if not all(isinstance(reason, str) for reason in plan["reasoning"]):
            raise ValueError("reasoning must be a list of strings")

    def _validate_allocations(self, plan: dict[str, Any]) -> None:
        """Entry and take-profit allocations each sum to 1."""
        for section in ("entries", "take_profits"):
            allocations = [item["allocation"] for item in plan[section]]
            if not all(_is_positive_number(a) for a in allocations):
                raise ValueError(f"{section} allocations must be positive numbers: {allocations}")
            total = sum(allocations)
            if abs(total - 1.0) > ALLOCATION_TOLERANCE:
                raise ValueError(f"{section} allocations sum to {total}, expected 1.0")

    def _validate_prices(self, plan: dict[str, Any]) -> None:
        """All prices must be finite and positive."""
        prices = [entry["price"] for entry in plan["entries"]]
        prices.extend(tp["price"] for tp in plan["take_profits"])
        prices.append(plan["stop_loss"]["price"])

        for price in prices:
            if not _is_positive_number(price):
                raise ValueError(f"Invalid price: {price}")

    def _validate_stop_side(self, plan: dict[str, Any]) -> None:
        """The stop sits on the losing side of the market entry."""
        market = [e for e in plan["entries"] if e["type"] == "market"]
        if not market:
            raise ValueError("Plan has no market entry")

        reference = market[0]["price"]
        stop = plan["stop_loss"]["price"]

        if plan["recommendation"] == "long" and stop >= reference:
            raise ValueError(f"Long stop {stop} is not below market entry {reference}")
        if plan["recommendation"] == "short" and stop <= reference:
            raise ValueError(f"Short stop {stop} is not above market entry {reference}")

    def _validate_timestamp(self, plan: dict[str, Any]) -> None:
        """Timestamp is an ISO8601 string."""
        try:
            datetime.fromisoformat(plan["timestamp"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid timestamp: {plan['timestamp']}") from e
