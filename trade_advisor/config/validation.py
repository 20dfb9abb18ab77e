"""Configuration validation utilities."""

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def _check_periods(section: str, params: dict[str, Any], names: list[str]) -> list[ValidationError]:
        errors = []
        for name in names:
            if name in params and not _is_positive_int(params[name]):
                errors.append(ValidationError(
                    field=f"{section}.{name}",
                    message="Must be a positive integer",
                    value=params[name]
                ))
        return errors

    @staticmethod
    def _check_fractions(section: str, params: dict[str, Any], names: list[str]) -> list[ValidationError]:
        errors = []
        for name in names:
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0 or value > 1:
                    errors.append(ValidationError(
                        field=f"{section}.{name}",
                        message="Must be a positive number between 0 and 1",
                        value=value
                    ))
        return errors

    @staticmethod
    def _check_allocations(section: str, params: dict[str, Any], name: str,
                           extra: float = 0.0) -> list[ValidationError]:
        if name not in params:
            return []
        value = params[name]
        if not isinstance(value, (list, tuple)) or not all(_is_number(v) and v > 0 for v in value):
            return [ValidationError(
                field=f"{section}.{name}",
                message="Must be a sequence of positive numbers",
                value=value
            )]
        if not math.isclose(sum(value) + extra, 1.0, abs_tol=1e-6):
            return [ValidationError(
                field=f"{section}.{name}",
                message="Allocations must sum to 1.0",
                value=value
            )]
        return []

    @staticmethod
    def validate_indicator_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate indicator periods."""
        errors = ConfigValidator._check_periods("indicators", params, [
            "rsi_period", "macd_fast", "macd_slow", "macd_signal", "bollinger_period",
            "atr_period", "stochastic_k", "stochastic_d", "cci_period", "volatility_period",
        ])

        periods = params.get("sma_periods")
        if periods is not None and (
            not isinstance(periods, (list, tuple)) or not all(_is_positive_int(p) for p in periods)
        ):
            errors.append(ValidationError(
                field="indicators.sma_periods",
                message="Must be a sequence of positive integers",
                value=periods
            ))
        elif periods is not None and (len(periods) != 3 or list(periods) != sorted(set(periods))):
            errors.append(ValidationError(
                field="indicators.sma_periods",
                message="Must list short, medium and long periods in increasing order",
                value=periods
            ))

        fast, slow = params.get("macd_fast"), params.get("macd_slow")
        if _is_positive_int(fast) and _is_positive_int(slow) and fast >= slow:
            errors.append(ValidationError(
                field="indicators.macd_fast",
                message="Must be smaller than macd_slow",
                value=fast
            ))

        return errors

    @staticmethod
    def validate_level_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate support/resistance parameters."""
        errors = ConfigValidator._check_periods("levels", params, ["window", "max_levels"])
        errors.extend(ConfigValidator._check_fractions("levels", params, ["cluster_threshold"]))
        return errors

    @staticmethod
    def validate_pattern_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate pattern detection parameters."""
        errors = ConfigValidator._check_periods("patterns", params, [
            "window", "extrema_radius", "min_separation", "engulfing_lookback",
        ])
        errors.extend(ConfigValidator._check_fractions("patterns", params, [
            "similarity_threshold", "min_reversal",
        ]))
        return errors

    @staticmethod
    def validate_volume_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate volume analyzer parameters."""
        errors = ConfigValidator._check_periods("volume", params, [
            "hours_per_day", "week_days", "month_days",
            "recent_hourly_points", "recent_daily_points", "max_wall_levels",
        ])
        errors.extend(ConfigValidator._check_fractions("volume", params, ["wall_volume_fraction"]))

        if "zscore_threshold" in params:
            value = params["zscore_threshold"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="volume.zscore_threshold",
                    message="Must be a positive number",
                    value=value
                ))

        buying, selling = params.get("pressure_buying_ratio"), params.get("pressure_selling_ratio")
        if _is_number(buying) and _is_number(selling) and selling >= buying:
            errors.append(ValidationError(
                field="volume.pressure_selling_ratio",
                message="Must be smaller than pressure_buying_ratio",
                value=selling
            ))

        return errors

    @staticmethod
    def validate_aggregation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate vote margin and confidence bands."""
        errors = ConfigValidator._check_periods("aggregation", params, [
            "vote_margin", "moderate_confidence", "high_confidence", "very_high_confidence",
        ])
        bands = [params.get("moderate_confidence"), params.get("high_confidence"),
                 params.get("very_high_confidence")]
        if all(_is_positive_int(b) for b in bands) and not bands[0] < bands[1] < bands[2]:
            errors.append(ValidationError(
                field="aggregation.high_confidence",
                message="Confidence bands must be strictly increasing",
                value=bands
            ))
        return errors

    @staticmethod
    def validate_plan_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate plan allocations, buffers and leverage tables."""
        errors = ConfigValidator._check_fractions("plan", params, [
            "market_allocation", "take_profit_extension", "stop_level_buffer", "stop_entry_buffer",
        ])
        errors.extend(ConfigValidator._check_allocations(
            "plan", params, "limit_allocations",
            extra=params.get("market_allocation", 0.0) if _is_number(params.get("market_allocation")) else 0.0
        ))
        errors.extend(ConfigValidator._check_allocations("plan", params, "take_profit_allocations"))

        pcts = params.get("take_profit_fallback_pcts")
        if pcts is not None:
            take_profits = params.get("take_profit_allocations", ())
            if (not isinstance(pcts, (list, tuple)) or not all(_is_number(p) and p > 0 for p in pcts)
                    or list(pcts) != sorted(pcts)):
                errors.append(ValidationError(
                    field="plan.take_profit_fallback_pcts",
                    message="Must be an increasing sequence of positive numbers",
                    value=pcts
                ))
            elif isinstance(take_profits, (list, tuple)) and len(pcts) != len(take_profits):
                errors.append(ValidationError(
                    field="plan.take_profit_fallback_pcts",
                    message="Must have one entry per take-profit allocation",
                    value=pcts
                ))

        for name in ("base_leverage", "volatility_multipliers"):
            table = params.get(name)
            if table is not None and (
                not isinstance(table, dict) or not all(_is_number(v) and v > 0 for v in table.values())
            ):
                errors.append(ValidationError(
                    field=f"plan.{name}",
                    message="Must map labels to positive numbers",
                    value=table
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "indicators" in config:
            errors.extend(ConfigValidator.validate_indicator_params(config["indicators"]))

        if "levels" in config:
            errors.extend(ConfigValidator.validate_level_params(config["levels"]))

        if "patterns" in config:
            errors.extend(ConfigValidator.validate_pattern_params(config["patterns"]))

        if "volume" in config:
            errors.extend(ConfigValidator.validate_volume_params(config["volume"]))

        if "aggregation" in config:
            errors.extend(ConfigValidator.validate_aggregation_params(config["aggregation"]))

        if "plan" in config:
            errors.extend(ConfigValidator.validate_plan_params(config["plan"]))

        return errors
