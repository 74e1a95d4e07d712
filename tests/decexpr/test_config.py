"""
Tests for engine configuration.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from decexpr.arithmetic import RoundingMode
from decexpr.config import EngineConfig, load_config
from decexpr.engine import ExpressionEngine
from decexpr.errors import LimitExceededError
from decexpr.limits import ExpressionLimits


class TestEngineConfig:
    """Tests for EngineConfig validation."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.precision == 16
        assert config.rounding_mode is RoundingMode.HALF_EVEN
        assert config.expression_limits is None
        assert config.variables == {}

    def test_camel_case_aliases(self):
        config = EngineConfig.model_validate(
            {"precision": 8, "roundingMode": "HALF_UP"}
        )
        assert config.precision == 8
        assert config.rounding_mode is RoundingMode.HALF_UP

    def test_snake_case_names(self):
        config = EngineConfig(rounding_mode=RoundingMode.FLOOR)
        assert config.rounding_mode is RoundingMode.FLOOR

    def test_rounding_mode_is_case_insensitive(self):
        config = EngineConfig.model_validate({"roundingMode": "half_down"})
        assert config.rounding_mode is RoundingMode.HALF_DOWN

    def test_unknown_rounding_mode(self):
        with pytest.raises(ValidationError):
            EngineConfig.model_validate({"roundingMode": "sideways"})

    @pytest.mark.parametrize("precision", [0, -1])
    def test_precision_must_be_positive(self, precision):
        with pytest.raises(ValidationError):
            EngineConfig(precision=precision)

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            EngineConfig.model_validate({"precisoin": 10})

    def test_variables_are_decimals(self):
        config = EngineConfig.model_validate(
            {"variables": {"rate": "0.5", "count": 3, "ratio": 1.5}}
        )
        assert config.variables == {
            "rate": Decimal("0.5"),
            "count": Decimal(3),
            "ratio": Decimal("1.5"),
        }

    def test_invalid_variable_value(self):
        with pytest.raises(ValidationError):
            EngineConfig.model_validate({"variables": {"x": "abc"}})


class TestExpressionLimitsConfig:
    """Tests for expression limits in configuration."""

    def test_camel_case_limit_keys(self):
        config = EngineConfig.model_validate(
            {"expressionLimits": {"maxAstDepth": 10, "maxFunctionArgs": 4}}
        )
        assert config.expression_limits == ExpressionLimits(
            max_ast_depth=10, max_function_args=4
        )

    def test_snake_case_limit_keys(self):
        config = EngineConfig.model_validate(
            {"expression_limits": {"max_nesting_depth": 12}}
        )
        assert config.expression_limits is not None
        assert config.expression_limits.max_nesting_depth == 12
        assert config.expression_limits.max_ast_nodes == 2048

    def test_limits_instance(self):
        limits = ExpressionLimits(max_expression_length=10)
        config = EngineConfig(expression_limits=limits)
        assert config.expression_limits == limits

    def test_round_places_limit(self):
        engine = ExpressionEngine({"expressionLimits": {"maxRoundPlaces": 2}})
        assert engine.limits.max_round_places == 2
        assert engine.evaluate("round(pi, 2)") == Decimal("3.14")
        with pytest.raises(LimitExceededError):
            engine.evaluate("round(pi, 3)")

    def test_unknown_limit_key(self):
        with pytest.raises(ValidationError):
            EngineConfig.model_validate({"expressionLimits": {"maxWidgets": 1}})


class TestLoadConfig:
    """Tests for load_config."""

    def test_none(self):
        assert load_config(None) == EngineConfig()

    def test_dict(self):
        assert load_config({"precision": 5}).precision == 5

    def test_instance_is_returned_unchanged(self):
        config = EngineConfig(precision=7)
        assert load_config(config) is config


class TestEngineFromConfig:
    """Tests for creating engines from configuration."""

    def test_config_variables_are_defined(self):
        engine = ExpressionEngine({"variables": {"rate": "0.5"}})
        assert engine.evaluate("rate * 4") == 2

    def test_config_variables_can_replace_constants(self):
        engine = ExpressionEngine({"variables": {"pi": 3}})
        assert engine.evaluate("pi") == 3

    def test_config_object(self):
        engine = ExpressionEngine(
            EngineConfig(precision=6, rounding_mode=RoundingMode.UP)
        )
        assert engine.evaluate("2/3") == Decimal("0.666667")
        assert engine.rounding_mode is RoundingMode.UP

    def test_invalid_config(self):
        with pytest.raises(ValidationError):
            ExpressionEngine({"precision": "many"})
