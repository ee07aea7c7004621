"""Tests for ParserConfig."""

import json

import pytest

from robust_string_parser.shared.config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)


class TestParserConfig:
    """Test suite for ParserConfig."""

    def test_default_configuration(self):
        """Test default configuration values."""
        config = ParserConfig()

        assert config.strict is False
        assert config.input_encoding == "utf-8"
        assert config.encoding_errors == "replace"
        assert config.enable_diagnostics is True
        assert config.collect_metrics is True
        assert config.max_recoveries is None
        assert config.name is None

    def test_config_is_frozen(self):
        """Test that configuration objects are immutable."""
        config = ParserConfig()
        with pytest.raises(AttributeError):
            config.strict = True  # type: ignore

    def test_validation_failures(self):
        """Test invalid values raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="input_encoding cannot be empty"):
            ParserConfig(input_encoding="")

        with pytest.raises(ConfigValidationError, match="encoding_errors must be one of"):
            ParserConfig(encoding_errors="explode")

        with pytest.raises(ConfigValidationError, match="max_recoveries must be >= 0") as exc_info:
            ParserConfig(max_recoveries=-1)
        assert exc_info.value.field_name == "max_recoveries"
        assert isinstance(exc_info.value, ConfigError)

    def test_override(self):
        """Test creating modified copies."""
        config = ParserConfig()
        strict = config.override(strict=True, max_recoveries=3)

        assert strict.strict is True
        assert strict.max_recoveries == 3
        assert config.strict is False

    def test_override_unknown_field(self):
        """Test that unknown override fields are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration fields: bogus"):
            ParserConfig().override(bogus=1)

    def test_override_revalidates(self):
        """Test that overrides go through validation."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(encoding_errors="nope")

    def test_dict_and_json_round_trip(self):
        """Test serialization helpers."""
        config = ParserConfig(strict=True, name="bbcode", max_recoveries=10)

        data = config.to_dict()
        assert data["strict"] is True
        assert data["name"] == "bbcode"
        assert ParserConfig.from_dict(data) == config

        payload = config.to_json()
        assert json.loads(payload)["max_recoveries"] == 10
        assert ParserConfig.from_json(payload) == config

    def test_from_dict_ignores_unknown_keys(self):
        """Test forward compatibility of stored configs."""
        config = ParserConfig.from_dict({"strict": True, "future_option": 1})
        assert config.strict is True

    def test_presets(self):
        """Test preset factory methods."""
        assert ParserConfig.lenient().strict is False
        strict = ParserConfig.strict_mode()
        assert strict.strict is True
        assert strict.encoding_errors == "strict"
