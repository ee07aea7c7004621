"""Configuration for the string parsing engine.

``ParserConfig`` is an immutable dataclass validated on construction. Engines
copy the values they need at construction time, so a config object can be
shared freely between engines and threads.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional

VALID_ENCODING_ERRORS = ["strict", "replace", "ignore", "surrogateescape", "backslashreplace"]


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Settings that control one ``ParseEngine``.

    Attributes:
        strict: Turn every recoverable condition into a parse failure
        input_encoding: Codec used when ``parse`` receives bytes
        encoding_errors: Error handler passed to ``bytes.decode``
        enable_diagnostics: Record DiagnosticEntry objects on the result
        collect_metrics: Record timing and counters on the result
        max_recoveries: Upper bound on lenient recoveries per parse, or None
        name: Optional label attached to the engine's parse log records
    """

    strict: bool = False
    input_encoding: str = "utf-8"
    encoding_errors: str = "replace"
    enable_diagnostics: bool = True
    collect_metrics: bool = True
    max_recoveries: Optional[int] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the configuration values."""
        if not self.input_encoding:
            raise ConfigValidationError(
                "input_encoding cannot be empty", field_name="input_encoding"
            )
        if self.encoding_errors not in VALID_ENCODING_ERRORS:
            raise ConfigValidationError(
                f"encoding_errors must be one of {VALID_ENCODING_ERRORS}",
                field_name="encoding_errors",
                suggestions=["Use 'replace' to keep undecodable bytes visible"],
            )
        if self.max_recoveries is not None and self.max_recoveries < 0:
            raise ConfigValidationError(
                "max_recoveries must be >= 0 or None", field_name="max_recoveries"
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = ParserConfig()
            >>> config.override(strict=True).strict
            True
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {', '.join(unknown)}",
                field_name=unknown[0],
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Preset that recovers from every unmatched construct."""
        return cls()

    @classmethod
    def strict_mode(cls) -> "ParserConfig":
        """Preset that fails on the first unmatched or unknown construct."""
        return cls(strict=True, encoding_errors="strict")
