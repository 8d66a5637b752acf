"""Configuration classes for incremental markup tree building.

This module provides configuration objects for the tree, the tokenizer that
drives it, and the parse API. Component configurations validate themselves in
``__post_init__``; ``ParserConfig`` composes them into one immutable object.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .result import DiagnosticSeverity

_COMPONENTS = ("tree", "tokenizer", "global_")


@dataclass
class TreeConfig:
    """Configuration for the tree itself."""

    # Maximum number of simultaneously open elements. Every event walks the
    # open elements, so parse time grows with this depth.
    max_depth: int = 512
    # Run Html.check_invariants() after the parse completes
    verify_invariants: bool = False

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")


@dataclass
class TokenizerConfig:
    """Configuration for the character-level driver."""

    allow_unclosed_tags: bool = True
    allow_unterminated_comment: bool = True

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""


@dataclass
class GlobalConfig:
    """Settings that apply across all components."""

    diagnostic_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_metrics: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = [severity.name for severity in DiagnosticSeverity]
        if self.diagnostic_level not in valid_levels:
            raise ValueError(f"diagnostic_level must be one of {valid_levels}")

    @property
    def minimum_severity(self) -> DiagnosticSeverity:
        """Lowest severity recorded in parse results."""
        return DiagnosticSeverity[self.diagnostic_level]


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
    """Complete configuration for a parse.

    Immutable, so one instance can be shared by any number of parsers.
    """

    tree: TreeConfig = field(default_factory=TreeConfig)
    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.tree.__post_init__()
            self.tokenizer.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; ``component__field`` keys address a
                field of a component configuration

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig().override(tree__max_depth=64, name="shallow")
            >>> config.tree.max_depth
            64
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component = next(
                    (c for c in _COMPONENTS if key.startswith(c + "__")),
                    key.split("__", 1)[0],
                )
                field_name = key[len(component) + 2:]
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of {list(_COMPONENTS)}"],
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENTS and isinstance(value, dict):
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than silently ignored.
        """
        component_types = {
            "tree": TreeConfig,
            "tokenizer": TokenizerConfig,
            "global_": GlobalConfig,
        }
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                try:
                    field_values[key] = component_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in ("name", "description"):
                field_values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def strict(cls) -> "ParserConfig":
        """Create configuration that rejects anything left open at end of input."""
        return cls(
            tree=TreeConfig(verify_invariants=True),
            tokenizer=TokenizerConfig(
                allow_unclosed_tags=False,
                allow_unterminated_comment=False,
            ),
            name="strict",
            description="Reject unclosed elements and unterminated comments",
        )

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Create configuration that keeps unfinished constructs as they are."""
        return cls(
            tokenizer=TokenizerConfig(
                allow_unclosed_tags=True,
                allow_unterminated_comment=True,
            ),
            global_=GlobalConfig(diagnostic_level="WARNING"),
            name="lenient",
            description="Render unclosed elements and comments as written",
        )
