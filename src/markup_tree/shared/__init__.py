"""Shared utilities for incremental markup tree building.

This module provides the error types, configuration objects, diagnostics and
logging helpers used across the tree, tokenization and API layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)
from .errors import (
    ErrorKind,
    InvalidClosingTagError,
    MarkupTreeError,
    ParseError,
    SourcePosition,
    UnreachableStateError,
    safe_unreachable,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "ParserConfig",
    "TokenizerConfig",
    "TreeConfig",
    "ErrorKind",
    "InvalidClosingTagError",
    "MarkupTreeError",
    "ParseError",
    "SourcePosition",
    "UnreachableStateError",
    "safe_unreachable",
    "CorrelationLogger",
    "get_logger",
]
