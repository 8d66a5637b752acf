"""Result object returned by the never-fail parse API."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from markup_tree.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseError,
    PerformanceMetrics,
)

from .html import Html


@dataclass
class ParseResult:
    """Tree, diagnostics and metrics of one parse.

    When ``success`` is False, ``error`` holds the error that halted the parse
    and ``tree`` holds everything built up to that point.
    """

    tree: Html = field(default_factory=Html)
    success: bool = True
    error: Optional[ParseError] = None

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    unclosed_tags: List[str] = field(default_factory=list)

    correlation_id: Optional[str] = None
    minimum_severity: DiagnosticSeverity = DiagnosticSeverity.DEBUG

    @property
    def is_empty(self) -> bool:
        """Check if the parse produced no content."""
        return self.tree.is_empty()

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def render(self) -> str:
        """Render the (possibly partial) tree back to markup text."""
        return self.tree.render()

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result unless it is below the configured level."""
        if severity.value < self.minimum_severity.value:
            return
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        by_severity: Dict[str, int] = {}
        for diagnostic in self.diagnostics:
            name = diagnostic.severity.name
            by_severity[name] = by_severity.get(name, 0) + 1

        return {
            "success": self.success,
            "error": self.error.to_dict() if self.error else None,
            "is_empty": self.is_empty,
            "unclosed_tags": list(self.unclosed_tags),
            "diagnostics_by_severity": by_severity,
            "performance": self.performance.to_dict(),
            "correlation_id": self.correlation_id,
        }
