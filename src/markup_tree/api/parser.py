"""Parse API for incremental markup tree building.

Two levels are offered:

- Level 1: module functions ``parse`` (never fails on malformed input, returns
  a ``ParseResult``) and ``parse_html`` (returns the tree, raises
  ``ParseError``)
- Level 2: ``MarkupParser``, a reusable parser bound to a ``ParserConfig``

Contract faults (``UnreachableStateError``) are never folded into a result:
they mean the tree and its driver disagree, not that the input is malformed.
"""

import time
from typing import Any, Dict, Optional

import psutil

from markup_tree.shared import (
    DiagnosticSeverity,
    ParseError,
    ParserConfig,
    get_logger,
)
from markup_tree.tokenization import MarkupTokenizer
from markup_tree.tree import Html, ParseResult

PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000


class MarkupParser:
    """Reusable parser with a fixed configuration.

    Each call to ``parse`` builds a fresh tree; nothing is shared between
    parses except the immutable configuration.

    Examples:
        >>> parser = MarkupParser(ParserConfig.strict())
        >>> result = parser.parse("<ul><li>one</li></ul>")
        >>> result.success
        True
        >>> parser.parse("<ul><li>one</ul>").error.kind.name
        'INVALID_CLOSING_TAG'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize parser.

        Args:
            config: Parser configuration (defaults to ``ParserConfig()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "markup_parser")

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def parse(
        self,
        markup: str,
        correlation_id_override: Optional[str] = None
    ) -> ParseResult:
        """Parse markup text into a ``ParseResult``.

        Malformed input never raises: the first ``ParseError`` halts the parse
        and is recorded in ``result.error`` and as an ERROR diagnostic, and
        ``result.tree`` keeps what was built before it.

        Raises:
            TypeError: ``markup`` is not a string
            UnreachableStateError: the tree detected a contract violation
        """
        if not isinstance(markup, str):
            raise TypeError(f"markup must be str, not {type(markup).__name__}")

        correlation_id = correlation_id_override or self.correlation_id
        logger = self.logger.bind(correlation_id)
        start_time = time.time()
        process = psutil.Process() if self.config.global_.enable_metrics else None
        memory_start = process.memory_info().rss if process else 0

        logger.info(
            "Starting markup parse",
            extra={
                "content_length": len(markup),
                "preview": (
                    markup[:PREVIEW_LENGTH] + "..."
                    if len(markup) > PREVIEW_LENGTH else markup
                ),
            }
        )

        result = ParseResult(
            correlation_id=correlation_id,
            minimum_severity=self.config.global_.minimum_severity,
        )
        tokenizer = MarkupTokenizer(
            tree_config=self.config.tree,
            tokenizer_config=self.config.tokenizer,
            correlation_id=correlation_id,
        )

        try:
            tokenizer.feed(markup)
            result.tree = tokenizer.finish()
        except ParseError as e:
            result.tree = tokenizer.tree
            result.success = False
            result.error = e
            result.add_diagnostic(
                DiagnosticSeverity.ERROR,
                str(e),
                "markup_tokenizer",
                position=e.position.to_dict() if e.position else None,
                details={"kind": e.kind.name},
            )
            logger.warning(
                "Markup parse halted",
                extra={"kind": e.kind.name, "error": e.message},
            )

        result.unclosed_tags = result.tree.open_tags()
        for warning in tokenizer.warnings:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING, warning, "markup_tokenizer"
            )
        if result.is_empty:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                "Empty input produced an empty tree",
                "markup_parser",
            )

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        result.performance.processing_time_ms = processing_time
        result.performance.characters_processed = tokenizer.offset
        result.performance.events_processed = tokenizer.events_processed
        if process:
            result.performance.memory_used_bytes = max(
                0, process.memory_info().rss - memory_start
            )

        self._parse_count += 1
        self._total_processing_time += processing_time
        if result.success:
            self._successful_parses += 1

        logger.info(
            "Markup parse completed",
            extra={
                "success": result.success,
                "processing_time_ms": processing_time,
                "events_processed": tokenizer.events_processed,
                "unclosed_tags": len(result.unclosed_tags),
            }
        )
        return result

    def parse_html(self, markup: str) -> Html:
        """Parse markup text and return the tree.

        Raises:
            ParseError: on the first malformed construct
        """
        tokenizer = MarkupTokenizer(
            tree_config=self.config.tree,
            tokenizer_config=self.config.tokenizer,
            correlation_id=self.correlation_id,
        )
        tokenizer.feed(markup)
        return tokenizer.finish()

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

        self.logger.info("Parser statistics reset")


def parse(
    markup: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse markup text without raising on malformed input.

    Examples:
        >>> result = parse('<p class="x">hi</p>')
        >>> result.success, result.render()
        (True, '<p class="x">hi</p>')

        >>> parse("<p>hi</b>").error.open_name
        'p'
    """
    return MarkupParser(config, correlation_id).parse(markup)


def parse_html(markup: str, config: Optional[ParserConfig] = None) -> Html:
    """Parse markup text into an ``Html`` tree.

    Raises:
        ParseError: on the first malformed construct

    Examples:
        >>> str(parse_html("<!DOCTYPE html><br/>x"))
        '<!DOCTYPE html><br />x'
    """
    return MarkupParser(config).parse_html(markup)
