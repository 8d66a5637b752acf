"""Exception types for incremental markup tree building.

Two families of failures are kept apart:

* ``ParseError`` and its subclasses describe malformed *input*. They are
  ordinary, recoverable outcomes that the parse API turns into diagnostics.
* ``UnreachableStateError`` describes a broken *contract* between the driver
  and the tree (for example a comment opened while another one is still
  open). It is never converted into a diagnostic and always propagates.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, NoReturn, Optional

from .logging import get_logger

logger = get_logger(__name__, component="contract")


class ErrorKind(Enum):
    """Categories of recoverable parse errors."""

    INVALID_CLOSING_TAG = auto()   # </name> does not match the innermost open tag
    INVALID_TAG = auto()           # Opening tag with unusable name or attributes
    UNTERMINATED_TAG = auto()      # Input ended between < and >
    UNTERMINATED_COMMENT = auto()  # Input ended inside <!-- ... (strict mode only)
    UNCLOSED_TAG = auto()          # Input ended with open elements (strict mode only)
    MAX_DEPTH_EXCEEDED = auto()    # Nesting deeper than the configured limit


@dataclass(frozen=True)
class SourcePosition:
    """Location of an event in the source text."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        """Convert position to dictionary representation."""
        return {"line": self.line, "column": self.column, "offset": self.offset}

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


class MarkupTreeError(Exception):
    """Base exception for all recoverable markup tree errors."""


class ParseError(MarkupTreeError):
    """Malformed input detected while building the tree."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        position: Optional[SourcePosition] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.position = position

    def at(self, position: SourcePosition) -> "ParseError":
        """Attach a source position unless one is already known."""
        if self.position is None:
            self.position = position
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "kind": self.kind.name,
            "message": self.message,
            "position": self.position.to_dict() if self.position else None,
        }

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} ({self.position})"


class InvalidClosingTagError(ParseError):
    """A closing tag did not match the innermost open element."""

    def __init__(self, name: str, open_name: Optional[str] = None) -> None:
        if open_name is None:
            message = (
                f"Invalid closing tag: Found closing tag for '{name}' "
                "but it isn't open."
            )
        else:
            message = (
                f"Invalid closing tag: Found closing tag for '{name}' "
                f"but '{open_name}' is the innermost open tag."
            )
        super().__init__(message, ErrorKind.INVALID_CLOSING_TAG)
        self.name = name
        self.open_name = open_name


class UnreachableStateError(RuntimeError):
    """The tree reached a state that the driver protocol rules out."""


def safe_unreachable(message: str) -> NoReturn:
    """Report a contract violation and abort the current operation.

    Raises:
        UnreachableStateError: always
    """
    logger.critical(f"Unreachable state: {message}")
    raise UnreachableStateError(message)
