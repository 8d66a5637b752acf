"""Character-level driver for the incremental markup tree.

``MarkupTokenizer`` reads the source one character at a time, decides which
tree operation that character stands for, and applies it to the single
``Html`` tree it owns. It never looks ahead: text characters go to the tree as
soon as they are read, and only the inside of a ``<...>`` construct is
buffered until its closing ``>``.

The tokenizer halts on the first malformed construct by raising
``ParseError``; there is no attempt to resynchronize.
"""

import re
from enum import Enum, auto
from typing import List, Optional

from markup_tree.shared import (
    ErrorKind,
    ParseError,
    SourcePosition,
    TokenizerConfig,
    TreeConfig,
    get_logger,
)
from markup_tree.tree import Html

from .tag_parser import parse_tag

COMMENT_OPENER = "!--"  # Buffered after "<"
COMMENT_DASHES = 2      # Number of "-" before ">" that end a comment
_WHITESPACE = re.compile(r"\s")


class TokenizerState(Enum):
    """State machine states for the driver."""

    TEXT = auto()         # Character data, sent straight to the tree
    TAG = auto()          # Between < and >, content buffered
    TAG_QUOTED = auto()   # Inside a quoted attribute value of a tag
    COMMENT = auto()      # Inside <!-- ... -->
    FINISHED = auto()     # finish() was called or an error was raised


class MarkupTokenizer:
    """Drives one ``Html`` tree from raw markup text.

    Examples:
        >>> tokenizer = MarkupTokenizer()
        >>> tokenizer.feed("<p>hello</p>")
        >>> str(tokenizer.finish())
        '<p>hello</p>'
    """

    def __init__(
        self,
        tree_config: Optional[TreeConfig] = None,
        tokenizer_config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            tree_config: Limits applied to the tree (maximum nesting depth)
            tokenizer_config: What is accepted at end of input
            correlation_id: Optional correlation ID for request tracking
        """
        self.tree_config = tree_config or TreeConfig()
        self.config = tokenizer_config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "markup_tokenizer")

        self.tree = Html()
        self.state = TokenizerState.TEXT
        self.warnings: List[str] = []

        self._buffer: List[str] = []
        self._quote: Optional[str] = None
        self._dashes = 0
        self._depth = 0
        self._construct_start = SourcePosition(1, 1, 0)

        self.line = 1
        self.column = 1
        self.offset = 0
        self.events_processed = 0

    @property
    def position(self) -> SourcePosition:
        """Position of the next character to be read."""
        return SourcePosition(self.line, self.column, self.offset)

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return self._depth

    def feed(self, text: str) -> None:
        """Process a chunk of input.

        May be called repeatedly; a construct split across chunks is handled
        like one written in a single chunk.

        Raises:
            ParseError: on the first malformed construct
        """
        if self.state is TokenizerState.FINISHED:
            raise RuntimeError("Cannot feed a finished tokenizer")

        for ch in text:
            try:
                self._process_char(ch)
            except ParseError as e:
                self.state = TokenizerState.FINISHED
                raise e.at(self._construct_start)
            self._advance(ch)

    def finish(self) -> Html:
        """Signal end of input and return the tree.

        Raises:
            ParseError: input ended inside a tag, or (when the configuration
                forbids it) with open elements or an open comment
        """
        state = self.state
        self.state = TokenizerState.FINISHED

        if state in (TokenizerState.TAG, TokenizerState.TAG_QUOTED):
            raise ParseError(
                f"Unterminated tag: '<{''.join(self._buffer)}' never closed with '>'",
                ErrorKind.UNTERMINATED_TAG,
                self._construct_start,
            )

        if state is TokenizerState.COMMENT:
            self._flush_dashes()
            if not self.config.allow_unterminated_comment:
                raise ParseError(
                    "Unterminated comment: '<!--' never closed with '-->'",
                    ErrorKind.UNTERMINATED_COMMENT,
                    self._construct_start,
                )
            self.warnings.append("Comment left open at end of input")

        open_tags = self.tree.open_tags()
        if open_tags:
            if not self.config.allow_unclosed_tags:
                raise ParseError(
                    f"Unclosed tags at end of input: {', '.join(open_tags)}",
                    ErrorKind.UNCLOSED_TAG,
                    self.position,
                )
            self.warnings.append(
                f"Tags left open at end of input: {', '.join(open_tags)}"
            )

        if self.tree_config.verify_invariants:
            self.tree.check_invariants()

        return self.tree

    def _advance(self, ch: str) -> None:
        self.offset += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

    def _process_char(self, ch: str) -> None:
        if self.state is TokenizerState.TEXT:
            if ch == "<":
                self._construct_start = self.position
                self._buffer.clear()
                self.state = TokenizerState.TAG
            else:
                self.tree.push_char(ch)
                self.events_processed += 1

        elif self.state is TokenizerState.TAG:
            if ch == ">":
                self._dispatch_tag("".join(self._buffer))
                self.state = TokenizerState.TEXT
                return
            if ch == "<":
                raise ParseError(
                    "Invalid tag: unexpected '<' inside a tag",
                    ErrorKind.INVALID_TAG,
                )
            self._buffer.append(ch)
            if ch in "\"'" and self._buffer[0] != "!":
                self._quote = ch
                self.state = TokenizerState.TAG_QUOTED
            elif len(self._buffer) == len(COMMENT_OPENER) and \
                    "".join(self._buffer) == COMMENT_OPENER:
                self.tree.push_comment()
                self.events_processed += 1
                self._dashes = 0
                self.state = TokenizerState.COMMENT

        elif self.state is TokenizerState.TAG_QUOTED:
            self._buffer.append(ch)
            if ch == self._quote:
                self._quote = None
                self.state = TokenizerState.TAG

        elif self.state is TokenizerState.COMMENT:
            if ch == "-":
                self._dashes += 1
            elif ch == ">" and self._dashes >= COMMENT_DASHES:
                self._dashes -= COMMENT_DASHES
                self._flush_dashes()
                self.tree.close_comment()
                self.events_processed += 1
                self.state = TokenizerState.TEXT
            else:
                self._flush_dashes()
                self.tree.push_char(ch)
                self.events_processed += 1

    def _flush_dashes(self) -> None:
        """Send dashes held back while looking for ``-->`` to the comment."""
        for _ in range(self._dashes):
            self.tree.push_char("-")
            self.events_processed += 1
        self._dashes = 0

    def _dispatch_tag(self, content: str) -> None:
        """Apply a complete ``<...>`` construct to the tree."""
        if content.startswith("/"):
            name = content[1:].strip()
            if not name:
                raise ParseError(
                    "Invalid closing tag: missing tag name",
                    ErrorKind.INVALID_CLOSING_TAG,
                )
            self.tree.close_tag(name)
            self._depth -= 1
        elif content.startswith("!"):
            # <!name attr>: attr is everything after the first whitespace
            body = content[1:]
            separator = _WHITESPACE.search(body)
            if separator is None:
                name, attr = body, None
            else:
                name, attr = body[:separator.start()], body[separator.end():]
            self.tree.push_document(name, attr)
        else:
            tag, inline = parse_tag(content)
            if not inline:
                if self._depth >= self.tree_config.max_depth:
                    raise ParseError(
                        f"Nesting deeper than {self.tree_config.max_depth} "
                        f"open tags at '<{tag.name}>'",
                        ErrorKind.MAX_DEPTH_EXCEEDED,
                    )
                self._depth += 1
            self.tree.push_tag(tag, inline)
        self.events_processed += 1
