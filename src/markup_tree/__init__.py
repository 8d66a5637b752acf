"""Markup Tree.

Builds a tree from markup text one event at a time, without an explicit stack
of open elements, and renders it back to the exact text it was built from.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_html()
- Level 2: Configured parser - MarkupParser class
- Level 3: Direct tree driving - Html with push_char(), push_tag(),
  close_tag(), push_comment(), close_comment()
"""

__version__ = "0.1.0"
__author__ = "Markup Tree Team"

# Progressive API disclosure - Level 1 and Level 2
from .api import MarkupParser, parse, parse_html

# Configuration and errors for advanced usage
from .shared import (
    InvalidClosingTagError,
    ParseError,
    ParserConfig,
    UnreachableStateError,
)

# Tokenizer for driving the tree from raw text in chunks
from .tokenization import MarkupTokenizer

# Level 3: the tree itself
from .tree import Attribute, Html, ParseResult, Tag, TagType

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_html",

    # Level 2: Advanced parser class
    "MarkupParser",
    "MarkupTokenizer",

    # Level 3: Tree and tag values
    "Attribute",
    "Html",
    "ParseResult",
    "Tag",
    "TagType",

    # Configuration and errors
    "ParserConfig",
    "ParseError",
    "InvalidClosingTagError",
    "UnreachableStateError",
]
