"""Character-level driver for the incremental markup tree.

This module turns raw markup text into calls on an ``Html`` tree:

- MarkupTokenizer: state machine feeding one character at a time
- parse_tag: parser for the inside of an opening tag
"""

from .tag_parser import parse_tag
from .tokenizer import MarkupTokenizer, TokenizerState

__all__ = [
    "MarkupTokenizer",
    "TokenizerState",
    "parse_tag",
]
