"""Incremental markup tree.

Key Components:
    Html: Mutable slot holding one node; the five tree operations live here
    Tag: Element name and attributes
    TagType: Opened / closed / self-closing status of an element
    ParseResult: Tree plus diagnostics and metrics of one parse
"""

from .html import (
    CloseOutcome,
    CloseStatus,
    Comment,
    Document,
    Element,
    Empty,
    Html,
    Node,
    Sequence,
    Text,
)
from .result import ParseResult
from .tag import Attribute, Tag, TagType

__all__ = [
    "Attribute",
    "CloseOutcome",
    "CloseStatus",
    "Comment",
    "Document",
    "Element",
    "Empty",
    "Html",
    "Node",
    "ParseResult",
    "Sequence",
    "Tag",
    "TagType",
    "Text",
]
