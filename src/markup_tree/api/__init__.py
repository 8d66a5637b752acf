"""Parse API for the incremental markup tree.

- Level 1: ``parse`` and ``parse_html``
- Level 2: ``MarkupParser`` bound to a ``ParserConfig``
"""

from .parser import MarkupParser, parse, parse_html

__all__ = [
    "MarkupParser",
    "parse",
    "parse_html",
]
