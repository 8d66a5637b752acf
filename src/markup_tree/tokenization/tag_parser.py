"""Parser for the inside of an opening tag.

Turns the text between ``<`` and ``>`` (for example ``a href="/" hidden /``)
into a ``Tag`` and a flag telling whether the tag closed itself.
"""

from typing import List, Optional, Tuple

from markup_tree.shared import ErrorKind, ParseError
from markup_tree.tree import Attribute, Tag

_QUOTES = "\"'"
_FORBIDDEN_IN_NAMES = frozenset("\"'<>=/")


def _invalid(message: str) -> ParseError:
    return ParseError(f"Invalid tag: {message}", ErrorKind.INVALID_TAG)


def _read_name(source: str, pos: int, what: str) -> Tuple[str, int]:
    """Read a tag or attribute name starting at ``pos``."""
    start = pos
    while pos < len(source) and not source[pos].isspace() and source[pos] != "=":
        if source[pos] in _FORBIDDEN_IN_NAMES:
            raise _invalid(f"unexpected {source[pos]!r} in {what} name")
        pos += 1
    if pos == start:
        found = repr(source[pos]) if pos < len(source) else "end of tag"
        raise _invalid(f"expected {what} name, found {found}")
    return source[start:pos], pos


def _read_value(source: str, pos: int, attr_name: str) -> Tuple[str, Optional[str], int]:
    """Read an attribute value starting right after ``=``."""
    if pos >= len(source) or source[pos].isspace():
        raise _invalid(f"missing value for attribute '{attr_name}'")

    quote = source[pos]
    if quote in _QUOTES:
        end = source.find(quote, pos + 1)
        if end == -1:
            raise _invalid(f"unterminated value for attribute '{attr_name}'")
        return source[pos + 1:end], quote, end + 1

    start = pos
    while pos < len(source) and not source[pos].isspace():
        if source[pos] in _QUOTES or source[pos] in "<>=":
            raise _invalid(
                f"unexpected {source[pos]!r} in value of attribute '{attr_name}'"
            )
        pos += 1
    return source[start:pos], None, pos


def parse_tag(source: str) -> Tuple[Tag, bool]:
    """Parse the content of an opening tag.

    Args:
        source: Text between ``<`` and ``>``, without either delimiter

    Returns:
        The tag and whether it is self-closing (``/`` right before ``>``)

    Raises:
        ParseError: with kind ``INVALID_TAG`` if the name or an attribute
            cannot be read

    Examples:
        >>> tag, inline = parse_tag('img src="a.png" /')
        >>> str(tag), inline
        ('img src="a.png"', True)
    """
    body = source.rstrip()
    inline = body.endswith("/")
    if inline:
        body = body[:-1]

    if not body or body[0].isspace():
        raise _invalid("tag name must directly follow '<'")

    name, pos = _read_name(body, 0, "tag")
    attributes: List[Attribute] = []

    while pos < len(body):
        if not body[pos].isspace():
            raise _invalid(f"expected whitespace before {body[pos]!r}")
        while pos < len(body) and body[pos].isspace():
            pos += 1
        if pos == len(body):
            break

        attr_name, pos = _read_name(body, pos, "attribute")
        if pos < len(body) and body[pos] == "=":
            value, quote, pos = _read_value(body, pos + 1, attr_name)
            attributes.append(Attribute(attr_name, value, quote))
        else:
            attributes.append(Attribute(attr_name))

    return Tag(name, tuple(attributes)), inline
