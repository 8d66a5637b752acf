"""Tag values carried by element nodes.

A ``Tag`` is the name of an element plus its attributes, exactly as they were
written in the opening tag. The tree only ever reads ``Tag.name`` (to match
closing tags) and ``str(tag)`` (to render the opening tag).
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple


class TagType(Enum):
    """Closing status of an element node."""

    OPENED = auto()        # <div> seen, </div> not yet
    CLOSED = auto()        # <div>...</div>
    SELF_CLOSING = auto()  # <div />

    @property
    def is_open(self) -> bool:
        """Check if the element still accepts children."""
        return self is TagType.OPENED


@dataclass(frozen=True)
class Attribute:
    """Single attribute of an opening tag.

    ``quote`` is the quote character the value was written with, or ``None``
    for an unquoted value. ``value`` is ``None`` for a bare attribute such as
    ``disabled``.
    """

    name: str
    value: Optional[str] = None
    quote: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate attribute values."""
        if not self.name:
            raise ValueError("Attribute name cannot be empty")
        if self.quote not in (None, '"', "'"):
            raise ValueError("Attribute quote must be '\"', \"'\" or None")
        if self.value is None and self.quote is not None:
            raise ValueError("Bare attribute cannot be quoted")
        if self.quote is not None and self.quote in self.value:
            raise ValueError("Attribute value cannot contain its own quote")

    def __str__(self) -> str:
        if self.value is None:
            return self.name
        quote = self.quote or ""
        return f"{self.name}={quote}{self.value}{quote}"


@dataclass(frozen=True)
class Tag:
    """Name and attributes of an element, immutable once built."""

    name: str
    attributes: Tuple[Attribute, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate tag values."""
        if not self.name:
            raise ValueError("Tag name cannot be empty")
        if not isinstance(self.attributes, tuple):
            object.__setattr__(self, "attributes", tuple(self.attributes))

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get the value of the first attribute with this name."""
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute.value
        return default

    def has_attribute(self, name: str) -> bool:
        """Check if tag has a specific attribute."""
        return any(attribute.name == name for attribute in self.attributes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert tag to dictionary representation."""
        return {
            "name": self.name,
            "attributes": [
                {"name": attr.name, "value": attr.value, "quote": attr.quote}
                for attr in self.attributes
            ],
        }

    def __str__(self) -> str:
        return self.name + "".join(f" {attribute}" for attribute in self.attributes)
