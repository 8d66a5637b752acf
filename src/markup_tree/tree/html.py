"""Incrementally built markup tree.

The tree is grown one event at a time (a character, an opening tag, a closing
tag, a comment boundary, a declaration) and never keeps a stack of open
elements. The insertion point is found by walking the tree itself: starting at
the root, descend into the child of an open element and into the last item of
a sequence, and stop at the first node that is neither. That path is the
*fringe*; everything off the fringe is finished and is never touched again,
except to be moved into a new ``Sequence`` when a sibling arrives beside it.

``Html`` is a mutable slot holding exactly one node value. Node values are the
six dataclasses below; every operation handles each of them explicitly and
falls through to ``safe_unreachable`` for anything else. Walks over the tree
are loops, never recursion, so nesting depth is not bounded by the
interpreter recursion limit.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, List, Optional, Union

from markup_tree.shared.errors import InvalidClosingTagError, safe_unreachable

from .tag import Tag, TagType


@dataclass
class Empty:
    """Empty tree, the initial state of every slot."""


@dataclass
class Text:
    """Raw character data outside of any tag."""

    content: str


@dataclass
class Comment:
    """Comment block; ``full`` is set once the closing ``-->`` was seen."""

    content: str = ""
    full: bool = False


@dataclass
class Document:
    """Document declaration such as ``<!doctype html>``.

    ``name`` is ``doctype`` and ``attr`` is ``html`` in that example.
    """

    name: str = ""
    attr: Optional[str] = None


@dataclass
class Element:
    """Element with its opening tag, closing status and content.

    ``child`` is always empty when ``status`` is ``SELF_CLOSING``.
    """

    tag: Tag
    status: TagType
    child: "Html"


@dataclass
class Sequence:
    """Two or more siblings.

    Never holds fewer than two items and never holds another ``Sequence``.
    """

    items: List["Html"]

    def last(self) -> "Html":
        """Get the only item that may still be on the fringe."""
        if not self.items:
            safe_unreachable("Sequence built with two items is empty.")
        return self.items[-1]


Node = Union[Empty, Text, Comment, Document, Element, Sequence]


class CloseStatus(Enum):
    """Outcome of looking for the innermost open element."""

    SUCCESS = auto()      # Innermost open element matched and was closed
    NO_OPEN_TAG = auto()  # No open element on the fringe
    WRONG_NAME = auto()   # Innermost open element has another name


@dataclass(frozen=True)
class CloseOutcome:
    """Result of ``Html.close_tag_aux``."""

    status: CloseStatus
    open_name: Optional[str] = None


_SUCCESS = CloseOutcome(CloseStatus.SUCCESS)
_NO_OPEN_TAG = CloseOutcome(CloseStatus.NO_OPEN_TAG)


@dataclass
class Html:
    """Slot holding one node of the markup tree.

    Examples:
        >>> html = Html()
        >>> html.push_tag(Tag("p"), inline=False)
        >>> for ch in "hi":
        ...     html.push_char(ch)
        >>> html.close_tag("p")
        >>> str(html)
        '<p>hi</p>'
    """

    node: Node = field(default_factory=Empty)

    @classmethod
    def from_char(cls, ch: str) -> "Html":
        """Create a text tree for one character."""
        return cls(Text(ch))

    def take(self) -> "Html":
        """Move the node out into a new slot, leaving this one empty."""
        taken = Html(self.node)
        self.node = Empty()
        return taken

    def _promote(self, sibling: "Html") -> None:
        """Replace the finished node by a sequence of it and a new sibling."""
        self.node = Sequence([self.take(), sibling])

    def is_empty(self) -> bool:
        """Check if the tree holds no content at all."""
        if isinstance(self.node, Sequence):
            return not self.node.items
        return isinstance(self.node, Empty)

    def is_pushable(self, is_char: bool) -> bool:
        """Check if the next event belongs inside this sequence item.

        Text only takes characters; tags and comments need a new sibling.
        """
        node = self.node
        if isinstance(node, (Empty, Sequence)):
            safe_unreachable("Sequence or Empty can't be in a sequence.")
        if isinstance(node, Element):
            return node.status.is_open
        if isinstance(node, Document):
            return False
        if isinstance(node, Text):
            return is_char
        if isinstance(node, Comment):
            return not node.full
        safe_unreachable(f"Unknown node type {type(node).__name__}.")

    def _descend(self, is_char: bool) -> "Html":
        """Walk the fringe down to the slot that takes the next event.

        Unlike ``attachment_target``, a sequence is only entered when its last
        item can take the event; otherwise the sequence itself is the target
        and the event becomes a new sibling.
        """
        slot = self
        while True:
            node = slot.node
            if isinstance(node, Element) and node.status.is_open:
                slot = node.child
            elif isinstance(node, Sequence) and node.last().is_pushable(is_char):
                slot = node.items[-1]
            else:
                return slot

    def push_char(self, ch: str) -> None:
        """Push one character into the tree."""
        slot = self._descend(is_char=True)
        node = slot.node
        if isinstance(node, Empty):
            slot.node = Text(ch)
        elif isinstance(node, (Element, Document)):
            slot._promote(Html.from_char(ch))
        elif isinstance(node, Text):
            node.content += ch
        elif isinstance(node, Sequence):
            node.items.append(Html.from_char(ch))
        elif isinstance(node, Comment):
            if node.full:
                # Only reachable when the comment is the whole tree
                slot._promote(Html.from_char(ch))
            else:
                node.content += ch
        else:
            safe_unreachable(f"Unknown node type {type(node).__name__}.")

    def push_node(self, other: "Html") -> None:
        """Insert a tag, comment or declaration at the attachment target."""
        slot = self._descend(is_char=False)
        node = slot.node
        if isinstance(node, Empty):
            slot.node = other.node
        elif isinstance(node, (Element, Text, Document)):
            slot._promote(other)
        elif isinstance(node, Sequence):
            node.items.append(other)
        elif isinstance(node, Comment):
            if not node.full:
                safe_unreachable("Pushed a node into an unclosed comment.")
            slot._promote(other)
        else:
            safe_unreachable(f"Unknown node type {type(node).__name__}.")

    def push_tag(self, tag: Tag, inline: bool) -> None:
        """Push an opening tag; ``inline`` marks a self-closing tag."""
        status = TagType.SELF_CLOSING if inline else TagType.OPENED
        self.push_node(Html(Element(tag, status, Html())))

    def push_comment(self) -> None:
        """Open a new comment at the attachment target."""
        self.push_node(Html(Comment()))

    def push_document(self, name: str, attr: Optional[str] = None) -> None:
        """Push a document declaration ``<!name attr>``."""
        self.push_node(Html(Document(name, attr)))

    def close_comment(self) -> bool:
        """Close the innermost open comment.

        Returns:
            True iff an open comment was found and closed. A second close, or
            a close with no comment on the fringe, returns False.
        """
        node = self.attachment_target().node
        if isinstance(node, Comment):
            if node.full:
                return False
            node.full = True
            return True
        if isinstance(node, (Text, Empty, Document, Element, Sequence)):
            return False
        safe_unreachable(f"Unknown node type {type(node).__name__}.")

    def close_tag(self, name: str) -> None:
        """Close the innermost open element, which must be called ``name``.

        Raises:
            InvalidClosingTagError: no element is open, or the innermost open
                element has another name. The tree is left unchanged.
        """
        outcome = self.close_tag_aux(name)
        if outcome.status is CloseStatus.NO_OPEN_TAG:
            raise InvalidClosingTagError(name)
        if outcome.status is CloseStatus.WRONG_NAME:
            raise InvalidClosingTagError(name, outcome.open_name)

    def close_tag_aux(self, name: str) -> CloseOutcome:
        """Close the innermost open element if its name matches.

        Only the last open element on the fringe is a candidate; a mismatch
        leaves the tree unchanged.
        """
        innermost: Optional[Element] = None
        for slot in self.iter_fringe():
            node = slot.node
            if isinstance(node, Element) and node.status.is_open:
                innermost = node
        if innermost is None:
            return _NO_OPEN_TAG
        if innermost.tag.name != name:
            return CloseOutcome(CloseStatus.WRONG_NAME, innermost.tag.name)
        innermost.status = TagType.CLOSED
        return _SUCCESS

    # Inspection

    def iter_fringe(self) -> Iterator["Html"]:
        """Yield the slots from the root down to the attachment target."""
        slot = self
        while True:
            yield slot
            node = slot.node
            if isinstance(node, Element) and node.status.is_open:
                slot = node.child
            elif isinstance(node, Sequence) and node.items:
                slot = node.items[-1]
            else:
                return

    def attachment_target(self) -> "Html":
        """Get the slot where the next event applies."""
        target = self
        for target in self.iter_fringe():
            pass
        return target

    def open_tags(self) -> List[str]:
        """Names of the open elements, outermost first."""
        return [
            slot.node.tag.name
            for slot in self.iter_fringe()
            if isinstance(slot.node, Element) and slot.node.status.is_open
        ]

    @property
    def in_comment(self) -> bool:
        """Check if the fringe ends in an open comment."""
        target = self.attachment_target().node
        return isinstance(target, Comment) and not target.full

    def iter_nodes(self) -> Iterator[Node]:
        """Iterate over all node values in document order."""
        stack = [self]
        while stack:
            node = stack.pop().node
            yield node
            if isinstance(node, Element):
                stack.append(node.child)
            elif isinstance(node, Sequence):
                stack.extend(reversed(node.items))

    def check_invariants(self) -> None:
        """Verify the structural invariants of the whole tree.

        Raises:
            UnreachableStateError: a sequence has fewer than two items or is
                nested in a sequence, a self-closing element has content, or
                something is still open off the fringe.
        """
        # (slot, inside_sequence, on_fringe)
        stack = [(self, False, True)]
        while stack:
            slot, inside_sequence, on_fringe = stack.pop()
            node = slot.node
            if isinstance(node, Sequence):
                if inside_sequence:
                    safe_unreachable("Sequence nested directly in a sequence.")
                if len(node.items) < 2:
                    safe_unreachable(f"Sequence with {len(node.items)} item(s).")
                last = len(node.items) - 1
                for index, item in enumerate(node.items):
                    stack.append((item, True, on_fringe and index == last))
            elif isinstance(node, Empty):
                if inside_sequence:
                    safe_unreachable("Empty tree inside a sequence.")
            elif isinstance(node, Element):
                if node.status is TagType.SELF_CLOSING and not node.child.is_empty():
                    safe_unreachable(f"Self-closing tag '{node.tag.name}' has content.")
                if node.status.is_open and not on_fringe:
                    safe_unreachable(f"Open tag '{node.tag.name}' is off the fringe.")
                stack.append((node.child, False, node.status.is_open))
            elif isinstance(node, Comment):
                if not node.full and not on_fringe:
                    safe_unreachable("Open comment is off the fringe.")
            elif not isinstance(node, (Text, Document)):
                safe_unreachable(f"Unknown node type {type(node).__name__}.")

    def to_dict(self) -> Dict[str, Any]:
        """Convert tree to a JSON-compatible dictionary."""
        root: Dict[str, Any] = {}
        stack = [(self, root)]
        while stack:
            slot, out = stack.pop()
            node = slot.node
            if isinstance(node, Empty):
                out["type"] = "empty"
            elif isinstance(node, Text):
                out.update(type="text", content=node.content)
            elif isinstance(node, Comment):
                out.update(type="comment", content=node.content, full=node.full)
            elif isinstance(node, Document):
                out.update(type="document", name=node.name, attr=node.attr)
            elif isinstance(node, Element):
                child: Dict[str, Any] = {}
                out.update(
                    type="element",
                    tag=node.tag.to_dict(),
                    status=node.status.name,
                    child=child,
                )
                stack.append((node.child, child))
            elif isinstance(node, Sequence):
                items: List[Dict[str, Any]] = [{} for _ in node.items]
                out.update(type="sequence", items=items)
                stack.extend(zip(node.items, items))
            else:
                safe_unreachable(f"Unknown node type {type(node).__name__}.")
        return root

    # Serialization

    def render(self) -> str:
        """Render the tree back to markup text."""
        parts: List[str] = []
        # Pending slots and literal closing tags, last one first
        stack: List[Union["Html", str]] = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
                continue
            node = item.node
            if isinstance(node, Empty):
                continue
            if isinstance(node, Text):
                parts.append(node.content)
            elif isinstance(node, Element):
                if node.status is TagType.SELF_CLOSING:
                    if not node.child.is_empty():
                        safe_unreachable(
                            f"Self-closing tag '{node.tag.name}' has content."
                        )
                    parts.append(f"<{node.tag} />")
                    continue
                parts.append(f"<{node.tag}>")
                if node.status is TagType.CLOSED:
                    stack.append(f"</{node.tag.name}>")
                stack.append(node.child)
            elif isinstance(node, Document):
                if node.attr is not None:
                    parts.append(f"<!{node.name} {node.attr}>")
                elif not node.name:
                    parts.append("<!>")
                else:
                    parts.append(f"<!{node.name} >")
            elif isinstance(node, Comment):
                parts.append("<!--")
                parts.append(node.content)
                if node.full:
                    parts.append("-->")
            elif isinstance(node, Sequence):
                stack.extend(reversed(node.items))
            else:
                safe_unreachable(f"Unknown node type {type(node).__name__}.")
        return "".join(parts)

    def __str__(self) -> str:
        return self.render()
