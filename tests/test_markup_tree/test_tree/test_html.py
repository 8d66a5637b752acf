"""Tests for the incremental markup tree.

Covers attachment target resolution, the five tree operations, sequence
promotion, closing tag resolution and rendering.
"""

import pytest

from markup_tree.shared import InvalidClosingTagError, UnreachableStateError
from markup_tree.tree import (
    Attribute,
    CloseStatus,
    Comment,
    Document,
    Element,
    Empty,
    Html,
    Sequence,
    Tag,
    TagType,
    Text,
)


def push_text(html: Html, text: str) -> None:
    for ch in text:
        html.push_char(ch)


def walk_sequences(html: Html, inside_sequence: bool = False):
    """Yield (sequence, inside_sequence) pairs for every sequence in the tree."""
    node = html.node
    if isinstance(node, Sequence):
        yield node, inside_sequence
        for item in node.items:
            yield from walk_sequences(item, inside_sequence=True)
    elif isinstance(node, Element):
        yield from walk_sequences(node.child)


class TestEmptyTree:
    """Test the initial state of a tree."""

    def test_new_tree_is_empty(self) -> None:
        """Test that a new tree holds the Empty node."""
        html = Html()

        assert isinstance(html.node, Empty)
        assert html.is_empty()
        assert html.render() == ""
        assert str(html) == ""

    def test_take_leaves_empty_placeholder(self) -> None:
        """Test that moving a node out leaves Empty in the slot."""
        html = Html(Text("abc"))

        taken = html.take()

        assert html.is_empty()
        assert isinstance(taken.node, Text)
        assert taken.node.content == "abc"

    def test_tree_with_content_is_not_empty(self) -> None:
        """Test is_empty on a tree with text."""
        html = Html()
        html.push_char("x")

        assert not html.is_empty()


class TestPushChar:
    """Test character insertion."""

    @pytest.mark.parametrize("text", ["a", "hello world", "  spaced\n\tout  ", "ünïcødé ✓"])
    def test_plain_text_renders_unchanged(self, text: str) -> None:
        """Test that plain text fed one character at a time renders as-is."""
        html = Html()
        push_text(html, text)

        assert html.render() == text
        assert isinstance(html.node, Text)

    def test_char_goes_into_open_element(self) -> None:
        """Test that characters descend into the open element."""
        html = Html()
        html.push_tag(Tag("p"), inline=False)
        push_text(html, "hi")

        assert isinstance(html.node, Element)
        assert html.node.child.node == Text("hi")
        assert html.render() == "<p>hi"

    def test_char_after_closed_element_starts_sibling(self) -> None:
        """Test sequence promotion after a closed element."""
        html = Html()
        html.push_tag(Tag("p"), inline=False)
        html.close_tag("p")
        html.push_char("x")

        assert isinstance(html.node, Sequence)
        assert len(html.node.items) == 2
        assert html.node.items[1].node == Text("x")
        assert html.render() == "<p></p>x"

    def test_char_after_self_closing_tag_starts_sibling(self) -> None:
        """Test that a self-closing tag never receives content."""
        html = Html()
        html.push_tag(Tag("br"), inline=True)
        html.push_char("x")

        assert isinstance(html.node, Sequence)
        element = html.node.items[0].node
        assert isinstance(element, Element)
        assert element.status is TagType.SELF_CLOSING
        assert element.child.is_empty()
        assert html.render() == "<br />x"

    def test_char_after_document_starts_sibling(self) -> None:
        """Test sequence promotion after a declaration."""
        html = Html()
        html.push_document("doctype", "html")
        html.push_char("\n")

        assert isinstance(html.node, Sequence)
        assert html.render() == "<!doctype html>\n"

    def test_char_goes_into_open_comment(self) -> None:
        """Test that characters accumulate in an open comment."""
        html = Html()
        html.push_comment()
        push_text(html, "note")

        assert html.node == Comment("note", full=False)

    def test_char_after_full_comment_starts_sibling(self) -> None:
        """Test sequence promotion after a terminated comment."""
        html = Html()
        html.push_comment()
        push_text(html, "x")
        html.close_comment()
        html.push_char("y")

        assert isinstance(html.node, Sequence)
        assert html.render() == "<!--x-->y"

    def test_char_extends_text_at_end_of_sequence(self) -> None:
        """Test that trailing text in a sequence absorbs more characters."""
        html = Html()
        html.push_tag(Tag("i"), inline=True)
        push_text(html, "abc")

        assert isinstance(html.node, Sequence)
        assert len(html.node.items) == 2
        assert html.node.items[1].node == Text("abc")


class TestPushTag:
    """Test element insertion."""

    def test_tag_replaces_empty_tree(self) -> None:
        """Test that the first tag becomes the root node."""
        html = Html()
        html.push_tag(Tag("div"), inline=False)

        assert isinstance(html.node, Element)
        assert html.node.status is TagType.OPENED
        assert html.node.child.is_empty()

    def test_inline_tag_is_self_closing(self) -> None:
        """Test that inline tags get SELF_CLOSING status."""
        html = Html()
        html.push_tag(Tag("img", (Attribute("src", "a.png", '"'),)), inline=True)

        assert html.node.status is TagType.SELF_CLOSING
        assert html.render() == '<img src="a.png" />'

    def test_tag_after_text_is_promoted(self) -> None:
        """Test that a tag after text creates a two-item sequence."""
        html = Html()
        push_text(html, "ab")
        html.push_tag(Tag("b"), inline=False)

        assert isinstance(html.node, Sequence)
        assert [type(item.node) for item in html.node.items] == [Text, Element]

    def test_tag_after_text_in_sequence_is_appended(self) -> None:
        """Test that text at the end of a sequence does not take tags."""
        html = Html()
        html.push_tag(Tag("br"), inline=True)
        push_text(html, "x")
        html.push_tag(Tag("hr"), inline=True)

        assert isinstance(html.node, Sequence)
        assert len(html.node.items) == 3
        assert html.render() == "<br />x<hr />"

    def test_nested_tags_descend_into_open_elements(self) -> None:
        """Test that nested tags attach at the innermost open element."""
        html = Html()
        html.push_tag(Tag("ul"), inline=False)
        html.push_tag(Tag("li"), inline=False)
        push_text(html, "one")

        assert html.open_tags() == ["ul", "li"]
        assert html.render() == "<ul><li>one"


class TestComments:
    """Test opening and closing comments."""

    def test_comment_closed_once_renders_terminated(self) -> None:
        """Test a complete comment."""
        html = Html()
        html.push_comment()
        push_text(html, "hello")

        assert html.close_comment() is True
        assert html.render() == "<!--hello-->"

    def test_second_close_fails_without_changing_render(self) -> None:
        """Test that a double close is a False result."""
        html = Html()
        html.push_comment()
        push_text(html, "hello")
        html.close_comment()

        assert html.close_comment() is False
        assert html.render() == "<!--hello-->"

    def test_unclosed_comment_renders_without_terminator(self) -> None:
        """Test rendering of an open comment."""
        html = Html()
        html.push_comment()
        push_text(html, " draft")

        assert html.render() == "<!-- draft"
        assert html.in_comment

    @pytest.mark.parametrize("setup", ["empty", "text", "document", "closed_tag"])
    def test_close_without_comment_fails(self, setup: str) -> None:
        """Test close_comment when no comment is on the fringe."""
        html = Html()
        if setup == "text":
            push_text(html, "abc")
        elif setup == "document":
            html.push_document("doctype", "html")
        elif setup == "closed_tag":
            html.push_tag(Tag("p"), inline=False)
            html.close_tag("p")

        assert html.close_comment() is False

    def test_comment_inside_element(self) -> None:
        """Test a comment on the fringe below an open element."""
        html = Html()
        html.push_tag(Tag("div"), inline=False)
        push_text(html, "a")
        html.push_comment()
        push_text(html, "c")

        assert html.in_comment
        assert html.close_comment() is True
        assert not html.in_comment
        html.close_tag("div")
        assert html.render() == "<div>a<!--c--></div>"

    def test_comment_open_inside_open_comment_is_contract_fault(self) -> None:
        """Test that opening a comment inside a comment is unreachable."""
        html = Html()
        html.push_comment()

        with pytest.raises(UnreachableStateError):
            html.push_comment()

    def test_tag_inside_open_comment_is_contract_fault(self) -> None:
        """Test that pushing a tag into a comment is unreachable."""
        html = Html()
        html.push_tag(Tag("p"), inline=False)
        html.push_comment()

        with pytest.raises(UnreachableStateError):
            html.push_tag(Tag("b"), inline=False)

    def test_contract_fault_is_not_a_parse_error(self) -> None:
        """Test that contract faults stay outside the parse error family."""
        html = Html()
        html.push_comment()

        with pytest.raises(UnreachableStateError) as exc_info:
            html.push_document("doctype")
        assert not isinstance(exc_info.value, InvalidClosingTagError)


class TestCloseTag:
    """Test closing tag resolution."""

    def test_close_on_empty_tree_reports_no_open_tag(self) -> None:
        """Test closing with nothing open."""
        html = Html()

        assert html.close_tag_aux("p").status is CloseStatus.NO_OPEN_TAG
        with pytest.raises(InvalidClosingTagError) as exc_info:
            html.close_tag("p")
        assert exc_info.value.name == "p"
        assert exc_info.value.open_name is None
        assert "isn't open" in str(exc_info.value)

    def test_close_outer_tag_reports_innermost_name(self) -> None:
        """Test that only the innermost open element is a candidate."""
        html = Html()
        html.push_tag(Tag("A"), inline=False)
        html.push_tag(Tag("B"), inline=False)

        outcome = html.close_tag_aux("A")

        assert outcome.status is CloseStatus.WRONG_NAME
        assert outcome.open_name == "B"
        assert html.open_tags() == ["A", "B"]

    def test_mismatch_does_not_mutate_tree(self) -> None:
        """Test that a rejected closing tag leaves the tree untouched."""
        html = Html()
        html.push_tag(Tag("A"), inline=False)
        html.push_tag(Tag("B"), inline=False)
        push_text(html, "x")
        before = html.to_dict()

        with pytest.raises(InvalidClosingTagError) as exc_info:
            html.close_tag("A")

        assert exc_info.value.open_name == "B"
        assert html.to_dict() == before
        assert html.render() == "<A><B>x"

    def test_proper_nesting_closes_both(self) -> None:
        """Test closing tags in nesting order."""
        html = Html()
        html.push_tag(Tag("div"), inline=False)
        html.push_tag(Tag("span"), inline=False)
        html.close_tag("span")
        html.close_tag("div")

        assert html.render() == "<div><span></span></div>"
        assert html.open_tags() == []

    def test_names_are_case_sensitive(self) -> None:
        """Test that closing tag names must match exactly."""
        html = Html()
        html.push_tag(Tag("Div"), inline=False)

        outcome = html.close_tag_aux("div")

        assert outcome.status is CloseStatus.WRONG_NAME
        assert outcome.open_name == "Div"

    def test_close_after_everything_closed_reports_no_open_tag(self) -> None:
        """Test that closed siblings are never candidates."""
        html = Html()
        html.push_tag(Tag("p"), inline=False)
        html.close_tag("p")
        push_text(html, "tail")

        assert html.close_tag_aux("p").status is CloseStatus.NO_OPEN_TAG

    def test_self_closing_tag_is_not_closable(self) -> None:
        """Test that a self-closing tag is never an open candidate."""
        html = Html()
        html.push_tag(Tag("br"), inline=True)

        assert html.close_tag_aux("br").status is CloseStatus.NO_OPEN_TAG

    def test_close_reaches_element_through_sequence(self) -> None:
        """Test closing an element that is the last item of a sequence."""
        html = Html()
        push_text(html, "a")
        html.push_tag(Tag("b"), inline=False)
        push_text(html, "c")
        html.close_tag("b")

        assert html.render() == "a<b>c</b>"

    def test_empty_sequence_reports_no_open_tag(self) -> None:
        """Test the degenerate empty sequence."""
        html = Html(Sequence([]))

        assert html.close_tag_aux("p").status is CloseStatus.NO_OPEN_TAG


class TestSequenceShape:
    """Test the structural invariants of sequences."""

    def test_interleaved_text_and_tags_keep_flat_sequences(self) -> None:
        """Test that sequences never nest and never shrink below two items."""
        html = Html()
        push_text(html, "a")
        html.push_tag(Tag("b"), inline=False)
        push_text(html, "c")
        html.close_tag("b")
        push_text(html, "d")
        html.push_tag(Tag("i"), inline=True)
        push_text(html, "e")

        sequences = list(walk_sequences(html))
        assert sequences
        for sequence, inside_sequence in sequences:
            assert len(sequence.items) >= 2
            assert not inside_sequence
        assert len(html.node.items) == 5
        assert html.render() == "a<b>c</b>d<i />e"
        html.check_invariants()

    def test_sequence_inside_element_is_allowed(self) -> None:
        """Test that an element's content may itself be a sequence."""
        html = Html()
        html.push_tag(Tag("p"), inline=False)
        push_text(html, "a")
        html.push_tag(Tag("br"), inline=True)
        push_text(html, "b")
        html.close_tag("p")

        assert isinstance(html.node.child.node, Sequence)
        html.check_invariants()

    def test_check_invariants_rejects_short_sequence(self) -> None:
        """Test detection of a one-item sequence."""
        html = Html(Sequence([Html(Text("a"))]))

        with pytest.raises(UnreachableStateError):
            html.check_invariants()

    def test_check_invariants_rejects_nested_sequence(self) -> None:
        """Test detection of a sequence directly inside a sequence."""
        inner = Html(Sequence([Html(Text("a")), Html(Document("x"))]))
        html = Html(Sequence([Html(Text("b")), inner]))

        with pytest.raises(UnreachableStateError):
            html.check_invariants()

    def test_check_invariants_rejects_open_tag_off_fringe(self) -> None:
        """Test detection of a second open branch."""
        open_element = Html(Element(Tag("a"), TagType.OPENED, Html()))
        html = Html(Sequence([open_element, Html(Text("x"))]))

        with pytest.raises(UnreachableStateError):
            html.check_invariants()

    def test_is_pushable_rejects_empty_item(self) -> None:
        """Test that an Empty sequence item is a contract fault."""
        html = Html(Sequence([Html(Text("a")), Html()]))

        with pytest.raises(UnreachableStateError):
            html.push_char("b")


class TestRender:
    """Test serialization of every node shape."""

    @pytest.mark.parametrize(
        "document, expected",
        [
            (Document(), "<!>"),
            (Document("doctype"), "<!doctype >"),
            (Document("DOCTYPE", "html"), "<!DOCTYPE html>"),
            (Document("", "x"), "<! x>"),
        ],
    )
    def test_document_rendering(self, document: Document, expected: str) -> None:
        """Test the three forms of a declaration."""
        assert Html(document).render() == expected

    def test_opened_element_renders_without_closing_tag(self) -> None:
        """Test that a never-closed element is rendered as written."""
        html = Html(Element(Tag("p"), TagType.OPENED, Html(Text("x"))))

        assert html.render() == "<p>x"

    def test_closed_element_renders_attributes_and_closing_tag(self) -> None:
        """Test a closed element with attributes."""
        tag = Tag("a", (Attribute("href", "/", '"'), Attribute("hidden")))
        html = Html(Element(tag, TagType.CLOSED, Html(Text("home"))))

        assert html.render() == '<a href="/" hidden>home</a>'

    def test_self_closing_element_with_content_is_contract_fault(self) -> None:
        """Test that rendering a self-closing tag with content fails loudly."""
        html = Html(Element(Tag("br"), TagType.SELF_CLOSING, Html(Text("x"))))

        with pytest.raises(UnreachableStateError):
            html.render()


class TestInspection:
    """Test inspection helpers."""

    def test_iter_nodes_is_preorder(self) -> None:
        """Test traversal order of iter_nodes."""
        html = Html()
        push_text(html, "a")
        html.push_tag(Tag("b"), inline=False)
        push_text(html, "c")

        kinds = [type(node).__name__ for node in html.iter_nodes()]

        assert kinds == ["Sequence", "Text", "Element", "Text"]

    def test_attachment_target_is_end_of_fringe(self) -> None:
        """Test attachment target resolution."""
        html = Html()
        html.push_tag(Tag("div"), inline=False)
        push_text(html, "a")
        html.push_tag(Tag("br"), inline=True)

        target = html.attachment_target()

        assert isinstance(target.node, Element)
        assert target.node.tag.name == "br"

    def test_to_dict(self) -> None:
        """Test dictionary conversion."""
        html = Html()
        html.push_tag(Tag("p", (Attribute("id", "x", "'"),)), inline=False)
        html.push_comment()

        assert html.to_dict() == {
            "type": "element",
            "tag": {"name": "p", "attributes": [{"name": "id", "value": "x", "quote": "'"}]},
            "status": "OPENED",
            "child": {"type": "comment", "content": "", "full": False},
        }


class TestDeepTrees:
    """Test trees nested deeper than the interpreter recursion limit."""

    def test_deep_tree_operations(self) -> None:
        """Test every operation on a tree with text before each element."""
        depth = 1500
        html = Html()
        for _ in range(depth):
            html.push_char("x")
            html.push_tag(Tag("a"), inline=False)
        html.push_comment()
        push_text(html, "c")

        assert html.in_comment
        assert html.close_comment() is True
        assert html.close_tag_aux("b").open_name == "a"
        for _ in range(depth):
            html.close_tag("a")

        expected = "x<a>" * depth + "<!--c-->" + "</a>" * depth
        assert html.render() == expected
        assert html.open_tags() == []
        html.check_invariants()
        assert html.to_dict()["type"] == "sequence"
        assert sum(isinstance(node, Element) for node in html.iter_nodes()) == depth
