#!/usr/bin/env python3
"""
Quick Start Guide for the Markup Tree.

This example walks through the three API levels: the never-fail parse
function, a configured parser, and driving the tree event by event.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from markup_tree import Html, MarkupParser, ParserConfig, Tag, parse
from markup_tree.shared import InvalidClosingTagError


def quick_start_example():
    """Quick start example showing basic usage."""

    print("QUICK START - Markup Tree")
    print("=" * 45)

    # Step 1: Parse and render
    print("\nStep 1: Parse and render")
    print("-" * 30)

    markup = '<!DOCTYPE html>\n<p class="intro">Hello <b>world</b></p><!-- end -->'
    result = parse(markup)
    print(f"Success: {result.success}")
    print(f"Round trip exact: {result.render() == markup}")
    print(f"Processing time: {result.processing_time_ms:.2f}ms")

    # Step 2: Malformed input never raises
    print("\nStep 2: Malformed input")
    print("-" * 30)

    result = parse("<ul><li>one</ul>")
    print(f"Success: {result.success}")
    print(f"Error: {result.error}")
    print(f"Partial tree: {result.render()!r}")

    # Step 3: Strict configuration
    print("\nStep 3: Strict configuration")
    print("-" * 30)

    parser = MarkupParser(ParserConfig.strict())
    result = parser.parse("<main>never closed")
    print(f"Error kind: {result.error.kind.name if result.error else None}")

    # Step 4: Driving the tree directly
    print("\nStep 4: Driving the tree")
    print("-" * 30)

    html = Html()
    html.push_tag(Tag("div"), inline=False)
    html.push_tag(Tag("span"), inline=False)
    for ch in "text":
        html.push_char(ch)
    print(f"Open tags: {html.open_tags()}")
    try:
        html.close_tag("div")
    except InvalidClosingTagError as e:
        print(f"Rejected: {e}")
    html.close_tag("span")
    html.close_tag("div")
    print(f"Rendered: {html}")


if __name__ == "__main__":
    quick_start_example()
