#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/dom.py
"""BeautifulSoup helpers used by the sanitizer.

Parsing, snapshot traversal, node removal and serialization live here so
that :mod:`markupclean.sanitizer` only deals with policy.
"""

from __future__ import annotations

import logging
import warnings
from typing import IO, Union

from bs4 import BeautifulSoup, CData, Comment, FeatureNotFound, MarkupResemblesLocatorWarning, NavigableString, Tag
from bs4.element import Declaration, PageElement, PreformattedString, ProcessingInstruction

from markupclean.constants import PARSER_PACKAGES
from markupclean.exceptions import DependencyError

logger = logging.getLogger(__name__)

Markup = Union[str, bytes, IO[str], IO[bytes]]

COMMENT_LIKE_TYPES = (Comment, CData, ProcessingInstruction, Declaration)

# Tree builders that wrap every parse in <html><body>
WRAPPING_BUILDERS = ("lxml", "html5lib")


def parse_markup(markup: Markup, parser: str) -> BeautifulSoup:
    """Parse markup into a mutable tree.

    Parameters
    ----------
    markup : str, bytes or file-like
        Markup to parse
    parser : str
        BeautifulSoup tree builder name

    Returns
    -------
    BeautifulSoup
        Parsed tree. ``class`` values are kept as plain strings.

    Raises
    ------
    DependencyError
        If the tree builder's package is not installed

    """
    try:
        with warnings.catch_warnings():
            # Short fragments such as "test.png" look like file names to bs4
            warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
            return BeautifulSoup(markup, parser, multi_valued_attributes=None)
    except FeatureNotFound as e:
        package = PARSER_PACKAGES.get(parser)
        raise DependencyError(parser, [package] if package else [], original_error=e) from e


def fragment_root(soup: BeautifulSoup) -> Tag:
    """Return the element holding a parsed fragment.

    Builders that always synthesize ``<html><body>`` put the fragment in
    ``<body>``. For the others the whole tree is the fragment, even when the
    markup contains a ``<body>`` of its own.
    """
    if getattr(soup.builder, "NAME", None) in WRAPPING_BUILDERS:
        body = soup.body
        if body is not None:
            return body
    return soup


def elements(root: Tag) -> list[Tag]:
    """Snapshot every descendant element of ``root`` in document order."""
    return [node for node in root.descendants if isinstance(node, Tag)]


def comments(root: Tag) -> list[PreformattedString]:
    """Snapshot comment-like nodes: comments, CDATA sections, processing instructions, declarations.

    An HTML parser outside foreign content reads all of these as bogus
    comments that end at the first ``>``, so their text is never safe to
    echo back. Doctypes are kept.
    """
    return [node for node in root.descendants if isinstance(node, COMMENT_LIKE_TYPES)]


def remove_element(tag: Tag, keep_child_nodes: bool) -> None:
    """Detach ``tag``, splicing its children into its place if requested."""
    if tag.parent is None:
        # Detached by a hook
        return
    if keep_child_nodes and tag.contents:
        tag.unwrap()
    else:
        tag.extract()


def text_content(tag: Tag) -> str:
    """Concatenate the text of ``tag`` the way DOM ``textContent`` does (no comments)."""
    return "".join(
        str(node)
        for node in tag.descendants
        if isinstance(node, NavigableString) and (not isinstance(node, PreformattedString) or isinstance(node, CData))
    )


def set_text_content(soup: BeautifulSoup, tag: Tag, text: str) -> None:
    """Replace the children of ``tag`` with a single string of the right container type."""
    string_containers = getattr(soup.builder, "string_containers", {}) if soup.builder is not None else {}
    container = string_containers.get(tag.name, NavigableString)
    tag.string = container(text)


def replace_node(node: PageElement, replacements: list[PageElement]) -> None:
    if node.parent is None:
        return
    node.replace_with(*replacements)


def serialize_children(root: Tag, formatter: str) -> str:
    return root.decode_contents(formatter=formatter)


def serialize_document(soup: BeautifulSoup, formatter: str) -> str:
    return soup.decode(formatter=formatter)


__all__ = [
    "Markup",
    "parse_markup",
    "fragment_root",
    "elements",
    "comments",
    "remove_element",
    "text_content",
    "set_text_content",
    "replace_node",
    "serialize_children",
    "serialize_document",
]
