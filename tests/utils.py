"""Test utilities for the markupclean test suite."""

from bs4 import BeautifulSoup

from markupclean.options import CaseInsensitiveSet


def parse(markup: str) -> BeautifulSoup:
    """Parse sanitizer output for structural assertions."""
    return BeautifulSoup(markup, "html.parser")


def allowing(names, *extra) -> CaseInsensitiveSet:
    """Return a copy of ``names`` with ``extra`` added."""
    result = CaseInsensitiveSet(names)
    for name in extra:
        result.add(name)
    return result
