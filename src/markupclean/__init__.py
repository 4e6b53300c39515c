"""markupclean - allow-list sanitizer for untrusted HTML and SVG.

markupclean removes everything from untrusted markup that is not explicitly
allowed: elements, attributes, URL schemes, CSS properties and values,
stylesheet rule kinds and class tokens. Markup is parsed with BeautifulSoup
and CSS with tinycss2. Every removal can be observed or vetoed through hooks.

Key Features
------------
- Element, attribute, class and URL-scheme allow-lists
- CSS sanitizing for ``style`` attributes and ``<style>`` sheets, with escape
  and comment decoding before every check
- Relative URL resolution against a base URL
- Cancelable removal hooks, URL filters and post-processing hooks
- Configuration files (TOML, YAML, JSON, ``[tool.markupclean]``)

Requirements
------------
- Python 3.10+
- beautifulsoup4, tinycss2 (lxml or html5lib optional)

Examples
--------
Sanitize a fragment with the default SVG-oriented policy:

    >>> from markupclean import sanitize
    >>> sanitize('<svg><script>alert(1)</script><circle cx="1"></circle></svg>')
    '<svg><circle cx="1"></circle></svg>'

Allow a few HTML elements and resolve relative links:

    >>> from markupclean import Sanitizer, SanitizerOptions
    >>> options = SanitizerOptions(allowed_tags={"a", "p"}, allowed_attributes={"href"})
    >>> Sanitizer(options).sanitize('<p><a href="x.html">x</a></p>', base_url="https://example.com/")
    '<p><a href="https://example.com/x.html">x</a></p>'

"""

__version__ = "1.0.0"

from markupclean.exceptions import DependencyError, MarkupCleanError, ValidationError
from markupclean.hooks import (
    FilterUrlEvent,
    HookContext,
    HookManager,
    PostProcessDomEvent,
    PostProcessNodeEvent,
    RemoveReason,
    RemovingAtRuleEvent,
    RemovingAttributeEvent,
    RemovingCommentEvent,
    RemovingCssClassEvent,
    RemovingStyleEvent,
    RemovingTagEvent,
)
from markupclean.options import CaseInsensitiveSet, SanitizerOptions
from markupclean.sanitizer import Sanitizer, sanitize
from markupclean.url import UrlSanitizer, get_scheme

__all__ = [
    "__version__",
    "sanitize",
    "Sanitizer",
    "SanitizerOptions",
    "CaseInsensitiveSet",
    "UrlSanitizer",
    "get_scheme",
    "HookManager",
    "HookContext",
    "RemoveReason",
    "RemovingTagEvent",
    "RemovingAttributeEvent",
    "RemovingStyleEvent",
    "RemovingAtRuleEvent",
    "RemovingCommentEvent",
    "RemovingCssClassEvent",
    "FilterUrlEvent",
    "PostProcessNodeEvent",
    "PostProcessDomEvent",
    "MarkupCleanError",
    "ValidationError",
    "DependencyError",
]
