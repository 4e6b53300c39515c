#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/css/__init__.py
"""CSS parsing and decoding for the sanitizer.

:mod:`~markupclean.css.cssom` parses inline declarations and stylesheets
into an editable rule tree (on top of tinycss2); :mod:`~markupclean.css.decoder`
canonicalizes escapes and comments before policy checks.
"""

from markupclean.css.cssom import (
    CssDescriptorRule,
    CssGroupingRule,
    CssImportRule,
    CssKeyframeRule,
    CssKeyframesRule,
    CssPageRule,
    CssProperty,
    CssRule,
    CssRuleType,
    CssStatementRule,
    CssStyleDeclaration,
    CssStyleRule,
    CssStyleSheet,
    CssUnknownRule,
)
from markupclean.css.decoder import EXPRESSION_PATTERN, URL_PATTERN, decode_css

__all__ = [
    "CssRuleType",
    "CssProperty",
    "CssStyleDeclaration",
    "CssRule",
    "CssStyleRule",
    "CssPageRule",
    "CssDescriptorRule",
    "CssGroupingRule",
    "CssKeyframeRule",
    "CssKeyframesRule",
    "CssImportRule",
    "CssStatementRule",
    "CssUnknownRule",
    "CssStyleSheet",
    "EXPRESSION_PATTERN",
    "URL_PATTERN",
    "decode_css",
]
