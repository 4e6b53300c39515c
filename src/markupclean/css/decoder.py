#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/css/decoder.py
"""CSS canonicalization helpers.

Property names and values are decoded before any allow-list or pattern check
so that escaped and commented spellings (``\\65 xpression``,
``exp/**/ression``) are judged the same as their literal forms.

Examples
--------
    >>> decode_css(r"\\77 idth")
    'width'
    >>> decode_css("expr/* x */ession(1)")
    'expression(1)'

"""

from __future__ import annotations

import re

__all__ = [
    "CSS_UNICODE_ESCAPE_PATTERN",
    "CSS_COMMENT_PATTERN",
    "EXPRESSION_PATTERN",
    "URL_PATTERN",
    "decode_css",
]

MAX_CODE_POINT = 0x10FFFF
REPLACEMENT_CHARACTER = "\ufffd"

CSS_UNICODE_ESCAPE_PATTERN = re.compile(r"\\([0-9a-fA-F]{1,6})\s?|\\([^\r\n\f0-9a-fA-F'\"{};:()#*])")

CSS_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)

# "expression" including full-width and small-capital look-alike letters
EXPRESSION_PATTERN = re.compile(
    "[eE\uff25\uff45][xX\uff38\uff58][pP\uff30\uff50][rR\u0280\uff32\uff52][eE\uff25\uff45]"
    "[sS\uff33\uff53]{2}[iI\u026a\uff29\uff49][oO\uff2f\uff4f][nN\u0274\uff2e\uff4e]"
)

# url( 'target' with optional quotes; groups: opening quote, target, closing quote
URL_PATTERN = re.compile(r"[Uu][Rr\u0280][Ll\u029f]\s*\(\s*(['\"]?)\s*([^'\")\s]+)\s*(['\"]?)\s*")


def _replace_escape(match: re.Match[str]) -> str:
    hex_digits = match.group(1)
    if hex_digits is not None:
        code_point = int(hex_digits, 16)
        if code_point == 0 or code_point > MAX_CODE_POINT or 0xD800 <= code_point <= 0xDFFF:
            return REPLACEMENT_CHARACTER
        return chr(code_point)

    char = match.group(2)
    # Keep an escaped backslash escaped so decoding stays single-step
    return "\\\\" if char == "\\" else char


def decode_css(text: str) -> str:
    """Resolve CSS escapes and strip comments.

    Parameters
    ----------
    text : str
        Raw CSS property name or value

    Returns
    -------
    str
        Canonical text used for policy checks

    """
    decoded = CSS_UNICODE_ESCAPE_PATTERN.sub(_replace_escape, text)
    return CSS_COMMENT_PATTERN.sub("", decoded)
