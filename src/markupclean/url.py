#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/url.py
"""URL scheme validation and relative URL resolution.

A URL is accepted when it has no scheme (a relative reference) or when its
scheme is in the allowed set. The scheme delimiter may be a literal colon or
its decimal/hexadecimal HTML entity (``&#58;``, ``&#x3a;``), because the
value may be interpreted again after the sanitizer has run.

Examples
--------
    >>> sanitizer = UrlSanitizer({"http", "https"})
    >>> sanitizer.sanitize("javascript:alert(1)") is None
    True
    >>> sanitizer.sanitize("test.png", base_url="http://example.com/a/")
    'http://example.com/a/test.png'

"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Container, Optional
from urllib.parse import urljoin, urlparse

logger = logging.getLogger(__name__)

__all__ = [
    "SCHEME_PATTERN",
    "SafeUrl",
    "UrlSanitizer",
    "get_scheme",
    "resolve_url",
]

# Scheme is the shortest run before ":" (or its entity); "/" or "#" first means relative
SCHEME_PATTERN = re.compile(r"^\s*([^/#]*?)(?::|&#0*58|&#x0*3a)", re.IGNORECASE)


@dataclass(frozen=True)
class SafeUrl:
    """URL that passed the scheme check."""

    value: str
    scheme: Optional[str]

    @property
    def is_absolute(self) -> bool:
        return self.scheme is not None


def get_scheme(url: str) -> Optional[str]:
    """Extract the scheme of a URL-like string.

    Parameters
    ----------
    url : str
        Candidate URL, possibly with entity-encoded delimiters

    Returns
    -------
    str or None
        The scheme as written (may be empty), or None for relative references

    Examples
    --------
    >>> get_scheme("javascript&#x3A;alert(1)")
    'javascript'
    >>> get_scheme("/path:with/colon") is None
    True

    """
    match = SCHEME_PATTERN.match(url)
    return match.group(1) if match else None


class UrlSanitizer:
    """Validate and resolve URLs against an allowed-scheme set.

    Parameters
    ----------
    allowed_schemes : Container[str]
        Allowed schemes. Membership checks must be case-insensitive, as with
        :class:`~markupclean.options.CaseInsensitiveSet`.

    """

    def __init__(self, allowed_schemes: Container[str]) -> None:
        self.allowed_schemes = allowed_schemes

    def get_safe_url(self, url: str) -> Optional[SafeUrl]:
        """Return the URL with its scheme, or None if the scheme is not allowed."""
        scheme = get_scheme(url)
        if scheme is not None and scheme not in self.allowed_schemes:
            logger.debug(f"Rejected URL scheme {scheme!r}")
            return None
        return SafeUrl(url, scheme)

    def sanitize(self, url: str, base_url: str = "") -> Optional[str]:
        """Check the scheme and resolve relative references.

        Parameters
        ----------
        url : str
            Candidate URL
        base_url : str, default ""
            Base URL for relative references. Empty disables resolution.

        Returns
        -------
        str or None
            Safe URL, or None when the URL must be removed

        """
        safe_url = self.get_safe_url(url)
        if safe_url is None:
            return None

        if safe_url.is_absolute or not base_url:
            return safe_url.value

        return resolve_url(safe_url.value, base_url)


def resolve_url(url: str, base_url: str) -> Optional[str]:
    """Resolve ``url`` against ``base_url``.

    Returns
    -------
    str or None
        Absolute URL, or None if the base URL is not absolute or either
        value cannot be parsed

    """
    try:
        base = urlparse(base_url)
        if not base.scheme or not base.netloc:
            logger.debug(f"Base URL {base_url!r} is not absolute")
            return None
        resolved = urljoin(base_url, url.strip())
        # urljoin is lenient; reparse to surface malformed hosts such as "[::1"
        urlparse(resolved)
    except ValueError as e:
        logger.debug(f"Could not resolve {url!r} against {base_url!r}: {e}")
        return None
    return resolved
