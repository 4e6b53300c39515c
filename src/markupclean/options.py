#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/options.py
"""Sanitizer configuration.

:class:`SanitizerOptions` is a frozen dataclass. The allow-list fields hold
per-instance :class:`CaseInsensitiveSet` copies of the default tables, so
they can be extended in place (``options.allowed_tags.add("b")``) without
affecting other instances or the shared defaults. Use
:meth:`~CloneFrozenMixin.create_updated` to derive modified copies.

Examples
--------
    >>> options = SanitizerOptions(allowed_classes={"safe"})
    >>> "SAFE" in options.allowed_classes
    True
    >>> html_options = options.create_updated(allowed_tags={"p", "b", "a"})

"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import MutableSet
from dataclasses import dataclass, field, fields, replace
from typing import Any, Iterable, Iterator, Mapping, Union

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from markupclean.constants import (
    DEFAULT_ALLOWED_AT_RULES,
    DEFAULT_ALLOWED_ATTRIBUTES,
    DEFAULT_ALLOWED_CLASSES,
    DEFAULT_ALLOWED_CSS_PROPERTIES,
    DEFAULT_ALLOWED_SCHEMES,
    DEFAULT_ALLOWED_TAGS,
    DEFAULT_DISALLOWED_CSS_PROPERTY_VALUE,
    DEFAULT_FORMATTER,
    DEFAULT_PARSER,
    DEFAULT_URI_ATTRIBUTES,
    SUPPORTED_FORMATTERS,
    SUPPORTED_PARSERS,
)
from markupclean.css.cssom import CssRuleType
from markupclean.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Fields holding case-insensitive name sets, with their default tables
NAME_SET_DEFAULTS: dict[str, frozenset[str]] = {
    "allowed_tags": DEFAULT_ALLOWED_TAGS,
    "allowed_attributes": DEFAULT_ALLOWED_ATTRIBUTES,
    "uri_attributes": DEFAULT_URI_ATTRIBUTES,
    "allowed_css_properties": DEFAULT_ALLOWED_CSS_PROPERTIES,
    "allowed_classes": DEFAULT_ALLOWED_CLASSES,
    "allowed_schemes": DEFAULT_ALLOWED_SCHEMES,
}


class CaseInsensitiveSet(MutableSet):
    """Set of strings compared ASCII case-insensitively.

    Members are stored lowercased. Non-string values are never members.

    Examples
    --------
    >>> tags = CaseInsensitiveSet({"SVG", "circle"})
    >>> "Circle" in tags
    True
    >>> sorted(tags)
    ['circle', 'svg']

    """

    def __init__(self, values: Iterable[str] = ()) -> None:
        self._items: set[str] = set()
        for value in values:
            self.add(value)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and value.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self._items)!r})"

    def add(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Expected a string, got {type(value).__name__}")
        self._items.add(value.lower())

    def discard(self, value: str) -> None:
        if isinstance(value, str):
            self._items.discard(value.lower())

    def copy(self) -> CaseInsensitiveSet:
        return type(self)(self._items)


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated. Set fields are copied,
            so the new instance never shares them with this one.

        """
        return replace(self, **kwargs)


def _default_set(name: str) -> Any:
    return field(
        default_factory=lambda: CaseInsensitiveSet(NAME_SET_DEFAULTS[name]),
        metadata=_FIELD_HELP[name],
    )


_FIELD_HELP: dict[str, dict[str, Any]] = {
    "allowed_tags": {"help": "Element names that are kept", "importance": "core"},
    "allowed_attributes": {"help": "Attribute names that are kept", "importance": "core"},
    "uri_attributes": {"help": "Attributes whose values are URLs and get scheme checks", "importance": "security"},
    "allowed_css_properties": {"help": "CSS properties kept in style attributes and sheets", "importance": "core"},
    "allowed_classes": {
        "help": "Allowed class tokens; empty allows every class",
        "importance": "advanced",
    },
    "allowed_schemes": {"help": "URL schemes that are kept", "importance": "security"},
}


@dataclass(frozen=True)
class SanitizerOptions(CloneFrozenMixin):
    """Configuration options for :class:`~markupclean.sanitizer.Sanitizer`.

    Parameters
    ----------
    allowed_tags : set of str, default DEFAULT_ALLOWED_TAGS
        Element names that are kept. Other elements are removed.
    allowed_attributes : set of str, default DEFAULT_ALLOWED_ATTRIBUTES
        Attribute names that are kept.
    uri_attributes : set of str, default DEFAULT_URI_ATTRIBUTES
        Attributes whose values are checked as URLs.
    allowed_css_properties : set of str, default DEFAULT_ALLOWED_CSS_PROPERTIES
        CSS properties kept in inline styles and stylesheets.
    allowed_classes : set of str, default empty
        Class tokens that are kept. An empty set allows every class.
    allowed_schemes : set of str, default {"http", "https"}
        URL schemes that are kept.
    allowed_at_rules : set of CssRuleType or str, default {STYLE, NAMESPACE}
        Stylesheet rule kinds that are kept. Strings are converted.
    disallowed_css_property_value : str or re.Pattern, default ``[<>]``
        CSS values matching this pattern are removed.
    allow_data_attributes : bool, default False
        Keep every ``data-*`` attribute.
    keep_child_nodes : bool, default False
        Replace a removed element with its children instead of dropping its subtree.
    parser : str, default "html.parser"
        BeautifulSoup tree builder used for markup strings.
    formatter : str, default "minimal"
        BeautifulSoup output formatter used for serialization.

    Raises
    ------
    ValidationError
        If the pattern does not compile, an at-rule kind is unknown, or the
        parser or formatter is not supported.

    """

    allowed_tags: CaseInsensitiveSet = _default_set("allowed_tags")
    allowed_attributes: CaseInsensitiveSet = _default_set("allowed_attributes")
    uri_attributes: CaseInsensitiveSet = _default_set("uri_attributes")
    allowed_css_properties: CaseInsensitiveSet = _default_set("allowed_css_properties")
    allowed_classes: CaseInsensitiveSet = _default_set("allowed_classes")
    allowed_schemes: CaseInsensitiveSet = _default_set("allowed_schemes")
    allowed_at_rules: set[CssRuleType] = field(
        default_factory=lambda: {CssRuleType.coerce(name) for name in DEFAULT_ALLOWED_AT_RULES},
        metadata={"help": "Stylesheet rule kinds that are kept (style, media, keyframes...)", "importance": "advanced"},
    )
    disallowed_css_property_value: Union[re.Pattern[str], str] = field(
        default=DEFAULT_DISALLOWED_CSS_PROPERTY_VALUE,
        metadata={"help": "Regular expression; matching CSS values are removed", "importance": "security"},
    )
    allow_data_attributes: bool = field(
        default=False,
        metadata={"help": "Keep all data-* attributes", "importance": "core"},
    )
    keep_child_nodes: bool = field(
        default=False,
        metadata={"help": "Keep the children of removed elements", "importance": "core"},
    )
    parser: str = field(
        default=DEFAULT_PARSER,
        metadata={"help": "BeautifulSoup tree builder", "choices": SUPPORTED_PARSERS, "importance": "advanced"},
    )
    formatter: str = field(
        default=DEFAULT_FORMATTER,
        metadata={"help": "BeautifulSoup output formatter", "choices": SUPPORTED_FORMATTERS, "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Copy the allow-lists and validate the remaining fields.

        Raises
        ------
        ValidationError
            If any field value is invalid.

        """
        for name in NAME_SET_DEFAULTS:
            value = getattr(self, name)
            if isinstance(value, str):
                raise ValidationError(
                    f"{name} must be a collection of names, not a string", parameter_name=name, parameter_value=value
                )
            object.__setattr__(self, name, CaseInsensitiveSet(value))

        rule_types = self.allowed_at_rules
        if isinstance(rule_types, str):
            rule_types = [rule_types]
        at_rules = set()
        for rule_type in rule_types:
            try:
                at_rules.add(CssRuleType.coerce(rule_type))
            except ValueError as e:
                raise ValidationError(
                    f"Unknown CSS rule kind: {rule_type!r}",
                    parameter_name="allowed_at_rules",
                    parameter_value=rule_type,
                    original_error=e,
                ) from e
        object.__setattr__(self, "allowed_at_rules", at_rules)

        pattern = self.disallowed_css_property_value
        if isinstance(pattern, str):
            try:
                object.__setattr__(self, "disallowed_css_property_value", re.compile(pattern))
            except re.error as e:
                raise ValidationError(
                    f"Invalid disallowed_css_property_value pattern {pattern!r}: {e}",
                    parameter_name="disallowed_css_property_value",
                    parameter_value=pattern,
                    original_error=e,
                ) from e

        if self.parser not in SUPPORTED_PARSERS:
            raise ValidationError(
                f"Unsupported parser {self.parser!r}; choose one of {', '.join(SUPPORTED_PARSERS)}",
                parameter_name="parser",
                parameter_value=self.parser,
            )

        if self.formatter not in SUPPORTED_FORMATTERS:
            raise ValidationError(
                f"Unsupported formatter {self.formatter!r}; choose one of {', '.join(SUPPORTED_FORMATTERS)}",
                parameter_name="formatter",
                parameter_value=self.formatter,
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SanitizerOptions:
        """Build options from configuration-file data.

        Keys may use dashes or underscores. ``extend_<field>`` keys add names
        to the default allow-list instead of replacing it.

        Parameters
        ----------
        data : Mapping[str, Any]
            Configuration mapping, e.g. the ``[tool.markupclean]`` table

        Returns
        -------
        SanitizerOptions
            New options instance

        Raises
        ------
        ValidationError
            If a key is unknown or a value is invalid

        Examples
        --------
        >>> options = SanitizerOptions.from_dict({"extend-allowed-tags": ["p"], "keep_child_nodes": True})
        >>> "p" in options.allowed_tags and "svg" in options.allowed_tags
        True

        """
        field_names = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        extensions: dict[str, list[str]] = {}

        for raw_key, value in data.items():
            key = str(raw_key).replace("-", "_")
            if key.startswith("extend_") and key[len("extend_") :] in NAME_SET_DEFAULTS:
                extensions[key[len("extend_") :]] = _as_name_list(key, value)
            elif key in NAME_SET_DEFAULTS or key == "allowed_at_rules":
                kwargs[key] = _as_name_list(key, value)
            elif key in field_names:
                kwargs[key] = value
            else:
                raise ValidationError(f"Unknown configuration key: {raw_key!r}", parameter_name=str(raw_key))

        for name, extra in extensions.items():
            kwargs[name] = list(kwargs.get(name, NAME_SET_DEFAULTS[name])) + extra

        return cls(**kwargs)


def _as_name_list(key: str, value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValidationError(
            f"{key} must be a list of names, got {type(value).__name__}", parameter_name=key, parameter_value=value
        )
    return [str(item) for item in value]


__all__ = [
    "CaseInsensitiveSet",
    "CloneFrozenMixin",
    "SanitizerOptions",
]
