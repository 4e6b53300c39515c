#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/css/cssom.py
"""Minimal CSS object model built on tinycss2.

This module turns stylesheet and inline-style text into a small typed rule
tree that the sanitizer can walk and mutate, and serializes the tree back to
CSS text.

Declaration names and values are sliced from the source text rather than
re-serialized from tinycss2 tokens. tinycss2 replaces malformed tokens with
placeholders (``url(javascript:alert(1))`` becomes a ``bad-url`` parse error),
and the policy checks must see exactly what a browser would see.

Examples
--------
Parse and inspect an inline style:

    >>> style = CssStyleDeclaration.parse("color: red; width: 10px !important")
    >>> style.get_property_value("width")
    '10px'
    >>> style.css_text
    'color: red; width: 10px !important'

Parse a stylesheet:

    >>> sheet = CssStyleSheet.parse("@media print { p { color: red } }")
    >>> sheet.rules[0].type
    <CssRuleType.MEDIA: 'media'>
    >>> sheet.css_text
    '@media print { p { color: red } }'

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional

import tinycss2
from tinycss2.serializer import serialize_string_value

logger = logging.getLogger(__name__)

CSS_WHITESPACE = " \t\n"


class CssRuleType(str, Enum):
    """Kinds of CSS rules, used for the at-rule allow-list."""

    STYLE = "style"
    CHARSET = "charset"
    IMPORT = "import"
    MEDIA = "media"
    FONT_FACE = "font-face"
    PAGE = "page"
    KEYFRAMES = "keyframes"
    KEYFRAME = "keyframe"
    NAMESPACE = "namespace"
    COUNTER_STYLE = "counter-style"
    SUPPORTS = "supports"
    DOCUMENT = "document"
    FONT_FEATURE_VALUES = "font-feature-values"
    VIEWPORT = "viewport"
    LAYER = "layer"
    CONTAINER = "container"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: CssRuleType | str) -> CssRuleType:
        """Convert a rule kind name such as ``"font-face"`` or ``"FONT_FACE"``.

        Raises
        ------
        ValueError
            If the name does not match any rule kind.

        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        if normalized.startswith("@"):
            normalized = normalized[1:]
        return cls(normalized)


# At-keywords (lowercase, without "@") mapped to the rule kinds they produce
AT_RULE_TYPES: dict[str, CssRuleType] = {
    "charset": CssRuleType.CHARSET,
    "import": CssRuleType.IMPORT,
    "namespace": CssRuleType.NAMESPACE,
    "media": CssRuleType.MEDIA,
    "supports": CssRuleType.SUPPORTS,
    "document": CssRuleType.DOCUMENT,
    "-moz-document": CssRuleType.DOCUMENT,
    "container": CssRuleType.CONTAINER,
    "layer": CssRuleType.LAYER,
    "page": CssRuleType.PAGE,
    "font-face": CssRuleType.FONT_FACE,
    "counter-style": CssRuleType.COUNTER_STYLE,
    "viewport": CssRuleType.VIEWPORT,
    "-ms-viewport": CssRuleType.VIEWPORT,
    "font-feature-values": CssRuleType.FONT_FEATURE_VALUES,
    "keyframes": CssRuleType.KEYFRAMES,
    "-webkit-keyframes": CssRuleType.KEYFRAMES,
    "-moz-keyframes": CssRuleType.KEYFRAMES,
    "-o-keyframes": CssRuleType.KEYFRAMES,
}

GROUPING_RULE_TYPES = frozenset(
    {CssRuleType.MEDIA, CssRuleType.SUPPORTS, CssRuleType.DOCUMENT, CssRuleType.CONTAINER, CssRuleType.LAYER}
)

DESCRIPTOR_RULE_TYPES = frozenset({CssRuleType.FONT_FACE, CssRuleType.COUNTER_STYLE, CssRuleType.VIEWPORT})

STATEMENT_RULE_TYPES = frozenset({CssRuleType.CHARSET, CssRuleType.NAMESPACE, CssRuleType.LAYER})


@dataclass
class CssProperty:
    """A single ``name: value`` pair.

    Parameters
    ----------
    name : str
        Property name as written in the source, escapes included
    value : str
        Property value as written in the source, without ``!important``
    important : bool, default False
        Whether the declaration carried ``!important``

    """

    name: str
    value: str
    important: bool = False

    def to_css(self) -> str:
        text = f"{self.name}: {self.value}"
        if self.important:
            text += " !important"
        return text


class CssStyleDeclaration:
    """Ordered, mutable list of CSS properties.

    Used both for an element's ``style`` attribute and for the body of
    style, page, keyframe and descriptor rules. Property names are matched
    ASCII case-insensitively.
    """

    def __init__(self, properties: Optional[Iterable[CssProperty]] = None) -> None:
        self._properties: list[CssProperty] = list(properties or [])

    @classmethod
    def parse(cls, text: str) -> CssStyleDeclaration:
        """Parse the contents of a ``style`` attribute.

        Parameters
        ----------
        text : str
            Declaration list text, e.g. ``"color: red; margin: 0"``

        Returns
        -------
        CssStyleDeclaration
            Parsed declaration. Items that are not declarations are dropped.

        """
        source = _CssSource(text)
        return cls(source.properties(source.tokens))

    def __iter__(self) -> Iterator[CssProperty]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"CssStyleDeclaration({self.css_text!r})"

    @property
    def properties(self) -> list[CssProperty]:
        """Return a snapshot of the properties."""
        return list(self._properties)

    @property
    def is_empty(self) -> bool:
        return not self._properties

    @property
    def css_text(self) -> str:
        return "; ".join(prop.to_css() for prop in self._properties)

    def get_property(self, name: str) -> Optional[CssProperty]:
        """Return the last property with this name, or None."""
        key = name.lower()
        for prop in reversed(self._properties):
            if prop.name.lower() == key:
                return prop
        return None

    def get_property_value(self, name: str) -> Optional[str]:
        prop = self.get_property(name)
        return prop.value if prop is not None else None

    def set_property(self, name: str, value: str, important: Optional[bool] = None) -> None:
        """Replace the value of ``name`` or append a new property.

        Parameters
        ----------
        name : str
            Property name
        value : str
            New value
        important : bool, optional
            Priority flag. None keeps the existing flag (False for new properties).

        """
        prop = self.get_property(name)
        if prop is None:
            self._properties.append(CssProperty(name, value, bool(important)))
            return
        prop.value = value
        if important is not None:
            prop.important = important

    def remove_property(self, name: str) -> bool:
        """Remove every property called ``name``.

        Returns
        -------
        bool
            True if at least one property was removed

        """
        key = name.lower()
        remaining = [prop for prop in self._properties if prop.name.lower() != key]
        removed = len(remaining) != len(self._properties)
        self._properties = remaining
        return removed


def _block(prelude: str, body: str) -> str:
    if body:
        return f"{prelude} {{ {body} }}"
    return f"{prelude} {{ }}"


def _at_prelude(at_keyword: str, prelude: str) -> str:
    return f"@{at_keyword} {prelude}" if prelude else f"@{at_keyword}"


class CssRule:
    """Base class of the rule tree. ``type`` is the rule kind tag."""

    type: CssRuleType

    def to_css(self) -> str:
        raise NotImplementedError


@dataclass
class CssStyleRule(CssRule):
    """Plain ``selector { declarations }`` rule."""

    selector_text: str
    style: CssStyleDeclaration
    type: CssRuleType = field(default=CssRuleType.STYLE, init=False)

    def to_css(self) -> str:
        return _block(self.selector_text, self.style.css_text)


@dataclass
class CssPageRule(CssRule):
    """``@page`` rule with an optional page selector."""

    selector_text: str
    style: CssStyleDeclaration
    type: CssRuleType = field(default=CssRuleType.PAGE, init=False)

    def to_css(self) -> str:
        return _block(_at_prelude("page", self.selector_text), self.style.css_text)


@dataclass
class CssDescriptorRule(CssRule):
    """At-rule whose block is a declaration list (``@font-face``, ``@counter-style``)."""

    type: CssRuleType
    at_keyword: str
    prelude: str
    style: CssStyleDeclaration

    def to_css(self) -> str:
        return _block(_at_prelude(self.at_keyword, self.prelude), self.style.css_text)


@dataclass
class CssGroupingRule(CssRule):
    """At-rule containing nested rules (``@media``, ``@supports``...)."""

    type: CssRuleType
    at_keyword: str
    condition_text: str
    rules: list[CssRule] = field(default_factory=list)

    def insert_rule(self, rule: CssRule, index: int) -> None:
        self.rules.insert(index, rule)

    def delete_rule(self, index: int) -> None:
        del self.rules[index]

    def to_css(self) -> str:
        body = " ".join(rule.to_css() for rule in self.rules)
        return _block(_at_prelude(self.at_keyword, self.condition_text), body)


@dataclass
class CssKeyframeRule(CssRule):
    """One step of a keyframes rule, keyed by ``from``, ``to`` or percentages."""

    key_text: str
    style: CssStyleDeclaration
    type: CssRuleType = field(default=CssRuleType.KEYFRAME, init=False)

    def to_css(self) -> str:
        return _block(self.key_text, self.style.css_text)


@dataclass
class CssKeyframesRule(CssRule):
    """``@keyframes name { ... }`` with vendor-prefixed spellings preserved."""

    at_keyword: str
    name: str
    rules: list[CssKeyframeRule] = field(default_factory=list)
    type: CssRuleType = field(default=CssRuleType.KEYFRAMES, init=False)

    def find_rule(self, key_text: str) -> Optional[CssKeyframeRule]:
        key = _normalize_key_text(key_text)
        for rule in self.rules:
            if _normalize_key_text(rule.key_text) == key:
                return rule
        return None

    def delete_rule(self, key_text: str) -> bool:
        rule = self.find_rule(key_text)
        if rule is None:
            return False
        self.rules.remove(rule)
        return True

    def to_css(self) -> str:
        body = " ".join(rule.to_css() for rule in self.rules)
        return _block(_at_prelude(self.at_keyword, self.name), body)


@dataclass
class CssImportRule(CssRule):
    """``@import`` rule. ``href`` is None when the URL could not be read."""

    href: Optional[str]
    media_text: str = ""
    type: CssRuleType = field(default=CssRuleType.IMPORT, init=False)

    def to_css(self) -> str:
        text = f'@import url("{serialize_string_value(self.href or "")}")'
        if self.media_text:
            text += f" {self.media_text}"
        return text + ";"


@dataclass
class CssStatementRule(CssRule):
    """Block-less at-rule kept with its prelude (``@namespace``, ``@charset``)."""

    type: CssRuleType
    at_keyword: str
    prelude: str

    def to_css(self) -> str:
        return _at_prelude(self.at_keyword, self.prelude) + ";"


@dataclass
class CssUnknownRule(CssRule):
    """Any other at-rule, kept verbatim."""

    type: CssRuleType
    at_keyword: str
    text: str

    def to_css(self) -> str:
        return self.text


class CssStyleSheet:
    """Top-level list of rules owned by one ``<style>`` element."""

    def __init__(self, rules: Optional[Iterable[CssRule]] = None) -> None:
        self.rules: list[CssRule] = list(rules or [])

    @classmethod
    def parse(cls, text: str) -> CssStyleSheet:
        """Parse stylesheet text into a rule tree.

        Parameters
        ----------
        text : str
            Contents of a ``<style>`` element

        Returns
        -------
        CssStyleSheet
            Parsed stylesheet. Malformed rules are dropped.

        """
        source = _CssSource(text)
        return cls(source.rules(tinycss2.parse_stylesheet(source.tokens)))

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"CssStyleSheet({len(self.rules)} rules)"

    def insert_rule(self, rule: CssRule, index: int) -> None:
        self.rules.insert(index, rule)

    def delete_rule(self, index: int) -> None:
        del self.rules[index]

    @property
    def css_text(self) -> str:
        return "\n".join(rule.to_css() for rule in self.rules)


def _normalize_key_text(key_text: str) -> str:
    return ",".join(part.strip().lower() for part in key_text.split(","))


def _serialize_prelude(tokens: list[Any]) -> str:
    return tinycss2.serialize([token for token in tokens if token.type != "comment"]).strip(CSS_WHITESPACE)


def _is_literal(token: Any, value: str) -> bool:
    return token.type == "literal" and token.value == value


class _CssSource:
    """Tokenized CSS text with a mapping from tokens back to source offsets."""

    def __init__(self, text: str) -> None:
        # Same input preprocessing as the tinycss2 tokenizer, so offsets line up
        self.css = text.replace("\0", "\ufffd").replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")
        self._line_starts = [0]
        self._line_starts.extend(index + 1 for index, char in enumerate(self.css) if char == "\n")
        self.tokens = tinycss2.parse_component_value_list(self.css)
        self._spans: dict[int, tuple[int, int]] = {id(self.tokens): (0, len(self.css))}
        self._index_blocks(self.tokens, len(self.css))

    def offset(self, token: Any) -> int:
        return self._line_starts[token.source_line - 1] + token.source_column - 1

    def _start_of(self, tokens: list[Any], index: int, end: int) -> int:
        return self.offset(tokens[index]) if index < len(tokens) else end

    def _index_blocks(self, tokens: list[Any], end: int) -> None:
        """Record the content span of every ``{}`` block, keyed by its content list."""
        for index, token in enumerate(tokens):
            if token.type != "{} block":
                continue
            start = self.offset(token) + 1
            if index + 1 < len(tokens):
                close = self.offset(tokens[index + 1]) - 1
            elif end > start and self.css[end - 1] == "}":
                close = end - 1
            else:
                # Unclosed at end of input
                close = end
            self._spans[id(token.content)] = (start, close)
            self._index_blocks(token.content, close)

    def properties(self, content: list[Any]) -> list[CssProperty]:
        """Extract declarations from a block, keeping their source spelling."""
        _, end = self._spans[id(content)]
        positions = {self.offset(token): index for index, token in enumerate(content)}
        properties = []

        for item in tinycss2.parse_blocks_contents(content, skip_comments=True, skip_whitespace=True):
            if item.type != "declaration":
                logger.debug(f"Ignoring {item.type} inside declaration block")
                continue

            name_index = positions[self.offset(item)]
            name_start = self.offset(content[name_index])
            raw_name = self.css[name_start : self._start_of(content, name_index + 1, end)]

            colon_index = name_index + 1
            while not _is_literal(content[colon_index], ":"):
                colon_index += 1
            value_start = self._start_of(content, colon_index + 1, end)
            # Declaration.value stops before "!important", so the next token is "!" or ";"
            value_end = self._start_of(content, colon_index + 1 + len(item.value), end)
            raw_value = self.css[value_start:value_end].strip(CSS_WHITESPACE)

            properties.append(CssProperty(raw_name, raw_value, item.important))

        return properties

    def rules(self, items: list[Any], in_keyframes: bool = False) -> list[CssRule]:
        rules: list[CssRule] = []
        for item in items:
            if item.type in ("whitespace", "comment"):
                continue
            if item.type == "error":
                logger.debug(f"Dropping malformed CSS at {item.source_line}:{item.source_column}: {item.message}")
                continue

            rule: Optional[CssRule]
            if item.type == "qualified-rule":
                prelude = _serialize_prelude(item.prelude)
                style = CssStyleDeclaration(self.properties(item.content))
                rule = CssKeyframeRule(prelude, style) if in_keyframes else CssStyleRule(prelude, style)
            else:
                rule = self._at_rule(item)

            if rule is not None:
                rules.append(rule)
        return rules

    def _at_rule(self, item: Any) -> Optional[CssRule]:
        keyword = item.lower_at_keyword
        rule_type = AT_RULE_TYPES.get(keyword, CssRuleType.UNKNOWN)
        prelude = _serialize_prelude(item.prelude)

        if item.content is None:
            if rule_type == CssRuleType.IMPORT:
                return _import_rule(item.prelude)
            if rule_type in STATEMENT_RULE_TYPES:
                return CssStatementRule(rule_type, keyword, prelude)
            return CssUnknownRule(rule_type, keyword, item.serialize())

        if rule_type in GROUPING_RULE_TYPES:
            children = self.rules(tinycss2.parse_rule_list(item.content))
            return CssGroupingRule(rule_type, keyword, prelude, children)
        if rule_type == CssRuleType.PAGE:
            return CssPageRule(prelude, CssStyleDeclaration(self.properties(item.content)))
        if rule_type in DESCRIPTOR_RULE_TYPES:
            return CssDescriptorRule(rule_type, keyword, prelude, CssStyleDeclaration(self.properties(item.content)))
        if rule_type == CssRuleType.KEYFRAMES:
            frames = self.rules(tinycss2.parse_rule_list(item.content), in_keyframes=True)
            return CssKeyframesRule(keyword, prelude, [frame for frame in frames if isinstance(frame, CssKeyframeRule)])
        return CssUnknownRule(rule_type, keyword, item.serialize())


def _import_rule(prelude: list[Any]) -> CssImportRule:
    tokens = [token for token in prelude if token.type not in ("whitespace", "comment")]
    href: Optional[str] = None
    if tokens:
        first = tokens[0]
        if first.type in ("url", "string"):
            href = first.value
        elif first.type == "function" and first.lower_name == "url":
            arguments = [token for token in first.arguments if token.type not in ("whitespace", "comment")]
            if len(arguments) == 1 and arguments[0].type == "string":
                href = arguments[0].value
    media_text = _serialize_prelude(prelude[prelude.index(tokens[0]) + 1 :]) if tokens else ""
    return CssImportRule(href, media_text)


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
]
