#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/sanitizer.py
"""Allow-list sanitizer for untrusted markup and CSS.

The :class:`Sanitizer` walks a parsed tree once, in this order:

1. Remove elements whose tag is not allowed
2. Sanitize every ``<style>`` sheet in the document
3. For each remaining element: remove disallowed attributes, check URL
   attributes, sanitize the inline style, then scan attribute values
   (``&{`` includes, class tokens, emptied styles)
4. Remove comments and comment-like nodes
5. Run the post-processing hooks

Every removal is announced through a :class:`~markupclean.hooks.HookManager`
target and can be cancelled by a hook.

Examples
--------
    >>> from markupclean import Sanitizer
    >>> Sanitizer().sanitize('<svg><script>alert(1)</script><circle cx="1"></circle></svg>')
    '<svg><circle cx="1"></circle></svg>'

"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import PageElement

from markupclean.constants import DATA_ATTRIBUTE_PREFIX, SCRIPT_INCLUDE_MARKER, HookTarget
from markupclean.css.cssom import (
    CssDescriptorRule,
    CssGroupingRule,
    CssImportRule,
    CssKeyframeRule,
    CssKeyframesRule,
    CssPageRule,
    CssProperty,
    CssRule,
    CssStyleDeclaration,
    CssStyleRule,
    CssStyleSheet,
)
from markupclean.css.decoder import EXPRESSION_PATTERN, URL_PATTERN, decode_css
from markupclean.dom import (
    Markup,
    comments,
    elements,
    fragment_root,
    parse_markup,
    remove_element,
    replace_node,
    serialize_children,
    serialize_document,
    set_text_content,
    text_content,
)
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
from markupclean.options import SanitizerOptions
from markupclean.url import UrlSanitizer

logger = logging.getLogger(__name__)

# Escape for "<" inside regenerated <style> text; the space ends the hex escape
STYLE_LESS_THAN_ESCAPE = "\\3c "


def _attribute_value(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if isinstance(value, list):
        # Trees parsed by callers may keep multi-valued attributes as lists
        return " ".join(value)
    return value


def _is_style_element(tag: Tag) -> bool:
    return tag.name.lower() == "style"


class Sanitizer:
    """Sanitize markup against the allow-lists in :class:`SanitizerOptions`.

    Parameters
    ----------
    options : SanitizerOptions, optional
        Policy to enforce. Defaults to ``SanitizerOptions()``.
    hooks : HookManager, optional
        Hooks notified of every decision. Defaults to an empty manager.

    Notes
    -----
    A sanitizer holds no per-call state. One instance may sanitize separate
    trees from several threads as long as its options and hooks are not
    changed meanwhile.

    Examples
    --------
    Allow basic formatting and keep the text of removed elements:

        >>> options = SanitizerOptions(allowed_tags={"p", "b", "i"}, keep_child_nodes=True)
        >>> Sanitizer(options).sanitize("<p><u>under</u> <b>bold</b></p>")
        '<p>under <b>bold</b></p>'

    """

    def __init__(self, options: Optional[SanitizerOptions] = None, hooks: Optional[HookManager] = None) -> None:
        self.options = options if options is not None else SanitizerOptions()
        self.hooks = hooks if hooks is not None else HookManager()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def sanitize(self, markup: Markup, base_url: str = "") -> str:
        """Sanitize a markup fragment.

        Parameters
        ----------
        markup : str, bytes or file-like
            Untrusted markup fragment
        base_url : str, default ""
            Base URL for resolving relative URLs. Empty leaves them relative.

        Returns
        -------
        str
            Sanitized fragment (the children of ``<body>`` for builders that add one)

        """
        soup = parse_markup(markup, self.options.parser)
        root = fragment_root(soup)
        self._sanitize(soup, root, base_url)
        return serialize_children(root, self.options.formatter)

    def sanitize_document(self, markup: Markup, base_url: str = "") -> str:
        """Sanitize a complete document, doctype and ``<html>`` scaffolding included.

        Every element is checked, so ``html``, ``head`` and ``body`` must be in
        ``allowed_tags`` to survive.

        Parameters
        ----------
        markup : str, bytes or file-like
            Untrusted document
        base_url : str, default ""
            Base URL for resolving relative URLs

        Returns
        -------
        str
            Sanitized document

        """
        soup = parse_markup(markup, self.options.parser)
        self._sanitize(soup, soup, base_url)
        return serialize_document(soup, self.options.formatter)

    def sanitize_dom(
        self,
        document: Union[BeautifulSoup, Markup],
        context: Optional[Tag] = None,
        base_url: str = "",
    ) -> BeautifulSoup:
        """Sanitize a tree in place.

        Parameters
        ----------
        document : BeautifulSoup or markup
            Tree to sanitize. Markup is parsed with the configured builder first.
        context : Tag, optional
            Restrict the element passes to this subtree. Defaults to the
            fragment root. Stylesheets are always taken from the whole document.
        base_url : str, default ""
            Base URL for resolving relative URLs

        Returns
        -------
        BeautifulSoup
            The sanitized tree

        """
        soup = document if isinstance(document, BeautifulSoup) else parse_markup(document, self.options.parser)
        root = context if context is not None else fragment_root(soup)
        self._sanitize(soup, root, base_url)
        return soup

    def _sanitize(self, soup: BeautifulSoup, root: Tag, base_url: str) -> None:
        context = HookContext(document=soup, base_url=base_url)

        self.remove_disallowed_tags(root, context)
        self.sanitize_style_sheets(soup, base_url, context)

        for tag in elements(root):
            self.sanitize_element(tag, base_url, context)

        self.remove_comments(root, context)
        self.post_process(soup, root, context)

    # ------------------------------------------------------------------
    # Policy predicates
    # ------------------------------------------------------------------

    def is_allowed_tag(self, tag: Tag) -> bool:
        return tag.name in self.options.allowed_tags

    def is_allowed_attribute(self, name: str) -> bool:
        if name in self.options.allowed_attributes:
            return True
        return self.options.allow_data_attributes and name.lower().startswith(DATA_ATTRIBUTE_PREFIX)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def remove_disallowed_tags(self, root: Tag, context: Optional[HookContext] = None) -> None:
        """Remove every descendant of ``root`` whose tag is not allowed.

        The candidates are collected before anything is removed. Descendants
        of a removed element are still announced, as they were candidates.
        """
        for tag in [tag for tag in elements(root) if not self.is_allowed_tag(tag)]:
            event = self._fire("removing_tag", RemovingTagEvent(tag, RemoveReason.NOT_ALLOWED_TAG), context, tag)
            if event.cancel:
                logger.debug(f"Hook kept disallowed <{tag.name}>")
                continue
            logger.debug(f"Removing <{tag.name}>: {RemoveReason.NOT_ALLOWED_TAG.value}")
            remove_element(tag, self.options.keep_child_nodes)

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def sanitize_element(self, tag: Tag, base_url: str = "", context: Optional[HookContext] = None) -> None:
        """Run the attribute pipeline on one element."""
        for name in [name for name in tag.attrs if not self.is_allowed_attribute(name)]:
            self.remove_attribute(tag, name, RemoveReason.NOT_ALLOWED_ATTRIBUTE, context)

        for name in [name for name in tag.attrs if name in self.options.uri_attributes]:
            value = _attribute_value(tag, name) or ""
            url = self.sanitize_url(tag, value, base_url, context)
            if url is None:
                self.remove_attribute(tag, name, RemoveReason.NOT_ALLOWED_URL_VALUE, context)
            else:
                tag[name] = url

        old_style = _attribute_value(tag, "style")
        old_style_empty = not old_style
        self.sanitize_style(tag, base_url, context)

        for name in list(tag.attrs):
            value = _attribute_value(tag, name)
            if value is None:
                continue
            if SCRIPT_INCLUDE_MARKER in value:
                self.remove_attribute(tag, name, RemoveReason.NOT_ALLOWED_VALUE, context)
            elif self.options.allowed_classes and name.lower() == "class":
                self.sanitize_classes(tag, name, context)
            elif not old_style_empty and name.lower() == "style" and not value:
                self.remove_attribute(tag, name, RemoveReason.STYLE_ATTRIBUTE_EMPTY, context)

    def remove_attribute(
        self, tag: Tag, name: str, reason: RemoveReason, context: Optional[HookContext] = None
    ) -> bool:
        """Remove an attribute unless a ``removing_attribute`` hook cancels.

        Returns
        -------
        bool
            True if the attribute was removed

        """
        value = _attribute_value(tag, name) or ""
        event = self._fire("removing_attribute", RemovingAttributeEvent(tag, name, value, reason), context, tag)
        if event.cancel:
            return False
        logger.debug(f"Removing attribute {name!r} from <{tag.name}>: {reason.value}")
        del tag[name]
        return True

    def sanitize_classes(self, tag: Tag, name: str = "class", context: Optional[HookContext] = None) -> None:
        """Drop class tokens that are not allowed; remove the attribute if none remain."""
        tokens = (_attribute_value(tag, name) or "").split()
        kept = []
        for css_class in tokens:
            if css_class in self.options.allowed_classes:
                kept.append(css_class)
                continue
            event = self._fire(
                "removing_css_class",
                RemovingCssClassEvent(tag, css_class, RemoveReason.NOT_ALLOWED_CSS_CLASS),
                context,
                tag,
            )
            if event.cancel:
                kept.append(css_class)
            else:
                logger.debug(f"Removing class {css_class!r} from <{tag.name}>")

        if not kept:
            self.remove_attribute(tag, name, RemoveReason.CLASS_ATTRIBUTE_EMPTY, context)
        elif len(kept) != len(tokens):
            tag[name] = " ".join(kept)

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def sanitize_url(
        self, tag: Tag, url: str, base_url: str = "", context: Optional[HookContext] = None
    ) -> Optional[str]:
        """Check a URL's scheme, resolve it, and let ``filter_url`` hooks override it.

        Parameters
        ----------
        tag : Tag
            Element owning the URL
        url : str
            Candidate URL
        base_url : str, default ""
            Base URL for relative references
        context : HookContext, optional
            Hook context of the running sanitize call

        Returns
        -------
        str or None
            URL to use, or None if the URL must be removed

        """
        sanitized = UrlSanitizer(self.options.allowed_schemes).sanitize(url, base_url)
        event = self._fire("filter_url", FilterUrlEvent(tag, url, sanitized), context, tag)
        return event.sanitized_url

    # ------------------------------------------------------------------
    # CSS
    # ------------------------------------------------------------------

    def sanitize_style(self, tag: Tag, base_url: str = "", context: Optional[HookContext] = None) -> None:
        """Sanitize the ``style`` attribute of ``tag``.

        A style that is not blank but yields no declaration at all is removed.
        Otherwise the attribute is rewritten from the sanitized declaration.
        """
        raw = _attribute_value(tag, "style")
        if raw is None or not raw.strip():
            return

        declaration = CssStyleDeclaration.parse(raw)
        if declaration.is_empty:
            self.remove_attribute(tag, "style", RemoveReason.STYLE_ATTRIBUTE_EMPTY, context)
            return

        self.sanitize_style_declaration(tag, declaration, base_url, context)
        tag["style"] = declaration.css_text

    def sanitize_style_declaration(
        self,
        tag: Tag,
        declaration: CssStyleDeclaration,
        base_url: str = "",
        context: Optional[HookContext] = None,
    ) -> None:
        """Filter the properties of a declaration block in place.

        Names and values are decoded before every check. Changes are staged
        while the block is read, then applied: value rewrites first, then
        removals through the ``removing_style`` hook.
        """
        removals: list[tuple[CssProperty, RemoveReason]] = []
        updates: list[tuple[str, str, bool]] = []

        for prop in declaration.properties:
            key = decode_css(prop.name)
            value = decode_css(prop.value)

            if key not in self.options.allowed_css_properties:
                removals.append((prop, RemoveReason.NOT_ALLOWED_STYLE))
                continue

            if EXPRESSION_PATTERN.search(value) or self.options.disallowed_css_property_value.search(value):
                removals.append((prop, RemoveReason.NOT_ALLOWED_VALUE))
                continue

            matches = list(URL_PATTERN.finditer(value))
            if not matches:
                continue

            sanitized_urls = [self.sanitize_url(tag, match.group(2), base_url, context) for match in matches]
            if any(url is None for url in sanitized_urls):
                removals.append((prop, RemoveReason.NOT_ALLOWED_URL_VALUE))
                continue

            replacements = iter(sanitized_urls)
            new_value = URL_PATTERN.sub(lambda m: f"url({m.group(1)}{next(replacements)}{m.group(3)}", value)
            if new_value == value:
                continue

            if not _is_single_value(key, new_value):
                # Decoding exposed a ";" or brace that would split the rewritten value
                removals.append((prop, RemoveReason.NOT_ALLOWED_VALUE))
                continue

            if key.lower() != prop.name.lower():
                removals.append((prop, RemoveReason.NOT_ALLOWED_URL_VALUE))
            updates.append((key, new_value, prop.important))

        for name, value, important in updates:
            declaration.set_property(name, value, important)

        for prop, reason in removals:
            event = self._fire("removing_style", RemovingStyleEvent(tag, prop, reason), context, tag)
            if event.cancel:
                continue
            logger.debug(f"Removing CSS property {prop.name!r}: {reason.value}")
            declaration.remove_property(prop.name)

    def sanitize_style_sheets(
        self, document: BeautifulSoup, base_url: str = "", context: Optional[HookContext] = None
    ) -> None:
        """Sanitize and regenerate every ``<style>`` element of ``document``."""
        for tag in document.find_all(_is_style_element):
            sheet = CssStyleSheet.parse(text_content(tag))
            self._sanitize_rule_list(tag, sheet.rules, base_url, context)
            set_text_content(document, tag, sheet.css_text.replace("<", STYLE_LESS_THAN_ESCAPE))

    def _sanitize_rule_list(
        self, tag: Tag, rules: list[CssRule], base_url: str, context: Optional[HookContext]
    ) -> None:
        index = 0
        while index < len(rules):
            rule = rules[index]
            if not self.sanitize_style_rule(tag, rule, base_url, context) and not self._remove_at_rule_cancelled(
                tag, rule, context
            ):
                logger.debug(f"Removing CSS {rule.type.value} rule")
                del rules[index]
            else:
                index += 1

    def _remove_at_rule_cancelled(self, tag: Tag, rule: CssRule, context: Optional[HookContext]) -> bool:
        return self._fire("removing_at_rule", RemovingAtRuleEvent(tag, rule), context, tag).cancel

    def sanitize_style_rule(
        self, tag: Tag, rule: CssRule, base_url: str = "", context: Optional[HookContext] = None
    ) -> bool:
        """Sanitize one rule of a stylesheet, recursing into nested rules.

        Returns
        -------
        bool
            False if the rule kind is not allowed and the rule should be removed

        """
        if rule.type not in self.options.allowed_at_rules:
            return False

        if isinstance(rule, (CssStyleRule, CssPageRule, CssDescriptorRule, CssKeyframeRule)):
            self.sanitize_style_declaration(tag, rule.style, base_url, context)
        elif isinstance(rule, CssGroupingRule):
            self._sanitize_rule_list(tag, rule.rules, base_url, context)
        elif isinstance(rule, CssKeyframesRule):
            for keyframe in list(rule.rules):
                if not self.sanitize_style_rule(tag, keyframe, base_url, context) and not (
                    self._remove_at_rule_cancelled(tag, keyframe, context)
                ):
                    rule.delete_rule(keyframe.key_text)
        elif isinstance(rule, CssImportRule):
            href = self.sanitize_url(tag, rule.href, base_url, context) if rule.href is not None else None
            if href is None:
                return False
            rule.href = href
        return True

    # ------------------------------------------------------------------
    # Comments and post-processing
    # ------------------------------------------------------------------

    def remove_comments(self, root: Tag, context: Optional[HookContext] = None) -> None:
        for comment in comments(root):
            event = self._fire("removing_comment", RemovingCommentEvent(comment), context, comment)
            if not event.cancel:
                comment.extract()

    def post_process(self, document: BeautifulSoup, root: Tag, context: Optional[HookContext] = None) -> None:
        """Run ``post_process_node`` over every node, then ``post_process_dom`` once."""
        if self.hooks.has_hooks("post_process_node"):
            root.smooth()
            for node in list(root.descendants):
                event = self._fire("post_process_node", PostProcessNodeEvent(document, node), context, node)
                if event.replacement_nodes:
                    replace_node(node, event.replacement_nodes)

        if self.hooks.has_hooks("post_process_dom"):
            self._fire("post_process_dom", PostProcessDomEvent(document), context, document)

    # ------------------------------------------------------------------

    def _fire(self, target: HookTarget, event: Any, context: Optional[HookContext], node: PageElement) -> Any:
        if not self.hooks.has_hooks(target):
            return event
        if context is None:
            context = HookContext(document=_root_of(node))
        return self.hooks.execute_hooks(target, event, context)


def _root_of(node: PageElement) -> Any:
    while node.parent is not None:
        node = node.parent
    return node


def _is_single_value(name: str, value: str) -> bool:
    # Reparsed inside a rule block so that a decoded "}" cannot close it early
    rules = CssStyleSheet.parse(f"x {{ {name}: {value} }}").rules
    if len(rules) != 1 or not isinstance(rules[0], CssStyleRule):
        return False
    reparsed = rules[0].style.properties
    return len(reparsed) == 1 and reparsed[0].value == value.strip(" \t\n") and not reparsed[0].important


def sanitize(markup: Markup, base_url: str = "", options: Optional[SanitizerOptions] = None) -> str:
    """Sanitize a markup fragment with a one-off :class:`Sanitizer`.

    Parameters
    ----------
    markup : str, bytes or file-like
        Untrusted markup fragment
    base_url : str, default ""
        Base URL for resolving relative URLs
    options : SanitizerOptions, optional
        Policy to enforce

    Returns
    -------
    str
        Sanitized fragment

    """
    return Sanitizer(options).sanitize(markup, base_url)


__all__ = [
    "Sanitizer",
    "sanitize",
]
