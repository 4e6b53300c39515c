#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the CSS object model."""

import pytest

from markupclean.css.cssom import (
    CssDescriptorRule,
    CssGroupingRule,
    CssImportRule,
    CssKeyframesRule,
    CssProperty,
    CssRuleType,
    CssStatementRule,
    CssStyleDeclaration,
    CssStyleRule,
    CssStyleSheet,
    CssUnknownRule,
)


@pytest.mark.unit
class TestCssStyleDeclaration:
    """Tests for inline declaration parsing and editing."""

    def test_parse_properties(self):
        style = CssStyleDeclaration.parse("color: red; margin: 0 !important")

        assert len(style) == 2
        assert style.properties[0] == CssProperty("color", "red", False)
        assert style.properties[1] == CssProperty("margin", "0", True)

    def test_css_text(self):
        style = CssStyleDeclaration.parse("color:red;margin :  0  !important;")
        assert style.css_text == "color: red; margin: 0 !important"

    def test_raw_escaped_name_preserved(self):
        """Names keep their source spelling; decoding is the sanitizer's job."""
        style = CssStyleDeclaration.parse("\\63 olor: red")
        assert style.properties[0].name == "\\63 olor"

    def test_comments_kept_in_value(self):
        style = CssStyleDeclaration.parse("width: expr/**/ession(1)")
        assert style.get_property_value("width") == "expr/**/ession(1)"

    def test_bad_url_value_kept_verbatim(self):
        """Values tinycss2 reports as bad URLs are still visible to the checks."""
        style = CssStyleDeclaration.parse("fill:url(javascript:alert(1))")
        assert style.get_property_value("fill") == "url(javascript:alert(1))"

    @pytest.mark.parametrize("text", ["", "   ", "not css", "}}}", ": red"])
    def test_no_declarations(self, text):
        assert CssStyleDeclaration.parse(text).is_empty

    def test_get_property_case_insensitive(self):
        style = CssStyleDeclaration.parse("COLOR: Red")
        assert style.get_property_value("color") == "Red"
        assert style.get_property_value("margin") is None

    def test_duplicate_names_last_wins(self):
        style = CssStyleDeclaration.parse("color: red; color: blue")
        assert style.get_property_value("color") == "blue"

    def test_set_property_replaces(self):
        style = CssStyleDeclaration.parse("color: red !important")
        style.set_property("color", "blue")

        assert style.css_text == "color: blue !important"

    def test_set_property_appends(self):
        style = CssStyleDeclaration.parse("color: red")
        style.set_property("fill", "none", important=True)

        assert style.css_text == "color: red; fill: none !important"

    def test_remove_property_removes_all(self):
        style = CssStyleDeclaration.parse("color: red; fill: none; Color: blue")

        assert style.remove_property("color") is True
        assert style.css_text == "fill: none"
        assert style.remove_property("color") is False

    def test_properties_is_snapshot(self):
        style = CssStyleDeclaration.parse("color: red; fill: none")
        for prop in style.properties:
            style.remove_property(prop.name)
        assert style.is_empty


@pytest.mark.unit
class TestCssStyleSheet:
    """Tests for stylesheet parsing and serialization."""

    def test_rule_kinds(self):
        sheet = CssStyleSheet.parse(
            "a { color: red }"
            " @media print { b { color: blue } }"
            " @import url(x.css) screen;"
            ' @namespace svg url("http://www.w3.org/2000/svg");'
            " @font-face { font-family: x }"
            " @keyframes spin { from { color: red } 50% { color: blue } }"
            " @unknown foo;"
        )

        assert [rule.type for rule in sheet.rules] == [
            CssRuleType.STYLE,
            CssRuleType.MEDIA,
            CssRuleType.IMPORT,
            CssRuleType.NAMESPACE,
            CssRuleType.FONT_FACE,
            CssRuleType.KEYFRAMES,
            CssRuleType.UNKNOWN,
        ]
        assert isinstance(sheet.rules[0], CssStyleRule)
        assert isinstance(sheet.rules[1], CssGroupingRule)
        assert isinstance(sheet.rules[2], CssImportRule)
        assert isinstance(sheet.rules[3], CssStatementRule)
        assert isinstance(sheet.rules[4], CssDescriptorRule)
        assert isinstance(sheet.rules[5], CssKeyframesRule)
        assert isinstance(sheet.rules[6], CssUnknownRule)

    def test_style_rule(self):
        rule = CssStyleSheet.parse("circle, rect { fill: red; stroke: blue }").rules[0]

        assert rule.selector_text == "circle, rect"
        assert rule.style.get_property_value("stroke") == "blue"
        assert rule.to_css() == "circle, rect { fill: red; stroke: blue }"

    def test_nested_grouping_rules(self):
        sheet = CssStyleSheet.parse("@media screen { @supports (display: grid) { a { color: red } } }")
        media = sheet.rules[0]
        supports = media.rules[0]

        assert supports.type == CssRuleType.SUPPORTS
        assert supports.condition_text == "(display: grid)"
        assert supports.rules[0].style.get_property_value("color") == "red"
        assert sheet.css_text == "@media screen { @supports (display: grid) { a { color: red } } }"

    def test_grouping_delete_rule(self):
        media = CssStyleSheet.parse("@media print { a { color: red } b { color: blue } }").rules[0]
        media.delete_rule(0)
        assert media.to_css() == "@media print { b { color: blue } }"

    def test_import_rule(self):
        rule = CssStyleSheet.parse("@import 'theme.css' print;").rules[0]

        assert rule.href == "theme.css"
        assert rule.media_text == "print"
        assert rule.to_css() == '@import url("theme.css") print;'

    def test_import_without_url(self):
        rule = CssStyleSheet.parse("@import foo;").rules[0]
        assert rule.href is None

    def test_keyframes(self):
        rule = CssStyleSheet.parse("@-webkit-keyframes spin { FROM { color: red } 50% { color: blue } }").rules[0]

        assert rule.at_keyword == "-webkit-keyframes"
        assert rule.name == "spin"
        assert rule.find_rule("from") is rule.rules[0]
        assert rule.delete_rule("50%") is True
        assert rule.delete_rule("75%") is False
        assert rule.to_css() == "@-webkit-keyframes spin { FROM { color: red } }"

    def test_empty_block_serialization(self):
        sheet = CssStyleSheet.parse("a { }")
        assert sheet.css_text == "a { }"

    def test_unclosed_block(self):
        sheet = CssStyleSheet.parse("a { color: red")
        assert sheet.rules[0].style.get_property_value("color") == "red"

    def test_rules_on_separate_lines(self):
        sheet = CssStyleSheet.parse("a{color:red}b{color:blue}")
        assert sheet.css_text == "a { color: red }\nb { color: blue }"

    def test_multiline_offsets(self):
        """Declarations after line breaks are sliced from the right place."""
        sheet = CssStyleSheet.parse("a {\r\n  color: red;\n  fill: url(x.png)\n}\n")
        style = sheet.rules[0].style

        assert style.get_property_value("color") == "red"
        assert style.get_property_value("fill") == "url(x.png)"

    def test_sheet_insert_and_delete(self):
        sheet = CssStyleSheet.parse("a { color: red }")
        sheet.insert_rule(CssStyleRule("b", CssStyleDeclaration.parse("color: blue")), 0)
        assert len(sheet) == 2
        sheet.delete_rule(1)
        assert sheet.css_text == "b { color: blue }"


@pytest.mark.unit
class TestCssRuleType:
    """Tests for rule kind conversion."""

    @pytest.mark.parametrize("name", ["font-face", "FONT_FACE", "@font-face", " Font-Face "])
    def test_coerce(self, name):
        assert CssRuleType.coerce(name) is CssRuleType.FONT_FACE

    def test_coerce_enum(self):
        assert CssRuleType.coerce(CssRuleType.MEDIA) is CssRuleType.MEDIA

    def test_coerce_unknown_name(self):
        with pytest.raises(ValueError):
            CssRuleType.coerce("bogus")
