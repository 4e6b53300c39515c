#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/constants.py
"""Constants and default allow-lists for the markupclean library.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Default Allow-lists - tag, attribute, CSS and scheme tables
3. Parser and Output Defaults
4. Configuration File Names

The default tables are immutable. :class:`~markupclean.options.SanitizerOptions`
copies them into per-instance sets so that changing one sanitizer's policy
never affects another.
"""

from __future__ import annotations

import re
from typing import Literal

# =============================================================================
# Type Definitions - All Literal Types and Type Aliases
# =============================================================================

HookTarget = Literal[
    "removing_tag",
    "removing_attribute",
    "removing_style",
    "removing_at_rule",
    "removing_comment",
    "removing_css_class",
    "filter_url",
    "post_process_node",
    "post_process_dom",
]

ParserFeatures = Literal["html.parser", "lxml", "html5lib", "xml", "lxml-xml"]

OutputFormatter = Literal["minimal", "html"]

# =============================================================================
# Default Allow-lists
# =============================================================================

DEFAULT_ALLOWED_TAGS: frozenset[str] = frozenset(
    {
        "svg",
        "altglyph",
        "altglyphdef",
        "altglyphitem",
        "animatecolor",
        "animatemotion",
        "animatetransform",
        "circle",
        "clippath",
        "defs",
        "desc",
        "ellipse",
        "filter",
        "font",
        "g",
        "glyph",
        "glyphref",
        "hkern",
        "image",
        "line",
        "lineargradient",
        "marker",
        "mask",
        "metadata",
        "mpath",
        "path",
        "pattern",
        "polygon",
        "polyline",
        "radialgradient",
        "rect",
        "stop",
        "switch",
        "symbol",
        "text",
        "textpath",
        "title",
        "tref",
        "tspan",
        "use",
        "view",
        "vkern",
    }
)

DEFAULT_ALLOWED_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "accent-height",
        "accumulate",
        "additive",
        "alignment-baseline",
        "ascent",
        "attributename",
        "attributetype",
        "azimuth",
        "basefrequency",
        "baseline-shift",
        "begin",
        "bias",
        "by",
        "class",
        "clip",
        "clippathunits",
        "clip-path",
        "clip-rule",
        "color",
        "color-interpolation",
        "color-interpolation-filters",
        "color-profile",
        "color-rendering",
        "cx",
        "cy",
        "d",
        "dx",
        "dy",
        "diffuseconstant",
        "direction",
        "display",
        "divisor",
        "dur",
        "edgemode",
        "elevation",
        "end",
        "fill",
        "fill-opacity",
        "fill-rule",
        "filter",
        "filterunits",
        "flood-color",
        "flood-opacity",
        "font-family",
        "font-size",
        "font-size-adjust",
        "font-stretch",
        "font-style",
        "font-variant",
        "font-weight",
        "fx",
        "fy",
        "g1",
        "g2",
        "glyph-name",
        "glyphref",
        "gradientunits",
        "gradienttransform",
        "height",
        "href",
        "id",
        "image-rendering",
        "in",
        "in2",
        "k",
        "k1",
        "k2",
        "k3",
        "k4",
        "kerning",
        "keypoints",
        "keysplines",
        "keytimes",
        "lang",
        "lengthadjust",
        "letter-spacing",
        "kernelmatrix",
        "kernelunitlength",
        "lighting-color",
        "local",
        "marker-end",
        "marker-mid",
        "marker-start",
        "markerheight",
        "markerunits",
        "markerwidth",
        "maskcontentunits",
        "maskunits",
        "max",
        "mask",
        "media",
        "method",
        "mode",
        "min",
        "name",
        "numoctaves",
        "offset",
        "operator",
        "opacity",
        "order",
        "orient",
        "orientation",
        "origin",
        "overflow",
        "paint-order",
        "path",
        "pathlength",
        "patterncontentunits",
        "patterntransform",
        "patternunits",
        "points",
        "preservealpha",
        "preserveaspectratio",
        "primitiveunits",
        "r",
        "rx",
        "ry",
        "radius",
        "refx",
        "refy",
        "repeatcount",
        "repeatdur",
        "restart",
        "result",
        "rotate",
        "scale",
        "seed",
        "shape-rendering",
        "specularconstant",
        "specularexponent",
        "spreadmethod",
        "startoffset",
        "stddeviation",
        "stitchtiles",
        "stop-color",
        "stop-opacity",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-miterlimit",
        "stroke-opacity",
        "stroke",
        "stroke-width",
        "style",
        "surfacescale",
        "systemlanguage",
        "tabindex",
        "targetx",
        "targety",
        "transform",
        "text-anchor",
        "text-decoration",
        "text-rendering",
        "textlength",
        "type",
        "u1",
        "u2",
        "unicode",
        "values",
        "viewbox",
        "visibility",
        "version",
        "vert-adv-y",
        "vert-origin-x",
        "vert-origin-y",
        "width",
        "word-spacing",
        "wrap",
        "writing-mode",
        "xchannelselector",
        "ychannelselector",
        "x",
        "x1",
        "x2",
        "xmlns",
        "y",
        "y1",
        "y2",
        "z",
        "zoomandpan",
    }
)

DEFAULT_URI_ATTRIBUTES: frozenset[str] = frozenset({"action", "background", "dynsrc", "href", "lowsrc", "src"})

# CSS3 properties <http://www.w3.org/TR/CSS/#properties>
DEFAULT_ALLOWED_CSS_PROPERTIES: frozenset[str] = frozenset(
    {
        "background",
        "background-attachment",
        "background-clip",
        "background-color",
        "background-image",
        "background-origin",
        "background-position",
        "background-position-x",
        "background-position-y",
        "background-repeat",
        "background-repeat-x",
        "background-repeat-y",
        "background-size",
        "border",
        "border-bottom",
        "border-bottom-color",
        "border-bottom-left-radius",
        "border-bottom-right-radius",
        "border-bottom-style",
        "border-bottom-width",
        "border-collapse",
        "border-color",
        "border-image",
        "border-image-outset",
        "border-image-repeat",
        "border-image-slice",
        "border-image-source",
        "border-image-width",
        "border-left",
        "border-left-color",
        "border-left-style",
        "border-left-width",
        "border-radius",
        "border-right",
        "border-right-color",
        "border-right-style",
        "border-right-width",
        "border-spacing",
        "border-style",
        "border-top",
        "border-top-color",
        "border-top-left-radius",
        "border-top-right-radius",
        "border-top-style",
        "border-top-width",
        "border-width",
        "bottom",
        "caption-side",
        "clear",
        "clip",
        "color",
        "content",
        "counter-increment",
        "counter-reset",
        "cursor",
        "direction",
        "display",
        "empty-cells",
        "float",
        "font",
        "font-family",
        "font-feature-settings",
        "font-kerning",
        "font-language-override",
        "font-size",
        "font-size-adjust",
        "font-stretch",
        "font-style",
        "font-synthesis",
        "font-variant",
        "font-variant-alternates",
        "font-variant-caps",
        "font-variant-east-asian",
        "font-variant-ligatures",
        "font-variant-numeric",
        "font-variant-position",
        "font-weight",
        "height",
        "left",
        "letter-spacing",
        "line-height",
        "list-style",
        "list-style-image",
        "list-style-position",
        "list-style-type",
        "margin",
        "margin-bottom",
        "margin-left",
        "margin-right",
        "margin-top",
        "max-height",
        "max-width",
        "min-height",
        "min-width",
        "opacity",
        "orphans",
        "outline",
        "outline-color",
        "outline-offset",
        "outline-style",
        "outline-width",
        "overflow",
        "overflow-wrap",
        "overflow-x",
        "overflow-y",
        "padding",
        "padding-bottom",
        "padding-left",
        "padding-right",
        "padding-top",
        "page-break-after",
        "page-break-before",
        "page-break-inside",
        "quotes",
        "right",
        "table-layout",
        "text-align",
        "text-decoration",
        "text-decoration-color",
        "text-decoration-line",
        "text-decoration-skip",
        "text-decoration-style",
        "text-indent",
        "text-transform",
        "top",
        "unicode-bidi",
        "vertical-align",
        "visibility",
        "white-space",
        "widows",
        "width",
        "word-spacing",
        "z-index",
        # SVG paint properties <https://www.w3.org/TR/SVG2/painting.html>
        "fill",
        "fill-opacity",
        "fill-rule",
        "stop-color",
        "stop-opacity",
        "stroke",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-miterlimit",
        "stroke-opacity",
        "stroke-width",
    }
)

DEFAULT_ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})

# Empty means every class token is allowed
DEFAULT_ALLOWED_CLASSES: frozenset[str] = frozenset()

# Names of CssRuleType members
DEFAULT_ALLOWED_AT_RULES: frozenset[str] = frozenset({"style", "namespace"})

DEFAULT_DISALLOWED_CSS_PROPERTY_VALUE: re.Pattern[str] = re.compile(r"[<>]")

# =============================================================================
# Parser and Output Defaults
# =============================================================================

DEFAULT_PARSER: ParserFeatures = "html.parser"

DEFAULT_FORMATTER: OutputFormatter = "minimal"

SUPPORTED_PARSERS: tuple[str, ...] = ("html.parser", "lxml", "html5lib", "xml", "lxml-xml")

SUPPORTED_FORMATTERS: tuple[str, ...] = ("minimal", "html")

# Packages that provide the optional tree builders
PARSER_PACKAGES: dict[str, str] = {
    "lxml": "lxml",
    "xml": "lxml",
    "lxml-xml": "lxml",
    "html5lib": "html5lib",
}

DATA_ATTRIBUTE_PREFIX = "data-"

# Attribute value substring that enables legacy JavaScript entity includes
SCRIPT_INCLUDE_MARKER = "&{"

# =============================================================================
# Configuration File Names
# =============================================================================

CONFIG_FILENAMES: tuple[str, ...] = (
    ".markupclean.toml",
    ".markupclean.yaml",
    ".markupclean.yml",
    ".markupclean.json",
)

PYPROJECT_SECTION = "markupclean"

CONFIG_ENV_VAR = "MARKUPCLEAN_CONFIG"
