#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/cli.py
"""Command-line interface for the markupclean sanitizer.

Examples
--------
Sanitize a fragment from stdin::

    $ echo '<svg><script>alert(1)</script></svg>' | markupclean
    <svg></svg>

Sanitize a full document, resolving relative links::

    $ markupclean page.html --document --base-url https://example.com/ -o clean.html

Extend the default allow-lists and report every removal::

    $ markupclean input.html --allow-tag p --allow-tag b --allow-scheme mailto --report

Configuration files (``.markupclean.toml``, ``.markupclean.yaml``,
``.markupclean.json`` or ``[tool.markupclean]`` in ``pyproject.toml``) are
discovered from the current directory upwards, or named with ``--config`` or
the ``MARKUPCLEAN_CONFIG`` environment variable.

"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from markupclean import __version__
from markupclean.config import load_config_with_priority
from markupclean.constants import CONFIG_ENV_VAR, SUPPORTED_PARSERS
from markupclean.exceptions import DependencyError, ValidationError
from markupclean.hooks import HookContext, HookManager
from markupclean.logging_utils import configure_logging
from markupclean.options import SanitizerOptions
from markupclean.sanitizer import Sanitizer

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_DEPENDENCY_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4

# CLI flag destination -> options field it extends
ALLOW_FLAGS: dict[str, str] = {
    "allow_tag": "allowed_tags",
    "allow_attribute": "allowed_attributes",
    "allow_scheme": "allowed_schemes",
    "allow_css_property": "allowed_css_properties",
    "allow_class": "allowed_classes",
    "allow_at_rule": "allowed_at_rules",
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ``markupclean`` command."""
    parser = argparse.ArgumentParser(
        prog="markupclean",
        description="Remove unsafe elements, attributes, URLs and CSS from untrusted HTML or SVG.",
    )
    parser.add_argument("input", nargs="?", default="-", help="Input file, or '-' for stdin (default)")
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    group = parser.add_argument_group("sanitizing")
    group.add_argument(
        "--document", action="store_true", help="Treat the input as a full document instead of a fragment"
    )
    group.add_argument("--base-url", default="", help="Resolve relative URLs against this absolute URL")
    group.add_argument("--parser", choices=SUPPORTED_PARSERS, help="BeautifulSoup tree builder")
    group.add_argument(
        "--allow-data-attributes", action="store_true", default=None, help="Keep every data-* attribute"
    )
    group.add_argument(
        "--keep-child-nodes", action="store_true", default=None, help="Keep the children of removed elements"
    )

    allow = parser.add_argument_group("allow-lists (repeatable, added to the configured sets)")
    allow.add_argument("--allow-tag", action="append", default=[], metavar="NAME", help="Allow an element")
    allow.add_argument("--allow-attribute", action="append", default=[], metavar="NAME", help="Allow an attribute")
    allow.add_argument("--allow-scheme", action="append", default=[], metavar="SCHEME", help="Allow a URL scheme")
    allow.add_argument(
        "--allow-css-property", action="append", default=[], metavar="NAME", help="Allow a CSS property"
    )
    allow.add_argument(
        "--allow-class",
        action="append",
        default=[],
        metavar="NAME",
        help="Allow a class token (any --allow-class restricts classes)",
    )
    allow.add_argument(
        "--allow-at-rule",
        action="append",
        default=[],
        metavar="KIND",
        help="Allow a stylesheet rule kind (media, keyframes, font-face...)",
    )

    conf = parser.add_argument_group("configuration and logging")
    conf.add_argument("--config", help=f"Configuration file (default: discovered, or ${CONFIG_ENV_VAR})")
    conf.add_argument("--no-config", action="store_true", help="Ignore configuration files")
    conf.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    conf.add_argument("--log-file", help="Also write log output to this file")
    conf.add_argument("--trace", action="store_true", help="Debug logging with timestamps and logger names")
    conf.add_argument("--report", action="store_true", help="Log every removal at INFO level")
    return parser


def _configure_cli_logging(parsed_args: argparse.Namespace) -> None:
    level = logging.DEBUG if parsed_args.trace else logging.getLevelName(parsed_args.log_level.upper())
    if parsed_args.report:
        # removal reports are INFO records
        level = min(level, logging.INFO)

    configure_logging(level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def build_options(parsed_args: argparse.Namespace, config: dict[str, Any]) -> SanitizerOptions:
    """Combine configuration file data and command-line flags into options.

    Raises
    ------
    ValidationError
        If the configuration or a flag value is invalid

    """
    options = SanitizerOptions.from_dict(config)
    updates: dict[str, Any] = {}

    for flag, field_name in ALLOW_FLAGS.items():
        extra = getattr(parsed_args, flag)
        if extra:
            updates[field_name] = list(getattr(options, field_name)) + list(extra)

    if parsed_args.parser:
        updates["parser"] = parsed_args.parser
    if parsed_args.allow_data_attributes:
        updates["allow_data_attributes"] = True
    if parsed_args.keep_child_nodes:
        updates["keep_child_nodes"] = True

    return options.create_updated(**updates) if updates else options


def _describe(event: Any) -> str:
    tag = getattr(event, "tag", None)
    where = f" from <{tag.name}>" if tag is not None else ""
    if hasattr(event, "attribute"):
        return f"attribute {event.attribute!r}{where} ({event.reason.value})"
    if hasattr(event, "style"):
        return f"CSS property {event.style.name!r}{where} ({event.reason.value})"
    if hasattr(event, "css_class"):
        return f"class {event.css_class!r}{where}"
    if hasattr(event, "rule"):
        return f"CSS {event.rule.type.value} rule{where}"
    if hasattr(event, "comment"):
        return "comment"
    return f"<{tag.name}> ({event.reason.value})" if tag is not None else type(event).__name__


def create_report_hooks() -> HookManager:
    """Create a hook manager that logs every removal at INFO level."""
    report_logger = logging.getLogger("markupclean.report")

    def report(event: Any, context: HookContext) -> None:
        if event.cancel:
            return
        report_logger.info(f"Removed {_describe(event)}")

    manager = HookManager()
    for target in (
        "removing_tag",
        "removing_attribute",
        "removing_style",
        "removing_at_rule",
        "removing_comment",
        "removing_css_class",
    ):
        # Runs after every other hook so cancelled removals are skipped
        manager.register_hook(target, report, priority=1000)
    return manager


def _read_input(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def _write_output(path: Optional[str], text: str) -> None:
    if path:
        Path(path).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")


def main(args: list[str] | None = None) -> int:
    """Run the ``markupclean`` command and return its exit code."""
    parsed_args = create_parser().parse_args(args)

    _configure_cli_logging(parsed_args)

    try:
        if parsed_args.no_config:
            config: dict[str, Any] = {}
        else:
            config = load_config_with_priority(parsed_args.config, os.environ.get(CONFIG_ENV_VAR))
        options = build_options(parsed_args, config)
    except (argparse.ArgumentTypeError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    hooks = create_report_hooks() if parsed_args.report else None
    sanitizer = Sanitizer(options, hooks)

    try:
        markup = _read_input(parsed_args.input)
    except OSError as e:
        print(f"Error: Cannot read {parsed_args.input}: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    try:
        if parsed_args.document:
            result = sanitizer.sanitize_document(markup, base_url=parsed_args.base_url)
        else:
            result = sanitizer.sanitize(markup, base_url=parsed_args.base_url)
    except DependencyError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DEPENDENCY_ERROR
    except Exception as e:
        logger.debug("Sanitizing failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        _write_output(parsed_args.output, result)
    except OSError as e:
        print(f"Error: Cannot write {parsed_args.output}: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    return EXIT_SUCCESS


__all__ = ["main", "create_parser", "build_options", "create_report_hooks"]
