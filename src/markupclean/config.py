#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markupclean/config.py
"""Policy file discovery and loading.

A sanitizer policy lives either in a dedicated ``.markupclean`` file
(TOML, YAML or JSON) or in the ``[tool.markupclean]`` table of a project's
``pyproject.toml``. Whatever mapping is read here is handed unchanged to
:meth:`~markupclean.options.SanitizerOptions.from_dict`, which owns key
validation.

Examples
--------
A ``.markupclean.toml`` that allows inline formatting on top of the defaults:

    extend-allowed-tags = ["b", "i", "p"]
    allowed-schemes = ["http", "https", "mailto"]
    keep-child-nodes = true

"""

import argparse
import json
import logging
import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Type

import yaml

from markupclean.constants import CONFIG_FILENAMES, PYPROJECT_SECTION

logger = logging.getLogger(__name__)

# suffix -> (format label, text parser, error raised by that parser)
_FORMATS: Dict[str, Tuple[str, Callable[[str], Any], Type[Exception]]] = {
    ".toml": ("TOML", tomllib.loads, tomllib.TOMLDecodeError),
    ".json": ("JSON", json.loads, json.JSONDecodeError),
    ".yaml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".yml": ("YAML", yaml.safe_load, yaml.YAMLError),
}


def _read_mapping(path: Path, suffix: str) -> Dict[str, Any]:
    """Read ``path`` with the parser registered for ``suffix``.

    An empty document reads as an empty mapping; any other non-mapping
    top level is rejected.
    """
    label, parse, decode_error = _FORMATS[suffix]
    try:
        document = parse(path.read_text(encoding="utf-8"))
    except decode_error as e:
        raise argparse.ArgumentTypeError(f"{path} is not valid {label}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise argparse.ArgumentTypeError(f"Cannot read {label} policy {path}: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise argparse.ArgumentTypeError(
            f"{label} policy {path} must hold a mapping at the top level, not {type(document).__name__}"
        )
    return document


def _pyproject_table(pyproject: Path) -> Dict[str, Any]:
    """Return the ``[tool.markupclean]`` table of ``pyproject``, or ``{}`` when it has none."""
    table = _read_mapping(pyproject, ".toml").get("tool", {}).get(PYPROJECT_SECTION)
    if table is None:
        return {}
    if not isinstance(table, dict):
        raise argparse.ArgumentTypeError(
            f"{pyproject}: tool.{PYPROJECT_SECTION} must be a table, not {type(table).__name__}"
        )
    return table


def _candidates(directory: Path) -> Iterator[Path]:
    return (directory / name for name in CONFIG_FILENAMES)


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Walk from ``start_dir`` (default: cwd) towards the root looking for a policy.

    In each directory the dedicated files are tried in
    :data:`~markupclean.constants.CONFIG_FILENAMES` order, then a
    ``pyproject.toml`` that actually carries a ``[tool.markupclean]`` table.
    Unreadable ``pyproject.toml`` files are skipped.

    Returns
    -------
    Path or None
        The first policy found, or None

    """
    start = (start_dir or Path.cwd()).resolve()

    for directory in (start, *start.parents):
        found = next((path for path in _candidates(directory) if path.is_file()), None)
        if found is not None:
            return found

        pyproject = directory / "pyproject.toml"
        if not pyproject.is_file():
            continue
        try:
            has_table = bool(_pyproject_table(pyproject))
        except argparse.ArgumentTypeError as e:
            logger.debug(f"Ignoring {pyproject}: {e}")
            continue
        if has_table:
            return pyproject

    return None


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a policy above ``start_dir``, falling back to the home directory."""
    found = find_config_in_parents(start_dir)
    if found is None:
        found = next((path for path in _candidates(Path.home()) if path.is_file()), None)
    return found


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Read a policy file into a plain mapping.

    Parameters
    ----------
    config_path : Path or str
        A ``.toml``, ``.yaml``, ``.yml`` or ``.json`` file, or a
        ``pyproject.toml``

    Returns
    -------
    dict
        The policy mapping; empty for an empty file or a ``pyproject.toml``
        without a ``[tool.markupclean]`` table

    Raises
    ------
    argparse.ArgumentTypeError
        If the path is missing, is not a regular file, has an unknown
        suffix, or does not parse to a mapping

    """
    path = Path(config_path)

    if not path.exists():
        raise argparse.ArgumentTypeError(f"Policy file does not exist: {path}")
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"Policy path is not a file: {path}")

    if path.name.lower() == "pyproject.toml":
        return _pyproject_table(path)

    suffix = path.suffix.lower()
    if suffix not in _FORMATS:
        known = ", ".join(sorted(_FORMATS))
        raise argparse.ArgumentTypeError(f"Unsupported policy format {suffix!r} for {path} (expected one of {known})")
    return _read_mapping(path, suffix)


def load_config_with_priority(
    explicit_path: Optional[str] = None, env_var_path: Optional[str] = None
) -> Dict[str, Any]:
    """Load the policy that applies to this run.

    The first of these wins: ``explicit_path`` (``--config``),
    ``env_var_path`` (``MARKUPCLEAN_CONFIG``), then whatever
    :func:`discover_config_file` finds. Nothing found means an empty policy.

    Raises
    ------
    argparse.ArgumentTypeError
        If the chosen file cannot be loaded

    """
    for given in (explicit_path, env_var_path):
        if given:
            return load_config_file(given)

    discovered = discover_config_file()
    if discovered is None:
        return {}
    logger.debug(f"Using policy file {discovered}")
    return load_config_file(discovered)


__all__ = [
    "find_config_in_parents",
    "discover_config_file",
    "load_config_file",
    "load_config_with_priority",
]
