#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Errors raised by markupclean.

Hostile input is never an error: anything unsafe in the markup or CSS is
removed and reported through hooks. Exceptions are reserved for a caller
who asked for something impossible.

Exception Hierarchy
-------------------
- MarkupCleanError

  - ValidationError (bad option values, unknown policy keys)

  - DependencyError (the chosen tree builder is not installed)

"""

from typing import Any


class MarkupCleanError(Exception):
    """Root of every markupclean exception.

    Parameters
    ----------
    message : str
        What went wrong
    original_error : Exception, optional
        Lower-level exception this one was raised from

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(MarkupCleanError):
    """An option or policy value was rejected.

    Raised for string values where a name collection is expected, unknown
    at-rule kinds, uncompilable disallowed-value patterns, unknown parser
    or formatter names and unknown policy keys.

    Attributes
    ----------
    parameter_name : str or None
        Option the bad value was given for
    parameter_value : Any
        The rejected value itself

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class DependencyError(MarkupCleanError):
    """The requested BeautifulSoup tree builder cannot be loaded.

    Parameters
    ----------
    feature : str
        Builder name as passed to BeautifulSoup, e.g. ``"lxml"``
    missing_packages : list[str]
        Distributions providing that builder
    install_command : str, optional
        Hint shown to the user; derived from ``missing_packages`` when empty
    original_error : Exception, optional
        The ``FeatureNotFound`` raised by BeautifulSoup

    """

    def __init__(
        self,
        feature: str,
        missing_packages: list[str],
        install_command: str = "",
        original_error: Exception | None = None,
    ):
        if missing_packages and not install_command:
            install_command = f"pip install {' '.join(missing_packages)}"

        message = f"The '{feature}' tree builder is not available"
        if missing_packages:
            message += f" (needs {', '.join(missing_packages)})"
        if install_command:
            message += f"; try: {install_command}"

        super().__init__(message, original_error=original_error)
        self.feature = feature
        self.missing_packages = missing_packages
        self.install_command = install_command


__all__ = [
    "MarkupCleanError",
    "ValidationError",
    "DependencyError",
]
