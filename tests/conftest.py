"""Pytest configuration and shared fixtures for the markupclean test suite."""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from markupclean import HookManager, Sanitizer, SanitizerOptions

# Hypothesis profiles, selected with HYPOTHESIS_PROFILE
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Register the markers used across the suite."""
    config.addinivalue_line("markers", "unit: Single-module tests with no I/O")
    config.addinivalue_line("markers", "integration: Sanitizer runs over parsed trees")
    config.addinivalue_line("markers", "e2e: Public entry points and subprocess runs")
    config.addinivalue_line("markers", "security: Bypass and injection vector tests")
    config.addinivalue_line("markers", "fuzzing: Property-based tests with hypothesis")
    config.addinivalue_line("markers", "cli: Command line parsing and exit codes")


@pytest.fixture
def manager():
    """Empty hook manager, one per test."""
    return HookManager()


@pytest.fixture
def sanitizer(manager):
    """Sanitizer with default options, wired to the ``manager`` fixture."""
    return Sanitizer(SanitizerOptions(), manager)


@pytest.fixture
def recorder(manager):
    """Record every removal event, in order, as ``(target, event)`` pairs."""
    events = []

    def make_hook(target):
        def hook(event, context):
            events.append((target, event))

        return hook

    for target in (
        "removing_tag",
        "removing_attribute",
        "removing_style",
        "removing_at_rule",
        "removing_comment",
        "removing_css_class",
    ):
        manager.register_hook(target, make_hook(target))
    return events
