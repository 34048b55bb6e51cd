"""
Root conftest.py for pytest configuration

This file handles:
1. Automatic marker inheritance based on test location
2. Marker validation and reporting on request
"""
import pytest

from tests.markers import DOMAIN_MARKERS, MarkerValidator, apply_auto_markers, generate_marker_report


def pytest_collection_modifyitems(config, items):
    """Apply automatic markers based on test location"""
    for item in items:
        apply_auto_markers(item)


def pytest_configure(config):
    """Register domain markers dynamically."""
    for marker_name, description in DOMAIN_MARKERS.items():
        config.addinivalue_line("markers", f"{marker_name}: {description}")


def pytest_collection_finish(session):
    """Store items for the end-of-session marker report."""
    if hasattr(session, "items"):
        session.all_items = list(session.items)


def pytest_sessionfinish(session, exitstatus):
    """Print the marker report and fail on marker errors when requested."""
    items = getattr(session, "all_items", None) or getattr(session, "items", [])

    show_report = session.config.getoption("--show-marker-report", default=False)
    validate_markers = session.config.getoption("--validate-markers", default=False)

    if not (show_report or validate_markers) or not items:
        return

    print("\n" + generate_marker_report(items))

    if validate_markers:
        validator = MarkerValidator()
        has_errors = any(validator.validate_item(item)[0] for item in items)
        if has_errors and exitstatus == 0:
            session.exitstatus = 1


def pytest_addoption(parser):
    """
    Add custom command line options.
    """
    parser.addoption(
        "--validate-markers",
        action="store_true",
        default=False,
        help="Validate that all tests have appropriate markers",
    )
    parser.addoption(
        "--show-marker-report",
        action="store_true",
        default=False,
        help="Show marker usage report at the end of test run",
    )
