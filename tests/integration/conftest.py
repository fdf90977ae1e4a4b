"""Integration test configuration: auto-skip when the LLM is unavailable."""

import os

import pytest


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: marks tests requiring a live LLM"
        " (deselect with '-m \"not integration\"')",
    )


def pytest_collection_modifyitems(config, items):
    """Auto-skip integration tests unless HEALTHDESK_INTEGRATION=1."""
    if os.environ.get("HEALTHDESK_INTEGRATION") == "1":
        return
    skip_integration = pytest.mark.skip(
        reason="Set HEALTHDESK_INTEGRATION=1 to run integration tests"
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)
