"""
Shared pytest fixtures for paramchain tests.
"""

import pytest

from paramchain.config import settings


@pytest.fixture(autouse=True)
def restore_settings():
    """Tests may flip settings; put them back afterwards."""
    saved = (
        settings.log_validation_errors,
        settings.default_required,
        settings.chain_name_in_error,
    )
    yield settings
    (
        settings.log_validation_errors,
        settings.default_required,
        settings.chain_name_in_error,
    ) = saved


@pytest.fixture
def user_declarations():
    """A small contract used across validator tests."""
    return [
        ("name", {"type": "string", "length": {"min": 1, "max": 20}}),
        ("age", {"type": "integer", "numericality": {"gte": 18, "lt": 130}}),
        ("role", {"in": ["admin", "user"], "default": "user"}),
    ]
