"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.core.cache import cache


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test so rate-limit counters don't leak between tests.
    """
    yield  # Run the test
    cache.clear()


@pytest.fixture(autouse=True)
def reset_app_settings():
    """
    Drop the cached payment policy after each test so ``settings`` overrides
    in one test never leak into the next.
    """
    from core_backend.config import app_settings

    yield
    app_settings.reload()


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================

from core_backend.tests.fixtures import *  # noqa: E402,F401,F403
