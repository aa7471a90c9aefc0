"""
Pytest configuration and shared fixtures for hook tests
"""

import pytest

from crisphooks import CrispHooks, HooksConfig
from crisphooks.core import env as env_module
from crisphooks.core.config import reset_config
from crisphooks.core.logger import set_logger

# ============================================
# AUTO-USE FIXTURES
# ============================================


@pytest.fixture(autouse=True)
def isolated_globals():
    """
    Reset process-wide state around every test.

    The global config, the global env manager and any custom logger would
    otherwise leak from one test into the next.
    """
    reset_config()
    env_module._global_env = None
    set_logger(None)

    yield

    reset_config()
    env_module._global_env = None
    set_logger(None)


# ============================================
# HOOK FIXTURES
# ============================================


@pytest.fixture
def quiet_config():
    """Config without built-in listeners."""
    return HooksConfig(logging=False, metrics=False)


@pytest.fixture
def hooks(quiet_config):
    """Fresh container with no listeners."""
    return CrispHooks(config=quiet_config)


@pytest.fixture
def calls():
    """Shared list handlers append to, to observe execution order."""
    return []
