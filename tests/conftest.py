"""
Root conftest.py — sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without a SQL Server instance or an ODBC driver.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'config', 'services', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables to prevent import crashes.

    Connection settings are read lazily, but a deterministic default keeps
    AppConfig.from_environment() independent of the developer's shell.
    """
    defaults = {
        "FRK_SQL_SERVER": "localhost",
        "FRK_SQL_TIMEOUT": "5",
        "LOG_LEVEL": "INFO",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture
def clock():
    from tests.fakes import FakeClock
    return FakeClock()


@pytest.fixture
def server(clock):
    """Fresh in-memory SQL Server with the 'svc_frk' login."""
    from tests.fakes import FakeSqlServer
    return FakeSqlServer(principals=("svc_frk",), clock=clock)


@pytest.fixture
def raw_config():
    from tests.factories.config_factories import make_raw_config
    return make_raw_config()


@pytest.fixture
def frk_config(raw_config):
    from config import load_config
    return load_config(raw_config, lambda principal: True)
