"""Pytest configuration and shared fixtures for all tests."""

import pytest

from l2genesis.genesis.context import BuildContext
from l2genesis.genesis.proxies import set_predeploy_proxies
from l2genesis.storage.memory_backend import MemoryBackend

from tests.fixtures.artifacts import make_code_provider
from tests.fixtures.config import make_deploy_config, make_l1_dependencies


# =============================================================================
# Inputs
# =============================================================================

@pytest.fixture
def code_provider():
    """Artifacts for Proxy and every predeploy."""
    return make_code_provider()


@pytest.fixture
def deploy_config():
    """Governance and dev-account funding disabled."""
    return make_deploy_config()


@pytest.fixture
def l1_deps():
    return make_l1_dependencies()


@pytest.fixture
def build_context(deploy_config, l1_deps, code_provider):
    return BuildContext(config=deploy_config, l1=l1_deps, code=code_provider)


# =============================================================================
# State
# =============================================================================

@pytest.fixture
def store():
    """Empty ledger."""
    return MemoryBackend()


@pytest.fixture
def proxied_store(store, code_provider):
    """Ledger with the predeploy proxies installed."""
    set_predeploy_proxies(store, code_provider)
    return store
