"""Test fixtures for the genesis builder tests."""

from .artifacts import (
    CONTRACT_NAMES,
    artifact_json,
    deployed_code,
    immutable_offset,
    make_artifact,
    make_code_provider,
    write_artifacts,
)
from .config import (
    DEV_ACCOUNTS,
    GOVERNANCE_TOKEN_OWNER,
    L1_DEPLOYMENTS,
    PROXY_ADMIN_OWNER,
    deploy_config_json,
    make_deploy_config,
    make_l1_dependencies,
)

__all__ = [
    # Artifacts
    "CONTRACT_NAMES",
    "artifact_json",
    "deployed_code",
    "immutable_offset",
    "make_artifact",
    "make_code_provider",
    "write_artifacts",
    # Config
    "DEV_ACCOUNTS",
    "GOVERNANCE_TOKEN_OWNER",
    "L1_DEPLOYMENTS",
    "PROXY_ADMIN_OWNER",
    "deploy_config_json",
    "make_deploy_config",
    "make_l1_dependencies",
]
