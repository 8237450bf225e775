"""
Deploy configuration and layer-1 dependencies.

DeployConfig carries the values the genesis build reads (fee vault
recipients, governance switch, dev-account funding, ...). It is loaded from a
named deploy-config JSON file and passed explicitly to every component.
L1Dependencies holds the layer-1 contract addresses the layer-2 predeploys
are initialized with.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Optional

from eth_utils import is_hex_address, to_canonical_address, to_wei

from l2genesis.common.addresses import ZERO_ADDRESS
from l2genesis.common.errors import GenesisError, MissingDependencyError
from l2genesis.contracts.registry import AddressRegistry


DEFAULT_DEV_ACCOUNT_FUND_AMOUNT = to_wei(10_000, "ether")


class WithdrawalNetwork(IntEnum):
    """FeeVault.WithdrawalNetwork"""
    L1 = 0
    L2 = 1


# ---------------------------------------------------------------------------
# Deploy config
# ---------------------------------------------------------------------------

@dataclass
class FeeVaultConfig:
    recipient: bytes = field(default_factory=lambda: ZERO_ADDRESS)
    minimum_withdrawal_amount: int = 0
    withdrawal_network: WithdrawalNetwork = WithdrawalNetwork.L1


@dataclass
class DeployConfig:
    l1_chain_id: int = 900
    l2_chain_id: int = 901
    proxy_admin_owner: bytes = field(default_factory=lambda: ZERO_ADDRESS)

    sequencer_fee_vault: FeeVaultConfig = field(default_factory=FeeVaultConfig)
    base_fee_vault: FeeVaultConfig = field(default_factory=FeeVaultConfig)
    l1_fee_vault: FeeVaultConfig = field(default_factory=FeeVaultConfig)

    # Governance
    enable_governance: bool = False
    governance_token_owner: bytes = field(default_factory=lambda: ZERO_ADDRESS)

    # Dev accounts
    fund_dev_accounts: bool = False
    dev_account_fund_amount: int = DEFAULT_DEV_ACCOUNT_FUND_AMOUNT
    dev_accounts: list[bytes] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict) -> DeployConfig:
        """Parse a deploy-config JSON object (camelCase keys)."""

        def fee_vault(prefix: str) -> FeeVaultConfig:
            return FeeVaultConfig(
                recipient=parse_address(data.get(f"{prefix}Recipient"), f"{prefix}Recipient"),
                minimum_withdrawal_amount=parse_int(
                    data.get(f"{prefix}MinimumWithdrawalAmount", 0)
                ),
                withdrawal_network=parse_withdrawal_network(
                    data.get(f"{prefix}WithdrawalNetwork", 0)
                ),
            )

        dev_accounts = [
            parse_address(addr, "devAccounts") for addr in data.get("devAccounts", [])
        ]

        return cls(
            l1_chain_id=parse_int(data.get("l1ChainID", 900)),
            l2_chain_id=parse_int(data.get("l2ChainID", 901)),
            proxy_admin_owner=parse_address(data.get("proxyAdminOwner"), "proxyAdminOwner"),
            sequencer_fee_vault=fee_vault("sequencerFeeVault"),
            base_fee_vault=fee_vault("baseFeeVault"),
            l1_fee_vault=fee_vault("l1FeeVault"),
            enable_governance=parse_bool(data.get("enableGovernance", False), "enableGovernance"),
            governance_token_owner=parse_address(
                data.get("governanceTokenOwner"), "governanceTokenOwner"
            ),
            fund_dev_accounts=parse_bool(data.get("fundDevAccounts", False), "fundDevAccounts"),
            dev_account_fund_amount=parse_int(
                data.get("devAccountFundAmount", DEFAULT_DEV_ACCOUNT_FUND_AMOUNT)
            ),
            dev_accounts=dev_accounts,
        )


def parse_int(val: str | int) -> int:
    """Parse a non-negative decimal or 0x-prefixed integer."""
    if isinstance(val, bool):
        raise GenesisError(f"Expected an integer, got {val!r}")
    if isinstance(val, str) and val:
        try:
            val = int(val, 0)
        except ValueError:
            raise GenesisError(f"Expected an integer, got {val!r}") from None
    if not isinstance(val, int):
        raise GenesisError(f"Expected an integer, got {val!r}")
    if val < 0:
        raise GenesisError(f"Expected a non-negative integer, got {val}")
    return val


def parse_bool(val: bool, key: str) -> bool:
    if not isinstance(val, bool):
        raise GenesisError(f"Expected true or false for {key}, got {val!r}")
    return val


def parse_address(val: Optional[str], key: str) -> bytes:
    if val is None:
        return ZERO_ADDRESS
    if not isinstance(val, str) or not is_hex_address(val):
        raise GenesisError(f"Invalid address for {key}: {val!r}")
    return to_canonical_address(val)


def parse_withdrawal_network(val: str | int) -> WithdrawalNetwork:
    if isinstance(val, str) and not val.startswith("0x") and not val.isdigit():
        try:
            return WithdrawalNetwork[val.upper()]
        except KeyError:
            raise GenesisError(f"Unknown withdrawal network: {val!r}") from None
    try:
        return WithdrawalNetwork(parse_int(val))
    except ValueError:
        raise GenesisError(f"Unknown withdrawal network: {val!r}") from None


def load_deploy_config(directory: str | Path, context: str) -> DeployConfig:
    """Load <directory>/<context>.json."""
    path = Path(directory) / f"{context}.json"
    if not path.exists():
        raise MissingDependencyError(f"Deploy config not found: {path}")
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise GenesisError(f"Invalid deploy config JSON {path}: {e}") from e
    return DeployConfig.from_json(data)


# ---------------------------------------------------------------------------
# Layer-1 dependencies
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class L1Dependencies:
    l1_cross_domain_messenger_proxy: bytes
    l1_standard_bridge_proxy: bytes
    l1_erc721_bridge_proxy: bytes

    @classmethod
    def from_registry(cls, registry: AddressRegistry) -> L1Dependencies:
        return cls(
            l1_cross_domain_messenger_proxy=registry.must_get("L1CrossDomainMessengerProxy"),
            l1_standard_bridge_proxy=registry.must_get("L1StandardBridgeProxy"),
            l1_erc721_bridge_proxy=registry.must_get("L1ERC721BridgeProxy"),
        )
