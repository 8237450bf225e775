"""Tests for deploy config parsing and the L1 address registry."""

import json

import pytest
from eth_utils import to_wei

from l2genesis.common.addresses import ZERO_ADDRESS
from l2genesis.common.config import (
    DeployConfig,
    L1Dependencies,
    WithdrawalNetwork,
    load_deploy_config,
    parse_bool,
    parse_int,
    parse_withdrawal_network,
)
from l2genesis.common.errors import GenesisError, MissingDependencyError
from l2genesis.contracts.registry import AddressRegistry

from tests.fixtures.config import (
    DEV_ACCOUNTS,
    L1_DEPLOYMENTS,
    L1_STANDARD_BRIDGE_PROXY,
    PROXY_ADMIN_OWNER,
    SEQUENCER_FEE_VAULT_RECIPIENT,
    deploy_config_json,
    make_deploy_config,
)


class TestDeployConfig:
    def test_from_json(self):
        config = make_deploy_config()
        assert config.l1_chain_id == 900
        assert config.l2_chain_id == 901
        assert config.proxy_admin_owner == PROXY_ADMIN_OWNER
        assert config.sequencer_fee_vault.recipient == SEQUENCER_FEE_VAULT_RECIPIENT
        assert config.sequencer_fee_vault.minimum_withdrawal_amount == to_wei(10, "ether")
        assert config.base_fee_vault.withdrawal_network == WithdrawalNetwork.L2
        assert config.dev_accounts == DEV_ACCOUNTS
        assert not config.enable_governance
        assert not config.fund_dev_accounts

    def test_defaults(self):
        config = DeployConfig.from_json({})
        assert config.proxy_admin_owner == ZERO_ADDRESS
        assert config.dev_account_fund_amount == to_wei(10_000, "ether")
        assert config.dev_accounts == []
        assert config.l1_fee_vault.withdrawal_network == WithdrawalNetwork.L1

    def test_checksum_address(self):
        config = DeployConfig.from_json(
            {"proxyAdminOwner": "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"}
        )
        assert config.proxy_admin_owner == DEV_ACCOUNTS[0]

    def test_invalid_address(self):
        with pytest.raises(GenesisError, match="proxyAdminOwner"):
            DeployConfig.from_json({"proxyAdminOwner": "0x1234"})

    def test_fund_amount(self):
        config = make_deploy_config(fundDevAccounts=True, devAccountFundAmount="0x3e8")
        assert config.fund_dev_accounts
        assert config.dev_account_fund_amount == 1000

    def test_load(self, tmp_path):
        (tmp_path / "devnetL1.json").write_text(json.dumps(deploy_config_json(l2ChainID=42)))
        config = load_deploy_config(tmp_path, "devnetL1")
        assert config.l2_chain_id == 42

    def test_load_missing(self, tmp_path):
        with pytest.raises(MissingDependencyError, match="mainnet.json"):
            load_deploy_config(tmp_path, "mainnet")

    def test_load_invalid_json(self, tmp_path):
        (tmp_path / "devnetL1.json").write_text("{\"l1ChainID\": ")
        with pytest.raises(GenesisError, match="Invalid deploy config JSON"):
            load_deploy_config(tmp_path, "devnetL1")

    def test_string_flag_rejected(self):
        with pytest.raises(GenesisError, match="enableGovernance"):
            make_deploy_config(enableGovernance="false")
        with pytest.raises(GenesisError, match="fundDevAccounts"):
            make_deploy_config(fundDevAccounts=1)

    def test_negative_withdrawal_amount(self):
        with pytest.raises(GenesisError, match="non-negative"):
            make_deploy_config(sequencerFeeVaultMinimumWithdrawalAmount="-1")


class TestParsing:
    def test_parse_int(self):
        assert parse_int(5) == 5
        assert parse_int("10") == 10
        assert parse_int("0x10") == 16
        with pytest.raises(GenesisError):
            parse_int(True)
        with pytest.raises(GenesisError):
            parse_int("")
        with pytest.raises(GenesisError, match="lots"):
            parse_int("lots")
        with pytest.raises(GenesisError):
            parse_int(-1)
        with pytest.raises(GenesisError):
            parse_int(1.5)

    def test_parse_bool(self):
        assert parse_bool(True, "flag") is True
        assert parse_bool(False, "flag") is False
        with pytest.raises(GenesisError, match="flag"):
            parse_bool("true", "flag")
        with pytest.raises(GenesisError):
            parse_bool(None, "flag")

    def test_withdrawal_network(self):
        assert parse_withdrawal_network(0) == WithdrawalNetwork.L1
        assert parse_withdrawal_network("1") == WithdrawalNetwork.L2
        assert parse_withdrawal_network("l2") == WithdrawalNetwork.L2
        with pytest.raises(GenesisError):
            parse_withdrawal_network(2)
        with pytest.raises(GenesisError):
            parse_withdrawal_network("l3")


class TestAddressRegistry:
    def test_from_json(self):
        registry = AddressRegistry.from_json(L1_DEPLOYMENTS)
        assert len(registry) == 4
        assert "L1StandardBridgeProxy" in registry
        assert registry.must_get("L1StandardBridgeProxy") == L1_STANDARD_BRIDGE_PROXY
        assert registry.get("SystemConfigProxy") is None

    def test_must_get_missing(self):
        registry = AddressRegistry({})
        with pytest.raises(MissingDependencyError, match="L1StandardBridgeProxy"):
            registry.must_get("L1StandardBridgeProxy")

    def test_invalid_address(self):
        with pytest.raises(GenesisError):
            AddressRegistry.from_json({"L1StandardBridgeProxy": "0xzz"})

    def test_from_file(self, tmp_path):
        path = tmp_path / "l1.json"
        path.write_text(json.dumps(L1_DEPLOYMENTS))
        assert len(AddressRegistry.from_file(path)) == 4

    def test_from_file_invalid_json(self, tmp_path):
        path = tmp_path / "l1.json"
        path.write_text("not json")
        with pytest.raises(GenesisError, match="Invalid L1 deployments JSON"):
            AddressRegistry.from_file(path)

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(MissingDependencyError):
            AddressRegistry.from_file(tmp_path / "l1.json")


class TestL1Dependencies:
    def test_from_registry(self):
        deps = L1Dependencies.from_registry(AddressRegistry.from_json(L1_DEPLOYMENTS))
        assert deps.l1_standard_bridge_proxy == L1_STANDARD_BRIDGE_PROXY

    def test_missing_dependency(self):
        data = dict(L1_DEPLOYMENTS)
        del data["L1ERC721BridgeProxy"]
        with pytest.raises(MissingDependencyError, match="L1ERC721BridgeProxy"):
            L1Dependencies.from_registry(AddressRegistry.from_json(data))
