"""
Predeploy table.

Every predeploy the genesis places is declared here with its deployment
strategy:

  DIRECT_INJECTION              no constructor effects, no immutables
  CONSTRUCTOR_WITH_IMMUTABLES   immutables are baked in by the constructor
  CONSTRUCT_COPY_ERASE          unproxied, storage patched after the copy

Legacy slots 0x01, 0x03-0x05, 0x08-0x0e and 0x1b-0x1f only receive a proxy.
"""

from __future__ import annotations

from l2genesis.common import addresses as predeploys
from l2genesis.common.addresses import DEFAULT_L2_SENDER, PREDEPLOY_NAMES
from l2genesis.common.crypto import keccak256
from l2genesis.common.types import (
    CallContext,
    Constructor,
    DeployStrategy,
    Initializer,
    PredeployDescriptor,
    StoragePatch,
)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def _fee_vault(vault: str) -> Constructor:
    def cfg(ctx: CallContext):
        return getattr(ctx.config, vault)

    return Constructor(immutables={
        "RECIPIENT": lambda ctx: cfg(ctx).recipient,
        "MIN_WITHDRAWAL_AMOUNT": lambda ctx: cfg(ctx).minimum_withdrawal_amount,
        "WITHDRAWAL_NETWORK": lambda ctx: int(cfg(ctx).withdrawal_network),
    })


EIP712_TYPE_HASH = keccak256(
    b"EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
EAS_NAME = b"EAS"
EAS_VERSION = b"1.3.0"


def eip712_domain_separator(name: bytes, version: bytes, chain_id: int, this: bytes) -> bytes:
    return keccak256(
        EIP712_TYPE_HASH
        + keccak256(name)
        + keccak256(version)
        + chain_id.to_bytes(32, "big")
        + this.rjust(32, b"\x00")
    )


# EIP712 caches the domain of the address it was constructed at.
EAS_CONSTRUCTOR = Constructor(immutables={
    "_TYPE_HASH": lambda ctx: EIP712_TYPE_HASH,
    "_HASHED_NAME": lambda ctx: keccak256(EAS_NAME),
    "_HASHED_VERSION": lambda ctx: keccak256(EAS_VERSION),
    "_CACHED_CHAIN_ID": lambda ctx: ctx.config.l2_chain_id,
    "_CACHED_THIS": lambda ctx: ctx.this,
    "_CACHED_DOMAIN_SEPARATOR": lambda ctx: eip712_domain_separator(
        EAS_NAME, EAS_VERSION, ctx.config.l2_chain_id, ctx.this
    ),
})

OPTIMISM_MINTABLE_ERC721_FACTORY_CONSTRUCTOR = Constructor(immutables={
    "BRIDGE": lambda ctx: predeploys.L2_ERC721_BRIDGE,
    "REMOTE_CHAIN_ID": lambda ctx: ctx.config.l1_chain_id,
})

WETH9_CONSTRUCTOR = Constructor(storage={
    "name": lambda ctx: "Wrapped Ether",
    "symbol": lambda ctx: "WETH",
    "decimals": lambda ctx: 18,
})

GOVERNANCE_TOKEN_CONSTRUCTOR = Constructor(storage={
    "_name": lambda ctx: "Optimism",
    "_symbol": lambda ctx: "OP",
    "_owner": lambda ctx: ctx.sender,
})

GOVERNANCE_TOKEN_NAME_SLOT = 3
GOVERNANCE_TOKEN_SYMBOL_SLOT = 4
GOVERNANCE_TOKEN_OWNER_SLOT = 10


# ---------------------------------------------------------------------------
# Initializers
# ---------------------------------------------------------------------------

L2_CROSS_DOMAIN_MESSENGER_INIT = Initializer(
    params=(("_l1CrossDomainMessenger", "address"),),
    args=lambda ctx: {"_l1CrossDomainMessenger": ctx.l1.l1_cross_domain_messenger_proxy},
    writes=lambda args: {
        "xDomainMsgSender": DEFAULT_L2_SENDER,
        "otherMessenger": args["_l1CrossDomainMessenger"],
    },
)

L2_STANDARD_BRIDGE_INIT = Initializer(
    params=(("_otherBridge", "address"),),
    args=lambda ctx: {"_otherBridge": ctx.l1.l1_standard_bridge_proxy},
    writes=lambda args: {
        "messenger": predeploys.L2_CROSS_DOMAIN_MESSENGER,
        "otherBridge": args["_otherBridge"],
    },
)

OPTIMISM_MINTABLE_ERC20_FACTORY_INIT = Initializer(
    params=(("_bridge", "address"),),
    args=lambda ctx: {"_bridge": predeploys.L2_STANDARD_BRIDGE},
    writes=lambda args: {"bridge": args["_bridge"]},
)

L2_ERC721_BRIDGE_INIT = Initializer(
    params=(("_l1ERC721Bridge", "address"),),
    args=lambda ctx: {"_l1ERC721Bridge": ctx.l1.l1_erc721_bridge_proxy},
    writes=lambda args: {
        "messenger": predeploys.L2_CROSS_DOMAIN_MESSENGER,
        "otherBridge": args["_l1ERC721Bridge"],
    },
)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

def _direct(address: bytes, **kwargs) -> PredeployDescriptor:
    return PredeployDescriptor(
        address=address,
        name=PREDEPLOY_NAMES[address],
        strategy=DeployStrategy.DIRECT_INJECTION,
        **kwargs,
    )


def _with_immutables(address: bytes, constructor: Constructor) -> PredeployDescriptor:
    return PredeployDescriptor(
        address=address,
        name=PREDEPLOY_NAMES[address],
        strategy=DeployStrategy.CONSTRUCTOR_WITH_IMMUTABLES,
        constructor=constructor,
    )


_DESCRIPTORS = (
    _direct(predeploys.LEGACY_MESSAGE_PASSER),
    _direct(predeploys.DEPLOYER_WHITELIST),
    PredeployDescriptor(
        address=predeploys.WETH9,
        name="WETH9",
        strategy=DeployStrategy.CONSTRUCT_COPY_ERASE,
        constructor=WETH9_CONSTRUCTOR,
        storage_patches=(
            # string public name = "Wrapped Ether"
            StoragePatch.literal(
                0, "577261707065642045746865720000000000000000000000000000000000001a"
            ),
            # string public symbol = "WETH"
            StoragePatch.literal(
                1, "5745544800000000000000000000000000000000000000000000000000000008"
            ),
            # uint8 public decimals = 18
            StoragePatch.literal(
                2, "0000000000000000000000000000000000000000000000000000000000000012"
            ),
        ),
    ),
    _direct(predeploys.L2_CROSS_DOMAIN_MESSENGER, initializer=L2_CROSS_DOMAIN_MESSENGER_INIT),
    _direct(predeploys.GAS_PRICE_ORACLE),
    _direct(predeploys.L2_STANDARD_BRIDGE, initializer=L2_STANDARD_BRIDGE_INIT),
    _with_immutables(predeploys.SEQUENCER_FEE_WALLET, _fee_vault("sequencer_fee_vault")),
    _direct(
        predeploys.OPTIMISM_MINTABLE_ERC20_FACTORY,
        initializer=OPTIMISM_MINTABLE_ERC20_FACTORY_INIT,
    ),
    _direct(predeploys.L1_BLOCK_NUMBER),
    _direct(predeploys.L2_ERC721_BRIDGE, initializer=L2_ERC721_BRIDGE_INIT),
    # L1Block values are set by the first deposit transaction, not at genesis.
    _direct(predeploys.L1_BLOCK_ATTRIBUTES),
    _direct(predeploys.L2_TO_L1_MESSAGE_PASSER),
    _with_immutables(
        predeploys.OPTIMISM_MINTABLE_ERC721_FACTORY,
        OPTIMISM_MINTABLE_ERC721_FACTORY_CONSTRUCTOR,
    ),
    # The ProxyAdmin sits behind a proxy it administers itself.
    _direct(predeploys.PROXY_ADMIN, owner_label="_owner"),
    _with_immutables(predeploys.BASE_FEE_VAULT, _fee_vault("base_fee_vault")),
    _with_immutables(predeploys.L1_FEE_VAULT, _fee_vault("l1_fee_vault")),
    _direct(predeploys.SCHEMA_REGISTRY),
    _with_immutables(predeploys.EAS, EAS_CONSTRUCTOR),
    PredeployDescriptor(
        address=predeploys.GOVERNANCE_TOKEN,
        name="GovernanceToken",
        strategy=DeployStrategy.CONSTRUCT_COPY_ERASE,
        constructor=GOVERNANCE_TOKEN_CONSTRUCTOR,
        storage_patches=(
            StoragePatch.copy(GOVERNANCE_TOKEN_NAME_SLOT),
            StoragePatch.copy(GOVERNANCE_TOKEN_SYMBOL_SLOT),
            StoragePatch(
                slot=GOVERNANCE_TOKEN_OWNER_SLOT,
                value=lambda ctx: int.from_bytes(ctx.config.governance_token_owner, "big"),
            ),
        ),
        enabled=lambda config: config.enable_governance,
    ),
)

PREDEPLOYS: dict[bytes, PredeployDescriptor] = {d.address: d for d in _DESCRIPTORS}

if set(PREDEPLOYS) != set(PREDEPLOY_NAMES):
    raise RuntimeError("Predeploy table and PREDEPLOY_NAMES disagree")


def get_descriptor(address: bytes) -> PredeployDescriptor:
    try:
        return PREDEPLOYS[address]
    except KeyError:
        raise ValueError(f"No predeploy defined at 0x{address.hex()}") from None


def iter_descriptors() -> list[PredeployDescriptor]:
    """Descriptors in ascending address order."""
    return sorted(PREDEPLOYS.values(), key=lambda d: d.address)
