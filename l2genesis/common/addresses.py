"""
Address space model for the layer-2 genesis.

The 20-byte address space is partitioned into:
  - precompiles: 0x00..00 - 0x00..ff
  - the predeploy window: 2048 addresses starting at 0x4200..00
  - the code namespace: one implementation ("shadow") address per predeploy,
    0xc0d3c0d3...XXXX, obtained by substituting the high 18 bytes.

All helpers are pure functions over raw 20-byte addresses.
"""

from __future__ import annotations


def _address(value: int) -> bytes:
    return value.to_bytes(20, "big")


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

PRECOMPILE_COUNT = 256
PREDEPLOY_COUNT = 2048

PREDEPLOY_NAMESPACE = 0x4200000000000000000000000000000000000000
CODE_NAMESPACE = 0xC0D3C0D3C0D3C0D3C0D3C0D3C0D3C0D3C0D30000

# Predeploy window membership is decided on the top 149 bits.
_PREDEPLOY_SHIFT = 11
_NAMESPACE_MASK = 0xFFFF

ZERO_ADDRESS = b"\x00" * 20

# Default value of CrossDomainMessenger.xDomainMsgSender
DEFAULT_L2_SENDER = bytes.fromhex("000000000000000000000000000000000000dead")


# ---------------------------------------------------------------------------
# Predeploys
# ---------------------------------------------------------------------------

LEGACY_MESSAGE_PASSER = _address(PREDEPLOY_NAMESPACE | 0x00)
DEPLOYER_WHITELIST = _address(PREDEPLOY_NAMESPACE | 0x02)
WETH9 = _address(PREDEPLOY_NAMESPACE | 0x06)
L2_CROSS_DOMAIN_MESSENGER = _address(PREDEPLOY_NAMESPACE | 0x07)
GAS_PRICE_ORACLE = _address(PREDEPLOY_NAMESPACE | 0x0F)
L2_STANDARD_BRIDGE = _address(PREDEPLOY_NAMESPACE | 0x10)
SEQUENCER_FEE_WALLET = _address(PREDEPLOY_NAMESPACE | 0x11)
OPTIMISM_MINTABLE_ERC20_FACTORY = _address(PREDEPLOY_NAMESPACE | 0x12)
L1_BLOCK_NUMBER = _address(PREDEPLOY_NAMESPACE | 0x13)
L2_ERC721_BRIDGE = _address(PREDEPLOY_NAMESPACE | 0x14)
L1_BLOCK_ATTRIBUTES = _address(PREDEPLOY_NAMESPACE | 0x15)
L2_TO_L1_MESSAGE_PASSER = _address(PREDEPLOY_NAMESPACE | 0x16)
OPTIMISM_MINTABLE_ERC721_FACTORY = _address(PREDEPLOY_NAMESPACE | 0x17)
PROXY_ADMIN = _address(PREDEPLOY_NAMESPACE | 0x18)
BASE_FEE_VAULT = _address(PREDEPLOY_NAMESPACE | 0x19)
L1_FEE_VAULT = _address(PREDEPLOY_NAMESPACE | 0x1A)
SCHEMA_REGISTRY = _address(PREDEPLOY_NAMESPACE | 0x20)
EAS = _address(PREDEPLOY_NAMESPACE | 0x21)
GOVERNANCE_TOKEN = _address(PREDEPLOY_NAMESPACE | 0x42)

# Contract name of every predeploy that has an implementation to place.
PREDEPLOY_NAMES: dict[bytes, str] = {
    LEGACY_MESSAGE_PASSER: "LegacyMessagePasser",
    DEPLOYER_WHITELIST: "DeployerWhitelist",
    WETH9: "WETH9",
    L2_CROSS_DOMAIN_MESSENGER: "L2CrossDomainMessenger",
    GAS_PRICE_ORACLE: "GasPriceOracle",
    L2_STANDARD_BRIDGE: "L2StandardBridge",
    SEQUENCER_FEE_WALLET: "SequencerFeeVault",
    OPTIMISM_MINTABLE_ERC20_FACTORY: "OptimismMintableERC20Factory",
    L1_BLOCK_NUMBER: "L1BlockNumber",
    L2_ERC721_BRIDGE: "L2ERC721Bridge",
    L1_BLOCK_ATTRIBUTES: "L1Block",
    L2_TO_L1_MESSAGE_PASSER: "L2ToL1MessagePasser",
    OPTIMISM_MINTABLE_ERC721_FACTORY: "OptimismMintableERC721Factory",
    PROXY_ADMIN: "ProxyAdmin",
    BASE_FEE_VAULT: "BaseFeeVault",
    L1_FEE_VAULT: "L1FeeVault",
    SCHEMA_REGISTRY: "SchemaRegistry",
    EAS: "EAS",
    GOVERNANCE_TOKEN: "GovernanceToken",
}

# Predeploys that live at their own address without a proxy.
NOT_PROXIED = frozenset({WETH9, GOVERNANCE_TOKEN})


# ---------------------------------------------------------------------------
# EIP-1967 proxy slots
# ---------------------------------------------------------------------------

# bytes32(uint256(keccak256("eip1967.proxy.implementation")) - 1)
IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC
# bytes32(uint256(keccak256("eip1967.proxy.admin")) - 1)
ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_address(addr: bytes) -> int:
    if len(addr) != 20:
        raise ValueError(f"Address must be 20 bytes, got {len(addr)}")
    return int.from_bytes(addr, "big")


def is_precompile(addr: bytes) -> bool:
    return _check_address(addr) < PRECOMPILE_COUNT


def precompile_address(index: int) -> bytes:
    if not 0 <= index < PRECOMPILE_COUNT:
        raise ValueError(f"Precompile index out of range: {index}")
    return _address(index)


def is_predeploy_namespace(addr: bytes) -> bool:
    """True if addr lies inside the 2048-address predeploy window."""
    return _check_address(addr) >> _PREDEPLOY_SHIFT == PREDEPLOY_NAMESPACE >> _PREDEPLOY_SHIFT


def predeploy_address(index: int) -> bytes:
    if not 0 <= index < PREDEPLOY_COUNT:
        raise ValueError(f"Predeploy index out of range: {index}")
    return _address(PREDEPLOY_NAMESPACE | index)


def proxy_range_index(addr: bytes) -> int:
    """Index of addr inside the predeploy window."""
    if not is_predeploy_namespace(addr):
        raise ValueError(f"Address 0x{addr.hex()} is outside the predeploy window")
    return _check_address(addr) - PREDEPLOY_NAMESPACE


def not_proxied(addr: bytes) -> bool:
    return addr in NOT_PROXIED


def is_defined_predeploy(addr: bytes) -> bool:
    return addr in PREDEPLOY_NAMES


def to_namespace(addr: bytes) -> bytes:
    """Map a predeploy address to its implementation address.

    The low two bytes are kept and the rest is replaced by the code
    namespace prefix, e.g. 0x4200..0007 -> 0xc0d3..0007.
    """
    if not is_predeploy_namespace(addr):
        raise ValueError(f"Address 0x{addr.hex()} is outside the predeploy window")
    return _address((_check_address(addr) & _NAMESPACE_MASK) | CODE_NAMESPACE)


def predeploy_name(addr: bytes) -> str:
    try:
        return PREDEPLOY_NAMES[addr]
    except KeyError:
        raise ValueError(f"No predeploy defined at 0x{addr.hex()}") from None
