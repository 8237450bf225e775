"""
Core genesis types: Account and the predeploy descriptor model.

A PredeployDescriptor declares everything the build needs to know about one
predeploy: where it lives, whether it sits behind a proxy, which deployment
strategy places its code, and which constructor/initializer effects apply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

from l2genesis.common.addresses import ZERO_ADDRESS, not_proxied, to_namespace
from l2genesis.common.crypto import keccak256

if TYPE_CHECKING:
    from l2genesis.common.config import DeployConfig, L1Dependencies
    from l2genesis.storage.store import Store


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMPTY_CODE_HASH = keccak256(b"")


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------

@dataclass
class Account:
    nonce: int = 0
    balance: int = 0
    code_hash: bytes = field(default_factory=lambda: EMPTY_CODE_HASH)

    def is_empty(self) -> bool:
        return (
            self.nonce == 0
            and self.balance == 0
            and self.code_hash == EMPTY_CODE_HASH
        )


# ---------------------------------------------------------------------------
# Predeploy descriptors
# ---------------------------------------------------------------------------

class DeployStrategy(Enum):
    # Deployed code is copied as-is. Only valid without constructor side
    # effects and without immutables.
    DIRECT_INJECTION = "direct-injection"
    # Constructed at a scratch account so immutables are baked into the
    # code, which is then copied to the implementation address.
    CONSTRUCTOR_WITH_IMMUTABLES = "constructor-with-immutables"
    # Unproxied: constructed at a scratch account, code copied to the
    # predeploy address and storage patched with raw words.
    CONSTRUCT_COPY_ERASE = "constructor-then-copy-and-erase"


@dataclass(frozen=True)
class CallContext:
    """Environment a constructor or initializer runs in."""
    config: DeployConfig
    l1: L1Dependencies
    this: bytes
    sender: bytes
    store: Store

    def load(self, slot: int) -> int:
        return self.store.get_storage(self.this, slot)


ValueFn = Callable[[CallContext], Any]


@dataclass(frozen=True)
class Constructor:
    """Effects of running a contract's constructor.

    immutables: immutable name -> value baked into the deployed code
    storage: state-variable label -> value written at the constructed address
    """
    immutables: dict[str, ValueFn] = field(default_factory=dict)
    storage: dict[str, ValueFn] = field(default_factory=dict)


# Neutral argument for each supported ABI parameter type.
NEUTRAL_VALUES: dict[str, Any] = {
    "address": ZERO_ADDRESS,
    "uint256": 0,
    "bool": False,
}


@dataclass(frozen=True)
class Initializer:
    """A one-time initialize() routine guarded by OpenZeppelin Initializable.

    params: ordered (name, abi type) pairs
    args: real arguments derived from the deploy config
    writes: maps arguments to state-variable assignments
    """
    params: tuple[tuple[str, str], ...]
    args: Callable[[CallContext], dict[str, Any]]
    writes: Callable[[dict[str, Any]], dict[str, Any]]
    flag: str = "_initialized"

    def __post_init__(self) -> None:
        for name, abi_type in self.params:
            if abi_type not in NEUTRAL_VALUES:
                raise ValueError(f"Unsupported initializer parameter type {abi_type} ({name})")

    @property
    def signature(self) -> str:
        return "initialize(" + ",".join(t for _, t in self.params) + ")"

    def neutral_args(self) -> dict[str, Any]:
        return {name: NEUTRAL_VALUES[abi_type] for name, abi_type in self.params}

    def check_args(self, args: dict[str, Any]) -> None:
        expected = {name for name, _ in self.params}
        if set(args) != expected:
            raise ValueError(
                f"{self.signature} expects {sorted(expected)}, got {sorted(args)}"
            )


@dataclass(frozen=True)
class StoragePatch:
    """A raw word written at an unproxied predeploy after its code is copied.

    value receives the context of the scratch account the contract was
    constructed at, so it can copy words the constructor wrote.
    """
    slot: int
    value: Callable[[CallContext], int]

    @classmethod
    def literal(cls, slot: int, word: str) -> StoragePatch:
        raw = bytes.fromhex(word.removeprefix("0x"))
        if len(raw) != 32:
            raise ValueError(f"Storage word must be 32 bytes, got {len(raw)}")
        value = int.from_bytes(raw, "big")
        return cls(slot=slot, value=lambda ctx: value)

    @classmethod
    def copy(cls, slot: int) -> StoragePatch:
        return cls(slot=slot, value=lambda ctx: ctx.load(slot))


def _always(config: DeployConfig) -> bool:
    return True


@dataclass(frozen=True)
class PredeployDescriptor:
    address: bytes
    name: str
    strategy: DeployStrategy
    constructor: Optional[Constructor] = None
    initializer: Optional[Initializer] = None
    storage_patches: tuple[StoragePatch, ...] = ()
    # ProxyAdmin has no initialize(); its owner is written directly.
    owner_label: Optional[str] = None
    enabled: Callable[[DeployConfig], bool] = _always

    def __post_init__(self) -> None:
        if self.strategy == DeployStrategy.DIRECT_INJECTION:
            if self.constructor is not None:
                raise ValueError(f"{self.name}: direct injection cannot run a constructor")
        elif self.constructor is None:
            raise ValueError(f"{self.name}: {self.strategy.value} requires a constructor")

        if self.strategy == DeployStrategy.CONSTRUCT_COPY_ERASE:
            if self.proxied:
                raise ValueError(f"{self.name}: copy-and-erase is only for unproxied predeploys")
            if self.initializer is not None:
                raise ValueError(f"{self.name}: unproxied predeploys cannot be initialized")
        elif not self.proxied:
            raise ValueError(f"{self.name}: unproxied predeploys must use copy-and-erase")

    @property
    def proxied(self) -> bool:
        return not not_proxied(self.address)

    @property
    def implementation(self) -> bytes:
        """Address the contract code is placed at."""
        return to_namespace(self.address) if self.proxied else self.address
