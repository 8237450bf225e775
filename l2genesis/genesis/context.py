"""Inputs shared by the genesis build components."""

from __future__ import annotations

from dataclasses import dataclass, field

from l2genesis.common.config import DeployConfig, L1Dependencies
from l2genesis.common.types import CallContext
from l2genesis.contracts.artifacts import CodeProvider
from l2genesis.storage.store import Store


# Sender the constructors run as (Foundry's default script sender).
DEFAULT_DEPLOYER = bytes.fromhex("1804c8ab1f12e6bbf3894d4083f33e07309d1f38")


@dataclass
class BuildContext:
    config: DeployConfig
    l1: L1Dependencies
    code: CodeProvider
    deployer: bytes = DEFAULT_DEPLOYER
    # Scratch accounts created during this build, all erased before output.
    scratch_accounts: list[bytes] = field(default_factory=list)

    def call_context(self, store: Store, this: bytes) -> CallContext:
        return CallContext(
            config=self.config,
            l1=self.l1,
            this=this,
            sender=self.deployer,
            store=store,
        )
