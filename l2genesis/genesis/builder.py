"""
L2 genesis builder.

Runs the build pipeline against a fresh in-memory ledger:
  1. Fund precompiles
  2. Install predeploy proxies
  3. Place implementations (initializing proxied predeploys)
  4. Verify proxies, erase scratch accounts and reset the deployer
  5. Fund dev accounts
"""

from __future__ import annotations

import logging
from pathlib import Path

from l2genesis.common.config import DeployConfig, L1Dependencies
from l2genesis.common.errors import InvariantViolation
from l2genesis.contracts.artifacts import CodeProvider
from l2genesis.genesis.context import BuildContext, DEFAULT_DEPLOYER
from l2genesis.genesis.dev_accounts import fund_dev_accounts
from l2genesis.genesis.implementations import erase_account, set_predeploy_implementations
from l2genesis.genesis.precompiles import deal_to_precompiles
from l2genesis.genesis.proxies import set_predeploy_proxies, verify_proxies
from l2genesis.genesis.serializer import dump_allocs, encode_allocs, write_allocs
from l2genesis.storage.memory_backend import MemoryBackend


logger = logging.getLogger(__name__)


class L2Genesis:
    """Builds the layer-2 genesis state from a deploy config."""

    def __init__(
        self,
        config: DeployConfig,
        l1: L1Dependencies,
        code: CodeProvider,
        deployer: bytes = DEFAULT_DEPLOYER,
    ) -> None:
        self.config = config
        self.l1 = l1
        self.code = code
        self.deployer = deployer

    def build(self) -> MemoryBackend:
        """Construct the genesis state. Any failure aborts the whole build."""
        store = MemoryBackend()
        ctx = BuildContext(config=self.config, l1=self.l1, code=self.code, deployer=self.deployer)

        deal_to_precompiles(store)
        set_predeploy_proxies(store, self.code)
        set_predeploy_implementations(store, ctx)
        verify_proxies(store, self.code)
        self._verify_scratch_erased(store, ctx)
        erase_account(store, self.deployer)
        fund_dev_accounts(store, self.config)
        return store

    def dump(self) -> dict[str, dict]:
        return dump_allocs(self.build())

    def encode(self) -> bytes:
        return encode_allocs(self.dump())

    def write(self, path: str | Path) -> int:
        """Build and write the allocs file; nothing is written on failure."""
        return write_allocs(self.build(), path)

    def _verify_scratch_erased(self, store: MemoryBackend, ctx: BuildContext) -> None:
        for addr in ctx.scratch_accounts:
            if addr in store:
                raise InvariantViolation(f"Scratch account 0x{addr.hex()} was not erased")
