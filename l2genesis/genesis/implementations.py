"""
Implementation placer.

Places the code of every predeploy according to its DeployStrategy:

  DIRECT_INJECTION             deployed code copied to the namespace address
  CONSTRUCTOR_WITH_IMMUTABLES  constructed at a scratch account, code copied
                               to the namespace address, scratch erased
  CONSTRUCT_COPY_ERASE         constructed at a scratch account, code copied
                               to the predeploy address itself, storage patched
                               with raw words, scratch erased

Proxied predeploys are then checked against their proxy and initialized.
"""

from __future__ import annotations

import logging

from eth_utils import to_checksum_address

from l2genesis.common.crypto import compute_create_address
from l2genesis.common.errors import ArtifactError, InvariantViolation
from l2genesis.common.types import DeployStrategy, PredeployDescriptor
from l2genesis.contracts.artifacts import ContractArtifact, link_immutables
from l2genesis.genesis.context import BuildContext
from l2genesis.genesis.initializer import run_initializer, write_variable
from l2genesis.genesis.predeploys import iter_descriptors
from l2genesis.genesis.proxies import verify_proxy_implementation
from l2genesis.storage.store import Store


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scratch accounts
# ---------------------------------------------------------------------------

def deploy_scratch(
    store: Store,
    ctx: BuildContext,
    descriptor: PredeployDescriptor,
    artifact: ContractArtifact,
) -> bytes:
    """Run the constructor of descriptor at the deployer's next CREATE address."""
    nonce = store.get_nonce(ctx.deployer)
    scratch = compute_create_address(ctx.deployer, nonce)
    if store.account_exists(scratch):
        raise InvariantViolation(f"CREATE collision at 0x{scratch.hex()} for {descriptor.name}")
    store.increment_nonce(ctx.deployer)
    ctx.scratch_accounts.append(scratch)

    call = ctx.call_context(store, scratch)
    constructor = descriptor.constructor
    immutables = {name: fn(call) for name, fn in constructor.immutables.items()}

    # EIP-161: contract accounts start at nonce 1
    store.set_nonce(scratch, 1)
    for label, fn in constructor.storage.items():
        write_variable(store, artifact.storage_layout, scratch, label, fn(call))
    store.set_account_code(scratch, link_immutables(artifact, immutables))
    return scratch


def erase_account(store: Store, address: bytes) -> None:
    """Reset code and nonce and drop the account so it is not dumped."""
    store.set_account_code(address, b"")
    store.set_nonce(address, 0)
    store.delete_account(address)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

def _place_direct(store: Store, descriptor: PredeployDescriptor, artifact: ContractArtifact) -> None:
    if artifact.has_immutables:
        raise ArtifactError(
            f"{descriptor.name} has immutables; direct injection would leave them unset"
        )
    store.set_account_code(descriptor.implementation, artifact.deployed_code)


def _place_constructed(
    store: Store,
    ctx: BuildContext,
    descriptor: PredeployDescriptor,
    artifact: ContractArtifact,
) -> None:
    scratch = deploy_scratch(store, ctx, descriptor, artifact)
    target = descriptor.implementation
    store.set_account_code(target, store.get_account_code(scratch))

    if descriptor.strategy == DeployStrategy.CONSTRUCT_COPY_ERASE:
        # A constructor cannot run at the predeploy address, so the words it
        # would have written are set directly.
        call = ctx.call_context(store, scratch)
        for patch in descriptor.storage_patches:
            store.put_storage(target, patch.slot, patch.value(call))

    erase_account(store, scratch)


def place_implementation(store: Store, ctx: BuildContext, descriptor: PredeployDescriptor) -> bool:
    """Place one predeploy. Returns False when it is disabled by config."""
    if not descriptor.enabled(ctx.config):
        logger.info("%s not enabled, skipping", descriptor.name)
        return False

    artifact = ctx.code.get_artifact(descriptor.name)
    impl = descriptor.implementation
    logger.info("Setting %s implementation at: %s", descriptor.name, to_checksum_address(impl))

    if descriptor.strategy == DeployStrategy.DIRECT_INJECTION:
        _place_direct(store, descriptor, artifact)
    else:
        _place_constructed(store, ctx, descriptor, artifact)

    if descriptor.owner_label is not None:
        # No initialize(): the owner is written at both proxy and implementation.
        owner = ctx.config.proxy_admin_owner
        for addr in (descriptor.address, impl):
            write_variable(store, artifact.storage_layout, addr, descriptor.owner_label, owner)

    if descriptor.proxied:
        verify_proxy_implementation(store, descriptor.address, impl)
        run_initializer(store, ctx, descriptor, artifact.storage_layout)
    return True


def set_predeploy_implementations(store: Store, ctx: BuildContext) -> int:
    placed = 0
    for descriptor in iter_descriptors():
        if place_implementation(store, ctx, descriptor):
            placed += 1
    logger.info("Placed %d predeploy implementations", placed)
    return placed
