"""
Two-phase initialization of proxied predeploys.

1. initialize() at the implementation with neutral arguments, so nobody can
   later take over the implementation by initializing it directly.
2. initialize() at the proxy with the real arguments; the proxy delegates,
   so the writes land in the proxy's storage.
3. Both must now reject a second initialize().
"""

from __future__ import annotations

import logging
from typing import Any

from l2genesis.common.errors import AlreadyInitializedError, InvariantViolation
from l2genesis.common.storage_layout import StorageLayout
from l2genesis.common.types import Initializer, PredeployDescriptor
from l2genesis.genesis.context import BuildContext
from l2genesis.storage.store import Store


logger = logging.getLogger(__name__)


def write_variable(store: Store, layout: StorageLayout, address: bytes, label: str, value: Any) -> None:
    writes = layout.encode(label, value, lambda slot: store.get_storage(address, slot))
    for slot, word in writes.items():
        store.put_storage(address, slot, word)


def read_variable(store: Store, layout: StorageLayout, address: bytes, label: str) -> Any:
    return layout.read(label, lambda slot: store.get_storage(address, slot))


def is_initialized(store: Store, layout: StorageLayout, address: bytes, initializer: Initializer) -> bool:
    return read_variable(store, layout, address, initializer.flag) != 0


def initialize(
    store: Store,
    layout: StorageLayout,
    address: bytes,
    initializer: Initializer,
    args: dict[str, Any],
) -> None:
    """Run initialize(args) against the storage of address."""
    initializer.check_args(args)
    if is_initialized(store, layout, address, initializer):
        raise AlreadyInitializedError(address)
    for label, value in initializer.writes(args).items():
        write_variable(store, layout, address, label, value)
    write_variable(store, layout, address, initializer.flag, 1)


def verify_initialized(
    store: Store,
    layout: StorageLayout,
    address: bytes,
    initializer: Initializer,
    args: dict[str, Any],
    name: str,
) -> None:
    """A second initialize() must revert; if it does not, undo it and fail."""
    snapshot_id = store.snapshot()
    try:
        initialize(store, layout, address, initializer, args)
    except AlreadyInitializedError:
        store.commit(snapshot_id)
        return
    store.rollback(snapshot_id)
    raise InvariantViolation(f"{name} at 0x{address.hex()} can be initialized twice")


def run_initializer(
    store: Store,
    ctx: BuildContext,
    descriptor: PredeployDescriptor,
    layout: StorageLayout,
) -> None:
    init = descriptor.initializer
    if init is None:
        return
    impl = descriptor.implementation
    proxy = descriptor.address

    neutral = init.neutral_args()
    initialize(store, layout, impl, init, neutral)

    real = init.args(ctx.call_context(store, proxy))
    initialize(store, layout, proxy, init, real)
    logger.debug("%s: %s at implementation and proxy", descriptor.name, init.signature)

    verify_initialized(store, layout, impl, init, neutral, descriptor.name)
    verify_initialized(store, layout, proxy, init, real, descriptor.name)
