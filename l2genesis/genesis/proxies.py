"""
Proxy installer.

Every address of the predeploy window (except the unproxied ones) gets the
upgradeable Proxy code with its EIP-1967 admin slot pointing at the
ProxyAdmin predeploy. Addresses with a defined predeploy also get their
implementation slot pointing at the code namespace address.
"""

from __future__ import annotations

import logging

from l2genesis.common.addresses import (
    ADMIN_SLOT,
    IMPLEMENTATION_SLOT,
    PREDEPLOY_COUNT,
    PROXY_ADMIN,
    is_defined_predeploy,
    not_proxied,
    predeploy_address,
    to_namespace,
)
from l2genesis.common.errors import InvariantViolation
from l2genesis.contracts.artifacts import CodeProvider
from l2genesis.storage.store import Store


logger = logging.getLogger(__name__)

PROXY_CONTRACT = "Proxy"


def _as_word(addr: bytes) -> int:
    return int.from_bytes(addr, "big")


def set_predeploy_proxies(store: Store, code: CodeProvider) -> int:
    """Install proxies across the predeploy window. Returns the proxy count."""
    proxy_code = code.get_deployed_code(PROXY_CONTRACT)
    installed = 0
    for i in range(PREDEPLOY_COUNT):
        addr = predeploy_address(i)
        if not_proxied(addr):
            continue
        store.set_account_code(addr, proxy_code)
        store.put_storage(addr, ADMIN_SLOT, _as_word(PROXY_ADMIN))
        if is_defined_predeploy(addr):
            impl = to_namespace(addr)
            store.put_storage(addr, IMPLEMENTATION_SLOT, _as_word(impl))
            logger.debug("Proxy 0x%s -> implementation 0x%s", addr.hex(), impl.hex())
        installed += 1
    logger.info("Installed %d predeploy proxies", installed)
    return installed


def get_implementation(store: Store, proxy: bytes) -> bytes:
    return store.get_storage(proxy, IMPLEMENTATION_SLOT).to_bytes(20, "big")


def get_admin(store: Store, proxy: bytes) -> bytes:
    return store.get_storage(proxy, ADMIN_SLOT).to_bytes(20, "big")


def verify_proxy_implementation(store: Store, proxy: bytes, impl: bytes) -> None:
    """Read the slot directly: implementation() is admin-only on the proxy."""
    actual = get_implementation(store, proxy)
    if actual != impl:
        raise InvariantViolation(
            f"Proxy 0x{proxy.hex()} implementation is 0x{actual.hex()}, expected 0x{impl.hex()}"
        )


def verify_proxies(store: Store, code: CodeProvider) -> None:
    """Check the installer postcondition over the whole window."""
    proxy_code = code.get_deployed_code(PROXY_CONTRACT)
    for i in range(PREDEPLOY_COUNT):
        addr = predeploy_address(i)
        if not_proxied(addr):
            if store.get_account_code(addr) == proxy_code:
                raise InvariantViolation(f"Unproxied predeploy 0x{addr.hex()} carries proxy code")
            continue
        if store.get_account_code(addr) != proxy_code:
            raise InvariantViolation(f"Predeploy 0x{addr.hex()} has no proxy code")
        if get_admin(store, addr) != PROXY_ADMIN:
            raise InvariantViolation(f"Proxy 0x{addr.hex()} admin is not the ProxyAdmin")
        if is_defined_predeploy(addr):
            verify_proxy_implementation(store, addr, to_namespace(addr))
        elif store.get_storage(addr, IMPLEMENTATION_SLOT) != 0:
            raise InvariantViolation(f"Undefined predeploy 0x{addr.hex()} has an implementation")
