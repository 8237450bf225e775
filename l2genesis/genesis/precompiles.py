"""Precompile allocator: give every precompile a non-zero balance."""

from __future__ import annotations

import logging

from l2genesis.common.addresses import PRECOMPILE_COUNT, precompile_address
from l2genesis.storage.store import Store


logger = logging.getLogger(__name__)

PRECOMPILE_BALANCE = 1  # wei


def deal_to_precompiles(store: Store) -> int:
    """Fund every unfunded precompile with 1 wei.

    An empty precompile account would be deleted by state clearing, so each
    one is made non-empty. Already funded precompiles are left alone.
    Returns the number of accounts funded.
    """
    funded = 0
    for i in range(PRECOMPILE_COUNT):
        addr = precompile_address(i)
        if store.get_balance(addr) == 0:
            store.set_balance(addr, PRECOMPILE_BALANCE)
            funded += 1
    logger.info("Funded %d precompiles", funded)
    return funded
