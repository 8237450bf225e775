"""
State serializer.

Dumps the ledger as a genesis allocs mapping:

    {"0x<address>": {"balance": "0x..", "code": "0x..", "nonce": "0x..",
                     "storage": {"0x<slot>": "0x<word>"}}}

Accounts are ordered by numeric address and storage by numeric slot, so the
same state always serializes to the same bytes.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from l2genesis.storage.store import Store


logger = logging.getLogger(__name__)


def format_address(addr: bytes) -> str:
    return "0x" + addr.hex().rjust(40, "0")


def format_word(value: int) -> str:
    return "0x" + value.to_bytes(32, "big").hex()


def dump_allocs(store: Store) -> dict[str, dict]:
    """Canonical allocs mapping. Empty accounts are left out."""
    allocs: dict[str, dict] = {}
    accounts = sorted(store.iter_accounts(), key=lambda item: int.from_bytes(item[0], "big"))
    for address, account in accounts:
        storage = store.get_account_storage(address)
        if account.is_empty() and not storage:
            continue
        allocs[format_address(address)] = {
            "balance": hex(account.balance),
            "code": "0x" + store.get_account_code(address).hex(),
            "nonce": hex(account.nonce),
            "storage": {
                format_word(slot): format_word(storage[slot]) for slot in sorted(storage)
            },
        }
    return allocs


def encode_allocs(allocs: dict[str, dict]) -> bytes:
    # Insertion order is the canonical order.
    return (json.dumps(allocs, indent=2) + "\n").encode()


def write_allocs(store: Store, path: str | Path) -> int:
    """Write the canonical allocs file. Returns the number of accounts."""
    allocs = dump_allocs(store)
    data = encode_allocs(allocs)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_bytes(data)
    tmp.replace(path)
    logger.info("Wrote %d accounts to %s", len(allocs), path)
    return len(allocs)
