"""
In-memory storage backend.

Dict-based implementation of the Store interface. The genesis build owns one
MemoryBackend for its whole run.
"""

from __future__ import annotations

import copy
from typing import Iterator, Optional

from l2genesis.common.crypto import keccak256
from l2genesis.common.types import Account, EMPTY_CODE_HASH
from l2genesis.storage.store import Store


WORD_LIMIT = 1 << 256


class MemoryBackend(Store):
    """In-memory ledger using Python dicts."""

    def __init__(self) -> None:
        self._accounts: dict[bytes, Account] = {}
        self._code: dict[bytes, bytes] = {}  # code_hash -> code
        self._storage: dict[bytes, dict[int, int]] = {}  # addr -> {key: value}

        self._snapshots: list[dict] = []

    # -----------------------------------------------------------------
    # Account state
    # -----------------------------------------------------------------

    def get_account(self, address: bytes) -> Optional[Account]:
        return self._accounts.get(address)

    def put_account(self, address: bytes, account: Account) -> None:
        if len(address) != 20:
            raise ValueError(f"Address must be 20 bytes, got {len(address)}")
        self._accounts[address] = account

    def delete_account(self, address: bytes) -> None:
        self._accounts.pop(address, None)
        self._storage.pop(address, None)

    def iter_accounts(self) -> Iterator[tuple[bytes, Account]]:
        return iter(list(self._accounts.items()))

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, address: bytes) -> bool:
        return address in self._accounts

    # -----------------------------------------------------------------
    # Code
    # -----------------------------------------------------------------

    def get_code(self, code_hash: bytes) -> Optional[bytes]:
        return self._code.get(code_hash)

    def get_account_code(self, address: bytes) -> bytes:
        acc = self._accounts.get(address)
        if acc is None or acc.code_hash == EMPTY_CODE_HASH:
            return b""
        return self._code.get(acc.code_hash, b"")

    def set_account_code(self, address: bytes, code: bytes) -> None:
        acc = self._accounts.get(address)
        if acc is None:
            acc = Account()
            self.put_account(address, acc)
        if code:
            code_hash = keccak256(code)
            acc.code_hash = code_hash
            self._code[code_hash] = bytes(code)
        else:
            acc.code_hash = EMPTY_CODE_HASH

    # -----------------------------------------------------------------
    # Storage
    # -----------------------------------------------------------------

    def get_storage(self, address: bytes, key: int) -> int:
        slots = self._storage.get(address)
        return slots.get(key, 0) if slots else 0

    def put_storage(self, address: bytes, key: int, value: int) -> None:
        if not 0 <= key < WORD_LIMIT or not 0 <= value < WORD_LIMIT:
            raise ValueError(f"Storage key/value out of range at 0x{address.hex()}")
        if address not in self._accounts:
            self.put_account(address, Account())
        if value == 0:
            slots = self._storage.get(address)
            if slots:
                slots.pop(key, None)
        else:
            self._storage.setdefault(address, {})[key] = value

    def get_account_storage(self, address: bytes) -> dict[int, int]:
        return dict(self._storage.get(address, {}))

    # -----------------------------------------------------------------
    # State snapshots
    # -----------------------------------------------------------------

    def snapshot(self) -> int:
        snap = {
            "accounts": {k: copy.copy(v) for k, v in self._accounts.items()},
            "code": dict(self._code),
            "storage": {k: dict(v) for k, v in self._storage.items()},
        }
        self._snapshots.append(snap)
        return len(self._snapshots) - 1

    def rollback(self, snapshot_id: int) -> None:
        if snapshot_id >= len(self._snapshots):
            return
        snap = self._snapshots[snapshot_id]
        self._accounts = snap["accounts"]
        self._code = snap["code"]
        self._storage = snap["storage"]
        self._snapshots = self._snapshots[:snapshot_id]

    def commit(self, snapshot_id: int) -> None:
        self._snapshots = self._snapshots[:snapshot_id]
