"""
Store interface: the ledger the genesis state is built in.

Defines account state (balance, nonce, code, storage) access plus
snapshots so a tentative change can be rolled back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from l2genesis.common.types import Account


class Store(ABC):
    """Abstract state interface."""

    # -----------------------------------------------------------------
    # Account state
    # -----------------------------------------------------------------

    @abstractmethod
    def get_account(self, address: bytes) -> Optional[Account]:
        """Get account by address, or None if not found."""
        ...

    @abstractmethod
    def put_account(self, address: bytes, account: Account) -> None:
        """Store or update an account."""
        ...

    @abstractmethod
    def delete_account(self, address: bytes) -> None:
        """Remove an account together with its storage."""
        ...

    @abstractmethod
    def iter_accounts(self) -> Iterator[tuple[bytes, Account]]:
        """Iterate (address, account) pairs in no particular order."""
        ...

    def account_exists(self, address: bytes) -> bool:
        """Check if account exists (non-empty or holding storage)."""
        acc = self.get_account(address)
        if acc is None:
            return False
        return not acc.is_empty() or bool(self.get_account_storage(address))

    # -----------------------------------------------------------------
    # Convenience account methods, built on get_account/put_account
    # -----------------------------------------------------------------

    def get_balance(self, address: bytes) -> int:
        acc = self.get_account(address)
        return acc.balance if acc else 0

    def set_balance(self, address: bytes, balance: int) -> None:
        if balance < 0:
            raise ValueError(f"Negative balance for 0x{address.hex()}")
        acc = self.get_account(address)
        if acc is None:
            acc = Account()
        acc.balance = balance
        self.put_account(address, acc)

    def get_nonce(self, address: bytes) -> int:
        acc = self.get_account(address)
        return acc.nonce if acc else 0

    def set_nonce(self, address: bytes, nonce: int) -> None:
        acc = self.get_account(address)
        if acc is None:
            acc = Account()
        acc.nonce = nonce
        self.put_account(address, acc)

    def increment_nonce(self, address: bytes) -> None:
        self.set_nonce(address, self.get_nonce(address) + 1)

    # -----------------------------------------------------------------
    # Code
    # -----------------------------------------------------------------

    @abstractmethod
    def get_account_code(self, address: bytes) -> bytes:
        ...

    @abstractmethod
    def set_account_code(self, address: bytes, code: bytes) -> None:
        """Store code for an account, updating the account's code_hash."""
        ...

    # -----------------------------------------------------------------
    # Storage
    # -----------------------------------------------------------------

    @abstractmethod
    def get_storage(self, address: bytes, key: int) -> int:
        ...

    @abstractmethod
    def put_storage(self, address: bytes, key: int, value: int) -> None:
        """Write a storage word; writing zero clears the slot."""
        ...

    @abstractmethod
    def get_account_storage(self, address: bytes) -> dict[int, int]:
        """All non-zero storage words of an account."""
        ...

    # -----------------------------------------------------------------
    # Snapshots
    # -----------------------------------------------------------------

    @abstractmethod
    def snapshot(self) -> int:
        ...

    @abstractmethod
    def rollback(self, snapshot_id: int) -> None:
        ...

    @abstractmethod
    def commit(self, snapshot_id: int) -> None:
        ...
