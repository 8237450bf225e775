"""
Layer-1 address registry.

Maps logical contract names (e.g. "L1StandardBridgeProxy") to the addresses
recorded by the layer-1 deployment.
"""

from __future__ import annotations

import json
from pathlib import Path

from eth_utils import is_hex_address, to_canonical_address

from l2genesis.common.errors import GenesisError, MissingDependencyError


class AddressRegistry:
    """Read-only name -> address lookup."""

    def __init__(self, addresses: dict[str, bytes]) -> None:
        self._addresses = dict(addresses)

    def get(self, name: str) -> bytes | None:
        return self._addresses.get(name)

    def must_get(self, name: str) -> bytes:
        addr = self._addresses.get(name)
        if addr is None:
            raise MissingDependencyError(f"Address for {name} not found in L1 deployments")
        return addr

    def __contains__(self, name: str) -> bool:
        return name in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)

    @classmethod
    def from_json(cls, data: dict) -> AddressRegistry:
        addresses = {}
        for name, value in data.items():
            if not isinstance(value, str) or not is_hex_address(value):
                raise GenesisError(f"Invalid address for {name}: {value!r}")
            addresses[name] = to_canonical_address(value)
        return cls(addresses)

    @classmethod
    def from_file(cls, path: str | Path) -> AddressRegistry:
        path = Path(path)
        if not path.exists():
            raise MissingDependencyError(f"L1 deployments file not found: {path}")
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise GenesisError(f"Invalid L1 deployments JSON {path}: {e}") from e
        return cls.from_json(data)
