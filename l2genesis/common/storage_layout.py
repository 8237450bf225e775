"""
Solidity storage layouts.

Resolves state-variable labels to (slot, offset) using the solc
"storageLayout" output and encodes values into 32-byte storage words,
packing small value types into shared slots.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from l2genesis.common.crypto import keccak256
from l2genesis.common.errors import StorageLayoutError


WORD_SIZE = 32

Loader = Callable[[int], int]


@dataclass(frozen=True)
class StorageEntry:
    label: str
    slot: int
    offset: int
    type: str


@dataclass(frozen=True)
class StorageType:
    label: str
    encoding: str
    number_of_bytes: int


class StorageLayout:
    """Label-addressed view over a contract's storage."""

    def __init__(self, entries: list[StorageEntry], types: dict[str, StorageType]) -> None:
        self._entries = {e.label: e for e in entries}
        self._types = types

    @classmethod
    def from_json(cls, data: dict) -> StorageLayout:
        try:
            entries = [
                StorageEntry(
                    label=item["label"],
                    slot=int(item["slot"]),
                    offset=int(item["offset"]),
                    type=item["type"],
                )
                for item in data.get("storage", [])
            ]
            types = {
                name: StorageType(
                    label=t["label"],
                    encoding=t["encoding"],
                    number_of_bytes=int(t["numberOfBytes"]),
                )
                for name, t in (data.get("types") or {}).items()
            }
        except (KeyError, TypeError, ValueError) as e:
            raise StorageLayoutError(f"Malformed storage layout: {e}") from e
        return cls(entries, types)

    @classmethod
    def empty(cls) -> StorageLayout:
        return cls([], {})

    def __contains__(self, label: str) -> bool:
        return label in self._entries

    def entry(self, label: str) -> StorageEntry:
        try:
            return self._entries[label]
        except KeyError:
            raise StorageLayoutError(f"Unknown storage variable: {label}") from None

    def type_of(self, entry: StorageEntry) -> StorageType:
        try:
            return self._types[entry.type]
        except KeyError:
            raise StorageLayoutError(f"Unknown storage type: {entry.type}") from None

    def slot(self, label: str) -> int:
        return self.entry(label).slot

    # -----------------------------------------------------------------
    # Reading
    # -----------------------------------------------------------------

    def read(self, label: str, load: Loader) -> Any:
        """Read a variable. Value types come back as int, strings as str."""
        entry = self.entry(label)
        typ = self.type_of(entry)
        word = load(entry.slot)
        if typ.encoding == "inplace":
            mask = (1 << (typ.number_of_bytes * 8)) - 1
            return (word >> (entry.offset * 8)) & mask
        if typ.encoding == "bytes":
            raw = word.to_bytes(WORD_SIZE, "big")
            if raw[-1] & 1:
                raise StorageLayoutError(f"Reading long string {label} is not supported")
            length = raw[-1] // 2
            data = raw[:length]
            return data.decode() if typ.label == "string" else data
        raise StorageLayoutError(f"Unsupported encoding {typ.encoding} for {label}")

    # -----------------------------------------------------------------
    # Writing
    # -----------------------------------------------------------------

    def encode(self, label: str, value: Any, load: Loader) -> dict[int, int]:
        """Return the slot -> word writes that assign value to label.

        load(slot) returns the current word so packed neighbours survive.
        """
        entry = self.entry(label)
        typ = self.type_of(entry)
        if typ.encoding == "inplace":
            return {entry.slot: self._encode_inplace(entry, typ, value, load(entry.slot))}
        if typ.encoding == "bytes":
            if isinstance(value, str):
                value = value.encode()
            if not isinstance(value, (bytes, bytearray)):
                raise StorageLayoutError(f"Expected str or bytes for {label}, got {value!r}")
            return encode_bytes(entry.slot, bytes(value))
        raise StorageLayoutError(f"Unsupported encoding {typ.encoding} for {label}")

    def _encode_inplace(self, entry: StorageEntry, typ: StorageType, value: Any, current: int) -> int:
        if entry.offset + typ.number_of_bytes > WORD_SIZE:
            raise StorageLayoutError(f"Variable {entry.label} overflows its slot")
        v = to_word(value)
        bits = typ.number_of_bytes * 8
        if v >> bits:
            raise StorageLayoutError(
                f"Value {value!r} does not fit in {typ.label} ({entry.label})"
            )
        shift = entry.offset * 8
        mask = ((1 << bits) - 1) << shift
        return (current & ~mask) | (v << shift)


def to_word(value: Any) -> int:
    """Convert a value-type argument to its unsigned integer word."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        if value < 0:
            raise StorageLayoutError(f"Negative values are not supported: {value}")
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) > WORD_SIZE:
            raise StorageLayoutError(f"Value longer than a word: {len(value)} bytes")
        return int.from_bytes(value, "big")
    raise StorageLayoutError(f"Cannot encode {value!r} into a storage word")


def encode_bytes(slot: int, data: bytes) -> dict[int, int]:
    """Encode a string/bytes storage variable.

    Up to 31 bytes: data left-aligned, lowest byte = length * 2.
    Longer: slot holds length * 2 + 1, data at keccak256(slot) onwards.
    """
    if len(data) < WORD_SIZE:
        word = data.ljust(WORD_SIZE - 1, b"\x00") + bytes([len(data) * 2])
        return {slot: int.from_bytes(word, "big")}

    writes = {slot: len(data) * 2 + 1}
    base = int.from_bytes(keccak256(slot.to_bytes(WORD_SIZE, "big")), "big")
    for i in range(0, len(data), WORD_SIZE):
        chunk = data[i:i + WORD_SIZE].ljust(WORD_SIZE, b"\x00")
        writes[(base + i // WORD_SIZE) % (1 << 256)] = int.from_bytes(chunk, "big")
    return writes
