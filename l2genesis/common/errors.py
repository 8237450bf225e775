"""
Errors raised while building the genesis state.

Every error is fatal for the build: nothing is retried and no partial
allocs file is written.
"""

from __future__ import annotations


class GenesisError(Exception):
    """Base class for genesis construction errors."""
    pass


class InvariantViolation(GenesisError):
    """The constructed state breaks a construction invariant."""
    pass


class MissingDependencyError(GenesisError):
    """A registry address or contract artifact is not available."""
    pass


class ArtifactError(GenesisError):
    """A contract artifact is malformed or cannot be linked."""
    pass


class StorageLayoutError(GenesisError):
    """A storage variable is unknown or its type cannot be encoded."""
    pass


class AlreadyInitializedError(GenesisError):
    """initialize() was invoked on an already initialized contract."""
    def __init__(self, address: bytes):
        self.address = address
        super().__init__(
            f"Initializable: contract is already initialized (0x{address.hex()})"
        )
