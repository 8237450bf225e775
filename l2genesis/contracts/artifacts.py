"""
Compiled contract artifacts (the code provider).

Artifacts follow the Foundry layout: <root>/<Name>.sol/<Name>.json holding
deployedBytecode (with immutableReferences), storageLayout and the solc AST.
Immutable references are keyed by AST id; names are resolved through the
AST of the artifact itself and, when inherited, of the other artifacts in the
same directory.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional

from l2genesis.common.errors import ArtifactError, MissingDependencyError
from l2genesis.common.storage_layout import StorageLayout, WORD_SIZE


logger = logging.getLogger(__name__)


@dataclass
class ContractArtifact:
    name: str
    deployed_code: bytes
    # AST id -> [(start, length), ...] offsets into deployed_code
    immutable_references: dict[int, list[tuple[int, int]]] = field(default_factory=dict)
    # AST id -> immutable variable name
    immutable_names: dict[int, str] = field(default_factory=dict)
    storage_layout: StorageLayout = field(default_factory=StorageLayout.empty)

    @property
    def has_immutables(self) -> bool:
        return bool(self.immutable_references)

    @classmethod
    def from_json(cls, name: str, data: dict) -> ContractArtifact:
        deployed = data.get("deployedBytecode")
        if not isinstance(deployed, dict) or "object" not in deployed:
            raise ArtifactError(f"{name}: artifact has no deployedBytecode")

        code_hex = deployed["object"].removeprefix("0x")
        try:
            code = bytes.fromhex(code_hex)
        except ValueError:
            raise ArtifactError(f"{name}: deployed bytecode is not hex (unlinked library?)") from None

        references: dict[int, list[tuple[int, int]]] = {}
        for ast_id, refs in (deployed.get("immutableReferences") or {}).items():
            references[int(ast_id)] = [(int(r["start"]), int(r["length"])) for r in refs]

        layout_data = data.get("storageLayout")
        layout = StorageLayout.from_json(layout_data) if layout_data else StorageLayout.empty()

        return cls(
            name=name,
            deployed_code=code,
            immutable_references=references,
            immutable_names=find_immutable_names(data.get("ast")),
            storage_layout=layout,
        )


def find_immutable_names(ast: Any) -> dict[int, str]:
    """Collect AST id -> name of every immutable state variable."""
    names: dict[int, str] = {}
    if ast is None:
        return names
    stack = [ast]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            if (node.get("nodeType") == "VariableDeclaration"
                    and node.get("mutability") == "immutable"):
                names[int(node["id"])] = node["name"]
            stack.extend(node.values())
        elif isinstance(node, list):
            stack.extend(node)
    return names


# ---------------------------------------------------------------------------
# Immutable linking
# ---------------------------------------------------------------------------

def immutable_word(value: Any) -> bytes:
    """Encode an immutable value as the 32-byte word solc embeds."""
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        if value < 0:
            value += 1 << 256
        return value.to_bytes(WORD_SIZE, "big")
    if isinstance(value, (bytes, bytearray)) and len(value) <= WORD_SIZE:
        return bytes(value).rjust(WORD_SIZE, b"\x00")
    raise ArtifactError(f"Cannot encode immutable value {value!r}")


def link_immutables(artifact: ContractArtifact, values: dict[str, Any]) -> bytes:
    """Return the deployed code with every immutable reference filled in.

    This is what the constructor's return does: the runtime code is emitted
    with the immutable values written at each reference.
    """
    code = bytearray(artifact.deployed_code)
    linked: set[str] = set()
    for ast_id, refs in sorted(artifact.immutable_references.items()):
        name = artifact.immutable_names.get(ast_id)
        if name is None:
            raise ArtifactError(f"{artifact.name}: cannot resolve immutable reference {ast_id}")
        if name not in values:
            raise ArtifactError(f"{artifact.name}: no value for immutable {name}")
        word = immutable_word(values[name])
        for start, length in refs:
            if length > WORD_SIZE or start + length > len(code):
                raise ArtifactError(
                    f"{artifact.name}: immutable {name} reference out of bounds ({start}+{length})"
                )
            code[start:start + length] = word[WORD_SIZE - length:]
        linked.add(name)

    unused = set(values) - linked
    if unused:
        # solc drops references to immutables the runtime code never reads
        logger.debug("%s: immutables without references: %s", artifact.name, sorted(unused))
    return bytes(code)


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

class CodeProvider(ABC):
    """Source of compiled contract artifacts by contract name."""

    @abstractmethod
    def get_artifact(self, name: str) -> ContractArtifact:
        """Return the artifact, or raise MissingDependencyError."""
        ...

    def get_deployed_code(self, name: str) -> bytes:
        return self.get_artifact(name).deployed_code


class InMemoryCodeProvider(CodeProvider):
    def __init__(self, artifacts: Optional[dict[str, ContractArtifact]] = None) -> None:
        self._artifacts: dict[str, ContractArtifact] = dict(artifacts or {})

    def add(self, artifact: ContractArtifact) -> None:
        self._artifacts[artifact.name] = artifact

    def get_artifact(self, name: str) -> ContractArtifact:
        try:
            return self._artifacts[name]
        except KeyError:
            raise MissingDependencyError(f"No artifact for contract {name}") from None


class ArtifactDirectory(CodeProvider):
    """Foundry artifacts directory (forge-artifacts/)."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._cache: dict[str, ContractArtifact] = {}
        self._ast_index: Optional[dict[int, str]] = None

    def path_for(self, name: str) -> Path:
        return self.root / f"{name}.sol" / f"{name}.json"

    def get_artifact(self, name: str) -> ContractArtifact:
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        path = self.path_for(name)
        if not path.exists():
            raise MissingDependencyError(f"No artifact for contract {name} at {path}")
        artifact = ContractArtifact.from_json(name, self._load(path))

        unresolved = set(artifact.immutable_references) - set(artifact.immutable_names)
        if unresolved:
            # Declared in a base contract: look in the other artifacts.
            index = self._index_immutables()
            for ast_id in unresolved:
                if ast_id in index:
                    artifact.immutable_names[ast_id] = index[ast_id]

        logger.debug("Loaded artifact %s (%d bytes)", name, len(artifact.deployed_code))
        self._cache[name] = artifact
        return artifact

    def _load(self, path: Path) -> dict:
        try:
            with open(path) as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ArtifactError(f"Invalid artifact JSON {path}: {e}") from e

    def _iter_artifact_files(self) -> Iterator[Path]:
        return iter(sorted(self.root.glob("*.sol/*.json")))

    def _index_immutables(self) -> dict[int, str]:
        if self._ast_index is None:
            index: dict[int, str] = {}
            for path in self._iter_artifact_files():
                index.update(find_immutable_names(self._load(path).get("ast")))
            self._ast_index = index
        return self._ast_index
