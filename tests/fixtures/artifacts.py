"""Synthetic Foundry artifacts for every contract the genesis build loads.

Deployed code is a short prefix unique to the contract followed by one zeroed
32-byte placeholder per immutable. Storage layouts mirror the variables the
build writes.
"""

import json
from pathlib import Path

from l2genesis.common.addresses import PREDEPLOY_NAMES
from l2genesis.contracts.artifacts import ContractArtifact, InMemoryCodeProvider


CONTRACT_NAMES = ["Proxy"] + sorted(PREDEPLOY_NAMES.values())


def _type(label, encoding, size):
    return {"encoding": encoding, "label": label, "numberOfBytes": str(size)}


STORAGE_TYPES = {
    "t_address": _type("address", "inplace", 20),
    "t_bool": _type("bool", "inplace", 1),
    "t_uint8": _type("uint8", "inplace", 1),
    "t_uint256": _type("uint256", "inplace", 32),
    "t_string_storage": _type("string", "bytes", 32),
    "t_contract(CrossDomainMessenger)1001": _type("contract CrossDomainMessenger", "inplace", 20),
    "t_contract(StandardBridge)1002": _type("contract StandardBridge", "inplace", 20),
}


def var(label, slot, type_, offset=0):
    return {
        "astId": 0,
        "contract": "",
        "label": label,
        "offset": offset,
        "slot": str(slot),
        "type": type_,
    }


STORAGE_LAYOUTS = {
    "L2CrossDomainMessenger": [
        var("spacer_0_0_20", 0, "t_address"),
        var("_initialized", 0, "t_uint8", 20),
        var("_initializing", 0, "t_bool", 21),
        var("xDomainMsgSender", 204, "t_address"),
        var("otherMessenger", 207, "t_contract(CrossDomainMessenger)1001"),
    ],
    "L2StandardBridge": [
        var("spacer_0_0_20", 0, "t_address"),
        var("_initialized", 0, "t_uint8", 20),
        var("_initializing", 0, "t_bool", 21),
        var("messenger", 3, "t_contract(CrossDomainMessenger)1001"),
        var("otherBridge", 4, "t_contract(StandardBridge)1002"),
    ],
    "OptimismMintableERC20Factory": [
        var("_initialized", 0, "t_uint8"),
        var("_initializing", 0, "t_bool", 1),
        var("bridge", 1, "t_address"),
    ],
    "L2ERC721Bridge": [
        var("_initialized", 0, "t_uint8"),
        var("_initializing", 0, "t_bool", 1),
        var("messenger", 1, "t_contract(CrossDomainMessenger)1001"),
        var("otherBridge", 2, "t_address"),
    ],
    "ProxyAdmin": [
        var("_owner", 0, "t_address"),
    ],
    "WETH9": [
        var("name", 0, "t_string_storage"),
        var("symbol", 1, "t_string_storage"),
        var("decimals", 2, "t_uint8"),
    ],
    "GovernanceToken": [
        var("_name", 3, "t_string_storage"),
        var("_symbol", 4, "t_string_storage"),
        var("_owner", 10, "t_address"),
    ],
}

FEE_VAULT_IMMUTABLES = ["RECIPIENT", "MIN_WITHDRAWAL_AMOUNT", "WITHDRAWAL_NETWORK"]

IMMUTABLES = {
    "SequencerFeeVault": FEE_VAULT_IMMUTABLES,
    "BaseFeeVault": FEE_VAULT_IMMUTABLES,
    "L1FeeVault": FEE_VAULT_IMMUTABLES,
    "OptimismMintableERC721Factory": ["BRIDGE", "REMOTE_CHAIN_ID"],
    "EAS": [
        "_CACHED_DOMAIN_SEPARATOR",
        "_CACHED_CHAIN_ID",
        "_CACHED_THIS",
        "_HASHED_NAME",
        "_HASHED_VERSION",
        "_TYPE_HASH",
    ],
}


def code_prefix(name):
    return bytes.fromhex("6080604052") + name.encode()


def immutable_offset(name, immutable):
    """Byte offset of an immutable placeholder in the deployed code."""
    return len(code_prefix(name)) + 32 * IMMUTABLES[name].index(immutable)


def deployed_code(name):
    return code_prefix(name) + b"\x00" * 32 * len(IMMUTABLES.get(name, []))


def immutable_id(name, i):
    return 1000 * (CONTRACT_NAMES.index(name) + 1) + i


def artifact_json(name, with_ast=True):
    immutables = IMMUTABLES.get(name, [])
    references = {
        str(immutable_id(name, i)): [{"start": immutable_offset(name, imm), "length": 32}]
        for i, imm in enumerate(immutables)
    }
    data = {
        "abi": [],
        "bytecode": {"object": "0x"},
        "deployedBytecode": {
            "object": "0x" + deployed_code(name).hex(),
            "immutableReferences": references,
        },
        "storageLayout": {
            "storage": STORAGE_LAYOUTS.get(name, []),
            "types": STORAGE_TYPES,
        },
    }
    if with_ast:
        data["ast"] = {
            "nodeType": "SourceUnit",
            "nodes": [{
                "nodeType": "ContractDefinition",
                "name": name,
                "nodes": [
                    {
                        "nodeType": "VariableDeclaration",
                        "id": immutable_id(name, i),
                        "name": imm,
                        "mutability": "immutable",
                    }
                    for i, imm in enumerate(immutables)
                ],
            }],
        }
    return data


def make_artifact(name):
    return ContractArtifact.from_json(name, artifact_json(name))


def make_code_provider():
    return InMemoryCodeProvider({name: make_artifact(name) for name in CONTRACT_NAMES})


def write_artifacts(root, names=None):
    root = Path(root)
    for name in names or CONTRACT_NAMES:
        path = root / f"{name}.sol" / f"{name}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(artifact_json(name)))
    return root
