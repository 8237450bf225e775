"""
l2genesis: layer-2 genesis allocs builder.

Entry point:
  1. Parse CLI arguments
  2. Load the deploy config for the named context
  3. Load L1 deployments and contract artifacts
  4. Build the genesis state
  5. Write the canonical allocs file
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from l2genesis.common.config import L1Dependencies, load_deploy_config
from l2genesis.common.errors import GenesisError
from l2genesis.contracts.artifacts import ArtifactDirectory
from l2genesis.contracts.registry import AddressRegistry
from l2genesis.genesis.builder import L2Genesis


logger = logging.getLogger("l2genesis")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="l2genesis",
        description="Build the genesis allocs of an OP-Stack layer-2 chain",
    )
    parser.add_argument(
        "--deploy-config-dir",
        required=True,
        help="Directory holding <context>.json deploy configs",
    )
    parser.add_argument(
        "--context",
        default="devnetL1",
        help="Deploy config name (default: devnetL1)",
    )
    parser.add_argument(
        "--l1-deployments",
        required=True,
        help="JSON file mapping L1 contract names to addresses",
    )
    parser.add_argument(
        "--artifacts",
        required=True,
        help="Foundry artifacts directory",
    )
    parser.add_argument(
        "--outfile",
        required=True,
        help="Path of the allocs JSON to write",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_deploy_config(args.deploy_config_dir, args.context)
        l1 = L1Dependencies.from_registry(AddressRegistry.from_file(args.l1_deployments))
        genesis = L2Genesis(config, l1, ArtifactDirectory(args.artifacts))
        count = genesis.write(args.outfile)
    except GenesisError as e:
        logger.error("Genesis build failed: %s", e)
        return 1

    logger.info("Genesis allocs for %s: %d accounts", args.context, count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
