"""Dev account funding."""

from __future__ import annotations

import logging

from eth_utils import from_wei, to_checksum_address

from l2genesis.common.config import DeployConfig
from l2genesis.common.errors import InvariantViolation
from l2genesis.storage.store import Store


logger = logging.getLogger(__name__)


def fund_dev_accounts(store: Store, config: DeployConfig) -> int:
    """Set every configured dev account to the configured balance.

    Returns the number of funded accounts; 0 when funding is disabled.
    """
    if not config.fund_dev_accounts:
        logger.info("Dev account funding disabled, skipping")
        return 0

    amount = config.dev_account_fund_amount
    for addr in config.dev_accounts:
        store.set_balance(addr, amount)

    for addr in config.dev_accounts:
        balance = store.get_balance(addr)
        if balance != amount:
            raise InvariantViolation(
                f"Dev account {to_checksum_address(addr)} has balance {balance}, expected {amount}"
            )

    logger.info(
        "Funded %d dev accounts with %s ether each",
        len(config.dev_accounts), from_wei(amount, "ether"),
    )
    return len(config.dev_accounts)
