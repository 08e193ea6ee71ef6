"""Grid Aggregate — суммарный баланс энергии сети.

Меняется только как побочный эффект изменения energy_balance в Account Store,
в том же переходе состояния.
"""

import logging
from typing import Iterable

from src.core.config import LedgerConfig
from src.core.domain import Account
from src.core.math.checked_arithmetic import checked_add, checked_sub

logger = logging.getLogger(__name__)


class GridAggregate:
    """Арифметика grid_balance с проверкой диапазона."""

    def __init__(self, config: LedgerConfig):
        self.config = config

    def credit(self, grid_balance: int, amount: int) -> int:
        """grid_balance + amount.

        Raises:
            LedgerOverflowError: если сумма выходит за max_value
        """
        new_balance = checked_add(grid_balance, amount, self.config.max_value)
        logger.debug("grid credit %d: %d -> %d", amount, grid_balance, new_balance)
        return new_balance

    def debit(self, grid_balance: int, amount: int) -> int:
        """grid_balance - amount.

        Raises:
            LedgerOverflowError: при underflow (рассинхронизация с балансами счетов)
        """
        new_balance = checked_sub(grid_balance, amount)
        logger.debug("grid debit %d: %d -> %d", amount, grid_balance, new_balance)
        return new_balance

    @staticmethod
    def recompute(accounts: Iterable[Account]) -> int:
        """Сумма energy_balance по счетам (для аудита инварианта)."""
        return sum(account.energy_balance for account in accounts)
