"""Account Store — счета участников (prosumers).

Владеет отображением identity → Account. Каждая операция является тотальной функцией
(state, caller, amount) → new_state: при ошибке исключение поднимается до
построения нового состояния, поэтому частичное применение невозможно.

Порядок проверок в каждой операции:
1. Валидация аргументов → LedgerValidationError
2. Бизнес-правила (регистрация, достаточность баланса)
3. Арифметика с проверкой диапазона → LedgerOverflowError
"""

import logging
from typing import Optional

from src.core.config import LedgerConfig
from src.core.domain import Account, LedgerState
from src.core.errors import (
    AlreadyRegisteredError,
    InsufficientEnergyError,
    UnauthorizedError,
)
from src.core.math.checked_arithmetic import (
    checked_add,
    validate_identity,
    validate_non_negative_amount,
)
from src.ledger.grid_aggregate import GridAggregate

logger = logging.getLogger(__name__)


class AccountStore:
    """Операции над счетами участников."""

    def __init__(self, config: LedgerConfig, grid: Optional[GridAggregate] = None):
        self.config = config
        self.grid = grid or GridAggregate(config)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, state: LedgerState, identity: str) -> Optional[Account]:
        return state.accounts.get(identity)

    def require(self, state: LedgerState, identity: str) -> Account:
        """Счёт участника.

        Raises:
            UnauthorizedError: если identity не зарегистрирован
        """
        account = state.accounts.get(identity)
        if account is None:
            raise UnauthorizedError("Identity is not registered", details={"caller": identity})
        return account

    def energy_balance(self, state: LedgerState, identity: str) -> int:
        """Баланс энергии (0 для незарегистрированных)."""
        account = state.accounts.get(identity)
        return account.energy_balance if account is not None else 0

    def funds_balance(self, state: LedgerState, identity: str) -> int:
        """Баланс средств (0 для незарегистрированных)."""
        account = state.accounts.get(identity)
        return account.funds_balance if account is not None else 0

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def register(self, state: LedgerState, caller: str) -> LedgerState:
        """Создание счёта с нулевыми балансами.

        Raises:
            LedgerValidationError: некорректный caller
            AlreadyRegisteredError: счёт уже существует
        """
        validate_identity(caller)
        if caller in state.accounts:
            raise AlreadyRegisteredError("Identity already registered", details={"caller": caller})

        logger.debug("register %s", caller)
        return self.replace_accounts(state, {caller: Account()})

    def add_energy(self, state: LedgerState, caller: str, amount: int) -> LedgerState:
        """Увеличение energy_balance и grid_balance на amount.

        Raises:
            LedgerValidationError: некорректный caller/amount
            UnauthorizedError: caller не зарегистрирован
            LedgerOverflowError: баланс счёта или сети вышел бы за max_value
        """
        validate_identity(caller)
        validate_non_negative_amount(amount, "amount", self.config.max_value)
        account = self.require(state, caller)

        new_energy = checked_add(account.energy_balance, amount, self.config.max_value)
        new_grid = self.grid.credit(state.grid_balance, amount)

        logger.debug("add_energy %s +%d -> %d", caller, amount, new_energy)
        return self.replace_accounts(
            state, {caller: account.with_energy(new_energy)}, grid_balance=new_grid
        )

    def consume_energy(self, state: LedgerState, caller: str, amount: int) -> LedgerState:
        """Уменьшение energy_balance и grid_balance на amount.

        Незарегистрированный caller трактуется как нулевой баланс.

        Raises:
            LedgerValidationError: некорректный caller/amount
            InsufficientEnergyError: нет счёта или energy_balance < amount
        """
        validate_identity(caller)
        validate_non_negative_amount(amount, "amount", self.config.max_value)
        account = state.accounts.get(caller)
        if account is None or account.energy_balance < amount:
            raise InsufficientEnergyError(
                "Energy balance below requested amount",
                details={
                    "caller": caller,
                    "requested": amount,
                    "available": self.energy_balance(state, caller),
                },
            )

        new_energy = account.energy_balance - amount
        new_grid = self.grid.debit(state.grid_balance, amount)

        logger.debug("consume_energy %s -%d -> %d", caller, amount, new_energy)
        return self.replace_accounts(
            state, {caller: account.with_energy(new_energy)}, grid_balance=new_grid
        )

    def add_funds(self, state: LedgerState, caller: str, amount: int) -> LedgerState:
        """Увеличение funds_balance на amount.

        Raises:
            LedgerValidationError: некорректный caller/amount
            UnauthorizedError: caller не зарегистрирован
            LedgerOverflowError: баланс вышел бы за max_value
        """
        validate_identity(caller)
        validate_non_negative_amount(amount, "amount", self.config.max_value)
        account = self.require(state, caller)

        new_funds = checked_add(account.funds_balance, amount, self.config.max_value)

        logger.debug("add_funds %s +%d -> %d", caller, amount, new_funds)
        return self.replace_accounts(state, {caller: account.with_funds(new_funds)})

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def replace_accounts(
        state: LedgerState,
        updates: dict[str, Account],
        grid_balance: Optional[int] = None,
    ) -> LedgerState:
        """Новый LedgerState с заменёнными счетами (и, опционально, grid_balance).

        Исходный state не изменяется: словарь accounts копируется.
        """
        changes: dict = {"accounts": {**state.accounts, **updates}}
        if grid_balance is not None:
            changes["grid_balance"] = grid_balance
        return state.model_copy(update=changes)
