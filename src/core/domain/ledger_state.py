"""
LedgerState — Снапшот полного состояния ledger

Immutable Pydantic модель: единственное владеемое значение состояния,
которое явно передаётся через каждую операцию. Операция строит новый
LedgerState целиком; старый экземпляр никогда не изменяется.
"""

from types import MappingProxyType

from pydantic import BaseModel, Field

from src.core.math.checked_arithmetic import UINT128_MAX

from .account import Account
from .trade import Trade


class LedgerState(BaseModel):
    """
    Состояние ledger.

    Содержит:
    - accounts: identity → Account (Account Store)
    - grid_balance: сумма energy_balance по всем счетам (Grid Aggregate)
    - energy_price: текущая справочная цена (Price Register)
    - trades, next_trade_id: записи сделок и счётчик идентификаторов (Trade Book)
    """

    accounts: dict[str, Account] = Field(
        default_factory=dict, description="Счета участников по identity"
    )
    grid_balance: int = Field(
        0, ge=0, le=UINT128_MAX, description="Суммарный баланс энергии сети"
    )
    energy_price: int = Field(
        ..., gt=0, le=UINT128_MAX, description="Текущая справочная цена энергии"
    )
    trades: dict[int, Trade] = Field(
        default_factory=dict, description="Сделки по trade_id"
    )
    next_trade_id: int = Field(
        0, ge=0, description="Следующий свободный trade_id"
    )

    model_config = {"frozen": True}

    @classmethod
    def initial(cls, energy_price: int) -> "LedgerState":
        """Пустое состояние при старте системы."""
        return cls(energy_price=energy_price)

    def is_registered(self, identity: str) -> bool:
        return identity in self.accounts

    def account_count(self) -> int:
        return len(self.accounts)

    def read_only(self) -> "LedgerState":
        """Копия, у которой accounts/trades доступны только для чтения.

        Запись через такой снапшот (state.accounts[x] = ...) поднимает
        TypeError и не может затронуть зафиксированное состояние.
        """
        return self.model_copy(
            update={
                "accounts": MappingProxyType(self.accounts),
                "trades": MappingProxyType(self.trades),
            }
        )

    def detached(self) -> "LedgerState":
        """Копия с собственными словарями accounts/trades.

        Account и Trade неизменяемы, поэтому достаточно поверхностной копии
        отображений.
        """
        return self.model_copy(
            update={"accounts": dict(self.accounts), "trades": dict(self.trades)}
        )
