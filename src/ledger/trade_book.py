"""Trade Book — записи сделок и генератор идентификаторов.

Идентификаторы начинаются с 0 и строго возрастают. Счётчик сдвигается
только при успешном create_trade, поэтому неудачные попытки не оставляют
пропусков.

Проверка энергии продавца при создании справочная: энергия не списывается
и не резервируется. Между create_trade и accept_trade продавец может
потратить её (consume_energy или вторая сделка); эту ситуацию разбирает
Settlement Engine.
"""

import logging
from typing import Any, Optional

from src.core.config import LedgerConfig
from src.core.domain import LedgerState, Trade
from src.core.errors import (
    InsufficientEnergyError,
    LedgerValidationError,
    TradeNotFoundError,
)
from src.core.math.checked_arithmetic import (
    is_valid_int,
    validate_identity,
    validate_positive_amount,
)
from src.ledger.account_store import AccountStore

logger = logging.getLogger(__name__)


class TradeBook:
    """Создание и поиск сделок."""

    def __init__(self, config: LedgerConfig, account_store: Optional[AccountStore] = None):
        self.config = config
        self.account_store = account_store or AccountStore(config)

    def create_trade(
        self,
        state: LedgerState,
        seller: str,
        amount: int,
        price: int,
    ) -> tuple[LedgerState, int]:
        """Создание OPEN сделки.

        Args:
            state: текущее состояние
            seller: identity продавца
            amount: объём энергии (> 0)
            price: цена за единицу (> 0)

        Returns:
            (новое состояние, trade_id)

        Raises:
            LedgerValidationError: некорректный seller/amount/price
            InsufficientEnergyError: нет счёта или energy_balance < amount
        """
        validate_identity(seller, "seller")
        validate_positive_amount(amount, "amount", self.config.max_value)
        validate_positive_amount(price, "price", self.config.max_value)

        available = self.account_store.energy_balance(state, seller)
        if not state.is_registered(seller) or available < amount:
            raise InsufficientEnergyError(
                "Seller energy balance below trade amount",
                details={"seller": seller, "requested": amount, "available": available},
            )

        trade_id = state.next_trade_id
        trade = Trade.open(trade_id=trade_id, seller=seller, amount=amount, price=price)

        logger.debug("create_trade %d: %s sells %d @ %d", trade_id, seller, amount, price)
        new_state = state.model_copy(
            update={
                "trades": {**state.trades, trade_id: trade},
                "next_trade_id": trade_id + 1,
            }
        )
        return new_state, trade_id

    def lookup(self, state: LedgerState, trade_id: Any) -> Trade:
        """Сделка по идентификатору.

        Raises:
            LedgerValidationError: trade_id не целое
            TradeNotFoundError: сделки нет (в т.ч. отрицательный trade_id)
        """
        if not is_valid_int(trade_id):
            raise LedgerValidationError(
                "trade_id must be an integer", details={"trade_id": repr(trade_id)}
            )
        trade = state.trades.get(trade_id)
        if trade is None:
            raise TradeNotFoundError("Trade does not exist", details={"trade_id": trade_id})
        return trade

    @staticmethod
    def replace_trade(state: LedgerState, trade: Trade) -> LedgerState:
        """Новый LedgerState с заменённой записью сделки."""
        return state.model_copy(update={"trades": {**state.trades, trade.trade_id: trade}})
