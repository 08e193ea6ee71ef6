"""Settlement Engine — принятие OPEN сделки и обмен энергии на средства.

Порядок проверок accept_trade:
1. trade_id существует → иначе TRADE_NOT_FOUND
2. status == OPEN → иначе TRADE_NOT_OPEN
3. buyer != seller → иначе SELF_TRADE
4. total_cost = amount * price без переполнения → иначе OVERFLOW
5. buyer зарегистрирован → иначе UNAUTHORIZED
6. buyer.funds_balance >= total_cost → иначе INSUFFICIENT_FUNDS

Энергия продавца на шаге проверок повторно не проверяется: она была
проверена при create_trade и не резервировалась. Если к моменту settlement
продавец уже потратил её, построение нового счёта продавца нарушает
post-condition (energy_balance >= 0) и settlement отклоняется целиком
с SETTLEMENT_FAILED.

Атомарность: следующее состояние (два счёта + запись сделки) строится
полностью до возврата; при любой ошибке исходное состояние не затронуто.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from pydantic import ValidationError

from src.core.config import LedgerConfig
from src.core.domain import Account, LedgerState, Trade
from src.core.errors import (
    InsufficientFundsError,
    SelfTradeError,
    SettlementFailedError,
    TradeNotOpenError,
)
from src.core.math.checked_arithmetic import checked_add, checked_mul, validate_identity
from src.ledger.account_store import AccountStore
from src.ledger.trade_book import TradeBook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementReceipt:
    """Итог успешного settlement."""

    trade_id: int
    seller: str
    buyer: str
    amount: int
    price: int
    total_cost: int


class SettlementEngine:
    """Settlement Engine: валидация, затем атомарный переход состояния.

    Settlement энергетически нейтрален: энергия перемещается между двумя
    счетами, поэтому grid_balance не меняется.
    """

    def __init__(
        self,
        config: LedgerConfig,
        account_store: Optional[AccountStore] = None,
        trade_book: Optional[TradeBook] = None,
    ):
        """
        Args:
            config: конфигурация ledger
            account_store: Account Store (создаётся по config, если не задан)
            trade_book: Trade Book (создаётся поверх account_store, если не задан)
        """
        self.config = config
        self.account_store = account_store or AccountStore(config)
        self.trade_book = trade_book or TradeBook(config, self.account_store)

    def accept_trade(
        self, state: LedgerState, buyer: str, trade_id: int
    ) -> tuple[LedgerState, SettlementReceipt]:
        """Принятие OPEN сделки покупателем.

        Args:
            state: текущее состояние
            buyer: identity покупателя
            trade_id: идентификатор сделки

        Returns:
            (новое состояние, SettlementReceipt)

        Raises:
            LedgerError: подкласс по ErrorKind; state при этом не изменён
        """
        validate_identity(buyer, "buyer")

        # 1-2. Сделка существует и открыта
        trade = self.trade_book.lookup(state, trade_id)
        if not trade.is_open():
            raise TradeNotOpenError(
                "Trade is not open",
                details={"trade_id": trade_id, "status": trade.status.value},
            )

        # 3. Продавец не может принять собственную сделку
        if buyer == trade.seller:
            raise SelfTradeError(
                "Seller cannot accept own trade",
                details={"trade_id": trade_id, "seller": trade.seller},
            )

        # 4. Полная стоимость
        total_cost = checked_mul(trade.amount, trade.price, self.config.max_value)

        # 5-6. Средства покупателя
        buyer_account = self.account_store.require(state, buyer)
        if buyer_account.funds_balance < total_cost:
            raise InsufficientFundsError(
                "Buyer funds below total trade cost",
                details={
                    "trade_id": trade_id,
                    "required": total_cost,
                    "available": buyer_account.funds_balance,
                },
            )

        seller_account = self.account_store.require(state, trade.seller)
        new_seller, new_buyer, completed = self._compute_settlement(
            trade, seller_account, buyer_account, buyer, total_cost
        )

        new_state = self.account_store.replace_accounts(
            state, {trade.seller: new_seller, buyer: new_buyer}
        )
        new_state = self.trade_book.replace_trade(new_state, completed)

        logger.debug(
            "settled trade %d: %s -> %s, %d energy for %d funds",
            trade_id, trade.seller, buyer, trade.amount, total_cost,
        )
        receipt = SettlementReceipt(
            trade_id=trade.trade_id,
            seller=trade.seller,
            buyer=buyer,
            amount=trade.amount,
            price=trade.price,
            total_cost=total_cost,
        )
        return new_state, receipt

    def _compute_settlement(
        self,
        trade: Trade,
        seller_account: Account,
        buyer_account: Account,
        buyer: str,
        total_cost: int,
    ) -> tuple[Account, Account, Trade]:
        """Построение новых записей продавца, покупателя и сделки.

        Суммы проверяются через checked_add (OVERFLOW); отрицательные
        балансы отсекаются валидацией модели Account (SETTLEMENT_FAILED).
        """
        new_seller_funds = checked_add(
            seller_account.funds_balance, total_cost, self.config.max_value
        )
        new_buyer_energy = checked_add(
            buyer_account.energy_balance, trade.amount, self.config.max_value
        )

        try:
            new_seller = Account(
                energy_balance=seller_account.energy_balance - trade.amount,
                funds_balance=new_seller_funds,
            )
            new_buyer = Account(
                energy_balance=new_buyer_energy,
                funds_balance=buyer_account.funds_balance - total_cost,
            )
            completed = trade.complete(buyer)
        except ValidationError as exc:
            raise SettlementFailedError(
                "Settlement post-condition violated",
                details={
                    "trade_id": trade.trade_id,
                    "seller_energy": seller_account.energy_balance,
                    "amount": trade.amount,
                    "errors": exc.error_count(),
                },
            ) from exc

        return new_seller, new_buyer, completed
