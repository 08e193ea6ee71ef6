"""EnergyGrid — единая точка входа в ledger.

Владеет единственным LedgerState и сериализует все операции одним
RLock (single-writer). Каждая операция:
1. вычисляет следующее состояние целиком из текущего,
2. при успехе коммитит его заменой одной ссылки,
3. при ошибке возвращает LedgerResult с ErrorKind, не трогая состояние.

Мутации никогда не поднимают LedgerError наружу: ошибка всегда
возвращается как типизированный результат.
"""

import logging
import threading
from typing import Any, Callable, Optional

from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError

from src.core.config import LedgerConfig
from src.core.contracts import validate_ledger_state
from src.core.domain import Account, LedgerResult, LedgerState, Trade
from src.core.errors import LedgerError, LedgerValidationError
from src.ledger import AccountStore, GridAggregate, PriceRegister, TradeBook, check_invariants
from src.settlement import SettlementEngine

logger = logging.getLogger(__name__)

# Версия формата снапшота (src/core/contracts/schema/ledger_state.json)
SNAPSHOT_SCHEMA_VERSION = "1"

# Операция над состоянием: state → (new_state, value)
Transition = Callable[[LedgerState], tuple[LedgerState, Any]]


class EnergyGrid:
    """Ledger энергосети: счета, баланс сети, цена, сделки, settlement."""

    def __init__(self, config: LedgerConfig, state: Optional[LedgerState] = None):
        """
        Args:
            config: конфигурация ledger (owner, начальная цена, диапазон)
            state: начальное состояние (по умолчанию пустое)

        Raises:
            LedgerValidationError: некорректная конфигурация
        """
        config.validate()
        self.config = config

        self.grid = GridAggregate(config)
        self.accounts = AccountStore(config, self.grid)
        self.prices = PriceRegister(config)
        self.trades = TradeBook(config, self.accounts)
        self.settlement = SettlementEngine(config, self.accounts, self.trades)

        self._lock = threading.RLock()
        if state is None:
            state = LedgerState.initial(config.default_energy_price)
        # Словари переданного состояния не разделяются с вызывающим кодом
        self._state = state.detached()

    @property
    def state(self) -> LedgerState:
        """Текущее зафиксированное состояние.

        Снапшот только для чтения: accounts/trades обёрнуты в
        MappingProxyType, запись через них поднимает TypeError.
        """
        with self._lock:
            return self._state.read_only()

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def register_prosumer(self, caller: str) -> LedgerResult:
        return self._apply(
            "register_prosumer",
            lambda s: (self.accounts.register(s, caller), True),
            caller=caller,
        )

    def add_energy(self, caller: str, amount: int) -> LedgerResult:
        return self._apply(
            "add_energy",
            lambda s: (self.accounts.add_energy(s, caller, amount), True),
            caller=caller,
            amount=amount,
        )

    def consume_energy(self, caller: str, amount: int) -> LedgerResult:
        return self._apply(
            "consume_energy",
            lambda s: (self.accounts.consume_energy(s, caller, amount), True),
            caller=caller,
            amount=amount,
        )

    def add_funds(self, caller: str, amount: int) -> LedgerResult:
        return self._apply(
            "add_funds",
            lambda s: (self.accounts.add_funds(s, caller, amount), True),
            caller=caller,
            amount=amount,
        )

    def set_energy_price(self, caller: str, new_price: int) -> LedgerResult:
        return self._apply(
            "set_energy_price",
            lambda s: (self.prices.set_price(s, caller, new_price), True),
            caller=caller,
            new_price=new_price,
        )

    def create_trade(self, seller: str, amount: int, price: int) -> LedgerResult:
        """Успех: value = новый trade_id."""
        return self._apply(
            "create_trade",
            lambda s: self.trades.create_trade(s, seller, amount, price),
            seller=seller,
            amount=amount,
            price=price,
        )

    def accept_trade(self, buyer: str, trade_id: int) -> LedgerResult:
        """Успех: value = True; SettlementReceipt пишется в лог."""

        def transition(state: LedgerState) -> tuple[LedgerState, Any]:
            new_state, receipt = self.settlement.accept_trade(state, buyer, trade_id)
            logger.info(
                "trade %d settled: seller=%s buyer=%s amount=%d total_cost=%d",
                receipt.trade_id, receipt.seller, receipt.buyer,
                receipt.amount, receipt.total_cost,
            )
            return new_state, True

        return self._apply("accept_trade", transition, buyer=buyer, trade_id=trade_id)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_account(self, identity: str) -> Optional[Account]:
        return self.accounts.get(self.state, identity)

    def get_energy_balance(self, identity: str) -> int:
        return self.accounts.energy_balance(self.state, identity)

    def get_funds_balance(self, identity: str) -> int:
        return self.accounts.funds_balance(self.state, identity)

    def get_grid_balance(self) -> int:
        return self.state.grid_balance

    def get_energy_price(self) -> int:
        return self.prices.get_price(self.state)

    def get_trade(self, trade_id: int) -> LedgerResult:
        """Успех: value = Trade; иначе TRADE_NOT_FOUND / VALIDATION_ERROR."""
        try:
            trade: Trade = self.trades.lookup(self.state, trade_id)
        except LedgerError as exc:
            return LedgerResult.failure(exc)
        return LedgerResult.success(trade)

    def verify_invariants(self) -> list[str]:
        """Нарушения инвариантов текущего состояния (пусто в норме)."""
        return check_invariants(self.state, self.config.max_value)

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def export_snapshot(self) -> dict:
        """JSON-совместимый снапшот, соответствующий ledger_state.json."""
        state = self.state
        snapshot = {
            "schema_version": SNAPSHOT_SCHEMA_VERSION,
            "accounts": {
                identity: account.model_dump(mode="json")
                for identity, account in state.accounts.items()
            },
            "grid_balance": state.grid_balance,
            "energy_price": state.energy_price,
            "trades": {
                str(trade_id): trade.model_dump(mode="json")
                for trade_id, trade in state.trades.items()
            },
            "next_trade_id": state.next_trade_id,
        }
        validate_ledger_state(snapshot)
        return snapshot

    @classmethod
    def from_snapshot(cls, config: LedgerConfig, data: dict) -> "EnergyGrid":
        """Восстановление ledger из снапшота.

        Raises:
            LedgerValidationError: снапшот не соответствует схеме,
                не строится в модели или нарушает инварианты
        """
        try:
            validate_ledger_state(data)
        except SchemaValidationError as exc:
            raise LedgerValidationError(
                "Snapshot does not match ledger_state schema",
                details={"path": "/".join(str(p) for p in exc.absolute_path), "reason": exc.message},
            ) from exc

        try:
            state = LedgerState(
                accounts={k: Account(**v) for k, v in data["accounts"].items()},
                grid_balance=data["grid_balance"],
                energy_price=data["energy_price"],
                trades={int(k): Trade(**v) for k, v in data["trades"].items()},
                next_trade_id=data["next_trade_id"],
            )
        except ValidationError as exc:
            raise LedgerValidationError(
                "Snapshot records are invalid", details={"errors": exc.error_count()}
            ) from exc

        violations = check_invariants(state, config.max_value)
        if violations:
            raise LedgerValidationError(
                "Snapshot violates ledger invariants", details={"violations": violations}
            )

        logger.info(
            "ledger restored: %d accounts, %d trades", state.account_count(), len(state.trades)
        )
        return cls(config, state)

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _apply(self, operation: str, transition: Transition, **params: Any) -> LedgerResult:
        """Выполнение операции с фиксацией состояния только при успехе."""
        with self._lock:
            try:
                new_state, value = transition(self._state)
            except LedgerError as exc:
                logger.warning("%s rejected: %s %s", operation, exc.kind.value, params)
                return LedgerResult.failure(exc)

            self._state = new_state
            logger.info("%s ok: %s -> %r", operation, params, value)
            return LedgerResult.success(value)
