"""Тесты для Settlement Engine.

Coverage:
- Успешный settlement (scenario B) и сохранение сумм
- Порядок проверок: TRADE_NOT_FOUND → TRADE_NOT_OPEN → SELF_TRADE →
  OVERFLOW → UNAUTHORIZED → INSUFFICIENT_FUNDS
- Энергия продавца потрачена между create и accept → SETTLEMENT_FAILED
- Отказ не меняет исходное состояние
"""

import pytest

from src.core.config import LedgerConfig
from src.core.domain import LedgerState, TradeStatus
from src.core.errors import (
    ErrorKind,
    InsufficientFundsError,
    LedgerOverflowError,
    SelfTradeError,
    SettlementFailedError,
    TradeNotFoundError,
    TradeNotOpenError,
    UnauthorizedError,
)
from src.core.math import UINT128_MAX
from src.ledger import AccountStore, TradeBook, check_invariants
from src.settlement import SettlementEngine, SettlementReceipt


OWNER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
U1 = "ST1SJ3DTE5DN7X54YDH5D64R3BCB6A2AG2ZQ8YPD5"
U2 = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
U3 = "ST3AM1A56AK2C1XAFJ4115ZSV26EB49BVQ10MGCS0"


@pytest.fixture
def config():
    return LedgerConfig(owner=OWNER)


@pytest.fixture
def store(config):
    return AccountStore(config)


@pytest.fixture
def book(config, store):
    return TradeBook(config, store)


@pytest.fixture
def engine(config, store, book):
    return SettlementEngine(config, store, book)


@pytest.fixture
def open_trade_state(store, book):
    """U1: 100 энергии, U2: 10000 средств, открыта сделка 0 (50 @ 100)."""
    state = LedgerState.initial(energy_price=100)
    state = store.register(state, U1)
    state = store.register(state, U2)
    state = store.add_energy(state, U1, 100)
    state = store.add_funds(state, U2, 10000)
    state, trade_id = book.create_trade(state, U1, 50, 100)
    assert trade_id == 0
    return state


class TestSuccessfulSettlement:
    """Тесты успешного settlement."""

    def test_scenario_b(self, engine, open_trade_state):
        state, receipt = engine.accept_trade(open_trade_state, U2, 0)

        assert state.accounts[U1].energy_balance == 50
        assert state.accounts[U1].funds_balance == 5000
        assert state.accounts[U2].energy_balance == 50
        assert state.accounts[U2].funds_balance == 5000

        trade = state.trades[0]
        assert trade.status == TradeStatus.COMPLETED
        assert trade.buyer == U2

        assert receipt == SettlementReceipt(
            trade_id=0, seller=U1, buyer=U2, amount=50, price=100, total_cost=5000
        )

    def test_conservation(self, engine, open_trade_state):
        before = open_trade_state.accounts
        state, _ = engine.accept_trade(open_trade_state, U2, 0)
        after = state.accounts

        assert (
            after[U1].energy_balance + after[U2].energy_balance
            == before[U1].energy_balance + before[U2].energy_balance
        )
        assert (
            after[U1].funds_balance + after[U2].funds_balance
            == before[U1].funds_balance + before[U2].funds_balance
        )
        # Settlement не меняет grid_balance
        assert state.grid_balance == open_trade_state.grid_balance
        assert check_invariants(state) == []

    def test_exact_funds_suffice(self, store, engine, open_trade_state):
        state = store.register(open_trade_state, U3)
        state = store.add_funds(state, U3, 5000)
        state, receipt = engine.accept_trade(state, U3, 0)
        assert state.accounts[U3].funds_balance == 0
        assert receipt.total_cost == 5000

    def test_original_state_untouched(self, engine, open_trade_state):
        engine.accept_trade(open_trade_state, U2, 0)
        assert open_trade_state.trades[0].status == TradeStatus.OPEN
        assert open_trade_state.accounts[U2].funds_balance == 10000


class TestRejections:
    """Тесты отказов (scenario D и порядок проверок)."""

    def test_trade_not_found(self, engine, open_trade_state):
        with pytest.raises(TradeNotFoundError):
            engine.accept_trade(open_trade_state, U2, 999)

    def test_insufficient_funds(self, store, engine, open_trade_state):
        state = store.register(open_trade_state, U3)
        with pytest.raises(InsufficientFundsError) as exc_info:
            engine.accept_trade(state, U3, 0)
        assert exc_info.value.details["required"] == 5000

    def test_self_trade(self, engine, open_trade_state):
        with pytest.raises(SelfTradeError):
            engine.accept_trade(open_trade_state, U1, 0)

    def test_trade_not_open(self, store, engine, open_trade_state):
        state, _ = engine.accept_trade(open_trade_state, U2, 0)
        state = store.register(state, U3)
        state = store.add_funds(state, U3, 10000)
        with pytest.raises(TradeNotOpenError):
            engine.accept_trade(state, U3, 0)

    def test_completed_trade_self_accept_reports_not_open(self, engine, open_trade_state):
        """TRADE_NOT_OPEN проверяется раньше SELF_TRADE."""
        state, _ = engine.accept_trade(open_trade_state, U2, 0)
        with pytest.raises(TradeNotOpenError):
            engine.accept_trade(state, U1, 0)

    def test_unregistered_buyer(self, engine, open_trade_state):
        with pytest.raises(UnauthorizedError):
            engine.accept_trade(open_trade_state, U3, 0)

    def test_total_cost_overflow(self, store, book, engine):
        state = LedgerState.initial(energy_price=100)
        state = store.register(state, U1)
        state = store.register(state, U2)
        state = store.add_energy(state, U1, 2**64)
        state, trade_id = book.create_trade(state, U1, 2**64, 2**64)
        with pytest.raises(LedgerOverflowError):
            engine.accept_trade(state, U2, trade_id)

    def test_seller_funds_overflow(self, store, book, engine):
        """Средства продавца переполнились бы после settlement."""
        state = LedgerState.initial(energy_price=100)
        state = store.register(state, U1)
        state = store.register(state, U2)
        state = store.add_energy(state, U1, 10)
        state = store.add_funds(state, U1, UINT128_MAX)
        state = store.add_funds(state, U2, 100)
        state, trade_id = book.create_trade(state, U1, 10, 10)
        with pytest.raises(LedgerOverflowError):
            engine.accept_trade(state, U2, trade_id)


class TestSellerEnergySpentBeforeAcceptance:
    """Энергия не резервируется при create_trade: settlement отклоняется целиком."""

    def test_consumed_energy(self, store, engine, open_trade_state):
        state = store.consume_energy(open_trade_state, U1, 80)

        with pytest.raises(SettlementFailedError) as exc_info:
            engine.accept_trade(state, U2, 0)
        assert exc_info.value.kind == ErrorKind.SETTLEMENT_FAILED

        # Ничего не применено
        assert state.trades[0].status == TradeStatus.OPEN
        assert state.accounts[U1].energy_balance == 20
        assert state.accounts[U2].funds_balance == 10000

    def test_second_trade_exhausts_energy(self, store, book, engine, open_trade_state):
        """Две сделки на одну и ту же энергию: вторая не проходит settlement."""
        state, second_id = book.create_trade(open_trade_state, U1, 100, 1)
        state, _ = engine.accept_trade(state, U2, second_id)
        assert state.accounts[U1].energy_balance == 0

        with pytest.raises(SettlementFailedError):
            engine.accept_trade(state, U2, 0)
        assert state.trades[0].status == TradeStatus.OPEN

    def test_partial_remaining_energy_not_used(self, store, engine, open_trade_state):
        """Частичное исполнение не допускается."""
        state = store.consume_energy(open_trade_state, U1, 51)
        with pytest.raises(SettlementFailedError):
            engine.accept_trade(state, U2, 0)
        assert state.accounts[U1].energy_balance == 49
