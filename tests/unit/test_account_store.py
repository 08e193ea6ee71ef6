"""Тесты для Account Store и Grid Aggregate.

Coverage:
- register / add_energy / consume_energy / add_funds
- Синхронность grid_balance с балансами счетов
- Отказ без частичного применения (исходный state не меняется)
- Переполнение
"""

import pytest

from src.core.config import LedgerConfig
from src.core.domain import Account, LedgerState
from src.core.errors import (
    AlreadyRegisteredError,
    InsufficientEnergyError,
    LedgerOverflowError,
    LedgerValidationError,
    UnauthorizedError,
)
from src.core.math import UINT128_MAX
from src.ledger import AccountStore, GridAggregate, check_invariants


OWNER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
U1 = "ST1SJ3DTE5DN7X54YDH5D64R3BCB6A2AG2ZQ8YPD5"
U2 = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"


@pytest.fixture
def config():
    return LedgerConfig(owner=OWNER)


@pytest.fixture
def store(config):
    return AccountStore(config)


@pytest.fixture
def empty_state():
    return LedgerState.initial(energy_price=100)


@pytest.fixture
def registered_state(store, empty_state):
    return store.register(empty_state, U1)


class TestRegister:
    """Тесты регистрации."""

    def test_register_creates_zero_account(self, store, empty_state):
        state = store.register(empty_state, U1)
        assert state.accounts[U1] == Account(energy_balance=0, funds_balance=0)
        # Исходное состояние не изменено
        assert U1 not in empty_state.accounts

    def test_duplicate_registration(self, store, registered_state):
        with pytest.raises(AlreadyRegisteredError):
            store.register(registered_state, U1)

    def test_invalid_identity(self, store, empty_state):
        with pytest.raises(LedgerValidationError):
            store.register(empty_state, "")


class TestAddEnergy:
    """Тесты add_energy."""

    def test_updates_account_and_grid(self, store, registered_state):
        state = store.add_energy(registered_state, U1, 100)
        assert state.accounts[U1].energy_balance == 100
        assert state.grid_balance == 100
        assert check_invariants(state) == []

    def test_zero_amount_allowed(self, store, registered_state):
        state = store.add_energy(registered_state, U1, 0)
        assert state.accounts[U1].energy_balance == 0

    def test_unregistered(self, store, empty_state):
        with pytest.raises(UnauthorizedError):
            store.add_energy(empty_state, U1, 10)

    def test_negative_amount(self, store, registered_state):
        with pytest.raises(LedgerValidationError):
            store.add_energy(registered_state, U1, -10)

    def test_account_overflow(self, store, registered_state):
        state = store.add_energy(registered_state, U1, UINT128_MAX)
        with pytest.raises(LedgerOverflowError):
            store.add_energy(state, U1, 1)

    def test_grid_overflow_without_account_overflow(self, store, registered_state):
        """Сумма по сети переполняется раньше баланса отдельного счёта."""
        state = store.register(registered_state, U2)
        state = store.add_energy(state, U1, UINT128_MAX)
        with pytest.raises(LedgerOverflowError):
            store.add_energy(state, U2, 1)
        assert state.accounts[U2].energy_balance == 0

    def test_config_max_value(self, empty_state):
        store = AccountStore(LedgerConfig(owner=OWNER, max_value=1000))
        state = store.register(empty_state, U1)
        state = store.add_energy(state, U1, 1000)
        with pytest.raises(LedgerOverflowError):
            store.add_energy(state, U1, 1)


class TestConsumeEnergy:
    """Тесты consume_energy."""

    def test_scenario_a(self, store, registered_state):
        """register U1; add 100; consume 50 → 50 / grid 50"""
        state = store.add_energy(registered_state, U1, 100)
        state = store.consume_energy(state, U1, 50)
        assert state.accounts[U1].energy_balance == 50
        assert state.grid_balance == 50

    def test_consume_everything(self, store, registered_state):
        state = store.add_energy(registered_state, U1, 30)
        state = store.consume_energy(state, U1, 30)
        assert state.accounts[U1].energy_balance == 0
        assert state.grid_balance == 0

    def test_insufficient(self, store, registered_state):
        state = store.add_energy(registered_state, U1, 10)
        with pytest.raises(InsufficientEnergyError) as exc_info:
            store.consume_energy(state, U1, 11)
        assert exc_info.value.details["available"] == 10
        assert state.accounts[U1].energy_balance == 10
        assert state.grid_balance == 10

    def test_unregistered_reports_insufficient_energy(self, store, empty_state):
        with pytest.raises(InsufficientEnergyError):
            store.consume_energy(empty_state, U1, 1)

    def test_float_amount(self, store, registered_state):
        with pytest.raises(LedgerValidationError):
            store.consume_energy(registered_state, U1, 1.5)


class TestAddFunds:
    """Тесты add_funds."""

    def test_add_funds(self, store, registered_state):
        state = store.add_funds(registered_state, U1, 10000)
        assert state.accounts[U1].funds_balance == 10000
        # Средства не влияют на grid
        assert state.grid_balance == 0

    def test_unregistered(self, store, empty_state):
        with pytest.raises(UnauthorizedError):
            store.add_funds(empty_state, U1, 10)

    def test_overflow(self, store, registered_state):
        state = store.add_funds(registered_state, U1, UINT128_MAX)
        with pytest.raises(LedgerOverflowError):
            store.add_funds(state, U1, 1)


class TestQueries:
    """Тесты запросов Account Store."""

    def test_balances_for_unregistered_are_zero(self, store, empty_state):
        assert store.energy_balance(empty_state, U1) == 0
        assert store.funds_balance(empty_state, U1) == 0
        assert store.get(empty_state, U1) is None

    def test_require(self, store, registered_state):
        assert store.require(registered_state, U1) == Account()
        with pytest.raises(UnauthorizedError):
            store.require(registered_state, U2)


class TestGridAggregate:
    """Тесты Grid Aggregate."""

    def test_credit_debit(self, config):
        grid = GridAggregate(config)
        assert grid.credit(10, 5) == 15
        assert grid.debit(15, 5) == 10

    def test_debit_underflow(self, config):
        with pytest.raises(LedgerOverflowError):
            GridAggregate(config).debit(1, 2)

    def test_recompute(self):
        accounts = [Account(energy_balance=3), Account(energy_balance=4, funds_balance=100)]
        assert GridAggregate.recompute(accounts) == 7
