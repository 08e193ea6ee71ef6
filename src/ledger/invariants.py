"""Аудит инвариантов ledger.

Проверки для каждого достижимого состояния:
1. grid_balance == сумма energy_balance по счетам
2. OPEN ⇒ buyer == seller; COMPLETED ⇒ buyer != seller
3. next_trade_id больше любого сохранённого trade_id
4. Ключ словаря trades совпадает с trade_id записи
5. Участники сделок зарегистрированы
6. Балансы в [0, max_value]; цена, amount и price сделок в [1, max_value]
"""

from src.core.domain import LedgerState, TradeStatus
from src.core.math.checked_arithmetic import UINT128_MAX
from src.ledger.grid_aggregate import GridAggregate


def check_invariants(state: LedgerState, max_value: int = UINT128_MAX) -> list[str]:
    """Список нарушений инвариантов (пустой, если состояние корректно)."""
    violations: list[str] = []

    expected_grid = GridAggregate.recompute(state.accounts.values())
    if state.grid_balance != expected_grid:
        violations.append(
            f"grid_balance {state.grid_balance} != sum of energy balances {expected_grid}"
        )

    for identity, account in state.accounts.items():
        if not 0 <= account.energy_balance <= max_value:
            violations.append(f"account {identity}: energy_balance out of range")
        if not 0 <= account.funds_balance <= max_value:
            violations.append(f"account {identity}: funds_balance out of range")

    if state.grid_balance > max_value:
        violations.append(f"grid_balance {state.grid_balance} exceeds {max_value}")

    if not 0 < state.energy_price <= max_value:
        violations.append(f"energy_price {state.energy_price} out of range")

    for trade_id, trade in state.trades.items():
        if trade_id != trade.trade_id:
            violations.append(f"trade key {trade_id} != trade_id {trade.trade_id}")
        if not 0 < trade.amount <= max_value:
            violations.append(f"trade {trade_id}: amount out of range")
        if not 0 < trade.price <= max_value:
            violations.append(f"trade {trade_id}: price out of range")
        if trade_id >= state.next_trade_id:
            violations.append(
                f"trade {trade_id} not below next_trade_id {state.next_trade_id}"
            )
        if trade.status == TradeStatus.OPEN and trade.buyer != trade.seller:
            violations.append(f"open trade {trade_id} has buyer != seller")
        if trade.status == TradeStatus.COMPLETED and trade.buyer == trade.seller:
            violations.append(f"completed trade {trade_id} has buyer == seller")
        if trade.seller not in state.accounts:
            violations.append(f"trade {trade_id}: seller {trade.seller} not registered")
        if trade.buyer not in state.accounts:
            violations.append(f"trade {trade_id}: buyer {trade.buyer} not registered")

    return violations
