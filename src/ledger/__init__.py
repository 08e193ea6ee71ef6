"""Ledger — компоненты состояния: счета, баланс сети, цена, сделки.

Все компоненты stateless: операция принимает LedgerState и возвращает
новый LedgerState, не изменяя исходный.
"""

from .account_store import AccountStore
from .grid_aggregate import GridAggregate
from .invariants import check_invariants
from .price_register import PriceRegister
from .trade_book import TradeBook

__all__ = [
    "AccountStore",
    "GridAggregate",
    "PriceRegister",
    "TradeBook",
    "check_invariants",
]
