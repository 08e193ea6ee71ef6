"""
Contract Validation Module

Модуль для валидации JSON снапшотов ledger.
"""

from .validators import (
    AccountValidator,
    ContractValidator,
    LedgerStateValidator,
    SchemaLoader,
    TradeValidator,
    validate_account,
    validate_ledger_state,
    validate_trade,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "AccountValidator",
    "TradeValidator",
    "LedgerStateValidator",
    # Functions
    "validate_account",
    "validate_trade",
    "validate_ledger_state",
]
