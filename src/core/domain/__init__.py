"""
Domain models and value objects.

Contains fundamental ledger entities: Account, Trade, LedgerState, LedgerResult.
"""

from src.core.domain.account import Account
from src.core.domain.ledger_state import LedgerState
from src.core.domain.result import LedgerResult
from src.core.domain.trade import Trade, TradeStatus

__all__ = [
    # Account model
    "Account",
    # Trade model
    "Trade",
    "TradeStatus",
    # Ledger state
    "LedgerState",
    # Operation result
    "LedgerResult",
]
