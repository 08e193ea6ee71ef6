"""Settlement — атомарный обмен энергии на средства при принятии сделки."""

from .engine import SettlementEngine, SettlementReceipt

__all__ = [
    "SettlementEngine",
    "SettlementReceipt",
]
