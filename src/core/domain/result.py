"""
LedgerResult — Результат операции ledger

Tagged result: либо успех со значением (bool или новый trade_id),
либо отказ с ровно одним ErrorKind.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from src.core.errors import ErrorKind, LedgerError


@dataclass(frozen=True)
class LedgerResult:
    """Результат операции."""

    ok: bool
    value: Any = None
    error: Optional[ErrorKind] = None

    # Только для диагностики, поведение от них не зависит
    details: dict = field(default_factory=dict)

    @classmethod
    def success(cls, value: Any = True) -> "LedgerResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: LedgerError) -> "LedgerResult":
        return cls(ok=False, error=exc.kind, details={"message": exc.message, **exc.details})

    @property
    def error_code(self) -> Optional[int]:
        """Числовой код ошибки (None при успехе)."""
        return self.error.code if self.error is not None else None
