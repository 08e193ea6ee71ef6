"""
Ledger Errors — Закрытая таксономия ошибок ledger

Каждая ошибка принадлежит ровно одному ErrorKind. Вызывающая сторона
ветвится по kind (и по стабильному числовому code для транспорта),
а не по тексту сообщения: message и details только для диагностики.
"""

from enum import Enum


# =============================================================================
# ERROR KINDS
# =============================================================================


class ErrorKind(str, Enum):
    """Вид ошибки операции ledger"""

    OWNER_ONLY = "owner_only"  # Смена цены не владельцем
    UNAUTHORIZED = "unauthorized"  # Мутация для незарегистрированного участника
    INSUFFICIENT_ENERGY = "insufficient_energy"  # Недостаточно энергии
    ALREADY_REGISTERED = "already_registered"  # Повторная регистрация
    TRADE_NOT_FOUND = "trade_not_found"  # Несуществующий trade_id
    TRADE_NOT_OPEN = "trade_not_open"  # Сделка уже не Open
    INSUFFICIENT_FUNDS = "insufficient_funds"  # Недостаточно средств у покупателя
    SELF_TRADE = "self_trade"  # Продавец принимает свою же сделку
    VALIDATION_ERROR = "validation_error"  # Некорректный запрос
    OVERFLOW = "overflow"  # Выход за числовой диапазон
    SETTLEMENT_FAILED = "settlement_failed"  # Нарушен post-condition при settlement

    @property
    def code(self) -> int:
        """Стабильный числовой код для транспортных адаптеров."""
        return _ERROR_CODES[self]

    def is_validation_error(self) -> bool:
        """True если запрос некорректен сам по себе."""
        return self is ErrorKind.VALIDATION_ERROR

    def is_business_error(self) -> bool:
        """True если запрос корректен, но сейчас невыполним."""
        return not self.is_validation_error()


_ERROR_CODES: dict[ErrorKind, int] = {
    ErrorKind.OWNER_ONLY: 100,
    ErrorKind.UNAUTHORIZED: 102,
    ErrorKind.INSUFFICIENT_ENERGY: 103,
    ErrorKind.ALREADY_REGISTERED: 104,
    ErrorKind.TRADE_NOT_FOUND: 105,
    ErrorKind.TRADE_NOT_OPEN: 106,
    ErrorKind.INSUFFICIENT_FUNDS: 107,
    ErrorKind.SELF_TRADE: 108,
    ErrorKind.VALIDATION_ERROR: 109,
    ErrorKind.OVERFLOW: 110,
    ErrorKind.SETTLEMENT_FAILED: 111,
}


# =============================================================================
# EXCEPTIONS
# =============================================================================


class LedgerError(Exception):
    """Базовое исключение ledger. Подклассы фиксируют kind."""

    kind: ErrorKind

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.kind.value}] {self.message} ({details_str})"
        return f"[{self.kind.value}] {self.message}"


class OwnerOnlyError(LedgerError):
    kind = ErrorKind.OWNER_ONLY


class UnauthorizedError(LedgerError):
    kind = ErrorKind.UNAUTHORIZED


class InsufficientEnergyError(LedgerError):
    kind = ErrorKind.INSUFFICIENT_ENERGY


class AlreadyRegisteredError(LedgerError):
    kind = ErrorKind.ALREADY_REGISTERED


class TradeNotFoundError(LedgerError):
    kind = ErrorKind.TRADE_NOT_FOUND


class TradeNotOpenError(LedgerError):
    kind = ErrorKind.TRADE_NOT_OPEN


class InsufficientFundsError(LedgerError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class SelfTradeError(LedgerError):
    kind = ErrorKind.SELF_TRADE


class LedgerValidationError(LedgerError):
    """
    Некорректный запрос (не-int, неположительный amount/price, пустой caller).

    Отличается от бизнес-ошибок: повтор того же запроса никогда не пройдёт.
    """

    kind = ErrorKind.VALIDATION_ERROR


class LedgerOverflowError(LedgerError):
    """Арифметика вышла бы за диапазон балансов (fail closed, без wraparound)."""

    kind = ErrorKind.OVERFLOW


class SettlementFailedError(LedgerError):
    """
    Post-condition settlement нарушен (например, баланс продавца ушёл бы в минус).

    Ни одна из мутаций settlement не применяется.
    """

    kind = ErrorKind.SETTLEMENT_FAILED
