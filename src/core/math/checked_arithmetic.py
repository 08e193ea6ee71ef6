"""
Checked Arithmetic — Целочисленная арифметика с проверкой диапазона

Все балансы, количества и цены ledger хранятся как беззнаковые целые
ограниченной разрядности (по умолчанию 128 бит). Модуль обеспечивает:
- Сложение/вычитание/умножение без wraparound (ошибка вместо переполнения)
- Валидацию входных amount/price до применения бизнес-правил

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Результат любой операции лежит в [0, max_value]
2. Переполнение никогда не маскируется (всегда LedgerOverflowError)
3. bool не считается целым числом
"""

from typing import Any, Final

from src.core.errors import LedgerOverflowError, LedgerValidationError

# =============================================================================
# ДИАПАЗОН
# =============================================================================

# Верхняя граница беззнакового 128-битного целого
UINT128_MAX: Final[int] = 2**128 - 1


# =============================================================================
# ПРОВЕРКА ТИПОВ
# =============================================================================


def is_valid_int(value: Any) -> bool:
    """
    Проверка, что значение является целым числом (но не bool).

    Examples:
        >>> is_valid_int(5)
        True
        >>> is_valid_int(True)
        False
        >>> is_valid_int(5.0)
        False
    """
    return isinstance(value, int) and not isinstance(value, bool)


# =============================================================================
# CHECKED ОПЕРАЦИИ
# =============================================================================


def checked_add(a: int, b: int, max_value: int = UINT128_MAX) -> int:
    """
    Сложение с проверкой верхней границы.

    Args:
        a: Первое слагаемое (>= 0)
        b: Второе слагаемое (>= 0)
        max_value: Верхняя граница диапазона

    Returns:
        a + b

    Raises:
        LedgerOverflowError: Если a + b > max_value

    Examples:
        >>> checked_add(2, 3)
        5
        >>> checked_add(UINT128_MAX, 1)  # doctest: +SKIP
        Traceback (most recent call last):
            ...
        LedgerOverflowError: ...
    """
    result = a + b
    if result > max_value:
        raise LedgerOverflowError(
            "Addition overflow",
            details={"a": a, "b": b, "max_value": max_value},
        )
    return result


def checked_sub(a: int, b: int) -> int:
    """
    Вычитание без ухода в отрицательную область.

    Raises:
        LedgerOverflowError: Если b > a (underflow)
    """
    if b > a:
        raise LedgerOverflowError("Subtraction underflow", details={"a": a, "b": b})
    return a - b


def checked_mul(a: int, b: int, max_value: int = UINT128_MAX) -> int:
    """
    Умножение с проверкой верхней границы.

    Используется для total_cost = amount * price при settlement.

    Raises:
        LedgerOverflowError: Если a * b > max_value
    """
    result = a * b
    if result > max_value:
        raise LedgerOverflowError(
            "Multiplication overflow",
            details={"a": a, "b": b, "max_value": max_value},
        )
    return result


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_positive_amount(value: Any, name: str, max_value: int = UINT128_MAX) -> int:
    """
    Валидация строго положительного целого в диапазоне.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)
        max_value: Верхняя граница диапазона

    Returns:
        value (для удобства цепочек)

    Raises:
        LedgerValidationError: Если value не int, <= 0 или > max_value
    """
    if not is_valid_int(value):
        raise LedgerValidationError(
            f"{name} must be an integer", details={name: repr(value)}
        )
    if value <= 0:
        raise LedgerValidationError(f"{name} must be positive", details={name: value})
    if value > max_value:
        raise LedgerValidationError(
            f"{name} must be <= {max_value}", details={name: value}
        )
    return value


def validate_non_negative_amount(
    value: Any, name: str, max_value: int = UINT128_MAX
) -> int:
    """
    Валидация неотрицательного целого в диапазоне (ноль допустим).

    Raises:
        LedgerValidationError: Если value не int, < 0 или > max_value
    """
    if not is_valid_int(value):
        raise LedgerValidationError(
            f"{name} must be an integer", details={name: repr(value)}
        )
    if value < 0:
        raise LedgerValidationError(
            f"{name} must be non-negative", details={name: value}
        )
    if value > max_value:
        raise LedgerValidationError(
            f"{name} must be <= {max_value}", details={name: value}
        )
    return value


def validate_identity(value: Any, name: str = "caller") -> str:
    """
    Валидация идентификатора участника (непустая строка).

    Идентификатор непрозрачен: сравнение только по значению.

    Raises:
        LedgerValidationError: Если value не str или пустая строка
    """
    if not isinstance(value, str) or not value:
        raise LedgerValidationError(
            f"{name} must be a non-empty string", details={name: repr(value)}
        )
    return value
