"""Конфигурация ledger."""

from dataclasses import dataclass

from src.core.math.checked_arithmetic import (
    UINT128_MAX,
    validate_identity,
    validate_positive_amount,
)

# Справочная цена при старте системы
DEFAULT_ENERGY_PRICE: int = 100


@dataclass(frozen=True)
class LedgerConfig:
    """Конфигурация ledger.

    - owner: единственный identity, которому разрешено менять цену
    - default_energy_price: начальное значение Price Register
    - max_value: верхняя граница балансов, количеств и стоимости сделки
    """
    owner: str
    default_energy_price: int = DEFAULT_ENERGY_PRICE
    max_value: int = UINT128_MAX

    def validate(self) -> None:
        """
        Raises:
            LedgerValidationError: Если owner пуст или числа неположительны
        """
        validate_identity(self.owner, "owner")
        validate_positive_amount(self.max_value, "max_value")
        validate_positive_amount(
            self.default_energy_price, "default_energy_price", self.max_value
        )
