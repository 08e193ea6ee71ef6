"""
Account — Модель счёта участника (prosumer)

Immutable Pydantic модель. Счёт создаётся ровно один раз при регистрации
и никогда не удаляется; изменение баланса = новый экземпляр Account.
"""

from pydantic import BaseModel, Field

from src.core.math.checked_arithmetic import UINT128_MAX


class Account(BaseModel):
    """
    Счёт участника: баланс энергии и баланс средств.

    Оба баланса всегда в [0, UINT128_MAX]; попытка построить Account
    с отрицательным балансом вызывает pydantic.ValidationError.
    """

    energy_balance: int = Field(
        0, ge=0, le=UINT128_MAX, strict=True, description="Баланс энергии"
    )
    funds_balance: int = Field(
        0, ge=0, le=UINT128_MAX, strict=True, description="Баланс средств"
    )

    model_config = {"frozen": True}  # Immutable

    def with_energy(self, energy_balance: int) -> "Account":
        """Новый Account с заменённым балансом энергии (с валидацией)."""
        return Account(energy_balance=energy_balance, funds_balance=self.funds_balance)

    def with_funds(self, funds_balance: int) -> "Account":
        """Новый Account с заменённым балансом средств (с валидацией)."""
        return Account(energy_balance=self.energy_balance, funds_balance=funds_balance)
