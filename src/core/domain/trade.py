"""
Trade — Модель торгового ордера на продажу энергии

Immutable Pydantic модель. Жизненный цикл: OPEN → COMPLETED (терминальный).
Пока сделка OPEN, buyer совпадает с seller (placeholder "не принята").
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from src.core.math.checked_arithmetic import UINT128_MAX


# =============================================================================
# ENUMS
# =============================================================================


class TradeStatus(str, Enum):
    """Статус сделки"""

    OPEN = "open"  # Ожидает ровно одного покупателя
    COMPLETED = "completed"  # Settlement выполнен, терминальное состояние


# =============================================================================
# TRADE MODEL
# =============================================================================


class Trade(BaseModel):
    """
    Предложение продать фиксированный объём энергии по фиксированной цене.

    Инварианты (проверяются при создании экземпляра):
    - status == OPEN      ⇒ buyer == seller
    - status == COMPLETED ⇒ buyer != seller
    """

    trade_id: int = Field(..., ge=0, strict=True, description="Монотонный идентификатор")
    seller: str = Field(..., min_length=1, description="Продавец (фиксирован при создании)")
    buyer: str = Field(..., min_length=1, description="Покупатель (== seller пока OPEN)")
    amount: int = Field(..., gt=0, le=UINT128_MAX, strict=True, description="Объём энергии")
    price: int = Field(..., gt=0, le=UINT128_MAX, strict=True, description="Цена за единицу")
    status: TradeStatus = Field(TradeStatus.OPEN, description="Статус сделки")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_buyer_matches_status(self) -> "Trade":
        """Проверка связи buyer/status"""
        if self.status == TradeStatus.OPEN and self.buyer != self.seller:
            raise ValueError(
                f"open trade {self.trade_id} must have buyer == seller, got buyer={self.buyer}"
            )
        if self.status == TradeStatus.COMPLETED and self.buyer == self.seller:
            raise ValueError(
                f"completed trade {self.trade_id} must have buyer != seller"
            )
        return self

    @classmethod
    def open(cls, trade_id: int, seller: str, amount: int, price: int) -> "Trade":
        """Новая OPEN сделка с buyer = seller."""
        return cls(
            trade_id=trade_id,
            seller=seller,
            buyer=seller,
            amount=amount,
            price=price,
            status=TradeStatus.OPEN,
        )

    def is_open(self) -> bool:
        return self.status == TradeStatus.OPEN

    def complete(self, buyer: str) -> "Trade":
        """
        Переход OPEN → COMPLETED.

        Returns:
            Новый Trade со status=COMPLETED и заданным buyer

        Raises:
            pydantic.ValidationError: Если buyer == seller
        """
        return Trade(
            trade_id=self.trade_id,
            seller=self.seller,
            buyer=buyer,
            amount=self.amount,
            price=self.price,
            status=TradeStatus.COMPLETED,
        )
