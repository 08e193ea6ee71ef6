"""Price Register — справочная спот-цена энергии.

Меняется только owner. Цена справочная: каждая сделка несёт свою цену.
"""

import logging

from src.core.config import LedgerConfig
from src.core.domain import LedgerState
from src.core.errors import OwnerOnlyError
from src.core.math.checked_arithmetic import validate_identity, validate_positive_amount

logger = logging.getLogger(__name__)


class PriceRegister:
    """Операции над текущей ценой."""

    def __init__(self, config: LedgerConfig):
        self.config = config

    def get_price(self, state: LedgerState) -> int:
        return state.energy_price

    def set_price(self, state: LedgerState, caller: str, new_price: int) -> LedgerState:
        """Безусловная замена цены.

        Порядок проверок: identity → owner → цена.

        Raises:
            LedgerValidationError: некорректный caller или new_price <= 0
            OwnerOnlyError: caller не owner
        """
        validate_identity(caller)
        if caller != self.config.owner:
            raise OwnerOnlyError("Only the owner may set the energy price", details={"caller": caller})
        validate_positive_amount(new_price, "new_price", self.config.max_value)

        logger.debug("set_price %d -> %d", state.energy_price, new_price)
        return state.model_copy(update={"energy_price": new_price})
