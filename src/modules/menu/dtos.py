"""Menu DTOs."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class MenuSnapshot(BaseModel):
    """Price of a menu item frozen at the moment an order line is priced."""

    model_config = ConfigDict(frozen=True)

    menu_item_id: UUID
    price: Decimal
