from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from cashier.model.identity import Confirmed


class Step(enum.IntEnum):
    CATALOGUE = 0
    IDENTIFY = 1
    CHECKOUT = 2


@dataclass
class Session:
    """One operator login. An empty token means logged out."""
    token: str = ""
    step: Step = Step.CATALOGUE
    identity: Confirmed | None = None

    @property
    def is_logged_in(self) -> bool:
        return bool(self.token)


class InventoryItem(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    iid: str
    name: str
    description: str | None = None
    price: int = Field(ge=0)                   # minor units (fils)
    photo_url: str | None = None
    percent_point_allocation: float = 0


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    item_id_quantity: list[tuple[str, int]] = Field(min_length=1)

    def to_payload(self) -> dict:
        return {
            "user_id": self.user_id,
            "item_id_quantity": [[iid, qty] for iid, qty in self.item_id_quantity],
        }
