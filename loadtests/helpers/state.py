"""Per-user state for Locust scenarios.

Each simulated user keeps the ids its own requests created; nothing is
shared across users.
"""

import uuid
from dataclasses import dataclass, field


def _user_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@dataclass
class ShopperState:
    user_id: str = field(default_factory=lambda: _user_id("lt-shopper"))
    product_ids: list[str] = field(default_factory=list)
    order_id: str | None = None

    @property
    def headers(self) -> dict:
        return {"X-User-Id": self.user_id}


@dataclass
class MerchandiserState:
    user_id: str = field(default_factory=lambda: _user_id("lt-admin"))
    category_id: str | None = None
    supplier_id: str | None = None
    product_ids: list[str] = field(default_factory=list)

    @property
    def headers(self) -> dict:
        return {"X-User-Id": self.user_id, "X-User-Role": "admin"}
