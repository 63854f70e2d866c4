# sdk/recent_orders.py
import json
from typing import Any, Dict, List, Optional

import structlog

from sdk.storage import SessionStorage, StorageError

logger = structlog.get_logger(__name__)

RECENT_ORDERS_KEY = "recent_orders"
DEFAULT_LIMIT = 20


class RecentOrders:
    """Orders placed in this session, newest first. Best-effort only."""

    def __init__(self, storage: SessionStorage, limit: Optional[int] = DEFAULT_LIMIT):
        self.storage = storage
        self.limit = limit

    def list(self) -> List[Dict[str, Any]]:
        try:
            raw = self.storage.get(RECENT_ORDERS_KEY)
        except (StorageError, OSError) as e:
            logger.warning("recent_orders_load_failed", error=str(e))
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            return []
        return data if isinstance(data, list) else []

    def save(self, order: Dict[str, Any]) -> None:
        orders = [order] + self.list()
        if self.limit is not None:
            orders = orders[: self.limit]
        try:
            self.storage.set(RECENT_ORDERS_KEY, json.dumps(orders))
        except (StorageError, OSError) as e:
            logger.warning("recent_orders_save_failed", order_id=order.get("id"), error=str(e))

    def clear(self) -> None:
        try:
            self.storage.remove(RECENT_ORDERS_KEY)
        except (StorageError, OSError) as e:
            logger.warning("recent_orders_clear_failed", error=str(e))
