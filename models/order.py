"""
Order Model
Stores the latest draft order of a wizard kind in the key-value store
"""

import json
from typing import Dict, Optional, Tuple

from models.database import PersistenceError
from services.monitoring_service import logger


class OrderModel:
    """Draft order persistence under ``{kind}_order``"""

    STATUS_DRAFT = "draft"
    STATUS_CONFIRMED = "confirmed"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    VALID_STATUSES = [STATUS_DRAFT, STATUS_CONFIRMED, STATUS_COMPLETED, STATUS_CANCELLED]

    def __init__(self, store, wizard_kind: str):
        self.store = store
        self.wizard_kind = wizard_kind

    @property
    def storage_key(self) -> str:
        return f"{self.wizard_kind}_order"

    def save(self, order_doc: Dict) -> Tuple[bool, Optional[str]]:
        """Write the draft; returns (success, error)"""
        try:
            self.store.set(self.storage_key, json.dumps(order_doc))
            return True, None
        except (PersistenceError, TypeError, ValueError) as e:
            logger.error(f"[Order] Failed to save {self.storage_key}: {e}")
            return False, f"Saving the order failed: {str(e)}"

    def load(self) -> Optional[Dict]:
        try:
            raw = self.store.get(self.storage_key)
            return json.loads(raw) if raw else None
        except (PersistenceError, ValueError) as e:
            logger.error(f"[Order] Failed to load {self.storage_key}: {e}")
            return None

    def update(self, changes: Dict) -> Optional[Dict]:
        """Merge changes into the stored draft; None when there is no draft"""
        current = self.load()
        if not current:
            logger.warning(f"[Order] No stored order under {self.storage_key} to update")
            return None

        updated = {**current, **changes}
        success, _ = self.save(updated)
        return updated if success else None

    def update_status(self, new_status: str) -> Tuple[bool, Optional[str]]:
        if new_status not in self.VALID_STATUSES:
            return False, f"Invalid status: {new_status}"

        updated = self.update({"status": new_status})
        if updated is None:
            return False, "Order not found"
        return True, None

    def clear(self):
        try:
            self.store.remove(self.storage_key)
        except PersistenceError as e:
            logger.error(f"[Order] Failed to clear {self.storage_key}: {e}")
