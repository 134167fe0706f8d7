"""
Order Service
Validates the address step and materializes the draft order
"""

from typing import Callable, Dict, Optional

from models.address import validate_address_data
from models.order import OrderModel
from services.monitoring_service import logger
from services.session_service import SessionService, now_ms

ORDER_OWNED_FIELDS = ("id", "status", "createdAt")


class OrderService:
    """Creates, updates and clears the draft order of one wizard kind"""

    def __init__(self, order_model: OrderModel, session_service: SessionService,
                 clock: Callable[[], int] = now_ms):
        self.order_model = order_model
        self.session_service = session_service
        self.clock = clock

    def submit(self, address_data: Optional[Dict], schedule_data: Optional[Dict] = None) -> Dict:
        """
        Validate and persist a draft order.

        Returns ``{"order": draft}`` on success or ``{"errors": [...]}``;
        nothing is written when validation fails.
        """
        validation = validate_address_data(address_data)
        if not validation["isValid"]:
            return {"errors": validation["errors"]}

        created_at = self.clock()
        order = {
            "id": f"order_{created_at}",
            "addressData": address_data,
            "scheduleData": schedule_data or {},
            "status": OrderModel.STATUS_DRAFT,
            "createdAt": created_at,
        }

        success, error = self.order_model.save(order)
        if not success:
            # The draft still exists in memory; only resume after restart is lost
            logger.warning(f"[Order] Draft {order['id']} not persisted: {error}")
        else:
            logger.info(f"[Order] Draft {order['id']} created for {self.order_model.wizard_kind}")
        return {"order": order}

    def get_order(self) -> Optional[Dict]:
        return self.order_model.load()

    def update_order(self, changes: Dict) -> Optional[Dict]:
        """Edit draft fields; id, status and createdAt are not editable here"""
        editable = {key: value for key, value in changes.items() if key not in ORDER_OWNED_FIELDS}
        return self.order_model.update(editable)

    def update_order_status(self, new_status: str):
        return self.order_model.update_status(new_status)

    def clear_all(self):
        """Remove the draft order and the wizard session"""
        self.order_model.clear()
        self.session_service.clear()
        self.session_service.clear_container_times()
