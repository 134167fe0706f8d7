"""
Wizard Service
Page state machine of the trip-ordering wizard: navigation, session
persistence, resume and the periodic staleness check
"""

import os
import threading
from typing import Dict, Optional

from models.address import AddressSet
from models.schedule import ScheduleConfigurator, validate_schedule_data
from services.monitoring_service import logger
from services.order_service import OrderService
from services.pricing_service import PricingService
from services.schedule_service import derive_plan
from services.session_service import MERGED_FIELDS, SessionService, merge_record

SESSION_CHECK_INTERVAL_SECONDS = float(os.getenv("SESSION_CHECK_INTERVAL_SECONDS", "300"))

PAGE_ADDRESSES = "addresses"
PAGE_TIME_SCHEDULE = "timeSchedule"
PAGE_CONFIRMATION = "confirmation"
PAGES = (PAGE_ADDRESSES, PAGE_TIME_SCHEDULE, PAGE_CONFIRMATION)

NEXT_PAGE = {
    PAGE_ADDRESSES: PAGE_TIME_SCHEDULE,
    PAGE_TIME_SCHEDULE: PAGE_CONFIRMATION,
    PAGE_CONFIRMATION: None,
}
PREVIOUS_PAGE = {
    PAGE_ADDRESSES: None,
    PAGE_TIME_SCHEDULE: PAGE_ADDRESSES,
    PAGE_CONFIRMATION: PAGE_TIME_SCHEDULE,
}
PAGE_PROGRESS = {
    PAGE_ADDRESSES: 33,
    PAGE_TIME_SCHEDULE: 67,
    PAGE_CONFIRMATION: 100,
}


class SessionCleanupTask:
    """Runs the session staleness check on a fixed interval in a daemon thread"""

    def __init__(self, session_service: SessionService, interval_seconds: float = SESSION_CHECK_INTERVAL_SECONDS):
        self.session_service = session_service
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=f"session-cleanup-{self.session_service.wizard_kind}",
            daemon=True
        )
        self._thread.start()

    def stop(self):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None

    def _run(self):
        while not self._stop_event.wait(self.interval_seconds):
            self.session_service.check_and_clear_expired()


class WizardService:
    """
    Drives one wizard kind through addresses -> timeSchedule -> confirmation.

    The in-memory state is authoritative; every change is also written to
    the session store, and a failed write only costs resume after restart.
    Going back or jumping to a visited page needs no validation; forward
    moves are gated by ``save_address_step`` / ``save_schedule_step``.
    """

    def __init__(self, wizard_kind: str, session_service: SessionService, order_service: OrderService,
                 pricing_service: PricingService, cleanup_task: Optional[SessionCleanupTask] = None):
        self.wizard_kind = wizard_kind
        self.session_service = session_service
        self.order_service = order_service
        self.pricing_service = pricing_service
        self.cleanup_task = cleanup_task or SessionCleanupTask(session_service)
        self.current_page = PAGE_ADDRESSES
        self.session_data: Dict = {}

    # Lifecycle

    def start(self):
        self.session_service.check_and_clear_expired()
        self.cleanup_task.start()

    def stop(self):
        self.cleanup_task.stop()

    def resume(self) -> Dict:
        """
        Load a stored session on mount.

        Stored address and schedule data are kept, but the wizard always
        restarts at the addresses page so origin, destination and schedule
        get confirmed again before reuse.
        """
        self.session_service.check_and_clear_expired()
        record = self.session_service.load()
        self.current_page = PAGE_ADDRESSES
        if record:
            self.session_data = {
                key: record[key] for key in MERGED_FIELDS if isinstance(record.get(key), dict)
            }
            logger.info(f"[Wizard] Resumed {self.wizard_kind} session stored at page {record.get('currentPage')}")
        else:
            self.session_data = {}
        return self.state()

    def complete(self):
        """Drop the session after a finished order"""
        self.session_service.clear()
        self.session_service.clear_container_times()
        self.session_data = {}
        self.current_page = PAGE_ADDRESSES

    # Navigation

    def go_to_page(self, page: str, partial: Optional[Dict] = None) -> str:
        if page not in PAGES:
            raise ValueError(f"unknown wizard page: {page}")
        self.current_page = page
        self._persist(partial or {})
        return page

    def next_page(self, partial: Optional[Dict] = None) -> Optional[str]:
        successor = NEXT_PAGE[self.current_page]
        if successor is None:
            return None
        self.current_page = successor
        self._persist(partial or {})
        return successor

    def previous_page(self) -> Optional[str]:
        predecessor = PREVIOUS_PAGE[self.current_page]
        if predecessor is None:
            return None
        self.current_page = predecessor
        self._persist({})
        return predecessor

    @property
    def progress(self) -> int:
        return PAGE_PROGRESS[self.current_page]

    def update_session(self, partial: Dict):
        """A single field edit; persisted immediately, no debounce"""
        self._persist(partial)

    # Steps

    def save_address_step(self, address_data: Dict) -> Dict:
        """Save action of the address page: creates the draft order, then advances"""
        result = self.order_service.submit(address_data, self.session_data.get("scheduleData"))
        if "errors" in result:
            return result
        self.go_to_page(PAGE_TIME_SCHEDULE, {"addressData": address_data})
        return result

    def save_schedule_step(self, schedule_data: Dict) -> Dict:
        validation = validate_schedule_data(schedule_data)
        if not validation["isValid"]:
            return {"errors": validation["errors"]}

        self.session_data = merge_record(self.session_data, {"scheduleData": schedule_data})
        plan = self.schedule_plan()
        self.session_service.save_container_times(
            [{**container.to_dict(), "bucket": bucket} for bucket, containers in plan.items() for container in containers]
        )
        self.go_to_page(PAGE_CONFIRMATION, {"scheduleData": schedule_data})
        return {"plan": self._plan_to_dict(plan)}

    def schedule_plan(self):
        address_set = AddressSet.from_entries((self.session_data.get("addressData") or {}).get("addresses"))
        schedule = ScheduleConfigurator.from_dict(self.session_data.get("scheduleData"))
        return derive_plan(address_set, schedule)

    def confirmation(self) -> Dict:
        addresses = (self.session_data.get("addressData") or {}).get("addresses")
        return {
            "pricing": self.pricing_service.estimate_for_addresses(addresses),
            "plan": self._plan_to_dict(self.schedule_plan()),
            "order": self.order_service.get_order(),
        }

    def state(self) -> Dict:
        return {
            "wizardKind": self.wizard_kind,
            "currentPage": self.current_page,
            "progress": self.progress,
            "addressData": self.session_data.get("addressData"),
            "scheduleData": self.session_data.get("scheduleData"),
        }

    def _persist(self, partial: Dict):
        """Merge the wizard fields of ``partial``; bookkeeping keys stay server-owned"""
        fields = {
            key: value for key, value in partial.items()
            if key in MERGED_FIELDS and isinstance(value, dict)
        }
        self.session_data = merge_record(self.session_data, fields)
        self.session_service.save({**fields, "currentPage": self.current_page})

    @staticmethod
    def _plan_to_dict(plan) -> Dict:
        return {bucket: [container.to_dict() for container in containers] for bucket, containers in plan.items()}
