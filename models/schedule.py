"""
Schedule Model
Switches, per-container time slots and weekday selection for the schedule step
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

DIRECTION_ONE_WAY = "oneWay"
DIRECTION_ROUND_TRIP = "roundTrip"
CADENCE_FIXED = "fixed"
CADENCE_SMOOTH = "smooth"
DAY_MODE_DAILY = "daily"
DAY_MODE_WEEKDAY_SPLIT = "weekdaySplit"

BUCKET_FIXED = "fixed"
BUCKET_WEEKDAY = "weekday"
BUCKET_WEEKEND = "weekend"
BUCKETS = (BUCKET_FIXED, BUCKET_WEEKDAY, BUCKET_WEEKEND)

# Payload field holding each bucket
BUCKET_FIELDS = {
    BUCKET_FIXED: "fixedTimes",
    BUCKET_WEEKDAY: "weekdayTimes",
    BUCKET_WEEKEND: "weekendTimes",
}

DAY_NUMBERS = {
    "sun": 0,
    "mon": 1,
    "tue": 2,
    "wed": 3,
    "thu": 4,
    "fri": 5,
    "sat": 6,
}

ERROR_NO_TIME = "Please select a time"
ERROR_BAD_TIME = "Invalid time {value!r} in slot {index}"
ERROR_BAD_DAY = "Unknown weekday {value!r}"

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def get_day_number(day_key: str) -> int:
    """Weekday number of a day key, Sunday being 0"""
    return DAY_NUMBERS.get(day_key, 0)


def is_valid_time(value: str) -> bool:
    return bool(value) and bool(TIME_PATTERN.match(value))


@dataclass(frozen=True)
class ScheduleSwitches:
    direction: str = DIRECTION_ONE_WAY
    cadence_mode: str = CADENCE_FIXED
    day_mode: str = DAY_MODE_DAILY

    @property
    def is_round_trip(self) -> bool:
        return self.direction == DIRECTION_ROUND_TRIP

    @property
    def is_smooth(self) -> bool:
        return self.cadence_mode == CADENCE_SMOOTH

    @property
    def is_weekday_split(self) -> bool:
        # Day mode is ignored under smooth cadence
        return not self.is_smooth and self.day_mode == DAY_MODE_WEEKDAY_SPLIT

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ScheduleSwitches":
        """Accepts both the named form and the legacy switch1/2/3 booleans"""
        data = data or {}
        if "switchStates" in data or "switch1" in data:
            states = data.get("switchStates", data)
            return cls(
                direction=DIRECTION_ROUND_TRIP if states.get("switch1") else DIRECTION_ONE_WAY,
                cadence_mode=CADENCE_SMOOTH if states.get("switch2") else CADENCE_FIXED,
                day_mode=DAY_MODE_WEEKDAY_SPLIT if states.get("switch3") else DAY_MODE_DAILY,
            )
        switches = data.get("switches", data)
        return cls(
            direction=switches.get("direction", DIRECTION_ONE_WAY),
            cadence_mode=switches.get("cadenceMode", CADENCE_FIXED),
            day_mode=switches.get("dayMode", DAY_MODE_DAILY),
        )

    def to_dict(self) -> Dict:
        return {
            "direction": self.direction,
            "cadenceMode": self.cadence_mode,
            "dayMode": self.day_mode,
        }


def _parse_slots(raw: Optional[Dict]) -> Dict[int, str]:
    slots = {}
    for key, value in (raw or {}).items():
        try:
            index = int(key)
        except (TypeError, ValueError):
            continue
        if value:
            slots[index] = str(value)
    return slots


@dataclass
class ScheduleConfigurator:
    """Switch states plus the time assigned to each container slot"""

    switches: ScheduleSwitches = field(default_factory=ScheduleSwitches)
    times: Dict[str, Dict[int, str]] = field(
        default_factory=lambda: {bucket: {} for bucket in BUCKETS}
    )
    selected_days: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ScheduleConfigurator":
        data = data or {}
        return cls(
            switches=ScheduleSwitches.from_dict(data),
            times={bucket: _parse_slots(data.get(name)) for bucket, name in BUCKET_FIELDS.items()},
            selected_days=list(data.get("selectedDays") or []),
        )

    def to_dict(self) -> Dict:
        data = {"switches": self.switches.to_dict(), "selectedDays": list(self.selected_days)}
        for bucket, name in BUCKET_FIELDS.items():
            # JSON object keys are strings
            data[name] = {str(index): value for index, value in sorted(self.times[bucket].items())}
        return data

    def active_buckets(self) -> Tuple[str, ...]:
        if self.switches.is_weekday_split:
            return (BUCKET_WEEKDAY, BUCKET_WEEKEND)
        return (BUCKET_FIXED,)

    def primary_bucket(self) -> str:
        return self.active_buckets()[0]

    def set_time(self, index: int, value: str, bucket: Optional[str] = None):
        bucket = bucket or self.primary_bucket()
        if bucket not in BUCKETS:
            raise ValueError(f"unknown time bucket: {bucket}")
        if value:
            self.times[bucket][index] = value
        else:
            self.times[bucket].pop(index, None)

    def time_for(self, index: int, bucket: Optional[str] = None) -> Optional[str]:
        return self.times[bucket or self.primary_bucket()].get(index) or None

    def has_any_time(self) -> bool:
        return any(value for slots in self.times.values() for value in slots.values())

    def day_numbers(self) -> List[int]:
        return sorted(get_day_number(day) for day in self.selected_days if day in DAY_NUMBERS)


def validate_schedule_data(data: Optional[Dict]) -> Dict:
    """Gate for leaving the schedule step: at least one well-formed time, known weekdays"""
    schedule = ScheduleConfigurator.from_dict(data)
    errors = []

    if not schedule.has_any_time():
        errors.append(ERROR_NO_TIME)

    for bucket in BUCKETS:
        for index, value in sorted(schedule.times[bucket].items()):
            if not is_valid_time(value):
                errors.append(ERROR_BAD_TIME.format(value=value, index=index))

    for day in schedule.selected_days:
        if day not in DAY_NUMBERS:
            errors.append(ERROR_BAD_DAY.format(value=day))

    return {"isValid": not errors, "errors": errors}
