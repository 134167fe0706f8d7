"""
Schedule Service
Derives the time-annotated route containers shown on the schedule step
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from models.address import AddressSet, Coordinate, MAX_STOPS
from models.schedule import ScheduleConfigurator

ROLE_ORIGIN = "origin"
ROLE_STOP = "stop"
ROLE_DESTINATION = "destination"
ROLE_RETURN = "return"

EDITABLE_ROLES = (ROLE_ORIGIN, ROLE_DESTINATION, ROLE_RETURN)


@dataclass(frozen=True)
class ScheduleContainer:
    index: int
    role: str
    address: str
    from_coordinate: Optional[Coordinate] = None
    to_coordinate: Optional[Coordinate] = None
    editable: bool = False
    time: Optional[str] = None
    is_calculated: bool = False

    @property
    def on_route(self) -> bool:
        return self.from_coordinate is not None and self.to_coordinate is not None

    @property
    def is_undetermined(self) -> bool:
        return self.time is None

    def to_dict(self) -> Dict:
        return {
            "index": self.index,
            "role": self.role,
            "address": self.address,
            "fromCoordinate": self.from_coordinate.to_dict() if self.from_coordinate else None,
            "toCoordinate": self.to_coordinate.to_dict() if self.to_coordinate else None,
            "editable": self.editable,
            "time": self.time,
            "isCalculated": self.is_calculated,
        }


def _route_legs(address_set: AddressSet, round_trip: bool) -> List[Dict]:
    """Containers without times: role, address and the leg's coordinates"""
    origin = address_set.origin
    destination = address_set.destination
    stops = address_set.stops[:MAX_STOPS]

    from_coord = origin.coordinate if origin else None
    to_coord = destination.coordinate if destination else None
    stop_coords = [stop.coordinate for stop in stops]

    legs = []
    if origin:
        legs.append({
            "role": ROLE_ORIGIN,
            "address": origin.address,
            "from": from_coord,
            "to": (stop_coords[0] if stops else None) or to_coord,
        })

    for position, stop in enumerate(stops):
        outgoing = (stop_coords[position + 1] if position + 1 < len(stops) else None) or to_coord
        legs.append({
            "role": ROLE_STOP,
            "address": stop.address,
            "from": stop_coords[position],
            "to": outgoing,
        })

    if destination:
        legs.append({
            "role": ROLE_DESTINATION,
            "address": destination.address,
            "from": (stop_coords[-1] if stops else None) or from_coord,
            "to": to_coord,
        })

    if round_trip:
        if origin:
            address = origin.address
        elif destination:
            address = destination.address
        else:
            address = ""
        legs.append({"role": ROLE_RETURN, "address": address, "from": to_coord, "to": from_coord})

    return legs


def derive(address_set: AddressSet, schedule: ScheduleConfigurator,
           bucket: Optional[str] = None) -> List[ScheduleContainer]:
    """
    Build the ordered container list for one time bucket.

    Origin, stops and destination in route order (missing endpoints are
    skipped, never padded), then a return container on round trips.
    Editable containers carry the time assigned to their slot. A stop
    inherits the time of the nearest earlier editable container that has
    one, provided both of its leg coordinates are known; otherwise its
    time stays None.
    """
    bucket = bucket or schedule.primary_bucket()
    containers = []
    last_assigned = None

    for index, leg in enumerate(_route_legs(address_set, schedule.switches.is_round_trip)):
        editable = leg["role"] in EDITABLE_ROLES
        time = None
        is_calculated = False

        if editable:
            time = schedule.time_for(index, bucket)
            if time:
                last_assigned = time
        elif leg["from"] is not None and leg["to"] is not None and last_assigned:
            time = last_assigned
            is_calculated = True

        containers.append(ScheduleContainer(
            index=index,
            role=leg["role"],
            address=leg["address"],
            from_coordinate=leg["from"],
            to_coordinate=leg["to"],
            editable=editable,
            time=time,
            is_calculated=is_calculated,
        ))

    return containers


def derive_plan(address_set: AddressSet, schedule: ScheduleConfigurator) -> Dict[str, List[ScheduleContainer]]:
    """Containers for every bucket the current switches make active"""
    return {bucket: derive(address_set, schedule, bucket) for bucket in schedule.active_buckets()}
