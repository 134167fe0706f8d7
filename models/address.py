"""
Address Model
Route points of a trip (from, up to two stops, to) and their validation
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

ROLE_FROM = "from"
ROLE_STOP = "stop"
ROLE_TO = "to"
VALID_ROLES = (ROLE_FROM, ROLE_STOP, ROLE_TO)

MAX_STOPS = 2

# Validation messages, in the order the checks run
ERROR_NO_FAMILY_MEMBER = "No family member selected"
ERROR_NO_PACKAGE = "No package selected"
ERROR_NO_ADDRESSES = "No addresses specified"
ERROR_NO_FROM_ADDRESS = "Departure address is missing"
ERROR_NO_TO_ADDRESS = "Destination address is missing"
ERROR_NO_FROM_COORDINATE = "Could not determine the coordinates of the departure address"
ERROR_NO_TO_COORDINATE = "Could not determine the coordinates of the destination address"


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def to_dict(self) -> Dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class RoutePoint:
    id: str
    role: str
    address: str
    coordinate: Optional[Coordinate] = None

    def to_dict(self) -> Dict:
        data = {"id": self.id, "type": self.role, "address": self.address}
        if self.coordinate:
            data["coordinate"] = self.coordinate.to_dict()
        return data


def parse_coordinate(raw) -> Optional[Coordinate]:
    """Read a ``{lat, lng}`` or ``{latitude, longitude}`` mapping"""
    if isinstance(raw, Coordinate):
        return raw
    if not isinstance(raw, dict):
        return None
    lat = raw.get("lat", raw.get("latitude"))
    lng = raw.get("lng", raw.get("longitude"))
    if lat is None or lng is None:
        return None
    try:
        return Coordinate(float(lat), float(lng))
    except (TypeError, ValueError):
        return None


def resolve_coordinate(entry: Dict) -> Optional[Coordinate]:
    """
    Coordinate of a raw address entry.

    Two payload shapes are in circulation: older clients send ``coordinates``,
    newer ones ``coordinate``. This is the only place that knows about both.
    """
    if not entry:
        return None
    coordinate = parse_coordinate(entry.get("coordinate"))
    if coordinate is None:
        coordinate = parse_coordinate(entry.get("coordinates"))
    return coordinate


def _entry_role(entry: Dict) -> Optional[str]:
    return entry.get("type") or entry.get("role")


def _entry_text(entry: Optional[Dict]) -> str:
    value = entry.get("address") if entry else None
    return value.strip() if isinstance(value, str) else ""


def address_entries(value) -> List[Dict]:
    """The dict entries of a raw ``addresses`` value; anything else is ignored"""
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


@dataclass
class AddressSet:
    """Ordered route points: one from, 0-2 stops, one to"""

    origin: Optional[RoutePoint] = None
    stops: List[RoutePoint] = field(default_factory=list)
    destination: Optional[RoutePoint] = None

    @classmethod
    def from_entries(cls, entries: Optional[List[Dict]]) -> "AddressSet":
        """Normalize raw address entries; the first from/to wins, extra stops are dropped"""
        address_set = cls()
        for position, entry in enumerate(address_entries(entries)):
            role = _entry_role(entry)
            if role not in VALID_ROLES:
                continue
            point = RoutePoint(
                id=str(entry.get("id") or f"{role}_{position}"),
                role=role,
                address=_entry_text(entry),
                coordinate=resolve_coordinate(entry),
            )
            if role == ROLE_FROM and address_set.origin is None:
                address_set.origin = point
            elif role == ROLE_TO and address_set.destination is None:
                address_set.destination = point
            elif role == ROLE_STOP and len(address_set.stops) < MAX_STOPS:
                address_set.stops.append(point)
        return address_set

    @property
    def points(self) -> List[RoutePoint]:
        """Present points in canonical order"""
        points = [self.origin] if self.origin else []
        points.extend(self.stops)
        if self.destination:
            points.append(self.destination)
        return points

    @property
    def is_complete(self) -> bool:
        return self.origin is not None and self.destination is not None

    def to_entries(self) -> List[Dict]:
        return [point.to_dict() for point in self.points]


def validate_address_data(data: Optional[Dict]) -> Dict:
    """
    Validate the address step payload.

    Every check runs, failed ones each add one message in a fixed order:
    family member, package, address list, from text, to text,
    from coordinate, to coordinate.
    """
    data = data if isinstance(data, dict) else {}
    errors = []
    addresses = address_entries(data.get("addresses"))

    if not data.get("familyMemberId"):
        errors.append(ERROR_NO_FAMILY_MEMBER)

    if not data.get("packageType"):
        errors.append(ERROR_NO_PACKAGE)

    if not addresses:
        errors.append(ERROR_NO_ADDRESSES)

    from_entry = next((a for a in addresses if _entry_role(a) == ROLE_FROM), None)
    to_entry = next((a for a in addresses if _entry_role(a) == ROLE_TO), None)

    if not _entry_text(from_entry):
        errors.append(ERROR_NO_FROM_ADDRESS)

    if not _entry_text(to_entry):
        errors.append(ERROR_NO_TO_ADDRESS)

    if resolve_coordinate(from_entry) is None:
        errors.append(ERROR_NO_FROM_COORDINATE)

    if resolve_coordinate(to_entry) is None:
        errors.append(ERROR_NO_TO_COORDINATE)

    return {"isValid": not errors, "errors": errors}
