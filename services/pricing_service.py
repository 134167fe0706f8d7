"""
Pricing Service
Straight-line distance and price estimate for the confirmation step
"""

import os
import math
from typing import Dict, List, Optional

from models.address import Coordinate, ROLE_FROM, ROLE_TO, address_entries, resolve_coordinate
from utils.formatters import round_half_up

EARTH_RADIUS_KM = 6371.0
PRICE_PER_KM = float(os.getenv("PRICE_PER_KM", "0.30"))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


class PricingService:
    """Estimates distance and price from the first geocoded origin and destination"""

    def __init__(self, price_per_km: float = PRICE_PER_KM):
        self.price_per_km = price_per_km

    def estimate(self, origin: Optional[Coordinate], destination: Optional[Coordinate]) -> Dict:
        """
        Distance and price, both rounded to two decimals.

        A missing coordinate is an unpriced draft, not an error: both
        values come back as 0.0 and ``priced`` is False.
        """
        if origin is None or destination is None:
            return {"distance_km": 0.0, "price": 0.0, "priced": False}

        distance_km = haversine_km(origin.lat, origin.lng, destination.lat, destination.lng)
        return {
            "distance_km": round_half_up(distance_km, 2),
            "price": round_half_up(distance_km * self.price_per_km, 2),
            "priced": True,
        }

    def estimate_for_addresses(self, addresses: Optional[List[Dict]]) -> Dict:
        """Estimate from raw address entries using the first geocoded from and to"""
        origin = self._first_geocoded(addresses, ROLE_FROM)
        destination = self._first_geocoded(addresses, ROLE_TO)
        return self.estimate(origin, destination)

    def _first_geocoded(self, addresses: Optional[List[Dict]], role: str) -> Optional[Coordinate]:
        for entry in address_entries(addresses):
            if (entry.get("type") or entry.get("role")) != role:
                continue
            coordinate = resolve_coordinate(entry)
            if coordinate is not None:
                return coordinate
        return None
