"""
Places Service
Address autocomplete and place lookup against the Google Places API
"""

import os
from typing import Dict, List, Optional

import requests

from services.monitoring_service import logger

GOOGLE_PLACES_API_KEY = os.getenv("GOOGLE_PLACES_API_KEY", "")
PLACES_LANGUAGE = os.getenv("PLACES_LANGUAGE", "en")
AUTOCOMPLETE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"
DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"


class PlacesService:
    """Feeds address entries; returns empty results instead of raising"""

    def __init__(self, api_key: str = GOOGLE_PLACES_API_KEY, language: str = PLACES_LANGUAGE,
                 session: Optional[requests.Session] = None, timeout: float = 10):
        self.api_key = api_key
        self.language = language
        self.session = session or requests.Session()
        self.timeout = timeout

    def predict(self, query: str) -> List[Dict]:
        """Autocomplete predictions as ``{id, mainText, secondaryText}``"""
        query = (query or "").strip()
        if not self.api_key or not query:
            return []

        data = self._get(AUTOCOMPLETE_URL, {"input": query})
        if not data or data.get("status") != "OK":
            return []

        predictions = []
        for item in data.get("predictions", []):
            formatting = item.get("structured_formatting", {})
            predictions.append({
                "id": item.get("place_id"),
                "mainText": formatting.get("main_text", item.get("description", "")),
                "secondaryText": formatting.get("secondary_text", ""),
            })
        return predictions

    def resolve(self, place_id: str) -> Optional[Dict]:
        """Formatted address and coordinate of a place, or None"""
        if not self.api_key or not place_id:
            return None

        data = self._get(DETAILS_URL, {"place_id": place_id, "fields": "formatted_address,geometry/location"})
        if not data or data.get("status") != "OK":
            return None

        result = data.get("result", {})
        location = result.get("geometry", {}).get("location")
        if not location:
            return None
        return {
            "formattedAddress": result.get("formatted_address", ""),
            "coordinate": {"lat": location["lat"], "lng": location["lng"]},
        }

    def _get(self, url: str, params: Dict) -> Optional[Dict]:
        try:
            response = self.session.get(
                url,
                params={**params, "language": self.language, "key": self.api_key},
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[Places] Request to {url} failed: {e}")
            return None
