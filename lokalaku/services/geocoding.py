# lokalaku/services/geocoding.py
# Reverse geocoding (Nominatim): coordinate -> short human place label for prompts.

from typing import Any, Dict, List, Optional

import httpx
import structlog

from lokalaku.core.config import settings
from lokalaku.core.exceptions import UpstreamDegraded
from lokalaku.models.domain import Coordinate
from lokalaku.services.geocode_throttle import GeocodeThrottle
from lokalaku.services.i18n import get_translations

logger = structlog.get_logger(__name__)

# Address keys by priority; the first non-empty key of each group wins
ADDRESS_PRIORITY: List[List[str]] = [
    ["amenity", "building"],
    ["road"],
    ["suburb", "village"],
    ["city", "town"],
]

def coordinate_fallback_label(coord: Coordinate, lang: str) -> str:
    label = get_translations(lang)["coordinate_label"]
    return f"{label} {coord.latitude}, {coord.longitude}"

def build_place_label(address: Dict[str, Any]) -> str:
    """Join the landmark, road, suburb and city parts that are present."""
    parts = []
    for keys in ADDRESS_PRIORITY:
        for key in keys:
            value = address.get(key)
            if isinstance(value, str) and value.strip():
                parts.append(value.strip())
                break
    return ", ".join(parts)

class ReverseGeocoder:
    """Turns a coordinate into a short place description. Never raises."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        lang: Optional[str] = None,
        throttle: Optional[GeocodeThrottle] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.GEOCODER_BASE_URL).rstrip("/")
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self.timeout = timeout or settings.GEOCODER_TIMEOUT
        self.lang = lang or settings.LANG_DEFAULT
        # Without Redis the bound is kept per process
        self.throttle = throttle or GeocodeThrottle(None, settings.GEOCODER_MIN_INTERVAL_MS)
        self._client = client

    async def describe(self, coord: Coordinate) -> str:
        fallback = coordinate_fallback_label(coord, self.lang)

        if not await self.throttle.acquire():
            logger.info("reverse_geocode_throttled", lat=coord.latitude, lon=coord.longitude)
            return fallback

        try:
            data = await self._lookup(coord)
            label = build_place_label(data.get("address") or {})
            if label:
                return label
            logger.info("reverse_geocode_empty", lat=coord.latitude, lon=coord.longitude)
        except UpstreamDegraded as e:
            logger.warning(
                "reverse_geocode_failed",
                reason=e.reason,
                upstream_status=e.status_code,
                lat=coord.latitude,
                lon=coord.longitude,
            )
        except Exception as e:
            logger.error("reverse_geocode_unexpected_error", error=str(e))
        return fallback

    async def _lookup(self, coord: Coordinate) -> Dict[str, Any]:
        url = f"{self.base_url}/reverse"
        params = {
            "format": "json",
            "lat": coord.latitude,
            "lon": coord.longitude,
            "zoom": 18,
            "addressdetails": 1,
        }
        # Nominatim usage policy requires an identifying User-Agent
        headers = {"User-Agent": self.user_agent, "Accept-Language": self.lang}

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            raise UpstreamDegraded("geocoder", "timeout")
        except httpx.HTTPStatusError as e:
            raise UpstreamDegraded("geocoder", "http status error", e.response.status_code)
        except httpx.HTTPError as e:
            raise UpstreamDegraded("geocoder", f"transport error: {e.__class__.__name__}")
        except ValueError:
            raise UpstreamDegraded("geocoder", "response body is not JSON")

        if not isinstance(data, dict):
            raise UpstreamDegraded("geocoder", "unexpected body shape")
        return data
