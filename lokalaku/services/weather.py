# lokalaku/services/weather.py
# Current-conditions lookup (OpenWeatherMap). Failures degrade to "unknown weather".

from typing import Any, Dict, Optional

import httpx
import structlog

from lokalaku.core.config import settings
from lokalaku.core.exceptions import UpstreamDegraded
from lokalaku.models.domain import Coordinate, WeatherSnapshot

logger = structlog.get_logger(__name__)

class WeatherGateway:
    """Fetches a weather snapshot for a coordinate.

    One attempt, bounded by ``timeout``. Never raises: any failure is logged
    and surfaces as ``None``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        lang: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.WEATHER_API_KEY
        self.base_url = (base_url or settings.WEATHER_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.WEATHER_TIMEOUT
        self.lang = lang or settings.LANG_DEFAULT
        self._client = client

    async def get_current_weather(self, coord: Coordinate) -> Optional[WeatherSnapshot]:
        try:
            data = await self._fetch(coord)
            return self._parse(data)
        except UpstreamDegraded as e:
            logger.warning(
                "weather_unavailable",
                reason=e.reason,
                upstream_status=e.status_code,
                lat=coord.latitude,
                lon=coord.longitude,
            )
        except Exception as e:
            logger.error(
                "weather_unexpected_error",
                error=str(e),
                lat=coord.latitude,
                lon=coord.longitude,
            )
        return None

    async def _fetch(self, coord: Coordinate) -> Dict[str, Any]:
        if not self.api_key:
            raise UpstreamDegraded("weather", "api key not configured")

        params = {
            "lat": coord.latitude,
            "lon": coord.longitude,
            "appid": self.api_key,
            "units": "metric",
            "lang": self.lang,
        }
        url = f"{self.base_url}/weather"

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException:
            raise UpstreamDegraded("weather", "timeout")
        except httpx.HTTPStatusError as e:
            raise UpstreamDegraded("weather", "http status error", e.response.status_code)
        except httpx.HTTPError as e:
            raise UpstreamDegraded("weather", f"transport error: {e.__class__.__name__}")
        except ValueError:
            raise UpstreamDegraded("weather", "response body is not JSON")

    @staticmethod
    def _parse(data: Dict[str, Any]) -> WeatherSnapshot:
        try:
            main = data["main"]
            conditions = data["weather"][0]
            return WeatherSnapshot(
                temperature_c=round(main["temp"]),
                feels_like_c=round(main["feels_like"]),
                description=conditions["description"],
                condition=conditions["main"],
                humidity_pct=int(main["humidity"]),
                wind_speed_ms=float(data.get("wind", {}).get("speed", 0.0)),
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise UpstreamDegraded("weather", f"malformed body: {e.__class__.__name__}")
