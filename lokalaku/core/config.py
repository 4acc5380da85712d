# lokalaku/core/config.py
# Settings for the proximity discovery & recommendation service.

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

class Settings(BaseSettings):
    PROJECT_NAME: str = "Lokalaku"
    VERSION: str = "0.2.0"
    BRIEF_DESCRIPTION: str = "Finds live roaming vendors near a buyer and suggests what to buy, where to stand and how crowded a market is."

    ENV: str = Field("development", description="Application environment (e.g., production, development)")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LANG_DEFAULT: str = Field("id", description="Locale for user-facing fallback texts (id or en)")

    # Prompts and day periods are computed in this zone, never server-local time
    TIMEZONE: str = Field("Asia/Jakarta", description="IANA zone used for local time in prompts")

    # --- Search area ---
    DEFAULT_RADIUS_KM: float = 1.0
    MIN_RADIUS_KM: float = 0.1
    MAX_RADIUS_KM: float = 10.0
    COMPETITOR_RADIUS_KM: float = 1.0

    # --- Vendor store ---
    VENDOR_STORE_PATH: Optional[str] = Field(None, description="Path to the vendor snapshot JSON (defaults to data/vendors.json)")

    # --- Weather (OpenWeatherMap) ---
    WEATHER_API_KEY: Optional[str] = Field(None, description="OpenWeatherMap API key")
    WEATHER_BASE_URL: str = "https://api.openweathermap.org/data/2.5"
    WEATHER_TIMEOUT: float = 5.0 # seconds

    # --- Reverse geocoding (Nominatim) ---
    GEOCODER_BASE_URL: str = "https://nominatim.openstreetmap.org"
    GEOCODER_USER_AGENT: str = Field("LokalakuApp/1.0", description="Identifying client header required by Nominatim")
    GEOCODER_TIMEOUT: float = 5.0 # seconds
    GEOCODER_MIN_INTERVAL_MS: int = 1000

    # --- Generation service (OpenAI-compatible chat completions) ---
    LLM_API_KEY: Optional[str] = Field(None, description="Bearer token for the generation service")
    LLM_BASE_URL: str = "https://api.kolosal.ai/v1"
    LLM_MODEL: str = "Claude Sonnet 4.5"
    LLM_FORCE_JSON: bool = Field(False, description="Send response_format=json_object with each request")
    LLM_BUYER_TIMEOUT: float = 30.0
    LLM_INSIGHT_TIMEOUT: float = 30.0
    LLM_ANALYSIS_TIMEOUT: float = 60.0

    # --- Feature Flags ---
    ENABLE_REDIS: bool = Field(False, description="Feature flag for the Redis-backed geocoder throttle")
    REDIS_URL: Optional[str] = Field(None, description="Redis URL for the geocoder throttle")

    @field_validator("TIMEZONE")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        # Fail at startup rather than on the first recommendation
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown IANA time zone: {value!r}")
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()

def clamp_radius(radius_km: float) -> float:
    """Bound a search radius to the supported search area."""
    return max(settings.MIN_RADIUS_KM, min(settings.MAX_RADIUS_KM, radius_km))
