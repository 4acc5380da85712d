# lokalaku/models/domain.py
# Internal models shared by the resolver, the collaborators and the recommendation engine.

import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from lokalaku.core.exceptions import InvalidInput

# --- Geography ---

class Coordinate(BaseModel):
    """Immutable WGS84 point. Out-of-range or non-finite values are rejected."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    @classmethod
    def of(cls, latitude: Any, longitude: Any) -> "Coordinate":
        """Build a coordinate from untrusted input, raising InvalidInput on failure."""
        try:
            lat = float(latitude)
            lon = float(longitude)
        except (TypeError, ValueError):
            raise InvalidInput(f"Coordinates must be numeric, got {latitude!r}, {longitude!r}")
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise InvalidInput("Coordinates must be finite numbers")
        try:
            return cls(latitude=lat, longitude=lon)
        except ValidationError:
            raise InvalidInput(
                f"Coordinates {lat},{lon} are outside the valid range "
                "(latitude -90..90, longitude -180..180)"
            )

    def label(self) -> str:
        return f"{self.latitude}, {self.longitude}"

# --- Vendors ---

class VendorRecord(BaseModel):
    """A vendor row as held by the external vendor store (read-only here)."""
    id: int = Field(..., description="Unique vendor identifier.")
    name: str = Field(..., description="Public shop name.")
    category: str = Field(..., description="Main thing the vendor sells (bakso, sate, es teh...).")
    contact_handle: str = Field("", description="WhatsApp number or other contact handle.")
    description: Optional[str] = Field(None, description="Free-text shop description.")
    is_live: bool = Field(False, description="Actively trading and broadcasting a location.")
    location: Optional[Coordinate] = Field(None, description="Last broadcast position; null when offline.")
    image_refs: List[str] = Field(default_factory=list, description="Stored image references.")

    @model_validator(mode="after")
    def _drop_offline_location(self) -> "VendorRecord":
        # An offline vendor never exposes a position
        if not self.is_live and self.location is not None:
            self.location = None
        return self

class VendorProximity(BaseModel):
    """A live vendor paired with its distance from the search center. Request-scoped."""
    vendor: VendorRecord
    distance_km: float = Field(..., ge=0)
    distance_m: int = Field(..., ge=0)

    def render(self) -> str:
        """Prompt form: ``name (category) - 300m``."""
        return f"{self.vendor.name} ({self.vendor.category}) - {self.distance_m}m"

# --- Weather ---

class WeatherSnapshot(BaseModel):
    temperature_c: float
    feels_like_c: float
    description: str
    condition: str
    humidity_pct: int
    wind_speed_ms: float

# --- Recommendation results ---

class ResultSource(str, Enum):
    AI = "AI"
    FALLBACK = "Fallback"

class RecommendationResult(BaseModel):
    """Buyer mode: what to buy and from whom."""
    item: str
    reason: str
    vendor_name: Optional[str] = None
    source: ResultSource

class PositioningInsight(BaseModel):
    """Seller mode: where to move to next."""
    message: str
    target_place: str
    source: ResultSource

class MarketAnalysis(BaseModel):
    """Seller mode: how saturated the surrounding market is."""
    saturated: str
    opportunity: str
    strategy: str
    score: int = Field(..., ge=0, le=100)
    source: ResultSource
