# lokalaku/models/dto.py
# Public request/response shapes for the discovery endpoints.

from pydantic import BaseModel, Field
from typing import List, Optional

from lokalaku.models.domain import (
    MarketAnalysis,
    PositioningInsight,
    RecommendationResult,
    VendorProximity,
    WeatherSnapshot,
)

# --- Public Data Transfer Objects (DTOs) ---

class LocationOut(BaseModel):
    latitude: float
    longitude: float

class NearbyVendorOut(BaseModel):
    """Public DTO for a single nearby vendor."""
    id: int = Field(..., description="Vendor identifier.")
    name: str = Field(..., description="Shop name.")
    category: str = Field(..., description="Main category sold.")
    contact: str = Field(..., description="Contact handle (WhatsApp number).")
    distance_m: int = Field(..., description="Distance from the search center in meters.")
    distance_km: float = Field(..., description="Distance from the search center in kilometers (2 dp).")
    location: LocationOut = Field(..., description="Last broadcast position of the vendor.")
    image_refs: List[str] = Field(default_factory=list, description="Stored image references.")

    @classmethod
    def from_proximity(cls, item: VendorProximity) -> "NearbyVendorOut":
        vendor = item.vendor
        if vendor.location is None:
            raise ValueError(f"Vendor {vendor.id} has no location to publish")
        return cls(
            id=vendor.id,
            name=vendor.name,
            category=vendor.category,
            contact=vendor.contact_handle,
            distance_m=item.distance_m,
            distance_km=round(item.distance_km, 2),
            location=LocationOut(
                latitude=vendor.location.latitude,
                longitude=vendor.location.longitude,
            ),
            image_refs=vendor.image_refs,
        )

class NearbyVendorsResponse(BaseModel):
    results: List[NearbyVendorOut]
    search_radius_km: float
    total_vendors: int

class BuyerMapResponse(BaseModel):
    """Public DTO for the /api/buyer/map response."""
    weather: Optional[WeatherSnapshot] = Field(None, description="Current conditions, null when unavailable.")
    nearby_vendors: List[NearbyVendorOut] = Field(..., description="Live vendors ordered by distance.")
    recommendation: RecommendationResult = Field(..., description="What to buy, AI or rule based.")
    search_radius_km: float = Field(..., description="Radius actually used after clamping.")
    total_vendors: int

class SellerInsightResponse(BaseModel):
    vendor_id: int
    insight: PositioningInsight

class MarketAnalysisResponse(BaseModel):
    vendor_id: int
    competitor_count: int
    analysis: MarketAnalysis

# --- API Request Models ---

class BuyerMapRequest(BaseModel):
    """Request model for the /api/buyer/map endpoint."""
    latitude: float = Field(..., description="Buyer latitude.")
    longitude: float = Field(..., description="Buyer longitude.")
    radius_km: Optional[float] = Field(None, description="Search radius, clamped to 0.1-10 km. Defaults to 1.")

# --- Error Response Model ---

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="A machine-readable error code.")
    detail: str = Field(..., description="A human-readable explanation.")
    error_id: Optional[str] = Field(None, description="Reference for unexpected failures.")
