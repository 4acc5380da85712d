# lokalaku/services/discovery_service.py
# Request-level orchestration: validate input, fan out to the resolver and weather,
# then hand everything to the recommendation engine.

import asyncio
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import structlog

from lokalaku.core.config import clamp_radius, settings
from lokalaku.core.exceptions import InvalidInput, VendorNotFound, VendorNotLive
from lokalaku.models.domain import (
    Coordinate,
    MarketAnalysis,
    PositioningInsight,
    RecommendationResult,
    VendorProximity,
    VendorRecord,
    WeatherSnapshot,
)
from lokalaku.services.geocoding import ReverseGeocoder
from lokalaku.services.recommendation_engine import RecommendationEngine
from lokalaku.services.vendor_service import find_nearby
from lokalaku.services.vendor_store import VendorStore
from lokalaku.services.weather import WeatherGateway

logger = structlog.get_logger(__name__)

def parse_radius(radius_km: Any) -> float:
    """Default a missing radius, reject non-numeric ones, clamp the rest."""
    if radius_km is None:
        return clamp_radius(settings.DEFAULT_RADIUS_KM)
    if isinstance(radius_km, bool):
        raise InvalidInput("radius_km must be a number")
    try:
        value = float(radius_km)
    except (TypeError, ValueError):
        raise InvalidInput(f"radius_km must be a number, got {radius_km!r}")
    if math.isnan(value):
        raise InvalidInput("radius_km must be a number")
    return clamp_radius(value)

@dataclass
class BuyerMap:
    weather: Optional[WeatherSnapshot]
    vendors: List[VendorProximity]
    recommendation: RecommendationResult
    radius_km: float

class DiscoveryService:
    def __init__(
        self,
        store: VendorStore,
        weather: WeatherGateway,
        geocoder: ReverseGeocoder,
        engine: RecommendationEngine,
    ):
        self.store = store
        self.weather = weather
        self.geocoder = geocoder
        self.engine = engine

    async def nearby(self, latitude: Any, longitude: Any, radius_km: Any = None) -> Tuple[List[VendorProximity], float]:
        center = Coordinate.of(latitude, longitude)
        radius = parse_radius(radius_km)
        vendors = await asyncio.to_thread(find_nearby, center, radius, self.store)
        return vendors, radius

    async def buyer_map(self, latitude: Any, longitude: Any, radius_km: Any = None) -> BuyerMap:
        """Nearby vendors, current weather and a food suggestion for a buyer."""
        center = Coordinate.of(latitude, longitude)
        radius = parse_radius(radius_km)

        # The store read and the weather fetch are independent
        vendors, weather = await asyncio.gather(
            asyncio.to_thread(find_nearby, center, radius, self.store),
            self.weather.get_current_weather(center),
        )

        recommendation = await self.engine.recommend_for_buyer(center, vendors, weather, radius)
        logger.info(
            "buyer_map_resolved",
            lat=center.latitude,
            lon=center.longitude,
            radius_km=radius,
            vendors=len(vendors),
            weather_known=weather is not None,
            recommendation_source=recommendation.source.value,
        )
        return BuyerMap(weather=weather, vendors=vendors, recommendation=recommendation, radius_km=radius)

    def _live_vendor(self, vendor_id: int) -> Tuple[VendorRecord, Coordinate]:
        vendor = self.store.get_vendor(vendor_id)
        if vendor is None:
            raise VendorNotFound(vendor_id)
        if not vendor.is_live or vendor.location is None:
            raise VendorNotLive(vendor_id)
        return vendor, vendor.location

    async def seller_insight(self, vendor_id: int) -> PositioningInsight:
        """Where a live seller should move to next."""
        vendor, location = self._live_vendor(vendor_id)
        place = await self.geocoder.describe(location)
        return await self.engine.seller_insight(vendor.category, location, place)

    async def market_analysis(self, vendor_id: int) -> Tuple[MarketAnalysis, int]:
        """Saturation analysis against the seller's live competitors nearby."""
        vendor, location = self._live_vendor(vendor_id)
        radius = clamp_radius(settings.COMPETITOR_RADIUS_KM)

        competitors, place = await asyncio.gather(
            asyncio.to_thread(find_nearby, location, radius, self.store, vendor.id),
            self.geocoder.describe(location),
        )

        analysis = await self.engine.market_analysis(vendor.category, location, place, competitors, radius)
        return analysis, len(competitors)
