# lokalaku/api/routes.py
# Discovery endpoints: buyer map, nearby vendors, seller insight and market analysis.

from fastapi import APIRouter, Request, HTTPException, status
import logging
from typing import Optional

from lokalaku.core.exceptions import InvalidInput, VendorNotFound, VendorNotLive
from lokalaku.models.dto import (
    BuyerMapRequest,
    BuyerMapResponse,
    ErrorResponse,
    MarketAnalysisResponse,
    NearbyVendorOut,
    NearbyVendorsResponse,
    SellerInsightResponse,
)
from lokalaku.services.discovery_service import DiscoveryService

router = APIRouter()
logger = logging.getLogger(__name__)

def get_discovery(request: Request) -> DiscoveryService:
    return request.app.state.discovery

def invalid_input(e: InvalidInput) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=ErrorResponse(error="INVALID_INPUT", detail=str(e)).model_dump(),
    )

def seller_error(e: Exception) -> HTTPException:
    if isinstance(e, VendorNotFound):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorResponse(
                error="VENDOR_NOT_FOUND",
                detail=f"Vendor {e.vendor_id} does not exist.",
            ).model_dump(),
        )
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=ErrorResponse(
            error="VENDOR_NOT_LIVE",
            detail="Go live with a location first to get AI insight.",
        ).model_dump(),
    )

# ----------------------------------------------------------------------
# Buyer
# ----------------------------------------------------------------------
@router.post(
    "/buyer/map",
    response_model=BuyerMapResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def buyer_map(request: Request, data: BuyerMapRequest):
    """Nearby live vendors, current weather and one food suggestion."""
    discovery = get_discovery(request)
    try:
        result = await discovery.buyer_map(data.latitude, data.longitude, data.radius_km)
    except InvalidInput as e:
        raise invalid_input(e)

    vendors = [NearbyVendorOut.from_proximity(v) for v in result.vendors]
    return BuyerMapResponse(
        weather=result.weather,
        nearby_vendors=vendors,
        recommendation=result.recommendation,
        search_radius_km=result.radius_km,
        total_vendors=len(vendors),
    )

@router.get(
    "/vendors/nearby",
    response_model=NearbyVendorsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def nearby_vendors(
    request: Request,
    latitude: float,
    longitude: float,
    radius_km: Optional[float] = None,
):
    """Live vendors within the radius, nearest first."""
    discovery = get_discovery(request)
    try:
        vendors, radius = await discovery.nearby(latitude, longitude, radius_km)
    except InvalidInput as e:
        raise invalid_input(e)

    results = [NearbyVendorOut.from_proximity(v) for v in vendors]
    return NearbyVendorsResponse(results=results, search_radius_km=radius, total_vendors=len(results))

# ----------------------------------------------------------------------
# Seller
# ----------------------------------------------------------------------
@router.get(
    "/sellers/{vendor_id}/insight",
    response_model=SellerInsightResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def seller_insight(request: Request, vendor_id: int):
    """Suggest a nearby spot for a live seller to move to."""
    discovery = get_discovery(request)
    try:
        insight = await discovery.seller_insight(vendor_id)
    except (VendorNotFound, VendorNotLive) as e:
        logger.info(f"Seller insight refused for vendor {vendor_id}: {e}")
        raise seller_error(e)
    return SellerInsightResponse(vendor_id=vendor_id, insight=insight)

@router.get(
    "/sellers/{vendor_id}/market-analysis",
    response_model=MarketAnalysisResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def market_analysis(request: Request, vendor_id: int):
    """Saturation and opportunity analysis against nearby competitors."""
    discovery = get_discovery(request)
    try:
        analysis, competitor_count = await discovery.market_analysis(vendor_id)
    except (VendorNotFound, VendorNotLive) as e:
        logger.info(f"Market analysis refused for vendor {vendor_id}: {e}")
        raise seller_error(e)
    return MarketAnalysisResponse(
        vendor_id=vendor_id,
        competitor_count=competitor_count,
        analysis=analysis,
    )
