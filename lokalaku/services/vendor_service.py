# lokalaku/services/vendor_service.py
# Resolves live vendors around a point: store read, distance in application code, filter, sort.

from typing import List, Optional, Tuple

import structlog

from lokalaku.core.config import clamp_radius
from lokalaku.models.domain import Coordinate, VendorProximity, VendorRecord
from lokalaku.services.vendor_store import VendorStore
from lokalaku.utils.haversine import haversine_km

logger = structlog.get_logger(__name__)

def find_nearby(
    center: Coordinate,
    radius_km: float,
    store: VendorStore,
    exclude_vendor_id: Optional[int] = None,
) -> List[VendorProximity]:
    """Return live vendors within ``radius_km`` of ``center``, nearest first.

    The radius is clamped to the supported search area before use. Ties on
    distance are broken by ascending vendor id so the order is reproducible.
    An empty list means nobody is trading nearby, not an error.
    """
    radius_km = clamp_radius(radius_km)

    candidates: List[Tuple[float, int, VendorRecord]] = []
    for vendor in store.list_live_vendors():
        if not vendor.is_live or vendor.id == exclude_vendor_id:
            continue
        if vendor.location is None:
            logger.warning("live_vendor_without_location", vendor_id=vendor.id)
            continue

        distance_km = haversine_km(center, vendor.location)
        if distance_km <= radius_km:
            candidates.append((distance_km, vendor.id, vendor))

    candidates.sort(key=lambda c: (c[0], c[1]))

    results = [
        VendorProximity(
            vendor=vendor,
            distance_km=distance_km,
            distance_m=round(distance_km * 1000),
        )
        for distance_km, _, vendor in candidates
    ]
    logger.debug(
        "nearby_vendors_resolved",
        lat=center.latitude,
        lon=center.longitude,
        radius_km=radius_km,
        count=len(results),
    )
    return results
