# lokalaku/services/recommendation_engine.py
# One "ask the generator -> validate -> else fallback" routine shared by every recommendation mode.

import asyncio
from datetime import datetime
from typing import Any, Callable, List, Optional, TypeVar
from zoneinfo import ZoneInfoNotFoundError

import structlog
from pydantic import ValidationError

from lokalaku.core.config import settings
from lokalaku.core.exceptions import UpstreamDegraded
from lokalaku.models.domain import (
    Coordinate,
    MarketAnalysis,
    PositioningInsight,
    RecommendationResult,
    VendorProximity,
    WeatherSnapshot,
)
from lokalaku.services.generation_client import GenerationClient
from lokalaku.services.i18n import get_translations
from lokalaku.services.recommendation_modes import (
    BUYER_MODE,
    MARKET_ANALYSIS_MODE,
    SELLER_INSIGHT_MODE,
    BuyerContext,
    MarketContext,
    RecommendationMode,
    SellerInsightContext,
)
from lokalaku.services.response_parser import extract_json_object
from lokalaku.utils.local_time import LocalMoment, local_moment

logger = structlog.get_logger(__name__)

ContextT = TypeVar("ContextT")
ResultT = TypeVar("ResultT")

class RecommendationEngine:
    """
    Resolves recommendations for every mode through the same protocol:

    1. optional precondition short-circuit (no network),
    2. prompt assembly with local time in the configured zone,
    3. a single bounded call to the generation service,
    4. strict then brace-scan parsing, validated against the mode's schema,
    5. rule-based fallback when any of the above fails.

    ``resolve`` is total: it always returns a valid result and never raises.
    """

    def __init__(
        self,
        client: Optional[GenerationClient],
        lang: Optional[str] = None,
        tz_name: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.lang = lang or settings.LANG_DEFAULT
        self.tz_name = tz_name or settings.TIMEZONE
        self._clock = clock

    def _moment(self) -> LocalMoment:
        now = self._clock() if self._clock is not None else None
        try:
            return local_moment(self.tz_name, now)
        except (ZoneInfoNotFoundError, ValueError):
            logger.error("unknown_timezone", tz_name=self.tz_name, using="UTC")
            return local_moment("UTC", now)

    async def resolve(self, mode: RecommendationMode[ContextT, ResultT], context: ContextT) -> ResultT:
        texts = get_translations(self.lang)
        moment = self._moment()

        try:
            if mode.precondition is not None:
                short_circuit = mode.precondition(context, moment, texts)
                if short_circuit is not None:
                    logger.info("recommendation_short_circuit", mode=mode.name)
                    return short_circuit

            prompt = mode.build_prompt(context, moment, texts)
            raw = await self._generate(mode, prompt)
            if raw is not None:
                result = self._validate(mode, raw)
                if result is not None:
                    logger.info("recommendation_resolved", mode=mode.name, source="AI")
                    return result
        except Exception:
            # Anything unexpected still ends in the documented fallback
            logger.exception("recommendation_unexpected_error", mode=mode.name)

        logger.info("recommendation_resolved", mode=mode.name, source="Fallback")
        return mode.build_fallback(context, moment, texts)

    async def _generate(self, mode: RecommendationMode, prompt: str) -> Optional[str]:
        if self.client is None:
            logger.info("generation_not_configured", mode=mode.name)
            return None
        try:
            # wait_for bounds the whole exchange; httpx timeouts apply per network operation
            return await asyncio.wait_for(
                self.client.complete(prompt, timeout=mode.timeout, max_tokens=mode.max_tokens),
                timeout=mode.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("generation_failed", mode=mode.name, reason="timeout", timeout_s=mode.timeout)
        except UpstreamDegraded as e:
            logger.warning(
                "generation_failed",
                mode=mode.name,
                reason=e.reason,
                upstream_status=e.status_code,
            )
        return None

    def _validate(self, mode: RecommendationMode[Any, ResultT], raw: str) -> Optional[ResultT]:
        obj = extract_json_object(raw, mode.required_keys)
        if obj is None:
            logger.warning(
                "generation_unparseable",
                mode=mode.name,
                required_keys=list(mode.required_keys),
                content_chars=len(raw),
            )
            return None
        try:
            payload = mode.payload_model.model_validate(obj)
        except ValidationError as e:
            logger.warning("generation_schema_mismatch", mode=mode.name, errors=e.error_count())
            return None
        return mode.to_result(payload)

    # --- Per-mode entry points ---

    async def recommend_for_buyer(
        self,
        coordinate: Coordinate,
        vendors: List[VendorProximity],
        weather: Optional[WeatherSnapshot],
        radius_km: float = 1.0,
    ) -> RecommendationResult:
        context = BuyerContext(coordinate=coordinate, vendors=vendors, weather=weather, radius_km=radius_km)
        return await self.resolve(BUYER_MODE, context)

    async def seller_insight(self, category: str, coordinate: Coordinate, place: str) -> PositioningInsight:
        context = SellerInsightContext(category=category, coordinate=coordinate, place=place)
        return await self.resolve(SELLER_INSIGHT_MODE, context)

    async def market_analysis(
        self,
        category: str,
        coordinate: Coordinate,
        place: str,
        competitors: List[VendorProximity],
        radius_km: float = 1.0,
    ) -> MarketAnalysis:
        context = MarketContext(
            category=category,
            coordinate=coordinate,
            place=place,
            competitors=competitors,
            radius_km=radius_km,
        )
        return await self.resolve(MARKET_ANALYSIS_MODE, context)
