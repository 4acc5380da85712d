# lokalaku/services/recommendation_modes.py
# The three recommendation use cases, each described by a RecommendationMode value:
# prompt template, response schema and rule-based fallback.

import math
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, StringConstraints, field_validator

from lokalaku.core.config import settings
from lokalaku.models.domain import (
    Coordinate,
    MarketAnalysis,
    PositioningInsight,
    RecommendationResult,
    ResultSource,
    VendorProximity,
    WeatherSnapshot,
)
from lokalaku.utils.local_time import LocalMoment

Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

ContextT = TypeVar("ContextT")
ResultT = TypeVar("ResultT")

# Lower-cased substrings of a weather description that mean rain
RAIN_KEYWORDS = ("hujan", "gerimis", "badai", "rain", "drizzle", "shower", "thunderstorm")
RAIN_CONDITIONS = {"rain", "drizzle", "thunderstorm"}

HOT_ABOVE_C = 30.0
COOL_BELOW_C = 25.0
FALLBACK_MARKET_SCORE = 50

# --- Invocation contexts ---

@dataclass(frozen=True)
class BuyerContext:
    coordinate: Coordinate
    vendors: List[VendorProximity]
    weather: Optional[WeatherSnapshot] = None
    radius_km: float = 1.0

@dataclass(frozen=True)
class SellerInsightContext:
    category: str
    coordinate: Coordinate
    place: str

@dataclass(frozen=True)
class MarketContext:
    category: str
    coordinate: Coordinate
    place: str
    competitors: List[VendorProximity] = field(default_factory=list)
    radius_km: float = 1.0

# --- Expected generation payloads ---

class BuyerPayload(BaseModel):
    recommendation: Text
    reason: Text
    shop_name: Optional[str]

class InsightPayload(BaseModel):
    message: Text
    target_location: Text

class MarketPayload(BaseModel):
    saturated: Text
    opportunity: Text
    strategy: Text
    score: int

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError("score must be a number")
        if isinstance(value, str):
            value = value.strip().rstrip("%")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError("score must be a number")
        if not math.isfinite(number):
            raise ValueError("score must be a finite number")
        return int(round(max(0.0, min(100.0, number))))

# --- Mode descriptor ---

@dataclass(frozen=True)
class RecommendationMode(Generic[ContextT, ResultT]):
    """Everything that differs between use cases of the recommendation engine."""
    name: str
    payload_model: Type[BaseModel]
    build_prompt: Callable[[ContextT, LocalMoment, dict], str]
    build_fallback: Callable[[ContextT, LocalMoment, dict], ResultT]
    to_result: Callable[[Any], ResultT]
    timeout: float
    max_tokens: int
    # Returns a result to short-circuit the external call, or None to proceed
    precondition: Optional[Callable[[ContextT, LocalMoment, dict], Optional[ResultT]]] = None

    @property
    def required_keys(self) -> Tuple[str, ...]:
        return tuple(self.payload_model.model_fields)

# --- Shared prompt pieces ---

def render_vendor_list(vendors: List[VendorProximity]) -> str:
    return ", ".join(v.render() for v in vendors)

def _format_degrees(value: float) -> str:
    return f"{value:g}"

def _json_instruction(template: str, texts: dict) -> str:
    return (
        f"Reply in {texts['language_name']} with a single JSON object and nothing else, "
        f"in exactly this shape: {template}"
    )

# --- Buyer recommendation ---

def buyer_prompt(ctx: BuyerContext, moment: LocalMoment, texts: dict) -> str:
    if ctx.weather is not None:
        weather_line = (
            f"Current weather: {ctx.weather.description}, "
            f"{_format_degrees(ctx.weather.temperature_c)}°C."
        )
    else:
        weather_line = "Current weather: unknown."
    return "\n".join([
        "You are a smart street-food assistant.",
        f"It is {moment.date_text}, {moment.time_text} ({moment.period_label(texts)}).",
        weather_line,
        f"The buyer is at coordinates {ctx.coordinate.label()}.",
        f"Roaming vendors within {_format_degrees(ctx.radius_km)} km: {render_vendor_list(ctx.vendors)}.",
        "Recommend exactly one food or drink that suits the weather and is sold by one of these vendors.",
        _json_instruction(
            '{"recommendation": "food or drink name", '
            '"reason": "short reason it suits the weather", '
            '"shop_name": "name of the recommended vendor"}',
            texts,
        ),
    ])

def buyer_precondition(ctx: BuyerContext, moment: LocalMoment, texts: dict) -> Optional[RecommendationResult]:
    if ctx.vendors:
        return None
    return RecommendationResult(
        item=texts["explore_item"],
        reason=texts["explore_reason"],
        vendor_name=None,
        source=ResultSource.FALLBACK,
    )

def is_rainy(weather: WeatherSnapshot) -> bool:
    description = weather.description.lower()
    if any(keyword in description for keyword in RAIN_KEYWORDS):
        return True
    return weather.condition.lower() in RAIN_CONDITIONS

def buyer_fallback(ctx: BuyerContext, moment: LocalMoment, texts: dict) -> RecommendationResult:
    """Weather rule table, first match wins: rain, hot, cool, default."""
    vendor_name = ctx.vendors[0].vendor.name if ctx.vendors else texts["nearest_vendor"]
    weather = ctx.weather

    if weather is not None and is_rainy(weather):
        item, reason = texts["rain_item"], texts["rain_reason"]
    elif weather is not None and weather.temperature_c > HOT_ABOVE_C:
        item = texts["hot_item"]
        reason = texts["hot_reason"].format(temp=_format_degrees(weather.temperature_c))
    elif weather is not None and weather.temperature_c < COOL_BELOW_C:
        item = texts["cool_item"]
        reason = texts["cool_reason"].format(temp=_format_degrees(weather.temperature_c))
    else:
        item, reason = texts["default_item"], texts["default_reason"]

    return RecommendationResult(
        item=item,
        reason=reason,
        vendor_name=vendor_name,
        source=ResultSource.FALLBACK,
    )

def buyer_result(payload: BuyerPayload) -> RecommendationResult:
    shop_name = payload.shop_name.strip() if payload.shop_name else None
    return RecommendationResult(
        item=payload.recommendation,
        reason=payload.reason,
        vendor_name=shop_name or None,
        source=ResultSource.AI,
    )

BUYER_MODE: RecommendationMode[BuyerContext, RecommendationResult] = RecommendationMode(
    name="buyer_recommendation",
    payload_model=BuyerPayload,
    build_prompt=buyer_prompt,
    build_fallback=buyer_fallback,
    to_result=buyer_result,
    timeout=settings.LLM_BUYER_TIMEOUT,
    max_tokens=500,
    precondition=buyer_precondition,
)

# --- Seller positioning insight ---

def insight_prompt(ctx: SellerInsightContext, moment: LocalMoment, texts: dict) -> str:
    period = moment.period_label(texts)
    return "\n".join([
        f"You are a field strategy consultant for a roaming street vendor selling {ctx.category}.",
        f"It is {moment.date_text}, {moment.time_text} ({period}).",
        f"The vendor is currently at: {ctx.place} (coordinates {ctx.coordinate.label()}).",
        "Suggest one specific public place (a named building, park, school, office or market) "
        "WITHIN 500 METERS of that position that is likely to be busy with buyers at this time of day.",
        "For example: at night look for night markets or town squares; at noon look for schools or offices.",
        "Do NOT suggest places in another district or city.",
        _json_instruction(
            '{"message": "an encouraging sentence with a short reason, greeting the vendor '
            f'with the time of day ({period})", "target_location": "specific place name"}}',
            texts,
        ),
    ])

def insight_fallback(ctx: SellerInsightContext, moment: LocalMoment, texts: dict) -> PositioningInsight:
    return PositioningInsight(
        message=texts["insight_message"].format(period=moment.period_label(texts)),
        target_place=texts["insight_target"],
        source=ResultSource.FALLBACK,
    )

def insight_result(payload: InsightPayload) -> PositioningInsight:
    return PositioningInsight(
        message=payload.message,
        target_place=payload.target_location,
        source=ResultSource.AI,
    )

SELLER_INSIGHT_MODE: RecommendationMode[SellerInsightContext, PositioningInsight] = RecommendationMode(
    name="seller_insight",
    payload_model=InsightPayload,
    build_prompt=insight_prompt,
    build_fallback=insight_fallback,
    to_result=insight_result,
    timeout=settings.LLM_INSIGHT_TIMEOUT,
    max_tokens=500,
)

# --- Market saturation analysis ---

def market_prompt(ctx: MarketContext, moment: LocalMoment, texts: dict) -> str:
    competitors = render_vendor_list(ctx.competitors) or "none"
    return "\n".join([
        "You are a business consultant for small street-food vendors.",
        f"I sell: '{ctx.category}'.",
        f"It is {moment.date_text}, {moment.time_text} ({moment.period_label(texts)}).",
        f"My location: {ctx.place} (coordinates {ctx.coordinate.label()}).",
        f"Competitors within {_format_degrees(ctx.radius_km)} km of me: {competitors}.",
        "Tasks:",
        "1. Saturation: which kinds of goods are already oversupplied here?",
        "2. Opportunity: which kinds of goods are missing here but likely to sell?",
        "3. Strategy: should I change my menu, or keep it and add variations?",
        "Also give a location potential score from 0 to 100.",
        _json_instruction(
            '{"saturated": "summary of what is oversupplied", '
            '"opportunity": "what is missing but in demand", '
            '"strategy": "specific advice for me", "score": 80}',
            texts,
        ),
    ])

def market_fallback(ctx: MarketContext, moment: LocalMoment, texts: dict) -> MarketAnalysis:
    return MarketAnalysis(
        saturated=texts["market_saturated"],
        opportunity=texts["market_opportunity"],
        strategy=texts["market_strategy"],
        score=FALLBACK_MARKET_SCORE,
        source=ResultSource.FALLBACK,
    )

def market_result(payload: MarketPayload) -> MarketAnalysis:
    return MarketAnalysis(
        saturated=payload.saturated,
        opportunity=payload.opportunity,
        strategy=payload.strategy,
        score=payload.score,
        source=ResultSource.AI,
    )

MARKET_ANALYSIS_MODE: RecommendationMode[MarketContext, MarketAnalysis] = RecommendationMode(
    name="market_analysis",
    payload_model=MarketPayload,
    build_prompt=market_prompt,
    build_fallback=market_fallback,
    to_result=market_result,
    timeout=settings.LLM_ANALYSIS_TIMEOUT,
    max_tokens=600,
)
