# lokalaku/main.py
# Application wiring: settings -> collaborators -> discovery service -> routes.

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import uuid

from lokalaku.core.config import settings
from lokalaku.api.routes import router as api_router
from lokalaku.logging import configure_logging
from lokalaku.middleware.logging import LoggingMiddleware
from lokalaku.models.dto import ErrorResponse
from lokalaku.services.discovery_service import DiscoveryService
from lokalaku.services.generation_client import ChatCompletionsClient
from lokalaku.services.geocode_throttle import GeocodeThrottle
from lokalaku.services.geocoding import ReverseGeocoder
from lokalaku.services.recommendation_engine import RecommendationEngine
from lokalaku.services.vendor_store import JsonVendorStore
from lokalaku.services.weather import WeatherGateway

logger = logging.getLogger(__name__)

def build_discovery_service() -> DiscoveryService:
    """Create the collaborators described by the current settings."""
    throttle = GeocodeThrottle(None, settings.GEOCODER_MIN_INTERVAL_MS)
    if settings.ENABLE_REDIS:
        throttle = GeocodeThrottle.from_url(settings.REDIS_URL, settings.GEOCODER_MIN_INTERVAL_MS)

    generation = ChatCompletionsClient() if settings.LLM_API_KEY else None
    if generation is None:
        logger.warning("LLM_API_KEY not set; recommendations will use rule-based fallbacks only.")

    return DiscoveryService(
        store=JsonVendorStore(settings.VENDOR_STORE_PATH),
        weather=WeatherGateway(),
        geocoder=ReverseGeocoder(throttle=throttle),
        engine=RecommendationEngine(generation),
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application startup: v{settings.VERSION}")
    # Tests inject their own service before startup
    if getattr(app.state, "discovery", None) is None:
        app.state.discovery = build_discovery_service()
        logger.info(f"Vendor store loaded with {len(app.state.discovery.store)} vendors.")

    yield

    logger.info("Application shutdown: Cleaning up resources.")
    throttle = getattr(app.state.discovery.geocoder, "throttle", None)
    if throttle is not None and throttle.redis_client is not None:
        await throttle.redis_client.aclose()

def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.BRIEF_DESCRIPTION,
        lifespan=lifespan,
    )
    app.add_middleware(LoggingMiddleware)
    app.include_router(api_router, prefix="/api")

    @app.get("/health", status_code=status.HTTP_200_OK)
    async def health_check():
        return {"status": "ok", "version": settings.VERSION}

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": ErrorResponse(
                    error="INVALID_INPUT",
                    detail=f"Invalid or missing fields: {fields}",
                ).model_dump()
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        error_id = str(uuid.uuid4())
        logger.error(f"Unhandled exception (ID: {error_id}): {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "detail": ErrorResponse(
                    error="TEMPORARILY_UNAVAILABLE",
                    detail="The service is temporarily unavailable. Please try again later.",
                    error_id=error_id,
                ).model_dump()
            },
        )

    return app

app = create_app()
