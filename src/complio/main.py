"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.complio.config import settings
from src.complio.features.auth import router as auth_router
from src.complio.features.forum import router as forum_router
from src.complio.features.notifications import router as notifications_router
from src.complio.features.onboarding import router as onboarding_router
from src.complio.services.auth import JWTValidator, set_jwt_validator
from src.complio.services.rate_limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    # Supabase JWT issuer is the auth endpoint URL
    issuer = f"{settings.supabase_url}/auth/v1"
    set_jwt_validator(
        JWTValidator(
            secret=settings.supabase_jwt_secret,
            issuer=issuer,
            audience=settings.jwt_audience,
            leeway=settings.jwt_leeway_seconds,
        )
    )
    logger.info("JWT validator initialized", extra={"issuer": issuer})

    yield

    set_jwt_validator(None)


app = FastAPI(
    title="compl.io API",
    description="Session confirmation, onboarding and community API for compl.io",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

origins = settings.cors_origins.split(",")
logger.info(f"Origins : {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(auth_router, tags=["auth"])
app.include_router(onboarding_router, prefix=settings.api_prefix, tags=["onboarding"])
app.include_router(forum_router, prefix=settings.api_prefix, tags=["forum"])
app.include_router(
    notifications_router, prefix=settings.api_prefix, tags=["notifications"]
)


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str


@app.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(status="healthy")
