"""Staff Spin Wheel — FastAPI Application Entry Point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.middleware.rate_limit import limiter
from app.routers import admin, spin, staff, wheel
from app.database import SessionLocal, init_db
from app.services.ai_client import ai_provider_name, ai_health_check, generate_quote
from app.services.result_store import SqlResultStore
from app.wheel import SubjectProfile, build_wheel

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - [%(name)s] - %(message)s",
)
logger = logging.getLogger(__name__)

init_db()


async def _quote_for_subject(subject: SubjectProfile, outcome_label: str) -> str:
    return await generate_quote(subject.name, subject.group, list(subject.preference_tags), outcome_label)


app = FastAPI(
    title="Staff Spin Wheel",
    description="Register staff, spin the celebrity wheel, celebrate with an AI quote.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Invalid wheel configuration raises here and stops startup
app.state.wheel = build_wheel(settings, SqlResultStore(SessionLocal), _quote_for_subject)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(staff.router)
app.include_router(admin.router)
app.include_router(spin.router)
app.include_router(wheel.router)


@app.on_event("startup")
async def on_startup():
    """Log the wheel layout and AI provider."""
    outcomes = app.state.wheel.outcomes
    logger.info("Wheel ready with %d segments: %s", outcomes.size(), ", ".join(outcomes))

    provider = ai_provider_name()
    if provider == "none":
        logger.warning(
            "AI NOT CONFIGURED: set GEMINI_API_KEY (or ANTHROPIC_API_KEY) in backend/.env; "
            "celebrations will use template quotes. Visit /api/health/ai to verify."
        )
    else:
        logger.info("AI provider: %s", provider)


@app.get("/")
def root():
    return {
        "name": "Staff Spin Wheel API",
        "version": "1.0.0",
        "docs": "/docs",
        "ai_provider": ai_provider_name(),
    }


@app.get("/health")
def health():
    return {"status": "ok", "ai_provider": ai_provider_name()}


@app.get("/api/health/ai")
async def health_ai():
    """Live connectivity test for the configured AI provider.

    Returns:
        provider: which AI is active
        status:   "ok" | "error" | "unconfigured"
        test_reply / error: result of a tiny test call
    """
    return await ai_health_check()
