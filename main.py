import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from mindful.core.config import Base, engine, settings, SessionLocal
from mindful.core.exceptions import register_exception_handlers
from mindful import models  # noqa: F401  (registers tables on Base.metadata)
from mindful.services.achievement import achievement_service
from mindful.services.subscription import subscription_service
from mindful.services.support import support_service
from mindful.api.routers import (
    auth,
    entries,
    achievements,
    affirmations,
    challenges,
    goals,
    subscriptions,
    support,
)

# =====================================================================
# LOGGING
# =====================================================================

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("mindful")


# =====================================================================
# STARTUP
# =====================================================================

def seed_reference_data() -> None:
    """Achievement catalog, subscription plans and support topics."""
    db = SessionLocal()
    try:
        achievement_service.seed_catalog(db)
        subscription_service.seed_plans(db)
        support_service.seed_topics(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    seed_reference_data()
    logger.info(f"{settings.APP_NAME} started")
    yield


# =====================================================================
# CREATE APP
# =====================================================================

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    description="Mindful journaling, streaks, challenges and peer support API",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# =====================================================================
# CORS MIDDLEWARE - MUST BE FIRST!
# =====================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

logger.info(f"CORS allowed origins: {settings.CORS_ORIGINS}")


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms"
        )
    return response


# =====================================================================
# DATABASE INITIALIZATION
# =====================================================================

Base.metadata.create_all(bind=engine)

# =====================================================================
# HEALTH CHECK (before routers)
# =====================================================================


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# =====================================================================
# ROUTES
# =====================================================================

app.include_router(auth.router)
app.include_router(entries.router)
app.include_router(achievements.router)
app.include_router(affirmations.router)
app.include_router(challenges.router)
app.include_router(goals.router)
app.include_router(subscriptions.router)
app.include_router(support.router)

# =====================================================================
# ROOT ENDPOINT
# =====================================================================


@app.get("/")
def root():
    """API root endpoint."""
    return {
        "message": "Welcome to Mindful Journal API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "auth": "/auth",
            "entries": "/api/entries",
            "achievements": "/api/achievements",
            "streak": "/api/streak",
            "affirmations": "/api/affirmations",
            "challenges": "/api/challenges",
            "goals": "/api/goals",
            "subscription": "/api/subscription",
            "support": "/api/support",
        },
    }
