"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Logging: configured once from LOG_LEVEL
  2. Lifespan manager: DB table creation, accrual scheduler, cleanup
  3. CORS middleware: allows frontend origins to make cross-origin requests
  4. Exception handlers: map domain errors to HTTP responses
  5. Router registration: mounts all API endpoint groups

Running locally:
    uvicorn yieldwallet.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from yieldwallet.config import settings
from yieldwallet.database import engine, Base
from yieldwallet.exceptions import register_exception_handlers
from yieldwallet.jobs.scheduler import start_scheduler, stop_scheduler
from yieldwallet.routers import admin, investments, recharges, wallet, withdrawals

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
      Creates all database tables if they don't exist, then starts the
      daily accrual scheduler if ACCRUAL_SCHEDULER_ENABLED is set.

    Shutdown:
      Stops the scheduler and disposes of the database engine.
    """
    # --- Startup ---
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if settings.ACCRUAL_SCHEDULER_ENABLED:
        start_scheduler()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield
    # --- Shutdown ---
    stop_scheduler()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Wallet ledger with investment plans, daily profit accrual and withdrawals",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(wallet.router, prefix="/wallet", tags=["Wallet"])
app.include_router(investments.router, tags=["Investments"])
app.include_router(withdrawals.router, prefix="/withdrawals", tags=["Withdrawals"])
app.include_router(recharges.router, prefix="/recharges", tags=["Recharges"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe for load balancers and orchestrators."""
    return {"status": "ok", "version": settings.APP_VERSION}
