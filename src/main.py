"""FastAPI application initialization."""

import asyncio
import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from src.api import health, telegram_webhook, webhook
from src.config import get_settings
from src.logging_config import setup_logfire
from src.middleware.correlation_id import CorrelationIDMiddleware
from src.middleware.rate_limiter import get_rate_limiter
from src.services.background_tasks import drain_background_tasks, pending_task_count
from src.services.order_store import get_order_store

APP_VERSION = "0.1.0"


# =============================================================================
# Graceful Shutdown Infrastructure
# =============================================================================

# Shutdown event for graceful termination
shutdown_event = asyncio.Event()


def is_shutting_down() -> bool:
    """Check if the application is in shutdown mode."""
    return shutdown_event.is_set()


# =============================================================================
# State Eviction
# =============================================================================


def sweep_expired_state() -> tuple[int, int]:
    """Evict expired orders and cooldown entries.

    Returns:
        (evicted orders, evicted rate limit entries)
    """
    orders = get_order_store().evict_expired()
    senders = get_rate_limiter().evict_expired()
    if orders or senders:
        logfire.info(
            "Evicted expired state",
            evicted_orders=orders,
            evicted_rate_limit_entries=senders,
        )
    return orders, senders


async def run_state_sweeper(interval_seconds: float) -> None:
    """Periodically evict expired state until shutdown or cancellation."""
    while not is_shutting_down():
        await asyncio.sleep(interval_seconds)
        try:
            sweep_expired_state()
        except Exception as e:
            logfire.error(
                "State sweep failed",
                error=str(e),
                error_type=type(e).__name__,
            )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager with graceful shutdown support."""
    # Startup
    settings = get_settings()
    shutdown_event.clear()

    # Initialize Logfire for observability
    setup_logfire(app)

    # Initialize Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            integrations=[FastApiIntegration()],
        )

    sweeper = asyncio.create_task(
        run_state_sweeper(settings.state_sweep_interval_seconds)
    )

    missing = [
        name
        for name, value in (
            ("FACEBOOK_PAGE_ACCESS_TOKEN", settings.facebook_page_access_token),
            ("FACEBOOK_VERIFY_TOKEN", settings.facebook_verify_token),
            ("TELEGRAM_BOT_TOKEN", settings.telegram_bot_token),
            ("TELEGRAM_CHAT_ID", settings.telegram_chat_id),
        )
        if not value
    ]
    if missing:
        # Requests still get served; each affected call logs and skips
        logfire.warning("Missing provider configuration", missing=missing)

    logfire.info(
        "Application startup complete",
        environment=settings.env,
        cooldown_seconds=settings.order_cooldown_seconds,
    )

    yield

    # ==========================================================================
    # Graceful Shutdown
    # ==========================================================================
    # SIGTERM/SIGINT are handled by uvicorn, which exits the lifespan
    shutdown_event.set()
    logfire.info(
        "Application shutdown initiated",
        pending_tasks=pending_task_count(),
    )

    sweeper.cancel()
    await asyncio.gather(sweeper, return_exceptions=True)

    await drain_background_tasks(settings.graceful_shutdown_timeout_seconds)

    logfire.info(
        "Application shutdown complete",
        orders_in_memory=len(get_order_store()),
    )


# Create FastAPI app
app = FastAPI(
    title="Facebook to Telegram Order Relay",
    description="Relays Messenger order photos to a Telegram staff chat for confirmation",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Correlation ID middleware (must be first for request tracing)
app.add_middleware(CorrelationIDMiddleware)

# Register routers
app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix="/webhook", tags=["facebook"])
app.include_router(telegram_webhook.router, prefix="/telegram", tags=["telegram"])


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Facebook to Telegram Order Relay",
        "version": APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )
