"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from src.api import health, webhook
from src.config import get_settings
from src.logging_config import setup_logfire
from src.services.menu_state_machine import get_menu_state_machine
from src.services.message_processor import get_event_processor

APP_TITLE = "Messenger Feature Tour Bot"
APP_VERSION = "0.3.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Loading settings here makes the process refuse to start when the app
    secret, verify token, page access token or server URL is missing.
    """
    settings = get_settings()

    # Initialize Logfire for observability
    setup_logfire(app)

    # Initialize Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            environment=settings.env,
            integrations=[FastApiIntegration()],
        )

    # One menu and processor per process; both are stateless
    menu = get_menu_state_machine(settings)
    app.state.menu = menu
    app.state.event_processor = get_event_processor(menu=menu)

    logfire.info(
        "Application startup complete",
        navigation_mode=menu.mode.value,
        environment=settings.env,
        image_base_url=settings.image_base_url,
    )

    yield

    logfire.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=APP_TITLE,
    description="Facebook Messenger help menu bot with guided and carousel tours",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Register routers
app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])


@app.get("/")
def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "message": APP_TITLE,
        "navigation_mode": settings.navigation_mode,
        "version": APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 5000))
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )
