"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tether.config import Settings
from tether.interface.api.routes import (
    auth,
    device_login,
    health,
    identities,
    pairing,
)
from tether.interface.error import EXCEPTION_HANDLERS
from tether.util.di.container import create_container, setup_di
from tether.util.error import check_settings
from tether.util.observability import (
    instrument_fastapi,
    instrument_httpx,
)

ROUTERS = (
    health.router,
    auth.router,
    pairing.router,
    device_login.router,
    identities.router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Disposes the engine and the Redis pool
    await app.state.dishka_container.close()


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create the FastAPI application.

    Logfire is configured by scripts/start_app.py before uvicorn calls
    this factory. Tests pass their own container.

    Args:
        container: DI container; the production container when omitted
    """
    settings = Settings()
    check_settings(settings)

    instrument_httpx()

    app_instance = FastAPI(
        title="Tether API",
        description="Identity linking, device pairing and second-device sign-in",
        version="0.1.0",
        lifespan=lifespan,
    )
    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        max_age=600,
    )

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app_instance.add_exception_handler(exc_class, handler)

    setup_di(app_instance, container or create_container())

    for router in ROUTERS:
        app_instance.include_router(router)

    return app_instance
