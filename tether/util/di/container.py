"""Production container wiring."""

from dishka import AsyncContainer, Provider, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from tether.util.di import PROVIDERS, get_provider


def create_container(*extra: Provider) -> AsyncContainer:
    """Build the container from the real implementation of every component.

    Args:
        extra: Additional providers, e.g. overrides in a one-off script
    """
    providers = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(*providers, FastapiProvider(), *extra)


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach the container to the app.

    The app's lifespan closes whatever container is attached here.
    """
    setup_dishka(container, app)
