"""Logfire setup and library instrumentation.

Domain services open one span per operation and log structured events
inside it. Pairing codes, QR tokens and short codes are bearer secrets:
they are never passed as span attributes, and the scrubber below catches
them if they slip into a payload anyway.
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from tether.config import Settings

SERVICE_NAME = "tether-backend"

# Attribute names redacted on top of Logfire's defaults
SECRET_ATTRIBUTE_PATTERNS = ["credential", "qr_token", "short_code", "pairing_code"]

# Status polling would otherwise dominate the request traces
EXCLUDED_URLS = "/health"


def _should_send(settings: Settings) -> bool:
    explicit = settings.observability.send_to_logfire
    if explicit is not None:
        return explicit
    return settings.observability.logfire_token is not None


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire once per process.

    Telemetry is exported when OBSERVABILITY__SEND_TO_LOGFIRE says so, or
    when it is unset and a token is present. Otherwise spans only go to
    the console.
    """
    send_to_logfire = _should_send(settings)

    logfire.configure(
        service_name=SERVICE_NAME,
        service_version=settings.git_sha,
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=settings.observability.logfire_token,
        scrubbing=logfire.ScrubbingOptions(extra_patterns=SECRET_ATTRIBUTE_PATTERNS),
        console=logfire.ConsoleOptions(
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )
    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
    )


def _request_attributes(request, attributes):
    """Keep validation errors, drop validated values.

    The values include provider credentials, pairing codes and QR tokens.
    """
    result = {}
    if attributes.get("errors"):
        result["errors"] = attributes["errors"]
    if request.client:
        result["client_host"] = request.client.host
    return result


def instrument_fastapi(app: FastAPI) -> None:
    logfire.instrument_fastapi(
        app,
        # Headers carry bearer tokens
        capture_headers=False,
        request_attributes_mapper=_request_attributes,
        excluded_urls=EXCLUDED_URLS,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace queries on the engine, tagging SQL with the span context."""
    logfire.instrument_sqlalchemy(engine=engine.sync_engine, enable_commenter=True)


def instrument_httpx() -> None:
    """Trace outbound calls to provider userinfo endpoints and the mirror."""
    logfire.instrument_httpx()


def instrument_redis() -> None:
    """Trace code store commands.

    Command arguments are not captured; keys contain pairing codes.
    """
    logfire.instrument_redis(capture_statement=False)
