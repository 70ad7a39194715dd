"""Health check route."""

from datetime import datetime, timezone
from typing import Literal

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from tether.config import Settings
from tether.domain.repository import EphemeralCodeStore

router = APIRouter(tags=["health"], route_class=DishkaRoute)


class HealthResponse(BaseModel):
    """Service status.

    ``degraded`` means the code store is unreachable: sign-in still works
    but pairing and device login do not.
    """

    status: Literal["healthy", "degraded"]
    timestamp: datetime
    git_sha: str
    code_store: str
    code_store_reachable: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: FromDishka[Settings],
    code_store: FromDishka[EphemeralCodeStore],
) -> HealthResponse:
    reachable = await code_store.ping()
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        timestamp=datetime.now(timezone.utc),
        git_sha=settings.git_sha,
        code_store=settings.code_store.backend,
        code_store_reachable=reachable,
    )
