"""Profile image mirroring adapters."""

import asyncio

import httpx
import logfire

from tether.domain.service.profile_image import ProfileImageMirror
from tether.domain.value import IdentityId


class HttpProfileImageMirror(ProfileImageMirror):
    """Asks the media service to copy a provider image, in the background.

    Each request runs as its own task on the running event loop. Failures are
    logged and dropped.
    """

    def __init__(self, mirror_url: str | None, timeout: float) -> None:
        """Initialize mirror.

        Args:
            mirror_url: Media service endpoint, None disables mirroring
            timeout: Request timeout in seconds
        """
        self.mirror_url = mirror_url
        self.timeout = timeout
        # Strong references so pending tasks are not garbage collected
        self._tasks: set[asyncio.Task[None]] = set()

    def schedule(self, identity_id: IdentityId, source_url: str) -> None:
        if self.mirror_url is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logfire.warn(
                "No event loop for profile image mirror",
                identity_id=str(identity_id),
            )
            return

        task = loop.create_task(self._mirror(self.mirror_url, identity_id, source_url))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _mirror(
        self, mirror_url: str, identity_id: IdentityId, source_url: str
    ) -> None:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    mirror_url,
                    json={"identity_id": str(identity_id), "source_url": source_url},
                    timeout=self.timeout,
                )
            if response.status_code >= 300:
                logfire.warn(
                    "Profile image mirror rejected",
                    identity_id=str(identity_id),
                    status_code=response.status_code,
                )
                return
            logfire.info("Profile image mirrored", identity_id=str(identity_id))
        except httpx.HTTPError as e:
            logfire.warn(
                "Profile image mirror failed",
                identity_id=str(identity_id),
                error=str(e),
            )


class MockProfileImageMirror(ProfileImageMirror):
    """Records scheduled images instead of sending them."""

    def __init__(self) -> None:
        self.scheduled: list[tuple[IdentityId, str]] = []

    def schedule(self, identity_id: IdentityId, source_url: str) -> None:
        self.scheduled.append((identity_id, source_url))
