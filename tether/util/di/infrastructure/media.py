"""Media infrastructure providers."""

from dishka import Scope, provide

from tether.adapter.media import HttpProfileImageMirror
from tether.config import Settings
from tether.domain.service import ProfileImageMirror
from tether.util.di.base import ProviderBase


class MediaProvider(ProviderBase):
    """Media component base."""

    __mock_component__ = "media"


class ProdMediaProvider(MediaProvider):
    """Production profile image mirror."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_profile_image_mirror(self, settings: Settings) -> ProfileImageMirror:
        """Provide profile image mirror. Mirroring is off without a mirror URL."""
        return HttpProfileImageMirror(
            mirror_url=settings.media.mirror_url,
            timeout=settings.media.request_timeout_seconds,
        )
