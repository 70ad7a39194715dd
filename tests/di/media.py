"""Mock media providers for testing."""

from dishka import Scope, provide

from tether.adapter.media import MockProfileImageMirror
from tether.domain.service import ProfileImageMirror
from tether.util.di.infrastructure.media import MediaProvider


class MockMediaProvider(MediaProvider):
    """Profile image mirror that records what it was asked to copy."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_profile_image_mirror(self) -> ProfileImageMirror:
        """Provide recording profile image mirror."""
        return MockProfileImageMirror()
