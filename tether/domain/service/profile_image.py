"""Profile image mirroring interface."""

from tether.domain.value import IdentityId


class ProfileImageMirror:
    """Fire-and-forget queue for copying provider profile images.

    ``schedule`` must return immediately. Whatever happens to the queued work
    afterwards never affects the sign-in that scheduled it.
    """

    def schedule(self, identity_id: IdentityId, source_url: str) -> None:
        """Queue a profile image for mirroring.

        Args:
            identity_id: Identity the image belongs to
            source_url: Provider-hosted image URL
        """
        raise NotImplementedError
