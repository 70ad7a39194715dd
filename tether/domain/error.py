"""Domain layer errors.

Expected linking outcomes travel as ``LinkFailure`` values. The exceptions here
are raised at infrastructure seams and translated by the domain services, or
signal programming errors that must never be translated.
"""

from tether.domain.value.types import ProviderKind, Role


class DomainError(Exception):
    """Base domain error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class ProviderBindingConflictError(DomainError):
    """Raised by a repository when a provider binding is already taken."""

    def __init__(self, provider: ProviderKind, external_id: str):
        self.provider = provider
        self.external_id = external_id
        super().__init__(
            f"{provider.value} account {external_id} is already bound to an identity"
        )


class RepositoryUnavailableError(DomainError):
    """Raised when a backing store cannot be reached."""

    pass


class VerificationFailedError(DomainError):
    """Raised when a provider credential cannot be verified."""

    def __init__(self, provider: ProviderKind, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider.value} verification failed: {reason}")


class InvalidRoleTransitionError(DomainError):
    """Raised when a role change would lower an identity's role.

    This indicates a bug in the caller, never a runtime condition.
    """

    def __init__(self, current: Role, proposed: Role):
        super().__init__(
            f"Role may not move from {current.value} to {proposed.value}"
        )
