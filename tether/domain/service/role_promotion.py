"""Role promotion policy."""

from datetime import datetime

import logfire

from tether.domain.error import InvalidRoleTransitionError
from tether.domain.model.common import DomainModel
from tether.domain.model.identity import Identity
from tether.domain.value import PromotionEvent, PromotionTrigger, Role

from .base import Service

# Tier reached through promotion
ELEVATED_ROLE = Role.ARTIST


class PromotionResult(DomainModel):
    """Identity after the policy was applied, with the role it had before."""

    identity: Identity
    previous_role: Role

    @property
    def changed(self) -> bool:
        return self.identity.role != self.previous_role


class RolePromotionPolicy(Service):
    """Decides role elevation for domain events.

    Elevation is monotonic: identities below the artist tier move up to it on
    a qualifying event, everything else is left alone. Applying the same event
    twice is a no-op the second time.
    """

    def decide(self, current_role: Role, event: PromotionEvent) -> Role:
        """Return the role an identity should hold after ``event``.

        Args:
            current_role: Role before the event
            event: Triggering event

        Returns:
            The new role, possibly ``current_role`` unchanged
        """
        if current_role.is_at_least(ELEVATED_ROLE):
            return current_role
        if self._qualifies(event):
            return ELEVATED_ROLE
        return current_role

    def apply(
        self, identity: Identity, event: PromotionEvent, now: datetime
    ) -> PromotionResult:
        """Apply the policy to an identity.

        Raises:
            InvalidRoleTransitionError: If the decision would lower the role
        """
        new_role = self.decide(identity.role, event)
        if not new_role.is_at_least(identity.role):
            raise InvalidRoleTransitionError(identity.role, new_role)

        result = PromotionResult(
            identity=identity.with_role(new_role, now), previous_role=identity.role
        )
        if result.changed:
            logfire.info(
                "Role promoted",
                identity_id=str(identity.id),
                trigger=event.trigger.value,
                previous_role=identity.role.value,
                new_role=new_role.value,
            )
        return result

    @staticmethod
    def _qualifies(event: PromotionEvent) -> bool:
        if event.trigger == PromotionTrigger.CREATIVE_UPLOAD:
            return True
        # Linked or paired
        return event.provider is not None and event.provider.is_creation_capable
