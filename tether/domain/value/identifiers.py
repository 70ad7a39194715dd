"""Strongly typed identifiers for Tether domain entities.

Using NewType for strong typing prevents mixing up different entity IDs
and makes the code more self-documenting.
"""

from typing import NewType
from uuid import UUID

# Core domain entity identifiers
IdentityId = NewType("IdentityId", UUID)
LinkingEventId = NewType("LinkingEventId", UUID)
