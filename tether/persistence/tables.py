"""SQLAlchemy table definitions for Tether.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# IDENTITIES TABLE
# ============================================================================
identities_table = Table(
    "identities",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("display_name", String(255), nullable=False),
    Column("email", String(255), nullable=True),  # Lower-cased
    Column("role", String(20), nullable=False),  # guest, user, artist, admin
    Column("highest_role", String(20), nullable=False),
    Column("mode", String(20), nullable=False),  # ar, artist
    Column("primary_provider", String(20), nullable=False),
    Column("profile_image_url", Text, nullable=True),
    Column("artist_qualified_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_identities_email", identities_table.c.email)

# ============================================================================
# PROVIDER BINDINGS TABLE
# ============================================================================
provider_bindings_table = Table(
    "provider_bindings",
    metadata,
    Column(
        "identity_id",
        UUID,
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("provider", String(20), nullable=False),  # google, meta, facebook
    Column("external_id", String(255), nullable=False),
    Column("linked_at", TIMESTAMP(timezone=True), nullable=False),
    UniqueConstraint("provider", "external_id", name="uq_provider_binding"),
    UniqueConstraint("identity_id", "provider", name="uq_identity_provider"),
)

Index("idx_provider_bindings_identity_id", provider_bindings_table.c.identity_id)

# ============================================================================
# LINKING EVENTS TABLE (append-only audit)
# ============================================================================
linking_events_table = Table(
    "linking_events",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column(
        "identity_id",
        UUID,
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("action", String(20), nullable=False),
    Column("provider", String(20), nullable=True),
    Column("external_id", String(255), nullable=True),
    Column("previous_role", String(20), nullable=True),
    Column("new_role", String(20), nullable=False),
    Column("linked_from_identity_id", UUID, nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index(
    "idx_linking_events_identity_created",
    linking_events_table.c.identity_id,
    linking_events_table.c.created_at.desc(),
)
