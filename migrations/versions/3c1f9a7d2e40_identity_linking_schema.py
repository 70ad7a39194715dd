"""identity_linking_schema

Create the schema for identity linking:
- Identities (durable account aggregate with role and mode)
- Provider bindings (one row per linked Google / Meta / Facebook account)
- Linking events (append-only audit of creations, links, promotions, unlinks)

Pairing codes and device login tickets live in the ephemeral code store,
not in the database.

Revision ID: 3c1f9a7d2e40
Revises:
Create Date: 2026-10-19 10:12:44.518203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1f9a7d2e40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    op.create_table(
        "identities",
        sa.Column(
            "id",
            postgresql.UUID(),
            primary_key=True,
            server_default=sa.text("uuid_generate_v4()"),
        ),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("highest_role", sa.String(20), nullable=False),
        sa.Column("mode", sa.String(20), nullable=False),
        sa.Column("primary_provider", sa.String(20), nullable=False),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
        sa.Column(
            "artist_qualified_at", postgresql.TIMESTAMP(timezone=True), nullable=True
        ),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.CheckConstraint(
            "role IN ('guest', 'user', 'artist', 'admin')", name="ck_identities_role"
        ),
        sa.CheckConstraint(
            "highest_role IN ('guest', 'user', 'artist', 'admin')",
            name="ck_identities_highest_role",
        ),
    )
    op.create_index("idx_identities_email", "identities", ["email"])

    op.create_table(
        "provider_bindings",
        sa.Column(
            "identity_id",
            postgresql.UUID(),
            sa.ForeignKey("identities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider", sa.String(20), nullable=False),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column(
            "linked_at", postgresql.TIMESTAMP(timezone=True), nullable=False
        ),
        # An external account belongs to at most one identity
        sa.UniqueConstraint("provider", "external_id", name="uq_provider_binding"),
        # An identity has at most one account per provider
        sa.UniqueConstraint("identity_id", "provider", name="uq_identity_provider"),
        sa.CheckConstraint(
            "provider IN ('google', 'meta', 'facebook')",
            name="ck_provider_bindings_provider",
        ),
    )
    op.create_index(
        "idx_provider_bindings_identity_id", "provider_bindings", ["identity_id"]
    )

    op.create_table(
        "linking_events",
        sa.Column(
            "id",
            postgresql.UUID(),
            primary_key=True,
            server_default=sa.text("uuid_generate_v4()"),
        ),
        sa.Column(
            "identity_id",
            postgresql.UUID(),
            sa.ForeignKey("identities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("provider", sa.String(20), nullable=True),
        sa.Column("external_id", sa.String(255), nullable=True),
        sa.Column("previous_role", sa.String(20), nullable=True),
        sa.Column("new_role", sa.String(20), nullable=False),
        sa.Column("linked_from_identity_id", postgresql.UUID(), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )
    op.execute(
        "CREATE INDEX idx_linking_events_identity_created "
        "ON linking_events (identity_id, created_at DESC)"
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("linking_events")
    op.drop_table("provider_bindings")
    op.drop_table("identities")
