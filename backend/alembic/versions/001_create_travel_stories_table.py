"""Create travel_stories table

Revision ID: 001
Revises: None
Create Date: 2024-06-10 00:00:00.000000+00:00

What:  Creates the `travel_stories` table and its per-user indexes.
Rollback: downgrade() drops the table (destructive, all stories lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Column rationale is documented in traveltales/models/travel_story.py."""
    op.create_table(
        "travel_stories",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False, comment="Opaque story identifier"),
        sa.Column(
            "user_id",
            sa.String(255),
            nullable=False,
            comment="Owning user identifier (from the access token)",
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("story", sa.Text(), nullable=False),
        sa.Column(
            "visited_location",
            sa.Text(),
            nullable=False,
            comment="Free-form list of places, e.g. 'Venice, Italy'",
        ),
        sa.Column(
            "image_url",
            sa.Text(),
            nullable=False,
            comment="Absolute URL to an uploaded image or the placeholder",
        ),
        sa.Column(
            "visited_date",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When the trip took place (UTC)",
        ),
        sa.Column("is_favorite", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Every query filters on user_id; listing also sorts on is_favorite
    op.create_index("idx_travel_stories_user_id", "travel_stories", ["user_id"])
    op.create_index(
        "idx_travel_stories_user_favorite",
        "travel_stories",
        ["user_id", "is_favorite"],
    )


def downgrade() -> None:
    op.drop_index("idx_travel_stories_user_favorite", table_name="travel_stories")
    op.drop_index("idx_travel_stories_user_id", table_name="travel_stories")
    op.drop_table("travel_stories")
