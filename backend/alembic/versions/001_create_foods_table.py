"""Create foods table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `foods` table holding one row per food document.
Rollback: downgrade() drops the table (all foods are lost).
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
    """Create the foods table, its unique name constraint and category index."""
    op.create_table(
        "foods",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False, comment="Unique identifier"),
        sa.Column(
            "name",
            sa.String(50),
            nullable=False,
            comment="Display name, unique across the collection",
        ),
        sa.Column("slug", sa.String(80), nullable=False, comment="URL-friendly form of the name"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("calories", sa.Integer(), nullable=True, comment="Energy per serving in kcal"),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column(
            "photo",
            sa.String(255),
            nullable=False,
            server_default=sa.text("'no-photo.jpg'"),
            comment="Photo filename relative to FILE_UPLOAD_PATH",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this food was created (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_index("idx_foods_category", "foods", ["category"])


def downgrade() -> None:
    op.drop_index("idx_foods_category", table_name="foods")
    op.drop_table("foods")
