"""
Foods API Backend — Food SQLAlchemy Model
===========================================

What:  ORM model representing the `foods` table, one row per food document.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for
       migrations and the collection layer resolves filter/sort/select
       field names against its columns.
Who:   FoodCollection (queries), FoodService (create/update/delete/photo).

Table Design:
    - UUID primary key, exposed to clients as `id`
    - name: unique display name, source of the slug
    - slug: URL-friendly name, also the prefix of stored photo filenames
    - calories / price: numeric fields that comparison filters target
    - photo: filename under FILE_UPLOAD_PATH (`no-photo.jpg` until uploaded)
    - created_at: UTC with timezone
"""

import unicodedata
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

DEFAULT_PHOTO = "no-photo.jpg"


def slugify(value: str) -> str:
    """
    Lowercase ASCII slug: accents are stripped and every run of other
    characters collapses to a single dash ("Crème Brûlée!" → "creme-brulee").
    """
    normalized = unicodedata.normalize("NFKD", value or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    out = []
    prev_dash = False
    for ch in ascii_text:
        if ch.isalnum():
            out.append(ch)
            prev_dash = False
        elif not prev_dash:
            out.append("-")
            prev_dash = True
    return "".join(out).strip("-") or "food"


class Food(Base):
    """
    A food document.

    Lifecycle:
        1. Created from a POST body; slug derived from name
        2. Updated in place by PUT (a new name regenerates the slug)
        3. Photo filename replaced by the photo upload endpoint
        4. Deleted by DELETE (the stored photo file is left on disk)
    """

    __tablename__ = "foods"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Display name, unique across the collection",
    )

    slug: Mapped[str] = mapped_column(
        String(80),
        nullable=False,
        comment="URL-friendly form of the name",
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    category: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        default=None,
    )

    calories: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        default=None,
        comment="Energy per serving in kcal",
    )

    price: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
        default=None,
    )

    photo: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=DEFAULT_PHOTO,
        server_default=text(f"'{DEFAULT_PHOTO}'"),
        comment="Photo filename relative to FILE_UPLOAD_PATH",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this food was created (UTC)",
    )

    # name is covered by its unique constraint; category is the common equality filter
    __table_args__ = (
        Index("idx_foods_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<Food(id={self.id}, name='{self.name}')>"
