"""
models/profile.py — Profile table definition.

One row per User, created together at sign-up. `id` is both the primary key
and the FK to users.id, so a profile identifier always matches the
authenticated identity. Descriptive only; the group and expense flows never
read it.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db


class Profile(db.Model):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    username: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    user: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="profile",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Profile id={self.id} username={self.username!r}>"
