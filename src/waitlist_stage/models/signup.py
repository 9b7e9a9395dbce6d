# src/waitlist_stage/models/signup.py
"""SQLAlchemy model for waitlist signups."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from waitlist_stage.db.session import Base
from waitlist_stage.db.time import utcnow


class Signup(Base):
    """A registered waitlist email address.

    Rows are append-only. The email is stored exactly as submitted and the
    unique constraint is case-sensitive.
    """

    __tablename__ = "signups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
