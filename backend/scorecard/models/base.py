"""
Record base class shared by every scorecard table.

Rows are keyed by an opaque 15-character id and carry UTC ``created`` /
``updated`` timestamps. ``created`` doubles as the insertion-order tiebreaker
when metrics share a display order.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from scorecard.db.base import Base

ID_LENGTH = 15


def generate_id() -> str:
    return uuid.uuid4().hex[:ID_LENGTH]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Record(Base):
    __abstract__ = True

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=generate_id)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
