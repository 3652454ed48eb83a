"""
SQLAlchemy models for FRED Relay.

Observations are stored one row per (series, day). The embedding columns
are a write-through cache filled in by the vector upsert job.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import JSON, Date, DateTime, Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Observation(Base):
    """A single FRED observation."""

    __tablename__ = "observations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    series_id: Mapped[str] = mapped_column(String(64), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)

    # Cached embedding (list of floats) and the key it was generated for
    embedding: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    embedding_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("series_id", "date", name="uq_observation_series_date"),
        Index("idx_observation_series", "series_id"),
    )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses (embedding omitted)."""
        return {
            "id": self.id,
            "seriesId": self.series_id,
            "date": self.date.isoformat() if self.date else None,
            "value": self.value,
            "hasEmbedding": bool(self.embedding),
        }

    def __repr__(self) -> str:
        return f"<Observation {self.series_id} {self.date} {self.value}>"
