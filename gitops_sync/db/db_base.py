"""
Base column helpers shared by the SQLAlchemy models.
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer


def utc_now():
    """Return current UTC time with timezone info attached."""
    return datetime.now(UTC)


class AuditMixin:
    """Who created/updated a row and when."""

    created_on = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    created_by = Column(Integer, nullable=True)
    updated_on = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
    updated_by = Column(Integer, nullable=True)
