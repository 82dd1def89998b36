"""Saved calendar model for named calendar views."""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, JSON, UniqueConstraint
from datetime import datetime
from carebook.database import Base


class SavedCalendar(Base):
    """A user's named calendar view with its opaque display configuration."""

    __tablename__ = "saved_calendars"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    date_from = Column(Date, nullable=True)
    date_to = Column(Date, nullable=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True)
    config = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Upsert key: one calendar per name per user
    __table_args__ = (
        UniqueConstraint('user_id', 'name', name='uq_saved_calendars_user_name'),
    )

    def __repr__(self) -> str:
        return f"<SavedCalendar(id={self.id}, name={self.name})>"
