"""Line item model for billable service codes."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime
from datetime import datetime
from carebook.database import Base


class LineItem(Base):
    """Billable service code with an hourly rate."""

    __tablename__ = "line_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(100), nullable=False, index=True)
    category = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    billed_rate = Column(Numeric(10, 2), nullable=True)
    max_rate = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<LineItem(id={self.id}, code={self.code}, rate={self.billed_rate})>"
