"""Shift model for scheduled care work."""
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime, date
from decimal import Decimal
from carebook.database import Base


# Categories a shift may carry when it is costed without a line item
MANUAL_CATEGORIES = ("HIREUP",)


class Shift(Base):
    """Shift model representing a carer's work period for a client."""

    __tablename__ = "shifts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shift_date = Column(Date, nullable=False, index=True)
    time_from = Column(DateTime, nullable=False)
    time_to = Column(DateTime, nullable=False)
    carer_id = Column(Integer, ForeignKey("carers.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    line_item_id = Column(Integer, ForeignKey("line_items.id"), nullable=True)
    category = Column(String(255), nullable=True, index=True)
    cost = Column(Numeric(10, 2), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    carer = relationship("Carer", back_populates="shifts")
    client = relationship("Client", back_populates="shifts")
    line_item = relationship("LineItem")

    def __repr__(self) -> str:
        return (
            f"<Shift(id={self.id}, date={self.shift_date}, carer_id={self.carer_id}, "
            f"client_id={self.client_id}, cost={self.cost})>"
        )

    def validate(self) -> None:
        """Validate shift data."""
        if not self.shift_date:
            raise ValueError("Shift date is required")
        if not isinstance(self.shift_date, date):
            raise ValueError("Shift date must be a date object")
        if not self.carer_id:
            raise ValueError("Carer ID is required")
        if not self.client_id:
            raise ValueError("Client ID is required")
        if self.time_from and self.time_to and self.time_to < self.time_from:
            raise ValueError("Shift cannot end before it starts")
        if self.cost is not None:
            if Decimal(str(self.cost)) < 0:
                raise ValueError("Shift cost cannot be negative")
            if self.line_item_id is None and Decimal(str(self.cost)) > 0:
                if self.category not in MANUAL_CATEGORIES:
                    raise ValueError(
                        f"Shifts costed without a line item must use a manual category "
                        f"({', '.join(MANUAL_CATEGORIES)})"
                    )
