"""Carer model for the people delivering shifts."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from carebook.database import Base


class Carer(Base):
    """Carer model holding contact and payment details used on invoices."""

    __tablename__ = "carers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)
    phone_number = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    abn = Column(String(50), nullable=True)
    account_name = Column(String(255), nullable=True)
    bsb = Column(String(20), nullable=True)
    account_number = Column(String(50), nullable=True)
    color = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    shifts = relationship("Shift", back_populates="carer")

    def __repr__(self) -> str:
        return f"<Carer(id={self.id}, name={self.first_name} {self.last_name})>"

    def validate(self) -> None:
        """Validate carer data."""
        if not self.first_name:
            raise ValueError("First name is required")
        if not self.last_name:
            raise ValueError("Last name is required")
