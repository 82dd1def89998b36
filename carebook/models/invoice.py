"""Invoice model for generated invoice metadata."""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, date
from carebook.database import Base


# Name of the unique constraint on invoice numbers
INVOICE_NUMBER_CONSTRAINT = "uq_invoices_invoice_number"


class Invoice(Base):
    """Invoice metadata.

    The invoice document and its total are derived from the shifts in
    the period every time they are requested; neither is stored.
    """

    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True)
    invoice_number = Column(String(100), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    carer_id = Column(Integer, ForeignKey("carers.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    date_from = Column(Date, nullable=False)
    date_to = Column(Date, nullable=False)
    invoice_date = Column(Date, nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # One invoice per number, enforced by the store
    __table_args__ = (
        UniqueConstraint('invoice_number', name=INVOICE_NUMBER_CONSTRAINT),
    )

    # Relationships
    owner = relationship("User")
    carer = relationship("Carer")
    client = relationship("Client")

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.invoice_number}, date={self.invoice_date})>"

    def validate(self) -> None:
        """Validate invoice data."""
        if not self.id:
            raise ValueError("Invoice ID is required")
        if not self.invoice_number:
            raise ValueError("Invoice number is required")
        if not isinstance(self.date_from, date) or not isinstance(self.date_to, date):
            raise ValueError("Invoice period must be date objects")
        if self.date_from > self.date_to:
            raise ValueError("Invoice period must not end before it starts")
