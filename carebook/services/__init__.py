"""Business logic services package."""
from carebook.services.auth_service import AuthService
from carebook.services.calendar_service import CalendarService
from carebook.services.shift_service import ShiftService, ShiftDetail, AggregationResult
from carebook.services.invoice_composer import InvoiceComposer, InvoiceArtifact, InvoiceMetadata
from carebook.services.invoice_service import InvoiceService, GeneratedInvoice

__all__ = [
    "AuthService",
    "CalendarService",
    "ShiftService",
    "ShiftDetail",
    "AggregationResult",
    "InvoiceComposer",
    "InvoiceArtifact",
    "InvoiceMetadata",
    "InvoiceService",
    "GeneratedInvoice",
]
