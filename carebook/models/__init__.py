"""Database models package."""
from carebook.models.user import User, UserSession
from carebook.models.carer import Carer
from carebook.models.client import Client
from carebook.models.line_item import LineItem
from carebook.models.shift import Shift, MANUAL_CATEGORIES
from carebook.models.invoice import Invoice, INVOICE_NUMBER_CONSTRAINT
from carebook.models.saved_calendar import SavedCalendar

__all__ = [
    "User",
    "UserSession",
    "Carer",
    "Client",
    "LineItem",
    "Shift",
    "MANUAL_CATEGORIES",
    "Invoice",
    "INVOICE_NUMBER_CONSTRAINT",
    "SavedCalendar",
]
