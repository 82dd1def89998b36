"""Request schemas for the HTTP API."""
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class InvoiceCreate(BaseModel):
    """Invoice metadata to persist."""

    invoiceNumber: Optional[str] = None
    carerId: Optional[int] = None
    clientId: Optional[int] = None
    dateFrom: Optional[date] = None
    dateTo: Optional[date] = None
    invoiceDate: Optional[date] = None
    fileName: Optional[str] = None
    filePath: Optional[str] = None


class InvoiceGenerate(BaseModel):
    """Parameters for generating a new invoice document."""

    invoiceNumber: Optional[str] = None
    invoiceDate: Optional[date] = None
    carerId: Optional[int] = None
    carerIds: Optional[List[int]] = None
    clientId: Optional[int] = None
    dateFrom: Optional[date] = None
    dateTo: Optional[date] = None
    utcOffsetMinutes: Optional[int] = None

    def resolved_carer_ids(self) -> List[int]:
        if self.carerIds:
            return list(self.carerIds)
        return [self.carerId] if self.carerId is not None else []


class SavedCalendarCreate(BaseModel):
    """A named calendar view to create or replace."""

    name: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    client_id: Optional[int] = None
    config: Optional[Dict[str, Any]] = None
