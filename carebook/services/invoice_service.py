"""Invoice record management: save, list, delete, generate and download."""
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlencode

from carebook.config import Settings, settings as app_settings
from carebook.exceptions import (
    DuplicateInvoiceNumberError,
    InvalidDateRangeError,
    MissingFieldError,
    NotFoundError,
    RegenerationError,
    UpstreamStoreError,
    ValidationError,
)
from carebook.models.invoice import INVOICE_NUMBER_CONSTRAINT
from carebook.record_store import RecordStoreGateway, Row, desc, eq, in_
from carebook.services.invoice_composer import (
    CarerDetails,
    ClientDetails,
    InvoiceArtifact,
    InvoiceComposer,
    InvoiceMetadata,
)
from carebook.services.shift_service import AggregationResult, ShiftService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedInvoice:
    """Result of generating a new invoice."""

    record: Row
    artifact: InvoiceArtifact
    total_cost: Decimal


def download_path(invoice_number: str, invoice_date: date) -> str:
    """Path the invoice can be regenerated from."""
    query = urlencode({"number": invoice_number, "date": invoice_date.isoformat()})
    return f"/invoices/download?{query}"


def is_duplicate_number_violation(error: UpstreamStoreError) -> bool:
    """Return True if the store rejected a write on the invoice number constraint.

    MySQL reports the constraint name; SQLite reports the constrained column.
    """
    if not error.constraint_violation:
        return False
    return (
        INVOICE_NUMBER_CONSTRAINT in error.message
        or "UNIQUE constraint failed: invoices.invoice_number" in error.message
    )


class InvoiceService:
    """Service for invoice records.

    Invoice totals and documents are never stored. Both are recomputed
    from the current shifts whenever an invoice is listed or downloaded.
    """

    def __init__(
        self,
        gateway: RecordStoreGateway,
        config: Optional[Settings] = None,
        shift_service: Optional[ShiftService] = None,
        composer: Optional[InvoiceComposer] = None
    ):
        """
        Initialize invoice service.

        Args:
            gateway: Record store gateway for the current request
            config: Settings providing invoicing rules (defaults to global settings)
            shift_service: Aggregator to use (built from the gateway if omitted)
            composer: Document composer to use (built from config if omitted)
        """
        self.gateway = gateway
        config = config or app_settings
        self.shift_service = shift_service or ShiftService(gateway, config)
        self.composer = composer or InvoiceComposer(config)

    def save_invoice(
        self,
        owner_id: str,
        invoice_number: Optional[str],
        carer_id: Optional[int],
        client_id: Optional[int],
        date_from: Optional[date],
        date_to: Optional[date],
        invoice_date: Optional[date],
        file_name: Optional[str] = None,
        file_path: Optional[str] = None
    ) -> Row:
        """
        Persist invoice metadata.

        Returns:
            The stored invoice row

        Raises:
            MissingFieldError: If a required field is missing
            InvalidDateRangeError: If the period ends before it starts
            DuplicateInvoiceNumberError: If the invoice number is already used
            UpstreamStoreError: If the store rejects or fails the write
        """
        invoice_number = (invoice_number or "").strip()
        if not invoice_number:
            raise MissingFieldError("invoice_number")
        if carer_id is None:
            raise MissingFieldError("carer_id")
        if client_id is None:
            raise MissingFieldError("client_id")
        if date_from is None:
            raise MissingFieldError("date_from")
        if date_to is None:
            raise MissingFieldError("date_to")
        if invoice_date is None:
            raise MissingFieldError("invoice_date")
        if date_from > date_to:
            raise InvalidDateRangeError(date_from, date_to)

        existing = self.gateway.select_one("invoices", [eq("invoice_number", invoice_number)])
        if existing:
            logger.error(f"Duplicate invoice number: {invoice_number}")
            raise DuplicateInvoiceNumberError(invoice_number)

        row = {
            "id": str(uuid.uuid4()),
            "invoice_number": invoice_number,
            "user_id": owner_id,
            "carer_id": carer_id,
            "client_id": client_id,
            "date_from": date_from,
            "date_to": date_to,
            "invoice_date": invoice_date,
            "file_name": file_name or InvoiceComposer.file_name(invoice_number, invoice_date),
            "file_path": file_path or download_path(invoice_number, invoice_date),
            "created_at": datetime.utcnow(),
        }

        try:
            record = self.gateway.insert("invoices", row)
        except UpstreamStoreError as e:
            # Concurrent save with the same number lost the race at the store
            if is_duplicate_number_violation(e):
                raise DuplicateInvoiceNumberError(invoice_number) from e
            raise

        logger.info(f"Invoice saved: {invoice_number} (ID: {record['id']})")
        return record

    def list_invoices(self, owner_id: str) -> List[Row]:
        """
        List an owner's invoices, newest first, with live totals.

        Returns:
            Invoice rows extended with ``total_amount``, ``carer_name`` and ``client_name``
        """
        invoices = self.gateway.select(
            "invoices",
            filters=[eq("user_id", owner_id)],
            order_by=[desc("created_at")]
        )
        if not invoices:
            return []

        carers = {
            row["id"]: row
            for row in self.gateway.select("carers", [in_("id", {inv["carer_id"] for inv in invoices})])
        }
        clients = {
            row["id"]: row
            for row in self.gateway.select("clients", [in_("id", {inv["client_id"] for inv in invoices})])
        }

        result = []
        for invoice in invoices:
            aggregation = self.shift_service.aggregate(
                [invoice["carer_id"]],
                invoice["client_id"],
                invoice["date_from"],
                invoice["date_to"]
            )
            result.append({
                **invoice,
                "total_amount": aggregation.total_cost,
                "carer_name": CarerDetails.from_row(carers.get(invoice["carer_id"])).name,
                "client_name": ClientDetails.from_row(clients.get(invoice["client_id"])).name,
            })

        logger.info(f"Listed {len(result)} invoices for owner {owner_id}")
        return result

    def delete_invoice(self, invoice_id: str, owner_id: str) -> Row:
        """
        Delete one of the owner's invoices.

        Returns:
            The deleted invoice row

        Raises:
            MissingFieldError: If no ID was given
            NotFoundError: If the owner has no invoice with that ID
        """
        if not invoice_id:
            raise MissingFieldError("id")

        deleted = self.gateway.delete("invoices", [eq("id", invoice_id), eq("user_id", owner_id)])
        if not deleted:
            raise NotFoundError("invoice", invoice_id)

        logger.info(f"Invoice deleted: {deleted[0]['invoice_number']} (ID: {invoice_id})")
        return deleted[0]

    def generate_invoice(
        self,
        owner_id: str,
        invoice_number: Optional[str],
        carer_ids: Iterable[int],
        client_id: Optional[int],
        invoice_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        utc_offset_minutes: Optional[int] = None
    ) -> GeneratedInvoice:
        """
        Aggregate shifts, compose the document and save the invoice record.

        The invoice date defaults to today and the period defaults to the
        invoice date.

        Raises:
            MissingFieldError: If the number, carer or client is missing
            ValidationError: If more than one carer is given
            NotFoundError: If the carer or client does not exist
            DuplicateInvoiceNumberError: If the invoice number is already used
        """
        invoice_number = (invoice_number or "").strip()
        carer_ids = sorted(set(carer_ids or []))
        if not carer_ids:
            raise MissingFieldError("carer_id")
        if len(carer_ids) > 1:
            raise ValidationError(
                message="Invoices are issued for one carer at a time.",
                error_code="MULTIPLE_CARERS",
                details={"carer_ids": carer_ids}
            )
        if not invoice_number:
            raise MissingFieldError("invoice_number")
        if client_id is None:
            raise MissingFieldError("client_id")

        invoice_date = invoice_date or date.today()
        date_from = date_from or invoice_date
        date_to = date_to or invoice_date
        if date_from > date_to:
            raise InvalidDateRangeError(date_from, date_to)

        if self.gateway.select_one("invoices", [eq("invoice_number", invoice_number)]):
            raise DuplicateInvoiceNumberError(invoice_number)

        aggregation, artifact = self._render(
            carer_ids[0], client_id, date_from, date_to,
            invoice_number, invoice_date, utc_offset_minutes
        )

        record = self.save_invoice(
            owner_id=owner_id,
            invoice_number=invoice_number,
            carer_id=carer_ids[0],
            client_id=client_id,
            date_from=date_from,
            date_to=date_to,
            invoice_date=invoice_date,
            file_name=artifact.name,
            file_path=download_path(invoice_number, invoice_date)
        )
        return GeneratedInvoice(record=record, artifact=artifact, total_cost=aggregation.total_cost)

    def download_invoice(
        self,
        invoice_number: str,
        invoice_date: date,
        owner_id: Optional[str] = None
    ) -> InvoiceArtifact:
        """
        Regenerate an invoice document from its stored parameters.

        Raises:
            MissingFieldError: If the number or date is missing
            NotFoundError: If no invoice matches
            RegenerationError: If the document cannot be rebuilt
        """
        if not invoice_number:
            raise MissingFieldError("invoice_number")
        if invoice_date is None:
            raise MissingFieldError("invoice_date")

        filters = [eq("invoice_number", invoice_number), eq("invoice_date", invoice_date)]
        if owner_id is not None:
            filters.append(eq("user_id", owner_id))

        invoice = self.gateway.select_one("invoices", filters)
        if not invoice:
            raise NotFoundError("invoice", f"{invoice_number} ({invoice_date.isoformat()})")

        try:
            _, artifact = self._render(
                invoice["carer_id"],
                invoice["client_id"],
                invoice["date_from"],
                invoice["date_to"],
                invoice["invoice_number"],
                invoice["invoice_date"],
                None
            )
        except Exception as e:
            logger.exception(f"Failed to regenerate invoice {invoice_number}: {e}")
            raise RegenerationError(invoice_number) from e

        return artifact

    def _render(
        self,
        carer_id: int,
        client_id: int,
        date_from: date,
        date_to: date,
        invoice_number: str,
        invoice_date: date,
        utc_offset_minutes: Optional[int]
    ) -> Tuple[AggregationResult, InvoiceArtifact]:
        """Aggregate the invoice scope and compose its document."""
        carer = self.gateway.select_one("carers", [eq("id", carer_id)])
        if not carer:
            raise NotFoundError("carer", carer_id)
        client = self.gateway.select_one("clients", [eq("id", client_id)])
        if not client:
            raise NotFoundError("client", client_id)

        aggregation = self.shift_service.aggregate([carer_id], client_id, date_from, date_to)
        metadata = InvoiceMetadata(
            invoice_number=invoice_number,
            invoice_date=invoice_date,
            date_from=date_from,
            date_to=date_to,
            carer=CarerDetails.from_row(carer),
            client=ClientDetails.from_row(client),
            utc_offset_minutes=utc_offset_minutes,
        )
        return aggregation, self.composer.compose(aggregation, metadata)
