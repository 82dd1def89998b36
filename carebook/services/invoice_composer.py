"""Invoice document composition.

Turns aggregated shifts and invoice metadata into a PDF. Composition is a
pure function of its inputs: the same shifts and metadata always render
to the same bytes.
"""
import base64
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from dateutil import tz
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from carebook.config import Settings, settings as app_settings
from carebook.record_store import Row
from carebook.services.shift_service import AggregationResult, ShiftDetail

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

# Fixed names so output does not depend on the process locale
DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

LINE_HEADERS = ["Day", "Date", "From", "To", "Description", "Code", "Hours", "Unit Price", "Amount"]


@dataclass(frozen=True)
class CarerDetails:
    """Carer details printed in the invoice header."""

    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    abn: str = ""
    account_name: str = ""
    bsb: str = ""
    account_number: str = ""

    @classmethod
    def from_row(cls, row: Optional[Row]) -> "CarerDetails":
        if not row:
            return cls()
        return cls(
            name=f"{row.get('first_name') or ''} {row.get('last_name') or ''}".strip(),
            address=row.get("address") or "",
            phone=row.get("phone_number") or "",
            email=row.get("email") or "",
            abn=row.get("abn") or "",
            account_name=row.get("account_name") or "",
            bsb=row.get("bsb") or "",
            account_number=row.get("account_number") or "",
        )


@dataclass(frozen=True)
class ClientDetails:
    """Client details printed in the invoice header."""

    name: str = ""
    ndis_number: str = ""
    address_line_1: str = ""
    address_line_2: str = ""

    @classmethod
    def from_row(cls, row: Optional[Row]) -> "ClientDetails":
        if not row:
            return cls()
        address_lines = (row.get("address") or "").split("\n")
        return cls(
            name=f"{row.get('first_name') or ''} {row.get('last_name') or ''}".strip(),
            ndis_number=str(row["ndis_number"]) if row.get("ndis_number") else "",
            address_line_1=address_lines[0],
            address_line_2=address_lines[1] if len(address_lines) > 1 else "",
        )


@dataclass(frozen=True)
class InvoiceMetadata:
    """Everything the document needs besides the shifts themselves."""

    invoice_number: str
    invoice_date: date
    date_from: date
    date_to: date
    carer: CarerDetails = field(default_factory=CarerDetails)
    client: ClientDetails = field(default_factory=ClientDetails)
    utc_offset_minutes: Optional[int] = None


@dataclass(frozen=True)
class InvoiceArtifact:
    """A generated invoice document held in memory."""

    name: str
    payload: bytes
    mime_type: str = PDF_MIME_TYPE

    def encoded(self) -> str:
        """Payload as base64 text for JSON transport."""
        return base64.b64encode(self.payload).decode("ascii")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "data": self.encoded(), "mimeType": self.mime_type}


@dataclass(frozen=True)
class InvoiceLine:
    """One formatted row of the invoice table."""

    day: str
    date: str
    time_from: str
    time_to: str
    description: str
    code: str
    hours: str
    unit_price: str
    amount: str
    amount_value: Decimal

    def cells(self) -> List[str]:
        return [
            self.day, self.date, self.time_from, self.time_to, self.description,
            self.code, self.hours, self.unit_price, self.amount,
        ]


@dataclass(frozen=True)
class InvoiceLayout:
    """Formatted document content, independent of the output format."""

    title: str
    header: List[Tuple[str, str]]
    lines: List[InvoiceLine]
    total: str
    total_value: Decimal
    empty_message: Optional[str] = None


def format_amount(value: Optional[Decimal]) -> str:
    return "" if value is None else f"{value:.2f}"


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_time(value: Optional[datetime], utc_offset_minutes: int) -> str:
    """Format a stored UTC timestamp as local ``hh:mm AM/PM``."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz.UTC)
    local = value.astimezone(tz.tzoffset(None, utc_offset_minutes * 60))
    hours12 = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hours12:02d}:{local.minute:02d} {suffix}"


class InvoiceComposer:
    """Renders invoice documents. Never touches the store."""

    def __init__(self, config: Optional[Settings] = None):
        config = config or app_settings
        self.due_days = config.invoice_due_days
        self.default_utc_offset = config.invoice_utc_offset_minutes

    @staticmethod
    def file_name(invoice_number: str, invoice_date: date) -> str:
        return f"Invoice_{invoice_number}_{invoice_date.isoformat()}.pdf"

    def build_layout(self, aggregation: AggregationResult, metadata: InvoiceMetadata) -> InvoiceLayout:
        """
        Format the invoice content.

        Args:
            aggregation: Ordered shifts and their total
            metadata: Invoice number, dates, carer and client details

        Returns:
            InvoiceLayout with one line per shift and the grand total
        """
        offset = metadata.utc_offset_minutes
        if offset is None:
            offset = self.default_utc_offset

        due_date = metadata.invoice_date + timedelta(days=self.due_days)
        period = f"{format_date(metadata.date_from)} - {format_date(metadata.date_to)}"
        carer = metadata.carer
        client = metadata.client

        header = [
            ("From", carer.name),
            ("Address", carer.address),
            ("Mobile", carer.phone),
            ("Email", carer.email),
            ("ABN", carer.abn),
            ("Invoice Number", metadata.invoice_number),
            ("Invoice Date", format_date(metadata.invoice_date)),
            ("Due Date", format_date(due_date)),
            ("Period", period),
            ("Bill To", client.name),
            ("NDIS Number", client.ndis_number),
            ("Client Address", client.address_line_1),
            ("", client.address_line_2),
            ("Account Name", carer.account_name),
            ("BSB", carer.bsb),
            ("Account Number", carer.account_number),
        ]

        lines = [self._line(shift, offset) for shift in aggregation.shifts]
        total_value = sum((line.amount_value for line in lines), Decimal("0.00"))

        return InvoiceLayout(
            title=f"Tax Invoice {metadata.invoice_number}",
            header=header,
            lines=lines,
            total=format_amount(total_value),
            total_value=total_value,
            empty_message=None if lines else f"No shifts found {period}",
        )

    @staticmethod
    def _line(shift: ShiftDetail, utc_offset_minutes: int) -> InvoiceLine:
        return InvoiceLine(
            day=DAY_NAMES[shift.shift_date.weekday()],
            date=format_date(shift.shift_date),
            time_from=format_time(shift.time_from, utc_offset_minutes),
            time_to=format_time(shift.time_to, utc_offset_minutes),
            description=shift.description,
            code=shift.line_item_code or "",
            hours=format_amount(shift.hours) if shift.hours > 0 else "",
            unit_price=format_amount(shift.rate),
            amount=format_amount(shift.cost),
            amount_value=shift.cost,
        )

    def render_pdf(self, layout: InvoiceLayout) -> bytes:
        """Render a layout to PDF bytes."""
        buffer = io.BytesIO()
        margin = 0.5 * inch

        # Fixed creation date and document ID so output depends only on content
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4),
            rightMargin=margin,
            leftMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
            title=layout.title,
            creator="carebook",
            invariant=1,
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            fontSize=18,
            spaceAfter=12,
        )

        story = [Paragraph("TAX INVOICE", title_style)]

        header_table = Table(
            [[label, value] for label, value in layout.header],
            colWidths=[1.5 * inch, 4.5 * inch],
            hAlign="LEFT",
        )
        header_table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 9),
                    ("FONT", (1, 0), (1, -1), "Helvetica", 9),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
                    ("TOPPADDING", (0, 0), (-1, -1), 2),
                ]
            )
        )
        story.append(header_table)
        story.append(Spacer(1, 0.25 * inch))

        if layout.lines:
            body = [line.cells() for line in layout.lines]
        else:
            body = [["", "", "", "", layout.empty_message or "", "", "", "", ""]]

        total_row = ["", "", "", "", "", "", "", "Total:", layout.total]
        data = [LINE_HEADERS] + body + [total_row]

        lines_table = Table(
            data,
            colWidths=[36, 62, 58, 58, 230, 90, 45, 70, 70],
            repeatRows=1,
        )
        last = len(data) - 1
        lines_table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 9),
                    ("FONT", (0, 1), (-1, last - 1), "Helvetica", 9),
                    ("FONT", (0, last), (-1, last), "Helvetica-Bold", 10),
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f1f5f9")),
                    ("GRID", (0, 0), (-1, last - 1), 0.5, colors.black),
                    ("BOX", (-2, last), (-1, last), 1, colors.black),
                    ("ALIGN", (0, 0), (3, -1), "CENTER"),
                    ("ALIGN", (5, 0), (-1, -1), "CENTER"),
                    ("ALIGN", (-2, last), (-2, last), "RIGHT"),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        story.append(lines_table)

        doc.build(story)
        return buffer.getvalue()

    def compose(self, aggregation: AggregationResult, metadata: InvoiceMetadata) -> InvoiceArtifact:
        """
        Compose the invoice document.

        Args:
            aggregation: Ordered shifts and their total
            metadata: Invoice number, dates, carer and client details

        Returns:
            InvoiceArtifact named ``Invoice_<number>_<date>.pdf``
        """
        layout = self.build_layout(aggregation, metadata)
        payload = self.render_pdf(layout)
        name = self.file_name(metadata.invoice_number, metadata.invoice_date)

        logger.info(f"Composed {name}: {len(layout.lines)} lines, total {layout.total}")
        return InvoiceArtifact(name=name, payload=payload)
