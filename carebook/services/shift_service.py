"""Shift aggregation service for invoicing."""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from carebook.config import Settings, settings as app_settings
from carebook.exceptions import InvalidDateRangeError, MissingFieldError
from carebook.record_store import RecordStoreGateway, Row, asc, eq, gte, in_, lte

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Convert a stored amount to a Decimal rounded to cents."""
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def shift_hours(time_from: Optional[datetime], time_to: Optional[datetime]) -> Decimal:
    """Length of a shift in hours, never negative."""
    if not time_from or not time_to:
        return ZERO
    seconds = Decimal(str((time_to - time_from).total_seconds()))
    return max(ZERO, seconds / Decimal(3600)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ShiftDetail:
    """A shift resolved for display on an invoice."""

    shift_id: int
    shift_date: date
    time_from: Optional[datetime]
    time_to: Optional[datetime]
    carer_id: int
    carer_name: str
    client_id: int
    line_item_code: Optional[str]
    description: str
    category: str
    hours: Decimal
    rate: Optional[Decimal]
    cost: Decimal


@dataclass(frozen=True)
class AggregationResult:
    """Ordered shift details for one invoice scope and their total."""

    shifts: List[ShiftDetail] = field(default_factory=list)
    total_cost: Decimal = ZERO


class ShiftService:
    """Service for reading and aggregating shifts."""

    def __init__(self, gateway: RecordStoreGateway, config: Optional[Settings] = None):
        """
        Initialize shift service.

        Args:
            gateway: Record store gateway for the current request
            config: Settings providing invoicing rules (defaults to global settings)
        """
        self.gateway = gateway
        config = config or app_settings
        self.excluded_categories = set(config.invoice_excluded_categories)
        self.manual_label = config.invoice_manual_label

    def get_shifts_by_date_range(
        self,
        carer_ids: Iterable[int],
        client_id: int,
        start_date: date,
        end_date: date
    ) -> List[Row]:
        """
        Get shift rows for carers and a client within a date range.

        Args:
            carer_ids: Carers whose shifts to include
            client_id: Client the shifts were delivered to
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            Shift rows ordered by date, then by shift ID
        """
        # Validate date range
        if start_date > end_date:
            raise InvalidDateRangeError(start_date, end_date)

        return self.gateway.select(
            "shifts",
            filters=[
                in_("carer_id", carer_ids),
                eq("client_id", client_id),
                gte("shift_date", start_date),
                lte("shift_date", end_date),
            ],
            order_by=[asc("shift_date"), asc("id")]
        )

    def aggregate(
        self,
        carer_ids: Iterable[int],
        client_id: int,
        date_from: date,
        date_to: date
    ) -> AggregationResult:
        """
        Aggregate shifts for an invoice scope.

        Shift costs are taken as stored. A shift without a stored cost is
        priced at its line item's billed rate times its hours; without a
        rate it counts as zero. Shifts in an excluded category are left out.

        Args:
            carer_ids: Carers to include (at least one)
            client_id: Client being invoiced
            date_from: First shift date (inclusive)
            date_to: Last shift date (inclusive)

        Returns:
            AggregationResult with shifts ordered by date then ID

        Raises:
            MissingFieldError: If a scope field is missing
            InvalidDateRangeError: If date_from is after date_to
            UpstreamStoreError: If the store cannot be read
        """
        carer_ids = sorted(set(carer_ids or []))
        if not carer_ids:
            raise MissingFieldError("carer_ids")
        if client_id is None:
            raise MissingFieldError("client_id")
        if date_from is None:
            raise MissingFieldError("date_from")
        if date_to is None:
            raise MissingFieldError("date_to")

        rows = self.get_shifts_by_date_range(carer_ids, client_id, date_from, date_to)
        rows = [row for row in rows if row.get("category") not in self.excluded_categories]

        if not rows:
            logger.info(f"No shifts for carers={carer_ids} client={client_id} {date_from}..{date_to}")
            return AggregationResult()

        carers = {
            carer["id"]: carer
            for carer in self.gateway.select("carers", [in_("id", carer_ids)])
        }

        line_item_ids = {row["line_item_id"] for row in rows if row["line_item_id"] is not None}
        line_items: Dict[int, Row] = {}
        if line_item_ids:
            line_items = {
                item["id"]: item
                for item in self.gateway.select("line_items", [in_("id", line_item_ids)])
            }

        details = [self._resolve(row, carers, line_items) for row in rows]
        total = sum((detail.cost for detail in details), ZERO)

        logger.info(
            f"Aggregated {len(details)} shifts for carers={carer_ids} client={client_id} "
            f"{date_from}..{date_to}: total={total}"
        )
        return AggregationResult(shifts=details, total_cost=total)

    def _resolve(self, row: Row, carers: Dict[int, Row], line_items: Dict[int, Row]) -> ShiftDetail:
        """Resolve display fields and cost for one shift row."""
        hours = shift_hours(row.get("time_from"), row.get("time_to"))

        line_item = None
        if row.get("line_item_id") is not None:
            line_item = line_items.get(row["line_item_id"])

        if line_item:
            code = line_item.get("code")
            description = line_item.get("description") or f"{line_item.get('category')} - {code}"
            category = row.get("category") or line_item.get("category") or self.manual_label
            rate = to_money(line_item["billed_rate"]) if line_item.get("billed_rate") is not None else None
        else:
            code = None
            description = self.manual_label
            category = self.manual_label
            rate = None

        if row.get("cost") is not None:
            cost = to_money(row["cost"])
        elif rate is not None:
            cost = to_money(rate * hours)
        else:
            cost = ZERO

        carer = carers.get(row["carer_id"])
        carer_name = f"{carer['first_name']} {carer['last_name']}" if carer else ""

        return ShiftDetail(
            shift_id=row["id"],
            shift_date=row["shift_date"],
            time_from=row.get("time_from"),
            time_to=row.get("time_to"),
            carer_id=row["carer_id"],
            carer_name=carer_name,
            client_id=row["client_id"],
            line_item_code=code,
            description=description,
            category=category,
            hours=hours,
            rate=rate,
            cost=cost,
        )
