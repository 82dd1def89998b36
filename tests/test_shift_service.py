"""Unit tests for shift aggregation."""
import pytest
from datetime import date, datetime, time
from decimal import Decimal
from unittest.mock import patch
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from carebook.config import Settings
from carebook.exceptions import InvalidDateRangeError, MissingFieldError, UpstreamStoreError
from carebook.record_store import RecordStoreGateway
from carebook.services.shift_service import ShiftService, shift_hours, to_money
from tests.conftest import add_carer, add_client, add_line_item, add_shift


class TestShiftService:
    """Test cases for ShiftService.aggregate."""

    def test_shifts_ordered_by_date_with_total(self, test_db: Session, gateway: RecordStoreGateway):
        """Test aggregating a carer's shifts for a client over a period."""
        add_carer(test_db, 4)
        add_client(test_db, 1)
        item = add_line_item(test_db)
        add_shift(test_db, date(2025, 1, 5), 4, 1, cost="100", line_item_id=item.id)
        add_shift(test_db, date(2025, 1, 3), 4, 1, cost="50", line_item_id=item.id)

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert [s.cost for s in result.shifts] == [Decimal("50.00"), Decimal("100.00")]
        assert [s.shift_date for s in result.shifts] == [date(2025, 1, 3), date(2025, 1, 5)]
        assert result.total_cost == Decimal("150.00")
        assert result.shifts[0].carer_name == "Alex Nguyen"
        assert result.shifts[0].line_item_code == "01_011_0107_1_1"
        assert result.shifts[0].description == "Self-Care Activities - Weekday Daytime"

    def test_empty_range_is_zero_total(self, test_db: Session, gateway: RecordStoreGateway):
        add_carer(test_db, 4)
        add_client(test_db, 1)
        add_shift(test_db, date(2025, 2, 1), 4, 1, cost="100")

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 31))

        assert result.shifts == []
        assert result.total_cost == Decimal("0.00")

    def test_range_bounds_are_inclusive(self, test_db: Session, gateway: RecordStoreGateway):
        add_carer(test_db, 4)
        add_client(test_db, 1)
        item = add_line_item(test_db)
        add_shift(test_db, date(2025, 1, 1), 4, 1, cost="10", line_item_id=item.id)
        add_shift(test_db, date(2025, 1, 10), 4, 1, cost="20", line_item_id=item.id)
        add_shift(test_db, date(2025, 1, 11), 4, 1, cost="40", line_item_id=item.id)

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert result.total_cost == Decimal("30.00")

    def test_scope_excludes_other_carers_and_clients(self, test_db: Session, gateway: RecordStoreGateway):
        add_carer(test_db, 4)
        add_carer(test_db, 5, first_name="Sam")
        add_client(test_db, 1)
        add_client(test_db, 2, first_name="Robin")
        item = add_line_item(test_db)
        add_shift(test_db, date(2025, 1, 3), 4, 1, cost="10", line_item_id=item.id)
        add_shift(test_db, date(2025, 1, 3), 5, 1, cost="20", line_item_id=item.id)
        add_shift(test_db, date(2025, 1, 3), 4, 2, cost="40", line_item_id=item.id)

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert [s.cost for s in result.shifts] == [Decimal("10.00")]

    def test_same_day_shifts_ordered_by_id(self, test_db: Session, gateway: RecordStoreGateway):
        add_carer(test_db, 4)
        add_client(test_db, 1)
        item = add_line_item(test_db)
        first = add_shift(test_db, date(2025, 1, 3), 4, 1, cost="30", line_item_id=item.id, start=time(14, 0), end=time(16, 0))
        second = add_shift(test_db, date(2025, 1, 3), 4, 1, cost="20", line_item_id=item.id)

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 3), date(2025, 1, 3))

        assert [s.shift_id for s in result.shifts] == [first.id, second.id]

    def test_missing_line_item_uses_manual_label(self, test_db: Session, gateway: RecordStoreGateway):
        """Test that a shift without a line item is shown as manual."""
        add_carer(test_db, 4)
        add_client(test_db, 1)
        add_shift(test_db, date(2025, 1, 3), 4, 1)

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        shift = result.shifts[0]
        assert shift.description == "Manual"
        assert shift.category == "Manual"
        assert shift.line_item_code is None
        assert shift.cost == Decimal("0.00")

    def test_stored_cost_is_not_recomputed(self, test_db: Session, gateway: RecordStoreGateway):
        add_carer(test_db, 4)
        add_client(test_db, 1)
        item = add_line_item(test_db, billed_rate="50.00")
        add_shift(test_db, date(2025, 1, 3), 4, 1, cost="12.34", line_item_id=item.id)

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert result.shifts[0].cost == Decimal("12.34")
        assert result.shifts[0].rate == Decimal("50.00")

    def test_missing_cost_priced_from_rate_and_hours(self, test_db: Session, gateway: RecordStoreGateway):
        add_carer(test_db, 4)
        add_client(test_db, 1)
        item = add_line_item(test_db, billed_rate="50.00")
        add_shift(test_db, date(2025, 1, 3), 4, 1, line_item_id=item.id, start=time(9, 0), end=time(12, 30))

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert result.shifts[0].hours == Decimal("3.50")
        assert result.shifts[0].cost == Decimal("175.00")

    def test_missing_cost_without_rate_is_zero(self, test_db: Session, gateway: RecordStoreGateway):
        add_carer(test_db, 4)
        add_client(test_db, 1)
        item = add_line_item(test_db, billed_rate=None)
        add_shift(test_db, date(2025, 1, 3), 4, 1, line_item_id=item.id)

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert result.shifts[0].cost == Decimal("0.00")
        assert result.total_cost == Decimal("0.00")

    def test_hireup_shifts_excluded_when_configured(self, test_db: Session, gateway: RecordStoreGateway):
        """Test that HIREUP shifts can be kept off invoices by configuration."""
        add_carer(test_db, 4)
        add_client(test_db, 1)
        item = add_line_item(test_db)
        add_shift(test_db, date(2025, 1, 3), 4, 1, cost="50", line_item_id=item.id)
        add_shift(test_db, date(2025, 1, 4), 4, 1, cost="80", category="HIREUP")

        config = Settings(invoice_excluded_categories=["HIREUP"])
        result = ShiftService(gateway, config).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert len(result.shifts) == 1
        assert result.total_cost == Decimal("50.00")

    def test_manual_hireup_shifts_invoiced_by_default(self, test_db: Session, gateway: RecordStoreGateway):
        """Test that valid manual shifts are aggregated under the manual label."""
        add_carer(test_db, 4)
        add_client(test_db, 1)
        first = add_shift(test_db, date(2025, 1, 5), 4, 1, cost="100", category="HIREUP")
        second = add_shift(test_db, date(2025, 1, 3), 4, 1, cost="50", category="HIREUP")
        first.validate()
        second.validate()

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert [s.cost for s in result.shifts] == [Decimal("50.00"), Decimal("100.00")]
        assert result.total_cost == Decimal("150.00")
        assert all(s.description == "Manual" for s in result.shifts)
        assert all(s.line_item_code is None for s in result.shifts)

    def test_dangling_line_item_uses_manual_label(self, test_db: Session, gateway: RecordStoreGateway):
        """Test that a shift referencing a deleted line item still aggregates."""
        add_carer(test_db, 4)
        add_client(test_db, 1)
        item = add_line_item(test_db)
        add_shift(test_db, date(2025, 1, 3), 4, 1, cost="40", line_item_id=item.id)
        add_shift(test_db, date(2025, 1, 4), 4, 1, cost="60", line_item_id=999)

        result = ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))

        assert len(result.shifts) == 2
        dangling = result.shifts[1]
        assert dangling.description == "Manual"
        assert dangling.category == "Manual"
        assert dangling.line_item_code is None
        assert dangling.cost == Decimal("60.00")
        assert result.total_cost == Decimal("100.00")

    def test_invalid_range_rejected(self, gateway: RecordStoreGateway):
        with pytest.raises(InvalidDateRangeError):
            ShiftService(gateway).aggregate([4], 1, date(2025, 1, 10), date(2025, 1, 1))

    def test_missing_scope_rejected(self, gateway: RecordStoreGateway):
        service = ShiftService(gateway)

        with pytest.raises(MissingFieldError) as exc_info:
            service.aggregate([], 1, date(2025, 1, 1), date(2025, 1, 10))
        assert exc_info.value.details["field_name"] == "carer_ids"

        with pytest.raises(MissingFieldError) as exc_info:
            service.aggregate([4], None, date(2025, 1, 1), date(2025, 1, 10))
        assert exc_info.value.details["field_name"] == "client_id"

    def test_store_failure_propagates(self, gateway: RecordStoreGateway):
        failure = OperationalError("SELECT", {}, Exception("timeout"))

        with patch.object(gateway.db, "execute", side_effect=failure):
            with pytest.raises(UpstreamStoreError):
                ShiftService(gateway).aggregate([4], 1, date(2025, 1, 1), date(2025, 1, 10))


class TestMoneyHelpers:
    """Test cases for the money and hours helpers."""

    def test_to_money_rounds_to_cents(self):
        assert to_money("10.005") == Decimal("10.01")
        assert to_money(None) == Decimal("0.00")
        assert to_money(Decimal("7")) == Decimal("7.00")

    def test_shift_hours_never_negative(self):
        start = datetime(2025, 1, 3, 12, 0)
        end = datetime(2025, 1, 3, 9, 0)

        assert shift_hours(start, end) == Decimal("0.00")
        assert shift_hours(end, start) == Decimal("3.00")
        assert shift_hours(None, start) == Decimal("0.00")
