"""
Property-based tests for shift aggregation and invoice composition.
"""
import pytest
from hypothesis import given, strategies as st, settings
from calendar import monthrange
from datetime import date, timedelta
from decimal import Decimal

from carebook.config import Settings
from carebook.services.invoice_composer import InvoiceComposer, InvoiceMetadata
from carebook.services.shift_service import ShiftService
from tests.conftest import add_carer, add_client, add_line_item, add_shift, get_test_gateway


@st.composite
def valid_date_strategy(draw):
    """Generate a valid date."""
    year = draw(st.integers(min_value=2024, max_value=2030))
    month = draw(st.integers(min_value=1, max_value=12))
    max_day = monthrange(year, month)[1]
    day = draw(st.integers(min_value=1, max_value=max_day))
    return date(year, month, day)


@st.composite
def date_range_strategy(draw):
    """Generate a valid date range (start_date, end_date)."""
    start_date = draw(valid_date_strategy())
    days_ahead = draw(st.integers(min_value=0, max_value=60))
    end_date = start_date + timedelta(days=days_ahead)
    return (start_date, end_date)


cost_strategy = st.decimals(
    min_value=Decimal("0.00"),
    max_value=Decimal("999.99"),
    places=2,
    allow_nan=False,
    allow_infinity=False
)


@st.composite
def shift_params_strategy(draw, start_date: date, end_date: date):
    """Generate (offset in days, cost, category, carer ID, client ID) for one shift."""
    # Shifts may fall a few days either side of the range
    offset = draw(st.integers(min_value=-5, max_value=(end_date - start_date).days + 5))
    cost = draw(cost_strategy)
    category = draw(st.sampled_from([None, None, "HIREUP"]))
    carer_id = draw(st.sampled_from([1, 2]))
    client_id = draw(st.sampled_from([1, 2]))
    return offset, cost, category, carer_id, client_id


@pytest.mark.property
@settings(max_examples=50, deadline=None)
@given(date_range=date_range_strategy(), data=st.data())
def test_property_aggregate_total_is_sum_of_in_scope_shifts(date_range, data):
    """
    For any set of shifts, the aggregated total equals the sum of the stored
    costs of every in-scope shift, manual ones included, and shifts are
    ordered by date then ID. Excluding HIREUP by configuration removes
    exactly the manual costs.
    """
    start_date, end_date = date_range
    params = data.draw(st.lists(shift_params_strategy(start_date, end_date), max_size=12))

    with get_test_gateway() as gateway:
        db = gateway.db
        add_carer(db, 1)
        add_carer(db, 2, first_name="Sam")
        add_client(db, 1)
        add_client(db, 2, first_name="Robin")
        item = add_line_item(db)

        expected = Decimal("0.00")
        manual = Decimal("0.00")
        for offset, cost, category, carer_id, client_id in params:
            shift_date = start_date + timedelta(days=offset)
            line_item_id = None if category == "HIREUP" else item.id
            add_shift(db, shift_date, carer_id, client_id, cost=str(cost),
                      line_item_id=line_item_id, category=category)
            if start_date <= shift_date <= end_date and carer_id == 1 and client_id == 1:
                expected += cost
                if category == "HIREUP":
                    manual += cost

        result = ShiftService(gateway).aggregate([1], 1, start_date, end_date)

        assert result.total_cost == expected
        assert result.total_cost == sum((s.cost for s in result.shifts), Decimal("0.00"))
        keys = [(s.shift_date, s.shift_id) for s in result.shifts]
        assert keys == sorted(keys)
        assert all(start_date <= s.shift_date <= end_date for s in result.shifts)

        excluding = ShiftService(gateway, Settings(invoice_excluded_categories=["HIREUP"]))
        assert excluding.aggregate([1], 1, start_date, end_date).total_cost == expected - manual


@pytest.mark.property
@settings(max_examples=25, deadline=None)
@given(date_range=date_range_strategy(), costs=st.lists(cost_strategy, max_size=8))
def test_property_composed_total_matches_aggregate(date_range, costs):
    """
    For any aggregation, the composed invoice lines sum to the aggregated
    total and composing twice yields identical bytes.
    """
    start_date, end_date = date_range

    with get_test_gateway() as gateway:
        db = gateway.db
        add_carer(db, 1)
        add_client(db, 1)
        item = add_line_item(db)
        for index, cost in enumerate(costs):
            shift_date = start_date + timedelta(days=index % ((end_date - start_date).days + 1))
            add_shift(db, shift_date, 1, 1, cost=str(cost), line_item_id=item.id)

        aggregation = ShiftService(gateway).aggregate([1], 1, start_date, end_date)

    metadata = InvoiceMetadata(
        invoice_number="INV-1",
        invoice_date=end_date,
        date_from=start_date,
        date_to=end_date
    )
    composer = InvoiceComposer()
    layout = composer.build_layout(aggregation, metadata)

    assert len(layout.lines) == len(costs)
    assert layout.total_value == aggregation.total_cost
    assert sum((line.amount_value for line in layout.lines), Decimal("0.00")) == aggregation.total_cost

    first = composer.compose(aggregation, metadata)
    second = composer.compose(aggregation, metadata)
    assert first.payload == second.payload
