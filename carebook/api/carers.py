"""Carer directory routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from carebook.api.auth import get_current_user, get_gateway
from carebook.api.responses import error_response, internal_error_response, json_response
from carebook.exceptions import ServiceError
from carebook.record_store import RecordStoreGateway, Row, asc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/carers", tags=["carers"])

DEFAULT_CARER_COLORS = [
    '#3b82f6', '#22c55e', '#8b5cf6', '#ec4899',
    '#f97316', '#ef4444', '#14b8a6', '#6366f1',
]


def display_color(carer: Row) -> str:
    """
    Color a carer is drawn with.

    Carers without a stored color get one from the default palette, picked
    by ID so the same carer always gets the same color.
    """
    color: Optional[str] = carer.get("color")
    if color:
        return color
    return DEFAULT_CARER_COLORS[(carer["id"] or 0) % len(DEFAULT_CARER_COLORS)]


@router.get("")
def list_carers(
    user: Row = Depends(get_current_user),
    gateway: RecordStoreGateway = Depends(get_gateway)
):
    """List carers with their display colors."""
    try:
        carers = gateway.select("carers", order_by=[asc("first_name"), asc("last_name")])
        result = [
            {
                "id": carer["id"],
                "first_name": carer["first_name"],
                "last_name": carer["last_name"],
                "email": carer["email"],
                "phone_number": carer["phone_number"],
                "color": display_color(carer),
            }
            for carer in carers
        ]
        return json_response({"success": True, "data": result})
    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to list carers: {e}")
        return internal_error_response()
