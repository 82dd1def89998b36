"""Saved calendar routes."""
import logging

from fastapi import APIRouter, Depends

from carebook.api.auth import get_current_user, get_gateway
from carebook.api.responses import error_response, internal_error_response, json_response
from carebook.api.schemas import SavedCalendarCreate
from carebook.exceptions import ServiceError
from carebook.record_store import RecordStoreGateway, Row
from carebook.services.calendar_service import CalendarService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/saved-calendars", tags=["calendars"])


def get_calendar_service(gateway: RecordStoreGateway = Depends(get_gateway)) -> CalendarService:
    return CalendarService(gateway)


@router.get("")
def list_calendars(
    user: Row = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    try:
        return json_response({"success": True, "data": service.list_calendars(user["id"])})
    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to list saved calendars: {e}")
        return internal_error_response()


@router.post("")
def save_calendar(
    payload: SavedCalendarCreate,
    user: Row = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    """Create or replace a saved calendar by name."""
    try:
        calendar = service.save_calendar(
            owner_id=user["id"],
            name=payload.name,
            config=payload.config,
            date_from=payload.date_from,
            date_to=payload.date_to,
            client_id=payload.client_id
        )
        return json_response({"success": True, "data": calendar})
    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to save calendar: {e}")
        return internal_error_response()


@router.get("/{calendar_id}")
def get_calendar(
    calendar_id: str,
    user: Row = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    try:
        return json_response({"success": True, "data": service.get_calendar(calendar_id, user["id"])})
    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to load saved calendar {calendar_id}: {e}")
        return internal_error_response()


@router.delete("/{calendar_id}")
def delete_calendar(
    calendar_id: str,
    user: Row = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service)
):
    try:
        service.delete_calendar(calendar_id, user["id"])
        return json_response({"success": True, "data": {"id": calendar_id}})
    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to delete saved calendar {calendar_id}: {e}")
        return internal_error_response()
