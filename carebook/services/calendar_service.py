"""Saved calendar views."""
import logging
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from carebook.exceptions import InvalidDateRangeError, MissingFieldError, NotFoundError
from carebook.record_store import RecordStoreGateway, Row, desc, eq

logger = logging.getLogger(__name__)


class CalendarService:
    """Service for a user's named calendar views."""

    def __init__(self, gateway: RecordStoreGateway):
        self.gateway = gateway

    def list_calendars(self, owner_id: str) -> List[Row]:
        """List the owner's saved calendars, newest first."""
        return self.gateway.select(
            "saved_calendars",
            filters=[eq("user_id", owner_id)],
            order_by=[desc("created_at")]
        )

    def get_calendar(self, calendar_id: str, owner_id: str) -> Row:
        """Get one saved calendar, raising NotFoundError if the owner has none by that ID."""
        calendar = self.gateway.select_one(
            "saved_calendars",
            [eq("id", calendar_id), eq("user_id", owner_id)]
        )
        if not calendar:
            raise NotFoundError("saved_calendar", calendar_id)
        return calendar

    def save_calendar(
        self,
        owner_id: str,
        name: Optional[str],
        config: Optional[Dict[str, Any]],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        client_id: Optional[int] = None
    ) -> Row:
        """
        Create or replace the owner's calendar with the given name.

        Args:
            owner_id: Owner of the calendar
            name: Calendar name, unique per owner
            config: Opaque display configuration
            date_from: Optional period start
            date_to: Optional period end
            client_id: Optional client scope

        Returns:
            The stored calendar row
        """
        name = (name or "").strip()
        if not name:
            raise MissingFieldError("name")
        if config is None:
            raise MissingFieldError("config")
        if date_from and date_to and date_from > date_to:
            raise InvalidDateRangeError(date_from, date_to)

        values = {
            "date_from": date_from,
            "date_to": date_to,
            "client_id": client_id,
            "config": config,
        }

        key = [eq("user_id", owner_id), eq("name", name)]
        updated = self.gateway.update("saved_calendars", key, values)
        if updated:
            logger.info(f"Saved calendar updated: {name}")
            return updated[0]

        calendar = self.gateway.insert("saved_calendars", {
            "id": str(uuid.uuid4()),
            "user_id": owner_id,
            "name": name,
            "created_at": datetime.utcnow(),
            **values,
        })
        logger.info(f"Saved calendar created: {name} (ID: {calendar['id']})")
        return calendar

    def delete_calendar(self, calendar_id: str, owner_id: str) -> Row:
        """Delete one of the owner's calendars."""
        deleted = self.gateway.delete(
            "saved_calendars",
            [eq("id", calendar_id), eq("user_id", owner_id)]
        )
        if not deleted:
            raise NotFoundError("saved_calendar", calendar_id)
        logger.info(f"Saved calendar deleted: {calendar_id}")
        return deleted[0]
