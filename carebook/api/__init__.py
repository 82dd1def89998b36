"""HTTP API routers."""
from carebook.api.auth import router as auth_router
from carebook.api.calendars import router as calendars_router
from carebook.api.carers import router as carers_router
from carebook.api.invoices import router as invoices_router

__all__ = ["auth_router", "calendars_router", "carers_router", "invoices_router"]
