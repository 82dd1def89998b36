"""Main application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from carebook.api import auth_router, calendars_router, carers_router, invoices_router
from carebook.config import settings
from carebook.database import build_session_factory, create_db_engine, init_db
from carebook.exceptions import ServiceError, format_error_for_api

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Carebook",
    description="Shift aggregation and invoicing for care services",
    version="1.0.0",
    debug=settings.debug
)

app.include_router(auth_router)
app.include_router(invoices_router)
app.include_router(calendars_router)
app.include_router(carers_router)


@app.on_event("startup")
def startup_event():
    """Build the database engine and session factory."""
    logger.info("Application starting up...")

    # Tests install their own session factory before startup
    if getattr(app.state, "session_factory", None) is None:
        app.state.engine = create_db_engine(settings)
        # Local SQLite stores are created on first run; MySQL is migrated by Alembic
        if settings.is_sqlite:
            init_db(app.state.engine)
        app.state.session_factory = build_session_factory(app.state.engine)

    logger.info("Application startup complete")


@app.on_event("shutdown")
def shutdown_event():
    """Release pooled database connections."""
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        engine.dispose()


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Answer service errors raised from dependencies in the API error format."""
    return JSONResponse(status_code=exc.status_code, content=format_error_for_api(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Answer malformed request bodies with 400."""
    logger.warning(f"Malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": {
                "code": "INVALID_REQUEST",
                "message": "Request body is malformed.",
                "details": {"errors": jsonable_encoder(exc.errors())}
            }
        }
    )


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Carebook"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
