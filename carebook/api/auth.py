"""Login routes and request-scoped dependencies."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from carebook.api.responses import error_response, internal_error_response
from carebook.config import settings
from carebook.database import get_db
from carebook.exceptions import AuthenticationError, ServiceError
from carebook.record_store import RecordStoreGateway, Row
from carebook.services.auth_service import AuthService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/auth", tags=["auth"])


def get_gateway(db: Session = Depends(get_db)) -> RecordStoreGateway:
    """Record store gateway bound to the request's database session."""
    return RecordStoreGateway(db)


def get_session_token(request: Request) -> Optional[str]:
    """
    Get session token from cookie.

    Args:
        request: FastAPI request object

    Returns:
        Session token if present, None otherwise
    """
    return request.cookies.get(settings.session_cookie_name)


def get_current_user(
    request: Request,
    gateway: RecordStoreGateway = Depends(get_gateway)
) -> Row:
    """
    Get the user owning the request's session.

    Raises:
        AuthenticationError: If there is no valid session
    """
    user = AuthService(gateway).get_user_for_session(get_session_token(request))
    if not user:
        raise AuthenticationError()
    return user


@router.post("/login")
def login(
    username: str = Form(...),
    password: str = Form(...),
    gateway: RecordStoreGateway = Depends(get_gateway)
):
    """
    Start a session and set the session cookie.

    Returns:
        JSON with the logged-in user's name, 401 on bad credentials
    """
    try:
        token = AuthService(gateway).login(username, password)
    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Login failed: {e}")
        return internal_error_response()

    response = JSONResponse(content={"success": True, "username": username})
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=settings.session_cookie_httponly,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        max_age=settings.session_max_age
    )
    return response


@router.post("/logout")
def logout(request: Request, gateway: RecordStoreGateway = Depends(get_gateway)):
    """End the current session and clear the cookie."""
    AuthService(gateway).logout(get_session_token(request))

    response = JSONResponse(content={"success": True})
    response.delete_cookie(settings.session_cookie_name)
    return response
