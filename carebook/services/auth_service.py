"""Authentication service for back-office users."""
import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Optional

from carebook.config import Settings, settings as app_settings
from carebook.exceptions import AuthenticationError, MissingFieldError, ValidationError
from carebook.record_store import RecordStoreGateway, Row, eq, lte

logger = logging.getLogger(__name__)


class AuthService:
    """Service for handling authentication operations."""

    def __init__(self, gateway: RecordStoreGateway, config: Optional[Settings] = None):
        """
        Initialize authentication service.

        Args:
            gateway: Record store gateway for the current request
            config: Settings providing session lifetime (defaults to global settings)
        """
        self.gateway = gateway
        self.session_max_age = (config or app_settings).session_max_age

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash a password using PBKDF2-HMAC-SHA256.

        Args:
            password: Plain text password

        Returns:
            Hashed password in format: salt$hash
        """
        if not password:
            raise ValueError("Password is required")

        # Generate a random salt
        salt = secrets.token_hex(32)

        pwd_hash = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            100000  # iterations
        )

        return f"{salt}${pwd_hash.hex()}"

    @staticmethod
    def verify_password(password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hashed password.

        Args:
            password: Plain text password to verify
            hashed_password: Hashed password in format: salt$hash

        Returns:
            True if password matches, False otherwise
        """
        if not password or not hashed_password:
            return False

        try:
            salt, stored_hash = hashed_password.split('$')

            pwd_hash = hashlib.pbkdf2_hmac(
                'sha256',
                password.encode('utf-8'),
                salt.encode('utf-8'),
                100000  # iterations
            )

            return secrets.compare_digest(pwd_hash.hex(), stored_hash)
        except (ValueError, AttributeError):
            return False

    def create_user(self, username: str, password: str, name: Optional[str] = None) -> Row:
        """
        Create a new back-office user.

        Args:
            username: Login name
            password: Password (plain text, will be hashed)
            name: Display name (defaults to the username)

        Returns:
            The stored user row

        Raises:
            MissingFieldError: If username or password is empty
            ValidationError: If the username is already taken
        """
        if not username:
            raise MissingFieldError("username")
        if not password:
            raise MissingFieldError("password")

        if self.gateway.select_one("users", [eq("username", username)]):
            raise ValidationError(
                message=f"Username {username} already exists.",
                error_code="DUPLICATE_USERNAME",
                details={"username": username}
            )

        user = self.gateway.insert("users", {
            "id": str(uuid.uuid4()),
            "username": username,
            "name": name or username,
            "password_hash": self.hash_password(password),
        })
        logger.info(f"User created: {username} (ID: {user['id']})")
        return user

    def authenticate(self, username: str, password: str) -> Optional[Row]:
        """
        Authenticate a user by username and password.

        Returns:
            User row if authentication successful, None otherwise
        """
        if not username or not password:
            return None

        user = self.gateway.select_one("users", [eq("username", username)])
        if not user:
            return None

        if not self.verify_password(password, user["password_hash"]):
            return None

        return user

    def login(self, username: str, password: str, now: Optional[datetime] = None) -> str:
        """
        Start a session for valid credentials.

        Returns:
            Session token to hand to the client

        Raises:
            AuthenticationError: If the credentials are invalid
        """
        user = self.authenticate(username, password)
        if not user:
            logger.warning(f"Failed login for {username!r}")
            raise AuthenticationError("Invalid username or password")

        now = now or datetime.utcnow()
        token = secrets.token_urlsafe(32)
        self.gateway.insert("user_sessions", {
            "token": token,
            "user_id": user["id"],
            "created_at": now,
            "expires_at": now + timedelta(seconds=self.session_max_age),
        })

        # Drop this user's expired sessions
        self.gateway.delete("user_sessions", [eq("user_id", user["id"]), lte("expires_at", now)])

        logger.info(f"User logged in: {username}")
        return token

    def get_user_for_session(self, token: Optional[str], now: Optional[datetime] = None) -> Optional[Row]:
        """
        Resolve a session token to its user.

        Returns:
            User row, or None if the token is unknown or expired
        """
        if not token:
            return None

        session = self.gateway.select_one("user_sessions", [eq("token", token)])
        if not session:
            return None

        if session["expires_at"] <= (now or datetime.utcnow()):
            return None

        return self.gateway.select_one("users", [eq("id", session["user_id"])])

    def logout(self, token: Optional[str]) -> None:
        """End a session. Unknown tokens are ignored."""
        if token:
            self.gateway.delete("user_sessions", [eq("token", token)])
