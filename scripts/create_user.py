"""Script to create a back-office user."""
import logging
import sys

from carebook.config import settings
from carebook.database import build_session_factory, create_db_engine, init_db
from carebook.exceptions import ServiceError
from carebook.record_store import RecordStoreGateway
from carebook.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def create_user(username: str, password: str, name: str = None) -> int:
    """
    Create a back-office user.

    Args:
        username: Login name
        password: Password
        name: Display name (defaults to the username)

    Returns:
        Process exit code
    """
    engine = create_db_engine(settings)
    if settings.is_sqlite:
        init_db(engine)
    db = build_session_factory(engine)()
    try:
        user = AuthService(RecordStoreGateway(db)).create_user(username, password, name)
        print("User created successfully!")
        print(f"Username: {user['username']}")
        print(f"ID: {user['id']}")
        return 0
    except ServiceError as e:
        print(f"Error creating user: {e.message}")
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    if len(sys.argv) not in (3, 4):
        print("Usage: python scripts/create_user.py <username> <password> [display name]")
        sys.exit(1)

    sys.exit(create_user(*sys.argv[1:]))
