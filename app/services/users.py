"""User registration and credential checks."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.core.security import hash_password, verify_password
from app.models.user import User

logger = get_logger(__name__)


class EmailAlreadyRegisteredError(ValueError):
    """Raised when signing up with an email that already has an account."""


class InvalidCredentialsError(ValueError):
    """Raised when an email/password pair does not match an active account."""


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookup; emails match case-insensitively."""
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == normalize_email(email))
    return db.execute(stmt).scalar_one_or_none()


def register_user(db: Session, username: str, email: str, password: str) -> User:
    """Create a user with a hashed password.

    Raises:
        EmailAlreadyRegisteredError: If the email is already in use.
    """
    email = normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise EmailAlreadyRegisteredError(f"Email already registered: {email}")

    user = User(username=username, email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent signup for the same email
        db.rollback()
        raise EmailAlreadyRegisteredError(f"Email already registered: {email}") from exc
    db.refresh(user)

    logger.info(
        "Registered user %s",
        user.id,
        extra={"component": "users", "operation": "register_user", "item_id": str(user.id)},
    )
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Return the user matching the credentials.

    Raises:
        InvalidCredentialsError: On unknown email, wrong password or inactive user.
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt", extra={"operation": "authenticate_user"})
        raise InvalidCredentialsError("Invalid credentials")
    if not user.is_active:
        raise InvalidCredentialsError("Inactive user")
    return user
