"""Authentication service for JWT and password handling."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.user import User
from src.services.errors import AuthError, ConflictError, ValidationError

logger = logging.getLogger(__name__)

settings = get_settings()

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid Credentials"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Identity:
    """Acting user resolved from a verified session token."""

    id: int
    name: str


def normalize_email(email: str) -> str:
    """Lowercase and trim an email for storage and lookup."""
    return email.strip().lower()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user_id: int, name: str, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token carrying the user's id and name."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expiration_minutes)
    expire = datetime.now(UTC) + expires_delta
    to_encode = {
        "sub": str(user_id),
        "id": user_id,
        "name": name,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Identity:
    """Check signature and expiry and return the embedded identity.

    Raises AuthError for expired, malformed or badly signed tokens.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise AuthError("Token expired, please log in again") from e
    except JWTError as e:
        raise AuthError() from e

    user_id = payload.get("id", payload.get("sub"))
    name = payload.get("name")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError) as e:
        raise AuthError() from e
    if not isinstance(name, str):
        raise AuthError()

    return Identity(id=user_id, name=name)


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email, case-insensitively."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register_user(
    db: Session,
    name: str | None,
    email: str | None,
    password: str | None,
    password2: str | None,
) -> User:
    """Validate a registration and create the user."""
    if not name or not email or not password:
        raise ValidationError("All fields are required.")

    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise ConflictError("Email already exists.")

    if len(password.strip()) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters.")

    if password != password2:
        raise ValidationError("Passwords do not match.")

    user = User(name=name, email=email, password_hash=get_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise ConflictError("Email already exists.") from e
    db.refresh(user)

    logger.info(f"Registered user {user.id} <{user.email}>")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def login(db: Session, email: str | None, password: str | None) -> tuple[str, User]:
    """Check credentials and issue a session token.

    Unknown email and wrong password raise the same error.
    """
    if not email or not password:
        raise ValidationError("All fields are required.")

    user = authenticate_user(db, email, password)
    if not user:
        raise AuthError(INVALID_CREDENTIALS)

    return create_access_token(user.id, user.name), user
