"""
User Service — registration, login and admin provisioning.
"""

import logging
from datetime import datetime, timezone

from email_validator import EmailNotValidError, validate_email
from flask import current_app
from sqlalchemy.exc import IntegrityError

from showcase.core.exceptions import AuthError, ConflictError, ValidationError
from showcase.models import db
from showcase.models.auth import User
from showcase.utils.crypto import DEFAULT_ROUNDS, hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def _normalize_email(email: str) -> str:
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required", details={"email": "required"})
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": "invalid"}) from None


def _check_password(password: str) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            details={"password": "too short"},
        )


def _hash(password: str) -> str:
    return hash_password(password, rounds=current_app.config.get("BCRYPT_ROUNDS", DEFAULT_ROUNDS))


# ═══════════════════════════════════════════════════════════════
# Registration / login
# ═══════════════════════════════════════════════════════════════
def register_user(
    email: str,
    password: str,
    firm_name: str = "",
    contact_name: str = "",
    is_admin: bool = False,
) -> User:
    """Create a new portal account."""
    email = _normalize_email(email)
    _check_password(password)

    if User.query.filter_by(email=email).first():
        raise ConflictError("User", "email", email)

    user = User(
        email=email,
        password_hash=_hash(password),
        firm_name=(firm_name or "").strip(),
        contact_name=(contact_name or "").strip(),
        is_admin=is_admin,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("User", "email", email) from None

    logger.info("User registered", extra={"user_id": user.id})
    return user


def authenticate_user(email: str, password: str) -> User:
    """Return the user for valid credentials or raise AuthError."""
    try:
        email = _normalize_email(email)
    except ValidationError:
        raise AuthError("Invalid email or password") from None

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password or "", user.password_hash):
        logger.info("Failed login attempt")
        raise AuthError("Invalid email or password")

    user.last_login_at = datetime.now(timezone.utc)
    db.session.commit()
    return user


def get_user_by_id(user_id: int) -> User | None:
    return db.session.get(User, user_id)


def create_admin(email: str, password: str, contact_name: str = "") -> User:
    """Create an admin account, or promote an existing account to admin."""
    normalized = _normalize_email(email)
    user = User.query.filter_by(email=normalized).first()
    if user:
        user.is_admin = True
        db.session.commit()
        logger.info("User promoted to admin", extra={"user_id": user.id})
        return user
    return register_user(normalized, password, contact_name=contact_name, is_admin=True)
