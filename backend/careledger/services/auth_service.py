# Overview: Service-layer operations for auth; administrator accounts and password verification.

"""
Administrator Authentication Service

Every ledger write is stamped with the acting administrator (reviewed_by,
audit actor), so each admin has an individual account.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, upper, lower, digit and special char required
- Session tokens managed separately (see session_service.py)
"""

import re

import bcrypt

from ..extensions import db
from ..models import AdminUser
from ..time_utils import utcnow


class PasswordValidationError(ValueError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>_\-]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Validate strength, then bcrypt-hash with cost factor 12."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison. Malformed hashes never verify."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_admin(username: str, password: str, display_name: str | None = None) -> AdminUser:
    """
    Create an administrator account.

    Raises:
        ValueError: username already taken
        PasswordValidationError: weak password
    """
    username = (username or "").strip()
    if not username:
        raise ValueError("Username is required")

    existing = db.session.query(AdminUser).filter_by(username=username).first()
    if existing:
        raise ValueError("Username already exists")

    admin = AdminUser(
        username=username,
        display_name=(display_name or "").strip() or None,
        password_hash=hash_password(password),
    )
    db.session.add(admin)
    db.session.commit()
    return admin


def authenticate(username: str, password: str) -> AdminUser | None:
    """
    Return the active admin matching the credentials, else None.

    Updates last_login_at on success.
    """
    admin = db.session.query(AdminUser).filter(
        AdminUser.username == username,
        AdminUser.is_active.is_(True),
    ).first()

    if not admin:
        return None

    if verify_password(password, admin.password_hash):
        admin.last_login_at = utcnow()
        db.session.commit()
        return admin

    return None


def deactivate_admin(admin_id: int) -> bool:
    """Disable an account; its sessions stop validating immediately."""
    admin = db.session.get(AdminUser, admin_id)
    if admin is None:
        return False
    admin.is_active = False
    db.session.commit()
    return True
