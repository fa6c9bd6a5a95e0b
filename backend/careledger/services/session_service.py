# Overview: Service-layer operations for session; admin capability tokens and the explicit authorization context.

"""
Administrator Session Service

A session token is the admin capability: issued at login, revoked at logout,
re-validated on every privileged request. Routes turn a valid token into an
AdminContext and pass it explicitly to every ledger operation; services
never look up "the current admin" on their own.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- Absolute timeout of ADMIN_SESSION_HOURS
- Revocable on logout; revocation is checked again by require_active()
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app

from ..errors import AuthorizationError
from ..extensions import db
from ..models import AdminSession, AdminUser
from ..time_utils import utcnow


@dataclass(frozen=True)
class AdminContext:
    """Immutable authorization context for one administrator session."""
    admin_id: int
    username: str
    display_name: str | None
    session_id: int
    expires_at: datetime

    @property
    def audit_name(self) -> str:
        return self.display_name or self.username

    def require_active(self) -> None:
        """
        Raise AuthorizationError unless the session is still usable.

        Checked before any remote I/O of a ledger operation.
        """
        now = utcnow()
        if self.expires_at <= now:
            raise AuthorizationError("Administrator session expired")

        session = db.session.get(AdminSession, self.session_id)
        if session is None or session.is_revoked or session.admin_id != self.admin_id:
            raise AuthorizationError("Administrator session revoked")

        admin = session.admin
        if admin is None or not admin.is_active:
            raise AuthorizationError("Administrator account is deactivated")


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 is sufficient for high-entropy tokens."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _context(session: AdminSession) -> AdminContext:
    admin = session.admin
    return AdminContext(
        admin_id=admin.id,
        username=admin.username,
        display_name=admin.display_name,
        session_id=session.id,
        expires_at=session.expires_at,
    )


def create_session(admin_id: int) -> tuple[AdminContext, str]:
    """
    Issue a new session for an admin.

    Returns (context, plaintext_token). Only the hash is stored.
    """
    admin = db.session.get(AdminUser, admin_id)
    if admin is None or not admin.is_active:
        raise AuthorizationError("Administrator account is not active")

    plaintext_token = generate_token()
    now = utcnow()
    hours = current_app.config.get("ADMIN_SESSION_HOURS", 12)

    session = AdminSession(
        admin_id=admin.id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + timedelta(hours=hours),
        is_revoked=False,
    )
    db.session.add(session)
    db.session.commit()

    return _context(session), plaintext_token


def validate_session(token: str) -> AdminContext | None:
    """
    Return the AdminContext for a token, or None when it is unknown,
    expired, revoked, or belongs to a deactivated admin.
    """
    now = utcnow()
    session = db.session.query(AdminSession).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at <= now:
        return None

    admin = session.admin
    if not admin or not admin.is_active:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = "Administrator deactivated"
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()
    return _context(session)


def revoke_session(token: str, reason: str = "Admin logout") -> bool:
    session = db.session.query(AdminSession).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()
    return True
