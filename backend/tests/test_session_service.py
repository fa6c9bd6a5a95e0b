"""
Administrator accounts and session capability tokens.
"""

from datetime import timedelta

import pytest

from careledger.errors import AuthorizationError
from careledger.extensions import db
from careledger.models import AdminSession
from careledger.services import auth_service, session_service
from careledger.time_utils import utcnow
from conftest import ADMIN_PASSWORD, ADMIN_USERNAME


class TestPasswords:

    @pytest.mark.parametrize(
        "password",
        ["Short1!", "alllowercase1!", "ALLUPPERCASE1!", "NoDigitsHere!", "NoSpecial123"],
    )
    def test_weak_passwords_rejected(self, password):
        with pytest.raises(auth_service.PasswordValidationError):
            auth_service.validate_password_strength(password)

    def test_malformed_hash_never_verifies(self):
        assert auth_service.verify_password(ADMIN_PASSWORD, "not-a-bcrypt-hash") is False

    def test_create_admin_rejects_duplicate_username(self, app, admin):
        with pytest.raises(ValueError, match="already exists"):
            auth_service.create_admin(ADMIN_USERNAME, "Another123!")


class TestAuthenticate:

    def test_valid_credentials(self, app, admin):
        user = auth_service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)

        assert user.id == admin.id
        assert user.last_login_at is not None

    def test_wrong_password(self, app, admin):
        assert auth_service.authenticate(ADMIN_USERNAME, "Wrong123!") is None

    def test_deactivated_admin_cannot_log_in(self, app, admin):
        auth_service.deactivate_admin(admin.id)

        assert auth_service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD) is None


class TestSessions:

    def test_token_round_trip(self, ctx, token):
        validated = session_service.validate_session(token)

        assert validated == ctx
        assert validated.audit_name == "Ops Admin"
        ctx.require_active()

    def test_only_hash_is_stored(self, ctx, token):
        stored = db.session.get(AdminSession, ctx.session_id)

        assert stored.token_hash == session_service.hash_token(token)
        assert stored.token_hash != token

    def test_revoked_token(self, ctx, token):
        assert session_service.revoke_session(token) is True

        assert session_service.validate_session(token) is None
        assert session_service.revoke_session(token) is False
        with pytest.raises(AuthorizationError, match="revoked"):
            ctx.require_active()

    def test_expired_session(self, ctx, token):
        stored = db.session.get(AdminSession, ctx.session_id)
        stored.expires_at = utcnow() - timedelta(minutes=1)
        db.session.commit()

        assert session_service.validate_session(token) is None

    def test_expired_context(self, ctx):
        expired = session_service.AdminContext(
            admin_id=ctx.admin_id,
            username=ctx.username,
            display_name=ctx.display_name,
            session_id=ctx.session_id,
            expires_at=utcnow() - timedelta(seconds=1),
        )

        with pytest.raises(AuthorizationError, match="expired"):
            expired.require_active()

    def test_deactivation_revokes_on_next_use(self, admin, ctx, token):
        auth_service.deactivate_admin(admin.id)

        with pytest.raises(AuthorizationError, match="deactivated"):
            ctx.require_active()
        assert session_service.validate_session(token) is None
        assert db.session.get(AdminSession, ctx.session_id).is_revoked is True

    def test_cannot_open_session_for_inactive_admin(self, admin):
        auth_service.deactivate_admin(admin.id)

        with pytest.raises(AuthorizationError):
            session_service.create_session(admin.id)
