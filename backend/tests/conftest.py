"""
Pytest fixtures for CareLedger backend tests.

Provides a fresh in-memory database per test, an administrator session,
a recording remote store wrapper, and row factories for every ledger table.
"""

from datetime import timedelta
from itertools import count

import bcrypt
import pytest

from careledger import create_app
from careledger.errors import RemoteProcedureError, RemoteStoreError
from careledger.extensions import db, remote
from careledger.models import (
    Account,
    AdminUser,
    BedBooking,
    BloodDonor,
    BloodRequest,
    DoctorProfile,
    DoctorVerificationRequest,
    HospitalBed,
    OperationTheater,
    Order,
    OrderItem,
    SupportTicket,
    SystemAlert,
)
from careledger.services import session_service
from careledger.services.remote_store import RemoteStore
from careledger.time_utils import utcnow


ADMIN_USERNAME = "ops"
ADMIN_PASSWORD = "Password123!"
ADMIN_DISPLAY_NAME = "Ops Admin"

WRITE_OPS = {"update", "insert", "delete", "call"}


class SpyStore(RemoteStore):
    """
    Records every remote store operation and can fail chosen ones.

    fail_* sets hold table names (procedure names for fail_procedures).
    before_call maps a procedure name to a callable run just before it,
    for simulating another writer between the read and the write.
    """

    def __init__(self, inner: RemoteStore):
        self.inner = inner
        self.calls = []
        self.fail_procedures = set()
        self.fail_inserts = set()
        self.fail_updates = set()
        self.fail_selects = set()
        self.before_call = {}

    def select(self, table, *, filters=None, order_by=None, descending=False):
        self.calls.append(("select", table, filters))
        if table in self.fail_selects:
            raise RemoteStoreError(f"select on {table} unavailable")
        return self.inner.select(table, filters=filters, order_by=order_by, descending=descending)

    def update(self, table, row_id, values, *, guards=()):
        self.calls.append(("update", table, {"id": row_id, "values": dict(values), "guards": tuple(guards)}))
        if table in self.fail_updates:
            raise RemoteStoreError(f"update on {table} unavailable")
        return self.inner.update(table, row_id, values, guards=guards)

    def insert(self, table, values):
        self.calls.append(("insert", table, dict(values)))
        if table in self.fail_inserts:
            raise RemoteStoreError(f"insert into {table} unavailable")
        return self.inner.insert(table, values)

    def delete(self, table, row_id, *, guards=()):
        self.calls.append(("delete", table, {"id": row_id, "guards": tuple(guards)}))
        return self.inner.delete(table, row_id, guards=guards)

    def call(self, procedure, args, *, ctx=None):
        self.calls.append(("call", procedure, dict(args)))
        if procedure in self.fail_procedures:
            raise RemoteProcedureError(f"Remote procedure '{procedure}' unavailable")
        if procedure in self.before_call:
            self.before_call[procedure]()
        return self.inner.call(procedure, args, ctx=ctx)

    def calls_of(self, op, target=None):
        return [c for c in self.calls if c[0] == op and (target is None or c[1] == target)]

    def writes(self, target=None):
        return [c for c in self.calls if c[0] in WRITE_OPS and (target is None or c[1] == target)]

    def reset(self):
        self.calls.clear()


class RowFactory:
    """Inserts ledger rows the way the patient-facing app would."""

    def __init__(self, session):
        self.session = session
        self._seq = count(1)

    def _add(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj.id

    def order(self, status="pending", items=(), **kwargs):
        order_id = self._add(Order(status=status, total_cents=kwargs.pop("total_cents", 2500), **kwargs))
        for medicine_id, quantity, unit_price_cents in items:
            self.session.add(OrderItem(
                order_id=order_id,
                medicine_id=medicine_id,
                medicine_name=f"Medicine {medicine_id}",
                quantity=quantity,
                unit_price_cents=unit_price_cents,
            ))
        self.session.commit()
        return order_id

    def bed(self, bed_type, total_beds, available_beds, **kwargs):
        return self._add(HospitalBed(
            bed_type=bed_type,
            total_beds=total_beds,
            available_beds=available_beds,
            **kwargs,
        ))

    def theater(self, name, is_available=True, **kwargs):
        return self._add(OperationTheater(name=name, is_available=is_available, **kwargs))

    def booking(self, admission_status="pending", **kwargs):
        n = next(self._seq)
        defaults = {
            "booking_id": f"BK{n:05d}",
            "patient_name": f"Patient {n}",
            "patient_age": 40,
            "patient_gender": "female",
            "disease": "Pneumonia",
            "preferred_bed_type": "General",
        }
        defaults.update(kwargs)
        return self._add(BedBooking(admission_status=admission_status, **defaults))

    def donor(self, status="pending", blood_group="O+", **kwargs):
        n = next(self._seq)
        defaults = {
            "name": f"Donor {n}",
            "age": 30,
            "mobile_number": "555-0100",
            "address": "1 Main St",
        }
        defaults.update(kwargs)
        return self._add(BloodDonor(status=status, blood_group=blood_group, **defaults))

    def blood_request(self, status="pending", blood_group="A+", **kwargs):
        n = next(self._seq)
        defaults = {
            "full_name": f"Requester {n}",
            "phone_number": "555-0101",
            "address": "2 Main St",
        }
        defaults.update(kwargs)
        return self._add(BloodRequest(status=status, blood_group=blood_group, **defaults))

    def ticket(self, status="open", priority="medium", **kwargs):
        n = next(self._seq)
        defaults = {"title": f"Ticket {n}", "description": "Cannot see my prescription"}
        defaults.update(kwargs)
        return self._add(SupportTicket(status=status, priority=priority, **defaults))

    def alert(self, is_resolved=False, **kwargs):
        n = next(self._seq)
        defaults = {"title": f"Alert {n}", "message": "Oxygen supply low", "type": "warning", "severity": "high"}
        defaults.update(kwargs)
        return self._add(SystemAlert(is_resolved=is_resolved, **defaults))

    def credential_request(self, status="pending", **kwargs):
        n = next(self._seq)
        defaults = {
            "full_name": f"Dana Doctor {n}",
            "email": f"doctor{n}@clinic.test",
            "specialization": "Cardiology",
            "years_experience": 8,
            "hospital_affiliation": "City Hospital",
            "medical_license": f"LIC-{n:04d}",
        }
        defaults.update(kwargs)
        return self._add(DoctorVerificationRequest(status=status, **defaults))

    def doctor_profile(self, is_approved=False, **kwargs):
        defaults = {"specialization": "Dermatology"}
        defaults.update(kwargs)
        return self._add(DoctorProfile(is_approved=is_approved, **defaults))

    def account(self, role="patient", **kwargs):
        return self._add(Account(role=role, **kwargs))


@pytest.fixture(scope='session')
def admin_password_hash():
    """Low-cost bcrypt hash; verify_password accepts any cost factor."""
    return bcrypt.hashpw(ADMIN_PASSWORD.encode('utf-8'), bcrypt.gensalt(rounds=4)).decode('utf-8')


@pytest.fixture(scope='function')
def app():
    """Create application with a fresh in-memory database and inline reconciliation."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'REMOTE_STORE_BACKEND': 'sql',
        'LEDGER_REFRESH_DELAY_SECONDS': 0,
        'LEDGER_REFRESH_BACKOFF_SECONDS': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def spy(app):
    """Wrap the configured remote store with a recording SpyStore."""
    store = SpyStore(remote.store)
    remote.install(app, store)
    return store


@pytest.fixture(scope='function')
def factory(app):
    return RowFactory(db.session)


@pytest.fixture(scope='function')
def admin(app, admin_password_hash):
    """Create the active administrator."""
    user = AdminUser(
        username=ADMIN_USERNAME,
        display_name=ADMIN_DISPLAY_NAME,
        password_hash=admin_password_hash,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture(scope='function')
def admin_session(admin):
    """(AdminContext, plaintext token) for the administrator."""
    return session_service.create_session(admin.id)


@pytest.fixture(scope='function')
def ctx(admin_session):
    return admin_session[0]


@pytest.fixture(scope='function')
def token(admin_session):
    return admin_session[1]


@pytest.fixture(scope='function')
def headers(token):
    return auth_headers(token)


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def minutes_ago(minutes: int):
    return utcnow() - timedelta(minutes=minutes)
