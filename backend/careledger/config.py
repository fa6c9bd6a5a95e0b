# backend/careledger/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/careledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///careledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Remote data store: "sql" talks to SQLALCHEMY_DATABASE_URI directly,
    # "rest" talks to a PostgREST-compatible endpoint.
    REMOTE_STORE_BACKEND = os.environ.get("REMOTE_STORE_BACKEND", "sql")
    REMOTE_STORE_URL = os.environ.get("REMOTE_STORE_URL", "")
    REMOTE_STORE_API_KEY = os.environ.get("REMOTE_STORE_API_KEY", "")
    REMOTE_CALL_TIMEOUT_SECONDS = float(os.environ.get("REMOTE_CALL_TIMEOUT_SECONDS", "5"))

    # Authoritative re-fetch after a write. 0 reconciles inline.
    LEDGER_REFRESH_DELAY_SECONDS = float(os.environ.get("LEDGER_REFRESH_DELAY_SECONDS", "1.0"))
    LEDGER_REFRESH_ATTEMPTS = int(os.environ.get("LEDGER_REFRESH_ATTEMPTS", "3"))
    LEDGER_REFRESH_BACKOFF_SECONDS = float(os.environ.get("LEDGER_REFRESH_BACKOFF_SECONDS", "0.1"))

    LEDGER_DEFAULT_CONSULTATION_FEE = int(os.environ.get("LEDGER_DEFAULT_CONSULTATION_FEE", "150"))

    ADMIN_SESSION_HOURS = int(os.environ.get("ADMIN_SESSION_HOURS", "12"))
