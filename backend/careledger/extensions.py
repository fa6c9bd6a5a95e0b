# Overview: Flask extension instances for database, migrations, and the remote ledger store.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from .services.remote_store import RemoteStoreExtension
from .services.reconciliation import ReconcilerExtension

db = SQLAlchemy()
migrate = Migrate()
remote = RemoteStoreExtension()
reconciler = ReconcilerExtension()
