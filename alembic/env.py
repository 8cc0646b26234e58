"""Alembic environment driven by the Flask app's own engine.

The database URL and the metadata both come from ``create_app()``, so
``flask db upgrade`` and the running service always point at the same
database, whatever DATABASE_URL resolves to.
"""
import logging
import os
import pathlib
import sys
from logging.config import fileConfig

from alembic import context

BASE_DIR = pathlib.Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from wsgi import app
from bloombuddies.extensions import db
import bloombuddies.models  # noqa: F401  tables for users, candidates, notifications

config = context.config
if config.config_file_name and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name)
logger = logging.getLogger("alembic.env")

# notifications is an append-only log; autogenerate should never drop it
# because a model was renamed locally
PROTECTED_TABLES = {"notifications"}


def include_object(obj, name, type_, reflected, compare_to):
    if type_ == "table" and reflected and compare_to is None and name in PROTECTED_TABLES:
        logger.warning("not dropping table %s", name)
        return False
    return True


def run_migrations_offline(engine):
    context.configure(url=engine.url.render_as_string(hide_password=False),
                      target_metadata=db.metadata, include_object=include_object,
                      literal_binds=True, compare_type=True, render_as_batch=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(engine):
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=db.metadata,
                          include_object=include_object, compare_type=True,
                          # sqlite needs batch mode for ALTER on candidates
                          render_as_batch=connection.dialect.name == "sqlite")
        with context.begin_transaction():
            context.run_migrations()


with app.app_context():
    if context.is_offline_mode():
        run_migrations_offline(db.engine)
    else:
        run_migrations_online(db.engine)
