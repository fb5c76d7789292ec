"""
Django configuration for the ORM-backed tests.

PostgreSQL is used when DATABASE_URL points at one; otherwise the ORM tests
run on an in-memory SQLite database and the PostgreSQL-only tests skip.
"""

import os
from urllib.parse import urlparse

import pytest


def _database_settings() -> dict:
    u = urlparse(os.environ.get("DATABASE_URL", ""))
    if u.scheme not in {"postgres", "postgresql"}:
        return {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}

    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": (u.path or "").lstrip("/"),
        "USER": u.username or "",
        "PASSWORD": u.password or "",
        "HOST": u.hostname or "localhost",
        "PORT": str(u.port or 5432),
        "CONN_MAX_AGE": 0,
    }


def configure_django_if_needed() -> None:
    """Configure a minimal Django setup (once per test run)."""
    from django.conf import settings

    if settings.configured:
        return

    settings.configure(
        SECRET_KEY="test",
        INSTALLED_APPS=["sweet_ledger"],
        DATABASES={"default": _database_settings()},
        TIME_ZONE="UTC",
        USE_TZ=True,
    )

    import django

    django.setup()


@pytest.fixture
def item_table():
    """A freshly created item table, dropped again after the test."""
    configure_django_if_needed()

    from django.db import connection

    from sweet_ledger.models import ItemRecord

    def drop_table() -> None:
        if ItemRecord._meta.db_table in connection.introspection.table_names():
            with connection.schema_editor() as editor:
                editor.delete_model(ItemRecord)

    drop_table()
    with connection.schema_editor() as editor:
        editor.create_model(ItemRecord)

    yield connection

    drop_table()
