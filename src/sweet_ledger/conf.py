"""
Settings for sweet_ledger.

Values come from the optional ``SWEET_LEDGER`` dict in Django settings::

    SWEET_LEDGER = {
        "LOCK_TIMEOUT": 2.0,         # seconds; None blocks indefinitely
        "DATABASE_ALIAS": "default",
    }

Settings are read on each call. When Django settings are not configured (for
example with the in-memory store) the defaults apply.
"""

from __future__ import annotations

from typing import Any

DEFAULTS: dict[str, Any] = {
    "LOCK_TIMEOUT": 3.0,
    "DATABASE_ALIAS": "default",
}


def get_setting(name: str) -> Any:
    if name not in DEFAULTS:
        raise KeyError(f"sweet_ledger: unknown setting '{name}'")

    from django.conf import settings

    if not settings.configured:
        return DEFAULTS[name]

    overrides = getattr(settings, "SWEET_LEDGER", None) or {}
    return overrides.get(name, DEFAULTS[name])
