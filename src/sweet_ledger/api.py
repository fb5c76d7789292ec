from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Protocol

from .exceptions import LockAcquireTimeout

logger = logging.getLogger(__name__)


class LockBackend(Protocol):
    """
    Protocol describing the minimal lock backend interface.

    `LocalLockBackend` serializes threads of one process;
    `PostgresAdvisoryLockBackend` serializes every worker sharing a database.
    """
    def acquire(self, key: str, timeout: float | None) -> bool: ...
    def release(self, key: str) -> None: ...


@contextmanager
def lock(
    key: str,
    timeout: float | None,
    backend: LockBackend,
) -> Iterator[None]:
    """
    Hold the lock for ``key`` while the block runs.

    Only one execution holding the same key may be inside the protected block
    at a time; different keys never contend.

    Parameters
    ----------
    key : str
        Lock identifier, e.g. "item:3f1c...".

    timeout : float | None
        Maximum time (in seconds) to wait for acquisition.

        - None: block indefinitely.
        - float: raise LockAcquireTimeout if exceeded.

    backend : LockBackend
        Backend that owns the lock. Always passed explicitly.

    Raises
    ------
    LockAcquireTimeout
        If the lock cannot be acquired within the timeout.

    Example
    -------
    >>> with lock("item:42", timeout=2.0, backend=LocalLockBackend()):
    ...     adjust_stock()
    """
    acquired = backend.acquire(key, timeout)

    if not acquired:
        logger.warning("lock timeout key=%s timeout=%s", key, timeout)
        raise LockAcquireTimeout(
            f"Failed to acquire lock for key='{key}' within timeout={timeout}s"
        )

    logger.debug("lock acquired key=%s", key)
    try:
        yield
    finally:
        backend.release(key)
        logger.debug("lock released key=%s", key)
