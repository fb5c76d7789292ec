import logging
import time

from django.db import DatabaseError, connections

from ..exceptions import Transient
from ..hashing import key_to_int64

logger = logging.getLogger(__name__)


class PostgresAdvisoryLockBackend:
    """
    PostgreSQL advisory lock backend.

    Serializes ledger operations on the same item across every process and
    machine connected to the same database. The item key ("item:<id>") is
    hashed into the BIGINT lock id PostgreSQL requires.

    Key properties
    --------------
    - Session-scoped: the lock belongs to the Django connection of the calling
      thread. If that connection dies, PostgreSQL releases the lock.
    - Independent of transactions: the ledger commits its write inside the
      locked section, so the next holder always reads the committed quantity.

    Timeout behavior
    ----------------
    - timeout=None: blocks in pg_advisory_lock until acquired.
    - timeout=float: polls pg_try_advisory_lock every 50 ms until the deadline.

    Parameters
    ----------
    using : str
        Django database alias whose connection holds the locks.
    """

    poll_interval: float = 0.05

    def __init__(self, using: str = "default") -> None:
        self.using = using

    def acquire(self, key: str, timeout: float | None) -> bool:
        lock_id = key_to_int64(key)
        connection = connections[self.using]

        try:
            if timeout is None:
                with connection.cursor() as cursor:
                    cursor.execute("SELECT pg_advisory_lock(%s);", [lock_id])
                return True

            deadline = time.monotonic() + timeout

            while True:
                with connection.cursor() as cursor:
                    cursor.execute("SELECT pg_try_advisory_lock(%s);", [lock_id])
                    acquired = cursor.fetchone()[0]

                if acquired:
                    return True
                if time.monotonic() >= deadline:
                    return False

                time.sleep(self.poll_interval)
        except DatabaseError as e:
            logger.warning("advisory lock failed key=%s: %s", key, e)
            raise Transient(f"Could not acquire advisory lock for '{key}': {e}") from e

    def release(self, key: str) -> None:
        """
        Release the advisory lock for ``key``.

        PostgreSQL ignores unlock requests for locks the session does not hold,
        so this is safe to call from a finally block.
        """
        lock_id = key_to_int64(key)

        try:
            with connections[self.using].cursor() as cursor:
                cursor.execute("SELECT pg_advisory_unlock(%s);", [lock_id])
        except DatabaseError as e:
            # The session is gone, and the lock with it.
            logger.warning("advisory unlock failed key=%s: %s", key, e)
