import threading


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class LocalLockBackend:
    """
    In-process lock backend: one ``threading.Lock`` per key.

    Entries are created on first use and dropped once no thread holds or waits
    for them, so the table only grows with the number of items under
    contention at the same moment.

    Timeout behavior
    ----------------
    - timeout=None: blocks until the lock is acquired.
    - timeout=float: waits at most that many seconds.

    Limitations
    -----------
    Mutual exclusion covers threads of the current process only. Use
    `PostgresAdvisoryLockBackend` when several workers share one database.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def acquire(self, key: str, timeout: float | None) -> bool:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1

        if timeout is None:
            acquired = entry.lock.acquire()
        else:
            acquired = entry.lock.acquire(timeout=max(timeout, 0))

        if not acquired:
            self._forget(key, entry)
        return acquired

    def release(self, key: str) -> None:
        with self._guard:
            entry = self._entries.get(key)
        if entry is None:
            return
        entry.lock.release()
        self._forget(key, entry)

    def held_keys(self) -> list[str]:
        """Keys that currently have a holder or a waiter."""
        with self._guard:
            return sorted(self._entries)

    def _forget(self, key: str, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]
