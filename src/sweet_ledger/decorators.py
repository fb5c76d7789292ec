from __future__ import annotations

from functools import wraps
from inspect import signature
from typing import Any, Callable, Mapping

from .api import lock


def _resolve_key(
    key: str | Callable[..., str],
    fn: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> str:
    """
    Resolve a lock key from either:
    - a format string: "item:{item_id}"
    - a callable receiving the same arguments as the method (self included)

    Arguments are bound against the method signature so a template can name
    positional and keyword arguments alike.
    """
    if callable(key):
        return key(*args, **kwargs)

    bound = signature(fn).bind_partial(*args, **kwargs)
    bound.apply_defaults()
    values: Mapping[str, Any] = bound.arguments

    try:
        return key.format(**values)
    except KeyError as e:
        missing = e.args[0]
        raise KeyError(
            f"sweet_ledger: key template references '{missing}', "
            f"but it is not present in the method arguments. "
            f"Available: {sorted(values.keys())}"
        ) from e


def serialized(*, key: str | Callable[..., str]):
    """
    Method decorator running the body under a per-key lock.

    The lock backend and timeout are read from the instance's
    ``lock_backend`` and ``lock_timeout`` attributes, so each ledger carries
    its own locking dependency.

    Example
    -------
    class StockLedger:
        @serialized(key="item:{item_id}")
        def decrement(self, item_id, amount):
            ...

    Raises LockAcquireTimeout when the lock is not acquired in time.
    """

    def decorator(fn: Callable[..., Any]):
        @wraps(fn)
        def wrapper(self: Any, *args: Any, **kwargs: Any):
            resolved_key = _resolve_key(key, fn, (self, *args), kwargs)

            with lock(
                resolved_key,
                timeout=self.lock_timeout,
                backend=self.lock_backend,
            ):
                return fn(self, *args, **kwargs)

        return wrapper

    return decorator
