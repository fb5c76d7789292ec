import hashlib


def key_to_int64(key: str) -> int:
    """
    Convert a lock key into a stable signed 64-bit integer.

    PostgreSQL advisory locks are identified by a BIGINT, while the ledger
    names its critical sections with strings such as "item:<uuid>". The key is
    hashed with BLAKE2b (8-byte digest) so every process maps the same item to
    the same lock id, then shifted into the signed range PostgreSQL expects
    (-2^63 to 2^63-1).

    Parameters
    ----------
    key : str
        Lock key string.

    Returns
    -------
    int
        Signed 64-bit integer suitable for pg_advisory_lock.
    """
    digest = hashlib.blake2b(key.encode("utf-8"), digest_size=8).digest()
    value = int.from_bytes(digest, byteorder="big", signed=False)

    if value >= 2**63:
        value -= 2**64

    return value

