"""Deterministic dataset identifiers derived from volume names."""

import hashlib
import uuid

# Fixed namespace; never derived from caller input
DATASET_NAMESPACE = uuid.UUID(int=0)


def dataset_id_from_name(name: str) -> str:
    """
    Return the dataset UUID for a volume name.

    md5 over namespace + name, stamped as a version 4 / RFC 4122 UUID. The
    result is a durable key on the control service, so this must stay
    bit-for-bit compatible with every other client deriving the same ids.
    """
    digest = hashlib.md5(DATASET_NAMESPACE.bytes + name.encode("utf-8")).digest()
    return str(uuid.UUID(bytes=digest[:16], version=4))
