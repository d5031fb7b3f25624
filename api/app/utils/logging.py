import hashlib
from typing import Optional


def mask_identity(value: Optional[str]) -> str:
    """
    Mask a user id or session token before it is written to the logs.

    The same input always produces the same short fingerprint, so log lines
    for one caller can still be correlated without storing the raw value.
    """
    if not value:
        return "<none>"
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()
    return f"id:{digest[:10]}"
