"""Record id generation shared by the storage backends."""

import uuid
from datetime import datetime


def generate_id(prefix: str) -> str:
    """
    Build a record id such as ``PO1024-3f9a1c2e``.

    Prefix, then month and two-digit year, then a random suffix.
    """
    now = datetime.now()
    return f"{prefix}{now:%m%y}-{uuid.uuid4().hex[:8]}"
