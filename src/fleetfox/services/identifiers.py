"""Identifier generation for sessions and images."""

import secrets
import string
from datetime import UTC, datetime
from uuid import uuid4

_BASE36 = string.digits + string.ascii_uppercase


def generate_simple_id(prefix: str, now: datetime | None = None) -> str:
    """Build a readable id such as ``TASK_20250101_AB12``."""
    stamp = (now or datetime.now(tz=UTC)).strftime("%Y%m%d")
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{prefix}_{stamp}_{suffix}"


def generate_image_id() -> str:
    """Return an opaque unique image id."""
    return str(uuid4())
