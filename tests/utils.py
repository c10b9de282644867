"""Test utilities for short links tests."""

import random
import string
from datetime import datetime
from typing import Any, Dict, Optional

from shortlinks.models.link import Link, utc_now


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8)}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


def create_test_link_data(
    owner_id: str = "owner-a",
    original_url: Optional[str] = None,
    short_code: Optional[str] = None,
    created_at: Optional[datetime] = None
) -> Dict[str, Any]:
    """Create test data dict for a Link."""
    created_at = created_at or utc_now()
    return {
        "owner_id": owner_id,
        "original_url": original_url or random_url(),
        "short_code": short_code or random_string(6),
        "created_at": created_at,
        "updated_at": created_at,
    }


async def create_test_link(
    db,
    owner_id: str = "owner-a",
    original_url: Optional[str] = None,
    short_code: Optional[str] = None,
    created_at: Optional[datetime] = None
) -> Link:
    """Create and persist a test Link in the database."""
    link = Link(**create_test_link_data(
        owner_id=owner_id,
        original_url=original_url,
        short_code=short_code,
        created_at=created_at
    ))
    db.add(link)
    await db.flush()
    await db.refresh(link)
    return link
