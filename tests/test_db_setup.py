"""Basic tests to verify test DB setup."""

import pytest
from sqlalchemy import select, text

from shortlinks.models.link import Link


@pytest.mark.asyncio
async def test_create_tables(test_db):
    """Verify the links table is created and usable."""
    result = await test_db.execute(text("SELECT name FROM sqlite_master WHERE type='table' AND name='links'"))
    tables = [row[0] for row in result.fetchall()]
    assert "links" in tables

    link = Link(
        owner_id="owner-a",
        original_url="https://example.com",
        short_code="test123",
    )

    test_db.add(link)
    await test_db.commit()

    result = await test_db.execute(select(Link).where(Link.short_code == "test123"))
    retrieved = result.scalars().first()

    assert retrieved is not None
    assert retrieved.id is not None
    assert retrieved.owner_id == "owner-a"
    assert retrieved.original_url == "https://example.com"
    assert retrieved.created_at is not None
    assert retrieved.updated_at is not None


@pytest.mark.asyncio
async def test_short_code_index_is_unique(test_engine):
    """The short code carries a unique index; the owner listing index is plain."""
    async with test_engine.connect() as conn:
        result = await conn.execute(text("PRAGMA index_list('links')"))
        indexes = {row[1]: bool(row[2]) for row in result.fetchall()}

    assert indexes["ix_links_short_code"] is True
    assert indexes["ix_links_owner_id_created_at"] is False
