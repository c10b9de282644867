"""Tests for the link repository."""

import pytest
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from shortlinks.models.link import Link, LinkCreate
from shortlinks.repositories.link_repository import LinkRepository, DuplicateEntityError
from tests.utils import create_test_link, random_url


async def count_links(db) -> int:
    result = await db.execute(select(func.count()).select_from(Link))
    return result.scalar_one()


@pytest.mark.repository
class TestLinkRepository:
    """Test suite for the link repository."""

    @pytest.fixture
    def link_repository(self):
        """Return link repository instance."""
        return LinkRepository()

    @pytest.mark.asyncio
    async def test_insert_link(self, test_db, link_repository):
        """Test link creation."""
        test_url = random_url()

        link = await link_repository.insert(test_db, {
            "owner_id": "owner-a",
            "original_url": test_url,
            "short_code": "testcreate",
        })

        assert link.id is not None
        assert link.owner_id == "owner-a"
        assert link.original_url == test_url
        assert link.short_code == "testcreate"
        assert link.created_at is not None
        assert link.updated_at is not None

        db_link = await link_repository.find_by_short_code(test_db, "testcreate")
        assert db_link is not None
        assert db_link.id == link.id

    @pytest.mark.asyncio
    async def test_insert_from_schema(self, test_db, link_repository):
        """The create schema has no owner; the owner is added by the caller."""
        data = LinkCreate(original_url="https://example.com", short_code="fromschema")

        link = await link_repository.insert(test_db, {**data.model_dump(), "owner_id": "owner-a"})

        assert link.short_code == "fromschema"

    @pytest.mark.asyncio
    async def test_insert_duplicate_short_code(self, test_db, link_repository):
        """Test duplicate short code handling."""
        await create_test_link(test_db, short_code="duplicate")

        with pytest.raises(DuplicateEntityError) as exc_info:
            await link_repository.insert(test_db, {
                "owner_id": "owner-b",
                "original_url": random_url(),
                "short_code": "duplicate",
            })

        assert exc_info.value.field_name == "short_code"
        assert exc_info.value.value == "duplicate"

    @pytest.mark.asyncio
    async def test_session_usable_after_duplicate(self, test_db, link_repository):
        """Only the failed insert is rolled back; earlier work in the transaction survives."""
        await create_test_link(test_db, short_code="first")

        with pytest.raises(DuplicateEntityError):
            await link_repository.insert(test_db, {
                "owner_id": "owner-a",
                "original_url": random_url(),
                "short_code": "first",
            })

        await link_repository.insert(test_db, {
            "owner_id": "owner-a",
            "original_url": random_url(),
            "short_code": "second",
        })
        await test_db.commit()

        assert await count_links(test_db) == 2

    @pytest.mark.asyncio
    async def test_find_by_short_code(self, test_db, link_repository):
        """Test link retrieval by code."""
        test_link = await create_test_link(test_db, short_code="testget")

        db_link = await link_repository.find_by_short_code(test_db, "testget")

        assert db_link is not None
        assert db_link.id == test_link.id
        assert db_link.original_url == test_link.original_url

    @pytest.mark.asyncio
    async def test_find_by_short_code_is_exact(self, test_db, link_repository):
        """Codes are matched exactly, including case."""
        await create_test_link(test_db, short_code="CaseCode")

        assert await link_repository.find_by_short_code(test_db, "casecode") is None
        assert await link_repository.find_by_short_code(test_db, "nonexistent") is None

    @pytest.mark.asyncio
    async def test_find_by_owner(self, test_db, link_repository):
        """Listing is scoped to the owner and ordered newest first."""
        now = datetime.now(timezone.utc)
        await create_test_link(test_db, owner_id="owner-a", short_code="oldest", created_at=now - timedelta(days=2))
        await create_test_link(test_db, owner_id="owner-a", short_code="newest", created_at=now)
        await create_test_link(test_db, owner_id="owner-a", short_code="middle", created_at=now - timedelta(days=1))
        await create_test_link(test_db, owner_id="owner-b", short_code="others")

        links = await link_repository.find_by_owner(test_db, "owner-a")

        assert [link.short_code for link in links] == ["newest", "middle", "oldest"]
        assert all(link.owner_id == "owner-a" for link in links)

    @pytest.mark.asyncio
    async def test_find_by_owner_without_links(self, test_db, link_repository):
        await create_test_link(test_db, owner_id="owner-a")

        assert await link_repository.find_by_owner(test_db, "owner-b") == []

    @pytest.mark.asyncio
    async def test_update_link(self, test_db, link_repository):
        """Both fields are replaced and updated_at moves forward."""
        created_at = datetime.now(timezone.utc) - timedelta(days=1)
        test_link = await create_test_link(test_db, short_code="before", created_at=created_at)

        updated = await link_repository.update(
            test_db,
            test_link.id,
            {"original_url": "https://example.org/new", "short_code": "after"},
        )

        assert updated is not None
        assert updated.id == test_link.id
        assert updated.original_url == "https://example.org/new"
        assert updated.short_code == "after"
        assert updated.updated_at.replace(tzinfo=None) > created_at.replace(tzinfo=None)
        assert updated.created_at.replace(tzinfo=None) == created_at.replace(tzinfo=None)

        assert await link_repository.find_by_short_code(test_db, "before") is None
        assert (await link_repository.find_by_short_code(test_db, "after")).id == test_link.id

    @pytest.mark.asyncio
    async def test_update_ignores_other_fields(self, test_db, link_repository):
        """Owner and ID cannot be changed through an update."""
        test_link = await create_test_link(test_db, owner_id="owner-a", short_code="keepowner")

        updated = await link_repository.update(
            test_db,
            test_link.id,
            {"owner_id": "owner-b", "id": 999, "short_code": "keepowner2"},
        )

        assert updated.owner_id == "owner-a"
        assert updated.id == test_link.id

    @pytest.mark.asyncio
    async def test_update_nonexistent(self, test_db, link_repository):
        updated = await link_repository.update(
            test_db, 9999, {"original_url": random_url(), "short_code": "ghost"}
        )

        assert updated is None

    @pytest.mark.asyncio
    async def test_update_with_owner_filter(self, test_db, link_repository):
        """A row owned by someone else is neither matched nor changed."""
        test_link = await create_test_link(test_db, owner_id="owner-a", short_code="mine")
        original_url = test_link.original_url

        updated = await link_repository.update(
            test_db,
            test_link.id,
            {"original_url": "https://evil.example.com", "short_code": "stolen"},
            owner_id="owner-b",
        )

        assert updated is None
        await test_db.refresh(test_link)
        assert test_link.short_code == "mine"
        assert test_link.original_url == original_url

    @pytest.mark.asyncio
    async def test_update_duplicate_short_code(self, test_db, link_repository):
        await create_test_link(test_db, short_code="taken")
        test_link = await create_test_link(test_db, short_code="free")

        with pytest.raises(DuplicateEntityError):
            await link_repository.update(
                test_db, test_link.id, {"original_url": random_url(), "short_code": "taken"}
            )

        await test_db.refresh(test_link)
        assert test_link.short_code == "free"

    @pytest.mark.asyncio
    async def test_update_keeping_own_code(self, test_db, link_repository):
        """Re-submitting a link's own code is not a conflict."""
        test_link = await create_test_link(test_db, short_code="samecode")

        updated = await link_repository.update(
            test_db, test_link.id, {"original_url": "https://example.com/x", "short_code": "samecode"}
        )

        assert updated.short_code == "samecode"
        assert updated.original_url == "https://example.com/x"

    @pytest.mark.asyncio
    async def test_delete_link(self, test_db, link_repository):
        """The deleted record is returned and the code no longer resolves."""
        test_link = await create_test_link(test_db, short_code="testdelete")

        deleted = await link_repository.delete(test_db, test_link.id)

        assert deleted is not None
        assert deleted.id == test_link.id
        assert deleted.short_code == "testdelete"
        assert await link_repository.find_by_short_code(test_db, "testdelete") is None

    @pytest.mark.asyncio
    async def test_delete_nonexistent(self, test_db, link_repository):
        assert await link_repository.delete(test_db, 9999) is None

    @pytest.mark.asyncio
    async def test_delete_with_owner_filter(self, test_db, link_repository):
        test_link = await create_test_link(test_db, owner_id="owner-a", short_code="protected")

        deleted = await link_repository.delete(test_db, test_link.id, owner_id="owner-b")

        assert deleted is None
        assert await link_repository.find_by_short_code(test_db, "protected") is not None

    @pytest.mark.asyncio
    async def test_check_short_code_exists(self, test_db, link_repository):
        await create_test_link(test_db, short_code="exists")

        assert await link_repository.check_short_code_exists(test_db, "exists") is True
        assert await link_repository.check_short_code_exists(test_db, "missing") is False

    @pytest.mark.asyncio
    async def test_get_by_id(self, test_db, link_repository):
        test_link = await create_test_link(test_db)

        assert (await link_repository.get_by_id(test_db, test_link.id)).short_code == test_link.short_code
        assert await link_repository.get_by_id(test_db, 9999) is None
