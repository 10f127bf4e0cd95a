"""Unit tests for the contest service."""

import asyncio

import pytest

from backend.app.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ReasonCode,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from backend.app.db.base import ContestDatabase

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class TestRegistration:
    """Tests for register and login."""

    async def test_register_first_user_gets_id_one(self, service):
        user = await service.register("alice", "alice@corp.test", "secret123", origin_address="10.0.0.1")

        assert user.id == 1
        assert user.origin_address == "10.0.0.1"
        assert user.password_hash != "secret123"

    async def test_register_foreign_domain_rejected(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.register("bob", "bob@other.test", "secret123")

        assert exc_info.value.reason == ReasonCode.DOMAIN_NOT_ALLOWED
        assert len(service.db.users) == 0

    async def test_register_duplicates_rejected(self, service, alice):
        with pytest.raises(ConflictError) as exc_info:
            await service.register("alice2", "alice@corp.test", "secret123")
        assert exc_info.value.reason == ReasonCode.EMAIL_TAKEN

        with pytest.raises(ConflictError) as exc_info:
            await service.register("alice", "alice2@corp.test", "secret123")
        assert exc_info.value.reason == ReasonCode.USERNAME_TAKEN

    async def test_register_persists_users(self, service, store):
        await service.register("alice", "alice@corp.test", "secret123")
        assert store.load("users")[0]["username"] == "alice"

    async def test_login(self, service, alice):
        user, token = await service.login("alice@corp.test", "secret123")

        assert user.id == alice.id
        assert service.authenticate(token).id == alice.id

    async def test_login_email_case_insensitive(self, service, alice):
        user, _ = await service.login("ALICE@corp.test", "secret123")
        assert user.id == alice.id

    @pytest.mark.parametrize("email, password", [("alice@corp.test", "wrong"), ("nobody@corp.test", "secret123")])
    async def test_login_invalid_credentials(self, service, alice, email, password):
        with pytest.raises(UnauthorizedError) as exc_info:
            await service.login(email, password)
        assert exc_info.value.reason == ReasonCode.INVALID_CREDENTIALS

    async def test_token_of_deleted_user_rejected(self, service, alice):
        token = service.issue_token(alice)
        await service.delete_account(alice.id, alice.id)

        with pytest.raises(UnauthorizedError):
            service.authenticate(token)


class TestEntries:
    """Tests for entry creation and deletion."""

    async def test_one_entry_per_user(self, service, alice):
        fox = await service.create_entry(alice.id, "Fox", "A clever fox")
        assert fox.votes == 0

        with pytest.raises(ConflictError) as exc_info:
            await service.create_entry(alice.id, "Wolf", "A wolf")

        assert exc_info.value.reason == ReasonCode.ENTRY_ALREADY_EXISTS
        assert [e.name for e, _ in service.list_entries()] == ["Fox"]

    async def test_rejected_entry_discards_upload(self, service, media, alice):
        await service.create_entry(alice.id, "Fox", "A clever fox")
        ref = media.save("wolf.png", "image/png", PNG)

        with pytest.raises(ConflictError):
            await service.create_entry(alice.id, "Wolf", "A wolf", image_ref=ref)

        assert not media.path_for(ref).exists()

    async def test_owner_deletes_entry(self, service, media, alice, bob):
        ref = media.save("fox.png", "image/png", PNG)
        fox = await service.create_entry(alice.id, "Fox", "A clever fox", image_ref=ref)
        await service.cast_vote(bob.id, fox.id)

        report = await service.delete_entry(alice.id, fox.id)

        assert report.removed_entry_ids == [fox.id]
        assert service.list_votes_by_user(bob.id) == []
        assert not media.path_for(ref).exists()

    async def test_delete_entry_persists_entries_and_votes(self, service, store, alice, bob):
        fox = await service.create_entry(alice.id, "Fox", "A clever fox")
        await service.cast_vote(bob.id, fox.id)

        await service.delete_entry(alice.id, fox.id)

        assert store.load("entries") == []
        assert store.load("votes") == []

    async def test_non_owner_cannot_delete(self, service, alice, bob):
        fox = await service.create_entry(alice.id, "Fox", "A clever fox")

        with pytest.raises(ForbiddenError) as exc_info:
            await service.delete_entry(bob.id, fox.id)

        assert exc_info.value.reason == ReasonCode.NOT_ENTRY_OWNER
        assert service.db.entries.find_by_id(fox.id) is not None

    async def test_delete_missing_entry(self, service, alice):
        with pytest.raises(NotFoundError):
            await service.delete_entry(alice.id, 42)

    async def test_user_can_submit_again_after_deleting(self, service, alice):
        fox = await service.create_entry(alice.id, "Fox", "A clever fox")
        await service.delete_entry(alice.id, fox.id)

        wolf = await service.create_entry(alice.id, "Wolf", "A wolf")
        assert wolf.id != fox.id


class TestVoting:
    """Tests for casting and withdrawing votes."""

    @pytest.fixture
    async def fox(self, service, alice):
        return await service.create_entry(alice.id, "Fox", "A clever fox")

    async def test_vote_increments_counter(self, service, bob, fox):
        assert await service.cast_vote(bob.id, fox.id, origin_address="10.0.0.2") == 1
        assert service.db.entries.find_by_id(fox.id).votes == 1
        assert service.list_votes_by_user(bob.id)[0].origin_address == "10.0.0.2"

    async def test_second_vote_rejected(self, service, bob, fox):
        await service.cast_vote(bob.id, fox.id)

        with pytest.raises(ConflictError) as exc_info:
            await service.cast_vote(bob.id, fox.id)

        assert exc_info.value.reason == ReasonCode.ALREADY_VOTED
        assert fox.votes == 1

    async def test_self_vote_rejected(self, service, alice, fox):
        with pytest.raises(ForbiddenError) as exc_info:
            await service.cast_vote(alice.id, fox.id)

        assert exc_info.value.reason == ReasonCode.SELF_VOTE
        assert fox.votes == 0

    async def test_vote_missing_entry(self, service, bob):
        with pytest.raises(NotFoundError) as exc_info:
            await service.cast_vote(bob.id, 99)
        assert exc_info.value.reason == ReasonCode.ENTRY_NOT_FOUND

    async def test_withdraw_decrements_once(self, service, bob, fox):
        await service.cast_vote(bob.id, fox.id)

        assert await service.withdraw_vote(bob.id, fox.id) == 0

        with pytest.raises(NotFoundError) as exc_info:
            await service.withdraw_vote(bob.id, fox.id)
        assert exc_info.value.reason == ReasonCode.VOTE_NOT_FOUND

    async def test_withdraw_floors_counter_at_zero(self, service, bob, fox):
        await service.cast_vote(bob.id, fox.id)
        fox.votes = 0  # drifted cache

        assert await service.withdraw_vote(bob.id, fox.id) == 0

    async def test_concurrent_duplicate_votes_count_once(self, service, bob, fox):
        """Two simultaneous votes for the same pair cannot both pass the check."""
        results = await asyncio.gather(
            service.cast_vote(bob.id, fox.id),
            service.cast_vote(bob.id, fox.id),
            return_exceptions=True,
        )

        assert sorted(type(r).__name__ for r in results) == ["ConflictError", "int"]
        assert fox.votes == 1
        assert service.db.votes.count_for_entry(fox.id) == 1

    async def test_concurrent_votes_from_many_users(self, service, fox):
        voters = [await service.register(f"user{i}", f"user{i}@corp.test", "secret123") for i in range(5)]

        await asyncio.gather(*(service.cast_vote(v.id, fox.id) for v in voters))

        assert fox.votes == 5
        assert service.db.votes.count_for_entry(fox.id) == 5


class TestAccountDeletion:
    """Tests for delete_account."""

    async def test_removes_entry_and_all_votes(self, service, store, alice, bob):
        fox = await service.create_entry(alice.id, "Fox", "A clever fox")
        wolf = await service.create_entry(bob.id, "Wolf", "A wolf")
        await service.cast_vote(bob.id, fox.id)
        await service.cast_vote(alice.id, wolf.id)

        await service.delete_account(alice.id, alice.id)

        assert service.db.users.find_by_id(alice.id) is None
        assert service.db.entries.find_by_id(fox.id) is None
        assert service.db.votes.all() == []
        assert service.db.entries.find_by_id(wolf.id).votes == 0
        assert [u["username"] for u in store.load("users")] == ["bob"]

    async def test_only_account_holder(self, service, alice, bob):
        with pytest.raises(ForbiddenError) as exc_info:
            await service.delete_account(bob.id, alice.id)
        assert exc_info.value.reason == ReasonCode.NOT_ACCOUNT_HOLDER

    async def test_missing_account(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_account(7, 7)


def orphans(db) -> list:
    """Entries and votes that reference a user or entry that no longer exists."""
    user_ids = {u.id for u in db.users.all()}
    entry_ids = {e.id for e in db.entries.all()}
    return [e for e in db.entries.all() if e.user_id not in user_ids] + [
        v for v in db.votes.all() if v.user_id not in user_ids or v.entry_id not in entry_ids
    ]


class TestConcurrentDeletion:
    """Mutations queued behind a deletion see the state the deletion left."""

    @pytest.fixture
    async def fox(self, service, alice):
        return await service.create_entry(alice.id, "Fox", "A clever fox")

    async def test_vote_after_account_deletion_rejected(self, service, bob, fox):
        results = await asyncio.gather(
            service.delete_account(bob.id, bob.id),
            service.cast_vote(bob.id, fox.id),
            return_exceptions=True,
        )

        assert isinstance(results[1], UnauthorizedError)
        assert results[1].reason == ReasonCode.INVALID_TOKEN
        assert orphans(service.db) == []
        assert fox.votes == 0

    async def test_entry_after_account_deletion_rejected(self, service, media, bob):
        ref = media.save("wolf.png", "image/png", PNG)

        results = await asyncio.gather(
            service.delete_account(bob.id, bob.id),
            service.create_entry(bob.id, "Wolf", "A wolf", image_ref=ref),
            return_exceptions=True,
        )

        assert isinstance(results[1], UnauthorizedError)
        assert service.db.entries.find_by_owner(bob.id) is None
        assert orphans(service.db) == []
        assert not media.path_for(ref).exists()

    async def test_withdraw_after_account_deletion_rejected(self, service, bob, fox):
        await service.cast_vote(bob.id, fox.id)

        results = await asyncio.gather(
            service.delete_account(bob.id, bob.id),
            service.withdraw_vote(bob.id, fox.id),
            return_exceptions=True,
        )

        assert isinstance(results[1], UnauthorizedError)
        assert fox.votes == 0
        assert service.db.votes.all() == []

    async def test_withdraw_after_entry_deletion_rejected(self, service, alice, bob, fox):
        await service.cast_vote(bob.id, fox.id)

        results = await asyncio.gather(
            service.delete_entry(alice.id, fox.id),
            service.withdraw_vote(bob.id, fox.id),
            return_exceptions=True,
        )

        assert isinstance(results[1], NotFoundError)
        assert results[1].reason == ReasonCode.ENTRY_NOT_FOUND
        assert service.db.votes.all() == []
        assert orphans(service.db) == []

    async def test_vote_before_account_deletion_is_cascaded(self, service, bob, fox):
        results = await asyncio.gather(
            service.cast_vote(bob.id, fox.id),
            service.delete_account(bob.id, bob.id),
            return_exceptions=True,
        )

        assert results[0] == 1
        assert orphans(service.db) == []
        assert fox.votes == service.db.votes.count_for_entry(fox.id) == 0


class TestQueries:
    """Tests for read-only operations."""

    async def test_list_entries_with_creator(self, service, alice, bob):
        await service.create_entry(bob.id, "Wolf", "A wolf")
        await service.create_entry(alice.id, "Fox", "A clever fox")

        assert [(e.name, creator) for e, creator in service.list_entries()] == [
            ("Wolf", "bob"),
            ("Fox", "alice"),
        ]

    async def test_list_entries_unknown_creator(self, service, alice):
        await service.create_entry(alice.id, "Fox", "A clever fox")
        service.db.users.remove(alice.id)

        assert service.list_entries()[0][1] == "Unknown"

    async def test_get_user_with_and_without_entry(self, service, alice):
        user, entry = service.get_user(alice.id)
        assert user.id == alice.id
        assert entry is None

        await service.create_entry(alice.id, "Fox", "A clever fox")
        _, entry = service.get_user(alice.id)
        assert entry.name == "Fox"

    def test_get_missing_user(self, service):
        with pytest.raises(NotFoundError):
            service.get_user(1)

    async def test_list_origins(self, service, alice, bob):
        fox = await service.create_entry(alice.id, "Fox", "d", origin_address="10.0.0.1")
        await service.cast_vote(bob.id, fox.id, origin_address="10.0.0.2")

        origins = {(o.kind, o.origin_address) for o in service.list_origins()}
        assert ("entry", "10.0.0.1") in origins
        assert ("vote", "10.0.0.2") in origins


class TestPersistence:
    """Tests for store interaction."""

    async def test_state_survives_reload(self, service, store, alice, bob):
        fox = await service.create_entry(alice.id, "Fox", "A clever fox")
        await service.cast_vote(bob.id, fox.id)

        reloaded = ContestDatabase(store)
        reloaded.load()

        assert reloaded.entries.find_by_id(fox.id).votes == 1
        assert reloaded.votes.find(bob.id, fox.id) is not None
        assert reloaded.users.find_by_email("bob@corp.test").id == bob.id

    async def test_storage_failure_leaves_memory_ahead_of_disk(self, service, store, alice, bob, monkeypatch):
        fox = await service.create_entry(alice.id, "Fox", "A clever fox")

        def failing_save(collection, records):
            raise StorageError(collection, "save", OSError("disk full"))

        monkeypatch.setattr(store, "save", failing_save)

        with pytest.raises(StorageError):
            await service.cast_vote(bob.id, fox.id)

        # Applied in memory, not on disk
        assert fox.votes == 1
        assert store.load("votes") == []

        # The rule still holds against the in-memory state
        monkeypatch.undo()
        with pytest.raises(ConflictError):
            await service.cast_vote(bob.id, fox.id)

    async def test_locks_released_after_rejection(self, service, alice, bob):
        fox = await service.create_entry(alice.id, "Fox", "A clever fox")

        with pytest.raises(ForbiddenError):
            await service.cast_vote(alice.id, fox.id)

        assert await asyncio.wait_for(service.cast_vote(bob.id, fox.id), timeout=1) == 1
