"""
notestore — In-Memory Backend Tests
====================================

What:  The in-memory backend enforces the same account and ownership rules
       as the Firebase project, so NoteStore tests mean something.
"""

import pytest

from notestore.backends.base import note_record_path, user_notes_path, validate_record_key
from notestore.backends.memory import InMemoryBackend
from notestore.exceptions import AuthError, AuthErrorReason, BackendError, ValidationError


class TestAccounts:
    @pytest.mark.asyncio
    async def test_sign_up_then_sign_in(self):
        backend = InMemoryBackend()

        created = await backend.sign_up("alice@example.com", "secret123")
        session = await backend.sign_in("Alice@Example.com", "secret123")

        assert session.user_id == created.user_id
        assert session.id_token != created.id_token

    @pytest.mark.asyncio
    async def test_invalid_email(self):
        with pytest.raises(AuthError) as exc_info:
            await InMemoryBackend().sign_up("not-an-email", "secret123")

        assert exc_info.value.reason is AuthErrorReason.INVALID_EMAIL

    @pytest.mark.asyncio
    async def test_refresh_keeps_user(self):
        backend = InMemoryBackend()
        session = await backend.sign_up("alice@example.com", "secret123")

        refreshed = await backend.refresh(session)

        assert refreshed.user_id == session.user_id
        assert ("refresh", "alice@example.com") in backend.calls


class TestRecords:
    @pytest.fixture
    def backend(self):
        return InMemoryBackend()

    @pytest.mark.asyncio
    async def test_put_get_delete(self, backend):
        session = await backend.sign_up("alice@example.com", "secret123")
        path = note_record_path(session.user_id, "n1")

        await backend.put(path, {"id": "n1", "title": "t"}, session)
        children = await backend.get_children(user_notes_path(session.user_id), session)
        await backend.delete(path, session)

        assert children == {"n1": {"id": "n1", "title": "t"}}
        assert await backend.get_children(user_notes_path(session.user_id), session) == {}

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, backend):
        session = await backend.sign_up("alice@example.com", "secret123")
        await backend.put(note_record_path(session.user_id, "n1"), {"title": "t"}, session)

        children = await backend.get_children(user_notes_path(session.user_id), session)
        children["n1"]["title"] = "mutated"

        again = await backend.get_children(user_notes_path(session.user_id), session)
        assert again["n1"]["title"] == "t"

    @pytest.mark.asyncio
    async def test_other_users_subtree_denied(self, backend):
        alice = await backend.sign_up("alice@example.com", "secret123")
        bob = await backend.sign_up("bob@example.com", "secret123")

        with pytest.raises(BackendError) as exc_info:
            await backend.get_children(user_notes_path(bob.user_id), alice)

        assert exc_info.value.status_code == 401


class TestRecordKeys:
    @pytest.mark.parametrize("key", ["n1", "3f2b9c4e-1d2a-4c8b-9e7f-0a1b2c3d4e5f", "-NxYz_abc"])
    def test_valid_keys(self, key):
        assert validate_record_key(key) == key

    @pytest.mark.parametrize("key", ["", "a/b", "a.b", "a#b", "a$b", "a[0]", "tab\there"])
    def test_invalid_keys(self, key):
        with pytest.raises(ValidationError) as exc_info:
            validate_record_key(key)

        assert exc_info.value.field == "id"

    def test_paths(self):
        assert user_notes_path("u1") == "users/u1/notes"
        assert note_record_path("u1", "n1") == "users/u1/notes/n1"
