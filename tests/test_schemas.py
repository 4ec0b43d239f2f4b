"""
notestore — Schema and Result Tests
====================================

What:  Tests for Note / NoteDraft / ImageUploadResponse / Session and the
       Ok / Err result values.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from notestore.exceptions import BackendError
from notestore.result import Err, Ok
from notestore.schemas.note import ImageUploadResponse, Note, NoteDraft
from notestore.schemas.session import EXPIRY_LEEWAY, Session


class TestNote:
    def test_defaults(self):
        note = Note()

        assert (note.id, note.title, note.content, note.image_url, note.user_id) == (
            "",
            "",
            "",
            None,
            "",
        )

    def test_accepts_stored_camel_case(self):
        note = Note.model_validate(
            {"id": "n1", "title": "t", "content": "c", "imageUrl": "http://x/a.jpg", "userId": "u1"}
        )

        assert note.image_url == "http://x/a.jpg"
        assert note.user_id == "u1"

    def test_unknown_fields_ignored(self):
        note = Note.model_validate({"id": "n1", "timestamp": 1700000000})

        assert note.id == "n1"

    def test_missing_fields_default(self):
        """Older records without imageUrl or userId still load."""
        note = Note.model_validate({"id": "n1", "title": "t"})

        assert note.content == ""
        assert note.image_url is None

    def test_to_record_uses_stored_keys(self):
        record = Note(id="n1", title="t", content="c", user_id="u1").to_record()

        assert record == {"id": "n1", "title": "t", "content": "c", "imageUrl": None, "userId": "u1"}


class TestNoteDraft:
    @pytest.mark.parametrize("title, content", [("", "c"), ("t", ""), ("  ", "c"), ("t", "\n\t")])
    def test_blank_values_rejected(self, title, content):
        with pytest.raises(PydanticValidationError, match="Title and Content cannot be empty"):
            NoteDraft(title=title, content=content)

    def test_to_note_keeps_existing_image(self):
        draft = NoteDraft(id="n1", title="t", content="c", image_url="http://x/old.jpg")

        assert draft.to_note().image_url == "http://x/old.jpg"

    def test_to_note_prefers_new_image(self):
        draft = NoteDraft(title="t", content="c", image_url="http://x/old.jpg")

        note = draft.to_note(image_url="http://x/new.jpg")

        assert note.image_url == "http://x/new.jpg"
        assert note.id == ""


class TestImageUploadResponse:
    def test_success(self):
        parsed = ImageUploadResponse.model_validate(
            {"success": True, "imageUrl": "http://x/a.jpg", "error": None}
        )

        assert parsed.succeeded

    def test_success_flag_without_url(self):
        assert not ImageUploadResponse(success=True).succeeded

    def test_failure(self):
        parsed = ImageUploadResponse.model_validate({"success": False, "error": "disk full"})

        assert not parsed.succeeded
        assert parsed.error == "disk full"


class TestSession:
    def test_without_expiry_never_expires(self):
        assert not Session(user_id="u1").is_expired()

    def test_expiry_includes_leeway(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session = Session(user_id="u1", expires_at=now + EXPIRY_LEEWAY - timedelta(seconds=1))

        assert session.is_expired(now=now)
        assert not session.is_expired(now=now - timedelta(seconds=2))

    def test_expiry_from_seconds(self):
        before = datetime.now(timezone.utc)

        expires_at = Session.expiry_from_seconds("3600")

        assert before + timedelta(seconds=3599) < expires_at
        assert Session.expiry_from_seconds(None) is None
        assert Session.expiry_from_seconds("") is None

    def test_tokens_hidden_from_repr(self):
        session = Session(user_id="u1", id_token="secret-id", refresh_token="secret-refresh")

        assert "secret-id" not in repr(session)
        assert "secret-refresh" not in repr(session)

    def test_frozen(self):
        session = Session(user_id="u1")

        with pytest.raises(PydanticValidationError):
            session.user_id = "u2"


class TestResult:
    def test_ok(self):
        result = Ok(5)

        assert result.is_ok() and not result.is_err()
        assert result.unwrap() == 5
        assert result.unwrap_or(0) == 5
        assert result.error is None

    def test_err(self):
        error = BackendError("Permission denied")
        result = Err(error)

        assert result.is_err() and not result.is_ok()
        assert result.unwrap_or([]) == []
        assert result.message == "Permission denied"
        with pytest.raises(BackendError):
            result.unwrap()

    def test_equality(self):
        assert Ok(None) == Ok(None)
        assert Ok("a") != Ok("b")
