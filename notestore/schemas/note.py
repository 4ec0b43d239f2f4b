"""
notestore — Note Schemas
=========================

What:  Pydantic models for note records and image endpoint payloads.
How:   Records are stored with camelCase keys ("imageUrl", "userId"); the
       models expose snake_case attributes and accept both spellings.
Who:   NoteStore (serialization on save, validation on list) and ImageService.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Records: what is persisted under users/{userId}/notes/{id}
# ══════════════════════════════════════════════════════════════════════════


class Note(BaseModel):
    """
    What:  A user-owned note.
    When:  Built by callers for save(); returned by list_notes()/get_note().

    Lifecycle:
        1. Saved with an empty id → store assigns a UUID4 and the session's user id
        2. Re-saved with the same id → full overwrite of the stored record
        3. Deleted by id → gone; no soft-delete or history

    `title`/`content` are not checked here; blank values are rejected only by
    NoteDraft at the edit boundary.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default="", description="Opaque id, unique per user; empty until saved")
    title: str = Field(default="", description="Display title")
    content: str = Field(default="", description="Note body")
    image_url: Optional[str] = Field(
        default=None,
        alias="imageUrl",
        description="URL returned by the image upload endpoint; None means no attachment",
    )
    user_id: str = Field(
        default="",
        alias="userId",
        description="Owner; overwritten by the store on every save",
    )

    def to_record(self) -> Dict[str, Any]:
        """Serializes to the stored JSON shape (camelCase keys)."""
        return self.model_dump(by_alias=True)


class NoteDraft(BaseModel):
    """
    What:  Input collected by an edit screen before it is turned into a Note.
    How:   Title and content must contain non-whitespace text.

    Example:
        NoteDraft(title="Groceries", content="milk, eggs")
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default="")
    title: str
    content: str
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title and Content cannot be empty")
        return v

    def to_note(self, image_url: Optional[str] = None) -> Note:
        """Builds the Note to save; `image_url` overrides the draft's when given."""
        return Note(
            id=self.id,
            title=self.title,
            content=self.content,
            image_url=image_url if image_url is not None else self.image_url,
        )


# ══════════════════════════════════════════════════════════════════════════
# Image Endpoint Payloads
# ══════════════════════════════════════════════════════════════════════════


class ImageUploadResponse(BaseModel):
    """
    What:  JSON body returned by POST upload.php.

    Example:
        {"success": true, "imageUrl": "http://host/notesapp/uploads/a.jpg", "error": null}
        {"success": false, "imageUrl": null, "error": "disk full"}
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = Field(description="True when the server stored the image")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    error: Optional[str] = Field(default=None, description="Server-side failure reason")

    @property
    def succeeded(self) -> bool:
        """Success requires both the flag and a URL."""
        return self.success and self.image_url is not None
