# Schemas package init
"""
notestore — Schemas
====================

What:  Pydantic models for the records and payloads notestore exchanges.

    - Note / NoteDraft:     the note record and the edit-boundary input
    - ImageUploadResponse:  JSON answer of the image upload endpoint
    - Session:              the authenticated-user context
"""
