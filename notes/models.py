"""Pydantic models for notes."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class Note(BaseModel):
    """Note model stored in MongoDB."""

    id: str
    user_id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime


class NoteOut(BaseModel):
    """Note returned to its owner."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    content: str
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_note(cls, note: Note) -> "NoteOut":
        return cls(
            id=note.id,
            title=note.title,
            content=note.content,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )
