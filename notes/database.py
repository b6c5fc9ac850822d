"""MongoDB operations for per-user notes."""

from typing import Optional

from pymongo import DESCENDING, ReturnDocument

from auth.database import to_object_id
from auth.errors import NotFoundError, ValidationError
from auth.models import utcnow

from .models import Note


def _doc_to_note(doc: Optional[dict]) -> Optional[Note]:
    if not doc:
        return None
    doc["id"] = str(doc.pop("_id"))
    return Note(**doc)


def _clean(title: Optional[str], content: Optional[str]) -> tuple[str, str]:
    title = (title or "").strip()
    content = content or ""
    if not title or not content.strip():
        raise ValidationError("Title and content are required")
    return title, content


class NoteDatabase:
    """Async MongoDB operations for notes. Every query is scoped to one user."""

    def __init__(self, database):
        self._db = database

    @property
    def notes(self):
        """Get notes collection."""
        return self._db.notes

    async def ensure_indexes(self) -> None:
        await self.notes.create_index([("user_id", 1), ("updated_at", DESCENDING)])

    async def create(self, user_id: str, title: str, content: str) -> Note:
        """Create a note owned by ``user_id``."""
        title, content = _clean(title, content)
        now = utcnow()
        doc = {
            "user_id": user_id,
            "title": title,
            "content": content,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.notes.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _doc_to_note(doc)

    async def list_for_user(self, user_id: str) -> list[Note]:
        """List a user's notes, most recently updated first."""
        cursor = self.notes.find({"user_id": user_id}).sort("updated_at", DESCENDING)
        docs = await cursor.to_list(length=None)
        return [_doc_to_note(doc) for doc in docs]

    async def update(
        self, note_id: str, user_id: str, title: str, content: str
    ) -> Note:
        """Replace a note's title and content. Raises NotFoundError if not owned."""
        title, content = _clean(title, content)
        oid = to_object_id(note_id)
        if oid is None:
            raise NotFoundError("Note not found")

        doc = await self.notes.find_one_and_update(
            {"_id": oid, "user_id": user_id},
            {"$set": {"title": title, "content": content, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundError("Note not found")
        return _doc_to_note(doc)

    async def delete(self, note_id: str, user_id: str) -> None:
        """Delete a note. Raises NotFoundError if not owned."""
        oid = to_object_id(note_id)
        if oid is None:
            raise NotFoundError("Note not found")

        result = await self.notes.delete_one({"_id": oid, "user_id": user_id})
        if result.deleted_count == 0:
            raise NotFoundError("Note not found")
