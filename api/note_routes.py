"""Note routes. Every request is scoped to the authenticated user."""

import logging

from fastapi import APIRouter, Depends, Request, HTTPException, status
from pydantic import BaseModel

from auth.middleware import require_auth
from auth.models import TokenClaims
from notes.database import NoteDatabase
from notes.models import NoteOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["notes"])


class NoteRequest(BaseModel):
    title: str = ""
    content: str = ""


def get_note_db(request: Request) -> NoteDatabase:
    note_db = getattr(request.app.state, "note_db", None)
    if not note_db:
        raise HTTPException(status_code=503, detail="Database not available")
    return note_db


def _dump(note) -> dict:
    return NoteOut.from_note(note).model_dump(by_alias=True, mode="json")


@router.get("")
async def list_notes(
    claims: TokenClaims = Depends(require_auth),
    note_db: NoteDatabase = Depends(get_note_db),
):
    notes = await note_db.list_for_user(claims.user_id)
    return {"notes": [_dump(note) for note in notes]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteRequest,
    claims: TokenClaims = Depends(require_auth),
    note_db: NoteDatabase = Depends(get_note_db),
):
    note = await note_db.create(claims.user_id, payload.title, payload.content)
    logger.info(f"Note {note.id} created for user {claims.user_id}")
    return {"message": "Note created successfully", "note": _dump(note)}


@router.put("/{note_id}")
async def update_note(
    note_id: str,
    payload: NoteRequest,
    claims: TokenClaims = Depends(require_auth),
    note_db: NoteDatabase = Depends(get_note_db),
):
    note = await note_db.update(note_id, claims.user_id, payload.title, payload.content)
    return {"message": "Note updated successfully", "note": _dump(note)}


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    claims: TokenClaims = Depends(require_auth),
    note_db: NoteDatabase = Depends(get_note_db),
):
    await note_db.delete(note_id, claims.user_id)
    logger.info(f"Note {note_id} deleted for user {claims.user_id}")
    return {"message": "Note deleted successfully"}
