"""Personal notes for notekeep."""

from .models import Note, NoteOut
from .database import NoteDatabase

__all__ = ["Note", "NoteOut", "NoteDatabase"]
