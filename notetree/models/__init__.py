from .folder import Folder
from .note import Note
from .tag import NoteTag, Tag

__all__ = [
    "Folder",
    "Note",
    "NoteTag",
    "Tag",
]
