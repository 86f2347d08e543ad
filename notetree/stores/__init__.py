from .folder_store import FolderStore
from .note_store import NoteStore
from .tag_store import TagStore
from .unit_of_work import SqlAlchemyUnitOfWork, Stores

__all__ = [
    "FolderStore",
    "NoteStore",
    "SqlAlchemyUnitOfWork",
    "Stores",
    "TagStore",
]
