"""Shared test fixtures and configuration."""

import copy
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

# Tests never connect to a real PostgreSQL
os.environ.setdefault("DB_URL", "sqlite+aiosqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notetree.core.exceptions import StoreError
from notetree.db.database import build_engine, init_db
from notetree.services.folder_service import FolderHierarchyManager
from notetree.services.note_service import NoteManager
from notetree.services.tag_service import TagManager
from notetree.stores.unit_of_work import SqlAlchemyUnitOfWork, Stores


@dataclass
class FolderRow:
    id: int
    name: str
    parent_id: Optional[int]
    created_at: datetime
    updated_at: datetime


@dataclass
class NoteRow:
    id: int
    title: str
    folder_id: Optional[int]


class InMemoryFolderStore:
    def __init__(self, db):
        self.db = db

    async def insert(self, name, parent_id, created_at, updated_at):
        row = FolderRow(self.db.next_id(), name, parent_id, created_at, updated_at)
        self.db.folders[row.id] = row
        return row

    async def get(self, folder_id, for_update=False):
        return self.db.folders.get(folder_id)

    async def update(self, folder_id, fields):
        row = self.db.folders[folder_id]
        for key, value in fields.items():
            setattr(row, key, value)
        return row

    async def delete(self, folder_id):
        return self.db.folders.pop(folder_id, None) is not None

    async def list(self):
        return [self.db.folders[k] for k in sorted(self.db.folders)]

    async def list_by_parent(self, parent_id):
        return [f for f in await self.list() if f.parent_id == parent_id]

    async def reassign_parent(self, old_parent_id, new_parent_id):
        self.db.maybe_fail("reassign_parent")
        moved = 0
        for row in self.db.folders.values():
            if row.parent_id == old_parent_id:
                row.parent_id = new_parent_id
                moved += 1
        return moved


class InMemoryNoteStore:
    def __init__(self, db):
        self.db = db

    async def insert(self, title, content="", folder_id=None, is_favorite=False):
        row = NoteRow(self.db.next_id(), title, folder_id)
        self.db.notes[row.id] = row
        return row

    async def get(self, note_id):
        return self.db.notes.get(note_id)

    async def count_by_folder(self, folder_id):
        return sum(1 for n in self.db.notes.values() if n.folder_id == folder_id)

    async def count_all_by_folder(self):
        counts = {}
        for n in self.db.notes.values():
            if n.folder_id is not None:
                counts[n.folder_id] = counts.get(n.folder_id, 0) + 1
        return counts

    async def reassign_folder(self, old_folder_id, new_folder_id):
        self.db.maybe_fail("reassign_folder")
        moved = 0
        for row in self.db.notes.values():
            if row.folder_id == old_folder_id:
                row.folder_id = new_folder_id
                moved += 1
        return moved


class InMemoryDatabase:
    """In-memory unit of work: snapshot on enter, restore on any exception."""

    def __init__(self):
        self.folders = {}
        self.notes = {}
        self._last_id = 0
        self.fail_on = None

    def next_id(self):
        self._last_id += 1
        return self._last_id

    def maybe_fail(self, operation):
        if self.fail_on == operation:
            raise StoreError(f"simulated failure in {operation}")

    @asynccontextmanager
    async def __call__(self):
        snapshot = copy.deepcopy((self.folders, self.notes, self._last_id))
        try:
            yield Stores(folders=InMemoryFolderStore(self), notes=InMemoryNoteStore(self))
        except BaseException:
            self.folders, self.notes, self._last_id = snapshot
            raise

    def add_folder(self, name, parent_id=None, folder_id=None):
        """Insert a row directly, bypassing validation (for corrupt-data tests)."""
        now = datetime.now(timezone.utc)
        row = FolderRow(folder_id or self.next_id(), name, parent_id, now, now)
        self.folders[row.id] = row
        return row

    def add_note(self, title, folder_id=None):
        row = NoteRow(self.next_id(), title, folder_id)
        self.notes[row.id] = row
        return row


@pytest.fixture
def memory_db():
    """Provide an empty in-memory database."""
    return InMemoryDatabase()


@pytest.fixture
def memory_manager(memory_db):
    """FolderHierarchyManager over the in-memory database."""
    return FolderHierarchyManager(memory_db, max_depth=64, name_max_length=255, strict_tree=False)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """SQLite engine with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'notetree.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def unit_of_work(session_factory):
    return SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture
def sql_manager(unit_of_work):
    """FolderHierarchyManager over the SQLite database."""
    return FolderHierarchyManager(unit_of_work, max_depth=64, name_max_length=255, strict_tree=False)


class TickingClock:
    """Clock that advances one second per call, so updated_at ordering is deterministic."""

    def __init__(self, start=datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def note_manager(unit_of_work):
    """NoteManager over the SQLite database with a ticking clock."""
    return NoteManager(unit_of_work, title_max_length=255, clock=TickingClock())


@pytest.fixture
def tag_manager(unit_of_work):
    """TagManager over the SQLite database."""
    return TagManager(unit_of_work, name_max_length=100)
