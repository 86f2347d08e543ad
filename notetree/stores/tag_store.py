"""
标签存储
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from notetree.models.tag import NoteTag, Tag


class TagStore:
    """标签表和笔记-标签关联表的数据访问"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, name: str, color: Optional[str] = None) -> Tag:
        tag = Tag(name=name, color=color, created_at=datetime.now(timezone.utc))
        self.db.add(tag)
        await self.db.flush()
        await self.db.refresh(tag)
        return tag

    async def get(self, tag_id: int) -> Optional[Tag]:
        result = await self.db.execute(select(Tag).where(Tag.id == tag_id))
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Optional[Tag]:
        result = await self.db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def list(self) -> List[Tag]:
        result = await self.db.execute(select(Tag).order_by(Tag.name, Tag.id))
        return list(result.scalars().all())

    async def update(self, tag_id: int, fields: Dict[str, Any]) -> Tag:
        tag = await self.get(tag_id)
        for key, value in fields.items():
            setattr(tag, key, value)
        await self.db.flush()
        await self.db.refresh(tag)
        return tag

    async def delete(self, tag_id: int) -> bool:
        """删除标签，同时解除它和所有笔记的关联"""
        await self.db.execute(delete(NoteTag).where(NoteTag.tag_id == tag_id))
        result = await self.db.execute(delete(Tag).where(Tag.id == tag_id))
        return result.rowcount > 0

    async def is_linked(self, note_id: int, tag_id: int) -> bool:
        result = await self.db.execute(
            select(NoteTag).where(NoteTag.note_id == note_id, NoteTag.tag_id == tag_id)
        )
        return result.scalar_one_or_none() is not None

    async def link(self, note_id: int, tag_id: int) -> None:
        self.db.add(NoteTag(note_id=note_id, tag_id=tag_id, created_at=datetime.now(timezone.utc)))
        await self.db.flush()

    async def unlink(self, note_id: int, tag_id: int) -> bool:
        result = await self.db.execute(
            delete(NoteTag).where(NoteTag.note_id == note_id, NoteTag.tag_id == tag_id)
        )
        return result.rowcount > 0
