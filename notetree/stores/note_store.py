"""
笔记存储
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select, update, delete, func, or_, case, desc
from sqlalchemy.ext.asyncio import AsyncSession

from notetree.core.types import UNSET
from notetree.models.note import Note
from notetree.models.tag import NoteTag, Tag


class NoteStore:
    """笔记表的数据访问，列表默认按 updated_at 倒序"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(
        self,
        title: str,
        content: str = "",
        folder_id: Optional[int] = None,
        is_favorite: bool = False,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ) -> Note:
        now = datetime.now(timezone.utc)
        note = Note(
            title=title,
            content=content,
            folder_id=folder_id,
            is_favorite=is_favorite,
            created_at=created_at or now,
            updated_at=updated_at or now
        )
        self.db.add(note)
        await self.db.flush()
        await self.db.refresh(note)
        return note

    async def get(self, note_id: int, for_update: bool = False) -> Optional[Note]:
        query = select(Note).where(Note.id == note_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update(self, note_id: int, fields: Dict[str, Any]) -> Note:
        note = await self.get(note_id)
        for key, value in fields.items():
            setattr(note, key, value)
        await self.db.flush()
        await self.db.refresh(note)
        return note

    async def delete(self, note_id: int) -> bool:
        """删除笔记及其标签关联，返回是否删除了笔记"""
        await self.db.execute(delete(NoteTag).where(NoteTag.note_id == note_id))
        result = await self.db.execute(delete(Note).where(Note.id == note_id))
        return result.rowcount > 0

    @staticmethod
    def _filter(query, folder_id=UNSET, favorites_only: bool = False):
        # folder_id: UNSET 不过滤，None 只要根级笔记
        if folder_id is None:
            query = query.where(Note.folder_id.is_(None))
        elif folder_id is not UNSET:
            query = query.where(Note.folder_id == folder_id)
        if favorites_only:
            query = query.where(Note.is_favorite.is_(True))
        return query

    async def list(self, folder_id=UNSET, favorites_only: bool = False) -> List[Note]:
        query = self._filter(select(Note), folder_id, favorites_only)
        result = await self.db.execute(query.order_by(desc(Note.updated_at), desc(Note.id)))
        return list(result.scalars().all())

    async def list_by_tag(self, tag_id: int) -> List[Note]:
        result = await self.db.execute(
            select(Note)
            .join(NoteTag, NoteTag.note_id == Note.id)
            .where(NoteTag.tag_id == tag_id)
            .order_by(desc(Note.updated_at), desc(Note.id))
        )
        return list(result.scalars().all())

    async def search(
        self,
        query: str,
        folder_id=UNSET,
        tag_ids: Sequence[int] = (),
        favorites_only: bool = False
    ) -> List[Note]:
        """
        按标题和内容模糊搜索（不区分大小写）

        标题命中得10分，内容命中得5分，按得分、再按 updated_at 倒序。
        tag_ids 非空时笔记必须带有全部指定标签。
        """
        pattern = f"%{query}%"
        title_hit = Note.title.ilike(pattern)
        content_hit = Note.content.ilike(pattern)
        relevance = case((title_hit, 10), else_=0) + case((content_hit, 5), else_=0)

        stmt = self._filter(select(Note), folder_id, favorites_only).where(or_(title_hit, content_hit))
        for tag_id in set(tag_ids):
            stmt = stmt.where(
                Note.id.in_(select(NoteTag.note_id).where(NoteTag.tag_id == tag_id))
            )

        result = await self.db.execute(
            stmt.order_by(desc(relevance), desc(Note.updated_at), desc(Note.id))
        )
        return list(result.scalars().all())

    async def tags_for_notes(self, note_ids: Iterable[int]) -> Dict[int, List[Tag]]:
        """一次查询取出多篇笔记的标签，标签按名称排序"""
        note_ids = list(note_ids)
        tags: Dict[int, List[Tag]] = {note_id: [] for note_id in note_ids}
        if not note_ids:
            return tags
        result = await self.db.execute(
            select(NoteTag.note_id, Tag)
            .join(Tag, Tag.id == NoteTag.tag_id)
            .where(NoteTag.note_id.in_(note_ids))
            .order_by(Tag.name)
        )
        for note_id, tag in result.all():
            tags[note_id].append(tag)
        return tags

    async def count_by_folder(self, folder_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Note.id)).where(Note.folder_id == folder_id)
        )
        return result.scalar_one()

    async def count_all_by_folder(self) -> Dict[int, int]:
        """一次查询统计每个文件夹下的笔记数，不在文件夹中的笔记不计入"""
        result = await self.db.execute(
            select(Note.folder_id, func.count(Note.id))
            .where(Note.folder_id.is_not(None))
            .group_by(Note.folder_id)
        )
        return {folder_id: count for folder_id, count in result.all()}

    async def reassign_folder(self, old_folder_id: int, new_folder_id: Optional[int]) -> int:
        """批量修改笔记所属文件夹，返回影响行数；不改变 updated_at"""
        result = await self.db.execute(
            update(Note)
            .where(Note.folder_id == old_folder_id)
            .values(folder_id=new_folder_id)
        )
        return result.rowcount
