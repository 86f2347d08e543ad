"""
文件夹存储 - 纯数据访问，不包含层级校验
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from notetree.models.folder import Folder


class FolderStore:
    """文件夹表的数据访问，所有查询按id升序返回"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(
        self,
        name: str,
        parent_id: Optional[int],
        created_at: datetime,
        updated_at: datetime
    ) -> Folder:
        folder = Folder(
            name=name,
            parent_id=parent_id,
            created_at=created_at,
            updated_at=updated_at
        )
        self.db.add(folder)
        await self.db.flush()
        await self.db.refresh(folder)
        return folder

    async def get(self, folder_id: int, for_update: bool = False) -> Optional[Folder]:
        """
        按ID获取文件夹

        Args:
            folder_id: 文件夹ID
            for_update: 是否加行锁（SELECT ... FOR UPDATE），SQLite下忽略
        """
        stmt = select(Folder).where(Folder.id == folder_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, folder_id: int, fields: Dict[str, Any]) -> Folder:
        folder = await self.get(folder_id)
        for key, value in fields.items():
            setattr(folder, key, value)
        await self.db.flush()
        return folder

    async def delete(self, folder_id: int) -> bool:
        result = await self.db.execute(
            delete(Folder).where(Folder.id == folder_id)
        )
        return result.rowcount > 0

    async def list(self) -> List[Folder]:
        result = await self.db.execute(select(Folder).order_by(Folder.id))
        return list(result.scalars().all())

    async def list_by_parent(self, parent_id: Optional[int]) -> List[Folder]:
        """获取某个父文件夹的直接子文件夹，parent_id为None时返回根文件夹"""
        if parent_id is None:
            condition = Folder.parent_id.is_(None)
        else:
            condition = Folder.parent_id == parent_id
        result = await self.db.execute(
            select(Folder).where(condition).order_by(Folder.id)
        )
        return list(result.scalars().all())

    async def reassign_parent(self, old_parent_id: int, new_parent_id: Optional[int]) -> int:
        """把 old_parent_id 的所有直接子文件夹挂到 new_parent_id 下，返回影响行数"""
        result = await self.db.execute(
            update(Folder)
            .where(Folder.parent_id == old_parent_id)
            .values(parent_id=new_parent_id)
        )
        return result.rowcount
