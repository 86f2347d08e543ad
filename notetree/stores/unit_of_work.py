"""
工作单元：一次会话 + 一个事务，同时提供文件夹、笔记和标签存储
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notetree.core.exceptions import StoreError
from notetree.stores.folder_store import FolderStore
from notetree.stores.note_store import NoteStore
from notetree.stores.tag_store import TagStore

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    """绑定在同一个事务上的存储"""
    folders: FolderStore
    notes: NoteStore
    tags: Optional[TagStore] = None


class SqlAlchemyUnitOfWork:
    """
    基于 async_sessionmaker 的工作单元工厂

    每次调用返回一个新的事务上下文：正常退出时提交，
    任何异常都会回滚；SQLAlchemy 异常统一转换为 StoreError。
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator[Stores]:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield self._stores(session)
        except SQLAlchemyError as e:
            logger.exception("Transaction failed")
            raise StoreError(f"数据库操作失败: {e.__class__.__name__}") from e

    @staticmethod
    def _stores(session: AsyncSession) -> Stores:
        return Stores(
            folders=FolderStore(session),
            notes=NoteStore(session),
            tags=TagStore(session)
        )
