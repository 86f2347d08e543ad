"""
笔记服务

笔记通过 folder_id 挂在文件夹层级上，写入前总是确认文件夹存在。
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from notetree.core.config import settings
from notetree.core.exceptions import (
    NoteNotFoundError,
    NotFoundError,
    ParentNotFoundError,
    TagNotFoundError,
    ValidationError,
)
from notetree.core.types import UNSET
from notetree.schemas.common import SuccessResult
from notetree.schemas.note import NoteResponse
from notetree.schemas.tag import TagResponse
from notetree.services.folder_service import utcnow
from notetree.services.validators import require_text

logger = logging.getLogger(__name__)


class NoteManager:
    """
    笔记管理

    Args:
        unit_of_work: 与 FolderHierarchyManager 相同的工作单元工厂
        title_max_length: 标题最大长度
    """

    def __init__(
        self,
        unit_of_work: Callable,
        title_max_length: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.unit_of_work = unit_of_work
        self.title_max_length = title_max_length or settings.NOTE_TITLE_MAX_LENGTH
        self.clock = clock

    def _validate_title(self, title) -> str:
        return require_text(title, "笔记标题", self.title_max_length)

    @staticmethod
    async def _ensure_folder(stores, folder_id: Optional[int]):
        if folder_id is not None and await stores.folders.get(folder_id) is None:
            raise ParentNotFoundError(folder_id, "所属文件夹不存在")

    @staticmethod
    async def _with_tags(stores, notes) -> List[NoteResponse]:
        tags = await stores.notes.tags_for_notes(note.id for note in notes)
        return [
            NoteResponse(
                id=note.id,
                title=note.title,
                content=note.content,
                folder_id=note.folder_id,
                is_favorite=note.is_favorite,
                created_at=note.created_at,
                updated_at=note.updated_at,
                tags=[TagResponse.model_validate(tag) for tag in tags[note.id]]
            )
            for note in notes
        ]

    async def create_note(
        self,
        title: str,
        content: str = "",
        folder_id: Optional[int] = None,
        is_favorite: bool = False
    ) -> NoteResponse:
        """
        创建笔记

        Raises:
            ValidationError: 标题为空或过长
            ParentNotFoundError: 指定的文件夹不存在
        """
        title = self._validate_title(title)

        async with self.unit_of_work() as stores:
            await self._ensure_folder(stores, folder_id)
            now = self.clock()
            note = await stores.notes.insert(
                title=title,
                content=content or "",
                folder_id=folder_id,
                is_favorite=is_favorite,
                created_at=now,
                updated_at=now
            )
            response = (await self._with_tags(stores, [note]))[0]

        logger.info("Created note %s in folder %s", note.id, folder_id)
        return response

    async def get_note(self, note_id: int) -> NoteResponse:
        async with self.unit_of_work() as stores:
            note = await stores.notes.get(note_id)
            if note is None:
                raise NoteNotFoundError(note_id)
            return (await self._with_tags(stores, [note]))[0]

    async def list_notes(self) -> List[NoteResponse]:
        async with self.unit_of_work() as stores:
            return await self._with_tags(stores, await stores.notes.list())

    async def list_favorite_notes(self) -> List[NoteResponse]:
        async with self.unit_of_work() as stores:
            return await self._with_tags(stores, await stores.notes.list(favorites_only=True))

    async def list_notes_in_folder(self, folder_id: Optional[int]) -> List[NoteResponse]:
        """
        获取文件夹下的笔记（不含子文件夹中的笔记）

        Args:
            folder_id: 文件夹ID，None表示不在任何文件夹中的根级笔记

        Raises:
            NotFoundError: 文件夹不存在
        """
        async with self.unit_of_work() as stores:
            if folder_id is not None and await stores.folders.get(folder_id) is None:
                raise NotFoundError(folder_id)
            notes = await stores.notes.list(folder_id=folder_id)
            return await self._with_tags(stores, notes)

    async def list_notes_by_tag(self, tag_id: int) -> List[NoteResponse]:
        async with self.unit_of_work() as stores:
            if await stores.tags.get(tag_id) is None:
                raise TagNotFoundError(tag_id)
            return await self._with_tags(stores, await stores.notes.list_by_tag(tag_id))

    async def update_note(
        self,
        note_id: int,
        title=UNSET,
        content=UNSET,
        folder_id=UNSET,
        is_favorite=UNSET
    ) -> NoteResponse:
        """
        更新笔记

        只修改显式传入的字段；folder_id=None 表示移出文件夹。
        updated_at 总是刷新。

        Raises:
            ValidationError: 标题为空，或 content / is_favorite 传了 None
            NoteNotFoundError: 笔记不存在
            ParentNotFoundError: 新文件夹不存在
        """
        fields = {}
        if title is not UNSET:
            fields["title"] = self._validate_title(title)
        if content is not UNSET:
            if content is None:
                raise ValidationError("笔记内容不能为null")
            fields["content"] = content
        if is_favorite is not UNSET:
            if is_favorite is None:
                raise ValidationError("收藏状态不能为null")
            fields["is_favorite"] = bool(is_favorite)
        if folder_id is not UNSET:
            fields["folder_id"] = folder_id

        async with self.unit_of_work() as stores:
            if await stores.notes.get(note_id, for_update=True) is None:
                raise NoteNotFoundError(note_id)
            if folder_id is not UNSET:
                await self._ensure_folder(stores, folder_id)

            fields["updated_at"] = self.clock()
            note = await stores.notes.update(note_id, fields)
            response = (await self._with_tags(stores, [note]))[0]

        logger.info("Updated note %s (%s)", note_id, ", ".join(sorted(fields)))
        return response

    async def delete_note(self, note_id: int) -> SuccessResult:
        """
        删除笔记及其标签关联

        Raises:
            NoteNotFoundError: 笔记不存在（包括已经删除过）
        """
        async with self.unit_of_work() as stores:
            if not await stores.notes.delete(note_id):
                raise NoteNotFoundError(note_id)

        logger.info("Deleted note %s", note_id)
        return SuccessResult(success=True)

    async def search_notes(
        self,
        query: str,
        folder_id=UNSET,
        tag_ids: Sequence[int] = (),
        favorites_only: bool = False
    ) -> List[NoteResponse]:
        """
        搜索笔记

        Args:
            query: 关键词，在标题和内容中不区分大小写匹配
            folder_id: UNSET 搜索全部，None 只搜索根级笔记
            tag_ids: 笔记必须同时带有的标签
            favorites_only: 只搜索收藏的笔记

        Raises:
            ValidationError: 关键词为空
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("搜索关键词不能为空")

        async with self.unit_of_work() as stores:
            notes = await stores.notes.search(
                query,
                folder_id=folder_id,
                tag_ids=tag_ids or (),
                favorites_only=favorites_only
            )
            return await self._with_tags(stores, notes)
