"""
标签服务
"""
import logging
from typing import Callable, List, Optional

from notetree.core.config import settings
from notetree.core.exceptions import ConflictError, NoteNotFoundError, TagNotFoundError
from notetree.core.types import UNSET
from notetree.models.tag import Tag
from notetree.schemas.common import SuccessResult
from notetree.services.validators import require_text

logger = logging.getLogger(__name__)


class TagManager:
    """标签的增删改查，以及笔记与标签的关联"""

    def __init__(self, unit_of_work: Callable, name_max_length: Optional[int] = None):
        self.unit_of_work = unit_of_work
        self.name_max_length = name_max_length or settings.TAG_NAME_MAX_LENGTH

    def _validate_name(self, name) -> str:
        return require_text(name, "标签名称", self.name_max_length)

    async def create_tag(self, name: str, color: Optional[str] = None) -> Tag:
        """
        创建标签

        Raises:
            ValidationError: 名称为空或过长
            ConflictError: 同名标签已存在
        """
        name = self._validate_name(name)

        async with self.unit_of_work() as stores:
            if await stores.tags.get_by_name(name) is not None:
                raise ConflictError(f"标签 {name} 已存在")
            tag = await stores.tags.insert(name=name, color=color)

        logger.info("Created tag %s (%r)", tag.id, tag.name)
        return tag

    async def get_tag(self, tag_id: int) -> Tag:
        async with self.unit_of_work() as stores:
            tag = await stores.tags.get(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)
        return tag

    async def list_tags(self) -> List[Tag]:
        async with self.unit_of_work() as stores:
            return await stores.tags.list()

    async def update_tag(self, tag_id: int, name=UNSET, color=UNSET) -> Tag:
        """
        更新标签名称和/或颜色，color=None 表示清除颜色

        Raises:
            TagNotFoundError: 标签不存在
            ConflictError: 新名称被其他标签占用
        """
        fields = {}
        if name is not UNSET:
            fields["name"] = self._validate_name(name)
        if color is not UNSET:
            fields["color"] = color

        async with self.unit_of_work() as stores:
            tag = await stores.tags.get(tag_id)
            if tag is None:
                raise TagNotFoundError(tag_id)
            if "name" in fields:
                other = await stores.tags.get_by_name(fields["name"])
                if other is not None and other.id != tag_id:
                    raise ConflictError(f"标签 {fields['name']} 已存在")
            if fields:
                tag = await stores.tags.update(tag_id, fields)

        return tag

    async def delete_tag(self, tag_id: int) -> SuccessResult:
        """删除标签，带有该标签的笔记只解除关联"""
        async with self.unit_of_work() as stores:
            if not await stores.tags.delete(tag_id):
                raise TagNotFoundError(tag_id)

        logger.info("Deleted tag %s", tag_id)
        return SuccessResult(success=True)

    async def add_tag_to_note(self, note_id: int, tag_id: int) -> SuccessResult:
        """
        给笔记添加标签

        Raises:
            NoteNotFoundError: 笔记不存在
            TagNotFoundError: 标签不存在
            ConflictError: 笔记已经带有该标签
        """
        async with self.unit_of_work() as stores:
            if await stores.notes.get(note_id) is None:
                raise NoteNotFoundError(note_id)
            if await stores.tags.get(tag_id) is None:
                raise TagNotFoundError(tag_id)
            if await stores.tags.is_linked(note_id, tag_id):
                raise ConflictError("笔记已经带有该标签")
            await stores.tags.link(note_id, tag_id)

        return SuccessResult(success=True)

    async def remove_tag_from_note(self, note_id: int, tag_id: int) -> SuccessResult:
        """移除笔记上的标签；关联本来就不存在时 success 为 False"""
        async with self.unit_of_work() as stores:
            removed = await stores.tags.unlink(note_id, tag_id)
        return SuccessResult(success=removed)
