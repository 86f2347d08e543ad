"""
标签管理API
"""
from fastapi import APIRouter, Depends, status

from notetree.api.notes import get_note_manager, get_tag_manager
from notetree.core.types import UNSET
from notetree.schemas.common import ResponseModel
from notetree.schemas.tag import TagCreate, TagResponse, TagUpdate
from notetree.services.note_service import NoteManager
from notetree.services.tag_service import TagManager

router = APIRouter(prefix="/api", tags=["标签管理"])


@router.get("/tags", response_model=ResponseModel)
async def list_tags(manager: TagManager = Depends(get_tag_manager)):
    """
    获取全部标签，按名称排序
    """
    tags = await manager.list_tags()
    return ResponseModel(code=200, data=[TagResponse.model_validate(tag) for tag in tags])


@router.get("/tags/{tag_id}", response_model=ResponseModel)
async def get_tag(tag_id: int, manager: TagManager = Depends(get_tag_manager)):
    tag = await manager.get_tag(tag_id)
    return ResponseModel(code=200, data=TagResponse.model_validate(tag))


@router.post("/tags", response_model=ResponseModel, status_code=status.HTTP_201_CREATED)
async def create_tag(tag_data: TagCreate, manager: TagManager = Depends(get_tag_manager)):
    tag = await manager.create_tag(tag_data.name, tag_data.color)
    return ResponseModel(code=201, message="标签创建成功", data=TagResponse.model_validate(tag))


@router.patch("/tags/{tag_id}", response_model=ResponseModel)
async def update_tag(
    tag_id: int,
    update_data: TagUpdate,
    manager: TagManager = Depends(get_tag_manager)
):
    """
    更新标签，color 显式传 null 表示清除颜色
    """
    provided = update_data.model_fields_set
    tag = await manager.update_tag(
        tag_id,
        name=update_data.name if "name" in provided else UNSET,
        color=update_data.color if "color" in provided else UNSET
    )
    return ResponseModel(code=200, message="更新成功", data=TagResponse.model_validate(tag))


@router.delete("/tags/{tag_id}", response_model=ResponseModel)
async def delete_tag(tag_id: int, manager: TagManager = Depends(get_tag_manager)):
    """
    删除标签，笔记只解除关联不会被删除
    """
    result = await manager.delete_tag(tag_id)
    return ResponseModel(code=200, message="删除成功", data=result)


@router.get("/tags/{tag_id}/notes", response_model=ResponseModel)
async def get_tag_notes(tag_id: int, manager: NoteManager = Depends(get_note_manager)):
    notes = await manager.list_notes_by_tag(tag_id)
    return ResponseModel(code=200, data=notes)
