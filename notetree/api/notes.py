"""
笔记管理API
"""
from fastapi import APIRouter, Depends, status

from notetree.core.types import UNSET
from notetree.db.database import AsyncSessionLocal
from notetree.schemas.common import ResponseModel
from notetree.schemas.note import NoteCreate, NoteSearch, NoteUpdate
from notetree.services.note_service import NoteManager
from notetree.services.tag_service import TagManager
from notetree.stores.unit_of_work import SqlAlchemyUnitOfWork

router = APIRouter(prefix="/api", tags=["笔记管理"])


def get_note_manager() -> NoteManager:
    return NoteManager(SqlAlchemyUnitOfWork(AsyncSessionLocal))


def get_tag_manager() -> TagManager:
    return TagManager(SqlAlchemyUnitOfWork(AsyncSessionLocal))


@router.get("/notes", response_model=ResponseModel)
async def list_notes(manager: NoteManager = Depends(get_note_manager)):
    """
    获取全部笔记，按更新时间倒序
    """
    return ResponseModel(code=200, data=await manager.list_notes())


@router.get("/notes/favorites", response_model=ResponseModel)
async def list_favorite_notes(manager: NoteManager = Depends(get_note_manager)):
    return ResponseModel(code=200, data=await manager.list_favorite_notes())


@router.get("/notes/root", response_model=ResponseModel)
async def list_root_notes(manager: NoteManager = Depends(get_note_manager)):
    """
    获取不在任何文件夹中的笔记
    """
    return ResponseModel(code=200, data=await manager.list_notes_in_folder(None))


@router.post("/notes/search", response_model=ResponseModel)
async def search_notes(
    search_data: NoteSearch,
    manager: NoteManager = Depends(get_note_manager)
):
    """
    搜索笔记

    folder_id 不传搜索全部笔记，传 null 只搜索根级笔记。
    """
    notes = await manager.search_notes(
        search_data.query,
        folder_id=search_data.folder_id if "folder_id" in search_data.model_fields_set else UNSET,
        tag_ids=search_data.tag_ids,
        favorites_only=search_data.favorites_only
    )
    return ResponseModel(code=200, data=notes)


@router.get("/notes/{note_id}", response_model=ResponseModel)
async def get_note(note_id: int, manager: NoteManager = Depends(get_note_manager)):
    return ResponseModel(code=200, data=await manager.get_note(note_id))


@router.post("/notes", response_model=ResponseModel, status_code=status.HTTP_201_CREATED)
async def create_note(
    note_data: NoteCreate,
    manager: NoteManager = Depends(get_note_manager)
):
    """
    创建笔记
    """
    note = await manager.create_note(
        note_data.title,
        content=note_data.content,
        folder_id=note_data.folder_id,
        is_favorite=note_data.is_favorite
    )
    return ResponseModel(code=201, message="笔记创建成功", data=note)


@router.patch("/notes/{note_id}", response_model=ResponseModel)
async def update_note(
    note_id: int,
    update_data: NoteUpdate,
    manager: NoteManager = Depends(get_note_manager)
):
    """
    更新笔记，请求体中未出现的字段保持不变
    """
    provided = update_data.model_fields_set
    fields = {
        name: getattr(update_data, name) if name in provided else UNSET
        for name in ("title", "content", "folder_id", "is_favorite")
    }
    note = await manager.update_note(note_id, **fields)
    return ResponseModel(code=200, message="更新成功", data=note)


@router.delete("/notes/{note_id}", response_model=ResponseModel)
async def delete_note(note_id: int, manager: NoteManager = Depends(get_note_manager)):
    """
    删除笔记及其标签关联
    """
    result = await manager.delete_note(note_id)
    return ResponseModel(code=200, message="删除成功", data=result)


@router.post("/notes/{note_id}/tags/{tag_id}", response_model=ResponseModel)
async def add_tag_to_note(
    note_id: int,
    tag_id: int,
    manager: TagManager = Depends(get_tag_manager)
):
    result = await manager.add_tag_to_note(note_id, tag_id)
    return ResponseModel(code=200, message="标签添加成功", data=result)


@router.delete("/notes/{note_id}/tags/{tag_id}", response_model=ResponseModel)
async def remove_tag_from_note(
    note_id: int,
    tag_id: int,
    manager: TagManager = Depends(get_tag_manager)
):
    result = await manager.remove_tag_from_note(note_id, tag_id)
    return ResponseModel(code=200, data=result)
