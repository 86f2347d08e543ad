"""
文件夹管理API
"""
from fastapi import APIRouter, Depends, status

from notetree.api.notes import get_note_manager
from notetree.core.types import UNSET
from notetree.db.database import AsyncSessionLocal
from notetree.schemas.common import ResponseModel
from notetree.schemas.folder import FolderCreate, FolderResponse, FolderUpdate
from notetree.services.folder_service import FolderHierarchyManager
from notetree.services.note_service import NoteManager
from notetree.stores.unit_of_work import SqlAlchemyUnitOfWork

router = APIRouter(prefix="/api", tags=["文件夹管理"])


def get_folder_manager() -> FolderHierarchyManager:
    """
    获取文件夹层级服务依赖
    """
    return FolderHierarchyManager(SqlAlchemyUnitOfWork(AsyncSessionLocal))


@router.get("/folders", response_model=ResponseModel)
async def get_folder_tree(manager: FolderHierarchyManager = Depends(get_folder_manager)):
    """
    获取文件夹树（含每个文件夹的笔记数量）
    """
    tree = await manager.get_folder_tree()
    return ResponseModel(code=200, data=tree)


@router.get("/folders/{folder_id}", response_model=ResponseModel)
async def get_folder(
    folder_id: int,
    manager: FolderHierarchyManager = Depends(get_folder_manager)
):
    folder = await manager.get_folder(folder_id)
    return ResponseModel(code=200, data=FolderResponse.model_validate(folder))


@router.get("/folders/{folder_id}/notes", response_model=ResponseModel)
async def get_folder_notes(
    folder_id: int,
    manager: NoteManager = Depends(get_note_manager)
):
    """
    获取文件夹下的笔记（不含子文件夹），按更新时间倒序
    """
    notes = await manager.list_notes_in_folder(folder_id)
    return ResponseModel(code=200, data=notes)


@router.post("/folders", response_model=ResponseModel, status_code=status.HTTP_201_CREATED)
async def create_folder(
    folder_data: FolderCreate,
    manager: FolderHierarchyManager = Depends(get_folder_manager)
):
    """
    创建文件夹
    """
    folder = await manager.create_folder(folder_data.name, folder_data.parent_id)
    return ResponseModel(
        code=201,
        message="文件夹创建成功",
        data=FolderResponse.model_validate(folder)
    )


@router.patch("/folders/{folder_id}", response_model=ResponseModel)
async def update_folder(
    folder_id: int,
    update_data: FolderUpdate,
    manager: FolderHierarchyManager = Depends(get_folder_manager)
):
    """
    重命名和/或移动文件夹

    请求体中未出现的字段保持不变。
    """
    provided = update_data.model_fields_set
    folder = await manager.update_folder(
        folder_id,
        name=update_data.name if "name" in provided else UNSET,
        parent_id=update_data.parent_id if "parent_id" in provided else UNSET
    )
    return ResponseModel(
        code=200,
        message="更新成功",
        data=FolderResponse.model_validate(folder)
    )


@router.delete("/folders/{folder_id}", response_model=ResponseModel)
async def delete_folder(
    folder_id: int,
    manager: FolderHierarchyManager = Depends(get_folder_manager)
):
    """
    删除文件夹，子文件夹和笔记移动到上一级
    """
    result = await manager.delete_folder(folder_id)
    return ResponseModel(code=200, message="删除成功", data=result)
