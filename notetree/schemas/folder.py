"""
文件夹Schema模型
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class FolderCreate(BaseModel):
    """创建文件夹请求模型"""
    name: str = Field(..., min_length=1, max_length=255, description="文件夹名称")
    parent_id: Optional[int] = Field(None, description="父文件夹ID，为null表示根目录")


class FolderUpdate(BaseModel):
    """
    更新文件夹请求模型

    未出现在请求体中的字段不修改；parent_id 显式传 null 表示移动到根目录。
    通过 model_fields_set 区分"未传"和"传了null"。
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="新文件夹名称")
    parent_id: Optional[int] = Field(None, description="新父文件夹ID，为null表示移动到根目录")


class FolderResponse(BaseModel):
    """文件夹响应模型"""
    id: int
    name: str
    parent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FolderTreeNode(FolderResponse):
    """文件夹树节点模型（支持递归）"""
    notes_count: int = 0
    children: List["FolderTreeNode"] = Field(default_factory=list)


class FolderDeleteResult(BaseModel):
    """删除文件夹结果"""
    success: bool = True
    reattached_folders: int = 0
    reattached_notes: int = 0


# 启用前向引用
FolderTreeNode.model_rebuild()
