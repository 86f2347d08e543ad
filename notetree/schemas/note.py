"""
笔记Schema模型
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from notetree.schemas.tag import TagResponse


class NoteCreate(BaseModel):
    """创建笔记请求模型"""
    title: str = Field(..., min_length=1, max_length=255, description="笔记标题")
    content: str = Field("", description="编辑器导出的JSON字符串")
    folder_id: Optional[int] = Field(None, description="所属文件夹ID，为null表示不在任何文件夹中")
    is_favorite: bool = Field(False, description="是否收藏")


class NoteUpdate(BaseModel):
    """
    更新笔记请求模型

    未出现在请求体中的字段不修改；folder_id 显式传 null 表示移出文件夹。
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    folder_id: Optional[int] = None
    is_favorite: Optional[bool] = None


class NoteSearch(BaseModel):
    """
    搜索请求模型

    folder_id 不传表示搜索全部笔记，显式传 null 表示只搜索根级笔记。
    """
    query: str = Field(..., min_length=1, description="搜索关键词")
    folder_id: Optional[int] = None
    tag_ids: List[int] = Field(default_factory=list, description="必须同时带有的标签")
    favorites_only: bool = False


class NoteResponse(BaseModel):
    """笔记响应模型（含标签）"""
    id: int
    title: str
    content: str
    folder_id: Optional[int] = None
    is_favorite: bool
    created_at: datetime
    updated_at: datetime
    tags: List[TagResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True
