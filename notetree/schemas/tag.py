"""
标签Schema模型
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class TagCreate(BaseModel):
    """创建标签请求模型"""
    name: str = Field(..., min_length=1, max_length=100, description="标签名称，全局唯一")
    color: Optional[str] = Field(None, max_length=32, description="颜色，例如 #ff8800")


class TagUpdate(BaseModel):
    """更新标签请求模型，未传的字段不修改；color 显式传 null 表示清除颜色"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=32)


class TagResponse(BaseModel):
    """标签响应模型"""
    id: int
    name: str
    color: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
