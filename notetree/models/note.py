"""
笔记模型

updated_at 只在内容被编辑时由服务层写入，文件夹删除导致的迁移不会改变它。
"""
from sqlalchemy import Column, BigInteger, Integer, String, Text, Boolean, TIMESTAMP, ForeignKey, func
from notetree.db.database import Base


class Note(Base):
    __tablename__ = "notes"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")  # 编辑器导出的JSON字符串
    folder_id = Column(BigInteger, ForeignKey("folders.id"), nullable=True, index=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
