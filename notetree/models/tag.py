"""
标签模型
"""
from sqlalchemy import Column, BigInteger, Integer, String, TIMESTAMP, ForeignKey, func
from notetree.db.database import Base


class Tag(Base):
    __tablename__ = "tags"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(32), nullable=True)  # 十六进制颜色，例如 #ff8800
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Tag id={self.id} name={self.name!r}>"


class NoteTag(Base):
    """笔记与标签的多对多关联"""
    __tablename__ = "note_tags"

    note_id = Column(BigInteger, ForeignKey("notes.id"), primary_key=True)
    tag_id = Column(BigInteger, ForeignKey("tags.id"), primary_key=True, index=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
