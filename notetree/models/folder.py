"""
文件夹模型
"""
from sqlalchemy import Column, BigInteger, Integer, String, TIMESTAMP, ForeignKey, func
from notetree.db.database import Base


class Folder(Base):
    __tablename__ = "folders"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(BigInteger, ForeignKey("folders.id"), nullable=True, index=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Folder id={self.id} name={self.name!r} parent_id={self.parent_id}>"
