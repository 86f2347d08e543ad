"""
应用配置文件
"""
import logging
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """应用配置"""

    # 应用基本配置
    APP_NAME: str = "NoteTree"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DB_USERNAME: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "notetree"
    DB_URL: Optional[str] = None  # 完整连接串，设置后覆盖上面的分项配置
    DB_ISOLATION_LEVEL: Optional[str] = None  # 例如 "SERIALIZABLE"
    AUTO_CREATE_TABLES: bool = True

    # CORS配置
    CORS_ORIGINS: list = ["*"]

    # 文件夹层级配置
    FOLDER_NAME_MAX_LENGTH: int = 255
    FOLDER_MAX_DEPTH: int = 64  # 子树遍历的最大层数
    STRICT_TREE_INTEGRITY: bool = False  # 为True时，构建树遇到孤儿文件夹或父引用环直接报错

    # 笔记和标签配置
    NOTE_TITLE_MAX_LENGTH: int = 255
    TAG_NAME_MAX_LENGTH: int = 100

    @property
    def DATABASE_URL(self) -> str:
        """获取数据库连接URL"""
        if self.DB_URL:
            return self.DB_URL
        return f"postgresql+asyncpg://{self.DB_USERNAME}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()


def setup_logging() -> logging.Logger:
    """配置日志并返回根logger"""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )
    return logging.getLogger("notetree")
