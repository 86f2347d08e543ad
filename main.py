"""
NoteTree - FastAPI应用主入口
"""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from notetree.api import folders, notes, tags
from notetree.api.errors import notetree_error_handler
from notetree.core.config import settings, setup_logging
from notetree.core.exceptions import NoteTreeError
from notetree.db.database import get_db, init_db

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        await init_db()
        logger.info("Database tables ensured")
    yield


# 创建FastAPI应用
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="笔记、文件夹层级与标签管理API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)

# 注册路由
app.include_router(folders.router)
app.include_router(notes.router)
app.include_router(tags.router)
app.add_exception_handler(NoteTreeError, notetree_error_handler)


@app.get("/")
async def root():
    """根路径"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "message": "NoteTree后端API正在运行"
    }


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """健康检查（包含数据库连通性）"""
    await db.execute(text("SELECT 1"))
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
