"""
业务异常到HTTP响应的转换
"""
from fastapi import Request
from fastapi.responses import JSONResponse

from notetree.core.exceptions import NoteTreeError
from notetree.schemas.common import ResponseModel


async def notetree_error_handler(request: Request, exc: NoteTreeError) -> JSONResponse:
    """把业务异常转换为统一响应格式"""
    return JSONResponse(
        status_code=exc.status_code,
        content=ResponseModel(
            code=exc.status_code,
            message=exc.message,
            data={"error": exc.__class__.__name__, "reason": getattr(exc, "reason", None)}
        ).model_dump()
    )
