"""
业务异常

每种异常对应调用方可区分的一种结果，API层据此返回不同的状态码和提示。
"""
from typing import Optional


class NoteTreeError(Exception):
    """业务异常基类"""

    status_code: int = 400
    default_message: str = "操作失败"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(NoteTreeError):
    """输入不合法（例如名称为空），不会访问存储"""

    status_code = 422
    default_message = "文件夹名称不能为空"


class NotFoundError(NoteTreeError):
    """目标文件夹不存在"""

    status_code = 404
    default_message = "文件夹不存在"

    def __init__(self, folder_id: Optional[int] = None, message: Optional[str] = None):
        self.folder_id = folder_id
        super().__init__(message)


class ParentNotFoundError(NotFoundError):
    """指定的父文件夹（或笔记所属文件夹）不存在"""

    default_message = "父文件夹不存在"


class NoteNotFoundError(NotFoundError):
    default_message = "笔记不存在"


class TagNotFoundError(NotFoundError):
    default_message = "标签不存在"


class ConflictError(NoteTreeError):
    """与已有数据冲突（重复的标签名、重复关联）"""

    status_code = 409
    default_message = "数据已存在"


class InvariantError(NoteTreeError):
    """移动操作会破坏树结构（自引用、循环或层级过深）"""

    status_code = 409

    SELF_PARENT = "self-parent"
    DESCENDANT_AS_PARENT = "descendant-as-parent"
    DEPTH_EXCEEDED = "depth-exceeded"

    MESSAGES = {
        SELF_PARENT: "不能移动到自己下面",
        DESCENDANT_AS_PARENT: "不能移动到自己的子文件夹下",
        DEPTH_EXCEEDED: "文件夹层级过深，无法确认移动是否安全",
    }

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or self.MESSAGES.get(reason, reason))


class IntegrityViolationError(NoteTreeError):
    """存储中的数据已违反层级约束（父文件夹引用悬空或存在环）"""

    status_code = 500
    default_message = "文件夹数据不一致"


class StoreError(NoteTreeError):
    """底层存储失败（连接、约束等），原始异常保存在 __cause__ 中"""

    status_code = 503
    default_message = "数据库操作失败"
