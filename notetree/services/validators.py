"""
输入校验
"""
from notetree.core.exceptions import ValidationError


def require_text(value, label: str, max_length: int) -> str:
    """
    校验非空字符串

    Args:
        value: 待校验的值，纯空白视为空
        label: 出错提示中的字段名称
        max_length: 最大长度

    Raises:
        ValidationError: 为空、不是字符串或超长
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label}不能为空")
    if len(value) > max_length:
        raise ValidationError(f"{label}不能超过{max_length}个字符")
    return value
