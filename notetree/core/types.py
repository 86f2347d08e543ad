"""
通用类型
"""


class _Unset:
    """更新时"未传入"的占位值，与显式的 None 区分"""

    def __repr__(self):
        return "UNSET"


UNSET = _Unset()
