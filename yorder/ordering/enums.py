"""排序引擎枚举"""

from enum import Enum


class MovePosition(str, Enum):
    """移动的相对位置

    - BEFORE: 移到目标记录之前
    - AFTER: 移到目标记录之后
    - FIRST: 移到范围内最前
    - LAST: 移到范围内最后
    """

    BEFORE = "before"
    AFTER = "after"
    FIRST = "first"
    LAST = "last"

    @property
    def requires_target(self) -> bool:
        """是否需要目标记录"""
        return self in (MovePosition.BEFORE, MovePosition.AFTER)


class SortDirection(str, Enum):
    """排序方向"""

    ASC = "asc"
    DESC = "desc"
