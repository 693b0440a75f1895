"""事务状态枚举

定义事务的生命周期状态
"""

from enum import Enum


class TransactionState(str, Enum):
    """事务状态

    状态转换图:

        INACTIVE → ACTIVE → COMMITTED
                      ↓
                  ROLLED_BACK
                      ↓
                   FAILED
    """

    INACTIVE = "inactive"
    """未激活状态：事务尚未开始"""

    ACTIVE = "active"
    """活跃状态：事务正在进行中"""

    COMMITTED = "committed"
    """已提交状态：事务已成功提交到数据库"""

    ROLLED_BACK = "rolled_back"
    """已回滚状态：事务已被回滚"""

    FAILED = "failed"
    """失败状态：提交或回滚过程中发生错误"""

    def can_rollback(self) -> bool:
        """判断是否可以回滚"""
        return self in (TransactionState.ACTIVE, TransactionState.FAILED)
