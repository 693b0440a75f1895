"""事务管理模块

提供事务管理功能：
- 上下文管理器方式获取事务，正常退出提交，异常回滚
- 已在事务中时加入外层事务
- 提交抑制机制（事务上下文中自动忽略 commit=True）

使用示例:
    from yorder.orm import transaction_manager as tm

    with tm.transaction() as tx:
        nav.sort_order = 15
        nav.save()
"""

from .state import TransactionState
from .exceptions import (
    TransactionError,
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
)
from .context import TransactionContext
from .manager import (
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)

__all__ = [
    "TransactionState",
    "TransactionError",
    "TransactionNotActiveError",
    "TransactionAlreadyCommittedError",
    "TransactionAlreadyRolledBackError",
    "TransactionContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
]
