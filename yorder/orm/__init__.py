"""ORM模块

提供排序引擎依赖的 ORM 基础设施：
- CoreModel: 核心模型基类（ID、时间戳、CRUD）
- 数据库会话管理（db_manager、init_database、db_session_scope）
- 事务管理（transaction_manager）
- 相对位置排序扩展（OrderFieldMixin、OrderableMixin）

使用示例:
    from yorder.orm import CoreModel, OrderFieldMixin, OrderableMixin, init_database

    init_database("sqlite:///./app.db")

    class Navigation(CoreModel, OrderFieldMixin, OrderableMixin):
        __tablename__ = "navigation"
        name: Mapped[str] = mapped_column(String(50))

    Navigation.get(5).move_after(Navigation.get(3))
"""

from .core_model import CoreModel, Base
from .utils import to_snake_case
from .db_session import (
    # 管理器单例
    db_manager,
    # 公开 API
    init_database,
    get_engine,
    get_db,
    on_request_end,
    db_session_scope,
)
from .transaction import (
    TransactionState,
    TransactionError,
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
    TransactionContext,
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)
from .orderable import OrderFieldMixin, OrderableMixin

__all__ = [
    "CoreModel",
    "Base",
    "to_snake_case",
    "db_manager",
    "init_database",
    "get_engine",
    "get_db",
    "on_request_end",
    "db_session_scope",
    "TransactionState",
    "TransactionError",
    "TransactionNotActiveError",
    "TransactionAlreadyCommittedError",
    "TransactionAlreadyRolledBackError",
    "TransactionContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
    "OrderFieldMixin",
    "OrderableMixin",
]
