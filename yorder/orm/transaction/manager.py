"""事务管理器

提供事务管理的统一入口
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional, Generator

from sqlalchemy.orm import Session

from yorder.log import transaction_logger as logger

from .context import TransactionContext

# 当前事务上下文（线程/协程安全）
_current_transaction: ContextVar[Optional[TransactionContext]] = ContextVar(
    '_current_transaction', default=None
)


def get_current_transaction() -> Optional[TransactionContext]:
    """获取当前事务上下文

    Returns:
        当前的事务上下文，如果不在事务中则返回 None
    """
    return _current_transaction.get()


class TransactionManager:
    """事务管理器

    提供事务管理的统一入口，包括：
    - 获取/创建事务上下文
    - 已有活跃事务时加入外层事务，由外层统一提交或回滚
    - 事务中抑制 CoreModel 的 commit=True

    使用示例:
        from yorder.orm import transaction_manager as tm

        with tm.transaction() as tx:
            nav.sort_order = 15
            nav.save()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._default_suppress_commit = True
        self._initialized = True

    def get_session(self) -> Session:
        """获取数据库 session"""
        from ..db_session import db_manager
        return db_manager.get_session()

    @property
    def current_transaction(self) -> Optional[TransactionContext]:
        """获取当前事务上下文"""
        return _current_transaction.get()

    def configure(self, suppress_commit_in_transaction: bool = None) -> None:
        """配置事务管理器

        Args:
            suppress_commit_in_transaction: 是否在事务中抑制 commit=True
        """
        if suppress_commit_in_transaction is not None:
            self._default_suppress_commit = suppress_commit_in_transaction

    @contextmanager
    def transaction(
        self,
        session: Session = None,
        auto_commit: bool = True,
        suppress_commit: bool = None
    ) -> Generator[TransactionContext, None, None]:
        """创建事务上下文

        正常退出时提交，任何异常路径上回滚并重新抛出。
        已在活跃事务中时加入外层事务，不单独提交。

        Args:
            session: 数据库会话，不传则自动获取
            auto_commit: 是否自动提交
            suppress_commit: 是否抑制内部提交，None 则使用默认配置

        Yields:
            TransactionContext 对象

        使用示例:
            with tm.transaction(session=session) as tx:
                session.query(Navigation).filter_by(id=3).update({"sort_order": 15})
        """
        current = self.current_transaction

        if current and current.is_active:
            # 内层异常会继续向外传播，由外层事务回滚
            current._nesting_level += 1
            logger.debug(f"加入现有事务 (level={current._nesting_level})")
            try:
                yield current
            finally:
                if current._nesting_level > 0:
                    current._nesting_level -= 1
            return

        if session is None:
            session = self.get_session()

        if suppress_commit is None:
            suppress_commit = self._default_suppress_commit

        ctx = TransactionContext(
            session=session,
            auto_commit=auto_commit,
            suppress_commit=suppress_commit
        )

        token = _current_transaction.set(ctx)
        try:
            with ctx:
                yield ctx
        finally:
            _current_transaction.reset(token)

    def is_in_transaction(self) -> bool:
        """检查当前是否在事务中"""
        tx = self.current_transaction
        return tx is not None and tx.is_active


# 全局单例
transaction_manager = TransactionManager()
