"""事务上下文

提供事务的上下文管理
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from yorder.log import transaction_logger as logger

from .state import TransactionState
from .exceptions import (
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
)


class TransactionContext:
    """事务上下文

    管理单个事务的完整生命周期，包括：
    - 事务状态跟踪
    - 嵌套加入外层事务时的层级计数
    - 提交抑制机制

    使用示例:
        with TransactionContext(session) as tx:
            nav = Navigation(name="首页")
            nav.save()
    """

    def __init__(
        self,
        session: Session,
        auto_commit: bool = True,
        suppress_commit: bool = True
    ):
        """初始化事务上下文

        Args:
            session: SQLAlchemy Session 对象
            auto_commit: 是否在上下文结束时自动提交
            suppress_commit: 是否抑制内部的 commit=True 调用
        """
        self._session = session
        self._auto_commit = auto_commit
        self._suppress_commit = suppress_commit
        self._state = TransactionState.INACTIVE

        self._nesting_level = 0

    # ==================== 属性 ====================

    @property
    def session(self) -> Session:
        """获取数据库 session"""
        return self._session

    @property
    def state(self) -> TransactionState:
        """获取事务状态"""
        return self._state

    @property
    def is_active(self) -> bool:
        """事务是否活跃"""
        return self._state == TransactionState.ACTIVE

    @property
    def nesting_level(self) -> int:
        """获取嵌套层级"""
        return self._nesting_level

    # ==================== 事务生命周期方法 ====================

    def begin(self) -> 'TransactionContext':
        """开始事务"""
        if self._state == TransactionState.ACTIVE:
            self._nesting_level += 1
            logger.debug(f"加入现有事务 (level={self._nesting_level})")
            return self

        # SQLAlchemy 默认 autobegin，这里只切换状态
        self._state = TransactionState.ACTIVE
        self._nesting_level = 1
        logger.debug(f"事务开始 (level={self._nesting_level})")
        return self

    def commit(self) -> None:
        """提交事务"""
        if self._state == TransactionState.COMMITTED:
            raise TransactionAlreadyCommittedError()
        if self._state == TransactionState.ROLLED_BACK:
            raise TransactionAlreadyRolledBackError()
        if self._state != TransactionState.ACTIVE:
            raise TransactionNotActiveError(f"无法提交：事务状态为 {self._state}")

        if self._nesting_level > 1:
            self._nesting_level -= 1
            logger.debug(f"嵌套事务退出 (level={self._nesting_level})")
            return

        try:
            self._session.commit()
        except Exception:
            self._state = TransactionState.FAILED
            raise

        self._state = TransactionState.COMMITTED
        self._nesting_level = 0
        logger.debug("事务提交成功")

    def rollback(self) -> None:
        """回滚事务（幂等）"""
        if self._state == TransactionState.COMMITTED:
            raise TransactionAlreadyCommittedError("无法回滚：事务已提交")
        if not self._state.can_rollback():
            return

        try:
            self._session.rollback()
        except Exception as e:
            self._state = TransactionState.FAILED
            logger.error(f"事务回滚失败: {e}")
            raise

        self._state = TransactionState.ROLLED_BACK
        self._nesting_level = 0
        logger.debug("事务回滚成功")

    def flush(self) -> None:
        """刷新 session（将变更写入数据库但不提交）"""
        if not self.is_active:
            raise TransactionNotActiveError("无法刷新：事务未激活")
        self._session.flush()

    def should_suppress_commit(self) -> bool:
        """检查是否应该抑制提交

        用于 CoreModel 中判断 commit=True 是否应该被忽略
        """
        return self.is_active and self._suppress_commit

    # ==================== 上下文管理器 ====================

    def __enter__(self) -> 'TransactionContext':
        return self.begin()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            logger.debug(f"事务内发生异常，回滚: {exc_type.__name__}")
            self.rollback()
            return False

        if self._auto_commit and self._nesting_level == 1:
            try:
                self.commit()
            except Exception:
                # commit 失败时确保回滚，清理 session 状态
                self.rollback()
                raise
        elif self._nesting_level > 1:
            self._nesting_level -= 1

        return False

    def __repr__(self) -> str:
        return (
            f"TransactionContext("
            f"state={self._state.value}, "
            f"nesting_level={self._nesting_level})"
        )
