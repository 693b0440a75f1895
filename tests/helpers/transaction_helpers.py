"""事务管理器测试辅助工具"""

from yorder.orm.transaction import TransactionManager


def reset_transaction_manager(tm: TransactionManager) -> None:
    """恢复事务管理器的默认配置

    警告：此函数仅用于测试环境，不应在生产代码中使用
    """
    tm.configure(suppress_commit_in_transaction=True)
