"""日志模块

提供排序引擎的日志配置：
- 日志记录器创建与格式化
- 根日志器配置（支持从 YAML 配置加载）
- 模块名自动推断

使用示例:
    from yorder.log import setup_logger, get_logger

    logger = setup_logger("my_app", level="DEBUG", log_file="logs/app.log")
    ordering_log = get_logger("ordering")
"""

from .logger import (
    setup_logger,
    setup_root_logger,
    create_formatter,
    MicrosecondFormatter,
    DEFAULT_LOG_FORMAT,
    ordering_logger,
    transaction_logger,
    logger,
    get_logger,
)

__all__ = [
    "setup_logger",
    "setup_root_logger",
    "create_formatter",
    "MicrosecondFormatter",
    "DEFAULT_LOG_FORMAT",
    "ordering_logger",
    "transaction_logger",
    "logger",
    "get_logger",
]
