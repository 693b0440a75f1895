"""
YOrder - 通用相对位置排序引擎

提供拖拽排序、批量重置排序，以及配套的日志、配置、异常、响应封装和 ORM 基础设施
"""

from .version import __version__, __author__, __description__

# 导出响应模块
from .response import (
    Resp,
    OK,
    ItemResponse,
)

# 导出异常
from .exceptions import (
    BusinessException,
    ErrorCode,
    register_exception_handlers,
)

# 导出日志
from .log import get_logger, setup_logger, setup_root_logger

# 导出ORM基类
from .orm import (
    CoreModel,
    OrderFieldMixin,
    OrderableMixin,
    init_database,
    db_session_scope,
    get_db,
    transaction_manager,
)

# 导出排序引擎
from .ordering import (
    MovePosition,
    SortDirection,
    OrderableCollection,
    orderable_registry,
    register_orderable_model,
    OrderingService,
    create_ordering_router,
)

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "Resp",
    "OK",
    "ItemResponse",
    "BusinessException",
    "ErrorCode",
    "register_exception_handlers",
    "get_logger",
    "setup_logger",
    "setup_root_logger",
    "CoreModel",
    "OrderFieldMixin",
    "OrderableMixin",
    "init_database",
    "db_session_scope",
    "get_db",
    "transaction_manager",
    "MovePosition",
    "SortDirection",
    "OrderableCollection",
    "orderable_registry",
    "register_orderable_model",
    "OrderingService",
    "create_ordering_router",
]
