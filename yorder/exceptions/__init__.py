"""异常模块

提供业务异常类体系和 FastAPI 全局异常处理器。

使用示例:
    from yorder.exceptions import BusinessException, ErrorCode, register_exception_handlers

    raise BusinessException("排序失败", code=ErrorCode.OPERATION_FAILED)
"""

from .exceptions import (
    ErrorCode,
    ErrorCodeType,
    BusinessException,
)

from .handlers import (
    business_exception_handler,
    validation_exception_handler,
    general_exception_handler,
    register_exception_handlers,
)

__all__ = [
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
    "business_exception_handler",
    "validation_exception_handler",
    "general_exception_handler",
    "register_exception_handlers",
]
