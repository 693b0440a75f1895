"""
排序引擎 - 异常定义

调用方错误（参数、表名、记录不存在）与存储错误分开，
便于 HTTP 层映射为 4xx 或 5xx。
"""

from typing import Optional, List, Any

from fastapi import status

from yorder.exceptions import BusinessException, ErrorCode, ErrorCodeType


class OrderingException(BusinessException):
    """排序异常基类

    使用示例:
        try:
            service.move(...)
        except OrderingException as e:
            if e.is_client_error:
                ...
    """

    def __init__(
        self,
        message: str = "排序操作失败",
        code: ErrorCodeType = ErrorCode.OPERATION_FAILED,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details=details,
            **extra
        )


class InvalidArgumentException(OrderingException):
    """参数缺失或不合法

    在访问存储之前抛出，不会产生任何写入。

    使用示例:
        raise InvalidArgumentException("使用 before 或 after 位置时，必须提供目标记录ID", field="target_id")
    """

    def __init__(self, message: str = "参数错误", field: Optional[str] = None, details: Optional[List[str]] = None, **extra: Any):
        if field and not details:
            details = [f"参数: {field}"]
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_ARGUMENT,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            field=field,
            **extra
        )


class UnsupportedResourceException(OrderingException):
    """表名没有注册为可排序集合"""

    def __init__(self, table_name: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"不支持的表名: {table_name}",
            code=ErrorCode.UNSUPPORTED_RESOURCE,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[f"表名 '{table_name}' 不存在或不支持排序操作"],
            table_name=table_name,
        )


class RecordNotFoundException(OrderingException):
    """源记录或目标记录不存在

    在事务内抛出，事务整体回滚。
    """

    def __init__(self, table_name: str, record_id: Any, role: str = "record", message: Optional[str] = None):
        if message is None:
            message = {
                "source": "找不到要移动的记录",
                "target": "找不到目标记录",
            }.get(role, "记录不存在")
        super().__init__(
            message=message,
            code=ErrorCode.RECORD_NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
            details=[f"{table_name}#{record_id}"],
            table_name=table_name,
            record_id=record_id,
            role=role,
        )


class StoreFailureException(OrderingException):
    """存储层执行失败（连接、约束、提交等）

    原始异常（可能包含 SQL 和参数）只放在 extra 中，调试模式下才返回给客户端。
    """

    def __init__(self, message: str = "排序操作失败", cause: Optional[BaseException] = None, **extra: Any):
        details = ["数据库操作失败"] if cause is not None else None
        if cause is not None:
            extra.setdefault("cause", f"{type(cause).__name__}: {cause}")
        super().__init__(
            message=message,
            code=ErrorCode.STORE_FAILURE,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            **extra
        )


__all__ = [
    "OrderingException",
    "InvalidArgumentException",
    "UnsupportedResourceException",
    "RecordNotFoundException",
    "StoreFailureException",
]
