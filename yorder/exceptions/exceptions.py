"""业务异常类定义

定义排序引擎使用的业务异常类体系。
"""

import copy
from typing import Optional, List, Any, Dict, Union
from fastapi import status
from enum import Enum


class ErrorCode(str, Enum):
    """错误代码枚举

    提供常用的错误代码，支持 IDE 补全和拼写检查。
    继承自 str，可以直接作为字符串使用。

    使用示例:
        from yorder.exceptions import ErrorCode, BusinessException

        raise BusinessException("排序失败", code=ErrorCode.OPERATION_FAILED)

        if error_code == ErrorCode.RECORD_NOT_FOUND:
            refresh_list()
    """

    # ==================== 通用错误 ====================
    BUSINESS_ERROR = "BUSINESS_ERROR"
    OPERATION_FAILED = "OPERATION_FAILED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    # ==================== 参数相关 (400) ====================
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNSUPPORTED_RESOURCE = "UNSUPPORTED_RESOURCE"

    # ==================== 记录相关 (404) ====================
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"

    # ==================== 验证相关 (422) ====================
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # ==================== 存储相关 (5xx) ====================
    STORE_FAILURE = "STORE_FAILURE"


# 类型别名，支持枚举和字符串
ErrorCodeType = Union[str, ErrorCode]


class BusinessException(Exception):
    """业务异常基类

    所有业务异常都应该继承此类。

    属性:
        message: 错误消息（面向用户）
        code: 错误代码（用于程序判断，支持 ErrorCode 枚举或字符串）
        status_code: HTTP 状态码
        details: 详细错误信息列表
        extra: 额外的上下文信息

    使用示例:
        raise BusinessException("操作失败", code=ErrorCode.OPERATION_FAILED)

        raise BusinessException(
            message="排序参数不合法",
            code=ErrorCode.INVALID_ARGUMENT,
            details=["position 必须是 before/after/first/last 之一"],
            table_name="navigation"
        )
    """

    def __init__(
        self,
        message: str,
        code: ErrorCodeType = ErrorCode.BUSINESS_ERROR,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        """初始化业务异常

        Args:
            message: 错误消息
            code: 错误代码
            status_code: HTTP 状态码
            details: 详细错误信息列表
            **extra: 额外的上下文信息
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or []
        self.extra = extra
        super().__init__(message)

    @property
    def is_client_error(self) -> bool:
        """是否为调用方错误（4xx）"""
        return 400 <= self.status_code < 500

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式

        Returns:
            包含异常信息的字典
        """
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            # 返回深拷贝，调用方修改返回值不影响异常对象
            "details": copy.deepcopy(self.details),
            "extra": copy.deepcopy(self.extra)
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"status_code={self.status_code})"
        )
