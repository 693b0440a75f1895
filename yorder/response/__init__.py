"""响应模块

提供统一的 JSON 响应封装：{status, message, msg_details, data}

使用示例:
    from yorder.response import Resp

    return Resp.OK(data={"updatedCount": 1}, message="排序成功")
"""

from .base_response import (
    Resp,
    OK,
    ResponseStatus,
    ItemResponse,
    ErrorResponse,
)

__all__ = [
    "Resp",
    "OK",
    "ResponseStatus",
    "ItemResponse",
    "ErrorResponse",
]
