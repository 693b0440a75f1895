"""全局异常处理器

提供 FastAPI 全局异常处理器，自动将异常转换为统一的 JSON 响应格式。
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import traceback
import sys
import os

from yorder.log import get_logger
from yorder.response import ResponseStatus
from .exceptions import BusinessException, ErrorCode

logger = get_logger()


def _is_debug() -> bool:
    return os.getenv("DEBUG", "false").lower() == "true"


async def business_exception_handler(
    request: Request,
    exc: BusinessException
) -> JSONResponse:
    """业务异常处理器

    处理所有继承自 BusinessException 的异常，转换为统一的 JSON 响应。
    调用方错误记录 WARNING，服务端错误记录 ERROR。

    Args:
        request: FastAPI 请求对象
        exc: 业务异常实例

    Returns:
        JSON 响应
    """
    log = logger.warning if exc.is_client_error else logger.error
    log(
        f"Business exception occurred: {exc.code} - {exc.message}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_code": exc.code,
            "status_code": exc.status_code,
            "details": exc.details,
        }
    )

    content = {
        "status": ResponseStatus.ERROR.value,
        "message": exc.message,
        "msg_details": exc.details,
        "data": {}
    }

    if exc.code:
        content["error_code"] = exc.code

    if _is_debug() and exc.extra:
        content["debug_info"] = {k: str(v) for k, v in exc.extra.items()}

    return JSONResponse(
        status_code=exc.status_code,
        content=content
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """请求参数验证异常处理器

    Args:
        request: FastAPI 请求对象
        exc: Pydantic 验证异常

    Returns:
        JSON 响应
    """
    errors = []
    for error in exc.errors():
        loc_parts = [str(loc) for loc in error["loc"] if loc not in ("body", "query", "path")]
        field = ".".join(loc_parts) if loc_parts else "请求体"
        errors.append(f"{field}: {error['msg']}")

    logger.warning(
        f"Validation error: {len(errors)} field(s) failed validation",
        extra={"path": request.url.path, "method": request.method, "errors": errors}
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "status": ResponseStatus.ERROR.value,
            "message": "请求参数验证失败",
            "msg_details": errors,
            "data": {},
            "error_code": ErrorCode.VALIDATION_ERROR.value
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """通用异常处理器

    捕获所有未被其他处理器处理的异常，记录完整堆栈信息，
    不向调用方暴露原始异常。

    Args:
        request: FastAPI 请求对象
        exc: 异常实例

    Returns:
        JSON 响应
    """
    exc_type, exc_value, exc_traceback = sys.exc_info()
    tb_lines = traceback.format_exception(exc_type, exc_value, exc_traceback)

    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "traceback": "".join(tb_lines)
        }
    )

    content = {
        "status": ResponseStatus.ERROR.value,
        "message": "服务器内部错误",
        "msg_details": [],
        "data": {},
        "error_code": ErrorCode.INTERNAL_SERVER_ERROR.value
    }

    if _is_debug():
        content["msg_details"] = [
            f"异常类型: {type(exc).__name__}",
            f"异常消息: {str(exc)}"
        ]

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content
    )


def register_exception_handlers(app) -> None:
    """注册所有异常处理器到 FastAPI 应用

    注册顺序：
    1. BusinessException - 业务异常处理器（包含排序引擎的全部异常）
    2. RequestValidationError - 参数验证异常处理器
    3. Exception - 通用异常处理器（兜底）

    使用示例:
        from fastapi import FastAPI
        from yorder.exceptions import register_exception_handlers

        app = FastAPI()
        register_exception_handlers(app)

    Args:
        app: FastAPI 应用实例
    """
    app.add_exception_handler(BusinessException, business_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered successfully")
