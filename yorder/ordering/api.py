"""
排序引擎 - HTTP 接口

使用示例:
    from fastapi import FastAPI
    from yorder.exceptions import register_exception_handlers
    from yorder.ordering import OrderingService, create_ordering_router

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(
        create_ordering_router(OrderingService()),
        prefix="/public",
        tags=["排序"],
    )
"""

from typing import Optional

from fastapi import APIRouter

from yorder.response import ErrorResponse, ItemResponse, Resp

from .schemas import MoveRequest, MoveResultSchema, RebalanceRequest, RebalanceResultSchema
from .service import OrderingService


def create_ordering_router(service: Optional[OrderingService] = None) -> APIRouter:
    """创建排序路由

    提供以下端点:
        - POST /sort        拖拽排序（移动一条记录）
        - POST /reset-sort  批量重置排序

    错误由全局异常处理器转换为 {status, message, msg_details, data, error_code}，
    参数错误为 4xx，数据库错误为 5xx。

    Returns:
        APIRouter
    """
    service = service or OrderingService()
    router = APIRouter()

    error_responses = {
        400: {"model": ErrorResponse, "description": "参数错误或不支持的表名"},
        404: {"model": ErrorResponse, "description": "记录不存在"},
        500: {"model": ErrorResponse, "description": "排序操作失败"},
    }

    @router.post(
        "/sort",
        summary="通用排序接口",
        description="将记录移动到目标记录之前/之后，或移动到最前/最后，只更新被移动的记录",
        response_model=ItemResponse[MoveResultSchema],
        responses=error_responses,
    )
    def sort(request: MoveRequest):
        """移动一条记录"""
        result = service.move(request)
        return Resp.OK(
            data=MoveResultSchema(
                updated_count=result.updated_count,
                new_key=result.new_key,
                rebalance_required=result.rebalance_required,
            ),
            message=f"排序成功，更新了 {result.updated_count} 条记录",
        )

    @router.post(
        "/reset-sort",
        summary="批量重置排序",
        description="按指定字段和方向重新分配排序值 10, 20, 30, ...",
        response_model=ItemResponse[RebalanceResultSchema],
        responses=error_responses,
    )
    def reset_sort(request: RebalanceRequest):
        """重置排序"""
        result = service.rebalance(request)
        message = "重置排序成功" if result.updated_count else "没有需要重置排序的记录"
        return Resp.OK(
            data=RebalanceResultSchema(
                updated_count=result.updated_count,
                table_name=result.table_name,
                order_field=result.order_field,
                order_by=result.order_by,
                direction=result.direction.value,
            ),
            message=message,
        )

    return router


__all__ = ["create_ordering_router"]
