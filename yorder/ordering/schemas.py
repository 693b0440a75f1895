"""
排序引擎 - 请求与响应模型

请求同时接受 snake_case 和 camelCase 字段名（tableName、sourceId、sortField ...），
以及旧接口的层级参数 parentId / parentField。
字段在这里只做类型转换，必填与取值校验由 OrderingService 完成，
以便统一抛出 InvalidArgumentException。
"""

from typing import Any, Dict, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrderingSchema(BaseModel):
    """排序模型基类"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class MoveRequest(OrderingSchema):
    """移动请求

    范围参数:
        - parentId + parentField: 在 parent_field = parentId 的兄弟记录中移动
        - 只有 parentId: 使用集合的默认范围字段
        - 只有 parentField: 表示根级记录，即 parent_field IS NULL；
          非根级记录按此请求会返回 404 RECORD_NOT_FOUND
        - 都不提供: 不限范围

    使用示例:
        MoveRequest.model_validate({
            "tableName": "department",
            "sourceId": 10,
            "targetId": 8,
            "position": "before",
            "parentId": 3,
            "parentField": "parentId",
        })
    """
    table_name: Optional[str] = Field(default=None, description="表名")
    source_id: Optional[int] = Field(default=None, description="被移动的记录ID")
    target_id: Optional[int] = Field(default=None, description="目标记录ID，before/after 时必填")
    position: Optional[str] = Field(default=None, description="位置：before/after/first/last")
    order_field: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("order_field", "orderField", "sort_field", "sortField"),
        description="排序字段，默认 sort_order",
    )
    scope_id: Optional[Union[int, str]] = Field(
        default=None,
        validation_alias=AliasChoices("scope_id", "scopeId", "parent_id", "parentId"),
        description="范围值（如父级ID）",
    )
    scope_field: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("scope_field", "scopeField", "parent_field", "parentField"),
        description="范围字段（如 parent_id）",
    )


class RebalanceRequest(OrderingSchema):
    """重置排序请求

    使用示例:
        RebalanceRequest.model_validate({
            "tableName": "notice",
            "orderBy": "id",
            "orderDirection": "asc",
            "filters": {"isDeleted": False},
        })
    """
    table_name: Optional[str] = Field(default=None, description="表名")
    order_field: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("order_field", "orderField", "sort_field", "sortField"),
        description="排序字段，默认 sort_order",
    )
    order_by: Optional[str] = Field(default=None, description="排序依据字段，默认 id")
    direction: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("direction", "order_direction", "orderDirection"),
        description="排序方向：asc/desc",
    )
    filters: Optional[Dict[str, Any]] = Field(default=None, description="过滤条件")


class MoveResultSchema(OrderingSchema):
    """移动结果"""
    updated_count: int = Field(default=0, description="更新的记录数")
    new_key: Optional[int] = Field(default=None, description="移动后的排序值")
    rebalance_required: bool = Field(default=False, description="是否建议重置排序")


class RebalanceResultSchema(OrderingSchema):
    """重置排序结果"""
    updated_count: int = Field(default=0, description="更新的记录数")
    table_name: str = Field(description="表名")
    order_field: str = Field(description="排序字段")
    order_by: str = Field(description="排序依据字段")
    direction: str = Field(description="排序方向")


__all__ = [
    "OrderingSchema",
    "MoveRequest",
    "RebalanceRequest",
    "MoveResultSchema",
    "RebalanceResultSchema",
]
