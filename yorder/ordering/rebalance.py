"""
排序引擎 - 重置排序

按指定字段和方向读取范围内的全部记录，依次写入 10, 20, 30, ...，
为后续的中点插入重新留出间隔。整批写入在一个事务中完成。

使用示例:
    from yorder.ordering.rebalance import rebalance

    result = rebalance(store, filters={"is_deleted": False})
    result.updated_count
"""

from dataclasses import dataclass
from typing import Optional, Union

from yorder.log import get_logger

from . import keys
from .enums import SortDirection
from .exceptions import InvalidArgumentException
from .filters import FilterInput, parse_filters
from .store import RecordStore

logger = get_logger("yorder.ordering.rebalance")


def parse_direction(value: Union[SortDirection, str, None]) -> SortDirection:
    """解析排序方向，None 为升序

    Raises:
        InvalidArgumentException: 不是 asc/desc
    """
    if value is None:
        return SortDirection.ASC
    try:
        return SortDirection(value.lower() if isinstance(value, str) else value)
    except ValueError:
        raise InvalidArgumentException("排序方向错误：必须是 asc 或 desc", field="direction")


@dataclass(frozen=True)
class RebalanceResult:
    """重置排序结果"""
    updated_count: int
    table_name: str
    order_field: str
    order_by: str
    direction: SortDirection


def rebalance(
    store: RecordStore,
    order_field: Optional[str] = None,
    order_by: str = "id",
    direction: Union[SortDirection, str, None] = SortDirection.ASC,
    filters: FilterInput = None,
    step: int = keys.ORDER_STEP,
) -> RebalanceResult:
    """重置范围内所有记录的排序值

    Args:
        store: 记录存储
        order_field: 写入的排序字段，None 使用集合的默认排序字段
        order_by: 决定新顺序的字段，相同值按 id 升序
        direction: 排序方向
        filters: 过滤条件（见 parse_filters）
        step: 间隔

    Returns:
        RebalanceResult，没有匹配记录时 updated_count 为 0 且不写入

    Raises:
        InvalidArgumentException: 字段、方向或过滤条件不合法
    """
    collection = store.collection
    order_field = collection.validate_order_field(order_field)
    order_by = collection.validate_order_by(order_by)
    direction = parse_direction(direction)
    parsed_filters = parse_filters(filters, collection.filter_fields, model=collection.model)

    result = RebalanceResult(0, collection.name, order_field, order_by, direction)

    rows = store.scan(parsed_filters, order_by, direction)
    if not rows:
        return result

    updated = 0
    with store.transaction():
        for row, key in zip(rows, keys.rebalanced_keys(len(rows), step)):
            updated += store.update(row.id, {order_field: key})

    logger.debug(f"重置排序写入 {updated} 条记录 - 表: {collection.name}")
    return RebalanceResult(updated, collection.name, order_field, order_by, direction)


__all__ = [
    "parse_direction",
    "RebalanceResult",
    "rebalance",
]
