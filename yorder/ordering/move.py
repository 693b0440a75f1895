"""
排序引擎 - 移动操作

把一条记录移到目标记录之前或之后，或移到范围内的最前、最后。
只改写被移动记录的排序值，其他记录保持不变。

计算规则:
    - first: 范围内最小值 - 10（不小于 0），范围为空时为 10
    - last: 范围内最大值 + 10，范围为空时为 10
    - before: 与前一条记录取中点，中点冲突时为目标值 - 1；没有前一条时为目标值 - 10
    - after: 与后一条记录取中点，中点冲突时为目标值 + 1；没有后一条时为目标值 + 10

新值与当前值相同时不写入，更新数为 0。

使用示例:
    from yorder.ordering.move import MoveTarget, move

    result = move(store, source_id=5, target=MoveTarget("after", target_id=3))
    result.updated_count  # 0 或 1
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Union

from yorder.log import get_logger

from . import keys
from .enums import MovePosition, SortDirection
from .exceptions import InvalidArgumentException, RecordNotFoundException
from .filters import FieldFilter, FilterOp
from .keys import KeyPlacement
from .store import RecordStore

logger = get_logger("yorder.ordering.move")


def parse_position(value: Union[MovePosition, str, None]) -> MovePosition:
    """解析位置参数

    Raises:
        InvalidArgumentException: 为空或不是 before/after/first/last
    """
    if value is None or value == "":
        raise InvalidArgumentException("参数错误：位置不能为空", field="position")
    try:
        return MovePosition(value)
    except ValueError:
        raise InvalidArgumentException(
            "位置参数错误：必须是 before、after、first 或 last",
            field="position",
        )


@dataclass(frozen=True)
class MoveTarget:
    """移动目标

    Attributes:
        position: 相对位置
        target_id: 目标记录 ID，before/after 时必填
        scope_field: 范围字段（如 parent_id）
        scope_id: 范围值，scope_field 给定而 scope_id 为 None 时表示根级
    """
    position: MovePosition
    target_id: Optional[Any] = None
    scope_field: Optional[str] = None
    scope_id: Optional[Any] = None

    def __post_init__(self):
        object.__setattr__(self, "position", parse_position(self.position))
        if self.position.requires_target and self.target_id is None:
            raise InvalidArgumentException(
                "使用 before 或 after 位置时，必须提供目标记录ID",
                field="target_id",
            )


@dataclass(frozen=True)
class MoveResult:
    """移动结果

    Attributes:
        updated_count: 更新的记录数（0 或 1）
        new_key: 源记录移动后的排序值
        rebalance_required: 计算出的值与相邻记录冲突，建议对该范围重排
    """
    updated_count: int
    new_key: Optional[int] = None
    rebalance_required: bool = False


def _key_of(record: Any, order_field: str) -> Optional[int]:
    if record is None:
        return None
    return getattr(record, order_field)


def _place(
    store: RecordStore,
    target: MoveTarget,
    order_field: str,
    scope_filters: List[FieldFilter],
    step: int,
    seed: int,
) -> KeyPlacement:
    """计算源记录的新排序值"""
    position = target.position

    if position == MovePosition.FIRST:
        first = store.find_first_ordered(scope_filters, order_field, SortDirection.ASC)
        return KeyPlacement(keys.key_for_first(_key_of(first, order_field), seed, step))

    if position == MovePosition.LAST:
        last = store.find_first_ordered(scope_filters, order_field, SortDirection.DESC)
        return KeyPlacement(keys.key_for_last(_key_of(last, order_field), seed, step))

    target_record = store.find_one([FieldFilter("id", FilterOp.EQ, target.target_id)] + scope_filters)
    if target_record is None:
        raise RecordNotFoundException(store.collection.name, target.target_id, role="target")
    # 目标没有排序值时按最小值处理
    target_key = _key_of(target_record, order_field) or keys.MIN_KEY

    if position == MovePosition.BEFORE:
        prev_item = store.find_first_ordered(
            scope_filters + [FieldFilter(order_field, FilterOp.LT, target_key)],
            order_field,
            SortDirection.DESC,
        )
        return keys.key_for_before(target_key, _key_of(prev_item, order_field), step)

    next_item = store.find_first_ordered(
        scope_filters + [FieldFilter(order_field, FilterOp.GT, target_key)],
        order_field,
        SortDirection.ASC,
    )
    return keys.key_for_after(target_key, _key_of(next_item, order_field), step)


def move(
    store: RecordStore,
    source_id: Any,
    target: MoveTarget,
    order_field: Optional[str] = None,
    step: int = keys.ORDER_STEP,
    seed: int = keys.SEED_KEY,
) -> MoveResult:
    """移动一条记录

    所有读取和写入在同一个事务中完成，任何异常都会回滚。

    Args:
        store: 记录存储
        source_id: 被移动的记录 ID
        target: 移动目标
        order_field: 排序字段，None 使用集合的默认排序字段
        step: 首尾插入的步长
        seed: 范围为空时的初始值

    Returns:
        MoveResult

    Raises:
        InvalidArgumentException: 排序字段或范围字段不允许
        RecordNotFoundException: 源记录或目标记录在范围内不存在
    """
    collection = store.collection
    if source_id is None:
        raise InvalidArgumentException("参数错误：源记录ID不能为空", field="source_id")
    order_field = collection.validate_order_field(order_field)
    scope = collection.resolve_scope(target.scope_field, target.scope_id)
    scope_filters = [] if scope is None else [FieldFilter(scope[0], FilterOp.EQ, scope[1])]

    with store.transaction():
        source = store.find_one([FieldFilter("id", FilterOp.EQ, source_id)] + scope_filters)
        if source is None:
            raise RecordNotFoundException(collection.name, source_id, role="source")
        current_key = _key_of(source, order_field)

        if target.position.requires_target and target.target_id == source_id:
            return MoveResult(0, current_key)

        placement = _place(store, target, order_field, scope_filters, step, seed)
        if placement.key == current_key:
            return MoveResult(0, current_key)

        store.update(source_id, {order_field: placement.key})

    if placement.collided:
        logger.warning(
            f"排序值已无可用间隔 - 表: {collection.name}, 源ID: {source_id}, "
            f"新值: {placement.key}，建议重置排序"
        )
    return MoveResult(1, placement.key, placement.collided)


__all__ = [
    "parse_position",
    "MoveTarget",
    "MoveResult",
    "move",
]
