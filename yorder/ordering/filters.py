"""
排序引擎 - 结构化过滤条件

把请求中的过滤字典解析为 FieldFilter 列表，并应用到 SQLAlchemy 查询上。

支持两种写法:
    {"is_deleted": False}                  # 相等，None 表示 IS NULL
    {"parent_id": {"gte": 1, "lt": 9}}     # 运算符对象

使用示例:
    from yorder.ordering.filters import parse_filters, apply_filters

    filters = parse_filters({"isDeleted": False}, allowed_fields={"is_deleted"}, model=Notice)
    query = apply_filters(session.query(Notice.id), Notice, filters)
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from sqlalchemy.orm import Query

from yorder.orm.utils import to_snake_case

from .exceptions import InvalidArgumentException


class FilterOp(str, Enum):
    """过滤运算符"""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IN = "in"
    NOT_IN = "not_in"
    IS_NULL = "is_null"


# 运算符别名
_OP_ALIASES = {
    "equals": FilterOp.EQ,
    "not": FilterOp.NE,
}

_LIST_OPS = (FilterOp.IN, FilterOp.NOT_IN)


@dataclass(frozen=True)
class FieldFilter:
    """单个字段的过滤条件

    Attributes:
        field: 字段名（snake_case）
        op: 运算符
        value: 比较值，IN / NOT_IN 为列表，IS_NULL 为布尔
    """
    field: str
    op: FilterOp = FilterOp.EQ
    value: Any = None


FilterInput = Union[Mapping[str, Any], Iterable[FieldFilter], None]


def normalize_field_name(name: str) -> str:
    """字段名统一为 snake_case（sortOrder -> sort_order）"""
    return to_snake_case(name)


def _parse_op(name: str) -> FilterOp:
    key = to_snake_case(name)
    if key in _OP_ALIASES:
        return _OP_ALIASES[key]
    try:
        return FilterOp(key)
    except ValueError:
        raise InvalidArgumentException(f"不支持的过滤运算符: {name}", field=name)


def _check_field(field: str, allowed_fields: Optional[Iterable[str]]) -> None:
    if allowed_fields is not None and field not in allowed_fields:
        raise InvalidArgumentException(f"不允许过滤的字段: {field}", field=field)


def _column_type(model, field: str) -> Optional[type]:
    """列对应的 Python 类型，无法判断时返回 None"""
    column = getattr(model, field, None)
    if column is None:
        raise InvalidArgumentException(
            f"模型 {model.__name__} 没有字段: {field}",
            field=field,
        )
    try:
        return column.type.python_type
    except (AttributeError, NotImplementedError):
        return None


def _coerce_scalar(field: str, python_type: Optional[type], value: Any) -> Any:
    """按列类型校验单个比较值，ISO 字符串转为日期时间"""
    if value is None or python_type is None:
        return value

    if python_type is bool:
        if isinstance(value, bool):
            return value
    elif python_type is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif python_type is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif python_type is str:
        if isinstance(value, str):
            return value
    elif python_type is datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                pass
    elif python_type is date:
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value)
            except ValueError:
                pass
    else:
        return value

    raise InvalidArgumentException(
        f"字段 {field} 的过滤值类型错误，需要 {python_type.__name__}",
        field=field,
        value=value,
    )


def _check_value(flt: FieldFilter, model=None) -> FieldFilter:
    python_type = _column_type(model, flt.field) if model is not None else None

    if flt.op in _LIST_OPS:
        if isinstance(flt.value, (str, bytes, Mapping)) or not isinstance(flt.value, Iterable):
            raise InvalidArgumentException(
                f"运算符 {flt.op.value} 需要列表值",
                field=flt.field,
            )
        values = [_coerce_scalar(flt.field, python_type, v) for v in flt.value]
        return FieldFilter(flt.field, flt.op, values)

    if flt.op == FilterOp.IS_NULL:
        if not isinstance(flt.value, bool):
            raise InvalidArgumentException("运算符 is_null 需要布尔值", field=flt.field)
        return flt

    # 只有 in / not_in 接受列表
    if isinstance(flt.value, (list, tuple, set, frozenset, Mapping)):
        raise InvalidArgumentException(
            f"运算符 {flt.op.value} 不接受列表或对象值",
            field=flt.field,
        )
    if flt.value is None and flt.op not in (FilterOp.EQ, FilterOp.NE):
        raise InvalidArgumentException(f"运算符 {flt.op.value} 不接受空值", field=flt.field)
    return FieldFilter(flt.field, flt.op, _coerce_scalar(flt.field, python_type, flt.value))


def parse_filters(
    filters: FilterInput,
    allowed_fields: Optional[Iterable[str]] = None,
    model=None,
) -> List[FieldFilter]:
    """解析过滤条件

    Args:
        filters: 过滤字典或 FieldFilter 序列，None 表示无过滤
        allowed_fields: 允许过滤的字段，None 表示不限制
        model: 提供时按列类型校验比较值（布尔列只接受布尔值，
            日期时间列接受 datetime 或 ISO 8601 字符串）

    Returns:
        FieldFilter 列表

    Raises:
        InvalidArgumentException: 字段不允许、运算符未知或值类型不匹配
    """
    if not filters:
        return []

    if allowed_fields is not None:
        allowed_fields = set(allowed_fields)

    result: List[FieldFilter] = []

    if not isinstance(filters, Mapping):
        for flt in filters:
            if not isinstance(flt, FieldFilter):
                raise InvalidArgumentException("过滤条件格式错误", field="filters")
            _check_field(flt.field, allowed_fields)
            result.append(_check_value(flt, model))
        return result

    for raw_field, raw_value in filters.items():
        field = normalize_field_name(raw_field)
        _check_field(field, allowed_fields)

        if raw_value is None:
            result.append(FieldFilter(field, FilterOp.IS_NULL, True))
        elif isinstance(raw_value, Mapping):
            if not raw_value:
                raise InvalidArgumentException(f"字段 {raw_field} 的过滤条件为空", field=raw_field)
            for op_name, value in raw_value.items():
                result.append(_check_value(FieldFilter(field, _parse_op(op_name), value), model))
        else:
            result.append(_check_value(FieldFilter(field, FilterOp.EQ, raw_value), model))

    return result


def build_condition(model, flt: FieldFilter):
    """把单个 FieldFilter 转为 SQLAlchemy 条件表达式"""
    column = getattr(model, flt.field, None)
    if column is None:
        raise InvalidArgumentException(
            f"模型 {model.__name__} 没有字段: {flt.field}",
            field=flt.field,
        )

    op, value = flt.op, flt.value
    if op == FilterOp.EQ:
        return column.is_(None) if value is None else column == value
    if op == FilterOp.NE:
        return column.is_not(None) if value is None else column != value
    if op == FilterOp.LT:
        return column < value
    if op == FilterOp.LTE:
        return column <= value
    if op == FilterOp.GT:
        return column > value
    if op == FilterOp.GTE:
        return column >= value
    if op == FilterOp.IN:
        return column.in_(value)
    if op == FilterOp.NOT_IN:
        return column.not_in(value)
    return column.is_(None) if value else column.is_not(None)


def apply_filters(query: Query, model, filters: Iterable[FieldFilter]) -> Query:
    """将过滤条件应用到查询

    使用示例:
        query = apply_filters(session.query(Navigation), Navigation, [
            FieldFilter("parent_id", FilterOp.IS_NULL, True),
        ])
    """
    for flt in filters:
        query = query.filter(build_condition(model, flt))
    return query


__all__ = [
    "FilterOp",
    "FieldFilter",
    "normalize_field_name",
    "parse_filters",
    "build_condition",
    "apply_filters",
]
