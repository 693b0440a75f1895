"""相对位置排序 Mixin

把排序引擎的移动和重置操作挂到模型实例上，适合在业务代码中直接调用。
移动只改写当前记录的排序值，其他记录不变。

使用示例:
    from yorder.orm import CoreModel, OrderFieldMixin, OrderableMixin

    class Department(CoreModel, OrderFieldMixin, OrderableMixin):
        __tablename__ = "department"
        __sort_group_by__ = "parent_id"  # 同一父级内排序

        name: Mapped[str] = mapped_column(String(50))
        parent_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    dept = Department.get(10)
    dept.move_before(Department.get(8))
    dept.move_to_last()

    Department.rebalance_order(scope_value=3)

    new_dept = Department(name="研发部", parent_id=3)
    new_dept.sort_order = Department.next_sort_order(3)
    new_dept.save(commit=True)
"""

from typing import Any, List, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from yorder.ordering.move import MoveResult
    from yorder.ordering.rebalance import RebalanceResult


# scope_value 未传入时使用实例自身的分组值
_UNSET = object()


class OrderableMixin:
    """相对位置排序 Mixin

    字段要求（使用者需定义或使用 OrderFieldMixin）:
        - sort_order: int  排序值

    可配置属性（子类可覆盖）:
        - __sort_field__: 排序字段名，默认 "sort_order"
        - __sort_group_by__: 分组（范围）字段，默认 None（全表为一个范围）
    """

    __sort_field__: str = "sort_order"
    __sort_group_by__: Optional[str] = None

    # ==================== 内部方法 ====================

    @classmethod
    def _sort_field_name(cls) -> str:
        return getattr(cls, '__sort_field__', None) or 'sort_order'

    @classmethod
    def _group_field(cls) -> Optional[str]:
        group_by = getattr(cls, '__sort_group_by__', None)
        if not group_by:
            return None
        if not isinstance(group_by, str):
            if len(group_by) != 1:
                raise ValueError(f"{cls.__name__} 只支持单个分组字段: {group_by}")
            group_by = group_by[0]
        return group_by

    @classmethod
    def _orderable_collection(cls):
        """查找注册表中的集合，没有注册时按类属性临时构造"""
        from yorder.ordering.registry import OrderableCollection, orderable_registry

        for collection in orderable_registry:
            if collection.model is cls:
                return collection

        group_field = cls._group_field()
        return OrderableCollection(
            name=cls.__tablename__,
            model=cls,
            order_fields=(cls._sort_field_name(),),
            scope_fields=(group_field,) if group_field else (),
        )

    @classmethod
    def _orderable_store(cls, session=None):
        from yorder.ordering.store import RecordStore
        return RecordStore(cls._orderable_collection(), session or cls.query.session)

    def _scope(self) -> Tuple[Optional[str], Any]:
        group_field = self._group_field()
        if group_field is None:
            return None, None
        return group_field, getattr(self, group_field)

    @classmethod
    def _scope_for(cls, scope_value: Any) -> Tuple[Optional[str], Any]:
        group_field = cls._group_field()
        if group_field is None:
            return None, None
        return group_field, scope_value

    def _move(self, position: str, target: Union["OrderableMixin", int, None] = None) -> "MoveResult":
        from yorder.ordering.move import MoveTarget, move

        if self.id is None:
            self.session.flush()
        target_id = target.id if isinstance(target, OrderableMixin) else target
        scope_field, scope_id = self._scope()
        return move(
            self._orderable_store(self.session),
            self.id,
            MoveTarget(position, target_id=target_id, scope_field=scope_field, scope_id=scope_id),
            order_field=self._sort_field_name(),
        )

    def _siblings_query(self):
        cls = self.__class__
        query = cls.query
        scope_field, scope_id = self._scope()
        if scope_field is not None:
            column = getattr(cls, scope_field)
            query = query.filter(column.is_(None) if scope_id is None else column == scope_id)
        return query

    # ==================== 移动 ====================

    def move_before(self, target: Union["OrderableMixin", int]) -> "MoveResult":
        """移到目标记录之前

        Args:
            target: 目标记录或其 ID，必须与当前记录在同一分组

        Returns:
            MoveResult
        """
        return self._move("before", target)

    def move_after(self, target: Union["OrderableMixin", int]) -> "MoveResult":
        """移到目标记录之后"""
        return self._move("after", target)

    def move_to_first(self) -> "MoveResult":
        """移到分组内最前"""
        return self._move("first")

    def move_to_last(self) -> "MoveResult":
        """移到分组内最后"""
        return self._move("last")

    # ==================== 查询 ====================

    def get_previous(self) -> Optional["OrderableMixin"]:
        """排序值更小的最近一条记录"""
        column = getattr(self.__class__, self._sort_field_name())
        return self._siblings_query().filter(
            column < getattr(self, self._sort_field_name())
        ).order_by(column.desc(), self.__class__.id.desc()).first()

    def get_next(self) -> Optional["OrderableMixin"]:
        """排序值更大的最近一条记录"""
        column = getattr(self.__class__, self._sort_field_name())
        return self._siblings_query().filter(
            column > getattr(self, self._sort_field_name())
        ).order_by(column.asc(), self.__class__.id.asc()).first()

    # ==================== 类方法 ====================

    @classmethod
    def next_sort_order(cls, scope_value: Any = None) -> int:
        """新记录放到分组末尾时应使用的排序值

        分组为空时返回初始值 10，否则为最大值 + 10。
        """
        from sqlalchemy import func
        from yorder.ordering import keys

        column = getattr(cls, cls._sort_field_name())
        query = cls.query.with_entities(func.max(column))
        scope_field, scope_id = cls._scope_for(scope_value)
        if scope_field is not None:
            group_column = getattr(cls, scope_field)
            query = query.filter(group_column.is_(None) if scope_id is None else group_column == scope_id)
        return keys.key_for_last(query.scalar())

    @classmethod
    def get_sorted(cls, scope_value: Any = None, desc: bool = False) -> List["OrderableMixin"]:
        """按排序值获取分组内的记录（相同排序值按 id）"""
        column = getattr(cls, cls._sort_field_name())
        query = cls.query
        scope_field, scope_id = cls._scope_for(scope_value)
        if scope_field is not None:
            group_column = getattr(cls, scope_field)
            query = query.filter(group_column.is_(None) if scope_id is None else group_column == scope_id)
        if desc:
            return query.order_by(column.desc(), cls.id.desc()).all()
        return query.order_by(column.asc(), cls.id.asc()).all()

    @classmethod
    def rebalance_order(
        cls,
        scope_value: Any = _UNSET,
        order_by: Optional[str] = None,
        direction: str = "asc",
    ) -> "RebalanceResult":
        """重置分组内的排序值为 10, 20, 30, ...

        Args:
            scope_value: 分组值；不传时重置整张表，传 None 表示分组字段为空的记录
            order_by: 决定新顺序的字段，默认按当前排序值
            direction: asc / desc

        Returns:
            RebalanceResult
        """
        from yorder.ordering.rebalance import rebalance

        filters = {}
        group_field = cls._group_field()
        if group_field is not None and scope_value is not _UNSET:
            filters[group_field] = scope_value
        return rebalance(
            cls._orderable_store(),
            order_field=cls._sort_field_name(),
            order_by=order_by or cls._sort_field_name(),
            direction=direction,
            filters=filters,
        )


__all__ = [
    "OrderableMixin",
]
