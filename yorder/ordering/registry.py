"""
排序引擎 - 可排序集合注册表

只有注册过的模型才能通过表名参与排序，未注册的表名在打开事务之前
就会以 UnsupportedResourceException 拒绝。

每个集合声明自己允许使用的排序字段、范围字段、排序依据字段和过滤字段，
请求中的字段名必须落在这些白名单中。

使用示例:
    from yorder.ordering import orderable_registry, OrderableCollection

    orderable_registry.register(OrderableCollection(
        name="navigation_group",
        model=NavigationGroup,
        aliases=("navigationGroup",),
    ))

    collection = orderable_registry.resolve("navigationGroup")
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Type, Union

from sqlalchemy import inspect

from yorder.log import get_logger
from yorder.orm.utils import to_snake_case

from .exceptions import InvalidArgumentException, UnsupportedResourceException

logger = get_logger("yorder.ordering.registry")

DEFAULT_ORDER_FIELD = "sort_order"
GENERIC_ORDER_FIELD = "order_key"


def _as_tuple(value: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass
class OrderableCollection:
    """可排序集合

    Attributes:
        name: 集合名（请求中的 tableName）
        model: SQLAlchemy 模型类，必须有整数主键 id
        order_fields: 允许作为排序键的字段，第一个为默认值
        scope_fields: 允许作为范围（分组）的字段
        order_by_fields: 重排时允许作为排序依据的字段，空表示模型的全部列
        filter_fields: 重排时允许过滤的字段，空表示模型的全部列
        aliases: 表名别名
    """
    name: str
    model: Type[Any]
    order_fields: Tuple[str, ...] = (DEFAULT_ORDER_FIELD,)
    scope_fields: Tuple[str, ...] = ()
    order_by_fields: Tuple[str, ...] = ()
    filter_fields: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()
    columns: Tuple[str, ...] = field(init=False, repr=False, default=())

    def __post_init__(self):
        self.order_fields = _as_tuple(self.order_fields)
        self.scope_fields = _as_tuple(self.scope_fields)
        self.aliases = _as_tuple(self.aliases)

        if not self.order_fields:
            raise ValueError(f"集合 {self.name} 至少需要一个排序字段")

        self.columns = tuple(attr.key for attr in inspect(self.model).column_attrs)
        if "id" not in self.columns:
            raise ValueError(f"模型 {self.model.__name__} 没有 id 主键")

        self.order_by_fields = _as_tuple(self.order_by_fields) or self.columns
        if "id" not in self.order_by_fields:
            self.order_by_fields = ("id",) + self.order_by_fields
        self.filter_fields = _as_tuple(self.filter_fields) or self.columns

        for name in self.order_fields + self.scope_fields + self.order_by_fields + self.filter_fields:
            if name not in self.columns:
                raise ValueError(f"模型 {self.model.__name__} 没有字段: {name}")

    # ==================== 默认值 ====================

    @property
    def default_order_field(self) -> str:
        """默认排序字段"""
        return self.order_fields[0]

    @property
    def default_scope_field(self) -> Optional[str]:
        """唯一的范围字段，没有或有多个时为 None"""
        if len(self.scope_fields) == 1:
            return self.scope_fields[0]
        return None

    # ==================== 字段校验 ====================

    def _check(self, value: Optional[str], allowed: Tuple[str, ...], kind: str) -> str:
        if not value:
            raise InvalidArgumentException(f"{kind}不能为空", field=kind)
        normalized = to_snake_case(value)
        if normalized not in allowed:
            raise InvalidArgumentException(
                f"表 {self.name} 不支持的{kind}: {value}",
                field=kind,
                details=[f"允许的{kind}: {', '.join(allowed) or '无'}"],
            )
        return normalized

    def validate_order_field(self, value: Optional[str] = None) -> str:
        """校验排序字段

        None 返回默认排序字段；通用名 orderKey 指向默认排序字段。
        """
        if value is None:
            return self.default_order_field
        if to_snake_case(value) == GENERIC_ORDER_FIELD and GENERIC_ORDER_FIELD not in self.columns:
            return self.default_order_field
        return self._check(value, self.order_fields, "排序字段")

    def validate_scope_field(self, value: str) -> str:
        """校验范围字段"""
        return self._check(value, self.scope_fields, "范围字段")

    def validate_order_by(self, value: str) -> str:
        """校验重排依据字段"""
        return self._check(value, self.order_by_fields, "排序依据字段")

    def resolve_scope(self, scope_field: Optional[str], scope_id: Any) -> Optional[Tuple[str, Any]]:
        """解析范围参数

        - 两者都未提供：不限定范围
        - 只提供 scope_id：使用唯一的范围字段，没有则参数错误
        - 提供 scope_field：scope_id 为 None 时表示该字段 IS NULL

        Returns:
            (范围字段, 范围值) 或 None
        """
        if scope_field is None:
            if scope_id is None:
                return None
            default = self.default_scope_field
            if default is None:
                raise InvalidArgumentException(
                    f"表 {self.name} 需要指定范围字段",
                    field="scope_field",
                )
            return default, scope_id
        return self.validate_scope_field(scope_field), scope_id


class OrderableRegistry:
    """可排序集合注册表

    使用示例:
        registry = OrderableRegistry()
        registry.register(OrderableCollection(name="navigation", model=Navigation))

        "navigation" in registry       # True
        registry.resolve("navigation")  # OrderableCollection
        registry.resolve("unknown")     # UnsupportedResourceException
    """

    def __init__(self):
        self._collections: Dict[str, OrderableCollection] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, collection: OrderableCollection, replace: bool = False) -> OrderableCollection:
        """注册集合

        Args:
            collection: 集合定义
            replace: 同名集合已存在时是否替换

        Raises:
            ValueError: 名称或别名已被占用且未指定 replace
        """
        names = (collection.name,) + collection.aliases
        for name in names:
            owner = self._aliases.get(name)
            if owner is not None and owner != collection.name:
                raise ValueError(f"表名 {name} 已被集合 {owner} 使用")
        if collection.name in self._collections:
            if not replace:
                raise ValueError(f"集合 {collection.name} 已注册")
            self.unregister(collection.name)

        self._collections[collection.name] = collection
        for name in names:
            self._aliases[name] = collection.name
        logger.debug(f"可排序集合已注册: {collection.name} -> {collection.model.__name__}")
        return collection

    def unregister(self, name: str) -> bool:
        """取消注册（按名称或别名）"""
        key = self._aliases.get(name)
        if key is None:
            return False
        self._collections.pop(key, None)
        self._aliases = {alias: owner for alias, owner in self._aliases.items() if owner != key}
        return True

    def get(self, name: Optional[str]) -> Optional[OrderableCollection]:
        """按名称或别名查找，找不到返回 None

        名称会同时尝试原样和 snake_case 形式（navigationGroup -> navigation_group）。
        """
        if not name:
            return None
        key = self._aliases.get(name) or self._aliases.get(to_snake_case(name))
        if key is None:
            return None
        return self._collections[key]

    def resolve(self, name: Optional[str]) -> OrderableCollection:
        """按名称或别名查找

        Raises:
            UnsupportedResourceException: 表名未注册
        """
        collection = self.get(name)
        if collection is None:
            raise UnsupportedResourceException(str(name))
        return collection

    def names(self) -> List[str]:
        """已注册的集合名"""
        return list(self._collections)

    def clear(self) -> None:
        self._collections.clear()
        self._aliases.clear()

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __iter__(self) -> Iterator[OrderableCollection]:
        return iter(list(self._collections.values()))

    def __len__(self) -> int:
        return len(self._collections)


# 全局实例
orderable_registry = OrderableRegistry()


def register_orderable_model(
    model: Type[Any],
    name: Optional[str] = None,
    order_fields: Union[str, Sequence[str], None] = None,
    scope_fields: Union[str, Sequence[str], None] = None,
    order_by_fields: Union[str, Sequence[str], None] = None,
    filter_fields: Union[str, Sequence[str], None] = None,
    aliases: Union[str, Sequence[str], None] = None,
    registry: Optional[OrderableRegistry] = None,
    replace: bool = False,
) -> Type[Any]:
    """根据模型的类属性注册可排序集合

    未显式传入的参数从模型读取：
    - __orderable_name__: 集合名，默认 __tablename__
    - __sort_field__: 排序字段，默认 sort_order
    - __sort_group_by__: 范围字段
    - __orderable_aliases__: 表名别名

    返回模型本身，因此也可以作为类装饰器使用。

    使用示例:
        @register_orderable_model
        class Department(OrderableMixin, CoreModel):
            __sort_group_by__ = "parent_id"
            parent_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """
    registry = registry if registry is not None else orderable_registry

    collection = OrderableCollection(
        name=name or getattr(model, "__orderable_name__", None) or model.__tablename__,
        model=model,
        order_fields=_as_tuple(order_fields) or (getattr(model, "__sort_field__", None) or DEFAULT_ORDER_FIELD,),
        scope_fields=_as_tuple(scope_fields) or _as_tuple(getattr(model, "__sort_group_by__", None)),
        order_by_fields=_as_tuple(order_by_fields),
        filter_fields=_as_tuple(filter_fields),
        aliases=_as_tuple(aliases) or _as_tuple(getattr(model, "__orderable_aliases__", None)),
    )
    registry.register(collection, replace=replace)
    return model


__all__ = [
    "DEFAULT_ORDER_FIELD",
    "OrderableCollection",
    "OrderableRegistry",
    "orderable_registry",
    "register_orderable_model",
]
