"""排序引擎

通用的相对位置排序：把一条记录移到另一条之前或之后、移到最前或最后，
只改写被移动记录的排序值；间隔用尽时通过重置排序重新分配 10, 20, 30, ...

使用示例:
    from yorder.ordering import (
        OrderableCollection,
        OrderingService,
        orderable_registry,
        create_ordering_router,
    )

    orderable_registry.register(OrderableCollection(name="navigation", model=Navigation))

    service = OrderingService()
    service.move(table_name="navigation", source_id=5, target_id=3, position="after")
    service.rebalance(table_name="navigation", order_by="sort_order")

    app.include_router(create_ordering_router(service), prefix="/public")
"""

from . import keys
from .enums import MovePosition, SortDirection
from .exceptions import (
    OrderingException,
    InvalidArgumentException,
    UnsupportedResourceException,
    RecordNotFoundException,
    StoreFailureException,
)
from .filters import FilterOp, FieldFilter, parse_filters, apply_filters
from .registry import (
    OrderableCollection,
    OrderableRegistry,
    orderable_registry,
    register_orderable_model,
)
from .store import RecordStore
from .move import MoveTarget, MoveResult, move
from .rebalance import RebalanceResult, rebalance
from .schemas import MoveRequest, RebalanceRequest, MoveResultSchema, RebalanceResultSchema
from .service import OrderingService
from .api import create_ordering_router

__all__ = [
    "keys",
    "MovePosition",
    "SortDirection",
    "OrderingException",
    "InvalidArgumentException",
    "UnsupportedResourceException",
    "RecordNotFoundException",
    "StoreFailureException",
    "FilterOp",
    "FieldFilter",
    "parse_filters",
    "apply_filters",
    "OrderableCollection",
    "OrderableRegistry",
    "orderable_registry",
    "register_orderable_model",
    "RecordStore",
    "MoveTarget",
    "MoveResult",
    "move",
    "RebalanceResult",
    "rebalance",
    "MoveRequest",
    "RebalanceRequest",
    "MoveResultSchema",
    "RebalanceResultSchema",
    "OrderingService",
    "create_ordering_router",
]
