"""相对位置排序模块

导出:
    - OrderFieldMixin: 排序字段 Mixin（提供 sort_order 字段）
    - OrderableMixin: 相对位置排序 Mixin（move_before / move_after / move_to_first / move_to_last）
"""

from .orderable_fields import OrderFieldMixin
from .orderable_mixin import OrderableMixin

__all__ = [
    "OrderFieldMixin",
    "OrderableMixin",
]
