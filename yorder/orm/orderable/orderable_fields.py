"""排序字段定义

使用示例:
    from yorder.orm import CoreModel, OrderFieldMixin, OrderableMixin

    class Navigation(CoreModel, OrderFieldMixin, OrderableMixin):
        __tablename__ = "navigation"

        name: Mapped[str] = mapped_column(String(50))
        # sort_order 字段由 OrderFieldMixin 提供
"""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column


class OrderFieldMixin:
    """排序字段 Mixin

    字段说明:
        - sort_order: 排序值，越小越靠前；相邻记录之间通常间隔 10
    """

    sort_order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        index=True,
        comment="排序值"
    )


__all__ = [
    "OrderFieldMixin",
]
