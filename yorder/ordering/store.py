"""
排序引擎 - 记录存储

基于 SQLAlchemy Session 的记录访问适配器，只提供排序算法需要的几种操作。
事务通过 transaction_manager 以上下文管理器方式获取：
正常退出提交，任何异常路径回滚。已处于事务中时加入外层事务。

使用示例:
    store = RecordStore(collection, session)

    with store.transaction():
        source = store.find_one([FieldFilter("id", FilterOp.EQ, 5)])
        store.update(5, {"sort_order": 15})
"""

from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from yorder.orm.transaction import TransactionContext, transaction_manager

from .enums import SortDirection
from .exceptions import RecordNotFoundException
from .filters import FieldFilter, apply_filters
from .registry import OrderableCollection


class RecordStore:
    """单个可排序集合的记录存储

    Args:
        collection: 可排序集合
        session: SQLAlchemy 会话
    """

    def __init__(self, collection: OrderableCollection, session: Session):
        self.collection = collection
        self.session = session

    @property
    def model(self):
        return self.collection.model

    def _column(self, name: str):
        return getattr(self.model, name)

    def _ordering(self, order_by: str, direction: Union[SortDirection, str]):
        column = self._column(order_by)
        id_column = self._column("id")
        if SortDirection(direction) == SortDirection.DESC:
            clauses = [column.desc()]
        else:
            clauses = [column.asc()]
        if order_by != "id":
            # 相同排序值时按 id 升序，保证结果确定
            clauses.append(id_column.asc())
        return clauses

    # ==================== 查询 ====================

    def find_one(self, filters: Iterable[FieldFilter] = ()) -> Optional[Any]:
        """查找满足条件的一条记录，不存在返回 None"""
        query = apply_filters(self.session.query(self.model), self.model, filters)
        return query.first()

    def find_first_ordered(
        self,
        filters: Iterable[FieldFilter],
        order_by: str,
        direction: Union[SortDirection, str] = SortDirection.ASC,
    ) -> Optional[Any]:
        """按 order_by 排序后的第一条记录

        order_by 字段为 NULL 的记录不参与比较。
        """
        query = apply_filters(self.session.query(self.model), self.model, filters)
        query = query.filter(self._column(order_by).is_not(None))
        return query.order_by(*self._ordering(order_by, direction)).first()

    def scan(
        self,
        filters: Iterable[FieldFilter] = (),
        order_by: str = "id",
        direction: Union[SortDirection, str] = SortDirection.ASC,
        columns: Sequence[str] = ("id",),
    ) -> List[Any]:
        """按顺序读取满足条件的记录（只查询指定列）

        Returns:
            Row 列表，可按列名访问（row.id）
        """
        query = self.session.query(*[self._column(name) for name in columns])
        query = apply_filters(query, self.model, filters)
        return query.order_by(*self._ordering(order_by, direction)).all()

    # ==================== 写入 ====================

    def update(self, record_id: Any, fields: Dict[str, Any]) -> int:
        """按 id 更新字段

        Returns:
            更新的行数（1）

        Raises:
            RecordNotFoundException: 记录不存在
        """
        count = (
            self.session.query(self.model)
            .filter(self._column("id") == record_id)
            .update(fields, synchronize_session="evaluate")
        )
        if count == 0:
            raise RecordNotFoundException(self.collection.name, record_id)
        return count

    # ==================== 事务 ====================

    @contextmanager
    def transaction(self) -> Generator[TransactionContext, None, None]:
        """在本存储的会话上获取事务"""
        with transaction_manager.transaction(session=self.session) as tx:
            yield tx


__all__ = ["RecordStore"]
