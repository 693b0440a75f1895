"""
排序引擎 - 服务入口

OrderingService 是移动和重置排序的统一调用入口：
校验参数、按表名解析可排序集合、获取会话，然后调用 move / rebalance。

- 参数错误和未注册的表名在访问数据库之前抛出
- 数据库异常包装为 StoreFailureException，不做重试
- 已处于事务中时使用该事务的会话并加入该事务

使用示例:
    from yorder.ordering import OrderingService

    service = OrderingService()

    service.move(table_name="navigation", source_id=5, target_id=3, position="after")
    service.rebalance(table_name="notice", filters={"is_deleted": False})
"""

from contextlib import contextmanager
from typing import Any, Callable, Generator, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yorder.config import OrderingSettings
from yorder.log import ordering_logger as logger
from yorder.orm.db_session import db_manager
from yorder.orm.transaction import TransactionError, get_current_transaction

from .exceptions import InvalidArgumentException, StoreFailureException
from .move import MoveResult, MoveTarget, move, parse_position
from .rebalance import RebalanceResult, parse_direction, rebalance
from .registry import OrderableCollection, OrderableRegistry, orderable_registry
from .schemas import MoveRequest, RebalanceRequest
from .store import RecordStore


def _validation_details(error: ValidationError):
    return [
        f"{'.'.join(str(loc) for loc in item['loc'])}: {item['msg']}"
        for item in error.errors()
    ]


class OrderingService:
    """排序服务

    Args:
        registry: 可排序集合注册表，默认全局 orderable_registry
        session_factory: 返回 Session 的可调用对象，会话由调用方管理；
            不传时每次调用从 db_manager 新建会话，用完关闭
        settings: 排序配置
    """

    def __init__(
        self,
        registry: Optional[OrderableRegistry] = None,
        session_factory: Optional[Callable[[], Session]] = None,
        settings: Optional[OrderingSettings] = None,
    ):
        self.registry = registry if registry is not None else orderable_registry
        self.session_factory = session_factory
        self.settings = settings or OrderingSettings()

    # ==================== 内部方法 ====================

    @contextmanager
    def _store(self, collection: OrderableCollection) -> Generator[RecordStore, None, None]:
        current = get_current_transaction()
        if current is not None and current.is_active:
            yield RecordStore(collection, current.session)
            return
        if self.session_factory is not None:
            yield RecordStore(collection, self.session_factory())
            return

        session = db_manager.create_session()
        try:
            yield RecordStore(collection, session)
        finally:
            session.close()

    def _order_field(self, collection: OrderableCollection, order_field: Optional[str]) -> Optional[str]:
        if order_field:
            return order_field
        if self.settings.default_order_field in collection.order_fields:
            return self.settings.default_order_field
        return None

    @staticmethod
    def _parse(schema, request, kwargs):
        if request is not None:
            if kwargs:
                request = request.model_copy(update=kwargs)
            return request
        try:
            return schema.model_validate(kwargs)
        except ValidationError as e:
            raise InvalidArgumentException("参数错误", details=_validation_details(e))

    def _log(self, message: str) -> None:
        if self.settings.log_operations:
            logger.info(message)

    # ==================== 移动 ====================

    def move(self, request: Optional[MoveRequest] = None, **kwargs: Any) -> MoveResult:
        """移动一条记录

        Args:
            request: MoveRequest，也可以直接用关键字参数
                (table_name, source_id, target_id, position, order_field, scope_id, scope_field)

        Returns:
            MoveResult

        Raises:
            InvalidArgumentException: 参数缺失或不合法
            UnsupportedResourceException: 表名未注册
            RecordNotFoundException: 源记录或目标记录不存在
            StoreFailureException: 数据库执行失败
        """
        request = self._parse(MoveRequest, request, kwargs)

        if not request.table_name or request.source_id is None or not request.position:
            raise InvalidArgumentException(
                "参数错误：表名、源记录ID和位置不能为空",
                details=["tableName、sourceId、position 为必填参数"],
            )
        position = parse_position(request.position)
        target = MoveTarget(
            position=position,
            target_id=request.target_id,
            scope_field=request.scope_field,
            scope_id=request.scope_id,
        )
        collection = self.registry.resolve(request.table_name)
        order_field = collection.validate_order_field(self._order_field(collection, request.order_field))
        collection.resolve_scope(target.scope_field, target.scope_id)

        self._log(
            f"开始排序操作 - 表: {request.table_name}, 源ID: {request.source_id}, "
            f"目标ID: {request.target_id}, 位置: {position.value}"
        )
        try:
            with self._store(collection) as store:
                result = move(
                    store,
                    request.source_id,
                    target,
                    order_field=order_field,
                    step=self.settings.step,
                    seed=self.settings.seed_key,
                )
        except (SQLAlchemyError, TransactionError) as e:
            logger.error(f"排序操作失败 - 表: {request.table_name}, 源ID: {request.source_id}: {e}")
            raise StoreFailureException("排序操作失败", cause=e) from e

        self._log(f"排序操作完成 - 成功更新 {result.updated_count} 条记录")
        return result

    # ==================== 重置排序 ====================

    def rebalance(self, request: Optional[RebalanceRequest] = None, **kwargs: Any) -> RebalanceResult:
        """重置排序

        Args:
            request: RebalanceRequest，也可以直接用关键字参数
                (table_name, order_field, order_by, direction, filters)

        Returns:
            RebalanceResult

        Raises:
            InvalidArgumentException: 参数不合法
            UnsupportedResourceException: 表名未注册
            StoreFailureException: 数据库执行失败，整批回滚
        """
        request = self._parse(RebalanceRequest, request, kwargs)

        if not request.table_name:
            raise InvalidArgumentException("表名不能为空", field="table_name")
        collection = self.registry.resolve(request.table_name)
        order_field = collection.validate_order_field(self._order_field(collection, request.order_field))
        order_by = collection.validate_order_by(request.order_by or self.settings.default_order_by)
        direction = parse_direction(request.direction)

        self._log(
            f"开始重置排序 - 表: {request.table_name}, 排序字段: {order_field}, "
            f"排序依据: {order_by} {direction.value}"
        )
        try:
            with self._store(collection) as store:
                result = rebalance(
                    store,
                    order_field=order_field,
                    order_by=order_by,
                    direction=direction,
                    filters=request.filters,
                    step=self.settings.step,
                )
        except (SQLAlchemyError, TransactionError) as e:
            logger.error(f"重置排序失败 - 表: {request.table_name}: {e}")
            raise StoreFailureException("重置排序失败", cause=e) from e

        if result.updated_count == 0:
            self._log("没有需要重置排序的记录")
        else:
            self._log(f"重置排序完成 - 成功更新 {result.updated_count} 条记录")
        return result


__all__ = ["OrderingService"]
