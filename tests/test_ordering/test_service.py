"""排序服务测试

按对外调用入口验证参数校验顺序、表名解析、日志和错误包装。
"""

import logging

import pytest
from sqlalchemy.exc import OperationalError

from yorder.config import OrderingSettings
from yorder.orm import transaction_manager
from yorder.ordering import (
    InvalidArgumentException,
    MoveRequest,
    OrderingService,
    RebalanceRequest,
    RecordNotFoundException,
    RecordStore,
    StoreFailureException,
    UnsupportedResourceException,
)

from tests.helpers import Department, Navigation, Notice


class TestServiceMove:

    def test_move_after_scenario(self, service, make_records, key_of):
        make_records(Navigation, [(3, 10), (4, 20), (5, 5)])

        result = service.move(table_name="navigation", source_id=5, target_id=3, position="after")

        assert result.updated_count == 1
        assert key_of(Navigation, 5) == 15

    def test_move_with_request_object(self, service, make_records, key_of):
        make_records(Navigation, [(1, 10), (2, 20)])

        request = MoveRequest.model_validate({"tableName": "navigation", "sourceId": 1, "position": "last"})
        assert service.move(request).updated_count == 1
        assert key_of(Navigation, 1) == 30

    def test_legacy_parent_parameters(self, service, make_records, key_of):
        make_records(Department, [(8, 10), (9, 20)], parent_id=3)
        make_records(Department, [(10, 50)], parent_id=3)
        make_records(Department, [(11, 15)], parent_id=4)

        request = MoveRequest.model_validate({
            "tableName": "department",
            "sourceId": 10,
            "targetId": 9,
            "position": "before",
            "parentId": 3,
            "parentField": "parentId",
        })
        service.move(request)

        assert key_of(Department, 10) == 15

    def test_table_alias(self, service, session, key_of):
        from tests.helpers import NavigationGroup

        session.add_all([NavigationGroup(id=1, sort_order=10), NavigationGroup(id=2, sort_order=20)])
        session.commit()

        service.move(table_name="navigationGroup", source_id=2, position="first")

        assert key_of(NavigationGroup, 2) == 0

    def test_move_before_no_predecessor_scenario(self, service, make_records, key_of):
        make_records(Navigation, [(1, 10), (2, 50)])

        service.move(table_name="navigation", source_id=2, target_id=1, position="before")

        assert key_of(Navigation, 2) == 0

    def test_move_first_empty_table_scenario(self, service):
        with pytest.raises(RecordNotFoundException):
            service.move(table_name="navigation", source_id=7, position="first")


class TestServiceValidation:
    """参数错误在访问数据库之前抛出"""

    @pytest.fixture
    def offline_service(self, registry):
        def no_session():
            raise AssertionError("不应访问数据库")
        return OrderingService(registry=registry, session_factory=no_session)

    @pytest.mark.parametrize("kwargs", [
        {"source_id": 1, "position": "last"},
        {"table_name": "navigation", "position": "last"},
        {"table_name": "navigation", "source_id": 1},
    ])
    def test_missing_required(self, offline_service, kwargs):
        with pytest.raises(InvalidArgumentException):
            offline_service.move(**kwargs)

    def test_invalid_position(self, offline_service):
        with pytest.raises(InvalidArgumentException):
            offline_service.move(table_name="navigation", source_id=1, position="middle")

    def test_relative_without_target(self, offline_service):
        with pytest.raises(InvalidArgumentException):
            offline_service.move(table_name="navigation", source_id=1, position="before")

    def test_position_checked_before_table(self, offline_service):
        with pytest.raises(InvalidArgumentException):
            offline_service.move(table_name="bogus_table", source_id=1, position="middle")

    def test_unsupported_table(self, offline_service):
        with pytest.raises(UnsupportedResourceException) as exc_info:
            offline_service.move(table_name="bogus_table", source_id=1, position="last")
        assert exc_info.value.is_client_error

    def test_invalid_order_field(self, offline_service):
        with pytest.raises(InvalidArgumentException):
            offline_service.move(table_name="navigation", source_id=1, position="last", order_field="name")

    def test_invalid_scope_field(self, offline_service):
        with pytest.raises(InvalidArgumentException):
            offline_service.move(
                table_name="department", source_id=1, position="last",
                scope_field="name", scope_id=1,
            )

    def test_wrong_type_becomes_invalid_argument(self, offline_service):
        with pytest.raises(InvalidArgumentException) as exc_info:
            offline_service.move(table_name="navigation", source_id="abc", position="last")
        assert exc_info.value.details

    def test_rebalance_unknown_table(self, offline_service):
        with pytest.raises(UnsupportedResourceException):
            offline_service.rebalance(table_name="bogus_table")

    def test_rebalance_missing_table(self, offline_service):
        with pytest.raises(InvalidArgumentException):
            offline_service.rebalance()

    def test_rebalance_invalid_order_by(self, offline_service):
        with pytest.raises(InvalidArgumentException):
            offline_service.rebalance(table_name="notice", order_by="nope")

    def test_rebalance_invalid_direction(self, offline_service):
        with pytest.raises(InvalidArgumentException):
            offline_service.rebalance(table_name="notice", direction="up")


class TestServiceRebalance:

    def test_reset_with_filter_scenario(self, service, make_records, key_of):
        make_records(Notice, [(1, 30), (2, 10), (3, 20)], is_deleted=False)
        make_records(Notice, [(4, 5)], is_deleted=True)

        request = RebalanceRequest.model_validate({
            "tableName": "notice",
            "orderBy": "createdAt",
            "orderDirection": "asc",
            "filters": {"isDeleted": False},
        })
        result = service.rebalance(request)

        assert result.updated_count == 3
        assert result.order_by == "created_at"
        # created_at 相同，按 id 升序
        assert [key_of(Notice, i) for i in (1, 2, 3)] == [10, 20, 30]
        assert key_of(Notice, 4) == 5

    def test_defaults_from_settings(self, registry, session_scope, make_records, key_of):
        make_records(Notice, [(1, 0), (2, 0)])
        settings = OrderingSettings(step=100, default_order_by="id")
        service = OrderingService(registry=registry, session_factory=session_scope, settings=settings)

        result = service.rebalance(table_name="notice")

        assert result.order_field == "sort_order"
        assert [key_of(Notice, i) for i in (1, 2)] == [100, 200]


class TestServiceFailures:

    def test_database_error_wrapped(self, service, make_records, key_of, monkeypatch):
        make_records(Navigation, [(1, 10), (2, 20)])

        def broken_update(self, record_id, fields):
            raise OperationalError("UPDATE test_navigation", {}, Exception("database is locked"))

        monkeypatch.setattr(RecordStore, "update", broken_update)

        with pytest.raises(StoreFailureException) as exc_info:
            service.move(table_name="navigation", source_id=1, position="last")

        assert exc_info.value.status_code == 500
        assert not exc_info.value.is_client_error
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert key_of(Navigation, 1) == 10

    def test_rebalance_failure_wrapped(self, service, make_records, monkeypatch):
        make_records(Notice, [(1, 10)])

        def broken_update(self, record_id, fields):
            raise OperationalError("UPDATE test_notice", {}, Exception("database is locked"))

        monkeypatch.setattr(RecordStore, "update", broken_update)

        with pytest.raises(StoreFailureException):
            service.rebalance(table_name="notice")


class TestServiceTransactions:

    def test_joins_outer_transaction(self, service, session, make_records, key_of):
        make_records(Navigation, [(1, 10), (2, 20)])

        with pytest.raises(RuntimeError):
            with transaction_manager.transaction(session=session):
                service.move(table_name="navigation", source_id=1, position="last")
                raise RuntimeError("外层失败")

        # 外层回滚时内层的移动一并回滚
        assert key_of(Navigation, 1) == 10

    def test_outer_transaction_commits_move(self, service, session, make_records, key_of):
        make_records(Navigation, [(1, 10), (2, 20)])

        with transaction_manager.transaction(session=session):
            service.move(table_name="navigation", source_id=1, position="last")

        assert key_of(Navigation, 1) == 30


class TestServiceLogging:

    def test_logs_start_and_finish(self, service, make_records, caplog):
        make_records(Navigation, [(1, 10), (2, 20)])

        with caplog.at_level(logging.INFO, logger="yorder.ordering"):
            service.move(table_name="navigation", source_id=1, position="last")

        messages = [record.getMessage() for record in caplog.records]
        assert any("开始排序操作 - 表: navigation, 源ID: 1" in m for m in messages)
        assert any("排序操作完成 - 成功更新 1 条记录" in m for m in messages)

    def test_logging_can_be_disabled(self, registry, session_scope, make_records, caplog):
        make_records(Navigation, [(1, 10)])
        service = OrderingService(
            registry=registry,
            session_factory=session_scope,
            settings=OrderingSettings(log_operations=False),
        )

        with caplog.at_level(logging.INFO, logger="yorder.ordering"):
            service.move(table_name="navigation", source_id=1, position="last")

        assert not any("开始排序操作" in record.getMessage() for record in caplog.records)
