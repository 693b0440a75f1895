"""数据库会话管理测试"""

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from yorder.orm import Base, CoreModel, db_manager, db_session_scope, get_db, get_engine, init_database
from yorder.ordering import OrderingService

from tests.helpers import Navigation


@pytest.fixture
def database(monkeypatch):
    """初始化全局内存数据库，测试结束后释放"""
    monkeypatch.setattr(CoreModel, "query", None, raising=False)
    engine, scope = init_database("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    db_manager.dispose()


class TestDatabaseManager:
    """DatabaseManager 测试"""

    def test_singleton(self):
        from yorder.orm.db_session import DatabaseManager
        assert DatabaseManager() is db_manager

    def test_not_initialized(self):
        assert not db_manager.is_initialized
        with pytest.raises(RuntimeError):
            db_manager.engine
        with pytest.raises(RuntimeError):
            db_manager.create_session()

    def test_database_url_required(self):
        with pytest.raises(ValueError):
            init_database()

    def test_memory_database_uses_static_pool(self, database):
        assert db_manager.is_initialized
        assert get_engine() is database
        assert isinstance(database.pool, StaticPool)

    def test_query_property_is_set(self, database):
        assert CoreModel.query is not None
        assert Navigation.query.count() == 0

    def test_config_object(self, monkeypatch):
        class Config:
            url = "sqlite:///:memory:"
            echo = False

        monkeypatch.setattr(CoreModel, "query", None, raising=False)
        engine, _ = init_database(config=Config(), auto_setup_query=False)
        try:
            assert str(engine.url) == "sqlite:///:memory:"
            assert CoreModel.query is None
        finally:
            db_manager.dispose()

    def test_create_session_is_independent(self, database):
        first = db_manager.create_session()
        second = db_manager.create_session()
        try:
            assert isinstance(first, Session)
            assert first is not second
            assert first is not db_manager.get_session()
        finally:
            first.close()
            second.close()
            db_manager.cleanup()

    def test_dispose(self, database):
        db_manager.dispose()
        assert not db_manager.is_initialized


class TestSessionScope:
    """db_session_scope 测试"""

    def test_commit_on_exit(self, database):
        with db_session_scope() as session:
            session.add(Navigation(id=1, name="首页", sort_order=10))

        with db_session_scope() as session:
            assert session.get(Navigation, 1).sort_order == 10

    def test_rollback_on_error(self, database):
        with pytest.raises(RuntimeError):
            with db_session_scope() as session:
                session.add(Navigation(id=1, name="首页", sort_order=10))
                session.flush()
                raise RuntimeError("失败")

        with db_session_scope() as session:
            assert session.get(Navigation, 1) is None

    def test_without_auto_commit(self, database):
        with db_session_scope(auto_commit=False) as session:
            session.add(Navigation(id=1, name="首页", sort_order=10))

        with db_session_scope() as session:
            assert session.execute(text("SELECT COUNT(*) FROM test_navigation")).scalar() == 0


class TestServiceDefaultSession:
    """OrderingService 不传 session_factory 时使用 db_manager 新建会话"""

    def test_move_with_global_database(self, database, registry):
        with db_session_scope() as session:
            session.add_all([
                Navigation(id=3, name="A", sort_order=10),
                Navigation(id=4, name="B", sort_order=20),
                Navigation(id=5, name="C", sort_order=5),
            ])

        result = OrderingService(registry=registry).move(
            table_name="navigation", source_id=5, target_id=3, position="after"
        )

        assert result.updated_count == 1
        with db_session_scope() as session:
            assert session.get(Navigation, 5).sort_order == 15


class TestGetDb:
    """FastAPI 依赖注入"""

    def test_get_db_yields_session_and_commits(self, database):
        gen = get_db()
        session = next(gen)
        session.add(Navigation(id=1, name="首页", sort_order=10))
        with pytest.raises(StopIteration):
            next(gen)

        with db_session_scope() as session:
            assert session.get(Navigation, 1) is not None
