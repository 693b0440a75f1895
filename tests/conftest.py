"""
Pytest 公共配置和 Fixtures

提供测试所需的公共资源：
- 内存数据库（StaticPool）
- 绑定到 CoreModel.query 的 scoped session
- 注册了测试模型的排序注册表和排序服务
- 记录工厂
"""

import os
import tempfile

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

from yorder.orm import Base, CoreModel, transaction_manager
from yorder.ordering import OrderableRegistry, OrderingService, register_orderable_model

from tests.helpers import Navigation, NavigationGroup, Department, Notice, reset_transaction_manager


# ==================== 基础 Fixtures ====================

@pytest.fixture(scope="session")
def temp_dir():
    """创建临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def temp_file(temp_dir):
    """创建临时文件的工厂函数"""
    created_files = []

    def _create_file(filename: str, content: str = "") -> str:
        filepath = os.path.join(temp_dir, filename)
        if os.path.dirname(filepath):
            os.makedirs(os.path.dirname(filepath), exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(content)
        created_files.append(filepath)
        return filepath

    yield _create_file

    for f in created_files:
        if os.path.exists(f):
            os.remove(f)


# ==================== 数据库 Fixtures ====================

@pytest.fixture
def memory_engine():
    """创建内存数据库引擎

    StaticPool 让所有操作使用同一个连接，check_same_thread=False 允许跨线程访问。
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def session_scope(memory_engine):
    """建表并把 scoped session 绑定到 CoreModel.query"""
    Base.metadata.create_all(bind=memory_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)
    scope = scoped_session(SessionLocal)
    CoreModel.query = scope.query_property()
    reset_transaction_manager(transaction_manager)
    yield scope
    scope.remove()
    Base.metadata.drop_all(bind=memory_engine)


@pytest.fixture
def session(session_scope):
    return session_scope()


# ==================== 排序 Fixtures ====================

@pytest.fixture
def registry():
    """注册了测试模型的独立注册表"""
    reg = OrderableRegistry()
    register_orderable_model(Navigation, registry=reg)
    register_orderable_model(NavigationGroup, registry=reg)
    register_orderable_model(Department, registry=reg)
    register_orderable_model(Notice, registry=reg, aliases=("notices",))
    return reg


@pytest.fixture
def service(registry, session_scope):
    return OrderingService(registry=registry, session_factory=session_scope)


@pytest.fixture
def make_records(session):
    """批量创建记录

    使用示例:
        make_records(Navigation, [(3, 10), (4, 20), (5, 5)])   # (id, sort_order)
        make_records(Department, [(1, 10)], parent_id=3)
    """
    def _make(model, rows, **fields):
        records = []
        for record_id, key in rows:
            record = model(id=record_id, sort_order=key, **fields)
            session.add(record)
            records.append(record)
        session.commit()
        return records

    return _make


@pytest.fixture
def key_of(session):
    """读取记录的最新排序值"""
    def _key_of(model, record_id):
        session.expire_all()
        return session.get(model, record_id).sort_order

    return _key_of
