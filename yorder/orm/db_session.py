"""
数据库会话管理模块

提供数据库引擎创建、会话管理等功能。

公开 API:
- db_manager: 数据库管理器单例
- init_database(): 初始化数据库连接
- get_engine(): 获取数据库引擎
- get_db(): FastAPI 依赖注入用的生成器
- db_session_scope(): 非 HTTP 场景的上下文管理器
- on_request_end(): 请求结束清理
"""

from typing import Callable, Any, Generator
from uuid import uuid4
import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session, Session
from sqlalchemy.pool import QueuePool, StaticPool

from yorder.log import get_logger

_logger = get_logger("yorder.orm.session")

__all__ = [
    'db_manager',
    'init_database',
    'get_engine',
    'get_db',
    'db_session_scope',
    'on_request_end',
]


class DatabaseManager:
    """数据库管理器（单例）

    封装数据库连接状态和会话管理，提供统一的访问接口。

    使用示例:
        from yorder.orm import db_manager

        db_manager.init(database_url="sqlite:///./test.db")
        engine = db_manager.engine
        session = db_manager.get_session()
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._engine = None
        self._session_scope = None
        self._session_maker = None
        self._request_id_var: ContextVar[str] = ContextVar('request_id', default='')
        self._initialized = True

    # ==================== 属性访问 ====================

    @property
    def engine(self):
        """获取数据库引擎（只读）

        Raises:
            RuntimeError: 数据库未初始化时
        """
        if self._engine is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._engine

    @property
    def session_scope(self):
        """获取 scoped session（只读，内部使用）"""
        if self._session_scope is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._session_scope

    @property
    def is_initialized(self) -> bool:
        """检查数据库是否已初始化"""
        return self._engine is not None and self._session_scope is not None

    # ==================== 核心方法 ====================

    def init(
        self,
        database_url: str = None,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        logger: logging.Logger = None,
        scopefunc: Callable = None,
        config: Any = None,
        auto_setup_query: bool = True
    ):
        """初始化数据库连接

        Args:
            database_url: 数据库连接URL（如果提供 config 则忽略）
            echo: 是否输出SQL语句（如果提供 config 则忽略）
            pool_size: 连接池大小
            max_overflow: 最大溢出连接数
            pool_timeout: 连接超时时间
            pool_recycle: 连接回收时间
            pool_pre_ping: 连接前是否ping
            logger: 日志记录器
            scopefunc: session作用域函数，默认使用 _get_request_id
            config: 数据库配置对象（DatabaseSettings），提供后自动提取配置
            auto_setup_query: 是否自动设置 CoreModel.query 属性，默认 True

        Returns:
            tuple: (engine, session_scope)

        使用示例:
            from yorder.orm import init_database, db_session_scope

            engine, session = init_database(database_url="sqlite:///./test.db")
            engine, session = init_database(config=settings.database)

            with db_session_scope() as session:
                navs = session.query(Navigation).all()
        """
        if config is not None:
            database_url = getattr(config, "url", database_url)
            echo = getattr(config, "echo", echo)
            pool_size = getattr(config, "pool_size", pool_size)
            max_overflow = getattr(config, "max_overflow", max_overflow)
            pool_timeout = getattr(config, "pool_timeout", pool_timeout)
            pool_recycle = getattr(config, "pool_recycle", pool_recycle)
            pool_pre_ping = getattr(config, "pool_pre_ping", pool_pre_ping)

        if not database_url:
            raise ValueError("database_url 是必需的，请通过参数或 config 提供")

        if logger is None:
            logger = _logger

        logger.info(f"数据库配置URL: {database_url}")

        if database_url.startswith("sqlite:///"):
            db_path = database_url[len("sqlite:///"):]
            is_memory_db = db_path == ":memory:" or db_path == ""

            try:
                if is_memory_db:
                    # 内存数据库：使用 StaticPool（单连接）
                    self._engine = create_engine(
                        database_url,
                        echo=echo,
                        connect_args={"check_same_thread": False},
                        poolclass=StaticPool,
                    )
                    logger.info("SQLite内存数据库引擎创建成功（StaticPool）")
                else:
                    logger.info(f"SQLite文件数据库路径: {os.path.abspath(db_path)}")
                    self._engine = create_engine(
                        database_url,
                        echo=echo,
                        connect_args={
                            "check_same_thread": False,
                            "timeout": pool_timeout
                        },
                        poolclass=QueuePool,
                        pool_size=pool_size,
                        max_overflow=max_overflow,
                        pool_timeout=pool_timeout,
                        pool_pre_ping=pool_pre_ping,
                        pool_recycle=pool_recycle
                    )
                    logger.info(f"SQLite文件数据库引擎创建成功（QueuePool, pool_size={pool_size}）")
            except Exception as e:
                logger.error(f"创建SQLite数据库引擎失败: {str(e)}")
                raise
        else:
            try:
                self._engine = create_engine(
                    database_url,
                    echo=echo,
                    pool_pre_ping=pool_pre_ping,
                    pool_size=pool_size,
                    max_overflow=max_overflow,
                    pool_timeout=pool_timeout,
                    pool_recycle=pool_recycle
                )
                logger.info("数据库引擎创建成功")
            except Exception as e:
                logger.error(f"创建数据库引擎失败: {str(e)}")
                raise

        self._session_maker = sessionmaker(
            autocommit=False,
            autoflush=True,
            bind=self._engine,
        )

        if scopefunc is None:
            scopefunc = self._get_request_id

        self._session_scope = scoped_session(self._session_maker, scopefunc=scopefunc)

        # 延迟导入避免循环依赖
        if auto_setup_query:
            from .core_model import CoreModel
            CoreModel.query = self._session_scope.query_property()
            logger.info("CoreModel.query 属性已自动设置")

        logger.info("数据库session创建成功")

        return self._engine, self._session_scope

    def get_session(self) -> Session:
        """获取 scoped session（低级 API）

        直接使用此函数需要自行管理 session 清理，
        推荐使用 db_session_scope() 上下文管理器。
        """
        if self._session_scope is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._session_scope()

    def create_session(self) -> Session:
        """新建一个独立的 session（不进入 scoped 注册表），由调用方负责关闭"""
        if self._session_maker is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._session_maker()

    def cleanup(self):
        """请求结束时清理 session（幂等，多次调用安全）

        未提交的更改会被回滚，session 归还连接池，
        并重置 request_id 为下一个请求做准备。
        """
        request_id = self._request_id_var.get()

        if self._session_scope and self._session_scope.registry.has():
            self._session_scope.remove()
            _logger.debug(f"[request_id={request_id}] session_scope 移除完成")

        self._request_id_var.set('')

    def dispose(self):
        """释放引擎和 session 注册表（测试环境重置使用）"""
        if self._session_scope is not None:
            self._session_scope.remove()
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_scope = None
        self._session_maker = None

    # ==================== 请求ID管理（内部使用） ====================

    def _set_request_id(self, request_id: str = None) -> str:
        if not request_id:
            request_id = uuid4().hex[:8]
        self._request_id_var.set(request_id)
        return request_id

    def _get_request_id(self) -> str:
        value = self._request_id_var.get()
        if not value:
            value = uuid4().hex[:8]
            self._request_id_var.set(value)
            _logger.debug(f"request_id 未设置，自动生成: {value}")
        return value


# ==================== 全局单例 ====================

db_manager = DatabaseManager()


# ==================== 公开 API 函数 ====================

def init_database(
    database_url: str = None,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 3600,
    pool_pre_ping: bool = True,
    logger: logging.Logger = None,
    scopefunc: Callable = None,
    config: Any = None,
    auto_setup_query: bool = True
):
    """初始化数据库连接

    这是 db_manager.init() 的便捷包装函数。

    Returns:
        tuple: (engine, session_scope)
    """
    return db_manager.init(
        database_url=database_url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=pool_pre_ping,
        logger=logger,
        scopefunc=scopefunc,
        config=config,
        auto_setup_query=auto_setup_query
    )


def get_engine():
    """获取数据库引擎"""
    return db_manager.engine


def on_request_end():
    """请求结束时清理 session，db_manager.cleanup() 的便捷包装"""
    db_manager.cleanup()


def get_db() -> Generator[Session, None, None]:
    """获取数据库 session（FastAPI 依赖注入）

    使用示例:
        @app.get("/navigations")
        def list_navigations(db: Session = Depends(get_db)):
            return db.query(Navigation).all()
    """
    with db_session_scope() as session:
        yield session


@contextmanager
def db_session_scope(
    request_id: str = None,
    auto_commit: bool = True
) -> Generator[Session, None, None]:
    """非 HTTP 场景的 session 上下文管理器

    Args:
        request_id: 请求ID，用于日志追踪，不传则自动生成
        auto_commit: 是否自动提交，默认 True

    使用示例:
        with db_session_scope() as session:
            session.add(Navigation(name="首页", sort_order=10))
        # 自动提交并清理
    """
    db_manager._set_request_id(request_id)
    session = db_manager.get_session()
    try:
        yield session
        if auto_commit:
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        on_request_end()
