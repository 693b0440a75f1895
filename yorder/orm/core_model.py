"""
ORM基础模型

提供自增主键、时间戳和常用的 CRUD 操作
"""

from __future__ import annotations

from sqlalchemy import Integer, DateTime, func, inspect
from sqlalchemy.orm import Mapped, mapped_column, declared_attr, declarative_base, Session, Query
from datetime import datetime
from typing import ClassVar, TYPE_CHECKING

if TYPE_CHECKING:
    from typing_extensions import Self

from .utils import to_snake_case


# 声明基类
Base = declarative_base()


class CoreModel(Base):
    """ORM基础模型类

    提供功能：
    - 自增主键 id
    - 自动表名生成（驼峰转下划线）
    - 创建/更新时间戳
    - 常用 CRUD 操作方法
    - 数据序列化方法

    使用示例:
        from yorder.orm import CoreModel, init_database

        init_database("sqlite:///./test.db")

        class Navigation(CoreModel):
            __tablename__ = "navigation"  # 可选，不指定则自动生成

            name: Mapped[str] = mapped_column(String(50))
            sort_order: Mapped[int] = mapped_column(Integer, default=0)

        nav = Navigation(name="首页", sort_order=10)
        nav.save(commit=True)
    """
    __abstract__ = True

    # query 属性由 init_database() 或测试环境通过 scoped_session.query_property() 设置
    if TYPE_CHECKING:
        query: ClassVar[Query[Self]]

    _session: Session = None

    @declared_attr.directive
    def __tablename__(cls) -> str:
        """驼峰命名转下划线"""
        return to_snake_case(cls.__name__)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, comment="主键ID")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
        onupdate=func.now(),
        comment="更新时间"
    )

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id}>"

    @property
    def session(self) -> Session:
        """获取当前session

        优先从 query 属性获取 session，如果不可用则从全局 scoped_session 获取
        """
        if self._session is None:
            if getattr(self.__class__, "query", None) is not None:
                self._session = self.__class__.query.session
            else:
                from .db_session import db_manager
                self._session = db_manager.get_session()
        return self._session

    # ==================== CRUD 操作方法 ====================

    def save(self, commit: bool = False) -> Self:
        """保存对象（自动判断新增或更新）

        Args:
            commit: 是否立即提交，默认False
                   - 无事务时：执行 session.commit()
                   - 有事务时：commit 被抑制，但会自动 flush 以获取自动生成字段

        Returns:
            self: 返回自身，支持链式调用
        """
        self.session.add(self)
        self.__is_commit(commit)
        return self

    def add(self, commit: bool = False) -> Self:
        """添加对象到session，等同于 save()"""
        return self.save(commit)

    @classmethod
    def add_all(cls, objects: list, commit: bool = False):
        """批量添加对象"""
        if not objects:
            return objects
        cls.query.session.add_all(objects)
        cls.__cls_commit(commit)
        return objects

    def delete(self, commit: bool = False):
        """删除对象"""
        self.session.delete(self)
        self.__is_commit(commit)

    def refresh(self) -> Self:
        """从数据库重新加载对象状态"""
        self.session.refresh(self)
        return self

    @classmethod
    def get(cls, id: int):
        """根据ID获取对象，不存在返回None"""
        return cls.query.filter_by(id=id).first()

    @classmethod
    def get_all(cls):
        """获取所有记录"""
        return cls.query.all()

    # ==================== 序列化方法 ====================

    def to_dict(self, exclude: set = None) -> dict:
        """转换为字典

        Args:
            exclude: 需要排除的字段集合

        Returns:
            字典格式的对象数据
        """
        exclude = exclude or set()
        return {
            c.key: getattr(self, c.key)
            for c in inspect(self).mapper.column_attrs
            if c.key not in exclude
        }

    def __is_commit(self, commit=False):
        """实例方法：根据参数决定是否提交

        当在事务上下文中时，commit=True 会被忽略，只执行 flush。
        """
        if commit:
            if self._should_suppress_commit():
                self.session.flush()
                return
            self.session.commit()

    @classmethod
    def __cls_commit(cls, commit=False):
        if commit:
            if cls._should_suppress_commit():
                cls.query.session.flush()
                return
            cls.query.session.commit()

    @staticmethod
    def _should_suppress_commit() -> bool:
        """检查是否应该抑制提交"""
        from .transaction import get_current_transaction
        tx = get_current_transaction()
        if tx is not None and tx.should_suppress_commit():
            from yorder.log import get_logger
            get_logger("yorder.orm.transaction").debug("commit=True 被事务上下文抑制")
            return True
        return False
