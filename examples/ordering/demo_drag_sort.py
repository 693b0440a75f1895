"""拖拽排序使用示例

演示排序引擎的几种使用方式：
1. 模型实例上的 move_before / move_after / move_to_first / move_to_last
2. 按父级分组的部门排序
3. OrderingService 按表名调用（与 HTTP 接口相同的参数）
4. 间隔用尽后的重置排序
5. 挂载 FastAPI 路由
"""

import sys
from pathlib import Path
from typing import Optional

# 添加项目根目录到 path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fastapi import FastAPI
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from yorder.exceptions import register_exception_handlers
from yorder.log import setup_root_logger
from yorder.orm import Base, CoreModel, OrderFieldMixin, OrderableMixin, db_session_scope, init_database
from yorder.ordering import OrderingService, create_ordering_router, register_orderable_model


# ==================== 模型定义 ====================

@register_orderable_model
class Navigation(CoreModel, OrderFieldMixin, OrderableMixin):
    """导航菜单 - 全表一个排序范围"""
    __tablename__ = "demo_navigation"
    __orderable_name__ = "navigation"

    name: Mapped[str] = mapped_column(String(50), comment="名称")


@register_orderable_model
class Department(CoreModel, OrderFieldMixin, OrderableMixin):
    """部门 - 同一父级内排序"""
    __tablename__ = "demo_department"
    __orderable_name__ = "department"
    __sort_group_by__ = "parent_id"

    name: Mapped[str] = mapped_column(String(50), comment="名称")
    parent_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="父级ID")


def show(title, records):
    print(f"  {title}: " + ", ".join(f"{r.name}({r.sort_order})" for r in records))


# ==================== 示例 1: 模型实例上移动 ====================

def demo_instance_moves():
    print("\n[示例 1] 模型实例上移动")

    for name in ["首页", "产品", "关于我们"]:
        nav = Navigation(name=name)
        nav.sort_order = Navigation.next_sort_order()
        nav.save(commit=True)
    show("初始", Navigation.get_sorted())

    home, product, about = Navigation.get_sorted()

    about.move_before(product)
    show("关于我们 移到 产品 之前", Navigation.get_sorted())

    home.move_to_last()
    show("首页 移到最后", Navigation.get_sorted())

    home.move_to_first()
    show("首页 移回最前", Navigation.get_sorted())


# ==================== 示例 2: 分组排序 ====================

def demo_grouped_moves():
    print("\n[示例 2] 同一父级内排序")

    for name in ["研发部", "市场部", "财务部"]:
        dept = Department(name=name, parent_id=1)
        dept.sort_order = Department.next_sort_order(1)
        dept.save(commit=True)
    Department(name="华东分部", parent_id=2, sort_order=Department.next_sort_order(2)).save(commit=True)

    rd, market, finance = Department.get_sorted(1)
    finance.move_to_first()
    show("父级 1", Department.get_sorted(1))
    show("父级 2（不受影响）", Department.get_sorted(2))


# ==================== 示例 3: 按表名调用 ====================

def demo_service():
    print("\n[示例 3] OrderingService 按表名调用")

    service = OrderingService()
    nav = Navigation.get_sorted()[0]
    target = Navigation.get_sorted()[-1]

    result = service.move(
        table_name="navigation",
        source_id=nav.id,
        target_id=target.id,
        position="after",
    )
    print(f"  更新了 {result.updated_count} 条记录，新排序值 {result.new_key}")
    with db_session_scope() as session:
        show("当前顺序", session.query(Navigation).order_by(Navigation.sort_order).all())


# ==================== 示例 4: 重置排序 ====================

def demo_rebalance():
    print("\n[示例 4] 间隔用尽后重置排序")

    first, second = Navigation.get_sorted()[:2]
    first.sort_order, second.sort_order = 10, 11
    first.save()
    second.save(commit=True)

    result = Navigation.get_sorted()[-1].move_after(first)
    print(f"  插入到 10 和 11 之间: 新排序值 {result.new_key}，需要重置: {result.rebalance_required}")

    if result.rebalance_required:
        rebalanced = Navigation.rebalance_order()
        print(f"  重置了 {rebalanced.updated_count} 条记录")
    show("重置后", Navigation.get_sorted())


# ==================== 示例 5: FastAPI 路由 ====================

def create_app() -> FastAPI:
    """POST /public/sort 和 POST /public/reset-sort"""
    app = FastAPI(title="拖拽排序示例")
    register_exception_handlers(app)
    app.include_router(create_ordering_router(), prefix="/public", tags=["排序"])
    return app


if __name__ == "__main__":
    setup_root_logger(level="INFO")
    engine, _ = init_database("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)

    demo_instance_moves()
    demo_grouped_moves()
    demo_service()
    demo_rebalance()

    app = create_app()
    print("\n[示例 5] 已注册路由: " + ", ".join(r.path for r in app.routes if r.path.startswith("/public")))
