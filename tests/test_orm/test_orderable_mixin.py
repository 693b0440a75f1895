"""相对位置排序 OrderableMixin 测试

测试 OrderableMixin 的核心功能：
1. 移动（move_before, move_after, move_to_first, move_to_last）
2. 按父级分组的移动
3. 查询辅助方法和重置排序
"""

import pytest

from yorder.orm import OrderableMixin
from yorder.ordering import MoveResult, RecordNotFoundException

from tests.helpers import Department, Navigation


@pytest.fixture
def navs(make_records, session):
    """三条导航：1=10, 2=20, 3=30"""
    make_records(Navigation, [(1, 10), (2, 20), (3, 30)])
    return {nav.id: nav for nav in Navigation.get_all()}


@pytest.fixture
def depts(make_records):
    """父级 3 下三个部门，父级 4 下一个部门，顶级一个部门"""
    make_records(Department, [(8, 10), (9, 20), (10, 40)], parent_id=3)
    make_records(Department, [(11, 100)], parent_id=4)
    make_records(Department, [(12, 50)])
    return {dept.id: dept for dept in Department.get_all()}


# ==================== 字段测试 ====================

class TestOrderField:
    """排序字段测试"""

    def test_order_field_mixin_adds_sort_order(self):
        assert hasattr(Navigation, "sort_order")
        column = Navigation.__table__.c.sort_order
        assert column.nullable is False
        assert column.index is True

    def test_default_sort_order(self, session):
        nav = Navigation(name="首页")
        session.add(nav)
        session.commit()
        assert nav.sort_order == 0


# ==================== 简单移动测试 ====================

class TestSimpleMove:
    """全表一个范围的移动"""

    def test_move_before(self, navs, key_of):
        result = navs[3].move_before(navs[2])

        assert isinstance(result, MoveResult)
        assert result.updated_count == 1
        assert key_of(Navigation, 3) == 15
        assert key_of(Navigation, 1) == 10
        assert key_of(Navigation, 2) == 20

    def test_move_before_by_id(self, navs, key_of):
        navs[3].move_before(1)
        assert key_of(Navigation, 3) == 0

    def test_move_after(self, navs, key_of):
        navs[1].move_after(navs[2])
        assert key_of(Navigation, 1) == 25

    def test_move_after_last(self, navs, key_of):
        navs[1].move_after(navs[3])
        assert key_of(Navigation, 1) == 40

    def test_move_to_first(self, navs, key_of):
        navs[3].move_to_first()
        assert key_of(Navigation, 3) == 0

    def test_move_to_last(self, navs, key_of):
        navs[1].move_to_last()
        assert key_of(Navigation, 1) == 40

    def test_move_updates_instance(self, navs):
        navs[3].move_before(navs[2])
        assert navs[3].sort_order == 15

    def test_move_onto_itself(self, navs, key_of):
        result = navs[2].move_after(navs[2])
        assert result.updated_count == 0
        assert key_of(Navigation, 2) == 20

    def test_missing_target(self, navs):
        with pytest.raises(RecordNotFoundException):
            navs[1].move_before(99)

    def test_order_after_moves(self, navs):
        navs[3].move_to_first()
        navs[1].move_to_last()
        assert [nav.id for nav in Navigation.get_sorted()] == [3, 2, 1]


# ==================== 分组移动测试 ====================

class TestGroupedMove:
    """按父级分组的移动"""

    def test_move_within_parent(self, depts, key_of):
        depts[10].move_before(depts[8])
        assert key_of(Department, 10) == 0

    def test_first_ignores_other_parents(self, depts, key_of):
        depts[11].move_to_first()
        # 父级 4 只有自己
        assert key_of(Department, 11) == 90

    def test_last_within_parent(self, depts, key_of):
        depts[8].move_to_last()
        assert key_of(Department, 8) == 50

    def test_target_in_other_parent(self, depts):
        with pytest.raises(RecordNotFoundException):
            depts[8].move_after(depts[11])

    def test_top_level_scope(self, depts, key_of):
        depts[12].move_to_last()
        assert key_of(Department, 12) == 60

    def test_list_group_by_must_be_single(self):
        class Broken(OrderableMixin):
            __sort_group_by__ = ["parent_id", "name"]

        with pytest.raises(ValueError):
            Broken._group_field()

    def test_single_item_list_group_by(self):
        class Grouped(OrderableMixin):
            __sort_group_by__ = ["parent_id"]

        assert Grouped._group_field() == "parent_id"


# ==================== 查询测试 ====================

class TestQueries:
    """查询辅助方法"""

    def test_previous_and_next(self, navs):
        assert navs[2].get_previous().id == 1
        assert navs[2].get_next().id == 3
        assert navs[1].get_previous() is None
        assert navs[3].get_next() is None

    def test_previous_within_parent(self, depts):
        assert depts[9].get_previous().id == 8
        assert depts[10].get_next() is None

    def test_next_sort_order(self, navs):
        assert Navigation.next_sort_order() == 40

    def test_next_sort_order_empty(self, session_scope):
        assert Navigation.next_sort_order() == 10

    def test_next_sort_order_for_parent(self, depts):
        assert Department.next_sort_order(3) == 50
        assert Department.next_sort_order(4) == 110
        assert Department.next_sort_order(99) == 10
        assert Department.next_sort_order(None) == 60

    def test_get_sorted(self, depts):
        assert [d.id for d in Department.get_sorted(3)] == [8, 9, 10]
        assert [d.id for d in Department.get_sorted(3, desc=True)] == [10, 9, 8]


# ==================== 重置排序测试 ====================

class TestRebalanceOrder:
    """重置排序"""

    def test_rebalance_whole_table(self, navs, key_of):
        navs[3].move_before(navs[2])
        result = Navigation.rebalance_order()

        assert result.updated_count == 3
        assert [key_of(Navigation, i) for i in (1, 3, 2)] == [10, 20, 30]

    def test_rebalance_one_parent(self, depts, key_of):
        result = Department.rebalance_order(scope_value=3)

        assert result.updated_count == 3
        assert [key_of(Department, i) for i in (8, 9, 10)] == [10, 20, 30]
        assert key_of(Department, 11) == 100

    def test_rebalance_top_level(self, depts, key_of):
        result = Department.rebalance_order(scope_value=None)

        assert result.updated_count == 1
        assert key_of(Department, 12) == 10

    def test_rebalance_by_id_desc(self, navs, key_of):
        Navigation.rebalance_order(order_by="id", direction="desc")
        assert [key_of(Navigation, i) for i in (3, 2, 1)] == [10, 20, 30]
