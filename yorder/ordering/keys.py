"""排序键算术

纯函数，根据相邻记录的排序键计算插入键，不访问存储。

约定:
    - 排序键是非负整数，越小越靠前
    - 首尾插入使用 10 的步长，为后续中点插入预留空间
    - 空集合的第一个键为 10

使用示例:
    from yorder.ordering.keys import key_between, key_before, key_after

    key_between(10, 20)   # 15
    key_before(5)         # 0
    key_after(20)         # 30
"""

from dataclasses import dataclass
from typing import Iterator, Optional


ORDER_STEP = 10
SEED_KEY = 10
MIN_KEY = 0


def clamp_key(key: int) -> int:
    """排序键不小于 0"""
    return max(key, MIN_KEY)


def key_between(low: int, high: int) -> int:
    """两个键的向下取整中点"""
    return (low + high) // 2


def key_before(key: int, step: int = ORDER_STEP) -> int:
    """排在 key 之前的键"""
    return clamp_key(key - step)


def key_after(key: int, step: int = ORDER_STEP) -> int:
    """排在 key 之后的键"""
    return key + step


def has_gap(low: int, high: int, key: int) -> bool:
    """key 与两端都不相同"""
    return key != low and key != high


def is_exhausted(low: int, high: int) -> bool:
    """low 与 high 之间是否已没有可用的整数键"""
    mid = key_between(low, high)
    return mid == low or mid == high


@dataclass(frozen=True)
class KeyPlacement:
    """插入键计算结果

    Attributes:
        key: 计算得到的排序键
        collided: 回退键仍与相邻键冲突，需要重排
    """
    key: int
    collided: bool = False


def key_for_before(target: int, predecessor: Optional[int] = None, step: int = ORDER_STEP) -> KeyPlacement:
    """计算排到 target 之前的键

    有前驱时取中点，中点与任一端相同则回退为 target - 1；
    没有前驱时为 key_before(target)。结果不小于 0。
    """
    if predecessor is None:
        return KeyPlacement(key_before(target, step))

    key = key_between(predecessor, target)
    if not has_gap(predecessor, target, key):
        key = clamp_key(target - 1)
    key = clamp_key(key)
    return KeyPlacement(key, collided=key <= predecessor or key >= target)


def key_for_after(target: int, successor: Optional[int] = None, step: int = ORDER_STEP) -> KeyPlacement:
    """计算排到 target 之后的键

    有后继时取中点，中点与任一端相同则回退为 target + 1；
    没有后继时为 key_after(target)。
    """
    if successor is None:
        return KeyPlacement(key_after(target, step))

    key = key_between(target, successor)
    if not has_gap(target, successor, key):
        key = target + 1
    return KeyPlacement(key, collided=key <= target or key >= successor)


def key_for_first(current_min: Optional[int], seed: int = SEED_KEY, step: int = ORDER_STEP) -> int:
    """移到最前：最小键之前，空集合时为初始键"""
    if current_min is None:
        return seed
    return key_before(current_min, step)


def key_for_last(current_max: Optional[int], seed: int = SEED_KEY, step: int = ORDER_STEP) -> int:
    """移到最后：最大键之后，空集合时为初始键"""
    if current_max is None:
        return seed
    return key_after(current_max, step)


def rebalanced_keys(count: int, step: int = ORDER_STEP) -> Iterator[int]:
    """重排后的等间距键序列 step, 2*step, ..., count*step"""
    for index in range(1, count + 1):
        yield index * step


__all__ = [
    "ORDER_STEP",
    "SEED_KEY",
    "MIN_KEY",
    "clamp_key",
    "key_between",
    "has_gap",
    "key_before",
    "key_after",
    "is_exhausted",
    "KeyPlacement",
    "key_for_before",
    "key_for_after",
    "key_for_first",
    "key_for_last",
    "rebalanced_keys",
]
