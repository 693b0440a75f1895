"""版本信息"""

__version__ = "0.1.0"
__author__ = "yorder"
__description__ = "通用相对位置排序引擎（拖拽排序、批量重置排序）"
