"""测试辅助工具"""

from .models import Navigation, NavigationGroup, Department, Notice
from .transaction_helpers import reset_transaction_manager

__all__ = [
    "Navigation",
    "NavigationGroup",
    "Department",
    "Notice",
    "reset_transaction_manager",
]
