"""ORM 工具函数"""

import re


def to_snake_case(name: str) -> str:
    """驼峰命名转下划线命名（支持连续大写缩写如 API、URL）

    已经是下划线风格的名称保持不变。

    Examples:
        >>> to_snake_case("NavigationGroup")
        'navigation_group'
        >>> to_snake_case("sortOrder")
        'sort_order'
        >>> to_snake_case("APIClient")
        'api_client'
        >>> to_snake_case("parent_id")
        'parent_id'
    """
    # 处理连续大写+数字后跟大写+小写：APIClient → API_Client
    result = re.sub(r'([A-Z\d]+)([A-Z][a-z])', r'\1_\2', name)
    # 处理小写字母后跟大写：sortOrder → sort_Order
    result = re.sub(r'([a-z\d])([A-Z])', r'\1_\2', result)
    return result.lower()
