"""BaseResponse 模块测试

测试标准化响应的功能
"""

import json
from datetime import datetime

from yorder.ordering import MoveResultSchema, SortDirection
from yorder.response import (
    ErrorResponse,
    ItemResponse,
    OK,
    Resp,
    ResponseStatus,
)

from tests.helpers import Navigation


def get_response_content(response) -> dict:
    """从 JSONResponse 中获取内容"""
    return json.loads(response.body.decode())


class TestResponseStatus:
    """ResponseStatus 枚举测试"""

    def test_status_values(self):
        assert ResponseStatus.SUCCESS.value == "success"
        assert ResponseStatus.ERROR.value == "error"

    def test_status_is_string(self):
        assert isinstance(ResponseStatus.SUCCESS, str)
        assert ResponseStatus.SUCCESS == "success"


class TestResponses:
    """响应函数测试"""

    def test_ok_defaults(self):
        response = OK()
        content = get_response_content(response)

        assert response.status_code == 200
        assert content == {
            "status": "success",
            "message": "请求成功",
            "msg_details": [],
            "data": {},
        }

    def test_ok_with_schema_uses_aliases(self):
        response = Resp.OK(
            data=MoveResultSchema(updated_count=1, new_key=15),
            message="排序成功，更新了 1 条记录",
        )
        content = get_response_content(response)

        assert content["message"] == "排序成功，更新了 1 条记录"
        assert content["data"] == {"updatedCount": 1, "newKey": 15, "rebalanceRequired": False}

    def test_ok_serializes_nested_values(self):
        content = get_response_content(OK(data={
            "direction": SortDirection.DESC,
            "at": datetime(2024, 5, 1, 8, 30, 0),
            "items": [None, (1, 2)],
        }))

        assert content["data"] == {
            "direction": "desc",
            "at": "2024-05-01 08:30:00",
            "items": [None, [1, 2]],
        }

    def test_ok_serializes_model(self):
        nav = Navigation(id=3, name="首页", sort_order=10)
        data = get_response_content(OK(data=nav))["data"]

        assert data["id"] == 3
        assert data["sort_order"] == 10

    def test_resp_ok_is_ok(self):
        content = get_response_content(Resp.OK(data={"updatedCount": 0}, message="没有需要重置排序的记录"))

        assert content["status"] == "success"
        assert content["data"] == {"updatedCount": 0}


class TestResponseModels:
    """响应模型测试"""

    def test_item_response(self):
        item = ItemResponse[MoveResultSchema](data=MoveResultSchema(updated_count=0))
        assert item.status == "success"
        assert item.data.updated_count == 0

    def test_error_response(self):
        error = ErrorResponse(message="不支持的表名: x", error_code="UNSUPPORTED_RESOURCE")
        assert error.status == "error"
        assert error.data == {}
