"""Envelope shared by every JSON endpoint.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "<ISO-8601 UTC>", "request_id": "req_..."}

code 0 is success; anything else is an AppError code and `data` is null.
request_id echoes the id the request-log middleware put on request.state,
so a client-reported id can be found in the logs.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request

from src.tm_common.datetime_utils import utc_now


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=new_request_id)


def _request_id(request: Request | None) -> str:
    if request is None:
        return new_request_id()
    return getattr(request.state, "request_id", None) or new_request_id()


def success_response(data: Any = None, request: Request | None = None) -> ApiResponse:
    return ApiResponse(data=data, request_id=_request_id(request))


def error_response(code: int, message: str, request: Request | None = None) -> ApiResponse:
    return ApiResponse(code=code, message=message, request_id=_request_id(request))
