"""Response envelope shared by every endpoint.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "...", "request_id": "req_..."}

`code` is 0 on success, otherwise the AppError code (1xxx validation,
2xxx state, 3xxx funds, 4xxx arithmetic, 5xxx fatal, 9xxx system) and
`data` is null. Amounts inside `data` are integers in smallest units;
ratios are basis points.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request

from src.rp_common.errors import AppError

# Body rejected by the request schema before reaching the ledger
REQUEST_VALIDATION_CODE = 1000


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def request_id_of(request: Request) -> str:
    """The id RequestLogMiddleware stamped on the request, or a fresh one."""
    return getattr(request.state, "request_id", None) or _new_request_id()


def respond(request: Request, data: BaseModel | dict[str, Any] | None) -> ApiResponse:
    payload = data.model_dump() if isinstance(data, BaseModel) else data
    return ApiResponse(data=payload, request_id=request_id_of(request))


def error_envelope(request: Request, exc: AppError) -> dict[str, Any]:
    return ApiResponse(
        code=exc.code, message=exc.message, request_id=request_id_of(request)
    ).model_dump()


def validation_envelope(request: Request, detail: str) -> dict[str, Any]:
    return ApiResponse(
        code=REQUEST_VALIDATION_CODE, message=detail, request_id=request_id_of(request)
    ).model_dump()
