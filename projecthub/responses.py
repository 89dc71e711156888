"""
projecthub/responses.py

Success envelope shared by the routers: {"status_code": int, "data": ...}.
"""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from projecthub.schemas import ApiResponse


def _plain(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, list):
        return [_plain(item) for item in data]
    return data


def envelope(status_code: int, data: Any = None) -> JSONResponse:
    body = ApiResponse(status_code=status_code, data=_plain(data))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
