# smartlabo/api/response.py
from __future__ import annotations

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def ok(data: Any = None, *, status_code: int = 200) -> JSONResponse:
    """{"ok": true, "data": ...}"""
    return JSONResponse(status_code=status_code,
                        content=jsonable_encoder({"ok": True, "data": data}))


def err(msg: str, *, status_code: int, code: Optional[str] = None) -> JSONResponse:
    """{"ok": false, "error": {"msg": ..., "code": ...}}; code names the failure class."""
    return JSONResponse(status_code=status_code,
                        content={"ok": False, "error": {"msg": msg, "code": code}})
