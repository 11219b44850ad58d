from __future__ import annotations
from typing import Any, Dict, Optional


def success(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


def failure(message: str, code: Optional[str] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"message": message}
    if code:
        error["code"] = code
    return {"success": False, "error": error}
