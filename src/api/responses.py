from typing import Any

from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder

ERROR_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid": status.HTTP_400_BAD_REQUEST,
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
}


def ok(data: Any = None, message: str = "OK") -> dict[str, Any]:
    """Success envelope shared by every route."""
    return {"success": True, "message": message, "data": jsonable_encoder(data)}


def raise_for_result(result: Any) -> None:
    """Turn a failed component output into the matching HTTP error."""
    if getattr(result, "success", False):
        return
    code = getattr(result, "error_code", None)
    headers = {"WWW-Authenticate": "Bearer"} if code == "unauthorized" else None
    raise HTTPException(
        status_code=ERROR_STATUS.get(code or "", status.HTTP_400_BAD_REQUEST),
        detail=getattr(result, "error", None) or "Request failed",
        headers=headers,
    )
