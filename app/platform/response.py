from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    *,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
    **payload: Any,
) -> JSONResponse:
    """
    Single source of truth for ALL API responses.
    Sets success = True if status_code < 400, merges payload keys into the body.
    """
    content: dict[str, Any] = {"success": status_code < 400}
    if message is not None:
        content["message"] = message
    content.update(jsonable_encoder(payload))

    return JSONResponse(status_code=status_code, content=content)
