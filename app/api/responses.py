from typing import Any

from fastapi.responses import JSONResponse


def success(data: Any) -> dict[str, Any]:
    return {"status": "success", "data": data}


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error": message},
    )
