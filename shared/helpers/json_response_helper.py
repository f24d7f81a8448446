from fastapi import HTTPException
from typing import Any

from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult

FIX_ERRORS_MESSAGE = "Please fix the highlighted errors and try again."


def success_response(data: Any, message: str = "Success", status_code: str = AppStatusCode.DATA_RETRIEVED_SUCCESSFULLY):
    return JsonOutResult(
        data=data,
        status="Success",
        status_code=status_code,
        message=message
    )


def validation_failed_response(data: Any, message: str = FIX_ERRORS_MESSAGE):
    """Step errors travel back with HTTP 200 alongside the wizard state."""
    return success_response(data=data, message=message, status_code=AppStatusCode.VALIDATION_FAILED)


def error_response(message: str, status_code: str = AppStatusCode.OPERATION_FAILED, http_status: int = 400, data: Any = None):
    raise HTTPException(
        status_code=http_status,
        detail=JsonOutResult(
            data=data,
            status="Failure",
            status_code=status_code,
            message=message
        ).model_dump()
    )
