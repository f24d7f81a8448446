import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from shared.core.schemas import JsonOutResult
from shared.helpers.json_response_helper import FIX_ERRORS_MESSAGE
from shared.utils.app_status_code import AppStatusCode
from shared.utils.exceptions import (
    ConcurrentUpdateError,
    EntityNotFoundError,
    PersistenceError,
    RoomCapacityError,
    SideEffectFailure,
    WizardValidationError,
)

logger = logging.getLogger(__name__)


def _failure(status_code: str, message: str, http_status: int, data=None) -> JSONResponse:
    wrapped = JsonOutResult(
        data=data,
        status="Failure",
        status_code=status_code,
        message=message
    ).model_dump()
    return JSONResponse(content=wrapped, status_code=http_status)


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        # error_response() already wraps the payload
        if isinstance(exc.detail, dict) and {"status", "status_code", "message"}.issubset(exc.detail.keys()):
            return JSONResponse(content=exc.detail, status_code=exc.status_code)
        return _failure(AppStatusCode.OPERATION_FAILED, str(exc.detail), exc.status_code or 400)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _failure(AppStatusCode.INVALID_INPUT, str(exc), 422)

    @app.exception_handler(WizardValidationError)
    async def wizard_validation_handler(request: Request, exc: WizardValidationError):
        return _failure(
            AppStatusCode.VALIDATION_FAILED,
            FIX_ERRORS_MESSAGE,
            422,
            data={"errors": exc.errors},
        )

    @app.exception_handler(EntityNotFoundError)
    async def not_found_handler(request: Request, exc: EntityNotFoundError):
        return _failure(AppStatusCode.NOT_FOUND, str(exc), 404)

    @app.exception_handler(ConcurrentUpdateError)
    async def concurrent_update_handler(request: Request, exc: ConcurrentUpdateError):
        return _failure(AppStatusCode.CONCURRENT_UPDATE, str(exc), 409)

    @app.exception_handler(PersistenceError)
    async def persistence_handler(request: Request, exc: PersistenceError):
        logger.error("Persistence failure: %s", exc)
        return _failure(
            AppStatusCode.PERSISTENCE_FAILED,
            f"{exc}. Please try again.",
            500,
        )

    @app.exception_handler(RoomCapacityError)
    async def room_capacity_handler(request: Request, exc: RoomCapacityError):
        return _failure(AppStatusCode.ROOM_FULL, str(exc), 409)

    @app.exception_handler(SideEffectFailure)
    async def side_effect_handler(request: Request, exc: SideEffectFailure):
        return _failure(AppStatusCode.SIDE_EFFECT_FAILED, str(exc), 502)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s", request.url.path)
        return _failure(AppStatusCode.OPERATION_FAILED, str(exc), 500)
