from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import HTTPException

from vehicle_care.schemas.common import APIResponse, APIError
from vehicle_care.core.error_codes import ErrorCode, NOT_FOUND_CODES

from vehicle_care.core.domain_exceptions import DomainException


def _status_for_code(code: str) -> int:
    if code in NOT_FOUND_CODES:
        return 404
    if code == ErrorCode.NOT_AUTHORIZED:
        return 403
    return 400


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=APIResponse(
            success=False,
            error=APIError(
                code=ErrorCode.VALIDATION_ERROR,
                message=str(exc.detail),
            ),
        ).model_dump(),
    )

async def domain_exception_handler(request: Request, exc: DomainException):
    return JSONResponse(
        status_code=_status_for_code(exc.code),
        content=APIResponse(
            success=False,
            error=APIError(
                code=exc.code,
                message=exc.message,
            ),
        ).model_dump(),
    )
