import logging
from fastapi import status
from fastapi.responses import JSONResponse
from tagform.constants.error import ERROR

logger = logging.getLogger(__name__)


def unhandled_exception_handler(request, exc: Exception):
    logger.error(f"[UNHANDLED] {request.method} {request.url.path}: {exc!r}", exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "statusCode": 500,
            "message": ERROR.INTERNAL_ERROR
        }
    )
