import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from tagform.constants.error import ERROR
from tagform.exceptions.custom_exception import CustomException

# Single logger instance for the entire application
logger = logging.getLogger("tagform")


def log_info(context: str, message: str) -> None:
    """Log informational message with context"""
    logger.info(f"[{context}] {message}")


def log_warning(context: str, message: str) -> None:
    """Log warning message with context"""
    logger.warning(f"[{context}] {message}")


def log_debug(context: str, message: str) -> None:
    """Log debug message with context"""
    logger.debug(f"[{context}] {message}")


def handle_service_error(
    error: Exception,
    context: str,
    custom_exception: Optional[CustomException] = None
) -> None:
    """
    Handle service layer errors with logging

    CustomException passes through untouched. Integrity violations become a
    409 and any other database or unexpected error a generic 500, unless a
    custom_exception is supplied.

    Args:
        error: The exception that occurred
        context: Context information (e.g., 'create_form', 'delete_form')
        custom_exception: Optional CustomException to raise instead

    Raises:
        CustomException
    """
    if isinstance(error, CustomException):
        raise error

    error_msg = str(error) if str(error) else error.__class__.__name__
    logger.error(f"[SERVICE ERROR] {context}: {error_msg}", exc_info=True)

    if custom_exception:
        raise custom_exception from error
    if isinstance(error, IntegrityError):
        raise CustomException(status_code=409, message=f"Conflict while processing {context}") from error
    raise CustomException(status_code=500, message=ERROR.INTERNAL_ERROR) from error


def handle_route_error(
    error: Exception,
    context: str
) -> None:

    error_msg = str(error) if str(error) else error.__class__.__name__
    if isinstance(error, CustomException) and error.status_code < 500:
        logger.warning(f"[ROUTE ERROR] {context}: {error.status_code} {error_msg}")
    else:
        logger.error(f"[ROUTE ERROR] {context}: {error_msg}", exc_info=True)
    raise error


def handle_middleware_error(
    error: Exception,
    context: str,
    custom_exception: Optional[CustomException] = None
) -> None:

    error_msg = str(error) if str(error) else error.__class__.__name__
    logger.warning(f"[MIDDLEWARE ERROR] {context}: {error_msg}")

    if custom_exception:
        raise custom_exception
    raise error


def log_database_operation(
    operation: str,
    context: str,
    details: Optional[dict] = None
) -> None:

    message = f"[DB {operation}] {context}"
    if details:
        message += f" - {details}"
    logger.debug(message)
