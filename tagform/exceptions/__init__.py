from tagform.exceptions.custom_exception import CustomException
from tagform.exceptions.custom_exception_handler import custom_exception_handler
from tagform.exceptions.validation_exception_handler import validation_exception_handler
from tagform.exceptions.unhandled_exception_handler import unhandled_exception_handler

__all__ = [
    "CustomException",
    "custom_exception_handler",
    "validation_exception_handler",
    "unhandled_exception_handler",
]
