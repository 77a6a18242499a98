from typing import Any, Optional


class CustomException(Exception):
    """Error raised by services and mapped to an HTTP response by the app"""

    def __init__(self, status_code: int, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.data = data
