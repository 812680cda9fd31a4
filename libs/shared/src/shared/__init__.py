from .errors import error_response, register_exception_handlers
from .request_context import REQUEST_ID_HEADER, RequestIDMiddleware
from .schemas import ErrorResponse

__all__ = [
    "ErrorResponse",
    "REQUEST_ID_HEADER",
    "RequestIDMiddleware",
    "error_response",
    "register_exception_handlers",
]
