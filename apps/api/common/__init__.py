from .errors import (
    register_api_error_handlers,
    request_validation_error_handler,
    two_factor_error_handler,
)

__all__ = [
    "register_api_error_handlers",
    "request_validation_error_handler",
    "two_factor_error_handler",
]
