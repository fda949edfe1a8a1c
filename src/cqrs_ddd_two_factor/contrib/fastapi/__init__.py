"""FastAPI integration for cqrs-ddd-two-factor."""

from .dependencies import get_subject, read_submitted_codes, require_two_factor
from .errors import (
    build_error_envelope,
    register_exception_handlers,
    two_factor_error_handler,
)
from .router import create_two_factor_router

__all__: list[str] = [
    # Dependencies
    "get_subject",
    "read_submitted_codes",
    "require_two_factor",
    # Errors
    "build_error_envelope",
    "two_factor_error_handler",
    "register_exception_handlers",
    # Router
    "create_two_factor_router",
]
