# Utils package: HTTP errors, timezone helpers and the completion toggle

from .errors import (
    ValidationError,
    UnauthenticatedError,
    ForbiddenError,
    NotFoundError,
    ConflictError
)
from .timezone_utils import (
    normalize_timezone,
    is_valid_timezone,
    get_start_of_local_day,
    parse_timestamp
)
from .streak import CompletionTransition, toggle_completion, was_completed_today

__all__ = [
    # Errors
    "ValidationError",
    "UnauthenticatedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",

    # Timezones
    "normalize_timezone",
    "is_valid_timezone",
    "get_start_of_local_day",
    "parse_timestamp",

    # Completion toggle
    "CompletionTransition",
    "toggle_completion",
    "was_completed_today",
]
