# Export habit utility functions for organized imports

# Habit Validation Functions
from .habit_validation import (
    parse_habit_id,
    is_habit_owner,
    ensure_habit_owner,
    load_habit_by_id,
    validate_unique_habit_name
)

__all__ = [
    "parse_habit_id",
    "is_habit_owner",
    "ensure_habit_owner",
    "load_habit_by_id",
    "validate_unique_habit_name",
]
