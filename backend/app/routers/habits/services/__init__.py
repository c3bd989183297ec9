# Export habit CRUD and completion service functions

# CRUD Service Functions
from .habit_crud_service import (
    create_habit_service,
    get_user_habits_service,
    get_habit_service,
    delete_habit_service,
    update_habit_service
)

# Completion Service Functions
from .habit_completion_service import (
    toggle_habit_completion_service
)

__all__ = [
    # CRUD Service Functions
    "create_habit_service",
    "get_user_habits_service",
    "get_habit_service",
    "delete_habit_service",
    "update_habit_service",

    # Completion Service Functions
    "toggle_habit_completion_service",
]
