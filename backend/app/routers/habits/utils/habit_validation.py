from supabase._async.client import AsyncClient
from models.schemas import User
from utils.errors import NotFoundError, ForbiddenError, ConflictError
from typing import Optional
from uuid import UUID
import logging

logger = logging.getLogger(__name__)

HABIT_NOT_FOUND = "Habit not found with id of {habit_id}"

def parse_habit_id(habit_id: str) -> str:
    """Normalize a habit id. Anything that isn't a UUID can't exist in the store."""
    try:
        return str(UUID(str(habit_id)))
    except ValueError:
        raise NotFoundError(HABIT_NOT_FOUND.format(habit_id=habit_id))

def is_habit_owner(habit_data: dict, user: User) -> bool:
    return str(habit_data.get('user_id', '')).lower() == str(user.id).lower()

def ensure_habit_owner(habit_data: dict, user: User, action: str) -> None:
    if not is_habit_owner(habit_data, user):
        logger.warning(f"User {user.id} tried to {action} habit {habit_data.get('id')} owned by someone else")
        raise ForbiddenError(f"User {user.id} is not authorized to {action} this habit")

async def load_habit_by_id(habit_id: str, supabase: AsyncClient) -> dict:
    """Load a habit by id only (no owner scoping); NotFound when absent"""
    result = await supabase.table("habits").select("*").eq("id", habit_id).execute()
    if not result.data:
        raise NotFoundError(HABIT_NOT_FOUND.format(habit_id=habit_id))
    return result.data[0]

async def validate_unique_habit_name(
    user_id: str,
    name: str,
    supabase: AsyncClient,
    current_habit_id: Optional[str] = None
) -> None:
    """
    Validate that the user has no other habit with this name.

    Raises:
        ConflictError: If another habit of the user already uses the name
    """
    result = await supabase.table("habits").select("id").eq("user_id", user_id).eq("name", name).execute()
    clashes = [row for row in (result.data or []) if str(row["id"]) != str(current_habit_id)]
    if clashes:
        raise ConflictError(f"A habit named '{name}' already exists")
