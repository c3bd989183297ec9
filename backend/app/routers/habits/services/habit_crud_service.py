from fastapi import HTTPException
from models.schemas import Habit, HabitCreate, HabitUpdate, User
from supabase._async.client import AsyncClient
from postgrest.exceptions import APIError
from typing import List, NoReturn
from utils.errors import NotFoundError, ConflictError
import logging
from ..utils.habit_validation import (
    HABIT_NOT_FOUND,
    parse_habit_id,
    ensure_habit_owner,
    load_habit_by_id,
    validate_unique_habit_name
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

def _raise_store_error(e: APIError, action: str, name: str = None) -> NoReturn:
    """Translate a store error into an HTTP error without leaking internals"""
    if e.code == UNIQUE_VIOLATION:
        raise ConflictError(f"A habit named '{name}' already exists")
    logger.error(f"Error trying to {action} habit: {e.message}")
    raise HTTPException(status_code=500, detail=f"Failed to {action} habit")

async def get_user_habits_service(
    current_user: User,
    supabase: AsyncClient
) -> List[Habit]:
    """
    Get all habits owned by the current user.

    No pagination; habits come back in the store's natural order.
    """
    try:
        result = await supabase.table("habits").select("*").eq("user_id", str(current_user.id)).execute()
    except APIError as e:
        _raise_store_error(e, "list")

    if not result.data:
        return []

    return [Habit(**habit_data) for habit_data in result.data]

async def get_habit_service(
    habit_id: str,
    current_user: User,
    supabase: AsyncClient
) -> Habit:
    """
    Get one habit of the current user.

    The query is scoped by owner, so another user's habit looks exactly like a missing one.
    """
    habit_id = parse_habit_id(habit_id)
    try:
        result = await supabase.table("habits").select("*").eq("id", habit_id).eq("user_id", str(current_user.id)).execute()
    except APIError as e:
        _raise_store_error(e, "fetch")

    if not result.data:
        raise NotFoundError(HABIT_NOT_FOUND.format(habit_id=habit_id))

    return Habit(**result.data[0])

async def create_habit_service(
    habit: HabitCreate,
    current_user: User,
    supabase: AsyncClient
) -> Habit:
    """
    Create a new habit owned by the current user.

    Args:
        habit: Validated habit fields
        current_user: Current authenticated user
        supabase: Database client

    Returns:
        The stored habit, with id and created_at filled in by the store
    """
    user_id = str(current_user.id)
    habit_dict = habit.model_dump(mode="json")

    await validate_unique_habit_name(user_id, habit_dict["name"], supabase)

    habit_dict.update({
        "user_id": user_id,
        "streak": 0,
        "last_completed": None,
    })

    try:
        result = await supabase.table("habits").insert(habit_dict).execute()
    except APIError as e:
        # The (user_id, name) unique index catches creates racing past the check above
        _raise_store_error(e, "create", habit_dict["name"])

    new_habit = Habit(**result.data[0])
    logger.info(f"Created habit {new_habit.id} for user {user_id}")
    return new_habit

async def update_habit_service(
    habit_id: str,
    habit: HabitUpdate,
    current_user: User,
    supabase: AsyncClient
) -> Habit:
    habit_id = parse_habit_id(habit_id)

    # Load by id first, then authorize: a non-owner gets Forbidden rather than NotFound
    old_habit_data = await load_habit_by_id(habit_id, supabase)
    ensure_habit_owner(old_habit_data, current_user, "update")

    habit_dict = habit.model_dump(mode="json", exclude_unset=True)
    if not habit_dict:
        return Habit(**old_habit_data)

    if "name" in habit_dict and habit_dict["name"] != old_habit_data.get("name"):
        await validate_unique_habit_name(str(current_user.id), habit_dict["name"], supabase, current_habit_id=habit_id)

    try:
        result = await supabase.table("habits").update(habit_dict).eq("id", habit_id).execute()
    except APIError as e:
        _raise_store_error(e, "update", habit_dict.get("name"))

    if not result.data:
        # Deleted between the load and the update
        raise NotFoundError(HABIT_NOT_FOUND.format(habit_id=habit_id))

    logger.info(f"Updated habit {habit_id} fields={sorted(habit_dict.keys())}")
    return Habit(**result.data[0])

async def delete_habit_service(
    habit_id: str,
    current_user: User,
    supabase: AsyncClient
) -> None:
    """
    Permanently delete a habit. There is no soft delete and no history is kept.
    """
    habit_id = parse_habit_id(habit_id)

    habit_data = await load_habit_by_id(habit_id, supabase)
    ensure_habit_owner(habit_data, current_user, "delete")

    try:
        await supabase.table("habits").delete().eq("id", habit_id).execute()
    except APIError as e:
        _raise_store_error(e, "delete")

    logger.info(f"Deleted habit {habit_id} for user {current_user.id}")
