from fastapi import HTTPException
from models.schemas import Habit, User
from supabase._async.client import AsyncClient
from postgrest.exceptions import APIError
from config.settings import get_settings
from datetime import datetime
from typing import Optional
from utils.errors import ConflictError
from utils.streak import toggle_completion
import logging
from ..utils.habit_validation import parse_habit_id, ensure_habit_owner, load_habit_by_id

logger = logging.getLogger(__name__)

async def _compare_and_set_completion(
    habit_data: dict,
    new_streak: int,
    new_last_completed: Optional[str],
    supabase: AsyncClient
) -> Optional[dict]:
    """
    Single conditional update: only applies while streak and last_completed still hold the
    values the transition was computed from. Returns the updated row, or None if another
    writer got there first.
    """
    query = supabase.table("habits").update({
        "streak": new_streak,
        "last_completed": new_last_completed,
    }).eq("id", habit_data["id"]).eq("user_id", habit_data["user_id"]).eq("streak", habit_data.get("streak") or 0)

    if habit_data.get("last_completed") is None:
        query = query.is_("last_completed", "null")
    else:
        query = query.eq("last_completed", habit_data["last_completed"])

    result = await query.execute()
    return result.data[0] if result.data else None

async def toggle_habit_completion_service(
    habit_id: str,
    current_user: User,
    supabase: AsyncClient,
    now: Optional[datetime] = None
) -> Habit:
    """
    Toggle today's completion of a habit.

    Not completed today -> streak + 1, last_completed = now.
    Already completed today -> undo: streak - 1 (floored at 0), last_completed cleared.
    "Today" starts at local midnight in the owner's timezone.

    Args:
        habit_id: Habit to toggle
        current_user: Current authenticated user, must own the habit
        supabase: Database client
        now: Clock override, defaults to the current time

    Returns:
        The updated habit
    """
    settings = get_settings()
    habit_id = parse_habit_id(habit_id)

    for attempt in range(1, settings.toggle_max_retries + 1):
        habit_data = await load_habit_by_id(habit_id, supabase)
        ensure_habit_owner(habit_data, current_user, "update")

        transition = toggle_completion(
            streak=habit_data.get("streak"),
            last_completed=habit_data.get("last_completed"),
            user_timezone=current_user.timezone,
            now=now,
        )
        new_last_completed = transition.last_completed.isoformat() if transition.last_completed else None

        try:
            updated = await _compare_and_set_completion(habit_data, transition.streak, new_last_completed, supabase)
        except APIError as e:
            logger.error(f"Error toggling habit {habit_id}: {e.message}")
            raise HTTPException(status_code=500, detail="Failed to update habit completion")

        if updated is not None:
            action = "Undid completion of" if transition.undo else "Completed"
            logger.info(f"{action} habit {habit_id} for user {current_user.id}, streak={transition.streak}")
            return Habit(**updated)

        logger.warning(f"Concurrent update on habit {habit_id}, retrying toggle (attempt {attempt}/{settings.toggle_max_retries})")

    raise ConflictError("Habit was modified concurrently, please try again")
