from datetime import datetime
from typing import Optional
from pydantic import BaseModel
import pytz

from utils.timezone_utils import get_start_of_local_day, parse_timestamp

class CompletionTransition(BaseModel):
    """Result of toggling a habit for the current day"""
    streak: int
    last_completed: Optional[datetime] = None
    undo: bool

    class Config:
        frozen = True

def was_completed_today(last_completed, user_timezone: str, now: Optional[datetime] = None) -> bool:
    """True when the last completion happened at or after local midnight today"""
    completed_at = parse_timestamp(last_completed)
    if completed_at is None:
        return False
    return completed_at >= get_start_of_local_day(user_timezone, now)

def toggle_completion(
    streak: Optional[int],
    last_completed,
    user_timezone: str = "UTC",
    now: Optional[datetime] = None
) -> CompletionTransition:
    """
    Two-state daily toggle.

    Completed today -> undo: streak - 1 (never below 0) and last_completed cleared.
    Otherwise -> completion: streak + 1 and last_completed = now (UTC).
    """
    if now is None:
        now = datetime.now(pytz.utc)
    elif now.tzinfo is None:
        now = pytz.utc.localize(now)

    current_streak = max(0, streak or 0)

    if was_completed_today(last_completed, user_timezone, now):
        return CompletionTransition(streak=max(0, current_streak - 1), last_completed=None, undo=True)

    return CompletionTransition(streak=current_streak + 1, last_completed=now.astimezone(pytz.utc), undo=False)
