from datetime import date, datetime, timedelta
from typing import Callable, Dict, Any, List, Optional, Set
from pydantic import BaseModel
from .models import HabitView, WEEKDAYS
from .api_client import HabitApiClient
from .errors import ApiError
import httpx
import pytz
import logging

logger = logging.getLogger(__name__)

# -- PURE DERIVATIONS --

def weekday_name(day: date) -> str:
    # date.weekday() is Monday=0; WEEKDAYS starts on Sunday
    return WEEKDAYS[(day.weekday() + 1) % 7]

def week_dates(anchor: date) -> List[date]:
    """The seven dates of the Sunday-first week containing anchor"""
    week_start = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return [week_start + timedelta(days=offset) for offset in range(7)]

def is_scheduled_day(habit: HabitView, day: date) -> bool:
    return weekday_name(day) in habit.frequency

def completed_dates(habit: HabitView, timezone_name: str = "UTC") -> Set[date]:
    """
    Dates known to be completed.

    The server keeps only the latest completion (last_completed) and a running streak, not a
    per-day history, so at most one date can be proven complete.
    """
    if habit.last_completed is None:
        return set()
    completed_at = habit.last_completed
    if completed_at.tzinfo is None:
        completed_at = pytz.utc.localize(completed_at)
    return {completed_at.astimezone(pytz.timezone(timezone_name)).date()}

def is_completed_for_date(habit: HabitView, day: date, timezone_name: str = "UTC") -> bool:
    return day in completed_dates(habit, timezone_name)

def is_interactive(habit: HabitView, day: date, today: date) -> bool:
    """A day cell can be toggled only on a scheduled day that isn't in the future"""
    return is_scheduled_day(habit, day) and day <= today

class DayCell(BaseModel):
    date: date
    weekday: str
    scheduled: bool
    completed: bool
    interactive: bool
    is_today: bool

    class Config:
        frozen = True

class HabitWeekRow(BaseModel):
    habit: HabitView
    cells: List[DayCell]

    class Config:
        frozen = True

def build_week_view(habits: List[HabitView], anchor: date, today: date, timezone_name: str = "UTC") -> List[HabitWeekRow]:
    """Derive the weekly calendar grid: one row per habit, one cell per day"""
    days = week_dates(anchor)
    rows = []
    for habit in habits:
        done = completed_dates(habit, timezone_name)
        cells = [
            DayCell(
                date=day,
                weekday=weekday_name(day),
                scheduled=is_scheduled_day(habit, day),
                completed=day in done,
                interactive=is_interactive(habit, day, today),
                is_today=day == today,
            )
            for day in days
        ]
        rows.append(HabitWeekRow(habit=habit, cells=cells))
    return rows

# -- VIEW MODEL --

class DashboardViewModel:
    """
    Dashboard state: the fetched habit list plus the displayed week.

    Mutations go through the API client; the returned record replaces (or is appended to, or
    removed from) the local list, and `rows` is re-derived from the list on every access.
    """

    def __init__(
        self,
        api: HabitApiClient,
        timezone_name: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.api = api
        self.timezone_name = timezone_name or api.session.user.timezone
        self._clock = clock or (lambda: datetime.now(pytz.utc))
        self.habits: List[HabitView] = []
        self.loading = False
        self.error: Optional[str] = None
        self.anchor = self.today

    @property
    def today(self) -> date:
        return self._clock().astimezone(pytz.timezone(self.timezone_name)).date()

    @property
    def week(self) -> List[date]:
        return week_dates(self.anchor)

    @property
    def rows(self) -> List[HabitWeekRow]:
        return build_week_view(self.habits, self.anchor, self.today, self.timezone_name)

    def previous_week(self) -> None:
        self.anchor -= timedelta(days=7)

    def next_week(self) -> None:
        self.anchor += timedelta(days=7)

    def this_week(self) -> None:
        self.anchor = self.today

    def _replace(self, updated: HabitView) -> None:
        self.habits = [updated if habit.id == updated.id else habit for habit in self.habits]

    async def _run(self, operation):
        self.loading = True
        self.error = None
        try:
            return await operation
        except ApiError as e:
            self.error = e.message
            logger.warning(f"Dashboard request failed: {e.message}")
            raise
        except httpx.HTTPError as e:
            # Transport failures never reach the server, so there is no server message
            self.error = str(e) or "Could not reach the server"
            logger.warning(f"Dashboard request failed: {e!r}")
            raise
        finally:
            self.loading = False

    async def refresh(self) -> None:
        self.habits = await self._run(self.api.list_habits())

    async def create_habit(self, fields: Dict[str, Any]) -> HabitView:
        created = await self._run(self.api.create_habit(fields))
        self.habits = self.habits + [created]
        return created

    async def update_habit(self, habit_id: str, fields: Dict[str, Any]) -> HabitView:
        updated = await self._run(self.api.update_habit(habit_id, fields))
        self._replace(updated)
        return updated

    async def delete_habit(self, habit_id: str) -> None:
        await self._run(self.api.delete_habit(habit_id))
        self.habits = [habit for habit in self.habits if habit.id != habit_id]

    async def toggle(self, habit_id: str) -> HabitView:
        updated = await self._run(self.api.toggle_completion(habit_id))
        self._replace(updated)
        return updated
