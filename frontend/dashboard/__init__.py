# Client-side view model for the habit dashboard

from .models import HabitView, UserView, WEEKDAYS
from .errors import ApiError, SessionExpiredError
from .session import Session, AuthClient
from .api_client import HabitApiClient
from .view_model import (
    weekday_name,
    week_dates,
    is_scheduled_day,
    is_completed_for_date,
    is_interactive,
    build_week_view,
    DayCell,
    HabitWeekRow,
    DashboardViewModel
)

__all__ = [
    "HabitView",
    "UserView",
    "WEEKDAYS",
    "ApiError",
    "SessionExpiredError",
    "Session",
    "AuthClient",
    "HabitApiClient",
    "weekday_name",
    "week_dates",
    "is_scheduled_day",
    "is_completed_for_date",
    "is_interactive",
    "build_week_view",
    "DayCell",
    "HabitWeekRow",
    "DashboardViewModel",
]
