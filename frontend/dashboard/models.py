from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

# Calendar order, Sunday first
WEEKDAYS = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

class HabitView(BaseModel):
    """A habit as returned by the API"""
    id: str
    name: str
    description: Optional[str] = None
    frequency: List[str] = Field(default_factory=list)
    time_of_day: str = "anytime"
    streak: int = 0
    last_completed: Optional[datetime] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

class UserView(BaseModel):
    id: str
    name: str
    email: str
    timezone: str = "UTC"

def habit_from_payload(payload: Dict[str, Any]) -> HabitView:
    return HabitView(**payload)
