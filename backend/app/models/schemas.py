from pydantic import BaseModel, Field, EmailStr
from typing import List, Optional, Dict, Any
from enum import Enum
from datetime import datetime
from uuid import UUID
from pydantic import field_validator, model_validator

from utils.timezone_utils import is_valid_timezone, normalize_timezone

HABIT_NAME_MAX_LENGTH = 50
HABIT_DESCRIPTION_MAX_LENGTH = 500

class Weekday(str, Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"

# Calendar order, Sunday first
WEEKDAY_ORDER = list(Weekday)

class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    ANYTIME = "anytime"

def _clean_name(v: str) -> str:
    v = v.strip() if isinstance(v, str) else v
    if not v:
        raise ValueError('Please add a habit name')
    if len(v) > HABIT_NAME_MAX_LENGTH:
        raise ValueError(f'Name cannot be more than {HABIT_NAME_MAX_LENGTH} characters')
    return v

def _clean_description(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) > HABIT_DESCRIPTION_MAX_LENGTH:
        raise ValueError(f'Description cannot be more than {HABIT_DESCRIPTION_MAX_LENGTH} characters')
    return v

def _lowercase_days(v: Any) -> Any:
    if isinstance(v, list):
        return [day.strip().lower() if isinstance(day, str) else day for day in v]
    return v

def _clean_frequency(v: List[Weekday]) -> List[Weekday]:
    if not v:
        raise ValueError('Please specify at least one day')
    # Order-insignificant set, stored in calendar order
    return [day for day in WEEKDAY_ORDER if day in set(v)]

class HabitBase(BaseModel):
    name: str
    description: Optional[str] = None
    frequency: List[Weekday] = Field(..., description="Days of the week the habit is scheduled on")
    time_of_day: TimeOfDay = TimeOfDay.ANYTIME

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return _clean_description(v)

    @field_validator('frequency', mode='before')
    @classmethod
    def normalize_frequency(cls, v):
        return _lowercase_days(v)

    @field_validator('frequency')
    @classmethod
    def validate_frequency(cls, v):
        return _clean_frequency(v)

class HabitCreate(HabitBase):
    pass

class HabitUpdate(BaseModel):
    """Partial update. Fields left out of the payload are not touched."""
    name: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[List[Weekday]] = None
    time_of_day: Optional[TimeOfDay] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v) if v is not None else v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return _clean_description(v)

    @field_validator('frequency', mode='before')
    @classmethod
    def normalize_frequency(cls, v):
        return _lowercase_days(v)

    @field_validator('frequency')
    @classmethod
    def validate_frequency(cls, v):
        return _clean_frequency(v) if v is not None else v

    @model_validator(mode='after')
    def validate_required_fields_not_null(self):
        # Only description may be cleared explicitly
        for field in ('name', 'frequency', 'time_of_day'):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f'{field} cannot be null')
        return self

class Habit(HabitBase):
    id: UUID
    user_id: UUID
    streak: int = Field(0, ge=0)
    last_completed: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        json_encoders = {
            UUID: str
        }

class HabitResponse(BaseModel):
    success: bool = True
    data: Habit

class HabitListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[Habit]

class DeleteResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any] = {}

class ErrorResponse(BaseModel):
    success: bool = False
    message: str

class UserBase(BaseModel):
    name: str
    email: EmailStr
    timezone: str = "UTC"

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Please add a name')
        if len(v) > 50:
            raise ValueError('Name cannot be more than 50 characters')
        return v

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        if not is_valid_timezone(v):
            raise ValueError(f'Unknown timezone: {v}')
        return normalize_timezone(v)

class UserCreate(UserBase):
    password: str = Field(..., min_length=6)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class User(UserBase):
    id: UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        json_encoders = {
            UUID: str
        }

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: User

class RefreshRequest(BaseModel):
    refresh_token: str
