import pytz
import logging
from datetime import datetime, time
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)

# Handle timezone abbreviations by mapping them to proper pytz names
TIMEZONE_MAPPING = {
    'PDT': 'America/Los_Angeles',
    'PST': 'America/Los_Angeles',
    'EDT': 'America/New_York',
    'EST': 'America/New_York',
    'CDT': 'America/Chicago',
    'CST': 'America/Chicago',
    'MDT': 'America/Denver',
    'MST': 'America/Denver',
}

def normalize_timezone(timezone: Optional[str]) -> str:
    """Map abbreviations to pytz names and fall back to UTC for anything unknown"""
    if not timezone:
        return "UTC"

    if timezone in TIMEZONE_MAPPING:
        timezone = TIMEZONE_MAPPING[timezone]

    try:
        pytz.timezone(timezone)
        return timezone
    except pytz.exceptions.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone: {timezone}, falling back to UTC")
        return "UTC"

def is_valid_timezone(timezone: str) -> bool:
    if timezone in TIMEZONE_MAPPING:
        return True
    try:
        pytz.timezone(timezone)
        return True
    except pytz.exceptions.UnknownTimeZoneError:
        return False

@lru_cache(maxsize=100)
def get_timezone_object(timezone_str: str) -> pytz.BaseTzInfo:
    """Cached timezone object creation"""
    return pytz.timezone(normalize_timezone(timezone_str))

def get_localized_datetime(user_timezone: str, now: Optional[datetime] = None) -> datetime:
    """Current (or given) instant expressed in the user's timezone"""
    tz = get_timezone_object(user_timezone)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(tz)

def get_start_of_local_day(user_timezone: str, now: Optional[datetime] = None) -> datetime:
    """Local midnight of the user's current day, as an aware datetime"""
    tz = get_timezone_object(user_timezone)
    local_now = get_localized_datetime(user_timezone, now)
    return tz.localize(datetime.combine(local_now.date(), time.min))

def parse_timestamp(value) -> Optional[datetime]:
    """Parse a timestamp coming back from the store into an aware UTC datetime"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed.astimezone(pytz.utc)
