"""Time utilities for slot arithmetic and working schedules."""
from datetime import date, datetime, timedelta, time
from typing import List, Tuple, Optional

from core.exceptions import InvalidTimeError

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_time(time_str: str) -> time:
    """Parse time string in format HH:MM."""
    try:
        hour, minute = map(int, time_str.split(':'))
        return time(hour, minute)
    except (ValueError, AttributeError, TypeError):
        raise InvalidTimeError(time_str)


def time_to_minutes(time_str: str) -> int:
    """Minutes since midnight for an HH:MM string."""
    t = parse_time(time_str)
    return t.hour * 60 + t.minute


def calculate_end_time(start_time: str, duration_minutes: int) -> str:
    """End of an interval as HH:MM. Hours are not wrapped past midnight."""
    total = time_to_minutes(start_time) + duration_minutes
    return f"{total // 60:02d}:{total % 60:02d}"


def intervals_overlap(start, end, other_start, other_end) -> bool:
    """Half-open [start, end) intersection test for minutes or datetimes; touching ends don't overlap."""
    return start < other_end and end > other_start


def combine(day: date, time_str: str) -> datetime:
    """Absolute start instant for a calendar day and an HH:MM time."""
    return datetime.combine(day, parse_time(time_str))


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[midnight, next midnight) for a calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def format_time(dt: datetime) -> str:
    """Format time to readable string."""
    return dt.strftime("%H:%M")


def parse_work_schedule(schedule_dict: dict, day: date) -> Optional[List[Tuple[time, time]]]:
    """Working intervals for a date, None on a day off."""
    weekday = WEEKDAY_NAMES[day.weekday()]

    intervals = (schedule_dict or {}).get(weekday)
    if not intervals:
        return None

    result = []
    for interval in intervals:
        start = parse_time(interval[0])
        end = parse_time(interval[1])
        result.append((start, end))

    return result


def generate_half_hour_slots(
    start_time: time,
    end_time: time,
    day: date,
    duration_minutes: int = 0,
) -> List[datetime]:
    """30-minute step start times whose whole duration fits the working interval."""
    slots = []
    current = datetime.combine(day, start_time)
    end = datetime.combine(day, end_time)
    step = timedelta(minutes=30)
    length = timedelta(minutes=duration_minutes)
    while current < end and current + length <= end:
        slots.append(current)
        current += step
    return slots
