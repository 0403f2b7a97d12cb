"""Date helpers for the fixed 4-week meal plan window."""

from datetime import date, datetime, timedelta

from meal_planner.domain.errors import OutOfRangeError

DAYS_IN_WEEK = 7
WEEKS_IN_PLAN = 4
DAYS_IN_PLAN = DAYS_IN_WEEK * WEEKS_IN_PLAN


def as_date(value: date | datetime) -> date:
    """Drop the time-of-day component, if any."""
    if isinstance(value, datetime):
        return value.date()
    return value


def plan_end_date(start_date: date) -> date:
    """Return the last day of the 28-day window."""
    return as_date(start_date) + timedelta(days=DAYS_IN_PLAN - 1)


def day_offset(start_date: date, candidate: date) -> int:
    """Return the signed number of days from start_date to candidate."""
    return (as_date(candidate) - as_date(start_date)).days


def week_start_date(start_date: date, week_index: int) -> date:
    """Return the first day of the given week (0-3)."""
    _check_week_index(week_index)
    return as_date(start_date) + timedelta(days=week_index * DAYS_IN_WEEK)


def week_dates(start_date: date, week_index: int) -> list[date]:
    """Return the seven dates of the given week (0-3)."""
    first = week_start_date(start_date, week_index)
    return [first + timedelta(days=offset) for offset in range(DAYS_IN_WEEK)]


def four_week_dates(start_date: date) -> list[date]:
    """Return all 28 dates of the plan window."""
    first = as_date(start_date)
    return [first + timedelta(days=offset) for offset in range(DAYS_IN_PLAN)]


def week_index_for(start_date: date, candidate: date) -> int | None:
    """Return the week index containing candidate, or None outside the window."""
    offset = day_offset(start_date, candidate)
    if offset < 0 or offset >= DAYS_IN_PLAN:
        return None
    return offset // DAYS_IN_WEEK


def is_date_in_plan(start_date: date, candidate: date) -> bool:
    """Return True when candidate falls inside the 28-day window."""
    return week_index_for(start_date, candidate) is not None


def days_remaining(start_date: date, today: date) -> int:
    """Return how many plan days are left, counting today."""
    end = plan_end_date(start_date)
    today = as_date(today)
    if today > end:
        return 0
    if today < as_date(start_date):
        return DAYS_IN_PLAN
    return (end - today).days + 1


def format_range(start: date, end: date) -> str:
    """Format a date range as M/D - M/D, adding years when they differ."""
    if start.year != end.year:
        return (
            f"{start.month}/{start.day}/{start.year} - "
            f"{end.month}/{end.day}/{end.year}"
        )
    return f"{start.month}/{start.day} - {end.month}/{end.day}"


def format_week_range(start_date: date, week_index: int) -> str:
    """Format the date range of a single week of the plan."""
    dates = week_dates(start_date, week_index)
    return format_range(dates[0], dates[-1])


def _check_week_index(week_index: int) -> None:
    if (
        not isinstance(week_index, int)
        or isinstance(week_index, bool)
        or not 0 <= week_index < WEEKS_IN_PLAN
    ):
        raise OutOfRangeError(
            f"Week index must be between 0 and {WEEKS_IN_PLAN - 1}, got {week_index!r}",
            details={"week_index": week_index},
        )
