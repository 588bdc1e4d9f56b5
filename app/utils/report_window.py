"""Report window resolution: half-open [start_date, end_date) intervals in UTC."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel

from app.core.exceptions import InvalidPeriodError, ReportValidationError
from app.models.commission_report import ReportPeriod


class ReportWindow(BaseModel):
    period: ReportPeriod
    start_date: datetime  # inclusive
    end_date: datetime    # exclusive

    def contains(self, moment: datetime) -> bool:
        return self.start_date <= as_utc(moment) < self.end_date


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_period(period) -> ReportPeriod:
    try:
        return ReportPeriod(period)
    except ValueError:
        raise InvalidPeriodError(
            f"Invalid period '{period}'; expected one of daily, weekly, monthly"
        )


def _first_of_next_month(first: datetime) -> datetime:
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def _first_of_previous_month(first: datetime) -> datetime:
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)


def resolve_report_window(
    period,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    now: Optional[datetime] = None
) -> ReportWindow:
    """
    Resolve the window a report covers.

    Explicit dates win when both are given. Otherwise the window is derived
    from ``period`` around ``now``:
    - daily: today 00:00 to tomorrow 00:00
    - weekly: the most recent Sunday 00:00 to seven days later
    - monthly: the first of this month to the first of next month
    """
    report_period = parse_period(period)

    if start_date is not None and end_date is not None:
        start, end = as_utc(start_date), as_utc(end_date)
        if start >= end:
            raise ReportValidationError("start_date must be before end_date", field="start_date")
        return ReportWindow(period=report_period, start_date=start, end_date=end)

    now = as_utc(now or datetime.now(timezone.utc))
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if report_period == ReportPeriod.DAILY:
        start = midnight
        end = start + timedelta(days=1)
    elif report_period == ReportPeriod.WEEKLY:
        # weekday(): Monday == 0, so Sunday maps to 0 here
        days_since_sunday = (midnight.weekday() + 1) % 7
        start = midnight - timedelta(days=days_since_sunday)
        end = start + timedelta(days=7)
    else:
        start = midnight.replace(day=1)
        end = _first_of_next_month(start)

    return ReportWindow(period=report_period, start_date=start, end_date=end)


def previous_report_window(window: ReportWindow) -> ReportWindow:
    """The window of the same period immediately before ``window``."""
    if window.period == ReportPeriod.MONTHLY:
        start = _first_of_previous_month(window.start_date)
    else:
        start = window.start_date - (window.end_date - window.start_date)
    return ReportWindow(period=window.period, start_date=start, end_date=window.start_date)
