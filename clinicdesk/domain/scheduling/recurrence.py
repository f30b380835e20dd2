"""
Recurrence utilities - expand a repetition rule into concrete appointment dates
"""

import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

# Used when the rule has no count: one year of weekly appointments
DEFAULT_MAX_OCCURRENCES = 52
# Hard stop regardless of the rule
SAFETY_MAX_OCCURRENCES = 365

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class RecurrenceFrequency(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RecurrenceRule(BaseModel):
    """How an appointment repeats. Weekdays use 0=Sunday .. 6=Saturday."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    frequency: RecurrenceFrequency = RecurrenceFrequency.NONE
    interval: int = Field(1, ge=1)
    weekdays: frozenset[int] = frozenset()
    termination_date: Optional[date] = Field(None, alias="terminationDate")
    termination_count: Optional[int] = Field(None, ge=1, alias="terminationCount")

    @model_validator(mode="after")
    def validate_weekdays(self):
        invalid = [d for d in self.weekdays if d < 0 or d > 6]
        if invalid:
            raise ValueError(f"Weekdays must be between 0 (Sunday) and 6 (Saturday), got {sorted(invalid)}")
        if self.frequency == RecurrenceFrequency.WEEKLY and not self.weekdays:
            raise ValueError("Weekly recurrence requires at least one weekday")
        return self


def sunday_based_weekday(value: datetime) -> int:
    """Weekday index with Sunday=0, matching RecurrenceRule.weekdays"""
    return value.isoweekday() % 7


def generate_recurring_dates(start: datetime, rule: RecurrenceRule) -> list[datetime]:
    """
    Generate every occurrence of a recurring series.

    Args:
        start: First occurrence (date and time of day)
        rule: Validated recurrence rule

    Returns:
        Occurrences in chronological order, all sharing the time of day of start
    """
    if rule.frequency == RecurrenceFrequency.NONE:
        return [start]

    max_occurrences = rule.termination_count or DEFAULT_MAX_OCCURRENCES
    start_weekday = sunday_based_weekday(start)

    dates: list[datetime] = []
    current = start

    while len(dates) < max_occurrences:
        if rule.termination_date and current.date() > rule.termination_date:
            break

        if len(dates) >= SAFETY_MAX_OCCURRENCES:
            logger.warning(
                f"⚠️ Recurrence safety limit reached ({SAFETY_MAX_OCCURRENCES} occurrences)"
            )
            break

        if rule.frequency == RecurrenceFrequency.WEEKLY:
            # Walk day by day so several weekdays per cycle come out in order
            if sunday_based_weekday(current) in rule.weekdays:
                dates.append(current)

            current = current + timedelta(days=1)

            # Completed a 7-day cycle: skip the off weeks
            if sunday_based_weekday(current) == start_weekday and rule.interval > 1:
                current = current + timedelta(weeks=rule.interval - 1)

        elif rule.frequency == RecurrenceFrequency.DAILY:
            dates.append(current)
            current = current + timedelta(days=rule.interval)

        elif rule.frequency == RecurrenceFrequency.MONTHLY:
            dates.append(current)
            # Chained from the previous occurrence: a clamped day (Jan 31 -> Feb 28) carries forward
            current = current + relativedelta(months=rule.interval)

    return dates


def _join_names(names: list[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])} and {names[-1]}"


def get_recurrence_summary(rule: RecurrenceRule) -> str:
    """Readable description, e.g. "Repeats every Monday and Wednesday, 8 times" """
    if rule.frequency == RecurrenceFrequency.NONE:
        return "Does not repeat"

    text = "Repeats "
    if rule.frequency == RecurrenceFrequency.DAILY:
        text += "every day" if rule.interval == 1 else f"every {rule.interval} days"
    elif rule.frequency == RecurrenceFrequency.WEEKLY:
        days = _join_names([WEEKDAY_NAMES[d] for d in sorted(rule.weekdays)])
        text += f"every {days}" if rule.interval == 1 else f"every {rule.interval} weeks on {days}"
    elif rule.frequency == RecurrenceFrequency.MONTHLY:
        text += "every month" if rule.interval == 1 else f"every {rule.interval} months"

    if rule.termination_date:
        text += f" until {rule.termination_date.isoformat()}"
    elif rule.termination_count:
        text += f", {rule.termination_count} times"

    return text
