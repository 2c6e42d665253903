"""Grading period schemas."""

from datetime import date, datetime

from hallpass.schemas.common import BaseSchema


class GradingPeriod(BaseSchema):
    """One quarter of the school year; computed, never stored."""

    label: str
    start_date: date
    end_date: date
    start_inclusive: datetime
    end_inclusive: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start_inclusive <= moment <= self.end_inclusive
