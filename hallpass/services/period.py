"""Grading period calculation.

A school year starts on August 1 and is split into four quarters. Timestamps
outside every quarter (the July gap) fall back to Q4 of the school year so a
period is always returned.
"""

from collections.abc import Sequence
from datetime import date, datetime, time

from hallpass.core.config import GradingPeriodRange
from hallpass.schemas.period import GradingPeriod

SCHOOL_YEAR_START_MONTH = 8

# (label, (year offset, month, day) start, (year offset, month, day) end)
QUARTERS = (
    ("Q1", (0, 8, 1), (0, 10, 15)),
    ("Q2", (0, 10, 16), (1, 1, 15)),
    ("Q3", (1, 1, 16), (1, 3, 31)),
    ("Q4", (1, 4, 1), (1, 6, 30)),
)


def now_local() -> datetime:
    """Current school-local wall-clock time (naive).

    Wrapped so tests can patch it.
    """
    return datetime.now()


def to_local(moment: datetime) -> datetime:
    """Normalize aware datetimes to naive local time; naive ones pass through."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def school_year_start(moment: datetime) -> int:
    """Calendar year in which the school year containing ``moment`` began."""
    if moment.month < SCHOOL_YEAR_START_MONTH:
        return moment.year - 1
    return moment.year


def build_period(label: str, start: date, end: date) -> GradingPeriod:
    """Period spanning whole days from ``start`` 00:00 through ``end`` 23:59:59.999999."""
    return GradingPeriod(
        label=label,
        start_date=start,
        end_date=end,
        start_inclusive=datetime.combine(start, time.min),
        end_inclusive=datetime.combine(end, time.max),
    )


def computed_periods(moment: datetime) -> list[GradingPeriod]:
    """The four quarters of the school year containing ``moment``."""
    base = school_year_start(to_local(moment))
    periods = []
    for label, (start_off, start_month, start_day), (end_off, end_month, end_day) in QUARTERS:
        periods.append(
            build_period(
                label,
                date(base + start_off, start_month, start_day),
                date(base + end_off, end_month, end_day),
            )
        )
    return periods


def period_for(
    moment: datetime,
    explicit: Sequence[GradingPeriodRange] = (),
) -> GradingPeriod:
    """Map a timestamp to its grading period.

    ``explicit`` quarters are only honoured when exactly four are configured.
    """
    moment = to_local(moment)

    if len(explicit) == len(QUARTERS):
        for configured in explicit:
            period = build_period(configured.label, configured.start, configured.end)
            if period.contains(moment):
                return period

    periods = computed_periods(moment)
    for period in periods:
        if period.contains(moment):
            return period
    return periods[-1]
