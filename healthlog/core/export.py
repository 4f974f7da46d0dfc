"""
Monthly CSV export of daily check-ins, one row per health entry, with that
day's Fitbit activity, weight, sleep and food figures alongside.
"""

import calendar
import csv
import io
import logging
from datetime import date as DateType

from sqlalchemy.orm import Session

from healthlog.models.entries import HealthEntry
from healthlog.models.fitbit import FitbitActivity, FitbitFood, FitbitSleep, FitbitWeight

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Date",
    "Mood",
    "Energy",
    "Anxiety",
    "Sleep Hours",
    "Sleep Quality",
    "Weight",
    "Notes",
    "Fitbit Steps",
    "Fitbit Calories",
    "Fitbit Weight",
    "Fitbit Sleep Duration",
    "Fitbit Food Calories",
]


def parse_month(month: str) -> tuple[DateType, DateType]:
    """``"2024-03"`` -> first and last day of that month. Raises ValueError otherwise."""
    parts = month.split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise ValueError(f"Invalid month: {month}, expected YYYY-MM")
    year, mon = int(parts[0]), int(parts[1])
    first = DateType(year, mon, 1)
    return first, DateType(year, mon, calendar.monthrange(year, mon)[1])


def export_filename(month: str) -> str:
    return f"health-data-{month}.csv"


def _by_date(db: Session, model, user_id: str, start: DateType, end: DateType) -> dict:
    rows = (
        db.query(model)
        .filter(model.user_id == user_id)
        .filter(model.date >= start)
        .filter(model.date <= end)
        .all()
    )
    return {r.date: r for r in rows}


def _one_decimal(value) -> str:
    return f"{value:.1f}" if value is not None else ""


def _or_blank(value) -> str:
    # zero readings export as blank, like missing ones
    return value if value else ""


def export_health_csv(db: Session, user_id: str, month: str) -> str:
    start, end = parse_month(month)

    entries = (
        db.query(HealthEntry)
        .filter(HealthEntry.user_id == user_id)
        .filter(HealthEntry.date >= start)
        .filter(HealthEntry.date <= end)
        .order_by(HealthEntry.date.asc())
        .all()
    )
    activities = _by_date(db, FitbitActivity, user_id, start, end)
    weights = _by_date(db, FitbitWeight, user_id, start, end)
    sleep = _by_date(db, FitbitSleep, user_id, start, end)
    foods = _by_date(db, FitbitFood, user_id, start, end)

    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for e in entries:
        activity = activities.get(e.date)
        weight = weights.get(e.date)
        night = sleep.get(e.date)
        food = foods.get(e.date)
        writer.writerow(
            [
                e.date.isoformat(),
                e.mood,
                e.energy,
                e.anxiety_level,
                _one_decimal(e.sleep_hours),
                e.sleep_quality,
                _one_decimal(e.weight),
                e.notes or "",
                _or_blank(activity.steps) if activity else "",
                _or_blank(activity.calories) if activity else "",
                _or_blank(weight.weight) if weight else "",
                round(night.duration / 60, 1) if night and night.duration else "",
                _or_blank(food.calories) if food else "",
            ]
        )

    logger.info("Exported %d health entries for user %s (%s)", len(entries), user_id, month)
    return out.getvalue()
