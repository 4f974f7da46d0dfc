import logging
from datetime import date as DateType, datetime, time as TimeType, timedelta

from pydantic import BaseModel, Field
from sqlalchemy import func
from sqlalchemy.orm import Session

from healthlog.models.entries import FoodEntry
from healthlog.models.heartburn import HeartburnEntry, HeartburnFoodCorrelation

logger = logging.getLogger(__name__)

CORRELATION_WINDOW_HOURS = 6.0
MIN_CORRELATION = 0.1
# Food logged without a time is assumed to be lunch
DEFAULT_MEAL_TIME = TimeType(12, 0)


class HeartburnEpisodeIn(BaseModel):
    date: DateType
    time: TimeType
    severity: int = Field(..., ge=1, le=10)
    duration_minutes: int | None = 0
    triggers: list[str] = Field(default_factory=list)
    relief_methods: list[str] = Field(default_factory=list)
    medication_taken: str | None = None
    notes: str | None = ""


class TriggerStat(BaseModel):
    food_name: str
    episode_count: int
    avg_time_to_heartburn: float
    avg_correlation: float  # composite score: episodes * mean severity / 10
    avg_severity: float


def _eaten_at(food: FoodEntry) -> datetime:
    return datetime.combine(food.created_at.date(), food.time or DEFAULT_MEAL_TIME)


def correlation_strength(hours_before: float) -> float:
    return max(MIN_CORRELATION, 1.0 - hours_before / CORRELATION_WINDOW_HOURS)


def detect_food_correlations(db: Session, episode: HeartburnEntry) -> list[HeartburnFoodCorrelation]:
    """
    Link an episode to every food the user ate in the six hours before it.

    Candidates are food entries created on the episode's date or the day
    before; the eating time is the entry's creation date plus its logged time.
    """
    onset = datetime.combine(episode.date, episode.time)
    days = {episode.date, episode.date - timedelta(days=1)}

    # one day of slack either side for timezone-shifted created_at values
    lower = datetime.combine(episode.date - timedelta(days=2), TimeType.min)
    upper = datetime.combine(episode.date + timedelta(days=2), TimeType.min)
    candidates = (
        db.query(FoodEntry)
        .filter(FoodEntry.user_id == episode.user_id)
        .filter(FoodEntry.created_at >= lower)
        .filter(FoodEntry.created_at < upper)
        .all()
    )

    correlations: list[HeartburnFoodCorrelation] = []
    for food in candidates:
        if food.created_at is None or food.created_at.date() not in days:
            continue
        hours = (onset - _eaten_at(food)).total_seconds() / 3600.0
        if hours < 0 or hours > CORRELATION_WINDOW_HOURS:
            continue
        correlations.append(
            HeartburnFoodCorrelation(
                user_id=episode.user_id,
                heartburn_entry_id=episode.id,
                food_entry_id=food.id,
                time_between_hours=round(hours, 2),
                correlation_strength=round(correlation_strength(hours), 3),
            )
        )

    db.add_all(correlations)
    db.flush()
    logger.info("Heartburn episode %s linked to %d foods", episode.id, len(correlations))
    return correlations


def record_heartburn_episode(db: Session, user_id: str, data: HeartburnEpisodeIn) -> HeartburnEntry:
    episode = HeartburnEntry(
        user_id=user_id,
        date=data.date,
        time=data.time,
        severity=data.severity,
        duration_minutes=data.duration_minutes,
        triggers=data.triggers,
        relief_methods=data.relief_methods,
        medication_taken=data.medication_taken,
        notes=data.notes,
    )
    db.add(episode)
    db.flush()

    detect_food_correlations(db, episode)
    db.commit()
    db.refresh(episode)
    return episode


def top_triggers(
    db: Session,
    user_id: str,
    limit: int = 10,
    start: DateType | None = None,
    end: DateType | None = None,
) -> list[TriggerStat]:
    """
    Foods most often eaten before heartburn, optionally limited to episodes
    dated within ``[start, end]``.

    A food needs at least two linked episodes. The score rewards foods that
    show up often before bad episodes: ``episodes * mean severity / 10``.
    Highest score first, then most episodes, then name.
    """
    episode_count = func.count(HeartburnFoodCorrelation.id)
    score = episode_count * func.avg(HeartburnEntry.severity) / 10.0

    q = (
        db.query(
            FoodEntry.name,
            episode_count,
            func.avg(HeartburnFoodCorrelation.time_between_hours),
            score,
            func.avg(HeartburnEntry.severity),
        )
        .select_from(HeartburnFoodCorrelation)
        .join(FoodEntry, FoodEntry.id == HeartburnFoodCorrelation.food_entry_id)
        .join(HeartburnEntry, HeartburnEntry.id == HeartburnFoodCorrelation.heartburn_entry_id)
        .filter(HeartburnFoodCorrelation.user_id == user_id)
    )
    if start is not None:
        q = q.filter(HeartburnEntry.date >= start)
    if end is not None:
        q = q.filter(HeartburnEntry.date <= end)

    rows = (
        q.group_by(FoodEntry.name)
        .having(episode_count >= 2)
        .order_by(score.desc(), episode_count.desc(), FoodEntry.name.asc())
        .limit(min(limit, 10))
        .all()
    )

    return [
        TriggerStat(
            food_name=name,
            episode_count=count,
            avg_time_to_heartburn=round(float(hours or 0), 2),
            avg_correlation=round(float(corr or 0), 3),
            avg_severity=round(float(severity or 0), 1),
        )
        for name, count, hours, corr, severity in rows
    ]
