from datetime import date as DateType, time as TimeType

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from healthlog.api.deps import get_db, require_user
from healthlog.core.heartburn import (
    HeartburnEpisodeIn,
    TriggerStat,
    record_heartburn_episode,
    top_triggers,
)
from healthlog.models.heartburn import HeartburnFoodCorrelation

router = APIRouter(prefix="/users/{user_id}/heartburn", tags=["heartburn"])


class CorrelationOut(BaseModel):
    food_entry_id: str
    time_between_hours: float | None
    correlation_strength: float | None


class HeartburnEpisodeOut(BaseModel):
    id: str
    date: DateType
    time: TimeType
    severity: int
    correlations: list[CorrelationOut]


@router.post("", status_code=201, response_model=HeartburnEpisodeOut)
def log_episode(user_id: str, payload: HeartburnEpisodeIn, db: Session = Depends(get_db)):
    """
    Record a heartburn episode and link it to foods eaten in the six hours before.
    """
    require_user(db, user_id)
    episode = record_heartburn_episode(db, user_id, payload)

    links = (
        db.query(HeartburnFoodCorrelation)
        .filter(HeartburnFoodCorrelation.heartburn_entry_id == episode.id)
        .order_by(HeartburnFoodCorrelation.correlation_strength.desc())
        .all()
    )
    return HeartburnEpisodeOut(
        id=episode.id,
        date=episode.date,
        time=episode.time,
        severity=episode.severity,
        correlations=[
            CorrelationOut(
                food_entry_id=c.food_entry_id,
                time_between_hours=c.time_between_hours,
                correlation_strength=c.correlation_strength,
            )
            for c in links
        ],
    )


@router.get("/triggers", response_model=list[TriggerStat])
def get_top_triggers(user_id: str, limit: int = Query(10, ge=1, le=10), db: Session = Depends(get_db)):
    require_user(db, user_id)
    return top_triggers(db, user_id, limit)
