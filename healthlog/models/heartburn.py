from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, JSON, String, Text, Time

from healthlog.core.db import Base, new_id, utcnow


class HeartburnEntry(Base):
    __tablename__ = "heartburn_entries"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    time = Column(Time, nullable=False)

    severity = Column(Integer, nullable=False)  # 1-10
    duration_minutes = Column(Integer, default=0)
    triggers = Column(JSON, default=list)
    relief_methods = Column(JSON, default=list)
    medication_taken = Column(String(255))
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)


class HeartburnFoodCorrelation(Base):
    """Links an episode to a food eaten up to six hours before it."""

    __tablename__ = "heartburn_food_correlations"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    heartburn_entry_id = Column(
        String(36), ForeignKey("heartburn_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    food_entry_id = Column(String(36), ForeignKey("food_entries.id", ondelete="CASCADE"), nullable=False)

    time_between_hours = Column(Float)
    correlation_strength = Column(Float, default=0.5)  # 0-1, closer in time = higher

    created_at = Column(DateTime(timezone=True), default=utcnow)
