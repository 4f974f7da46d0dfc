from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text, Time, UniqueConstraint

from healthlog.core.db import Base, new_id, utcnow


class HealthEntry(Base):
    """Daily check-in: one per user per date."""

    __tablename__ = "health_entries"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_health_entry_user_date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    # 1-10 scales
    mood = Column(Integer)
    energy = Column(Integer)
    anxiety_level = Column(Integer)
    sleep_quality = Column(Integer)

    sleep_hours = Column(Float)
    weight = Column(Float)
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class FoodEntry(Base):
    __tablename__ = "food_entries"

    id = Column(String(36), primary_key=True, default=new_id)
    health_entry_id = Column(String(36), ForeignKey("health_entries.id", ondelete="CASCADE"))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    time = Column(Time)
    category = Column(String(16), nullable=False, default="snack")  # breakfast | lunch | dinner | snack
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)


class ActivityEntry(Base):
    __tablename__ = "activity_entries"

    id = Column(String(36), primary_key=True, default=new_id)
    health_entry_id = Column(String(36), ForeignKey("health_entries.id", ondelete="CASCADE"))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    intensity = Column(String(16), nullable=False, default="moderate")  # low | moderate | high
    time = Column(Time)

    created_at = Column(DateTime(timezone=True), default=utcnow)
