from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, String, Text

from healthlog.core.db import Base, new_id, utcnow


class MenstrualEntry(Base):
    __tablename__ = "menstrual_entries"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    cycle_day = Column(Integer)
    flow_intensity = Column(String(16))  # none | light | medium | heavy
    symptoms = Column(JSON, default=list)
    cycle_phase = Column(String(16))  # menstrual | follicular | ovulation | luteal
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)


class PremenopausalEntry(Base):
    __tablename__ = "premenopausal_entries"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    hot_flashes = Column(Integer, default=0)
    night_sweats = Column(Boolean, default=False)
    mood_swings = Column(Integer, default=5)
    irregular_periods = Column(Boolean, default=False)
    sleep_disturbances = Column(Boolean, default=False)
    joint_aches = Column(Boolean, default=False)
    brain_fog = Column(Integer, default=5)
    weight_changes = Column(Boolean, default=False)
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)
