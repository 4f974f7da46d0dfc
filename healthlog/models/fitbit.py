from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, JSON, String, UniqueConstraint

from healthlog.core.db import Base, new_id, utcnow


class FitbitActivity(Base):
    __tablename__ = "fitbit_activities"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_fitbit_activity_user_date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    steps = Column(Integer, default=0)
    distance = Column(Float, default=0)
    calories = Column(Integer, default=0)
    active_minutes = Column(Integer, default=0)
    activities = Column(JSON, default=list)

    synced_at = Column(DateTime(timezone=True), default=utcnow)


class FitbitWeight(Base):
    __tablename__ = "fitbit_weights"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_fitbit_weight_user_date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    weight = Column(Float, nullable=False)
    bmi = Column(Float)
    fat_percentage = Column(Float)

    synced_at = Column(DateTime(timezone=True), default=utcnow)


class FitbitFood(Base):
    __tablename__ = "fitbit_foods"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_fitbit_food_user_date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    calories = Column(Integer, default=0)
    foods = Column(JSON, default=list)
    water = Column(Float, default=0)  # ml

    synced_at = Column(DateTime(timezone=True), default=utcnow)


class FitbitSleep(Base):
    __tablename__ = "fitbit_sleep"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_fitbit_sleep_user_date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    duration = Column(Integer, nullable=False)  # minutes
    efficiency = Column(Integer, default=0)
    start_time = Column(DateTime(timezone=True))
    end_time = Column(DateTime(timezone=True))
    stages = Column(JSON, default=dict)

    synced_at = Column(DateTime(timezone=True), default=utcnow)
