from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text

from healthlog.core.db import Base, new_id, utcnow


class HealthVitals(Base):
    __tablename__ = "health_vitals"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    blood_pressure_systolic = Column(Integer)
    blood_pressure_diastolic = Column(Integer)
    blood_sugar = Column(Float)
    heart_rate = Column(Integer)
    temperature = Column(Float)
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class WaterIntake(Base):
    __tablename__ = "water_intake"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    amount_ml = Column(Float, nullable=False, default=0)
    source = Column(String(32), default="manual")  # manual | fitbit
    logged_time = Column(DateTime(timezone=True), default=utcnow)

    created_at = Column(DateTime(timezone=True), default=utcnow)
