from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, JSON, String, Text, Time

from healthlog.core.db import Base, new_id, utcnow


class Medication(Base):
    __tablename__ = "medications"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    medication_name = Column(String(255), nullable=False)
    dosage = Column(String(64), default="")
    frequency = Column(String(64), default="")
    prescribed_by = Column(String(255))
    prescribed_date = Column(Date)
    status = Column(String(16), default="active")  # active | discontinued | paused | as_needed
    start_date = Column(Date)
    end_date = Column(Date)
    side_effects = Column(JSON, default=list)
    effectiveness_rating = Column(Integer)  # 1-10
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Diagnosis(Base):
    __tablename__ = "diagnoses"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    diagnosis_name = Column(String(255), nullable=False)
    diagnosis_code = Column(String(32))
    diagnosed_date = Column(Date)
    diagnosed_by = Column(String(255))
    severity = Column(String(16), default="mild")  # mild | moderate | severe | critical
    is_active = Column(Boolean, default=True)
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class SeizureEntry(Base):
    __tablename__ = "seizure_entries"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    time = Column(Time)

    # focal | generalized | absence | tonic_clonic | myoclonic | atonic | unknown
    seizure_type = Column(String(32), nullable=False, default="unknown")
    duration_seconds = Column(Integer)
    severity = Column(String(16), default="mild")
    triggers = Column(JSON, default=list)
    warning_signs = Column(JSON, default=list)
    post_seizure_effects = Column(JSON, default=list)
    location = Column(String(255))
    witnesses = Column(JSON, default=list)
    emergency_services_called = Column(Boolean, default=False)
    medication_taken = Column(String(255))
    recovery_time_minutes = Column(Integer)
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)


class MentalHealthEntry(Base):
    __tablename__ = "mental_health_entries"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    time = Column(Time)

    suicidal_thoughts = Column(Boolean, default=False)
    thoughts_intensity = Column(Integer)
    thoughts_duration = Column(String(64))
    triggers = Column(JSON, default=list)
    coping_mechanisms_used = Column(JSON, default=list)
    support_contacted = Column(Boolean, default=False)
    support_person = Column(String(255))
    safety_plan_followed = Column(Boolean, default=False)
    mood_before = Column(Integer)
    mood_after = Column(Integer)
    is_crisis = Column(Boolean, default=False)
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)


class BloodPressureReading(Base):
    __tablename__ = "blood_pressure_readings"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    time = Column(Time)

    systolic = Column(Integer, nullable=False)
    diastolic = Column(Integer, nullable=False)
    heart_rate = Column(Integer)
    position = Column(String(32), default="sitting")
    arm = Column(String(16), default="left")
    cuff_size = Column(String(16), default="standard")
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)


class WeightGoal(Base):
    __tablename__ = "weight_goals"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    goal_type = Column(String(16), nullable=False, default="maintain")  # loss | gain | maintain
    start_weight = Column(Float, nullable=False)
    target_weight = Column(Float, nullable=False)
    target_date = Column(Date)
    weekly_goal = Column(Float)
    start_date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=True)
    notes = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
