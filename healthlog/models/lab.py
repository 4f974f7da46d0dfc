from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Text

from healthlog.core.db import Base, new_id, utcnow


class LabResult(Base):
    __tablename__ = "lab_results"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    test_date = Column(Date, nullable=False)
    test_name = Column(String(128), nullable=False)
    test_category = Column(String(32), default="other")  # blood | hormone | vitamin | metabolic | thyroid | other

    result_value = Column(Float, nullable=False)
    result_unit = Column(String(32))
    reference_range_min = Column(Float)
    reference_range_max = Column(Float)
    status = Column(String(16), default="normal")  # low | normal | high | critical

    doctor_notes = Column(Text)
    lab_name = Column(String(128))

    created_at = Column(DateTime(timezone=True), default=utcnow)
