from sqlalchemy import Boolean, Column, DateTime, ForeignKey, JSON, String

from healthlog.core.db import Base, new_id, utcnow


class ReportTemplate(Base):
    __tablename__ = "report_templates"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    template_name = Column(String(255), nullable=False)
    # doctor | mental_health | specialist | emergency | routine_checkup
    report_type = Column(String(32), nullable=False, default="doctor")
    # {"sections": [...], "include_charts": bool, "include_raw_data": bool}
    template_content = Column(JSON, default=dict)
    is_default = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
