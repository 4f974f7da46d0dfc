from datetime import date as DateType, datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from healthlog.api.deps import get_db, require_user, to_http
from healthlog.core import report as reports
from healthlog.core.errors import HealthLogError
from healthlog.core.report import DoctorInfo, HealthReport

router = APIRouter(prefix="/users/{user_id}", tags=["reports"])


# ---------- Pydantic schemas ----------

class TemplateOut(BaseModel):
    id: str
    template_name: str
    report_type: str
    sections: list[str]
    is_default: bool
    created_at: datetime | None = None


class TemplateIn(BaseModel):
    template_name: str = Field(..., min_length=1)
    report_type: str = "doctor"
    sections: list[str] | None = None


class TemplateRenameIn(BaseModel):
    template_name: str = Field(..., min_length=1)


class ReportRequest(BaseModel):
    start: DateType
    end: DateType
    # Template wins over an explicit section list; neither means the default template
    template_id: str | None = None
    sections: list[str] | None = None
    doctor: DoctorInfo = Field(default_factory=DoctorInfo)


class ReportOut(BaseModel):
    filename: str
    report: HealthReport
    text: str


def _template_out(t) -> TemplateOut:
    return TemplateOut(
        id=t.id,
        template_name=t.template_name,
        report_type=t.report_type,
        sections=reports.template_sections(t),
        is_default=bool(t.is_default),
        created_at=t.created_at,
    )


def _resolve_sections(db: Session, user_id: str, payload: ReportRequest) -> list[str]:
    if payload.template_id:
        return reports.template_sections(reports.get_template(db, user_id, payload.template_id))
    if payload.sections:
        return payload.sections
    templates = reports.ensure_default_templates(db, user_id)
    default = next((t for t in templates if t.is_default), templates[0])
    return reports.template_sections(default)


def _generate(db: Session, user_id: str, payload: ReportRequest) -> tuple[str, HealthReport, str]:
    user = require_user(db, user_id)
    try:
        sections = _resolve_sections(db, user_id, payload)
        report = reports.build_report(db, user, sections, payload.start, payload.end, payload.doctor)
    except HealthLogError as e:
        raise to_http(e) from e
    except ValueError as e:
        raise HTTPException(400, str(e))
    filename = reports.report_filename(user.name, report.generated_at.date())
    return filename, report, reports.render_report(report)


# ---------- Templates ----------

@router.get("/report-templates", response_model=list[TemplateOut])
def list_templates(user_id: str, db: Session = Depends(get_db)):
    require_user(db, user_id)
    return [_template_out(t) for t in reports.ensure_default_templates(db, user_id)]


@router.post("/report-templates", status_code=201, response_model=TemplateOut)
def create_template(user_id: str, payload: TemplateIn, db: Session = Depends(get_db)):
    require_user(db, user_id)
    try:
        template = reports.create_template(
            db, user_id, payload.template_name, payload.report_type, payload.sections
        )
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _template_out(template)


@router.patch("/report-templates/{template_id}", response_model=TemplateOut)
def rename_template(user_id: str, template_id: str, payload: TemplateRenameIn, db: Session = Depends(get_db)):
    try:
        template = reports.rename_template(db, user_id, template_id, payload.template_name)
    except HealthLogError as e:
        raise to_http(e) from e
    return _template_out(template)


@router.delete("/report-templates/{template_id}")
def delete_template(user_id: str, template_id: str, db: Session = Depends(get_db)):
    try:
        reports.delete_template(db, user_id, template_id)
    except HealthLogError as e:
        raise to_http(e) from e
    return {"status": "ok", "deleted": template_id}


# ---------- Reports ----------

@router.post("/reports", response_model=ReportOut)
def generate_report(user_id: str, payload: ReportRequest, db: Session = Depends(get_db)):
    filename, report, text = _generate(db, user_id, payload)
    return ReportOut(filename=filename, report=report, text=text)


@router.post("/reports/download")
def download_report(user_id: str, payload: ReportRequest, db: Session = Depends(get_db)):
    filename, _, text = _generate(db, user_id, payload)
    return PlainTextResponse(
        text,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
