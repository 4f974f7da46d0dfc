from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest

from healthlog.core import report as reports
from healthlog.core.errors import DefaultTemplateError, TemplateNotFoundError
from healthlog.core.heartburn import HeartburnEpisodeIn, record_heartburn_episode
from healthlog.core.report import DoctorInfo, build_report, frequencies, render_report, report_filename
from healthlog.models import HealthEntry
from tests.factories import (
    add_blood_pressure,
    add_food_entries,
    add_health_entries,
    add_medication,
    add_mental_health,
    add_seizure,
)

GENERATED = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)
DEFAULT_DOCTOR_SECTIONS = reports.DEFAULT_TEMPLATES[0]["template_content"]["sections"]


@pytest.fixture
def populated(db, user):
    add_health_entries(db, user.id, 3)  # moods 5, 6, 7; weights 150, 149, 148
    add_seizure(db, user.id, date(2024, 3, 1), seizure_type="focal", duration_seconds=60,
                triggers=["stress", "sleep loss"], emergency_services_called=True)
    add_seizure(db, user.id, date(2024, 3, 2), seizure_type="focal", duration_seconds=120, triggers=["stress"])
    add_mental_health(db, user.id, date(2024, 3, 3), is_crisis=True, support_contacted=True, support_person="Mal",
                      coping_mechanisms_used=["walk", "music"], mood_before=3, mood_after=6)
    add_mental_health(db, user.id, date(2024, 3, 4), coping_mechanisms_used=["music"])
    add_blood_pressure(db, user.id, date(2024, 3, 1), 120, 80, heart_rate=70)
    add_blood_pressure(db, user.id, date(2024, 3, 2), 130, 90)
    add_medication(db, user.id, "Lamotrigine", dosage="100mg", frequency="twice daily", prescribed_by="Dr. Tam")
    add_medication(db, user.id, "Ibuprofen", status="discontinued")
    return user


def _build(db, user, sections, **kwargs):
    return build_report(
        db,
        user,
        sections,
        date(2024, 3, 1),
        date(2024, 3, 14),
        generated_at=GENERATED,
        **kwargs,
    )


class TestStatistics:
    def test_frequencies_most_common_then_alphabetical(self):
        items = frequencies(["b", "a", "c", "a", "b", "", None])
        assert [(i.label, i.count) for i in items] == [("a", 2), ("b", 2), ("c", 1)]

    def test_means_ignore_missing_values(self):
        entries = [
            HealthEntry(date=date(2024, 3, 1), mood=4, sleep_hours=None),
            HealthEntry(date=date(2024, 3, 2), mood=None, sleep_hours=8.0),
            HealthEntry(date=date(2024, 3, 3), mood=8, sleep_hours=6.0),
        ]
        summary = reports.summarize_health(entries)

        assert summary.total_entries == 3
        assert summary.avg_mood == 6.0
        assert summary.avg_sleep_hours == 7.0
        assert summary.avg_energy is None
        assert summary.weight_change is None

    def test_report_aggregates(self, db, populated):
        report = _build(db, populated, ["health_summary"])

        assert report.health.avg_mood == 6.0
        assert report.health.weight_change == -2.0
        assert report.seizures.total == 2
        assert report.seizures.avg_duration_seconds == 90.0
        assert report.seizures.emergency_count == 1
        assert report.mental_health.crisis_count == 1
        assert [c.label for c in report.mental_health.coping] == ["music", "walk"]
        assert report.blood_pressure.avg_systolic == 125
        assert report.blood_pressure.avg_diastolic == 85
        assert report.blood_pressure.avg_heart_rate == 70
        assert [m.medication_name for m in report.medications] == ["Lamotrigine"]
        assert report.mood_correlation.avg_mood_seizure_days == 5.5
        assert report.mood_correlation.avg_mood_other_days == 7.0

    def test_date_range_is_inclusive_and_scoped(self, db, populated):
        report = build_report(db, populated, [], date(2024, 3, 2), date(2024, 3, 2), generated_at=GENERATED)
        assert report.health.total_entries == 1
        assert report.seizures.total == 1

    def test_heartburn_triggers_follow_the_period(self, db, user):
        for day in (date(2024, 2, 10), date(2024, 2, 11), date(2024, 3, 5), date(2024, 3, 6)):
            name = "coffee" if day.month == 2 else "curry"
            add_food_entries(db, user.id, [name], day=day, first_hour=11)
            record_heartburn_episode(db, user.id, HeartburnEpisodeIn(date=day, time=time(13, 0), severity=5))

        report = _build(db, user, ["heartburn"])

        assert [t.food_name for t in report.heartburn_triggers] == ["curry"]

    def test_start_after_end_is_rejected(self, db, user):
        with pytest.raises(ValueError):
            build_report(db, user, [], date(2024, 3, 2), date(2024, 3, 1))


class TestRendering:
    def test_header_and_footer(self, db, populated):
        doctor = DoctorInfo(name="Dr. Tam", appointment_date=date(2024, 3, 20))
        text = render_report(_build(db, populated, ["patient_info"], doctor=doctor))

        assert text.startswith(
            "HEALTH REPORT FOR JAYNE\n"
            "Generated: March 15, 2024\n"
            "Period: Mar 1 - Mar 14, 2024\n"
            "Doctor: Dr. Tam\n"
            "Appointment: Mar 20, 2024\n"
        )
        assert text.endswith(
            "=== NOTES ===\n"
            "This report was generated automatically from health tracking data.\n"
            "Please review with your healthcare provider and discuss any concerns."
        )

    def test_doctor_lines_are_optional(self, db, populated):
        text = render_report(_build(db, populated, []))
        assert "Doctor:" not in text
        assert "Appointment:" not in text

    def test_sections_follow_template_order(self, db, populated):
        text = render_report(_build(db, populated, ["blood_pressure", "not_a_section", "seizures"]))

        assert text.index("=== BLOOD PRESSURE ===") < text.index("=== SEIZURE ACTIVITY ===")
        assert "not_a_section" not in text
        assert "=== HEALTH SUMMARY ===" not in text

    def test_section_content(self, db, populated):
        text = render_report(_build(db, populated, DEFAULT_DOCTOR_SECTIONS))

        assert "• Average mood: 6.0/10" in text
        assert "• Weight change: -2.0 lbs" in text
        assert "• Lamotrigine 100mg - twice daily" in text
        assert "Ibuprofen" not in text
        assert "• Average duration: 90 seconds" in text
        assert "• Types: focal: 2" in text
        assert "• Common triggers: stress (2x), sleep loss (1x)" in text
        assert "• Most effective coping strategies: music (2x), walk (1x)" in text
        assert "• Average: 125/85 mmHg" in text
        assert "• Average heart rate: 70 bpm" in text
        assert "(Add your questions and concerns here)" in text

    def test_every_stock_section_renders(self, db, populated):
        sections = sorted({s for t in reports.DEFAULT_TEMPLATES for s in t["template_content"]["sections"]})
        text = render_report(_build(db, populated, sections))
        assert text.count("=== ") == len(sections) + 1

    def test_filename(self):
        assert report_filename("Jayne", date(2024, 3, 15)) == "health-report-jayne-2024-03-15.txt"


class TestTemplates:
    def test_defaults_created_once(self, db, user):
        first = reports.ensure_default_templates(db, user.id)
        second = reports.ensure_default_templates(db, user.id)

        assert len(first) == 3
        assert [t.id for t in first] == [t.id for t in second]
        default = [t for t in first if t.is_default]
        assert [t.template_name for t in default] == ["Standard Doctor Visit"]
        assert reports.template_sections(default[0]) == DEFAULT_DOCTOR_SECTIONS

    def test_default_template_cannot_be_deleted(self, db, user):
        templates = reports.ensure_default_templates(db, user.id)
        default = next(t for t in templates if t.is_default)

        with pytest.raises(DefaultTemplateError):
            reports.delete_template(db, user.id, default.id)

    def test_create_rename_delete(self, db, user):
        template = reports.create_template(db, user.id, "Cardiology", "specialist")
        assert reports.template_sections(template) == reports.NEW_TEMPLATE_SECTIONS

        renamed = reports.rename_template(db, user.id, template.id, "Cardiology follow-up")
        assert renamed.template_name == "Cardiology follow-up"

        reports.delete_template(db, user.id, template.id)
        with pytest.raises(TemplateNotFoundError):
            reports.get_template(db, user.id, template.id)

    def test_unknown_report_type(self, db, user):
        with pytest.raises(ValueError):
            reports.create_template(db, user.id, "Odd", "astrology")
