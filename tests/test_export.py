from __future__ import annotations

import csv
import io
from datetime import date

import pytest

from healthlog.core.export import CSV_HEADERS, export_health_csv, parse_month
from healthlog.models import FitbitActivity, FitbitFood, FitbitSleep, FitbitWeight
from tests.factories import add_health_entries


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


@pytest.mark.parametrize("month, expected", [
    ("2024-02", (date(2024, 2, 1), date(2024, 2, 29))),
    ("2023-12", (date(2023, 12, 1), date(2023, 12, 31))),
])
def test_parse_month(month, expected):
    assert parse_month(month) == expected


@pytest.mark.parametrize("month", ["2024-13", "2024-3", "March", "2024-03-01", ""])
def test_parse_month_rejects_garbage(month):
    with pytest.raises(ValueError):
        parse_month(month)


class TestExportHealthCsv:
    def test_joins_fitbit_data_by_date(self, db, user):
        add_health_entries(db, user.id, 2)
        db.add_all([
            FitbitActivity(user_id=user.id, date=date(2024, 3, 1), steps=8042, calories=2210),
            FitbitWeight(user_id=user.id, date=date(2024, 3, 1), weight=149.6),
            FitbitSleep(user_id=user.id, date=date(2024, 3, 1), duration=450),
            FitbitFood(user_id=user.id, date=date(2024, 3, 2), calories=1850),
        ])
        db.commit()

        header, first, second = _rows(export_health_csv(db, user.id, "2024-03"))

        assert header == CSV_HEADERS
        assert first == [
            "2024-03-01", "5", "6", "3", "7.5", "7", "150.0", "day 0",
            "8042", "2210", "149.6", "7.5", "",
        ]
        assert second[0] == "2024-03-02"
        assert second[6] == "149.0"
        assert second[8:] == ["", "", "", "", "1850"]

    def test_only_the_requested_month(self, db, user):
        add_health_entries(db, user.id, 3, start=date(2024, 2, 28))

        rows = _rows(export_health_csv(db, user.id, "2024-03"))

        assert [r[0] for r in rows[1:]] == ["2024-03-01"]

    def test_empty_month_is_header_only(self, db, user):
        assert export_health_csv(db, user.id, "2024-03") == ",".join(CSV_HEADERS) + "\n"

    def test_notes_are_quoted(self, db, user):
        [entry] = add_health_entries(db, user.id, 1)
        entry.notes = 'slept badly, "rough" night\nwoke at 3'
        db.commit()

        text = export_health_csv(db, user.id, "2024-03")

        assert '"slept badly, ""rough"" night\nwoke at 3"' in text
        assert _rows(text)[1][7] == 'slept badly, "rough" night\nwoke at 3'
