from datetime import date, datetime, time, timedelta

from healthlog.models import (
    BloodPressureReading,
    FoodEntry,
    HealthEntry,
    HeartburnEntry,
    LabResult,
    Medication,
    MentalHealthEntry,
    SeizureEntry,
)


def add_health_entries(db, user_id: str, count: int, start: date = date(2024, 3, 1)) -> list[HealthEntry]:
    entries = [
        HealthEntry(
            user_id=user_id,
            date=start + timedelta(days=i),
            mood=5 + i % 5,
            energy=6,
            anxiety_level=3,
            sleep_hours=7.5,
            sleep_quality=7,
            weight=150.0 - i,
            notes=f"day {i}",
        )
        for i in range(count)
    ]
    db.add_all(entries)
    db.commit()
    return entries


def add_food_entries(
    db,
    user_id: str,
    names: list[str],
    day: date = date(2024, 3, 1),
    first_hour: int = 8,
    health_entry_id: str | None = None,
) -> list[FoodEntry]:
    foods = [
        FoodEntry(
            user_id=user_id,
            health_entry_id=health_entry_id,
            name=name,
            time=time(first_hour + i, 0),
            category="snack",
            notes="",
            created_at=datetime.combine(day, time(first_hour + i, 0)),
        )
        for i, name in enumerate(names)
    ]
    db.add_all(foods)
    db.commit()
    return foods


def add_lab_result(db, user_id: str, name: str = "HbA1c", value: float = 5.4) -> LabResult:
    lab = LabResult(
        user_id=user_id,
        test_date=date(2024, 2, 20),
        test_name=name,
        test_category="blood",
        result_value=value,
        result_unit="%",
    )
    db.add(lab)
    db.commit()
    return lab


def add_seizure(db, user_id: str, day: date, **fields) -> SeizureEntry:
    entry = SeizureEntry(user_id=user_id, date=day, **fields)
    db.add(entry)
    db.commit()
    return entry


def add_mental_health(db, user_id: str, day: date, **fields) -> MentalHealthEntry:
    entry = MentalHealthEntry(user_id=user_id, date=day, **fields)
    db.add(entry)
    db.commit()
    return entry


def add_blood_pressure(db, user_id: str, day: date, systolic: int, diastolic: int, **fields) -> BloodPressureReading:
    reading = BloodPressureReading(user_id=user_id, date=day, systolic=systolic, diastolic=diastolic, **fields)
    db.add(reading)
    db.commit()
    return reading


def add_medication(db, user_id: str, name: str, status: str = "active", **fields) -> Medication:
    med = Medication(user_id=user_id, medication_name=name, status=status, **fields)
    db.add(med)
    db.commit()
    return med


def add_heartburn_entry(db, user_id: str, day: date, at: time, severity: int = 5) -> HeartburnEntry:
    entry = HeartburnEntry(user_id=user_id, date=day, time=at, severity=severity)
    db.add(entry)
    db.commit()
    return entry
