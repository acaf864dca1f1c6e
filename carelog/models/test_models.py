# carelog/models/test_models.py
from datetime import date, datetime, timezone

import pytest

from carelog.models.daily_record import DailyRecord, EntryKind, Excretion, ExcretionType, build_entry, parse_entry_kind
from carelog.models.resident import Gender, Resident
from carelog.models.user import User, UserRole


def test_resident_from_firestore_document():
    resident = Resident.from_dict('r-1', {
        'name': '山田 太郎',
        'name_kana': 'ヤマダ タロウ',
        'birth_date': datetime(1940, 3, 15, tzinfo=timezone.utc),
        'gender': 'male',
        'room_number': '101',
        'care_level': 3,
        'notes': None,
        'is_active': True,
        'legacy_field': 'ignored',
    })
    assert resident.birth_date == date(1940, 3, 15)
    assert resident.gender is Gender.MALE
    assert resident.notes == ""
    assert resident.to_dict()['gender'] == 'male'


def test_resident_with_unknown_gender_falls_back():
    resident = Resident.from_dict('r-1', {'name': 'x', 'birth_date': '1940-03-15', 'gender': 'unknown'})
    assert resident.gender is Gender.MALE


def test_daily_record_defaults_missing_lists():
    record = DailyRecord.from_dict('2024-03-15', {'resident_id': 'r-1', 'vitals': [{'id': 'v1'}]})
    assert record.date == '2024-03-15'
    assert record.vitals == [{'id': 'v1'}]
    assert record.excretions == [] and record.meals == [] and record.hydrations == []


def test_entries_returns_a_copy():
    record = DailyRecord(record_id='d', resident_id='r', date='d', meals=[{'id': 'm1'}])
    entries = record.entries(EntryKind.MEALS)
    entries.append({'id': 'm2'})
    assert record.meals == [{'id': 'm1'}]


def test_build_entry_serializes_enums_and_drops_empty_fields():
    entry = build_entry('excretions', {'type': ExcretionType.URINE, 'time': '07:00', 'unknown': 1}, 'staff-1',
                        recorded_at=datetime(2024, 3, 15, 7, 0, tzinfo=timezone.utc))
    assert isinstance(entry, Excretion)
    data = entry.to_dict()
    assert data['type'] == 'urine'
    assert 'feces_amount' not in data
    assert 'unknown' not in data
    assert data['recorded_by'] == 'staff-1'


def test_parse_entry_kind_rejects_unknown():
    assert parse_entry_kind('meals') is EntryKind.MEALS
    with pytest.raises(ValueError):
        parse_entry_kind('naps')


def test_user_with_unknown_role_falls_back_to_staff():
    user = User.from_dict('u-1', {'email': 'a@example.com', 'name': 'A', 'role': 'owner'})
    assert user.role is UserRole.STAFF
