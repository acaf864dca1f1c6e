# carelog/api/records/test_record_services.py
import asyncio
from datetime import date, datetime, timezone

import pytest

from carelog.api.records.services import (
    AppendEntry, RemoveEntry, ReplaceEntries, DailyRecordService, EntryNotFoundError, daily_hydration_total
)
from carelog.core.environment import AppMode, Environment
from carelog.models.daily_record import DailyRecord, EntryKind, build_entry
from carelog.models.resident import Gender
from carelog.services.bulk_dispatcher import BulkOperationDispatcher
from carelog.services.record_repository import RecordRepository
from carelog.testing.fake_firestore import FakeFirestore

DATE = '2024-03-15'


@pytest.fixture
def repository():
    client = FakeFirestore().client()
    return RecordRepository(lambda: client, Environment(AppMode.DEMO))


@pytest.fixture
def service(repository):
    return DailyRecordService(repository, BulkOperationDispatcher(repository))


def _vital(service, temperature):
    return service.new_entry(EntryKind.VITALS, {'temperature': temperature}, recorded_by='staff-1')


def test_append_keeps_existing_entries(service):
    v1, v2 = _vital(service, 36.5), _vital(service, 36.9)

    async def scenario():
        await service.apply('resident-1', DATE, AppendEntry(EntryKind.VITALS, v1))
        return await service.apply('resident-1', DATE, AppendEntry(EntryKind.VITALS, v2))

    record = asyncio.run(scenario())
    assert [v['id'] for v in record.vitals] == [v1.id, v2.id]
    assert record.meals == []


def test_append_only_touches_its_own_list(service):
    meal = service.new_entry(EntryKind.MEALS, {'meal_type': 'lunch', 'main_dish_amount': 80,
                                               'side_dish_amount': 50}, recorded_by='staff-1')
    vital = _vital(service, 36.6)

    async def scenario():
        await service.apply('resident-1', DATE, AppendEntry(EntryKind.MEALS, meal))
        return await service.apply('resident-1', DATE, AppendEntry(EntryKind.VITALS, vital))

    record = asyncio.run(scenario())
    assert [m['id'] for m in record.meals] == [meal.id]
    assert [v['id'] for v in record.vitals] == [vital.id]


def test_remove_entry_by_id(service):
    v1, v2 = _vital(service, 36.5), _vital(service, 36.9)

    async def scenario():
        await service.apply('resident-1', DATE, AppendEntry(EntryKind.VITALS, v1))
        await service.apply('resident-1', DATE, AppendEntry(EntryKind.VITALS, v2))
        return await service.apply('resident-1', DATE, RemoveEntry(EntryKind.VITALS, v1.id))

    record = asyncio.run(scenario())
    assert [v['id'] for v in record.vitals] == [v2.id]


def test_remove_unknown_entry_raises(service):
    with pytest.raises(EntryNotFoundError):
        asyncio.run(service.apply('resident-1', DATE, RemoveEntry(EntryKind.VITALS, 'missing')))


def test_replace_entries_sets_whole_list(service):
    v1 = _vital(service, 36.5)

    async def scenario():
        await service.apply('resident-1', DATE, AppendEntry(EntryKind.VITALS, _vital(service, 37.0)))
        return await service.apply('resident-1', DATE, ReplaceEntries(EntryKind.VITALS, [v1.to_dict()]))

    record = asyncio.run(scenario())
    assert [v['id'] for v in record.vitals] == [v1.id]


def test_new_entry_defaults():
    recorded_at = datetime(2024, 3, 15, 14, 5, tzinfo=timezone.utc)
    entry = build_entry(EntryKind.HYDRATIONS, {'amount': 200}, 'staff-1', recorded_at=recorded_at)
    assert entry.time == '14:05'
    assert entry.recorded_by == 'staff-1'
    assert len(entry.id) == 36


def test_append_to_many_shares_recorded_at(service):
    async def scenario():
        return await service.append_to_many(['resident-1', 'resident-2'], DATE, EntryKind.HYDRATIONS,
                                            {'amount': 150, 'drink_type': 'お茶'}, recorded_by='staff-1')

    entries = asyncio.run(scenario())
    assert len({e.id for e in entries}) == 2
    assert entries[0].recorded_at == entries[1].recorded_at


def test_history_lists_active_residents_with_their_record(repository, service):
    async def scenario():
        first = await repository.create_resident({
            'name': '山田 太郎', 'name_kana': 'ヤマダ タロウ', 'birth_date': date(1940, 3, 15),
            'gender': Gender.MALE, 'room_number': '101', 'care_level': 3, 'is_active': True,
        })
        await repository.create_resident({
            'name': '鈴木 花子', 'name_kana': 'スズキ ハナコ', 'birth_date': date(1938, 7, 22),
            'gender': Gender.FEMALE, 'room_number': '102', 'care_level': 2, 'is_active': True,
        })
        await service.append_to_many([first], DATE, EntryKind.HYDRATIONS, {'amount': 150}, recorded_by='staff-1')
        await service.append_to_many([first], DATE, EntryKind.HYDRATIONS, {'amount': 100}, recorded_by='staff-1')
        return first, await service.get_history(DATE)

    first, rows = asyncio.run(scenario())
    by_id = {row['resident'].resident_id: row for row in rows}
    assert len(rows) == 2
    assert by_id[first]['hydration_total_ml'] == 250
    others = [row for rid, row in by_id.items() if rid != first]
    assert others[0]['record'] is None
    assert others[0]['hydration_total_ml'] == 0


def test_daily_hydration_total():
    record = DailyRecord(record_id=DATE, resident_id='r', date=DATE,
                         hydrations=[{'amount': 150}, {'amount': 200}, {}])
    assert daily_hydration_total(record) == 350
    assert daily_hydration_total(None) == 0
