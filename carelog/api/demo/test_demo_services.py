# carelog/api/demo/test_demo_services.py
import asyncio

import pytest

from carelog.api.demo.services import DemoModeOnlyError, DemoService
from carelog.core.environment import AppMode, Environment
from carelog.models.user import DEMO_GUEST_UID
from carelog.services.record_repository import RecordRepository
from carelog.testing.fake_firestore import FakeFirestore


def _service(store, mode=AppMode.DEMO, seed_days=3):
    client = store.client()
    environment = Environment(mode)
    return DemoService(RecordRepository(lambda: client, environment), environment, seed_days=seed_days)


def test_seed_inserts_residents_and_records():
    store = FakeFirestore()
    service = _service(store, seed_days=2)

    assert asyncio.run(service.is_seeded()) is False
    result = asyncio.run(service.seed())

    assert result == {'residents_count': 30, 'records_count': 60}
    assert asyncio.run(service.is_seeded()) is True
    residents = store.documents('demo_residents')
    assert len(residents) == 30
    some_id = next(iter(residents))
    assert len(store.documents('demo_records', some_id, 'daily')) == 2
    # 운영 컬렉션은 건드리지 않음
    assert store.documents('residents') == {}


def test_reset_clears_everything_but_the_guest_user():
    store = FakeFirestore()
    service = _service(store, seed_days=1)
    repository = service.repository

    async def scenario():
        await service.seed()
        await repository.create_user(DEMO_GUEST_UID, {'email': 'guest@demo.example.com', 'name': 'ゲスト'})
        await repository.create_user('someone-else', {'email': 'x@example.com', 'name': 'X'})
        old_ids = set(store.documents('demo_residents'))
        result = await service.reset()
        return old_ids, result

    old_ids, result = asyncio.run(scenario())
    assert result['deleted_residents'] == 30
    assert result['deleted_records'] == 30
    assert result['deleted_users'] == 1
    assert result['residents_count'] == 30

    new_ids = set(store.documents('demo_residents'))
    assert len(new_ids) == 30
    assert old_ids.isdisjoint(new_ids)
    for old_id in old_ids:
        assert store.documents('demo_records', old_id, 'daily') == {}
    assert set(store.documents('demo_users')) == {DEMO_GUEST_UID}


def test_demo_operations_are_rejected_in_production():
    store = FakeFirestore()
    service = _service(store, mode=AppMode.PRODUCTION)

    with pytest.raises(DemoModeOnlyError):
        asyncio.run(service.seed())
    with pytest.raises(DemoModeOnlyError):
        asyncio.run(service.reset())
    assert asyncio.run(service.is_seeded()) is False
    assert store.write_log == []
