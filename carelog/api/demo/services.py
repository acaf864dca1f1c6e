# carelog/api/demo/services.py
import asyncio
import logging
from typing import Any, Dict

from carelog.core.environment import Environment, DemoModeOnlyError
from carelog.models.user import DEMO_GUEST_UID
from carelog.services.record_repository import RecordRepository
from carelog.services.seed_data import SEED_RESIDENTS, generate_seed_records, get_recent_dates
from carelog.utils.datetime_utils import DateTimeUtils

__all__ = ['DemoService', 'DemoModeOnlyError']


class DemoService:
    """
    데모 데이터 관리 (demo_ 접두사 컬렉션 전용).
    seed/reset은 운영 모드에서 호출하면 DemoModeOnlyError를 던집니다.
    """
    def __init__(self, repository: RecordRepository, environment: Environment, seed_days: int = 3):
        self.repository = repository
        self.environment = environment
        self.seed_days = seed_days

    async def is_seeded(self) -> bool:
        """데모 이용자 문서가 하나라도 있으면 True. 운영 모드에서는 항상 False."""
        if not self.environment.is_demo:
            return False
        return await self.repository.has_residents()

    async def seed(self) -> Dict[str, int]:
        """Seed 이용자 전원과 최근 seed_days일치 기록을 투입합니다."""
        self.environment.require_demo('seed')
        date_keys = get_recent_dates(self.seed_days)
        counts = await asyncio.gather(*(self._seed_resident(row, date_keys) for row in SEED_RESIDENTS))
        result = {'residents_count': len(counts), 'records_count': sum(counts)}
        logging.info(f"Demo data seeded: {result}")
        return result

    async def _seed_resident(self, row: Dict[str, Any], date_keys) -> int:
        now = DateTimeUtils.now()
        resident_id = await self.repository.put_resident(None, {
            **row,
            'is_active': True,
            'created_at': now,
            'updated_at': now,
        })
        records = generate_seed_records(resident_id, date_keys, recorded_by=DEMO_GUEST_UID)
        await asyncio.gather(*(
            self.repository.put_daily_record(resident_id, record['date'], {
                **record,
                'created_at': now,
                'updated_at': now,
            })
            for record in records
        ))
        return len(records)

    async def reset(self) -> Dict[str, int]:
        """
        데모 이용자와 그 기록, 게스트 외 데모 사용자를 모두 삭제한 뒤 다시 seed 합니다.
        """
        self.environment.require_demo('reset')
        residents = await self.repository.list_residents()
        deleted_records = await asyncio.gather(
            *(self.repository.delete_resident_tree(resident.resident_id) for resident in residents)
        )
        deleted_users = 0
        for user_id in await self.repository.list_user_ids():
            if user_id == DEMO_GUEST_UID:
                continue
            await self.repository.delete_user(user_id)
            deleted_users += 1
        logging.info(
            f"Demo data cleared: residents={len(residents)}, records={sum(deleted_records)}, users={deleted_users}"
        )
        result = await self.seed()
        return {
            'deleted_residents': len(residents),
            'deleted_records': sum(deleted_records),
            'deleted_users': deleted_users,
            **result,
        }
