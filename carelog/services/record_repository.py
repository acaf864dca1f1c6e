# carelog/services/record_repository.py
import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from carelog.core.environment import Environment
from carelog.models.daily_record import DailyRecord, LIST_FIELDS
from carelog.models.resident import Resident
from carelog.models.user import User
from carelog.utils.datetime_utils import DateTimeUtils

RESIDENTS = 'residents'
RECORDS = 'records'
DAILY = 'daily'
USERS = 'users'


class RecordRepository:
    """
    이용자, 일일 기록, 사용자 문서에 대한 Firestore 접근을 전담하는 저장소.
    Firestore를 직접 다루는 곳은 이 클래스뿐입니다.

    저장소 오류(권한, 네트워크, 할당량 등)는 잡거나 변환하지 않고 그대로 호출자에게 전달합니다.
    재시도와 타임아웃도 두지 않습니다.
    """
    def __init__(self, client_provider: Callable[[], Any], environment: Environment):
        # client_provider: 현재 요청(이벤트 루프)에 묶인 Firestore 클라이언트를 돌려주는 함수
        self.client_provider = client_provider
        self.environment = environment
        logging.info(f"RecordRepository initialized (mode: {environment.mode.value}).")

    @property
    def db(self):
        return self.client_provider()

    @property
    def residents_ref(self):
        return self.db.collection(self.environment.collection_name(RESIDENTS))

    @property
    def records_ref(self):
        return self.db.collection(self.environment.collection_name(RECORDS))

    @property
    def users_ref(self):
        return self.db.collection(self.environment.collection_name(USERS))

    # =====================================================================================
    # 이용자 (Residents)
    # =====================================================================================
    async def list_active_residents(self) -> List[Resident]:
        """is_active == True 인 이용자를 이름 오름차순으로 조회합니다."""
        query = self.residents_ref \
            .where(filter=FieldFilter('is_active', '==', True)) \
            .order_by('name')
        return [Resident.from_dict(doc.id, doc.to_dict()) async for doc in query.stream()]

    async def list_residents(self) -> List[Resident]:
        """비활성 이용자를 포함한 전체 이용자 (데모 데이터 정리용)."""
        return [Resident.from_dict(doc.id, doc.to_dict()) async for doc in self.residents_ref.stream()]

    async def get_resident(self, resident_id: str) -> Optional[Resident]:
        doc = await self.residents_ref.document(resident_id).get()
        if not doc.exists:
            return None
        return Resident.from_dict(doc.id, doc.to_dict())

    async def create_resident(self, data: Dict[str, Any]) -> str:
        """새 이용자 문서를 자동 ID로 생성하고 ID를 반환합니다."""
        now = DateTimeUtils.now()
        doc_ref = self.residents_ref.document()
        payload = dict(data)
        payload.pop('resident_id', None)
        payload['created_at'] = now
        payload['updated_at'] = now
        # birth_date(date)는 UTC 자정 Timestamp로 저장됩니다.
        await doc_ref.set(DateTimeUtils.for_firestore(payload))
        logging.info(f"Resident created ({self.residents_ref.id}/{doc_ref.id})")
        return doc_ref.id

    async def update_resident(self, resident_id: str, data: Dict[str, Any]) -> None:
        """지정된 필드만 덮어쓰는 부분 업데이트. updated_at은 항상 갱신됩니다."""
        payload = dict(data)
        payload.pop('resident_id', None)
        payload['updated_at'] = DateTimeUtils.now()
        await self.residents_ref.document(resident_id).update(DateTimeUtils.for_firestore(payload))
        logging.info(f"Resident updated ({resident_id}) fields: {sorted(data.keys())}")

    async def soft_delete_resident(self, resident_id: str) -> None:
        """논리 삭제. 문서와 과거 기록은 그대로 남습니다."""
        await self.update_resident(resident_id, {'is_active': False})

    # =====================================================================================
    # 일일 기록 (DailyRecords)
    # =====================================================================================
    def _daily_ref(self, resident_id: str, date_key: str):
        return self.records_ref.document(resident_id).collection(DAILY).document(date_key)

    async def get_daily_record(self, resident_id: str, date_key: str) -> Optional[DailyRecord]:
        """해당 날짜의 기록이 아직 없으면 None (오류가 아님)."""
        doc = await self._daily_ref(resident_id, date_key).get()
        if not doc.exists:
            return None
        return DailyRecord.from_dict(doc.id, doc.to_dict())

    async def list_daily_records(self, resident_id: str, date_keys: Iterable[str]) -> List[DailyRecord]:
        """여러 날짜의 기록을 동시에 조회합니다. 기록이 없는 날짜는 건너뜁니다."""
        date_keys = list(date_keys)
        records = await asyncio.gather(*(self.get_daily_record(resident_id, d) for d in date_keys))
        return [record for record in records if record is not None]

    async def save_daily_record(self, resident_id: str, date_key: str, partial: Dict[str, Any]) -> None:
        """
        일일 기록에 부분 업데이트를 병합 저장합니다.

        - 문서가 없으면: 네 리스트 필드를 빈 리스트로 초기화한 뒤 partial을 덮어써 생성
        - 문서가 있으면: partial에 포함된 필드만 덮어씀 (리스트 필드는 통째로 교체, 이어붙이지 않음)

        항목 하나를 추가하려면 호출자가 현재 리스트를 읽어 새 항목을 합친 전체 리스트를 넘겨야 합니다.
        읽기와 쓰기 사이에 잠금이나 버전 비교가 없으므로 동시 저장 시 마지막 쓰기가 이깁니다.
        """
        doc_ref = self._daily_ref(resident_id, date_key)
        now = DateTimeUtils.now()
        try:
            existing = await doc_ref.get()
            if existing.exists:
                payload = dict(partial)
                payload.pop('created_at', None)
                payload['updated_at'] = now
                await doc_ref.update(DateTimeUtils.for_firestore(payload))
            else:
                payload = {
                    'resident_id': resident_id,
                    'date': date_key,
                    **{list_field: [] for list_field in LIST_FIELDS},
                    **partial,
                    'created_at': now,
                    'updated_at': now,
                }
                await doc_ref.set(DateTimeUtils.for_firestore(payload))
            logging.info(f"Daily record saved ({resident_id}/{date_key}) fields: {sorted(partial.keys())}")
        except Exception as e:
            logging.error(f"Daily record save failed ({resident_id}/{date_key}): {e}", exc_info=True)
            raise

    # =====================================================================================
    # 사용자 (Users)
    # =====================================================================================
    async def get_user(self, user_id: str) -> Optional[User]:
        doc = await self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        return User.from_dict(doc.id, doc.to_dict())

    async def create_user(self, user_id: str, data: Dict[str, Any]) -> None:
        """외부에서 주어진 ID로 사용자 문서를 생성합니다. created_at은 생성 시에만 기록됩니다."""
        payload = dict(data)
        payload.pop('user_id', None)
        payload['created_at'] = DateTimeUtils.now()
        await self.users_ref.document(user_id).set(DateTimeUtils.for_firestore(payload))
        logging.info(f"User created ({self.users_ref.id}/{user_id})")

    # =====================================================================================
    # 데모 데이터 정리용
    # =====================================================================================
    async def has_residents(self) -> bool:
        """이용자 문서가 하나라도 있는지 (비활성 포함)."""
        async for _ in self.residents_ref.limit(1).stream():
            return True
        return False

    async def list_user_ids(self) -> List[str]:
        return [doc.id async for doc in self.users_ref.stream()]

    async def delete_user(self, user_id: str) -> None:
        await self.users_ref.document(user_id).delete()

    async def delete_resident_tree(self, resident_id: str) -> int:
        """이용자 문서와 그 이용자의 일일 기록 문서를 모두 삭제합니다. 삭제한 기록 수를 반환합니다."""
        daily_ref = self.records_ref.document(resident_id).collection(DAILY)
        deleted = 0
        async for doc in daily_ref.stream():
            await doc.reference.delete()
            deleted += 1
        await self.residents_ref.document(resident_id).delete()
        return deleted

    async def put_resident(self, resident_id: Optional[str], data: Dict[str, Any]) -> str:
        """Seed 투입용: 미리 만든 payload를 그대로 저장합니다."""
        doc_ref = self.residents_ref.document(resident_id) if resident_id else self.residents_ref.document()
        await doc_ref.set(DateTimeUtils.for_firestore(data))
        return doc_ref.id

    async def put_daily_record(self, resident_id: str, date_key: str, data: Dict[str, Any]) -> None:
        """Seed 투입용: 일일 기록 문서를 통째로 씁니다."""
        await self._daily_ref(resident_id, date_key).set(DateTimeUtils.for_firestore(data))
