# carelog/api/records/services.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from carelog.models.daily_record import CareEntry, DailyRecord, EntryKind, build_entry
from carelog.models.resident import Resident
from carelog.services.bulk_dispatcher import BulkOperationDispatcher
from carelog.services.record_repository import RecordRepository
from carelog.utils.datetime_utils import DateTimeUtils


class EntryNotFoundError(LookupError):
    """삭제하려는 기록 항목이 해당 날짜 리스트에 없을 때."""


# =====================================================================================
# 일일 기록 변경 명령
# =====================================================================================
@dataclass(frozen=True)
class AppendEntry:
    kind: EntryKind
    entry: CareEntry

@dataclass(frozen=True)
class RemoveEntry:
    kind: EntryKind
    entry_id: str

@dataclass(frozen=True)
class ReplaceEntries:
    kind: EntryKind
    entries: List[Dict[str, Any]]

RecordCommand = Union[AppendEntry, RemoveEntry, ReplaceEntries]


class DailyRecordService:
    """
    일일 기록의 조회와 변경 명령 처리를 전담하는 서비스 클래스.

    저장소의 save_daily_record는 리스트를 통째로 교체하므로,
    이 서비스가 현재 리스트를 읽어 병합한 전체 리스트를 만들어 넘깁니다.
    """
    def __init__(self, repository: RecordRepository, dispatcher: BulkOperationDispatcher):
        self.repository = repository
        self.dispatcher = dispatcher
        logging.info("DailyRecordService initialized.")

    async def get_daily_record(self, resident_id: str, date_key: str) -> Optional[DailyRecord]:
        return await self.repository.get_daily_record(resident_id, date_key)

    async def save_partial(self, resident_id: str, date_key: str, partial: Dict[str, Any]) -> DailyRecord:
        """부분 업데이트를 그대로 저장합니다 (리스트 필드는 교체)."""
        await self.repository.save_daily_record(resident_id, date_key, partial)
        return await self.repository.get_daily_record(resident_id, date_key)

    async def apply(self, resident_id: str, date_key: str, command: RecordCommand) -> DailyRecord:
        """명령을 현재 리스트에 적용한 결과 리스트를 저장하고, 저장된 기록을 반환합니다."""
        record = await self.repository.get_daily_record(resident_id, date_key)
        current = record.entries(command.kind) if record else []

        if isinstance(command, AppendEntry):
            updated = current + [command.entry.to_dict()]
        elif isinstance(command, RemoveEntry):
            updated = [entry for entry in current if entry.get('id') != command.entry_id]
            if len(updated) == len(current):
                raise EntryNotFoundError(f"기록 항목을 찾을 수 없습니다: {command.kind.value}/{command.entry_id}")
        elif isinstance(command, ReplaceEntries):
            updated = list(command.entries)
        else:
            raise TypeError(f"지원하지 않는 명령입니다: {command!r}")

        await self.repository.save_daily_record(resident_id, date_key, {command.kind.value: updated})
        return await self.repository.get_daily_record(resident_id, date_key)

    def new_entry(self, kind: EntryKind, values: Dict[str, Any], recorded_by: str) -> CareEntry:
        return build_entry(kind, values, recorded_by=recorded_by)

    async def append_to_many(self, resident_ids: List[str], date_key: str, kind: EntryKind,
                             values: Dict[str, Any], recorded_by: str) -> List[CareEntry]:
        """
        선택한 이용자 모두에게 같은 내용의 항목을 하나씩 추가합니다.
        항목 id와 기록 시각은 이용자마다 따로 발급하되 같은 시각을 사용합니다.
        """
        recorded_at = values.get('recorded_at') or DateTimeUtils.now()
        return await self.dispatcher.append_to_many(
            resident_ids, date_key, kind,
            lambda resident_id: build_entry(kind, values, recorded_by=recorded_by, recorded_at=recorded_at)
        )

    async def get_history(self, date_key: str) -> List[Dict[str, Any]]:
        """활성 이용자 전원과 해당 날짜의 기록(없으면 None)을 함께 조회합니다."""
        residents: List[Resident] = await self.repository.list_active_residents()
        records = await asyncio.gather(
            *(self.repository.get_daily_record(resident.resident_id, date_key) for resident in residents)
        )
        return [
            {
                'resident': resident,
                'record': record,
                'hydration_total_ml': daily_hydration_total(record),
            }
            for resident, record in zip(residents, records)
        ]


def daily_hydration_total(record: Optional[DailyRecord]) -> int:
    """하루 수분 섭취량 합계(ml). 기록이 없으면 0."""
    if record is None:
        return 0
    return sum(entry.get('amount') or 0 for entry in record.hydrations)
