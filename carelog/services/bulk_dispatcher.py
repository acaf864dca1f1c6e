# carelog/services/bulk_dispatcher.py
import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Union

from carelog.models.daily_record import CareEntry, EntryKind, parse_entry_kind
from carelog.services.record_repository import RecordRepository


class BulkTarget(NamedTuple):
    resident_id: str
    date: str
    partial: Dict[str, Any]


class BulkOperationDispatcher:
    """
    여러 (이용자, 날짜)에 대한 일일 기록 저장을 동시에 실행합니다.

    동시 실행 수 제한, 배치, 롤백, 멱등성 토큰은 없습니다.
    하나라도 실패하면 전체 호출이 실패하지만, 이미 끝난 저장은 그대로 남습니다.
    """
    def __init__(self, repository: RecordRepository):
        self.repository = repository

    async def dispatch(self, targets: Iterable[BulkTarget]) -> int:
        """
        대상마다 save_daily_record를 한 번씩 동시에 호출하고 전부 끝날 때까지 기다립니다.
        실패가 있으면 가장 먼저 발생한 예외를 그대로 다시 던집니다.
        진행 중인 저장이 중간에 취소되지 않도록 모든 호출이 끝난 뒤에 실패를 알립니다.
        """
        targets = [BulkTarget(*target) for target in targets]
        # 실패는 발생한 순서대로 쌓임
        failures: List[Exception] = []

        async def save(target: BulkTarget) -> None:
            try:
                await self.repository.save_daily_record(target.resident_id, target.date, target.partial)
            except Exception as e:
                logging.warning(f"Bulk save failed for resident {target.resident_id} on {target.date}: {e}")
                failures.append(e)

        await asyncio.gather(*(save(target) for target in targets))
        if failures:
            logging.warning(f"Bulk save finished with {len(failures)}/{len(targets)} failed targets.")
            raise failures[0]
        logging.info(f"Bulk save completed for {len(targets)} targets.")
        return len(targets)

    async def append_to_many(self, resident_ids: Iterable[str], date_key: str,
                             kind: Union[str, EntryKind],
                             entry_factory: Callable[[str], CareEntry]) -> List[CareEntry]:
        """
        여러 이용자의 같은 날짜 기록에 항목을 하나씩 추가합니다.
        각 이용자의 현재 리스트를 먼저 읽어 새 항목을 합친 전체 리스트로 저장하므로
        기존 항목이 사라지지 않습니다.
        """
        kind = parse_entry_kind(kind)
        resident_ids = list(resident_ids)
        current = await asyncio.gather(
            *(self.repository.get_daily_record(resident_id, date_key) for resident_id in resident_ids)
        )
        targets = []
        created = []
        for resident_id, record in zip(resident_ids, current):
            entry = entry_factory(resident_id)
            existing = record.entries(kind) if record else []
            targets.append(BulkTarget(resident_id, date_key, {kind.value: existing + [entry.to_dict()]}))
            created.append(entry)
        await self.dispatch(targets)
        return created
