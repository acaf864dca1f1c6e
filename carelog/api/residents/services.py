# carelog/api/residents/services.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from carelog.models.daily_record import DailyRecord, LIST_FIELDS
from carelog.models.resident import Resident
from carelog.services.record_repository import RecordRepository
from carelog.utils.datetime_utils import DateTimeUtils


class ResidentNotFoundError(LookupError):
    pass


class ResidentService:
    """이용자 등록/조회/수정/논리 삭제와 상세 화면 요약을 담당하는 서비스 클래스."""
    def __init__(self, repository: RecordRepository, summary_days: int = 7):
        self.repository = repository
        self.summary_days = summary_days
        logging.info("ResidentService initialized.")

    async def list_active(self) -> List[Resident]:
        return await self.repository.list_active_residents()

    async def get(self, resident_id: str) -> Resident:
        resident = await self.repository.get_resident(resident_id)
        if resident is None:
            raise ResidentNotFoundError(f"이용자를 찾을 수 없습니다: {resident_id}")
        return resident

    async def create(self, data: Dict[str, Any]) -> Resident:
        resident_id = await self.repository.create_resident(data)
        return await self.get(resident_id)

    async def update(self, resident_id: str, data: Dict[str, Any]) -> Resident:
        """존재하는 이용자만 수정합니다. 빈 요청이면 현재 값을 그대로 돌려줍니다."""
        resident = await self.get(resident_id)
        if not data:
            return resident
        await self.repository.update_resident(resident_id, data)
        return await self.get(resident_id)

    async def soft_delete(self, resident_id: str) -> None:
        await self.get(resident_id)
        await self.repository.soft_delete_resident(resident_id)

    async def get_summary(self, resident_id: str, days: Optional[int] = None) -> Dict[str, Any]:
        """최근 N일의 기록과 바이탈 추이, 기록 건수 요약."""
        resident = await self.get(resident_id)
        date_keys = DateTimeUtils.recent_date_keys(days or self.summary_days)
        records = await self.repository.list_daily_records(resident_id, date_keys)
        return {
            'resident': resident,
            'dates': date_keys,
            'records': records,
            'vital_trend': vital_trend_summary(records),
            'counts': records_summary(records),
        }


# =====================================================================================
# 요약 계산
# =====================================================================================
VITAL_METRICS = ('temperature', 'pulse', 'spo2')

def _stats(values: List[float]) -> Dict[str, Any]:
    if not values:
        return {'avg': None, 'min': None, 'max': None, 'count': 0}
    return {
        'avg': round(sum(values) / len(values), 1),
        'min': min(values),
        'max': max(values),
        'count': len(values),
    }

def vital_trend_summary(records: Iterable[DailyRecord]) -> Dict[str, Any]:
    """주어진 기록들의 모든 바이탈 항목에 대한 평균/최소/최대/건수."""
    vitals = [vital for record in records for vital in record.vitals]
    summary = {
        metric: _stats([v[metric] for v in vitals if v.get(metric) is not None])
        for metric in VITAL_METRICS
    }
    pressures = [
        (v['blood_pressure_high'], v['blood_pressure_low'])
        for v in vitals
        if v.get('blood_pressure_high') is not None and v.get('blood_pressure_low') is not None
    ]
    summary['blood_pressure'] = {
        'avg_high': round(sum(p[0] for p in pressures) / len(pressures)) if pressures else None,
        'avg_low': round(sum(p[1] for p in pressures) / len(pressures)) if pressures else None,
        'count': len(pressures),
    }
    return summary

def records_summary(records: Iterable[DailyRecord]) -> Dict[str, int]:
    """종류별 기록 건수와 수분 섭취 합계(ml)."""
    records = list(records)
    counts = {kind: sum(len(getattr(record, kind)) for record in records) for kind in LIST_FIELDS}
    counts['hydration_total_ml'] = sum(
        entry.get('amount') or 0 for record in records for entry in record.hydrations
    )
    return counts
