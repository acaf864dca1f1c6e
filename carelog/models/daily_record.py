# carelog/models/daily_record.py
import uuid
from dataclasses import dataclass, field, asdict, fields as dataclass_fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from carelog.utils.datetime_utils import DateTimeUtils


class EntryKind(Enum):
    """일일 기록 문서 안의 리스트 필드 종류."""
    VITALS = "vitals"
    EXCRETIONS = "excretions"
    MEALS = "meals"
    HYDRATIONS = "hydrations"

LIST_FIELDS = tuple(kind.value for kind in EntryKind)

class ExcretionType(Enum):
    URINE = "urine"
    FECES = "feces"
    BOTH = "both"

class ExcretionAmount(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

class FecesCondition(Enum):
    HARD = "hard"
    NORMAL = "normal"
    SOFT = "soft"
    WATERY = "watery"

class MealType(Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass
class CareEntry:
    """리스트 필드의 원소가 되는 개별 기록의 공통 필드."""
    id: str
    recorded_by: str
    recorded_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """값이 없는 선택 필드는 제외하고, Enum은 문자열 값으로 변환합니다."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        return DateTimeUtils.for_firestore(data)

@dataclass
class Vital(CareEntry):
    time: str = ""  # HH:mm
    temperature: Optional[float] = None
    blood_pressure_high: Optional[int] = None
    blood_pressure_low: Optional[int] = None
    pulse: Optional[int] = None
    spo2: Optional[int] = None
    note: Optional[str] = None

@dataclass
class Excretion(CareEntry):
    time: str = ""
    type: ExcretionType = ExcretionType.URINE
    urine_amount: Optional[ExcretionAmount] = None
    feces_amount: Optional[ExcretionAmount] = None
    feces_condition: Optional[FecesCondition] = None
    has_incontinence: bool = False
    note: Optional[str] = None

@dataclass
class Meal(CareEntry):
    meal_type: MealType = MealType.BREAKFAST
    main_dish_amount: int = 0  # 0-100 (%)
    side_dish_amount: int = 0
    soup_amount: Optional[int] = None
    note: Optional[str] = None

@dataclass
class Hydration(CareEntry):
    time: str = ""
    amount: int = 0  # ml
    drink_type: Optional[str] = None
    note: Optional[str] = None

ENTRY_TYPES: Dict[EntryKind, Type[CareEntry]] = {
    EntryKind.VITALS: Vital,
    EntryKind.EXCRETIONS: Excretion,
    EntryKind.MEALS: Meal,
    EntryKind.HYDRATIONS: Hydration,
}


def parse_entry_kind(value: Union[str, EntryKind]) -> EntryKind:
    if isinstance(value, EntryKind):
        return value
    try:
        return EntryKind(value)
    except ValueError:
        raise ValueError(f"알 수 없는 기록 종류입니다: {value} (가능한 값: {', '.join(LIST_FIELDS)})")


def build_entry(kind: Union[str, EntryKind], values: Dict[str, Any], recorded_by: str,
                recorded_at: Optional[datetime] = None) -> CareEntry:
    """
    새 기록 항목을 생성합니다. id는 UUID4로 발급하고,
    recorded_at이 없으면 현재 시각, time이 없으면 recorded_at의 HH:mm을 사용합니다.
    """
    entry_type = ENTRY_TYPES[parse_entry_kind(kind)]
    allowed = {f.name for f in dataclass_fields(entry_type)} - {'id', 'recorded_by', 'recorded_at'}
    recorded_at = recorded_at or values.get('recorded_at') or DateTimeUtils.now()
    payload = {k: v for k, v in values.items() if k in allowed}
    if 'time' in allowed and not payload.get('time'):
        payload['time'] = DateTimeUtils.to_time_of_day(recorded_at)
    return entry_type(
        id=str(uuid.uuid4()),
        recorded_by=recorded_by,
        recorded_at=recorded_at,
        **payload
    )


@dataclass
class DailyRecord:
    """
    Firestore 'records/{resident_id}/daily/{date}' 문서 구조.
    이용자 1명 x 날짜 1일 당 하나의 문서이며, 네 종류의 기록을 리스트로 보관합니다.
    리스트 원소는 저장된 형태(dict) 그대로 유지합니다.
    """
    record_id: str
    resident_id: str
    date: str  # YYYY-MM-DD
    vitals: List[Dict[str, Any]] = field(default_factory=list)
    excretions: List[Dict[str, Any]] = field(default_factory=list)
    meals: List[Dict[str, Any]] = field(default_factory=list)
    hydrations: List[Dict[str, Any]] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, record_id: str, data: Dict[str, Any]) -> "DailyRecord":
        """Firestore 문서를 DailyRecord로 변환합니다. Timestamp는 중첩된 항목까지 datetime으로 바뀝니다."""
        processed = DateTimeUtils.from_firestore(dict(data))
        known = {f.name for f in dataclass_fields(cls)} - {'record_id', 'extra'}
        values = {k: processed.get(k) for k in known if k in processed}
        for list_field in LIST_FIELDS:
            if values.get(list_field) is None:
                values[list_field] = []
        values.setdefault('resident_id', '')
        values.setdefault('date', record_id)
        extra = {k: v for k, v in processed.items() if k not in known and k != 'record_id'}
        return cls(record_id=record_id, extra=extra, **values)

    def entries(self, kind: Union[str, EntryKind]) -> List[Dict[str, Any]]:
        return list(getattr(self, parse_entry_kind(kind).value))

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'record_id': self.record_id,
            'resident_id': self.resident_id,
            'date': self.date,
            'vitals': self.vitals,
            'excretions': self.excretions,
            'meals': self.meals,
            'hydrations': self.hydrations,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }
        data.update(self.extra)
        return data
