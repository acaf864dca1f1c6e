# carelog/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간/날짜 처리를 위한 중앙화된 유틸리티 모듈

이 모듈의 목적:
1. Firestore Timestamp <-> Python date/datetime 변환 표준화
2. 일일 기록 문서 키(YYYY-MM-DD)와 시각 문자열(HH:mm) 처리 통일
3. Timezone 처리 일관성 확보 (백엔드는 UTC로 통일)
"""

import logging
import re
from enum import Enum
from datetime import datetime, date, timezone, time, timedelta
from typing import Union, Optional, Any, List
from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

DATE_KEY_FORMAT = '%Y-%m-%d'
DATE_KEY_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_OF_DAY_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def today() -> date:
        """오늘 날짜(UTC)를 반환"""
        return datetime.now(timezone.utc).date()

    @staticmethod
    def today_key() -> str:
        """오늘 날짜의 일일 기록 키(YYYY-MM-DD)"""
        return DateTimeUtils.to_date_key(DateTimeUtils.today())

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            # timezone-naive인 경우 UTC로 가정
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime parse failed: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def parse_date_key(date_key: str) -> date:
        """
        일일 기록 키(YYYY-MM-DD)를 date 객체로 파싱합니다.
        문서 키로 쓰이므로 다른 포맷은 허용하지 않습니다.
        """
        if not isinstance(date_key, str) or not DATE_KEY_PATTERN.match(date_key):
            raise ValueError(f"날짜는 YYYY-MM-DD 형식이어야 합니다: {date_key}")
        try:
            return datetime.strptime(date_key, DATE_KEY_FORMAT).date()
        except ValueError:
            raise ValueError(f"존재하지 않는 날짜입니다: {date_key}")

    @staticmethod
    def is_date_key(value: Any) -> bool:
        try:
            DateTimeUtils.parse_date_key(value)
            return True
        except ValueError:
            return False

    @staticmethod
    def is_time_of_day(value: Any) -> bool:
        """HH:mm 형식의 시각 문자열인지 확인"""
        return isinstance(value, str) and bool(TIME_OF_DAY_PATTERN.match(value))

    @staticmethod
    def to_date_key(d: Union[date, datetime]) -> str:
        """date 객체를 YYYY-MM-DD 형식 문자열로 변환"""
        if isinstance(d, datetime):
            d = d.astimezone(timezone.utc).date() if d.tzinfo else d.date()
        return d.strftime(DATE_KEY_FORMAT)

    @staticmethod
    def to_time_of_day(dt: datetime) -> str:
        """datetime 객체를 HH:mm 형식 문자열로 변환"""
        return dt.strftime('%H:%M')

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 ISO 포맷 문자열로 변환 (Z 접미사 포함)"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def at_time_of_day(date_key: str, time_of_day: str) -> datetime:
        """'2024-03-15' + '06:00' -> 2024-03-15T06:00:00Z"""
        d = DateTimeUtils.parse_date_key(date_key)
        hours, minutes = (int(part) for part in time_of_day.split(':'))
        return datetime.combine(d, time(hours, minutes), tzinfo=timezone.utc)

    @staticmethod
    def recent_date_keys(days: int = 7, today: Optional[date] = None) -> List[str]:
        """오늘부터 과거 N일치의 날짜 키 목록 (최신순)"""
        base = today or DateTimeUtils.today()
        return [DateTimeUtils.to_date_key(base - timedelta(days=i)) for i in range(days)]

    @staticmethod
    def shift_date_key(date_key: str, days: int) -> str:
        """날짜 키를 N일 이동"""
        return DateTimeUtils.to_date_key(DateTimeUtils.parse_date_key(date_key) + timedelta(days=days))

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - Enum -> value
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, Enum):
            # Enum 멤버는 문자열 값으로 저장
            return obj.value

        elif isinstance(obj, date) and not isinstance(obj, datetime):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)

        elif isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)

        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}

        elif isinstance(obj, (list, tuple)):
            return [DateTimeUtils.for_firestore(item) for item in obj]

        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 적절히 변환

        변환 규칙:
        - Firestore timestamp -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        try:
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=timezone.utc)
                return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)

            elif hasattr(obj, 'timestamp') and callable(obj.timestamp):
                return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)

            elif isinstance(obj, dict):
                return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}

            elif isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]

            return obj

        except Exception as e:
            logger.error(f"Firestore read conversion failed: {obj} ({type(obj)}) - {e}")
            # 변환 실패 시 원본 객체 반환 (로그만 남김)
            return obj

    @staticmethod
    def to_json_safe(obj: Any) -> Any:
        """
        API 응답용 변환: datetime -> ISO 문자열(Z), date -> YYYY-MM-DD, Enum -> value.
        리스트 항목 안의 recorded_at 같은 중첩 필드까지 재귀적으로 변환합니다.
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.to_iso_string(obj)
        elif isinstance(obj, date):
            return DateTimeUtils.to_date_key(obj)
        elif isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.to_json_safe(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [DateTimeUtils.to_json_safe(item) for item in obj]
        return obj

    @staticmethod
    def to_date(value: Any) -> Optional[date]:
        """
        Firestore Timestamp / datetime / 문자열을 date로 변환합니다.
        생년월일처럼 날짜만 의미가 있는 필드에 사용합니다.
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(timezone.utc)
            return value.date()
        if isinstance(value, date):
            return value
        if hasattr(value, 'timestamp') and callable(value.timestamp):
            return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc).date()
        if isinstance(value, str):
            return dateutil_parser.parse(value).date()
        raise ValueError(f"date로 변환할 수 없는 값입니다: {value!r}")

    @staticmethod
    def calculate_age(birth_date: Union[date, datetime], on: Optional[date] = None) -> int:
        """생년월일로부터 만 나이를 계산"""
        if isinstance(birth_date, datetime):
            birth_date = birth_date.date()
        return max(0, relativedelta(on or DateTimeUtils.today(), birth_date).years)


# 편의를 위한 글로벌 함수들
def now() -> datetime:
    """현재 UTC 시간 반환"""
    return DateTimeUtils.now()

def today_key() -> str:
    """오늘 날짜 키 반환"""
    return DateTimeUtils.today_key()

def for_firestore(obj: Any) -> Any:
    """Firestore 저장용 변환"""
    return DateTimeUtils.for_firestore(obj)

def from_firestore(obj: Any) -> Any:
    """Firestore 읽기용 변환"""
    return DateTimeUtils.from_firestore(obj)
