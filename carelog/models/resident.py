# carelog/models/resident.py
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Dict, Any
from enum import Enum
import logging

from carelog.utils.datetime_utils import DateTimeUtils

class Gender(Enum):
    MALE = "male"
    FEMALE = "female"

@dataclass
class Resident:
    """
    Firestore 'residents' 컬렉션 문서 구조.
    시설 이용자의 신상 정보와 케어 플랜 관련 속성을 관리.
    삭제는 is_active=False로 처리하는 논리 삭제만 존재합니다.
    """
    resident_id: str
    name: str
    name_kana: str
    birth_date: date
    gender: Gender
    room_number: str
    care_level: int
    notes: str = ""
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, resident_id: str, data: Dict[str, Any]) -> "Resident":
        """
        Firestore에서 받은 딕셔너리로부터 Resident 인스턴스를 생성합니다.
        문자열로 저장된 Enum 값과 Timestamp로 저장된 생년월일을 변환합니다.
        """
        processed_data = DateTimeUtils.from_firestore(dict(data))
        processed_data.pop('resident_id', None)

        gender_str = processed_data.get('gender')
        if isinstance(gender_str, str):
            try:
                processed_data['gender'] = Gender(gender_str)
            except ValueError:
                logging.warning(f"Invalid gender value '{gender_str}' for resident {resident_id}. Defaulting to MALE.")
                processed_data['gender'] = Gender.MALE

        processed_data['birth_date'] = DateTimeUtils.to_date(processed_data.get('birth_date'))

        if processed_data.get('notes') is None:
            processed_data['notes'] = ""
        for key in ('name', 'name_kana', 'room_number'):
            processed_data.setdefault(key, "")
        processed_data.setdefault('gender', Gender.MALE)
        processed_data.setdefault('care_level', 1)

        known = cls.__dataclass_fields__.keys()
        return cls(resident_id=resident_id, **{k: v for k, v in processed_data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'resident_id': self.resident_id,
            'name': self.name,
            'name_kana': self.name_kana,
            'birth_date': self.birth_date,
            'gender': self.gender.value,
            'room_number': self.room_number,
            'care_level': self.care_level,
            'notes': self.notes,
            'is_active': self.is_active,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }
