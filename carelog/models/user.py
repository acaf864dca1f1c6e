# carelog/models/user.py
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from carelog.utils.datetime_utils import DateTimeUtils

# 데모 모드에서 모든 기록의 작성자가 되는 게스트 사용자 ID
DEMO_GUEST_UID = 'demo-guest-user'

class UserRole(Enum):
    ADMIN = "admin"
    STAFF = "staff"

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID는 Firebase Auth uid 등 외부에서 주어진 값을 그대로 사용합니다.
    """
    user_id: str
    email: str
    name: str
    role: UserRole = UserRole.STAFF
    is_active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, user_id: str, data: Dict[str, Any]) -> "User":
        processed = DateTimeUtils.from_firestore(dict(data))
        role = processed.get('role', UserRole.STAFF.value)
        try:
            role = UserRole(role)
        except ValueError:
            logging.warning(f"Invalid role '{role}' for user {user_id}. Defaulting to STAFF.")
            role = UserRole.STAFF
        return cls(
            user_id=user_id,
            email=processed.get('email', ''),
            name=processed.get('name', ''),
            role=role,
            is_active=processed.get('is_active', True),
            created_at=processed.get('created_at'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'email': self.email,
            'name': self.name,
            'role': self.role.value,
            'is_active': self.is_active,
            'created_at': self.created_at,
        }


def demo_guest_user() -> User:
    """데모용 게스트 사용자."""
    return User(
        user_id=DEMO_GUEST_UID,
        email='guest@demo.example.com',
        name='ゲストユーザー',
        role=UserRole.STAFF,
        is_active=True,
    )
