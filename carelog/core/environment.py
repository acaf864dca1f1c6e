# carelog/core/environment.py
"""
실행 모드(demo / production)와 컬렉션 네임스페이스를 결정하는 모듈.

같은 Firestore 인스턴스를 데모와 운영이 함께 쓰기 때문에, 데모 모드에서는
모든 컬렉션 이름 앞에 'demo_' 접두사를 붙여 데이터를 격리합니다.
모드는 create_app 시점에 한 번만 결정되고, Environment 객체로 각 서비스에 주입됩니다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

DEMO_COLLECTION_PREFIX = 'demo_'


class AppMode(Enum):
    DEMO = "demo"
    PRODUCTION = "production"


def resolve_app_mode(value: Optional[str]) -> AppMode:
    """정확히 'production'일 때만 운영 모드, 그 외(미설정 포함)는 모두 데모 모드."""
    if value == AppMode.PRODUCTION.value:
        return AppMode.PRODUCTION
    return AppMode.DEMO


@dataclass(frozen=True)
class Environment:
    mode: AppMode = AppMode.DEMO

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Environment":
        return cls(mode=resolve_app_mode(config.get('APP_MODE')))

    @property
    def is_demo(self) -> bool:
        return self.mode is AppMode.DEMO

    @property
    def is_production(self) -> bool:
        return self.mode is AppMode.PRODUCTION

    def collection_name(self, base_name: str) -> str:
        """논리 컬렉션 이름을 실제 저장소 컬렉션 이름으로 변환합니다."""
        return f"{DEMO_COLLECTION_PREFIX}{base_name}" if self.is_demo else base_name

    def require_demo(self, operation: str) -> None:
        """데모 전용 작업을 운영 모드에서 호출하면 DemoModeOnlyError."""
        if not self.is_demo:
            raise DemoModeOnlyError(f"'{operation}'은(는) 데모 모드에서만 사용할 수 있습니다.")


class DemoModeOnlyError(RuntimeError):
    """데모 모드 전용 작업을 운영 모드에서 호출한 경우 (호출자 오용)."""
