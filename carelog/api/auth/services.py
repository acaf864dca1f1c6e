# carelog/api/auth/services.py
import asyncio
import logging

from firebase_admin import auth as firebase_auth

from carelog.core.environment import Environment
from carelog.models.user import User, UserRole, DEMO_GUEST_UID, demo_guest_user
from carelog.services.record_repository import RecordRepository


class AuthService:
    """
    로그인 처리.
    - 데모 모드: 고정 게스트 사용자로 로그인 (없으면 생성)
    - 운영 모드: Firebase Auth ID 토큰을 검증하고 users 문서를 불러옴 (최초 로그인 시 생성)
    """
    def __init__(self, repository: RecordRepository, environment: Environment):
        self.repository = repository
        self.environment = environment

    async def ensure_guest_user(self) -> User:
        self.environment.require_demo('guest login')
        user = await self.repository.get_user(DEMO_GUEST_UID)
        if user:
            return user
        guest = demo_guest_user()
        await self.repository.create_user(guest.user_id, guest.to_dict())
        logging.info("Demo guest user created.")
        return await self.repository.get_user(DEMO_GUEST_UID)

    async def login_with_id_token(self, id_token: str) -> User:
        """
        ID 토큰 검증에 실패하면 firebase_admin.auth.InvalidIdTokenError(또는 ValueError)가 그대로 전달됩니다.
        비활성 사용자는 PermissionError.
        """
        # verify_id_token은 공개키를 가져오는 동기 호출이므로 스레드에서 실행
        decoded = await asyncio.to_thread(firebase_auth.verify_id_token, id_token)
        uid = decoded['uid']

        user = await self.repository.get_user(uid)
        if user is None:
            new_user = User(
                user_id=uid,
                email=decoded.get('email', ''),
                name=decoded.get('name') or decoded.get('email', ''),
                role=UserRole.STAFF,
            )
            await self.repository.create_user(uid, new_user.to_dict())
            logging.info(f"User registered on first login ({uid})")
            user = await self.repository.get_user(uid)

        if not user.is_active:
            raise PermissionError("비활성화된 사용자입니다.")
        return user
