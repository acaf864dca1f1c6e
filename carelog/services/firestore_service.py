# carelog/services/firestore_service.py
"""
Firestore 연결 관리.

Flask의 async 뷰는 요청마다 별도의 이벤트 루프에서 실행되므로,
AsyncClient는 요청 단위로 새로 열어 flask.g에 보관하고 해당 요청 안에서만 재사용합니다.
클라이언트의 gRPC 채널도 같은 이벤트 루프가 살아 있는 동안 닫아야 하므로
closing_request_client로 뷰와 CLI 코루틴을 감쌉니다.
"""
import os
import logging
from typing import Any, Awaitable, Callable, TypeVar

import firebase_admin
from firebase_admin import credentials
from flask import Flask, current_app, g
from google.cloud import firestore

STORE_FACTORY_KEY = 'carelog.store_factory'

StoreFactory = Callable[[], Any]

T = TypeVar('T')


def init_firebase(app: Flask) -> None:
    """서비스 계정 키로 기본 Firebase 앱을 초기화합니다 (프로세스당 1회)."""
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    cred = credentials.Certificate(cred_path)
    options = {}
    if app.config.get('FIREBASE_PROJECT_ID'):
        options['projectId'] = app.config['FIREBASE_PROJECT_ID']
    firebase_admin.initialize_app(cred, options)
    logging.info("Firebase app initialized.")


def open_async_client() -> firestore.AsyncClient:
    """초기화된 Firebase 앱의 자격 증명으로 Firestore AsyncClient를 엽니다."""
    fb_app = firebase_admin.get_app()
    return firestore.AsyncClient(
        project=fb_app.project_id,
        credentials=fb_app.credential.get_credential()
    )


def request_client() -> Any:
    """현재 요청에서 사용할 Firestore 클라이언트 (요청당 1개)."""
    if 'firestore_client' not in g:
        store_factory: StoreFactory = current_app.extensions[STORE_FACTORY_KEY]
        g.firestore_client = store_factory()
    return g.firestore_client


async def close_client(client: Any) -> None:
    """클라이언트의 채널을 닫습니다. 현재 이벤트 루프 안에서 호출해야 합니다."""
    close = getattr(client, 'close', None)
    if close is not None:
        await close()
        return
    # AsyncClient에는 공개 close()가 없어, 한 번이라도 열린 GAPIC 트랜스포트를 직접 닫음
    api = getattr(client, '_firestore_api_internal', None)
    if api is not None:
        await api.transport.close()


async def close_request_client() -> None:
    """현재 요청에 열린 클라이언트가 있으면 g에서 꺼내 닫습니다."""
    client = g.pop('firestore_client', None)
    if client is not None:
        await close_client(client)


async def closing_request_client(awaitable: Awaitable[T]) -> T:
    """awaitable을 실행한 뒤, 성공/실패와 관계없이 요청 클라이언트를 닫습니다."""
    try:
        return await awaitable
    finally:
        await close_request_client()


def discard_request_client(exc=None) -> None:
    """teardown_appcontext 훅: 닫히지 않고 남은 클라이언트를 버리고 경고를 남깁니다."""
    if g.pop('firestore_client', None) is not None:
        logging.warning("Firestore client left open at app context teardown, dropping it without close.")
