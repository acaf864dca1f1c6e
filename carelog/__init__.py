# carelog/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import inspect
import logging
from functools import wraps
from typing import Any, Dict, Optional
from flask import Flask, jsonify
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

# - 설정
from carelog.core.config import config_by_name
from carelog.core.environment import Environment, DemoModeOnlyError

# - API 블루프린트
from carelog.api.auth.routes import auth_bp
from carelog.api.users.routes import users_bp
from carelog.api.residents.routes import residents_bp
from carelog.api.records.routes import records_bp
from carelog.api.demo.routes import demo_bp, demo_cli

# - 서비스 모듈
from carelog.services import firestore_service
from carelog.services.firestore_service import STORE_FACTORY_KEY, StoreFactory
from carelog.services.record_repository import RecordRepository
from carelog.services.bulk_dispatcher import BulkOperationDispatcher
from carelog.api.auth.services import AuthService
from carelog.api.residents.services import ResidentService
from carelog.api.records.services import DailyRecordService
from carelog.api.demo.services import DemoService


class CarelogFlask(Flask):
    """async 뷰가 끝나면 같은 이벤트 루프 안에서 요청 Firestore 클라이언트를 닫는 Flask."""

    def ensure_sync(self, func):
        if not inspect.iscoroutinefunction(func):
            return func

        @wraps(func)
        async def run_and_close(*args, **kwargs):
            return await firestore_service.closing_request_client(func(*args, **kwargs))

        return self.async_to_sync(run_and_close)


def create_app(config_name: Optional[str] = None, store_factory: Optional[StoreFactory] = None,
               config_overrides: Optional[Dict[str, Any]] = None):
    """
    Flask 애플리케이션 팩토리 함수.

    store_factory: 요청마다 Firestore(호환) 클라이언트를 만들어 주는 함수.
    생략하면 서비스 계정 키로 Firebase를 초기화하고 AsyncClient를 사용합니다.
    config_overrides: 설정 클래스 값을 덮어쓸 항목 (예: 테스트에서 APP_MODE 전환)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = CarelogFlask(__name__)
    app.config.from_object(config_by_name[config_name])
    if config_overrides:
        app.config.update(config_overrides)
    app.json.ensure_ascii = False

    # 실행 모드는 여기서 한 번만 결정되어 모든 서비스에 주입됩니다.
    app.environment = Environment.from_config(app.config)

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    if store_factory is None:
        firestore_service.init_firebase(app)
        store_factory = firestore_service.open_async_client
    app.extensions[STORE_FACTORY_KEY] = store_factory
    app.teardown_appcontext(firestore_service.discard_request_client)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 저장소
    repository = RecordRepository(firestore_service.request_client, app.environment)
    app.services['repository'] = repository
    app.services['bulk_dispatcher'] = BulkOperationDispatcher(repository)

    # 5-2. 도메인 서비스
    app.services['auth'] = AuthService(repository, app.environment)
    app.services['residents'] = ResidentService(repository, summary_days=app.config['SUMMARY_DAYS'])
    app.services['daily_records'] = DailyRecordService(repository, app.services['bulk_dispatcher'])
    app.services['demo'] = DemoService(repository, app.environment, seed_days=app.config['SEED_DAYS'])

    # =====================================================================================
    # 6. 블루프린트 및 CLI 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(residents_bp, url_prefix='/api/residents')
    app.register_blueprint(records_bp, url_prefix='/api')
    app.register_blueprint(demo_bp, url_prefix='/api/demo')
    app.cli.add_command(demo_cli)

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(DemoModeOnlyError)
    def handle_demo_mode_only(err):
        return jsonify({"error_code": "DEMO_MODE_ONLY", "message": str(err)}), 403

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 404/405 등 HTTP 예외는 그대로 응답
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment (mode: {app.environment.mode.value}).")

    return app
