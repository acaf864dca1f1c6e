# carelog/api/auth/routes.py

import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity,
)
from firebase_admin import auth as firebase_auth
from marshmallow import ValidationError

from carelog.api.auth.schemas import IdTokenLoginSchema
from carelog.api.users.schemas import UserResponseSchema
from carelog.core.environment import DemoModeOnlyError

auth_bp = Blueprint('auth_bp', __name__)

def _token_response(user):
    identity = user.user_id
    return jsonify({
        "access_token": create_access_token(identity=identity),
        "refresh_token": create_refresh_token(identity=identity),
        "user_id": user.user_id,
        "user_info": UserResponseSchema().dump(user.to_dict()),
    }), 200


@auth_bp.route('/guest', methods=['POST'])
async def guest_login():
    """데모 모드 게스트 로그인. 게스트 사용자가 없으면 만들어 둡니다."""
    auth_service = current_app.services['auth']
    try:
        user = await auth_service.ensure_guest_user()
        return _token_response(user)
    except DemoModeOnlyError as e:
        return jsonify({"error_code": "DEMO_MODE_ONLY", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Guest login error: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


@auth_bp.route('/login', methods=['POST'])
async def login():
    """Firebase Auth ID 토큰으로 로그인합니다."""
    auth_service = current_app.services['auth']
    try:
        validated_data = IdTokenLoginSchema().load(request.get_json(silent=True))
        user = await auth_service.login_with_id_token(validated_data['id_token'])
        return _token_response(user)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except (firebase_auth.InvalidIdTokenError, ValueError) as e:
        logging.warning(f"ID token rejected: {e}")
        return jsonify({"error_code": "INVALID_ID_TOKEN", "message": "유효하지 않은 인증 토큰입니다."}), 401
    except PermissionError as e:
        return jsonify({"error_code": "USER_INACTIVE", "message": str(e)}), 403
    except Exception as e:
        logging.error(f"Login error: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True) # Refresh Token만 허용
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다."""
    current_user_id = get_jwt_identity()
    new_access_token = create_access_token(identity=current_user_id)
    return jsonify(access_token=new_access_token), 200
