# carelog/api/users/routes.py
import logging
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from carelog.api.users.schemas import UserResponseSchema

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('/me', methods=['GET'])
@jwt_required()
async def get_me():
    """현재 로그인된 사용자 정보를 조회합니다."""
    repository = current_app.services['repository']
    user_id = get_jwt_identity()
    try:
        user = await repository.get_user(user_id)
        if not user:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        return jsonify(UserResponseSchema().dump(user.to_dict())), 200
    except Exception as e:
        logging.error(f"사용자 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "사용자 조회 중 오류가 발생했습니다."}), 500
