# carelog/api/residents/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from carelog.api.records.schemas import dump_record
from carelog.api.residents.schemas import (
    ResidentCreateSchema,
    ResidentUpdateSchema,
    ResidentResponseSchema,
    SummaryQuerySchema,
)
from carelog.api.residents.services import ResidentNotFoundError

residents_bp = Blueprint('residents_bp', __name__)

def _not_found(e):
    return jsonify({"error_code": "RESIDENT_NOT_FOUND", "message": str(e)}), 404


@residents_bp.route('', methods=['GET'])
@jwt_required()
async def list_residents():
    """활성 이용자 목록 (이름순)."""
    resident_service = current_app.services['residents']
    try:
        residents = await resident_service.list_active()
        return jsonify(ResidentResponseSchema(many=True).dump([r.to_dict() for r in residents])), 200
    except Exception as e:
        logging.error(f"Resident list API error: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "이용자 목록 조회 중 오류가 발생했습니다."}), 500


@residents_bp.route('', methods=['POST'])
@jwt_required()
async def create_resident():
    """이용자 등록."""
    resident_service = current_app.services['residents']
    try:
        validated_data = ResidentCreateSchema().load(request.get_json(silent=True))
        resident = await resident_service.create(validated_data)
        return jsonify(ResidentResponseSchema().dump(resident.to_dict())), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Resident create API error: {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "이용자 등록 중 오류가 발생했습니다."}), 500


@residents_bp.route('/<string:resident_id>', methods=['GET'])
@jwt_required()
async def get_resident(resident_id: str):
    """이용자 상세. 논리 삭제된 이용자도 조회됩니다."""
    resident_service = current_app.services['residents']
    try:
        resident = await resident_service.get(resident_id)
        return jsonify(ResidentResponseSchema().dump(resident.to_dict())), 200
    except ResidentNotFoundError as e:
        return _not_found(e)
    except Exception as e:
        logging.error(f"Resident fetch API error (resident_id: {resident_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "이용자 조회 중 오류가 발생했습니다."}), 500


@residents_bp.route('/<string:resident_id>', methods=['PATCH'])
@jwt_required()
async def update_resident(resident_id: str):
    """이용자 정보 부분 수정."""
    resident_service = current_app.services['residents']
    try:
        update_data = ResidentUpdateSchema().load(request.get_json(silent=True))
        resident = await resident_service.update(resident_id, update_data)
        return jsonify(ResidentResponseSchema().dump(resident.to_dict())), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ResidentNotFoundError as e:
        return _not_found(e)
    except Exception as e:
        logging.error(f"Resident update API error (resident_id: {resident_id}): {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "이용자 수정 중 오류가 발생했습니다."}), 500


@residents_bp.route('/<string:resident_id>', methods=['DELETE'])
@jwt_required()
async def delete_resident(resident_id: str):
    """논리 삭제 (is_active=False). 과거 기록은 남습니다."""
    resident_service = current_app.services['residents']
    try:
        await resident_service.soft_delete(resident_id)
        return jsonify({"message": "이용자가 삭제되었습니다.", "resident_id": resident_id}), 200
    except ResidentNotFoundError as e:
        return _not_found(e)
    except Exception as e:
        logging.error(f"Resident delete API error (resident_id: {resident_id}): {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "이용자 삭제 중 오류가 발생했습니다."}), 500


@residents_bp.route('/<string:resident_id>/summary', methods=['GET'])
@jwt_required()
async def get_resident_summary(resident_id: str):
    """최근 N일 기록 요약 (기본 SUMMARY_DAYS일)."""
    resident_service = current_app.services['residents']
    try:
        params = SummaryQuerySchema().load(request.args)
        summary = await resident_service.get_summary(resident_id, params.get('days'))
        return jsonify({
            "resident": ResidentResponseSchema().dump(summary['resident'].to_dict()),
            "dates": summary['dates'],
            "records": [dump_record(record) for record in summary['records']],
            "vital_trend": summary['vital_trend'],
            "counts": summary['counts'],
        }), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ResidentNotFoundError as e:
        return _not_found(e)
    except Exception as e:
        logging.error(f"Resident summary API error (resident_id: {resident_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "요약 조회 중 오류가 발생했습니다."}), 500
