# carelog/api/records/routes.py
import logging

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from carelog.api.records.schemas import (
    DailyRecordPartialSchema,
    dump_record,
    BulkAppendSchema,
    HistoryQuerySchema,
    load_entry_input,
)
from carelog.api.records.services import AppendEntry, RemoveEntry, EntryNotFoundError
from carelog.api.residents.schemas import ResidentResponseSchema
from carelog.models.daily_record import parse_entry_kind, LIST_FIELDS
from carelog.utils.datetime_utils import DateTimeUtils

records_bp = Blueprint('records_bp', __name__)

# 입력 화면에서 사용하는 선택지
RECORD_OPTIONS = {
    'meal_amounts': [
        {'value': 100, 'label': '全量'},
        {'value': 80, 'label': '8割'},
        {'value': 50, 'label': '半量'},
        {'value': 30, 'label': '3割'},
        {'value': 0, 'label': '未摂取'},
    ],
    'excretion_amounts': [
        {'value': 'small', 'label': '少'},
        {'value': 'medium', 'label': '中'},
        {'value': 'large', 'label': '多'},
    ],
    'feces_conditions': [
        {'value': 'hard', 'label': '硬い'},
        {'value': 'normal', 'label': '普通'},
        {'value': 'soft', 'label': '軟便'},
        {'value': 'watery', 'label': '水様'},
    ],
    'hydration_amounts': [
        {'value': amount, 'label': f'{amount}ml'} for amount in (50, 100, 150, 200, 250)
    ],
}


def _invalid_date(date_key: str):
    if DateTimeUtils.is_date_key(date_key):
        return None
    return jsonify({"error_code": "INVALID_DATE_FORMAT", "message": "날짜 형식이 올바르지 않습니다 (YYYY-MM-DD)."}), 400

def _invalid_kind(kind: str):
    if kind in LIST_FIELDS:
        return None
    return jsonify({
        "error_code": "INVALID_RECORD_TYPE",
        "message": f"유효하지 않은 기록 타입입니다. 가능한 타입: {', '.join(LIST_FIELDS)}"
    }), 400


@records_bp.route('/residents/<string:resident_id>/records/<string:date_key>', methods=['GET'])
@jwt_required()
async def get_daily_record(resident_id: str, date_key: str):
    """특정 이용자의 하루 기록 조회. 아직 기록이 없으면 record: null."""
    invalid = _invalid_date(date_key)
    if invalid:
        return invalid
    service = current_app.services['daily_records']
    try:
        record = await service.get_daily_record(resident_id, date_key)
        return jsonify({"record": dump_record(record)}), 200
    except Exception as e:
        logging.error(f"Daily record fetch API error ({resident_id}/{date_key}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "기록 조회 중 오류가 발생했습니다."}), 500


@records_bp.route('/residents/<string:resident_id>/records/<string:date_key>', methods=['PUT'])
@jwt_required()
async def save_daily_record(resident_id: str, date_key: str):
    """
    부분 업데이트 저장. 본문에 포함된 리스트 필드는 통째로 교체됩니다.
    항목 하나만 추가/삭제하려면 POST/DELETE 엔드포인트를 사용하세요.
    """
    invalid = _invalid_date(date_key)
    if invalid:
        return invalid
    service = current_app.services['daily_records']
    try:
        partial = DailyRecordPartialSchema().load(request.get_json(silent=True))
        record = await service.save_partial(resident_id, date_key, partial)
        return jsonify({"record": dump_record(record)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Daily record save API error ({resident_id}/{date_key}): {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "기록 저장 중 오류가 발생했습니다."}), 500


@records_bp.route('/residents/<string:resident_id>/records/<string:date_key>/<string:kind>', methods=['POST'])
@jwt_required()
async def append_entry(resident_id: str, date_key: str, kind: str):
    """하루 기록에 항목 하나를 추가합니다. 기존 항목은 유지됩니다."""
    invalid = _invalid_date(date_key) or _invalid_kind(kind)
    if invalid:
        return invalid
    service = current_app.services['daily_records']
    user_id = get_jwt_identity()
    try:
        entry_kind = parse_entry_kind(kind)
        values = load_entry_input(entry_kind, request.get_json(silent=True))
        entry = service.new_entry(entry_kind, values, recorded_by=user_id)
        record = await service.apply(resident_id, date_key, AppendEntry(entry_kind, entry))
        return jsonify({"entry": DateTimeUtils.to_json_safe(entry.to_dict()), "record": dump_record(record)}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Entry append API error ({resident_id}/{date_key}/{kind}): {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "기록 저장 중 오류가 발생했습니다."}), 500


@records_bp.route('/residents/<string:resident_id>/records/<string:date_key>/<string:kind>/<string:entry_id>', methods=['DELETE'])
@jwt_required()
async def remove_entry(resident_id: str, date_key: str, kind: str, entry_id: str):
    """하루 기록에서 항목 하나를 id로 삭제합니다."""
    invalid = _invalid_date(date_key) or _invalid_kind(kind)
    if invalid:
        return invalid
    service = current_app.services['daily_records']
    try:
        record = await service.apply(resident_id, date_key, RemoveEntry(parse_entry_kind(kind), entry_id))
        return jsonify({"record": dump_record(record)}), 200
    except EntryNotFoundError as e:
        return jsonify({"error_code": "ENTRY_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"Entry remove API error ({resident_id}/{date_key}/{kind}/{entry_id}): {e}", exc_info=True)
        return jsonify({"error_code": "SAVE_FAILED", "message": "기록 삭제 중 오류가 발생했습니다."}), 500


@records_bp.route('/records/bulk', methods=['POST'])
@jwt_required()
async def bulk_append():
    """
    선택한 여러 이용자에게 같은 항목을 한 번에 기록합니다.
    일부 이용자의 저장이 실패해도 이미 저장된 이용자의 기록은 되돌리지 않습니다.
    """
    service = current_app.services['daily_records']
    user_id = get_jwt_identity()
    try:
        data = BulkAppendSchema().load(request.get_json(silent=True))
        date_key = data.get('date') or DateTimeUtils.today_key()
        entries = await service.append_to_many(
            data['resident_ids'], date_key, data['kind'], data['entry'], recorded_by=user_id
        )
        return jsonify({"date": date_key, "kind": data['kind'].value, "saved_count": len(entries)}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Bulk record API error: {e}", exc_info=True)
        return jsonify({"error_code": "BULK_SAVE_FAILED", "message": "일괄 기록 저장 중 오류가 발생했습니다."}), 500


@records_bp.route('/records/history', methods=['GET'])
@jwt_required()
async def get_history():
    """날짜별 기록 이력: 활성 이용자 전원과 그날의 기록."""
    service = current_app.services['daily_records']
    try:
        params = HistoryQuerySchema().load(request.args)
        date_key = params.get('date') or DateTimeUtils.today_key()
        rows = await service.get_history(date_key)
        return jsonify({
            "date": date_key,
            "previous_date": DateTimeUtils.shift_date_key(date_key, -1),
            "next_date": DateTimeUtils.shift_date_key(date_key, 1),
            "items": [
                {
                    "resident": ResidentResponseSchema().dump(row['resident'].to_dict()),
                    "record": dump_record(row['record']),
                    "hydration_total_ml": row['hydration_total_ml'],
                }
                for row in rows
            ]
        }), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"History API error: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "기록 이력 조회 중 오류가 발생했습니다."}), 500


@records_bp.route('/records/options', methods=['GET'])
@jwt_required()
def get_record_options():
    """입력 화면 선택지 목록."""
    return jsonify(RECORD_OPTIONS), 200
