# carelog/api/demo/routes.py
import asyncio
import logging

import click
from flask import Blueprint, jsonify, current_app
from flask.cli import AppGroup
from flask_jwt_extended import jwt_required

from carelog.core.environment import DemoModeOnlyError
from carelog.services.firestore_service import closing_request_client

demo_bp = Blueprint('demo_bp', __name__)

def _demo_only(e):
    return jsonify({"error_code": "DEMO_MODE_ONLY", "message": str(e)}), 403


@demo_bp.route('/status', methods=['GET'])
async def get_demo_status():
    """현재 실행 모드와 데모 데이터 투입 여부."""
    demo_service = current_app.services['demo']
    try:
        return jsonify({
            "mode": current_app.environment.mode.value,
            "is_seeded": await demo_service.is_seeded(),
        }), 200
    except Exception as e:
        logging.error(f"Demo status API error: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "데모 상태 조회 중 오류가 발생했습니다."}), 500


@demo_bp.route('/seed', methods=['POST'])
@jwt_required()
async def seed_demo_data():
    """데모 데이터가 비어 있을 때만 Seed 데이터를 투입합니다."""
    demo_service = current_app.services['demo']
    try:
        if await demo_service.is_seeded():
            return jsonify({"error_code": "ALREADY_SEEDED", "message": "이미 데모 데이터가 있습니다. 초기화를 사용하세요."}), 409
        result = await demo_service.seed()
        return jsonify(result), 201
    except DemoModeOnlyError as e:
        return _demo_only(e)
    except Exception as e:
        logging.error(f"Demo seed API error: {e}", exc_info=True)
        return jsonify({"error_code": "SEED_FAILED", "message": "데모 데이터 투입 중 오류가 발생했습니다."}), 500


@demo_bp.route('/reset', methods=['POST'])
@jwt_required()
async def reset_demo_data():
    """데모 데이터를 모두 지우고 다시 투입합니다."""
    demo_service = current_app.services['demo']
    try:
        result = await demo_service.reset()
        return jsonify(result), 200
    except DemoModeOnlyError as e:
        return _demo_only(e)
    except Exception as e:
        logging.error(f"Demo reset API error: {e}", exc_info=True)
        return jsonify({"error_code": "RESET_FAILED", "message": "데모 데이터 초기화 중 오류가 발생했습니다."}), 500


# =====================================================================================
# CLI: flask demo seed / flask demo reset
# =====================================================================================
demo_cli = AppGroup('demo', help="데모 데이터 관리")

@demo_cli.command('seed')
def seed_command():
    """Seed 데이터를 투입합니다."""
    try:
        result = asyncio.run(closing_request_client(current_app.services['demo'].seed()))
    except DemoModeOnlyError as e:
        raise click.ClickException(str(e))
    click.echo(f"Seed 완료: 이용자 {result['residents_count']}명, 기록 {result['records_count']}건")

@demo_cli.command('reset')
def reset_command():
    """데모 데이터를 초기화한 뒤 다시 투입합니다."""
    try:
        result = asyncio.run(closing_request_client(current_app.services['demo'].reset()))
    except DemoModeOnlyError as e:
        raise click.ClickException(str(e))
    click.echo(
        f"초기화 완료: 이용자 {result['deleted_residents']}명/기록 {result['deleted_records']}건 삭제, "
        f"이용자 {result['residents_count']}명/기록 {result['records_count']}건 투입"
    )
