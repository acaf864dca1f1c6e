# carelog/api/residents/schemas.py
from marshmallow import Schema, fields, validate, post_load

from carelog.models.resident import Gender
from carelog.utils.datetime_utils import DateTimeUtils

CARE_LEVEL_RANGE = validate.Range(min=1, max=5, error="요개호도는 1~5 사이여야 합니다.")

class ResidentCreateSchema(Schema):
    """POST /api/residents 이용자 등록 요청 스키마."""
    name = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    name_kana = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    birth_date = fields.Date(required=True, format="%Y-%m-%d")
    gender = fields.Str(required=True, validate=validate.OneOf([e.value for e in Gender]))
    room_number = fields.Str(required=True, validate=validate.Length(min=1, max=10))
    care_level = fields.Int(required=True, validate=CARE_LEVEL_RANGE)
    notes = fields.Str(load_default="", validate=validate.Length(max=1000))

    @post_load
    def to_model_values(self, data, **kwargs):
        data['gender'] = Gender(data['gender'])
        data.setdefault('is_active', True)
        return data

class ResidentUpdateSchema(Schema):
    """PATCH /api/residents/<id> 부분 수정 스키마. 포함된 필드만 덮어씁니다."""
    name = fields.Str(validate=validate.Length(min=1, max=50))
    name_kana = fields.Str(validate=validate.Length(min=1, max=100))
    birth_date = fields.Date(format="%Y-%m-%d")
    gender = fields.Str(validate=validate.OneOf([e.value for e in Gender]))
    room_number = fields.Str(validate=validate.Length(min=1, max=10))
    care_level = fields.Int(validate=CARE_LEVEL_RANGE)
    notes = fields.Str(validate=validate.Length(max=1000))

    @post_load
    def to_model_values(self, data, **kwargs):
        if 'gender' in data:
            data['gender'] = Gender(data['gender'])
        return data

class SummaryQuerySchema(Schema):
    """GET /api/residents/<id>/summary 쿼리 파라미터."""
    days = fields.Int(validate=validate.Range(min=1, max=31))

class ResidentResponseSchema(Schema):
    resident_id = fields.Str(dump_only=True)
    name = fields.Str()
    name_kana = fields.Str()
    birth_date = fields.Date()
    age = fields.Method('get_age')
    gender = fields.Str()
    room_number = fields.Str()
    care_level = fields.Int()
    notes = fields.Str()
    is_active = fields.Bool()
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)

    def get_age(self, obj):
        birth_date = obj.get('birth_date')
        return DateTimeUtils.calculate_age(birth_date) if birth_date else None
