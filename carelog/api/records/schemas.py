# carelog/api/records/schemas.py
from datetime import timezone
from typing import Optional

from marshmallow import (
    Schema, fields, validate, validates_schema, ValidationError, post_load, post_dump, pre_load, INCLUDE, EXCLUDE
)

from carelog.models.daily_record import (
    LIST_FIELDS, DailyRecord, EntryKind, ExcretionType, ExcretionAmount, FecesCondition, MealType
)
from carelog.utils.datetime_utils import DateTimeUtils, TIME_OF_DAY_PATTERN

TIME_OF_DAY_REGEX = TIME_OF_DAY_PATTERN.pattern

def _enum_values(enum_cls):
    return [e.value for e in enum_cls]

def validate_date_key(value):
    """YYYY-MM-DD 형식이면서 실제로 존재하는 날짜인지 검증합니다."""
    if not DateTimeUtils.is_date_key(value):
        raise ValidationError("날짜 형식이 올바르지 않습니다 (YYYY-MM-DD).")


# =====================================================================================
# 기록 항목 입력 스키마 (종류별)
# =====================================================================================
class EntryInputSchema(Schema):
    """모든 기록 항목의 공통 입력 필드. id/recorded_by는 서버에서 채웁니다."""
    class Meta:
        unknown = EXCLUDE

    note = fields.Str(allow_none=True, validate=validate.Length(max=500))
    recorded_at = fields.AwareDateTime(default_timezone=timezone.utc, required=False)

class VitalInputSchema(EntryInputSchema):
    time = fields.Str(validate=validate.Regexp(TIME_OF_DAY_REGEX))
    temperature = fields.Float(allow_none=True, validate=validate.Range(min=30.0, max=45.0))
    blood_pressure_high = fields.Int(allow_none=True, validate=validate.Range(min=0, max=300))
    blood_pressure_low = fields.Int(allow_none=True, validate=validate.Range(min=0, max=300))
    pulse = fields.Int(allow_none=True, validate=validate.Range(min=0, max=300))
    spo2 = fields.Int(allow_none=True, validate=validate.Range(min=0, max=100))

    @validates_schema
    def validate_any_measurement(self, data, **kwargs):
        """측정값이 하나도 없는 바이탈은 허용하지 않습니다."""
        measurements = ('temperature', 'blood_pressure_high', 'blood_pressure_low', 'pulse', 'spo2')
        if all(data.get(key) is None for key in measurements):
            raise ValidationError("바이탈 측정값을 하나 이상 입력해야 합니다.")

class ExcretionInputSchema(EntryInputSchema):
    time = fields.Str(validate=validate.Regexp(TIME_OF_DAY_REGEX))
    type = fields.Str(required=True, validate=validate.OneOf(_enum_values(ExcretionType)))
    urine_amount = fields.Str(allow_none=True, validate=validate.OneOf(_enum_values(ExcretionAmount)))
    feces_amount = fields.Str(allow_none=True, validate=validate.OneOf(_enum_values(ExcretionAmount)))
    feces_condition = fields.Str(allow_none=True, validate=validate.OneOf(_enum_values(FecesCondition)))
    has_incontinence = fields.Bool(load_default=False)

    @post_load
    def to_enums(self, data, **kwargs):
        data['type'] = ExcretionType(data['type'])
        for key in ('urine_amount', 'feces_amount'):
            if data.get(key):
                data[key] = ExcretionAmount(data[key])
        if data.get('feces_condition'):
            data['feces_condition'] = FecesCondition(data['feces_condition'])
        return data

class MealInputSchema(EntryInputSchema):
    meal_type = fields.Str(required=True, validate=validate.OneOf(_enum_values(MealType)))
    main_dish_amount = fields.Int(required=True, validate=validate.Range(min=0, max=100))
    side_dish_amount = fields.Int(required=True, validate=validate.Range(min=0, max=100))
    soup_amount = fields.Int(allow_none=True, validate=validate.Range(min=0, max=100))

    @post_load
    def to_enums(self, data, **kwargs):
        data['meal_type'] = MealType(data['meal_type'])
        return data

class HydrationInputSchema(EntryInputSchema):
    time = fields.Str(validate=validate.Regexp(TIME_OF_DAY_REGEX))
    amount = fields.Int(required=True, validate=validate.Range(min=0, max=5000))
    drink_type = fields.Str(allow_none=True, validate=validate.Length(max=50))

ENTRY_INPUT_SCHEMAS = {
    EntryKind.VITALS: VitalInputSchema,
    EntryKind.EXCRETIONS: ExcretionInputSchema,
    EntryKind.MEALS: MealInputSchema,
    EntryKind.HYDRATIONS: HydrationInputSchema,
}

def load_entry_input(kind: EntryKind, payload) -> dict:
    """기록 종류에 맞는 스키마로 항목 입력을 검증합니다."""
    return ENTRY_INPUT_SCHEMAS[kind]().load(payload or {})


# =====================================================================================
# 요청 스키마
# =====================================================================================
class StoredEntrySchema(Schema):
    """
    PUT으로 리스트를 통째로 교체할 때 각 항목의 최소 형태.
    id, recorded_by, recorded_at을 포함한 전체 항목을 그대로 받습니다.
    """
    class Meta:
        unknown = INCLUDE

    id = fields.Str(required=True)
    recorded_by = fields.Str(required=True)
    recorded_at = fields.AwareDateTime(default_timezone=timezone.utc, required=True)

class DailyRecordPartialSchema(Schema):
    """
    PUT /api/residents/<id>/records/<date> 요청 본문.
    포함된 필드만 덮어쓰며 리스트 필드는 통째로 교체됩니다.
    """
    class Meta:
        unknown = INCLUDE

    vitals = fields.List(fields.Nested(StoredEntrySchema))
    excretions = fields.List(fields.Nested(StoredEntrySchema))
    meals = fields.List(fields.Nested(StoredEntrySchema))
    hydrations = fields.List(fields.Nested(StoredEntrySchema))

    @pre_load
    def drop_managed_fields(self, data, **kwargs):
        """문서 키와 생성/수정 시각은 저장소가 관리합니다."""
        if not isinstance(data, dict):
            return data
        return {k: v for k, v in data.items() if k not in ('resident_id', 'date', 'record_id', 'created_at', 'updated_at')}

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("저장할 필드가 없습니다.")

class BulkAppendSchema(Schema):
    """POST /api/records/bulk 요청 본문: 선택한 이용자 모두에게 같은 항목을 하나씩 추가."""
    resident_ids = fields.List(fields.Str(validate=validate.Length(min=1)), required=True,
                               validate=validate.Length(min=1, error="이용자를 선택해주세요."))
    kind = fields.Str(required=True, validate=validate.OneOf(list(LIST_FIELDS)))
    date = fields.Str(validate=validate_date_key)
    entry = fields.Dict(required=True)

    @post_load
    def load_entry(self, data, **kwargs):
        kind = EntryKind(data['kind'])
        try:
            data['entry'] = load_entry_input(kind, data['entry'])
        except ValidationError as err:
            raise ValidationError({'entry': err.messages})
        data['kind'] = kind
        # 중복 선택은 한 번만 처리
        data['resident_ids'] = list(dict.fromkeys(data['resident_ids']))
        return data

class HistoryQuerySchema(Schema):
    """GET /api/records/history 쿼리 파라미터."""
    date = fields.Str(validate=validate_date_key)


# =====================================================================================
# 응답 스키마
# =====================================================================================
class DailyRecordResponseSchema(Schema):
    record_id = fields.Str()
    resident_id = fields.Str()
    date = fields.Str()
    vitals = fields.List(fields.Dict(), dump_default=[])
    excretions = fields.List(fields.Dict(), dump_default=[])
    meals = fields.List(fields.Dict(), dump_default=[])
    hydrations = fields.List(fields.Dict(), dump_default=[])
    # 응답 직전에 DateTimeUtils.to_json_safe로 ISO 문자열이 된 값
    created_at = fields.Str(allow_none=True)
    updated_at = fields.Str(allow_none=True)

    @post_dump(pass_original=True)
    def include_extra_fields(self, data, original, **kwargs):
        # PUT으로 저장된 추가 스칼라 필드(DailyRecord.extra)도 그대로 돌려줌
        for key, value in original.items():
            data.setdefault(key, value)
        return data


def dump_record(record: Optional[DailyRecord]):
    """DailyRecord를 응답용 dict로 변환합니다. 기록이 없으면 None."""
    if record is None:
        return None
    return DailyRecordResponseSchema().dump(DateTimeUtils.to_json_safe(record.to_dict()))
