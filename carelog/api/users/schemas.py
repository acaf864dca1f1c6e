# carelog/api/users/schemas.py
from marshmallow import Schema, fields

class UserResponseSchema(Schema):
    """
    GET /api/users/me
    로그인한 직원(사용자) 본인의 정보.
    """
    user_id = fields.Str(required=True, dump_only=True)
    email = fields.Str()
    name = fields.Str()
    role = fields.Str()
    is_active = fields.Bool()
    created_at = fields.DateTime(allow_none=True)
