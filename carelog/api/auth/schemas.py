# carelog/api/auth/schemas.py
from marshmallow import Schema, fields, validate

class IdTokenLoginSchema(Schema):
    """운영 모드 로그인 요청: 클라이언트가 Firebase Auth로 받은 ID 토큰"""
    id_token = fields.Str(
        required=True,
        validate=validate.Length(min=1),
        metadata={"description": "Firebase Auth ID 토큰"}
    )
