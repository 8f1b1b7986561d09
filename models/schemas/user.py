from marshmallow import EXCLUDE, Schema, fields, pre_load, validate


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


_not_blank = validate.Length(min=1, error="Field may not be blank.")


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=1, max=150))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=_not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "username" in data:
                data["username"] = _strip(data["username"])
            if "email" in data:
                data["email"] = _norm_email(data["email"])
        return data


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=_not_blank)
    password = fields.String(required=True, load_only=True, validate=_not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "username" in data:
            data = dict(data)
            data["username"] = _strip(data["username"])
        return data


class PasswordChangeSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    password = fields.String(required=True, load_only=True, validate=_not_blank)
    new_password = fields.String(
        required=True, load_only=True, data_key="newPassword", validate=_not_blank
    )


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    role = fields.String()
    created_at = fields.DateTime(allow_none=True)


class UserListOutSchema(Schema):
    """Admin listing: exactly id, username, email and role."""
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    role = fields.String()
