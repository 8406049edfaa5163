from flask import current_app, request

from quic_server.errors import ValidationError


def get_request_data():
    """Request body as a mapping; JSON bodies and form posts are both accepted."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


def require_fields(data, names, keep_whitespace=()):
    """
    Pulls the named fields out of the request body.

    Values are stripped unless listed in keep_whitespace (passwords). A field
    that is absent or blank raises ValidationError naming every missing field.
    """
    values = []
    missing = []
    for name in names:
        value = data.get(name)
        value = '' if value is None else str(value)
        if name not in keep_whitespace:
            value = value.strip()
        if not value:
            missing.append(name)
        values.append(value)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    return values


def user_repository():
    return current_app.extensions['user_repository']


def library_repository():
    return current_app.extensions['library_repository']


# SQLite INTEGER is a signed 64-bit value
_SQLITE_INT_MIN = -2 ** 63
_SQLITE_INT_MAX = 2 ** 63 - 1


def parse_folder_id(raw_folder_id):
    try:
        folder_id = int(str(raw_folder_id).strip())
    except ValueError:
        raise ValidationError("folder_id must be an integer")
    if not _SQLITE_INT_MIN <= folder_id <= _SQLITE_INT_MAX:
        raise ValidationError("folder_id must be an integer")
    return folder_id
