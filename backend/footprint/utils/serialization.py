from datetime import date, datetime
from typing import Any


def to_json_ready(value: Any) -> Any:
    """Recursively convert dates and datetimes to ISO strings for jsonify."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json_ready(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_ready(item) for item in value]
    return value
