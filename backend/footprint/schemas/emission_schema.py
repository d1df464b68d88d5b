from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

import marshmallow as ma

from footprint.utils.emission_factors import estimate_emission
from footprint.utils.time_windows import parse_iso_datetime, start_of_day

UNUSUAL_VALUE_THRESHOLD = 1000
MAX_QUERY_LIMIT = 1000


class EmissionSchema(ma.Schema):
    id = ma.fields.Int(dump_only=True)
    category = ma.fields.Str(
        required=True,
        validate=ma.validate.Length(min=1, max=50, error="Category must be between 1 and 50 characters")
    )
    activity = ma.fields.Str(
        required=True,
        validate=ma.validate.Length(min=1, max=120, error="Activity must be between 1 and 120 characters")
    )
    value = ma.fields.Float(load_default=None, allow_none=True)
    amount = ma.fields.Float(load_default=None, allow_none=True)
    timestamp = ma.fields.DateTime(required=True)

    @ma.validates_schema
    def validate_value_or_amount(self, data, **kwargs):
        if data.get('value') is None and data.get('amount') is None:
            raise ma.ValidationError('Either value or amount is required', 'value')

    @ma.post_load
    def clean_data(self, data, **kwargs):
        for key in ('category', 'activity'):
            data[key] = data[key].strip()

        # Stored timestamps are naive UTC
        timestamp = data['timestamp']
        if timestamp.tzinfo is not None:
            data['timestamp'] = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
        return data


def _one_year_before(now: datetime) -> datetime:
    day = start_of_day(now)
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # 29 February
        return day.replace(year=day.year - 1, day=28)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_timestamp(value: Any):
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, str):
        try:
            return parse_iso_datetime(value)
        except ValueError:
            return None
    return None


def validate_emission_data(data: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    """
    Check a single emission payload for plausibility.

    Never raises; every problem found is reported in `errors`. A payload
    carrying only `amount` has its value estimated from the emission factor
    and the estimate goes through the same value checks. Without a known
    factor only the amount itself is checked.
    """
    errors: List[str] = []

    if not data.get('category'):
        errors.append('Category is required')
    if not data.get('activity'):
        errors.append('Activity is required')

    value = data.get('value')
    amount = data.get('amount')
    if value is None and amount is not None:
        if not _is_number(amount) or amount < 0:
            errors.append('Amount must be a positive number')
        else:
            value = estimate_emission(data.get('category'), data.get('activity'), amount)

    if value is None and amount is None:
        errors.append('Value is required')
    elif value is not None:
        if not _is_number(value) or value < 0:
            errors.append('Value must be a positive number')
        elif value > UNUSUAL_VALUE_THRESHOLD:
            errors.append('Value seems unusually high - please verify')

    raw_timestamp = data.get('timestamp')
    if not raw_timestamp:
        errors.append('Timestamp is required')
    else:
        timestamp = _coerce_timestamp(raw_timestamp)
        if timestamp is None:
            errors.append('Timestamp must be an ISO 8601 date')
        elif timestamp > now:
            errors.append('Emission date cannot be in the future')
        elif timestamp < _one_year_before(now):
            errors.append('Emission date is more than one year old')

    return {'is_valid': not errors, 'errors': errors}


def validate_analysis_params(args: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate optional `start_date`, `end_date`, `category` and `limit` query args."""
    errors: List[str] = []

    for key, label in (('start_date', 'start date'), ('end_date', 'end date')):
        raw = args.get(key)
        if raw and _coerce_timestamp(raw) is None:
            errors.append(f'Invalid {label} format')

    category = args.get('category')
    if category is not None and not str(category).strip():
        errors.append('Category cannot be empty')

    limit = args.get('limit')
    if limit not in (None, ''):
        try:
            limit_value = int(limit)
        except (TypeError, ValueError):
            limit_value = None
        if limit_value is None or not 1 <= limit_value <= MAX_QUERY_LIMIT:
            errors.append(f'Limit must be between 1 and {MAX_QUERY_LIMIT}')

    return {'is_valid': not errors, 'errors': errors}


def parse_analysis_params(args: Mapping[str, Any]) -> Dict[str, Any]:
    """Typed version of already validated analysis query args."""
    params: Dict[str, Any] = {}
    for key in ('start_date', 'end_date'):
        if args.get(key):
            params[key] = _coerce_timestamp(args[key])
    if args.get('category'):
        params['category'] = str(args['category']).strip()
    if args.get('limit'):
        params['limit'] = int(args['limit'])
    return params
