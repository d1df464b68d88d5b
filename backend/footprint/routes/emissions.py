import logging
from datetime import datetime

from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from footprint.routes.helpers import error_response, get_current_user, success_response
from footprint.schemas.emission_schema import (
    EmissionSchema,
    parse_analysis_params,
    validate_analysis_params,
    validate_emission_data
)
from footprint.services.emission_service import EmissionService
from footprint.utils.emission_factors import EMISSION_FACTORS

logger = logging.getLogger(__name__)

emissions_bp = Blueprint('emissions', __name__)


def _invalidate_analysis(user_id: int) -> None:
    removed = current_app.extensions['analysis_cache'].clear(user_id)
    logger.debug('Invalidated %d cached analyses for user %s', removed, user_id)


# ============================================================================
# WRITE ENDPOINTS
# ============================================================================

@emissions_bp.route('/', methods=['POST'])
@jwt_required()
def create_emission():
    try:
        user, user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        validated_data = EmissionSchema().load(request.get_json(silent=True) or {})

        validation = validate_emission_data(validated_data, datetime.utcnow())
        if not validation['is_valid']:
            return error_response('Validation failed', 400, validation['errors'])

        emission = EmissionService.create_emission(user, validated_data)
        _invalidate_analysis(user_id)

        return success_response(
            'Emission logged successfully',
            {'emission': emission.to_dict()},
            201
        )
    except ValidationError as e:
        return error_response('Validation failed', 400, e.messages)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception:
        logger.exception('Failed to log emission for user %s', user_id)
        return error_response('Failed to log emission', 500)


@emissions_bp.route('/<int:emission_id>', methods=['DELETE'])
@jwt_required()
def delete_emission(emission_id: int):
    try:
        _, user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        EmissionService.delete_emission(emission_id, user_id)
        _invalidate_analysis(user_id)
        return success_response('Emission deleted successfully', {'emission_id': emission_id})
    except ValueError as e:
        return error_response(str(e), 404)
    except PermissionError as e:
        return error_response(str(e), 403)
    except Exception:
        logger.exception('Failed to delete emission %s', emission_id)
        return error_response('Failed to delete emission', 500)


@emissions_bp.route('/<int:user_id>/all', methods=['DELETE'])
@jwt_required()
def clear_emissions(user_id: int):
    try:
        _, current_user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    if user_id != current_user_id:
        return error_response("Cannot delete another user's emissions", 403)

    try:
        deleted = EmissionService.clear_emissions(user_id)
        _invalidate_analysis(user_id)
        return success_response('Emissions cleared successfully', {'deleted_count': deleted})
    except Exception:
        logger.exception('Failed to clear emissions for user %s', user_id)
        return error_response('Failed to clear emissions', 500)


# ============================================================================
# READ ENDPOINTS
# ============================================================================

@emissions_bp.route('/<int:user_id>', methods=['GET'])
@jwt_required()
def get_emissions(user_id: int):
    try:
        _, current_user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    if user_id != current_user_id:
        return error_response("Cannot view another user's emissions", 403)

    validation = validate_analysis_params(request.args)
    if not validation['is_valid']:
        return error_response('Invalid query parameters', 400, validation['errors'])

    try:
        records = EmissionService.fetch_records(user_id, **parse_analysis_params(request.args))
        return success_response(
            'Emissions retrieved successfully',
            {
                'emissions': [record.to_dict() for record in records],
                'count': len(records)
            }
        )
    except Exception:
        logger.exception('Failed to get emissions for user %s', user_id)
        return error_response('Failed to get emissions', 500)


@emissions_bp.route('/<int:user_id>/summary', methods=['GET'])
@jwt_required()
def get_emission_summary(user_id: int):
    try:
        _, current_user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    if user_id != current_user_id:
        return error_response("Cannot view another user's summary", 403)

    try:
        return success_response(
            'Emission summary retrieved successfully',
            EmissionService.get_category_summary(user_id)
        )
    except Exception:
        logger.exception('Failed to get emission summary for user %s', user_id)
        return error_response('Failed to get emission summary', 500)


@emissions_bp.route('/user-totals', methods=['GET'])
@jwt_required()
def get_user_totals():
    try:
        return success_response(
            'User totals retrieved successfully',
            {'user_totals': EmissionService.get_user_totals()}
        )
    except Exception:
        logger.exception('Failed to get user totals')
        return error_response('Failed to get user totals', 500)


@emissions_bp.route('/leaderboard', methods=['GET'])
@jwt_required()
def get_leaderboard():
    limit = request.args.get('limit', default=15, type=int)
    if limit < 1 or limit > 100:
        return error_response('Limit must be between 1 and 100', 400)

    try:
        return success_response(
            'Leaderboard retrieved successfully',
            {'leaderboard': EmissionService.get_leaderboard(limit)}
        )
    except Exception:
        logger.exception('Failed to get leaderboard')
        return error_response('Failed to get leaderboard', 500)


@emissions_bp.route('/factors', methods=['GET'])
def get_emission_factors():
    return success_response(
        'Emission factors retrieved successfully',
        {'factors': EMISSION_FACTORS, 'unit': 'kg CO2e per unit of activity'}
    )
