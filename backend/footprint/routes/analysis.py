import logging
from functools import wraps

from flask import Blueprint, Response, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from footprint.routes.helpers import (
    build_analysis_service,
    error_response,
    get_current_user,
    success_response
)
from footprint.schemas.emission_schema import parse_analysis_params, validate_analysis_params
from footprint.services.chart_service import EmissionChartService
from footprint.utils.serialization import to_json_ready

logger = logging.getLogger(__name__)

analysis_bp = Blueprint('analysis', __name__)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def analysis_access(view):
    """
    JWT auth, per-user rate limiting and ownership of `user_id` for an analysis view.

    The wrapped view receives the path `user_id` once the caller is allowed.
    """
    @wraps(view)
    @jwt_required()
    def wrapper(user_id: int, *args, **kwargs):
        try:
            _, current_user_id = get_current_user()
        except ValueError as e:
            return error_response(str(e), 404)

        limiter = current_app.extensions['analysis_rate_limiter']
        if not limiter.is_allowed(current_user_id):
            logger.warning('Analysis rate limit hit by user %s', current_user_id)
            return error_response(
                'Too many analysis requests. Please try again later.',
                429,
                {'retry_after_seconds': limiter.window_seconds}
            )

        if user_id != current_user_id:
            return error_response("Cannot access another user's analysis", 403)

        return view(user_id, *args, **kwargs)

    return wrapper


def analysis_response(result):
    return jsonify(to_json_ready(result)), 200


def png_response(image_data: bytes, filename: str) -> Response:
    return Response(
        image_data,
        mimetype='image/png',
        headers={
            'Content-Disposition': f'inline; filename={filename}'
        }
    )


# ============================================================================
# ANALYSIS ENDPOINTS
# ============================================================================

@analysis_bp.route('/insights/<int:user_id>', methods=['GET'])
@analysis_access
def get_insights(user_id: int):
    validation = validate_analysis_params(request.args)
    if not validation['is_valid']:
        return error_response('Invalid query parameters', 400, validation['errors'])

    try:
        params = parse_analysis_params(request.args)
        return analysis_response(build_analysis_service().get_user_insights(user_id, params))
    except Exception:
        logger.exception('Failed to generate insights for user %s', user_id)
        return error_response('Failed to generate insights', 500)


@analysis_bp.route('/recommendations/<int:user_id>', methods=['GET'])
@analysis_access
def get_recommendations(user_id: int):
    try:
        return analysis_response(build_analysis_service().get_recommendations(user_id))
    except Exception:
        logger.exception('Failed to generate recommendations for user %s', user_id)
        return error_response('Failed to generate recommendations', 500)


@analysis_bp.route('/comparisons/<int:user_id>', methods=['GET'])
@analysis_access
def get_comparisons(user_id: int):
    try:
        return analysis_response(build_analysis_service().get_comparisons(user_id))
    except Exception:
        logger.exception('Failed to generate comparisons for user %s', user_id)
        return error_response('Failed to generate comparisons', 500)


@analysis_bp.route('/notifications/<int:user_id>', methods=['GET'])
@analysis_access
def get_notifications(user_id: int):
    try:
        return analysis_response(build_analysis_service().get_notifications(user_id))
    except Exception:
        logger.exception('Failed to generate notifications for user %s', user_id)
        return error_response('Failed to generate notifications', 500)


@analysis_bp.route('/daily-summary/<int:user_id>', methods=['GET'])
@analysis_access
def get_daily_summary(user_id: int):
    try:
        return analysis_response(build_analysis_service().get_daily_summary(user_id))
    except Exception:
        logger.exception('Failed to generate daily summary for user %s', user_id)
        return error_response('Failed to generate daily summary', 500)


@analysis_bp.route('/quick-stats/<int:user_id>', methods=['GET'])
@analysis_access
def get_quick_stats(user_id: int):
    try:
        return analysis_response(build_analysis_service().get_quick_stats(user_id))
    except Exception:
        logger.exception('Failed to generate quick stats for user %s', user_id)
        return error_response('Failed to generate quick stats', 500)


# ============================================================================
# CHART ENDPOINTS
# ============================================================================

@analysis_bp.route('/charts/weekly/<int:user_id>', methods=['GET'])
@analysis_access
def get_weekly_chart(user_id: int):
    weeks = request.args.get('weeks', default=12, type=int)
    if weeks < 2 or weeks > 52:
        return error_response('weeks must be between 2 and 52', 400)

    try:
        service = build_analysis_service()
        image_data = EmissionChartService.generate_weekly_chart(
            service.get_chart_records(user_id), service.now(), weeks
        )
        return png_response(image_data, f'weekly_emissions_{weeks}.png')
    except Exception:
        logger.exception('Failed to generate weekly chart for user %s', user_id)
        return error_response('Failed to generate weekly chart', 500)


@analysis_bp.route('/charts/categories/<int:user_id>', methods=['GET'])
@analysis_access
def get_category_chart(user_id: int):
    try:
        records = build_analysis_service().get_chart_records(user_id)
        image_data = EmissionChartService.generate_category_chart(records)
        return png_response(image_data, 'emissions_by_category.png')
    except Exception:
        logger.exception('Failed to generate category chart for user %s', user_id)
        return error_response('Failed to generate category chart', 500)


# ============================================================================
# MAINTENANCE
# ============================================================================

@analysis_bp.route('/cache/<int:user_id>', methods=['DELETE'])
@analysis_access
def clear_cache(user_id: int):
    removed = build_analysis_service().clear_user_cache(user_id)
    return success_response('Analysis cache cleared', {'cleared_entries': removed})


@analysis_bp.route('/health', methods=['GET'])
def analysis_health():
    # Periodic probes double as the sweep for expired cache and limiter entries
    swept = current_app.extensions['analysis_cache'].cleanup()
    current_app.extensions['analysis_rate_limiter'].cleanup()

    health = build_analysis_service().get_health_info()
    health['cache']['swept_entries'] = swept
    return analysis_response(health)
