from typing import Tuple, Dict, Any

from flask import current_app, jsonify
from flask_jwt_extended import get_jwt_identity

from footprint.models.user import User
from footprint.services.analysis_service import AnalysisService
from footprint.utils.serialization import to_json_ready


# ============================================================================
# HELPER FUNCTIONS SHARED BY THE BLUEPRINTS
# ============================================================================

def get_current_user() -> Tuple[User, int]:
    user_id = int(get_jwt_identity())
    user = User.query.filter_by(id=user_id).first()
    if not user:
        raise ValueError("User not found")
    return user, user_id


def error_response(message: str, status_code: int = 400,
                   details: Any = None) -> Tuple[Dict, int]:

    response = {'error': message}
    if details:
        response['details'] = details
    return jsonify(response), status_code


def success_response(message: str, data: Dict[str, Any] = None,
                     status_code: int = 200) -> Tuple[Dict, int]:

    response = {'message': message}
    if data:
        response.update(to_json_ready(data))
    return jsonify(response), status_code


def build_analysis_service() -> AnalysisService:
    """Analysis facade bound to this app's cache and configured goals."""
    return AnalysisService(
        current_app.extensions['analysis_cache'],
        goals=current_app.config.get('EMISSION_GOALS')
    )
