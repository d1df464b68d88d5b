import logging

from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, create_refresh_token, get_jwt_identity, jwt_required
from marshmallow import ValidationError

from footprint import db
from footprint.models.user import User
from footprint.schemas.user_schemas import UserRegistrationSchema, UserLoginSchema
from footprint.routes.helpers import build_analysis_service, error_response, get_current_user
from footprint.utils.serialization import to_json_ready

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    try:
        # Get JSON data from request
        data = request.get_json(silent=True) or {}

        # Validate input using schema
        schema = UserRegistrationSchema()
        try:
            validated_data = schema.load(data)
        except ValidationError as err:
            return error_response('Validation failed', 400, err.messages)

        email = validated_data['email']

        if User.query.filter_by(email=email).first():
            return error_response('Email already exists', 409)

        # Create new user
        user = User(
            email=email,
            name=validated_data['name'],
            surname=validated_data['surname']
        )
        user.set_password(validated_data['password'])

        # Save to database
        db.session.add(user)
        db.session.commit()

        logger.info('Registered user %s', user.id)
        return jsonify({
            'message': 'User registered successfully',
            'access_token': create_access_token(identity=str(user.id)),
            'user': user.to_dict()
        }), 201

    except Exception:
        db.session.rollback()
        logger.exception('Registration failed')
        return error_response('Registration failed', 500)


@auth_bp.route('/login', methods=['POST'])
def login():
    try:
        data = request.get_json(silent=True) or {}

        schema = UserLoginSchema()
        try:
            validated_data = schema.load(data)
        except ValidationError as err:
            return error_response('Validation failed', 400, err.messages)

        email = validated_data['email']  # Already cleaned by schema
        password = validated_data['password']

        user = User.query.filter_by(email=email).first()

        # Check if user exists and password is correct
        if not user or not user.check_password(password):
            return error_response('Invalid email or password', 401)

        # Create JWT tokens
        user_identity = str(user.id)
        access_token = create_access_token(identity=user_identity)
        refresh_token = create_refresh_token(identity=user_identity)

        analysis = build_analysis_service().get_basic_analysis(user.id)

        return jsonify({
            'message': 'Login successful',
            'access_token': access_token,
            'refresh_token': refresh_token,
            'user': user.to_dict(),
            'analysis': to_json_ready(analysis)
        }), 200

    except Exception:
        logger.exception('Login failed')
        return error_response('Login failed', 500)


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    #Refresh access token using refresh token

    current_user_id = get_jwt_identity()
    new_access_token = create_access_token(identity=current_user_id)

    return jsonify({
        'message': 'Token refreshed successfully',
        'access_token': new_access_token
    }), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    try:
        user, _ = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    return jsonify({'user': user.to_dict()}), 200
