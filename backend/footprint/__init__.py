import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from config import config

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

logger = logging.getLogger(__name__)

def create_app(config_name='development'):
    """Application factory pattern"""
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    CORS(
        app,
        origins=app.config['CORS_ORIGINS'],
        supports_credentials=True,
        allow_headers=['Content-Type', 'Authorization']
    )

    # Process-wide analysis helpers, owned by this app instance
    from footprint.services.analysis_cache import AnalysisCache
    from footprint.services.rate_limiter import RateLimiter
    app.extensions['analysis_cache'] = AnalysisCache(
        ttl_seconds=app.config['ANALYSIS_CACHE_TTL_SECONDS'],
        max_entries=app.config['ANALYSIS_CACHE_MAX_ENTRIES']
    )
    app.extensions['analysis_rate_limiter'] = RateLimiter(
        max_requests=app.config['RATE_LIMIT_MAX_REQUESTS'],
        window_seconds=app.config['RATE_LIMIT_WINDOW_SECONDS']
    )

    # Import models
    from footprint.models import User, Emission

    # Register blueprints
    from footprint.routes.auth import auth_bp
    from footprint.routes.emissions import emissions_bp
    from footprint.routes.analysis import analysis_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(emissions_bp, url_prefix='/api/emissions')
    app.register_blueprint(analysis_bp, url_prefix='/api/analysis')

    # Health check endpoint
    @app.route('/api/health')
    def health_check():
        return {'status': 'healthy', 'message': 'Footprint Tracker API is running'}

    logger.info("Footprint API created with '%s' configuration", config_name)
    return app
