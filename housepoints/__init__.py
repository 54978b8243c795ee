"""
House Points
Flask application factory
"""
import os
import logging
from flask import Flask
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db, migrate
from .config import get_config, validate_config
from .utils.logging_config import setup_logging
from .utils.cache import init_cache
from .utils.errors import domain_error_response, error_response, internal_error, ErrorCode
from .utils.exceptions import HousePointsError

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    # Setup logging before anything else
    setup_logging()
    validate_config(config_name)

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Initialize caching (Redis with graceful fallback)
    init_cache(app)

    # Configure CORS - allow frontend origins
    cors_origins = [
        'http://localhost:3000',
        'http://localhost:5173',
        'http://127.0.0.1:5173',
    ]
    extra_origins = os.getenv('CORS_ORIGINS')
    if extra_origins:
        cors_origins.extend(o.strip() for o in extra_origins.split(',') if o.strip())
    CORS(app, origins=cors_origins, supports_credentials=True, allow_headers=['Content-Type', 'X-User-ID'])

    # Register blueprints
    register_blueprints(app)

    # Register CLI commands
    from .commands import init_app as init_commands
    init_commands(app)

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'housepoints'}

    logger.info(f'House Points app created ({config_name})')
    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.auth import auth_bp
    from .api.points import points_bp
    from .api.rewards import rewards_bp
    from .api.houses import houses_bp
    from .api.categories import categories_bp
    from .api.roster import users_bp
    from .api.admin import admin_bp

    # Auth routes
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Points ledger and balances (/api/points..., /api/students/<id>/points-balance)
    app.register_blueprint(points_bp, url_prefix='/api')

    # Rewards catalog and redemption
    app.register_blueprint(rewards_bp, url_prefix='/api/rewards')

    # Houses, standings and classes (/api/houses..., /api/classes...)
    app.register_blueprint(houses_bp, url_prefix='/api')

    # Behavior categories
    app.register_blueprint(categories_bp, url_prefix='/api/behavior-categories')

    # Users and roster
    app.register_blueprint(users_bp, url_prefix='/api/users')

    # Admin bulk operations
    app.register_blueprint(admin_bp, url_prefix='/api/admin')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""

    @app.errorhandler(HousePointsError)
    def handle_domain_error(error):
        return domain_error_response(error)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception('Database error')
        return internal_error('A database error occurred', details={'error': str(error)})

    @app.errorhandler(400)
    def bad_request(error):
        return error_response('Bad request', ErrorCode.INVALID_REQUEST, 400, log_error=False)

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Not found', ErrorCode.NOT_FOUND, 404, log_error=False)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', ErrorCode.METHOD_NOT_ALLOWED, 405, log_error=False)

    @app.errorhandler(500)
    def server_error(error):
        return internal_error()
