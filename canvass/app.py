"""Canvassing Flask Application"""

from flask import Flask, jsonify
from flask_restx import Api
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_compress import Compress
import structlog
from datetime import datetime

from canvass.config.settings import settings
from canvass.api.routes import register_routes
from canvass.utils.exceptions import CanvassException
from canvass.utils.monitoring import add_performance_monitoring

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.LOG_FORMAT == "json" else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

def build_store():
    """Connect the PostGIS store from settings"""
    from canvass.database.connection_pool import DatabasePool
    from canvass.services.postgres_store import PostgresCanvassStore

    pool = DatabasePool(settings.DATABASE_URL, minconn=settings.DB_POOL_MIN, maxconn=settings.DB_POOL_MAX)
    return PostgresCanvassStore(pool)

def _error_body(error: CanvassException) -> dict:
    return {
        "error": type(error).__name__,
        "message": str(error)
    }

def create_app(store=None, config: dict = None) -> Flask:
    """Create and configure Flask application

    store is the data store request handlers use; when omitted one is
    connected from DATABASE_URL.
    """

    # Create Flask app
    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.config["DEBUG"] = settings.DEBUG
    app.config["RATELIMIT_STORAGE_URI"] = settings.RATELIMIT_STORAGE_URI
    # 404 bodies stay {"error", "message"} without flask-restx URL suggestions
    app.config["RESTX_ERROR_404_HELP"] = False
    if config:
        app.config.update(config)

    # Configure CORS for the map and field clients
    CORS(app,
         origins=settings.ALLOWED_ORIGINS,
         allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
         methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
         supports_credentials=True
    )

    # Address lists for large polygons compress well
    Compress(app)
    app.config['COMPRESS_ALGORITHM'] = 'gzip'
    app.config['COMPRESS_LEVEL'] = 6
    app.config['COMPRESS_MIN_SIZE'] = 500

    # Configure Rate Limiting
    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[
            f"{settings.RATE_LIMIT_PER_MINUTE} per minute",
            f"{settings.RATE_LIMIT_PER_HOUR} per hour"
        ],
        storage_uri=app.config["RATELIMIT_STORAGE_URI"]
    )

    # Configure API
    api = Api(
        app,
        version="1.0",
        title="Canvass API",
        description="Service-area polygons, address points and field routes for door-to-door canvassing",
        doc="/docs" if app.config["DEBUG"] else False,
        prefix=f"/api/{settings.API_VERSION}"
    )

    if store is None:
        store = build_store()

    # Store extensions on app
    app.limiter = limiter
    app.api = api
    app.store = store

    # Register routes
    register_routes(api)

    # Log request timings
    add_performance_monitoring(app, slow_threshold_seconds=settings.SLOW_REQUEST_SECONDS)

    # Health check endpoint (outside API prefix)
    @app.route("/health", methods=["GET"])
    def health_check():
        """Basic health check endpoint"""
        health_status = {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "version": settings.API_VERSION,
            "services": {}
        }

        if app.store.health_check():
            health_status["services"]["database"] = {"status": "healthy"}
        else:
            health_status["services"]["database"] = {"status": "unhealthy"}
            health_status["status"] = "degraded"

        status_code = 200 if health_status["status"] == "healthy" else 503
        return jsonify(health_status), status_code

    # Error handlers
    @api.errorhandler(CanvassException)
    def handle_api_exception(error):
        """Handle canvassing exceptions raised inside API resources"""
        logger.error("Canvass Exception", error=str(error), type=type(error).__name__)
        return _error_body(error), error.status_code

    @app.errorhandler(CanvassException)
    def handle_canvass_exception(error):
        """Handle canvassing exceptions raised outside the API"""
        logger.error("Canvass Exception", error=str(error), type=type(error).__name__)
        return jsonify(_error_body(error)), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        """Handle 404 errors"""
        return jsonify({
            "error": "NotFound",
            "message": "The requested resource was not found"
        }), 404

    @app.errorhandler(500)
    def handle_internal_error(error):
        """Handle 500 errors"""
        logger.error("Internal server error", error=str(error))
        return jsonify({
            "error": "InternalServerError",
            "message": "An internal server error occurred"
        }), 500

    # Log app startup
    logger.info(
        "Canvass Flask app created",
        debug=app.config["DEBUG"],
        max_area_acres=settings.MAX_AREA_ACRES,
        max_viewport_area_sq_km=settings.MAX_VIEWPORT_AREA_SQ_KM
    )

    return app
