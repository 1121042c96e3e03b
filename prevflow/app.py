"""
prevflow API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support, wires the
board service to its store, settings and notification publisher, and
registers the board routes.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Optional
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag

from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .middleware.error_handler import register_error_handlers
from .services.amqp import create_amqp_service
from .services.board import BoardService
from .services.case_store import create_case_store
from .services.mongodb import MongoDBService
from .services.redis import RedisService
from .services.settings import SettingsService

logger = logging.getLogger(__name__)

SERVICE_NAME = "prevflow-api"
SERVICE_VERSION = "1.0.0"

# OpenAPI info
info = Info(
    title="prevflow API",
    version=SERVICE_VERSION,
    description="Case lifecycle boards for a social-security legal practice"
)

tags = [
    Tag(name="Board", description="Case boards and moves"),
    Tag(name="Health", description="System health and status")
]


def build_board_service() -> BoardService:
    """
    Build the board service from environment configuration.

    ``PREVFLOW_STORE`` selects the case store (``memory`` or ``mongodb``).
    MongoDB also backs the settings; Redis caches them when ``REDIS_URL`` is
    set; notifications are published over AMQP when ``AMQP_URL`` is set.
    """
    backend = os.getenv('PREVFLOW_STORE', 'memory')

    mongodb = MongoDBService() if backend == 'mongodb' else None
    if mongodb is not None:
        mongodb.create_indexes()

    redis = RedisService() if os.getenv('REDIS_URL') else None
    settings = SettingsService(mongodb=mongodb, redis=redis)

    publisher = None
    if os.getenv('AMQP_URL'):
        publisher = create_amqp_service()
        publisher.setup_exchange()

    store = create_case_store(backend, mongodb)
    if os.getenv('PREVFLOW_WATCH_CHANGES', 'false').lower() == 'true' and hasattr(store, 'start_watching'):
        store.start_watching()

    logger.info(
        "Board service configured",
        extra={"extra_fields": {
            "store": backend,
            "settings_cache": redis is not None,
            "amqp": publisher is not None,
        }}
    )
    return BoardService(store, publisher=publisher, settings=settings)


def create_app(board_service: Optional[BoardService] = None) -> OpenAPI:
    """
    Create the Flask application.

    Args:
        board_service: Preconfigured board service; built from the
            environment when omitted
    """
    setup_observability()

    app = OpenAPI(__name__, info=info, validation_error_status=400)

    # Environment configuration
    app.config['ENVIRONMENT'] = os.getenv('ENVIRONMENT', 'development')
    app.config['DEBUG'] = app.config['ENVIRONMENT'] == 'development'

    add_observability_middleware(app)
    register_error_handlers(app)

    # Make services available to routes
    app.board_service = board_service or build_board_service()

    from .routes.board import board_bp
    app.register_api(board_bp)

    @app.get('/api/healthz', tags=[tags[1]])
    def health_check():
        """Report dependency health."""
        service = app.board_service
        dependencies = {}

        mongodb = getattr(service.store, 'mongodb', None)
        if mongodb is not None:
            dependencies['mongodb'] = mongodb.health_check()
        if service.settings.redis is not None:
            dependencies['redis'] = service.settings.redis.health_check()
        if service.publisher is not None:
            dependencies['amqp'] = {'status': 'healthy' if service.publisher.health_check() else 'unhealthy'}

        unhealthy = any(dep.get('status') == 'unhealthy' for dep in dependencies.values())
        return jsonify({
            "status": "unhealthy" if unhealthy else "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": app.config['ENVIRONMENT'],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "dependencies": dependencies,
        }), 503 if unhealthy else 200

    return app


if __name__ == '__main__':
    # Development server
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=application.config['DEBUG']
    )
