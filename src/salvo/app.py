"""
Flask application factory and main application entry point.

This module creates and configures the Flask application instance
with WebSocket support for real-time room communication.
"""

import os
import sys

from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from loguru import logger

from .join_link import JoinLinkService
from .room_server import RoomRegistry
from .session_gateway import SessionGateway

def create_app(config=None, registry=None):
    """
    Create and configure the Flask application.

    Args:
        config: Configuration dictionary overriding the defaults
        registry: RoomRegistry to use; a fresh one is created if omitted

    Returns:
        (Flask application instance, SocketIO instance)
    """
    app = Flask(__name__, static_folder=None)

    # Default configuration
    app.config.update({
        'SECRET_KEY': 'dev-key-change-in-production',
        'DEBUG': True,
        'JOIN_BASE_URL': 'http://localhost:3000',
        'STATIC_ROOT': os.getcwd(),
        'LOG_LEVEL': 'INFO',
    })

    if config:
        app.config.update(config)

    # Configure logging
    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        format="{time} | {level} | {message}",
        level=app.config['LOG_LEVEL'],
        colorize=True
    )
    logger.info("Starting Salvo room server")

    # Enable CORS for all HTTP requests
    CORS(app, origins="*")

    # Initialize SocketIO for WebSocket support
    socketio = SocketIO(app, cors_allowed_origins="*")

    registry = registry if registry is not None else RoomRegistry()
    join_links = JoinLinkService(app.config['JOIN_BASE_URL'])
    gateway = SessionGateway(registry, join_links)
    app.extensions['salvo.registry'] = registry
    app.extensions['salvo.join_links'] = join_links
    app.extensions['salvo.gateway'] = gateway

    # Register blueprints/routes here
    from . import api
    app.register_blueprint(api.api_bp)

    from . import routes
    app.register_blueprint(routes.bp)

    # Initialize WebSocket handlers
    from . import websocket_handlers
    websocket_handlers.init_socketio_handlers(socketio, gateway)

    return app, socketio
