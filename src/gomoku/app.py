"""
Flask application factory and main application entry point.

This module creates and configures the Flask application instance
with WebSocket support for real-time game communication.
"""

import os
import sys

from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from loguru import logger

from .room_registry import RoomRegistry
from .websocket_handlers import SessionDispatcher, SocketIOTransport, init_socketio_handlers


def default_config():
    """Configuration defaults, overridable through the environment."""
    return {
        'SECRET_KEY': os.environ.get('SECRET_KEY', 'dev-key-change-in-production'),
        'DEBUG': False,
        'PORT': int(os.environ.get('PORT', '3001')),
        'CORS_ORIGINS': os.environ.get('CORS_ORIGINS', '*'),
        'LOG_LEVEL': os.environ.get('LOG_LEVEL', 'INFO'),
    }


def create_app(config=None, registry=None):
    """
    Create and configure the Flask application.

    Args:
        config: Dictionary of configuration overrides
        registry: RoomRegistry to serve; a fresh one is created if omitted

    Returns:
        Tuple of (Flask application, SocketIO instance)
    """
    app = Flask(__name__)
    app.config.update(default_config())
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
    logger.info("Starting Gomoku game server")

    CORS(app, origins=app.config['CORS_ORIGINS'])
    socketio = SocketIO(app, cors_allowed_origins=app.config['CORS_ORIGINS'])

    if registry is None:
        registry = RoomRegistry()
    dispatcher = SessionDispatcher(registry, SocketIOTransport(socketio))
    app.extensions['gomoku_registry'] = registry
    app.extensions['gomoku_dispatcher'] = dispatcher

    from . import api
    app.register_blueprint(api.api_bp)

    init_socketio_handlers(socketio, dispatcher)

    return app, socketio
