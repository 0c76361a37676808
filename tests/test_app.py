"""
Tests for Flask application factory and basic functionality.
"""

import pytest
from gomoku.app import create_app
from gomoku.room_registry import RoomRegistry

def test_create_app(monkeypatch):
    """Test that the app factory creates a valid Flask app."""
    monkeypatch.delenv('PORT', raising=False)
    app, socketio = create_app()
    assert app is not None
    assert socketio is not None
    assert app.config['SECRET_KEY'] is not None
    assert app.config['PORT'] == 3001

def test_config_overrides():
    """Test that explicit configuration wins over the defaults."""
    app, _ = create_app({'TESTING': True, 'PORT': 5050, 'LOG_LEVEL': 'DEBUG'})
    assert app.config['TESTING'] is True
    assert app.config['PORT'] == 5050

def test_port_from_environment(monkeypatch):
    monkeypatch.setenv('PORT', '4242')
    app, _ = create_app()
    assert app.config['PORT'] == 4242

def test_supplied_registry_is_used():
    registry = RoomRegistry()
    app, _ = create_app({'TESTING': True}, registry=registry)
    assert app.extensions['gomoku_registry'] is registry
    assert app.extensions['gomoku_dispatcher'].registry is registry
