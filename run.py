"""
Development server entry point.

Run this script to start the Flask development server with WebSocket support.
"""

from gomoku.app import create_app

if __name__ == '__main__':
    app, socketio = create_app()
    socketio.run(app, debug=app.config['DEBUG'], host='0.0.0.0', port=app.config['PORT'],
                 allow_unsafe_werkzeug=True)
