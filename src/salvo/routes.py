"""
Flask routes for the static game client.

Files are served unauthenticated from the configured STATIC_ROOT.
"""

from flask import Blueprint, current_app, send_from_directory

bp = Blueprint('main', __name__)

@bp.route('/')
def index():
    """Main game page."""
    return send_from_directory(current_app.config['STATIC_ROOT'], 'index.html')

@bp.route('/<path:filename>')
def static_file(filename):
    """Any other client asset."""
    return send_from_directory(current_app.config['STATIC_ROOT'], filename)
