"""
Flask JSON API for the bracket layout engine.
"""
import os
import logging
import threading
import yaml
from flask import Flask, request, jsonify
from werkzeug.exceptions import BadRequest
from engine.config import load_layout_settings
from engine.errors import (
    BracketError, LayoutConfigError, MalformedBracketError, MatchGroupCountError,
    MissingParameterError, UnsupportedBracketTypeError,
)
from engine.models import Bracket
from engine.renderer import BracketRenderer, layout_bracket

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))
LAYOUT_CONFIG_FILE = os.environ.get('BRACKET_LAYOUT_CONFIG', os.path.join(DATA_DIR, 'layout.yaml'))

if os.environ.get('BRACKET_LOG_LEVEL'):
    app.logger.setLevel(getattr(logging, os.environ['BRACKET_LOG_LEVEL'].upper(), logging.INFO))

# One renderer per view; requests for a view are serialized by the lock
_views = {}
_views_lock = threading.Lock()

# Status codes for engine errors
ERROR_STATUS = {
    MalformedBracketError: 400,
    MissingParameterError: 400,
    LayoutConfigError: 500,
    MatchGroupCountError: 422,
    UnsupportedBracketTypeError: 422,
}


def load_settings():
    """Load layout settings from the configured YAML file, merging with defaults."""
    return load_layout_settings(LAYOUT_CONFIG_FILE)


def _error_status(error: BracketError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 400


@app.errorhandler(BracketError)
def handle_bracket_error(e):
    status = _error_status(e)
    app.logger.warning(f'Rejected bracket request ({type(e).__name__}): {e}')
    return jsonify({'success': False, 'error': str(e), 'error_type': type(e).__name__}), status


def _read_snapshot() -> Bracket:
    """Parse the request body into a Bracket. Accepts JSON, or YAML by content type."""
    if request.mimetype in ('application/yaml', 'application/x-yaml', 'text/yaml'):
        try:
            data = yaml.safe_load(request.get_data(as_text=True))
        except yaml.YAMLError as e:
            raise MalformedBracketError(f'Invalid YAML snapshot: {e}')
    elif request.is_json:
        try:
            data = request.get_json()
        except BadRequest:
            raise MalformedBracketError('Request body is not valid JSON')
    else:
        raise MalformedBracketError('Request body must be a JSON or YAML bracket snapshot')
    if data is None:
        raise MalformedBracketError('Request body is empty')
    return Bracket.from_dict(data)


@app.route('/api/settings', methods=['GET'])
def api_settings():
    """Effective layout settings."""
    return jsonify({'success': True, 'settings': load_settings()})


@app.route('/api/layout', methods=['POST'])
def api_layout():
    """Lay out a snapshot without keeping any state."""
    bracket = _read_snapshot()
    layout = layout_bracket(bracket, load_settings())
    return jsonify({'success': True, 'layout': layout})


@app.route('/api/views/<view_id>/snapshot', methods=['POST'])
def api_view_snapshot(view_id):
    """Lay out a snapshot for a view and diff it against what the view shows."""
    bracket = _read_snapshot()
    settings = load_settings()
    with _views_lock:
        renderer = _views.get(view_id)
        if renderer is None:
            renderer = BracketRenderer(settings)
            _views[view_id] = renderer
        else:
            renderer.settings = settings
        result = renderer.set_data(bracket)
    if result['full_rebuild']:
        app.logger.info(f'View {view_id}: full rebuild for group {result["layout"]["group_id"]}')
    return jsonify({
        'success': True,
        'full_rebuild': result['full_rebuild'],
        'hide_previous': result['hide_previous'],
        'layout': result['layout'],
        'actions': result['actions'],
        'summary': result['summary'],
    })


@app.route('/api/views/<view_id>', methods=['GET'])
def api_get_view(view_id):
    """Last layout rendered for a view."""
    with _views_lock:
        renderer = _views.get(view_id)
        state = renderer.state if renderer is not None else None
    if state is None:
        return jsonify({'success': False, 'error': f'View "{view_id}" has not rendered anything.'}), 404
    return jsonify({'success': True, 'layout': state.layout})


@app.route('/api/views/<view_id>', methods=['DELETE'])
def api_delete_view(view_id):
    """Forget a view; its next snapshot is a full rebuild."""
    with _views_lock:
        removed = _views.pop(view_id, None)
    if removed is None:
        return jsonify({'success': False, 'error': f'View "{view_id}" not found.'}), 404
    return jsonify({'success': True})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
