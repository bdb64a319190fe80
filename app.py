"""
app.py — Flask entry point for the gall catalogue.

Initializes the Flask app, registers all route blueprints,
calls init_db() and seed_defaults() on startup, and injects
UI strings into template context.

Run: python app.py → localhost:5000
"""

import os
import json
import logging
from flask import Flask
from flask_wtf.csrf import CSRFProtect

from database import init_db, seed_defaults
from routes.main import main_bp
from routes.search import search_bp


def create_app(test_config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'gall-catalogue-local-secret-key')
    app.config['WTF_CSRF_CHECK_DEFAULT'] = True
    app.config['TEMPLATES_AUTO_RELOAD'] = True
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')

    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    CSRFProtect(app)

    base_dir = os.path.dirname(os.path.abspath(__file__))
    os.makedirs(os.path.join(base_dir, 'data'), exist_ok=True)

    # Initialize database and seed facet vocabularies
    with app.app_context():
        init_db()
        seed_defaults()

    app.register_blueprint(main_bp)
    app.register_blueprint(search_bp)

    # Load UI strings
    i18n_path = os.path.join(base_dir, 'i18n', 'en.json')
    with open(i18n_path, 'r', encoding='utf-8') as f:
        i18n = json.load(f)

    @app.context_processor
    def inject_i18n():
        """Inject UI strings into all templates."""
        return {'i18n': i18n}

    return app


if __name__ == '__main__':
    app = create_app()
    # Set FLASK_DEBUG=0 to disable auto-reload for production
    debug = os.environ.get('FLASK_DEBUG', '1') != '0'
    app.run(host='localhost', port=5000, debug=debug)
