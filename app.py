# app.py
from flask import Flask, jsonify, request, g
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix
import logging
import sys
import time

from config import Config
from routes.bible import bible_bp
from services.bible_service import BibleService
from utils.cache import build_cache

# Configure logging to output to stdout
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def create_app(cache=None, config=Config):
    """
    Build the Flask app around a loaded TranslationCache.

    When no cache is given the startup load phase runs here, using the
    source configured in ``config``.
    """
    if cache is None:
        cache = build_cache(config)

    app = Flask(__name__)

    # Use ProxyFix to handle proxy headers properly
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    app.json.sort_keys = False  # Field order is part of the response contract
    app.json.compact = True
    app.json.ensure_ascii = False

    CORS(app, resources={
        r"/*": {
            "origins": "*",
            "methods": ["GET", "OPTIONS"],
            "allow_headers": ["Content-Type"],
        }
    })

    app.url_map.strict_slashes = False

    app.extensions['translation_cache'] = cache
    app.extensions['bible_service'] = BibleService(cache)

    app.register_blueprint(bible_bp)

    @app.before_request
    def before_request():
        g.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - g.get('start_time', time.time())
        logger.info(f"Request to {request.path} took {duration:.2f} seconds")
        return response

    @app.route('/health', methods=['GET'])
    def health():
        loaded = app.extensions['translation_cache']
        return jsonify({
            'status': 'healthy' if len(loaded) else 'degraded',
            'versions': len(loaded),
            'timestamp': time.time()
        })

    return app


if __name__ == '__main__':
    print("Starting Flask server...")
    app = create_app()
    app.run(host='0.0.0.0', port=Config.PORT)
