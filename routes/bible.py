# routes/bible.py
from flask import Blueprint, current_app, jsonify, request, send_file
import io
import logging

from errors import InvalidInputError, NotFoundError, PackagingError
from utils.export import archive_filename

bible_bp = Blueprint('bible', __name__)

logger = logging.getLogger(__name__)


def get_bible_service():
    """The BibleService instance attached by create_app()."""
    return current_app.extensions['bible_service']


@bible_bp.errorhandler(NotFoundError)
def handle_not_found(e):
    logger.info(f"Not found: {request.path} ({e})")
    return jsonify({"error": str(e)}), 404


@bible_bp.errorhandler(InvalidInputError)
def handle_invalid_input(e):
    logger.warning(f"Bad request: {request.path} ({e})")
    return jsonify({"error": str(e)}), 400


@bible_bp.errorhandler(PackagingError)
def handle_packaging_error(e):
    logger.error(f"Export failed: {request.path} ({e})")
    return jsonify({"error": "Failed to package version."}), 500


@bible_bp.route('/versions', methods=['GET'])
def get_versions():
    return jsonify(get_bible_service().list_identifiers())


@bible_bp.route('/versions/<version_id>', methods=['GET'])
def get_version(version_id):
    # Summary only: book ids and names, no chapter content
    bible = get_bible_service().get_translation(version_id)
    return jsonify(bible.summary_json())


@bible_bp.route('/versions/<version_id>/search', methods=['GET'])
def search_version(version_id):
    query_str = request.args.get('q', '')
    results = get_bible_service().search(version_id, query_str)
    return jsonify(results.to_json())


@bible_bp.route('/versions/<version_id>/export', methods=['GET'])
def export_version(version_id):
    data = get_bible_service().export_archive(version_id)
    return send_file(
        io.BytesIO(data),
        mimetype='application/zip',
        as_attachment=True,
        download_name=archive_filename(version_id)
    )


@bible_bp.route('/versions/<version_id>/<book_id>', methods=['GET'])
def get_book(version_id, book_id):
    book = get_bible_service().get_book(version_id, book_id)
    return jsonify(book.to_json())


@bible_bp.route('/versions/<version_id>/<book_id>/<chapter>', methods=['GET'])
def get_chapter(version_id, book_id, chapter):
    found = get_bible_service().get_chapter(version_id, book_id, chapter)
    return jsonify(found.to_json())
