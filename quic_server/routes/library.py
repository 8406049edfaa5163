import sqlite3

from flask import Blueprint, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from quic_server.auth import login_required
from quic_server.errors import QuicError
from quic_server.routes import get_request_data, library_repository, parse_folder_id, require_fields

library_bp = Blueprint('library', __name__)

# Listing endpoints keep their collection key on failure
_EMPTY_PAYLOADS = {
    'library.list_folders': {'folders': []},
    'library.list_sets': {'sets': []},
}


def _failure(message, status_code):
    body = {'success': False, 'message': message}
    body.update(_EMPTY_PAYLOADS.get(request.endpoint, {}))
    return jsonify(body), status_code


@library_bp.errorhandler(QuicError)
def handle_business_error(e):
    return _failure(e.message, e.status_code)


@library_bp.errorhandler(sqlite3.Error)
def handle_database_error(e):
    current_app.logger.exception(f"Database error in {request.endpoint}: {e}")
    return _failure(QuicError.default_message, 500)


@library_bp.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return e
    current_app.logger.exception(f"Unhandled error in {request.endpoint}: {e}")
    return _failure(QuicError.default_message, 500)


@library_bp.route('/folders', methods=['GET'])
@login_required
def list_folders():
    """Fetches the list of folders for the current user."""
    folders = library_repository().list_folders(g.user_id)
    return jsonify({'success': True, 'folders': folders})


@library_bp.route('/create_folder', methods=['POST'])
@login_required
def create_folder():
    """Creates a new folder for the current user."""
    (folder_name,) = require_fields(get_request_data(), ('folder_name',))
    folder = library_repository().create_folder(g.user_id, folder_name)
    current_app.logger.info(
        f"Created folder '{folder_name}' (ID: {folder['folder_id']}) for user {g.user_id}"
    )
    return jsonify({'success': True, 'folder': folder}), 201


@library_bp.route('/folders/<folder_id>/sets', methods=['GET'])
@login_required
def list_sets(folder_id):
    sets = library_repository().list_sets(g.user_id, parse_folder_id(folder_id))
    return jsonify({'success': True, 'sets': sets})


@library_bp.route('/create_set', methods=['POST'])
@login_required
def create_set():
    """Creates a new set inside one of the current user's folders."""
    data = get_request_data()
    set_name, raw_folder_id = require_fields(data, ('set_name', 'folder_id'))
    set_description = str(data.get('set_description') or '').strip()
    folder_id = parse_folder_id(raw_folder_id)

    new_set = library_repository().create_set(g.user_id, folder_id, set_name, set_description)
    current_app.logger.info(
        f"Created set '{set_name}' (ID: {new_set['set_id']}) in folder {folder_id} for user {g.user_id}"
    )
    return jsonify({'success': True, 'set': new_set}), 201
