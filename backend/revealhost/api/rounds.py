from flask import Blueprint, jsonify, request, current_app, url_for
from werkzeug.utils import secure_filename
import json
import os
import uuid

from revealhost.services.presentation.presenter import current_presenter

rounds = Blueprint('rounds', __name__)

ALLOWED_IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.webp', '.bmp', '.avif'}


def _round_list_payload(store):
    return {
        'rounds': [r.to_dict() for r in store.rounds()],
        'current': store.current_index(),
    }


def _save_upload(file_storage):
    """Store an uploaded image and return its round fields, or None if it is not an image."""
    name = secure_filename(file_storage.filename or '')
    ext = os.path.splitext(name)[1].lower()
    if not name or ext not in ALLOWED_IMAGE_EXTENSIONS:
        return None
    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    stored = f"{uuid.uuid4().hex}{ext}"
    file_storage.save(os.path.join(folder, stored))
    return {
        'image_url': url_for('main.uploaded_file', filename=stored),
        'image_name': file_storage.filename,
    }


@rounds.route('', methods=['GET'])
def list_rounds():
    presenter = current_presenter()
    return jsonify(_round_list_payload(presenter.store))


@rounds.route('', methods=['POST'])
def add_rounds():
    """Add rounds from uploaded images (multipart ``files``) or JSON round objects."""
    presenter = current_presenter()
    if request.files:
        entries = [s for s in (_save_upload(f) for f in request.files.getlist('files')) if s]
    else:
        data = request.get_json(silent=True)
        if isinstance(data, dict):
            data = data.get('rounds', [data])
        if not isinstance(data, list):
            return jsonify({'error': 'Expected a round object or a list of rounds'}), 400
        entries = [d for d in data if isinstance(d, dict)]
    if not entries:
        return jsonify({'error': 'No rounds to add'}), 400

    try:
        created = presenter.store.add_rounds(entries)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    presenter.refresh_round()
    presenter.notify(f"Added {len(created)} round{'s' if len(created) > 1 else ''}")
    current_app.logger.info(f"[rounds-add] count={len(created)}")
    payload = _round_list_payload(presenter.store)
    payload['added'] = [r.id for r in created]
    return jsonify(payload), 201


@rounds.route('', methods=['DELETE'])
def clear_rounds():
    presenter = current_presenter()
    presenter.store.clear()
    presenter.refresh_round(stop_clock=True)
    presenter.notify('All rounds cleared')
    return jsonify(_round_list_payload(presenter.store))


@rounds.route('/<string:round_id>', methods=['GET'])
def get_round(round_id):
    presenter = current_presenter()
    rnd = presenter.store.get_round(round_id)
    if rnd is None:
        return jsonify({'error': 'Round not found'}), 404
    return jsonify(rnd.to_dict())


@rounds.route('/<string:round_id>', methods=['PATCH'])
def update_round(round_id):
    presenter = current_presenter()
    rnd = presenter.store.get_round(round_id)
    if rnd is None:
        return jsonify({'error': 'Round not found'}), 404
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Round patch must be a JSON object'}), 400
    if 'hints' in data and not isinstance(data['hints'], list):
        return jsonify({'error': 'hints must be a list'}), 400
    presenter.store.update_round(rnd, data)
    presenter.refresh_round()
    return jsonify(rnd.to_dict())


@rounds.route('/<string:round_id>', methods=['DELETE'])
def delete_round(round_id):
    presenter = current_presenter()
    rnd = presenter.store.get_round(round_id)
    if rnd is None:
        return jsonify({'error': 'Round not found'}), 404
    presenter.store.delete_round(rnd)
    presenter.refresh_round()
    presenter.notify('Round deleted')
    return jsonify(_round_list_payload(presenter.store))


@rounds.route('/select', methods=['POST'])
def select_round():
    data = request.get_json(silent=True) or {}
    try:
        index = int(data.get('index'))
    except (TypeError, ValueError, OverflowError):
        return jsonify({'error': 'index must be an integer'}), 400
    presenter = current_presenter()
    presenter.store.select(index)
    presenter.refresh_round()
    return jsonify(_round_list_payload(presenter.store))


@rounds.route('/next', methods=['POST'])
def next_round():
    presenter = current_presenter()
    presenter.store.step(1)
    presenter.refresh_round(stop_clock=True)
    return jsonify(_round_list_payload(presenter.store))


@rounds.route('/prev', methods=['POST'])
def prev_round():
    presenter = current_presenter()
    presenter.store.step(-1)
    presenter.refresh_round(stop_clock=True)
    return jsonify(_round_list_payload(presenter.store))


@rounds.route('/export', methods=['GET'])
def export_pack():
    presenter = current_presenter()
    return jsonify(presenter.store.export_pack())


@rounds.route('/import', methods=['POST'])
def import_pack():
    presenter = current_presenter()
    if 'file' in request.files:
        try:
            pack = json.loads(request.files['file'].read().decode('utf-8') or '{}')
        except (UnicodeDecodeError, ValueError):
            return jsonify({'error': 'Import failed: invalid JSON'}), 400
    else:
        pack = request.get_json(silent=True)
    try:
        imported = presenter.store.import_pack(pack)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    presenter.settings_changed()
    presenter.refresh_round(stop_clock=True)
    current_app.logger.info(f"[rounds-import] rounds={imported['rounds']} teams={imported['teams']}")
    payload = _round_list_payload(presenter.store)
    payload['imported'] = imported
    return jsonify(payload)
