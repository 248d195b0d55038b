from flask import Blueprint, jsonify, request

from revealhost.services.presentation import PresentationError, NoActiveContent, UnknownRevealFlag
from revealhost.services.presentation.presenter import current_presenter

presentation = Blueprint('presentation', __name__)


def _snapshot_payload(snapshot):
    return snapshot.to_dict() if snapshot else {'active': False}


@presentation.errorhandler(UnknownRevealFlag)
def _unknown_flag(exc):
    return jsonify({'error': exc.notice}), 400


@presentation.errorhandler(NoActiveContent)
def _no_content(exc):
    return jsonify({'error': exc.notice}), 409


@presentation.errorhandler(PresentationError)
def _rejected(exc):
    return jsonify({'error': exc.notice}), 409


@presentation.route('/snapshot', methods=['GET'])
def get_snapshot():
    presenter = current_presenter()
    payload = _snapshot_payload(presenter.snapshot())
    state = presenter.timer_state
    payload['timer'] = {'duration': state.duration, 'elapsed': state.elapsed, 'running': state.running}
    payload['preview'] = presenter.preview
    return jsonify(payload)


@presentation.route('/start', methods=['POST'])
def start_round():
    return jsonify(_snapshot_payload(current_presenter().start()))


@presentation.route('/pause', methods=['POST'])
def pause_round():
    return jsonify(_snapshot_payload(current_presenter().pause()))


@presentation.route('/resume', methods=['POST'])
def resume_round():
    return jsonify(_snapshot_payload(current_presenter().resume()))


@presentation.route('/reset', methods=['POST'])
def reset_clock():
    return jsonify(_snapshot_payload(current_presenter().reset_clock()))


@presentation.route('/preview', methods=['POST'])
def set_preview():
    data = request.get_json(silent=True) or {}
    enabled = data.get('enabled')
    return jsonify(_snapshot_payload(current_presenter().set_preview(None if enabled is None else bool(enabled))))


@presentation.route('/reveal/reset', methods=['POST'])
def reset_reveals():
    return jsonify(_snapshot_payload(current_presenter().reset_reveals()))


@presentation.route('/reveal/<string:flag>', methods=['POST'])
def toggle_reveal(flag):
    return jsonify(_snapshot_payload(current_presenter().toggle_reveal(flag)))


@presentation.route('/display', methods=['POST'])
def open_display():
    display = current_presenter().open_display()
    return jsonify({'token': display.token, 'frame': display.frame}), 201


@presentation.route('/display/<string:token>', methods=['GET'])
def get_display(token):
    display = current_presenter().display(token)
    if display is None:
        return jsonify({'error': 'Display not found'}), 404
    return jsonify({'token': display.token, 'frame': display.frame, 'frozen': display.frozen})


@presentation.route('/display/<string:token>', methods=['DELETE'])
def close_display(token):
    if not current_presenter().close_display(token):
        return jsonify({'error': 'Display not found'}), 404
    return jsonify({'closed': True})
