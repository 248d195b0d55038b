from flask import Blueprint, request, jsonify, current_app, send_from_directory
from revealhost.models import Team
from revealhost.services.scoring import ensure_default_teams, adjust_score, rename_team, reset_scores
from revealhost.services.presentation.presenter import current_presenter

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the reveal host!'})


@main.route('/uploads/<path:filename>')
def uploaded_file(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)


@main.route('/api/settings', methods=['GET'])
def get_settings():
    presenter = current_presenter()
    return jsonify(presenter.store.settings())


@main.route('/api/settings', methods=['PUT', 'PATCH'])
def update_settings():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Settings must be a JSON object'}), 400
    presenter = current_presenter()
    settings = presenter.store.update_settings(data)
    presenter.settings_changed()
    current_app.logger.info(f"[settings] {settings}")
    return jsonify(settings)


@main.route('/api/teams', methods=['GET'])
def list_teams():
    ensure_default_teams()
    teams = Team.query.order_by(Team.position, Team.id).all()
    return jsonify([t.to_dict() for t in teams])


@main.route('/api/teams/<int:team_id>/score', methods=['POST'])
def score_team(team_id):
    data = request.get_json(silent=True) or {}
    try:
        delta = int(data.get('delta'))
    except (TypeError, ValueError, OverflowError):
        return jsonify({'error': 'delta must be an integer'}), 400
    team = Team.query.filter_by(id=team_id).first_or_404()
    return jsonify(adjust_score(team, delta).to_dict())


@main.route('/api/teams/<int:team_id>', methods=['PATCH'])
def update_team(team_id):
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    if not isinstance(name, str):
        return jsonify({'error': 'name is required'}), 400
    team = Team.query.filter_by(id=team_id).first_or_404()
    return jsonify(rename_team(team, name).to_dict())


@main.route('/api/teams/reset', methods=['POST'])
def reset_team_scores():
    ensure_default_teams()
    reset_scores()
    teams = Team.query.order_by(Team.position, Team.id).all()
    return jsonify([t.to_dict() for t in teams])
