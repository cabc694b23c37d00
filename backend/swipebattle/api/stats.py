from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from swipebattle.services.battles.stats import user_stats, candidate_profile


stats = Blueprint('stats', __name__)


@stats.route('/me', methods=['GET'])
@login_required
def get_my_stats():
    limit = int(current_app.config.get('STATS_TOP_CHAMPIONS', 5))
    return jsonify(user_stats(current_user.id, limit=limit))


@stats.route('/candidates/<string:name>', methods=['GET'])
def get_candidate_profile(name):
    return jsonify(candidate_profile(name))
