from flask import Blueprint, jsonify
from flask_login import current_user

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Swipe Battle server!'})


@main.route('/whoami')
def whoami():
    if not current_user.is_authenticated:
        return jsonify({'authenticated': False, 'user': None})
    return jsonify({'authenticated': True, 'user': current_user.to_dict()})
