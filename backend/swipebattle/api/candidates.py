from flask import Blueprint, jsonify, request
from swipebattle import db
from swipebattle.models import BattleImage


candidates = Blueprint('candidates', __name__)


@candidates.route('', methods=['GET'])
def list_candidates():
    images = BattleImage.query.order_by(BattleImage.name).all()
    return jsonify([image.to_dict() for image in images])


@candidates.route('', methods=['POST'])
def add_candidate():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Candidate must be a JSON object with a name'}), 400
    name = (data.get('name') or '').strip()
    url = (data.get('url') or '').strip()
    if not name:
        return jsonify({'error': 'Candidate name is required'}), 400
    if BattleImage.query.filter_by(name=name).first():
        return jsonify({'error': 'Candidate name already exists'}), 400

    image = BattleImage(name=name, url=url)
    db.session.add(image)
    db.session.commit()
    return jsonify(image.to_dict()), 201
