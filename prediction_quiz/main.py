from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from prediction_quiz.models import User

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the prediction quiz server!'})

@main.route('/admin/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify({'success': True, 'user': user.to_dict()})
    return jsonify({'success': False, 'error': 'Invalid username or password'}), 401

@main.route('/admin/check_login')
@login_required
def check_login():
    return jsonify({'success': True, 'user': current_user.to_dict()})

@main.route('/admin/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})
