from flask import current_app, request
from flask_login import current_user, login_required, login_user, logout_user

from codequest_app.core.error_handlers import AuthorizationError, InvalidArgumentError, success_response
from codequest_app.models import User
from . import auth_api_bp


@auth_api_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    if not username or not password:
        raise InvalidArgumentError("'username' and 'password' are required")

    user = User.query.filter_by(username=username).first()
    if user is None or not user.check_password(password):
        current_app.logger.warning(f"Failed login for '{username}'")
        raise AuthorizationError('Invalid username or password', status_code=401)

    login_user(user, remember=bool(data.get('remember')))
    current_app.logger.info(f"User {user.user_id} logged in")
    return success_response(user.to_dict(), message='Logged in')


@auth_api_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    user_id = current_user.user_id
    logout_user()
    current_app.logger.info(f"User {user_id} logged out")
    return success_response(message='Logged out')


@auth_api_bp.route('/me', methods=['GET'])
@login_required
def me():
    return success_response(current_user.to_dict())
