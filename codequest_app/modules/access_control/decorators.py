from functools import wraps

from flask_login import current_user

from codequest_app.core.error_handlers import AuthorizationError


def require_role(*roles):
    """
    Route decorator restricting access to users holding one of ``roles``.
    Admins always pass.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthorizationError('Authentication required', status_code=401)

            if not current_user.is_admin and current_user.user_role not in roles:
                raise AuthorizationError(
                    f"Role '{current_user.user_role}' cannot perform this action"
                )

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def ensure_owner_or_admin(owner_id):
    """Raise unless the current user owns the resource or is an admin."""
    if current_user.is_admin:
        return
    if current_user.user_id != owner_id:
        raise AuthorizationError('You do not own this resource')
