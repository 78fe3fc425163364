from functools import wraps
from flask import abort
from flask_login import current_user

def check_role(*roles):
    """Abort with 401 when anonymous and 403 when the role is not allowed."""
    if not current_user.is_authenticated:
        abort(401)
    if getattr(current_user, "role", None) not in roles:
        abort(403)

def role_required(*roles):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            check_role(*roles)
            return view(*args, **kwargs)
        return wrapped
    return decorator

admin_required = role_required("admin")
educator_required = role_required("educator")
