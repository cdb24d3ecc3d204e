from functools import wraps
from flask import abort, current_app, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from franchise.services.policy import missing_permissions


def require_permissions(*codes: str):
    """Token must carry every code in ``codes``.

    Missing or broken tokens never reach the check: the JWT loaders answer
    them with the uniform 401 body. A valid token lacking a code gets 403.
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            missing = missing_permissions(*codes)
            if missing:
                current_app.logger.info('%s denied on %s: missing %s', get_jwt_identity(), request.path, ','.join(missing))
                abort(403, description='Missing permission')
            return fn(*args, **kwargs)
        return wrapper
    return outer
