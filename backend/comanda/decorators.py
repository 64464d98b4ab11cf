# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import current_app, g, request

from .errors import AuthenticationError
from .policy import current_policy
from .services import session_service


def _is_authenticated() -> bool:
    return getattr(g, "principal", None) is not None


def require_auth(f):
    """
    Require a verified principal.

    Identity is established upstream; the gateway forwards the verified user
    id in the PRINCIPAL_HEADER header. The role is always read from the User
    record. Sets g.principal for the route and the services it calls.

    SECURITY: Raises AuthenticationError (401) if:
    - Header missing or not an id
    - User unknown or deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        header = current_app.config["PRINCIPAL_HEADER"]
        user_id = request.headers.get(header)

        if not user_id:
            raise AuthenticationError("Authentication required")

        principal = session_service.resolve_principal(
            user_id,
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        if not principal:
            raise AuthenticationError("Unknown or inactive user")

        g.principal = principal
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission for the authenticated principal.

    Services check again; this only fails fast before parsing the body.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                raise AuthenticationError("Authentication required")

            current_policy().require(g.principal, permission_code, "Permission denied")
            return f(*args, **kwargs)

        return decorated_function

    return decorator
