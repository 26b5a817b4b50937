"""
Authentication and authorization helpers for the API views.

1. The bearer token is verified by the identity provider
2. The verified email is attached to the request as request.token_email
3. Ownership/role checks always compare against that verified email,
   never against an email supplied by the client
"""
from functools import wraps

from . import dependencies
from .exceptions import Forbidden
from .identity import extract_bearer_token


def authenticate_request(view_func):
    """
    Decorator that verifies the bearer token before running the handler.

    Usage:
        @authenticate_request
        def get(self, request):
            email = request.token_email  # verified by the identity provider
    """
    @wraps(view_func)
    def wrapper(self, request, *args, **kwargs):
        token = extract_bearer_token(request.headers.get('Authorization'))
        request.token_email = dependencies.get_identity_verifier().verify(token)
        return view_func(self, request, *args, **kwargs)

    return wrapper


def require_owner(principal_email, owner_email):
    """Allow only when the verified principal is the resource owner."""
    if not principal_email or not owner_email or principal_email != owner_email:
        raise Forbidden()


def require_owner_or_role(principal_email, owner_email, principal_role, allowed_roles):
    """Allow the resource owner, or a principal holding one of allowed_roles."""
    if principal_email and owner_email and principal_email == owner_email:
        return
    if principal_role and principal_role in allowed_roles:
        return
    raise Forbidden()
