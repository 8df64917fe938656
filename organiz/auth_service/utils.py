"""
Shared authentication helpers.
Provides token creation, verification, and the token_required decorator.

Verification is synchronous: HS256 signature checks are cheap CPU work and
run in the request's own worker thread.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple

import jwt
from flask import Response, g, jsonify, request

from organiz.auth_service.models import TOKEN_LIFETIMES
from organiz.config import get_settings

ALGORITHM = "HS256"

# Reasons a token can be rejected
MISSING = "missing"
EXPIRED = "expired"
INVALID = "invalid"


def error_body(message: str) -> Response:
    """JSON error body; `message` mirrors `error` for clients that read that key."""
    return jsonify({"error": message, "message": message})


@dataclass(frozen=True)
class TokenResult:
    """Outcome of verifying a token: claims on success, a reason otherwise."""

    ok: bool
    claims: Dict[str, Any] = field(default_factory=dict)
    reason: Optional[str] = None


# --- JWT CREATION ---
def create_token(user_id: int, email: str, role: str, secret: Optional[str] = None) -> str:
    """
    Generates a new JWT for a given account.

    The lifetime depends on the role: participant 9h, organizer 1h, admin 6h.

    Args:
        user_id (int): Row id in the role's table.
        email (str): Account email.
        role (str): participant, organizer or admin.
        secret (str, optional): Signing key. Defaults to the app's JWT secret.

    Returns:
        str: Encoded JWT string.
    """
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "id": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + TOKEN_LIFETIMES[role],
    }

    return jwt.encode(payload, secret or get_settings().jwt_secret, algorithm=ALGORITHM)


# --- JWT VALIDATION ---
def verify_token(token: Optional[str], secret: Optional[str] = None) -> TokenResult:
    if not token:
        return TokenResult(ok=False, reason=MISSING)

    try:
        claims = jwt.decode(token, secret or get_settings().jwt_secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        return TokenResult(ok=False, reason=EXPIRED)
    except jwt.InvalidTokenError:
        return TokenResult(ok=False, reason=INVALID)

    return TokenResult(ok=True, claims=claims)


def bearer_token() -> Optional[str]:
    """Return the token from an `Authorization: Bearer <token>` header, if any."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def verify_token_from_request(
    required_roles: Optional[list] = None,
) -> Tuple[Optional[Dict[str, Any]], Optional[Response], Optional[int]]:
    """
    Verify the JWT in the Authorization header.

    Args:
        required_roles (list, optional): List of allowed roles.

    Returns:
        tuple: (claims, error_response, status_code)
               If successful, error_response and status_code are None.
               If failed, claims is None.
    """
    result = verify_token(bearer_token())

    if result.reason == MISSING:
        return None, error_body("Access token required"), 401
    if not result.ok:
        return None, error_body("Invalid or expired token"), 403

    if required_roles and result.claims.get("role") not in required_roles:
        return None, error_body("Permission denied"), 403

    return result.claims, None, None


def token_required(view: Optional[Callable] = None, *, roles: Optional[list] = None) -> Callable:
    """
    Decorator that rejects requests without a valid bearer token.

    The decoded claims are available to the view as `flask.g.user`.

        @auth_bp.route("/protected")
        @token_required
        def protected(): ...

        @token_required(roles=["admin"])
        def admin_only(): ...
    """

    def decorator(fn: Callable) -> Callable:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            claims, err, code = verify_token_from_request(required_roles=roles)
            if err:
                return err, code
            g.user = claims
            return fn(*args, **kwargs)

        return wrapper

    if view is not None:
        return decorator(view)
    return decorator
